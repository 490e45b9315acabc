"""
Irrigation Excel Export Service.
Generates an Excel workbook of the saved run history.
"""
from io import BytesIO
from datetime import datetime
from typing import Any, Dict, List
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter
from openpyxl.chart import BarChart, Reference

from app.services.run_store import CSV_COLUMNS

WATER_BLUE = "1C8BD6"


class IrrigationExcelService:
    """Service for generating run history Excel reports."""

    def __init__(self):
        self.header_fill = PatternFill(start_color=WATER_BLUE, end_color=WATER_BLUE, fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.title_font = Font(bold=True, size=14, color=WATER_BLUE)
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def _apply_header_style(self, ws, row_num: int, max_col: int):
        """Apply header styling to a row."""
        for col in range(1, max_col + 1):
            cell = ws.cell(row=row_num, column=col)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.border

    def _auto_adjust_columns(self, ws):
        """Auto-adjust column widths."""
        for column in ws.columns:
            max_length = 0
            column_letter = get_column_letter(column[0].column)
            for cell in column:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 10), 30)

    def generate_runs_excel(self, rows: List[Dict[str, Any]]) -> BytesIO:
        """
        Generate an Excel report of saved runs.

        Args:
            rows: run records, newest first

        Returns:
            BytesIO with Excel file content
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Runs"

        ws.cell(row=1, column=1, value="IRRIGATION RUN HISTORY").font = self.title_font
        ws.cell(row=2, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}").font = Font(italic=True)

        header_row = 4
        for col, (header, _) in enumerate(CSV_COLUMNS, start=1):
            ws.cell(row=header_row, column=col, value=header)
        self._apply_header_style(ws, header_row, len(CSV_COLUMNS))

        row_num = header_row
        for run in rows:
            if not isinstance(run, dict):
                continue
            row_num += 1
            for col, (_, field) in enumerate(CSV_COLUMNS, start=1):
                cell = ws.cell(row=row_num, column=col, value=run.get(field))
                cell.border = self.border

        if row_num > header_row:
            self._add_gross_litres_chart(ws, header_row, row_num)

        self._auto_adjust_columns(ws)

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _add_gross_litres_chart(self, ws, header_row: int, last_row: int):
        """Bar chart of gross litres per run, labelled by date."""
        gross_col = len(CSV_COLUMNS)
        chart = BarChart()
        chart.type = "col"
        chart.title = "Gross irrigation per run"
        chart.y_axis.title = "Litres"
        chart.x_axis.title = "Run"

        data = Reference(ws, min_col=gross_col, min_row=header_row, max_row=last_row)
        categories = Reference(ws, min_col=1, min_row=header_row + 1, max_row=last_row)
        chart.add_data(data, titles_from_data=True)
        chart.set_categories(categories)
        chart.height = 8
        chart.width = 16

        ws.add_chart(chart, f"{get_column_letter(gross_col + 2)}{header_row}")


irrigation_excel_service = IrrigationExcelService()
