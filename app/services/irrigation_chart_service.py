"""
Irrigation Chart Service.

Draws the water balance of a plan (ETc, effective rain, soil credit and net
irrigation) as four gradient bars on a fixed-size reportlab canvas.
"""
import io
import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from reportlab.lib.colors import Color, HexColor
from reportlab.pdfgen import canvas as pdf_canvas

from app.core.config import settings
from app.services.irrigation_calculator import IrrigationPlan

logger = logging.getLogger(__name__)

CHART_LABELS = ("ETc", "Eff. Rain", "Soil Credit", "Net Irrigation")

AXIS_X = 50
AXIS_BOTTOM_MARGIN = 30
AXIS_TOP = 20
AXIS_RIGHT_MARGIN = 20
SLOT_MARGIN = 80
PLOT_MARGIN = 60
MIN_SCALE = 10.0
HEADROOM = 1.25

BACKGROUND = HexColor("#0b1424")
AXIS_COLOR = Color(1, 1, 1, alpha=0.15)
BAR_TOP_COLOR = HexColor("#6cd1ff")
BAR_BOTTOM_COLOR = HexColor("#1c8bd6")
VALUE_COLOR = HexColor("#eaf2ff")
LABEL_COLOR = HexColor("#9fb4d3")
FONT_NAME = "Helvetica"
FONT_SIZE = 9


@dataclass
class BarGeometry:
    """One bar in screen coordinates (origin top-left, y grows downwards)."""
    label: str
    value: float
    x: float
    y: float
    width: float
    height: float


def _floor_value(value: Optional[float]) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, value)


def compute_bar_layout(values: Sequence[float], width: float, height: float) -> List[BarGeometry]:
    """
    Place the four bars inside a width x height canvas.

    Values are floored at 0. The scale is the largest value (at least 10)
    plus 25 % headroom, so bars never reach the top of the plot.
    """
    floored = [_floor_value(v) for v in values]
    finite = [v for v in floored if math.isfinite(v)]
    max_v = max([MIN_SCALE] + finite) * HEADROOM
    slot = (width - SLOT_MARGIN) / len(CHART_LABELS)
    plot_height = height - PLOT_MARGIN
    baseline = height - AXIS_BOTTOM_MARGIN

    bars = []
    for i, (label, value) in enumerate(zip(CHART_LABELS, floored)):
        # Infinite values fill the plot instead of overflowing it
        ratio = value / max_v if math.isfinite(value) else 1.0
        bar_height = ratio * plot_height
        bars.append(BarGeometry(
            label=label,
            value=value,
            x=AXIS_X + i * slot + slot * 0.2,
            y=baseline - bar_height,
            width=slot * 0.6,
            height=bar_height,
        ))
    return bars


def draw_chart(
    canvas: pdf_canvas.Canvas,
    etc: float,
    eff_rain: float,
    soil_credit: float,
    net: float,
    width: Optional[float] = None,
    height: Optional[float] = None,
) -> None:
    """
    Repaint the chart area of `canvas`.

    Args:
        canvas: reportlab canvas whose page is the chart
        etc, eff_rain, soil_credit, net: plan values in mm
        width, height: canvas size in points (defaults from settings)
    """
    W = width or settings.CHART_WIDTH
    H = height or settings.CHART_HEIGHT

    canvas.saveState()
    canvas.setFillColor(BACKGROUND)
    canvas.rect(0, 0, W, H, stroke=0, fill=1)

    # reportlab puts the origin bottom-left; layout is computed top-left
    canvas.setStrokeColor(AXIS_COLOR)
    canvas.setLineWidth(1)
    canvas.line(AXIS_X, H - AXIS_TOP, AXIS_X, AXIS_BOTTOM_MARGIN)
    canvas.line(AXIS_X, AXIS_BOTTOM_MARGIN, W - AXIS_RIGHT_MARGIN, AXIS_BOTTOM_MARGIN)

    canvas.setFont(FONT_NAME, FONT_SIZE)
    for bar in compute_bar_layout([etc, eff_rain, soil_credit, net], W, H):
        top = H - bar.y
        bottom = top - bar.height
        if bar.height > 0:
            canvas.saveState()
            path = canvas.beginPath()
            path.rect(bar.x, bottom, bar.width, bar.height)
            canvas.clipPath(path, stroke=0, fill=0)
            canvas.linearGradient(
                bar.x, top, bar.x, bottom,
                (BAR_TOP_COLOR, BAR_BOTTOM_COLOR),
                extend=False,
            )
            canvas.restoreState()

        canvas.setFillColor(VALUE_COLOR)
        canvas.drawString(bar.x, top + 6, f"{bar.value:.1f} mm")
        canvas.setFillColor(LABEL_COLOR)
        canvas.drawString(bar.x, 12, bar.label)

    canvas.restoreState()


def render_chart_pdf(plan: IrrigationPlan) -> io.BytesIO:
    """
    Render the chart of a plan as a one-page PDF sized to the chart.

    Returns:
        BytesIO with the PDF content, positioned at 0
    """
    W = settings.CHART_WIDTH
    H = settings.CHART_HEIGHT
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=(W, H))
    c.setTitle("Irrigation water balance")
    draw_chart(c, plan.etc, plan.eff_rain, plan.soil_credit, plan.net, W, H)
    c.showPage()
    c.save()
    buffer.seek(0)
    logger.debug(f"Rendered chart PDF ({len(buffer.getvalue())} bytes)")
    return buffer
