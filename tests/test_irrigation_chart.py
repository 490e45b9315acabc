"""
Tests for the water balance chart.
"""
import io
import math

import pytest
from reportlab.pdfgen import canvas as pdf_canvas

from app.services.irrigation_calculator import compute_plan, PlanInput
from app.services.irrigation_chart_service import (
    CHART_LABELS,
    compute_bar_layout,
    draw_chart,
    render_chart_pdf,
)

W, H = 640, 280
PLOT_HEIGHT = H - 60
BASELINE = H - 30


class TestBarLayout:

    def test_four_labelled_bars_in_equal_slots(self):
        bars = compute_bar_layout([5.75, 0, 0, 5.75], W, H)
        slot = (W - 80) / 4

        assert [b.label for b in bars] == list(CHART_LABELS)
        for i, bar in enumerate(bars):
            assert bar.x == pytest.approx(50 + i * slot + slot * 0.2)
            assert bar.width == pytest.approx(slot * 0.6)

    def test_small_values_use_minimum_scale(self):
        bars = compute_bar_layout([5.75, 0, 0, 5.75], W, H)
        # scale = max(10, 5.75) * 1.25
        assert bars[0].height == pytest.approx(5.75 / 12.5 * PLOT_HEIGHT)
        assert bars[0].y == pytest.approx(BASELINE - bars[0].height)
        assert bars[1].height == 0

    def test_largest_bar_leaves_headroom(self):
        bars = compute_bar_layout([1000, 200, 50, 750], W, H)
        assert bars[0].height == pytest.approx(PLOT_HEIGHT / 1.25)
        assert all(b.height <= PLOT_HEIGHT for b in bars)

    @pytest.mark.parametrize("value", [-4.0, math.nan, None])
    def test_negative_and_missing_values_are_floored(self, value):
        bars = compute_bar_layout([value, 1, 1, 1], W, H)
        assert bars[0].value == 0
        assert bars[0].height == 0

    def test_infinite_value_is_capped_at_plot_height(self):
        bars = compute_bar_layout([math.inf, 1, 1, 1], W, H)
        assert bars[0].height == pytest.approx(PLOT_HEIGHT)


class TestDrawChart:

    @pytest.mark.parametrize("values", [
        (0, 0, 0, 0),
        (5.75, 0, 0, 5.75),
        (1e9, 1e6, 3.0, 1e9),
        (math.nan, -1, math.inf, 2),
    ])
    def test_never_raises(self, values):
        buffer = io.BytesIO()
        c = pdf_canvas.Canvas(buffer, pagesize=(W, H))
        draw_chart(c, *values, width=W, height=H)
        c.showPage()
        c.save()
        assert buffer.getvalue().startswith(b"%PDF")

    def test_render_chart_pdf(self, wheat_mid_input):
        pdf = render_chart_pdf(compute_plan(wheat_mid_input))
        assert pdf.read(4) == b"%PDF"

    def test_render_chart_pdf_for_unknown_stage(self):
        plan = compute_plan(PlanInput(crop="wheat", stage="unknown", area_ha=1, et0=5))
        assert render_chart_pdf(plan).getvalue().startswith(b"%PDF")
