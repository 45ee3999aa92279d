"""
Tests for label sheet geometry.
"""

import pytest

from label_service.errors import ValidationError
from label_service.label_generation.geometry import (
    LAYOUT_PROFILES,
    PLS601,
    PLS601_TEMPLATE,
    get_layout,
)


class TestPositionToXY:
    """Tests for mapping page positions to points."""

    def test_first_label(self, layout):
        """Position 0 sits at the left margin, one label below the top margin."""
        x, y = layout.position_to_xy(0)

        assert x == pytest.approx(22.68)
        assert y == pytest.approx(792 - 35.43 - 72)

    def test_deterministic(self, layout):
        """Identical input gives identical floats."""
        for position in range(layout.labels_per_page):
            assert layout.position_to_xy(position) == layout.position_to_xy(position)

    def test_first_row_shares_y(self, layout):
        """Positions 0 and cols-1 lie in the same row."""
        _, y_first = layout.position_to_xy(0)
        _, y_last = layout.position_to_xy(layout.columns - 1)

        assert y_first == y_last

    def test_next_row_is_one_pitch_down(self, layout):
        """Position cols starts row 1, one vertical pitch below row 0."""
        x0, y0 = layout.position_to_xy(0)
        x1, y1 = layout.position_to_xy(layout.columns)

        assert x1 == x0
        assert y0 - y1 == pytest.approx(layout.pitch_y)

    def test_columns_one_pitch_apart(self, layout):
        x0, _ = layout.position_to_xy(0)
        x1, _ = layout.position_to_xy(1)

        assert x1 - x0 == pytest.approx(layout.pitch_x)

    def test_last_label(self, layout):
        """Bottom-right label matches the closed-form formula."""
        x, y = layout.position_to_xy(layout.labels_per_page - 1)

        assert x == pytest.approx(22.68 + 6 * 80.5)
        assert y == pytest.approx(792 - 35.43 - 9 * 72 - 8 * 8.5)

    def test_independent_of_call_order(self, layout):
        """Computing positions backwards yields the same points."""
        forward = [layout.position_to_xy(p) for p in range(layout.labels_per_page)]
        backward = [layout.position_to_xy(p) for p in reversed(range(layout.labels_per_page))]

        assert forward == list(reversed(backward))

    def test_page_height_override(self, layout):
        _, y_default = layout.position_to_xy(0)
        _, y_a4 = layout.position_to_xy(0, page_height=841.89)

        assert y_a4 - y_default == pytest.approx(841.89 - 792)

    @pytest.mark.parametrize("position", [-1, 63, 100])
    def test_out_of_range(self, layout, position):
        with pytest.raises(ValidationError):
            layout.position_to_xy(position)


class TestSheetLayout:
    """Tests for layout properties and profiles."""

    def test_pls601_grid(self):
        assert PLS601.columns == 7
        assert PLS601.rows == 9
        assert PLS601.labels_per_page == 63
        assert PLS601.page_size == (612, 792)

    @pytest.mark.parametrize("profile", list(LAYOUT_PROFILES.values()))
    def test_cells_on_page_and_non_overlapping(self, profile):
        for position in range(profile.labels_per_page):
            x, y = profile.position_to_xy(position)
            assert 0.0 <= x and x + profile.label_width <= profile.page_width
            assert 0.0 <= y and y + profile.label_height <= profile.page_height

        assert profile.gap_x >= 0 and profile.gap_y >= 0

    def test_template_matches_manufacturer_pitch(self):
        """Template profile reproduces the 81 pt pitch and the 684 pt top-row edge."""
        x, y = PLS601_TEMPLATE.position_to_xy(0)

        assert (x, y) == (28.0, 684.0)
        assert PLS601_TEMPLATE.pitch_x == 81.0
        assert PLS601_TEMPLATE.position_to_xy(PLS601_TEMPLATE.columns)[1] == 684.0 - 81.0

    def test_locate(self, layout):
        assert layout.locate(0) == (0, 0)
        assert layout.locate(62) == (0, 62)
        assert layout.locate(63) == (1, 0)
        assert layout.locate(127) == (2, 1)

    def test_cell_center(self, layout):
        cx, cy = layout.cell_center(0)
        x, y = layout.position_to_xy(0)

        assert (cx, cy) == (x + 36.0, y + 36.0)

    def test_get_layout_case_insensitive(self):
        assert get_layout("PLS601") is PLS601

    def test_get_layout_unknown(self):
        with pytest.raises(ValidationError) as exc_info:
            get_layout("avery5160")

        assert exc_info.value.error_code == "UNKNOWN_PROFILE"
        assert "pls601" in exc_info.value.details["available"]
