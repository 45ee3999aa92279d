"""
Label sheet geometry.

All values are PDF points (72 per inch). Rows are counted from the top of
the sheet while PDF y coordinates grow from the bottom edge.
"""

from dataclasses import dataclass

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch

from label_service.errors import ValidationError


@dataclass(frozen=True)
class SheetLayout:
    """Physical grid of one label stock."""

    name: str
    page_width: float
    page_height: float
    label_width: float
    label_height: float
    columns: int
    rows: int
    margin_left: float
    margin_top: float
    gap_x: float
    gap_y: float

    @property
    def labels_per_page(self) -> int:
        return self.columns * self.rows

    @property
    def pitch_x(self) -> float:
        return self.label_width + self.gap_x

    @property
    def pitch_y(self) -> float:
        return self.label_height + self.gap_y

    @property
    def page_size(self) -> tuple[float, float]:
        return (self.page_width, self.page_height)

    def position_to_xy(self, position: int, page_height: float | None = None) -> tuple[float, float]:
        """
        Bottom-left corner of the label at a 0-based page position.

        Computed from the index alone so repeated calls return identical floats.

        Args:
            position: 0..labels_per_page-1, row-major from the top-left label
            page_height: Override for the page height (defaults to the layout's)

        Returns:
            (x, y) in points, y measured from the bottom edge
        """
        if position < 0 or position >= self.labels_per_page:
            raise ValidationError(
                f"Position {position} is outside 0..{self.labels_per_page - 1}",
                error_code="INVALID_POSITION",
                details={"position": position, "layout": self.name}
            )

        if page_height is None:
            page_height = self.page_height

        col = position % self.columns
        row = position // self.columns

        x = self.margin_left + col * (self.label_width + self.gap_x)
        y = (
            page_height
            - self.margin_top
            - (row + 1) * self.label_height
            - row * self.gap_y
        )
        return x, y

    def locate(self, global_index: int) -> tuple[int, int]:
        """Split a run-wide label index into (page_index, position_on_page)."""
        return divmod(global_index, self.labels_per_page)

    def cell_center(self, position: int) -> tuple[float, float]:
        x, y = self.position_to_xy(position)
        return x + self.label_width / 2, y + self.label_height / 2


# Premium Label Supply PLS601: 63-up 1" x 1" on US Letter.
# Margins and gaps below were calibrated against printed sheets.
PLS601 = SheetLayout(
    name="pls601",
    page_width=letter[0],
    page_height=letter[1],
    label_width=1.0 * inch,
    label_height=1.0 * inch,
    columns=7,
    rows=9,
    margin_left=22.68,
    margin_top=35.43,
    gap_x=8.50,
    gap_y=8.50,
)

# Same stock, straight from the manufacturer template (1.125" pitch)
PLS601_TEMPLATE = SheetLayout(
    name="pls601-template",
    page_width=letter[0],
    page_height=letter[1],
    label_width=1.0 * inch,
    label_height=1.0 * inch,
    columns=7,
    rows=9,
    margin_left=28.0,
    margin_top=36.0,
    gap_x=9.0,
    gap_y=9.0,
)

LAYOUT_PROFILES = {
    PLS601.name: PLS601,
    PLS601_TEMPLATE.name: PLS601_TEMPLATE,
}


def get_layout(name: str) -> SheetLayout:
    """
    Look up a named layout profile.

    Raises:
        ValidationError: If no profile has that name
    """
    try:
        return LAYOUT_PROFILES[name.lower()]
    except (KeyError, AttributeError):
        raise ValidationError(
            f"Unknown layout profile: {name!r}",
            error_code="UNKNOWN_PROFILE",
            details={"profile": name, "available": sorted(LAYOUT_PROFILES)}
        ) from None
