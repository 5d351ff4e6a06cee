"""Windowed rendering of the accumulated user records.

Only rows near the viewport are materialised.  The rest of the list is
represented by the container's total height (``len(records) * row_height``)
so the scrollbar keeps its geometry, and each materialised row is placed
at ``index * row_height``.

The row height is a fixed estimate; rows are never measured, so a tall
warning block does not shift the window.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from reflex_user_table.formatting import display_cells
from reflex_user_table.pagination import PaginationController
from reflex_user_table.validation import ValidationResult, validate_users

logger = logging.getLogger(__name__)

DEFAULT_ROW_HEIGHT: int = 50
DEFAULT_VIEWPORT_HEIGHT: int = 600
DEFAULT_OVERSCAN: int = 10


@dataclass(frozen=True)
class VirtualWindow:
    """Inclusive index range ``[start, end]`` of materialised rows."""

    start: int
    end: int
    row_height: float
    total_height: float

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index <= self.end

    def indices(self) -> range:
        return range(self.start, self.end + 1)


def compute_window(
    count: int,
    row_height: float,
    viewport_height: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> VirtualWindow | None:
    """Return the smallest row range covering the viewport plus overscan.

    The covered pixel span is
    ``[scroll_offset - overscan*row_height, scroll_offset + viewport_height + overscan*row_height]``,
    clamped to the rows that exist.

    Returns:
        The window, or ``None`` when there are no rows.
    """
    if row_height <= 0:
        raise ValueError(f"row_height must be > 0, got {row_height}")
    if overscan < 0:
        raise ValueError(f"overscan must be >= 0, got {overscan}")
    if count <= 0:
        return None

    margin = overscan * row_height
    span_top = max(0.0, scroll_offset - margin)
    span_bottom = scroll_offset + max(0.0, viewport_height) + margin

    last = count - 1
    start = min(int(span_top // row_height), last)
    # A row starting exactly at span_bottom does not intersect the span.
    end = min(max(start, math.ceil(span_bottom / row_height) - 1), last)
    return VirtualWindow(
        start=start,
        end=end,
        row_height=row_height,
        total_height=count * row_height,
    )


@dataclass(frozen=True)
class RenderedRow:
    """A materialised row: position, display cells and warnings."""

    index: int
    top: float
    cells: dict[str, str]
    errors: tuple[str, ...] = ()

    @property
    def even(self) -> bool:
        return self.index % 2 == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "top": self.top,
            **self.cells,
            "errors": list(self.errors),
            "even": self.even,
        }


@dataclass(frozen=True)
class RenderedTable:
    window: VirtualWindow | None
    total_height: float
    rows: tuple[RenderedRow, ...]


class VirtualTable:
    """Derives the visible rows of a :class:`PaginationController`'s records.

    Validation results and display cells are cached against the
    controller's ``version``: records are append-only and immutable, so
    each new page is validated once and earlier pages are never revisited.

    Args:
        controller: Source of the records.
        row_height: Estimated height of every row, in px.
        viewport_height: Default visible height of the scroll container, in px.
        overscan: Extra rows materialised above and below the viewport.
    """

    def __init__(
        self,
        controller: PaginationController,
        *,
        row_height: float = DEFAULT_ROW_HEIGHT,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        overscan: int = DEFAULT_OVERSCAN,
    ) -> None:
        if row_height <= 0:
            raise ValueError(f"row_height must be > 0, got {row_height}")
        self._controller = controller
        self.row_height = row_height
        self.viewport_height = viewport_height
        self.overscan = overscan
        self._errors: ValidationResult = {}
        self._validated_count = 0
        self._validated_version = -1
        self._cells: dict[int, dict[str, str]] = {}

    @property
    def total_height(self) -> float:
        return len(self._controller.records) * self.row_height

    @property
    def validation_errors(self) -> ValidationResult:
        """``{index: errors}`` for every invalid record loaded so far."""
        state = self._controller.state
        if state.version != self._validated_version:
            fresh = validate_users(
                state.records[self._validated_count:],
                start=self._validated_count,
            )
            for index, errors in fresh.items():
                logger.warning("User at index %d has validation issues: %s", index, errors)
            self._errors.update(fresh)
            self._validated_count = len(state.records)
            self._validated_version = state.version
        return self._errors

    def window(
        self,
        scroll_offset: float,
        viewport_height: float | None = None,
    ) -> VirtualWindow | None:
        return compute_window(
            len(self._controller.records),
            self.row_height,
            self.viewport_height if viewport_height is None else viewport_height,
            scroll_offset,
            self.overscan,
        )

    def render(
        self,
        scroll_offset: float = 0.0,
        viewport_height: float | None = None,
    ) -> RenderedTable:
        """Materialise the rows visible at *scroll_offset*."""
        records = self._controller.records
        window = self.window(scroll_offset, viewport_height)
        if window is None:
            return RenderedTable(window=None, total_height=0.0, rows=())

        errors = self.validation_errors
        rows: list[RenderedRow] = []
        for index in window.indices():
            cells = self._cells.get(index)
            if cells is None:
                cells = self._cells[index] = display_cells(records[index])
            rows.append(
                RenderedRow(
                    index=index,
                    top=index * self.row_height,
                    cells=cells,
                    errors=tuple(errors.get(index, ())),
                )
            )
        return RenderedTable(window=window, total_height=window.total_height, rows=tuple(rows))
