"""
Presentation state for lists and scrollable detail blocks.

This module holds the two pieces of view state that survive wholesale data
replacement on every refresh:
  - ListState: a selectable, virtualized list of rows with variable heights
  - ViewportState: two-axis scroll bounds for one large block of text

Neither class touches curses or the daemon. Views own one instance each and
mutate it only from the control loop, so no locking is needed.

ListState Invariants:
  - selected is None exactly when items is empty
  - otherwise 0 <= selected < len(items)
  - scroll_offset == sum(row_heights[:selected])

Row Heights:
  A row's height depends on its multi-line field (a container with five
  published ports is taller than one with none). Only the rows above the
  selected one matter for offset math, so the trailing row's height is left
  out of row_heights and of the scrollbar content length.

ViewportState Invariants:
  - 0 <= vertical <= max_vertical
  - 0 <= horizontal <= max_horizontal
  - bounds are recomputed from the content on every draw, then both offsets
    are clamped into them
"""

from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from rich.cells import cell_len

R = TypeVar("R")


class ListState(Generic[R]):
    """Selection and scroll bookkeeping for a list that is replaced wholesale."""

    def __init__(self) -> None:
        self.items: List[R] = []
        self.selected: Optional[int] = None
        self.scroll_offset: int = 0
        # First row drawn on screen; kept so the selection stays visible
        self.top: int = 0
        self._heights: List[int] = []

    def __len__(self) -> int:
        return len(self.items)

    @property
    def row_heights(self) -> List[int]:
        return self._heights[:-1]

    @property
    def selected_item(self) -> Optional[R]:
        if self.selected is None:
            return None
        return self.items[self.selected]

    def next(self) -> None:
        if not self.items:
            return
        if self.selected is None or self.selected >= len(self.items) - 1:
            self.select(0)
        else:
            self.select(self.selected + 1)

    def previous(self) -> None:
        if not self.items:
            return
        if self.selected is None or self.selected == 0:
            self.select(len(self.items) - 1)
        else:
            self.select(self.selected - 1)

    def select(self, index: int) -> None:
        self.selected = index
        self.scroll_offset = sum(self._heights[:index])

    def replace_items(self, items: Sequence[R], row_height: Callable[[R], int]) -> None:
        was_empty = not self.items
        self.items = list(items)
        self._heights = [row_height(item) for item in self.items]

        if not self.items:
            self.selected = None
            self.scroll_offset = 0
            self.top = 0
            return

        if was_empty or self.selected is None:
            self.select(0)
        else:
            self.select(min(self.selected, len(self.items) - 1))
        self.top = min(self.top, len(self.items) - 1)

    def scrollbar_geometry(self) -> Tuple[int, int]:
        """(content_length, position) for a vertical scrollbar."""
        return sum(self.row_heights), self.scroll_offset

    def visible_rows(self, height: int) -> List[Tuple[int, R, int]]:
        """
        Rows that fit in `height` lines, as (index, row, row_height).

        Moves `top` just enough that the selected row is fully on screen.
        A selected row taller than the area is still drawn (clipped).
        """
        if not self.items or height <= 0:
            return []

        if self.selected is not None:
            if self.selected < self.top:
                self.top = self.selected
            while self.top < self.selected and sum(self._heights[self.top:self.selected + 1]) > height:
                self.top += 1

        rows = []
        used = 0
        for index in range(self.top, len(self.items)):
            if used >= height:
                break
            rows.append((index, self.items[index], self._heights[index]))
            used += self._heights[index]
        return rows


class ViewportState:
    """Two-axis scroll position clamped to the content it was last measured against."""

    def __init__(self) -> None:
        self.vertical = 0
        self.horizontal = 0
        self.max_vertical = 0
        self.max_horizontal = 0

    def reset(self) -> None:
        self.vertical = 0
        self.horizontal = 0

    def scroll_up(self) -> None:
        self.vertical = max(0, self.vertical - 1)

    def scroll_down(self) -> None:
        self.vertical = min(self.max_vertical, self.vertical + 1)

    def scroll_left(self) -> None:
        self.horizontal = max(0, self.horizontal - 1)

    def scroll_right(self) -> None:
        self.horizontal = min(self.max_horizontal, self.horizontal + 1)

    def scroll_to_start(self) -> None:
        self.horizontal = 0

    def scroll_to_end(self) -> None:
        self.horizontal = self.max_horizontal

    def scroll_to_top(self) -> None:
        self.vertical = 0

    def scroll_to_bottom(self) -> None:
        self.vertical = self.max_vertical

    def recompute_bounds(self, lines: Sequence[str], height: int, width: int) -> None:
        longest = max((cell_len(line) for line in lines), default=0)
        self.max_vertical = max(0, len(lines) - height)
        self.max_horizontal = max(0, longest - width)
        self.vertical = min(max(0, self.vertical), self.max_vertical)
        self.horizontal = min(max(0, self.horizontal), self.max_horizontal)

    def vertical_scrollbar(self) -> Tuple[int, int]:
        return self.max_vertical, self.vertical

    def horizontal_scrollbar(self) -> Tuple[int, int]:
        return self.max_horizontal, self.horizontal
