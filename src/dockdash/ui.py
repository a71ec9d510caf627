"""
Curses-based Terminal UI rendering primitives.

This module handles all character-cell output. Views never call curses
directly for layout; they hand a window, a Rect and their current state to
the functions below. Nothing is read back from the screen.

Rendering Strategy:
  - Single curses window (stdscr) split into regions:
    - Header: title + tab bar (or container name + pane bar)
    - Body: bordered table or paragraph with a scrollbar on the right edge
    - Footer: bordered one-line box with shortcuts or an error banner
  - The terminal erases once per frame and flushes with curses.doupdate()
  - Every write is clipped to its Rect; writes past the screen edge are
    ignored (curses raises on the bottom-right cell)

Color Pairs (initialized in init_colors):
  1: White (default text)
  2: Green (running / detail keys)
  3: Red (error banner / stopped)
  4: Cyan (borders / active tab)
  5: Magenta (table headers)
  6: Yellow (transitional states)
  7: Black on cyan (selected row / title bar)

Key Functions:
  - init_colors(): Initialize color pairs
  - draw_header(): Title and tab bar
  - draw_table(): Variable-height rows with a highlighted selection
  - draw_paragraph(): Key/value lines with two-axis scroll offsets
  - draw_scrollbar(): Track + thumb for (content_length, position)
  - draw_footer(): Shortcut text or error banner

Dependencies:
  - curses (Python built-in, terminal mode)
  - rich.cells for display width of wide characters
"""

import curses
from typing import List, NamedTuple, Optional, Sequence, Tuple

from rich.cells import cell_len, set_cell_size

TITLE = " dockdash "

# --- LAYOUT ---


class Rect(NamedTuple):
    y: int
    x: int
    height: int
    width: int

    def inner(self) -> "Rect":
        """The area inside a one-cell border."""
        return Rect(self.y + 1, self.x + 1, max(0, self.height - 2), max(0, self.width - 2))

    def split_bottom(self, height: int) -> Tuple["Rect", "Rect"]:
        height = min(height, self.height)
        top = Rect(self.y, self.x, self.height - height, self.width)
        bottom = Rect(self.y + self.height - height, self.x, height, self.width)
        return top, bottom


class Column(NamedTuple):
    name: str
    ratio: int


def column_widths(total: int, columns: Sequence[Column]) -> List[int]:
    """Share `total` cells by ratio; the last column takes the remainder."""
    weight = sum(c.ratio for c in columns) or 1
    widths = [total * c.ratio // weight for c in columns[:-1]]
    widths.append(max(0, total - sum(widths)))
    return widths


def fit(text: str, width: int) -> str:
    """Crop or pad text to exactly `width` terminal cells."""
    if width <= 0:
        return ""
    return set_cell_size(text, width)


def put(win, y: int, x: int, text: str, attr: int = 0) -> None:
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        # Bottom-right cell or a terminal shrunk mid-frame
        pass


def init_colors():
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(1, curses.COLOR_WHITE, -1)    # Default
    curses.init_pair(2, curses.COLOR_GREEN, -1)    # Success / Running
    curses.init_pair(3, curses.COLOR_RED, -1)      # Error / Stopped
    curses.init_pair(4, curses.COLOR_CYAN, -1)     # Borders / Active tab
    curses.init_pair(5, curses.COLOR_MAGENTA, -1)  # Table header
    curses.init_pair(6, curses.COLOR_YELLOW, -1)   # Restarting / Paused
    curses.init_pair(7, curses.COLOR_BLACK, curses.COLOR_CYAN)  # Selection


def state_color(state: str) -> int:
    if state == "running":
        return curses.color_pair(2)
    if state in ("restarting", "paused", "created"):
        return curses.color_pair(6)
    return curses.color_pair(3)


# --- REGIONS ---

def draw_header(win, width: int, labels: Sequence[str], active: int, title: str = TITLE):
    put(win, 0, 0, fit(title.center(width), width), curses.color_pair(7) | curses.A_BOLD)

    x = 2
    for index, label in enumerate(labels):
        if index == active:
            style = curses.color_pair(4) | curses.A_BOLD | curses.A_UNDERLINE
        else:
            style = curses.A_DIM
        if x + cell_len(label) >= width:
            break
        put(win, 1, x, label, style)
        x += cell_len(label) + 4


def draw_box(win, rect: Rect, title: str = "", attr: Optional[int] = None):
    if rect.height < 2 or rect.width < 2:
        return
    if attr is None:
        attr = curses.color_pair(4)
    horizontal = "─" * (rect.width - 2)
    put(win, rect.y, rect.x, "┌" + horizontal + "┐", attr)
    for row in range(rect.y + 1, rect.y + rect.height - 1):
        put(win, row, rect.x, "│", attr)
        put(win, row, rect.x + rect.width - 1, "│", attr)
    put(win, rect.y + rect.height - 1, rect.x, "└" + horizontal + "┘", attr)
    if title and rect.width > 4:
        put(win, rect.y, rect.x + 2, fit(f" {title} ", min(cell_len(title) + 2, rect.width - 4)), attr | curses.A_BOLD)


def draw_scrollbar(win, rect: Rect, content_length: int, position: int, vertical: bool = True):
    """Thumb placed proportionally to position / content_length along the rect's edge."""
    track = rect.height if vertical else rect.width
    if track <= 0 or content_length <= 0:
        return
    thumb = min(track - 1, position * track // (content_length + 1))
    attr = curses.color_pair(4)
    for i in range(track):
        char = ("█" if vertical else "■") if i == thumb else ("│" if vertical else "─")
        if vertical:
            put(win, rect.y + i, rect.x + rect.width - 1, char, attr)
        else:
            put(win, rect.y + rect.height - 1, rect.x + i, char, attr)


def draw_table(win, rect: Rect, columns: Sequence[Column], rows, selected: Optional[int]):
    """
    Draw a header line and variable-height rows inside rect.

    `rows` is a sequence of (index, cells, height, cell_attrs). Each cell is a
    list of lines; cell_attrs optionally colours columns of unselected rows.
    Cell text starts one line below the row's top, leaving a blank line above
    and below the content.
    """
    if rect.height <= 0 or rect.width <= 0:
        return
    widths = column_widths(rect.width - 1, columns)

    header = "".join(fit(c.name, w) for c, w in zip(columns, widths))
    put(win, rect.y, rect.x, fit(header, rect.width), curses.color_pair(5) | curses.A_BOLD)

    y = rect.y + 1
    bottom = rect.y + rect.height
    for index, cells, height, cell_attrs in rows:
        is_selected = index == selected
        row_style = curses.color_pair(7) if is_selected else curses.A_NORMAL
        for line_no in range(height):
            if y >= bottom:
                return
            x = rect.x
            for col, width in enumerate(widths):
                lines = cells[col] if col < len(cells) else []
                text = lines[line_no - 1] if 0 < line_no <= len(lines) else ""
                attr = row_style
                if not is_selected and cell_attrs and cell_attrs[col]:
                    attr = cell_attrs[col]
                put(win, y, x, fit(text, width), attr)
                x += width
            y += 1


def draw_paragraph(win, rect: Rect, lines: Sequence[Tuple[str, str]], vertical: int, horizontal: int):
    """Key/value lines, keys in green, scrolled by (vertical, horizontal) cells."""
    for row, (key, value) in enumerate(lines[vertical:vertical + rect.height]):
        full = key + value
        visible = _crop_left(full, horizontal)
        x = rect.x
        key_cells = max(0, cell_len(key) - horizontal)
        if key_cells:
            put(win, rect.y + row, x, fit(visible, min(key_cells, rect.width)), curses.color_pair(2) | curses.A_BOLD)
            x += min(key_cells, rect.width)
            visible = _crop_left(visible, key_cells)
        remaining = rect.x + rect.width - x
        if remaining > 0 and visible:
            put(win, rect.y + row, x, fit(visible, remaining))


def _crop_left(text: str, cells: int) -> str:
    while cells > 0 and text:
        cells -= cell_len(text[0])
        text = text[1:]
    return text


def draw_footer(win, rect: Rect, text: str, error: bool = False):
    attr = curses.color_pair(3) if error else curses.color_pair(4)
    draw_box(win, rect, attr=attr)
    inner = rect.inner()
    if inner.height > 0:
        put(win, inner.y, inner.x, fit(text, inner.width), (attr | curses.A_BOLD) if error else curses.A_NORMAL)


def draw_too_small(win, width: int, height: int):
    message = "Terminal too small"
    put(win, height // 2, max(0, (width - len(message)) // 2), fit(message, width), curses.color_pair(3))
