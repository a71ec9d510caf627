"""
Curses terminal: the raw key source and the frame the views draw into.

CursesTerminal wraps stdscr for the two things the controller needs:
  - read_keys(): drain pending key presses without blocking, translated to
    event.Key (code + modifiers) so views match on names like "ctrl+c"
  - draw(render): erase, let the controller render, flush once

The multiplexer watches fileno() for readability, so stdscr runs in
nodelay mode and read_keys() stops at the first empty read.
"""

import curses
import sys
from typing import Callable, List, Optional

from .event import Key

ESC = "\x1b"
# A readable descriptor that keeps yielding nothing has hit end of file
EMPTY_READ_LIMIT = 64

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_PPAGE: "pageup",
    curses.KEY_NPAGE: "pagedown",
    curses.KEY_DC: "delete",
    curses.KEY_BTAB: "backtab",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
}

CHAR_KEYS = {
    "\n": "enter",
    "\r": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    " ": "space",
}


def translate(ch) -> Optional[Key]:
    """Map one curses get_wch() result to a Key (None for resize and unknown codes)."""
    if isinstance(ch, int):
        code = SPECIAL_KEYS.get(ch)
        return Key(code) if code else None
    if ch == ESC:
        return Key("esc")
    if ch in CHAR_KEYS:
        return Key(CHAR_KEYS[ch])
    if len(ch) == 1 and 0 < ord(ch) < 32:
        return Key.ctrl(chr(ord(ch) + 96))
    return Key(ch)


class CursesTerminal:
    def __init__(self, stdscr, input_fd: Optional[int] = None):
        self.stdscr = stdscr
        self._fd = input_fd if input_fd is not None else sys.stdin.fileno()
        self._empty_reads = 0
        stdscr.nodelay(True)
        stdscr.keypad(True)

    def fileno(self) -> int:
        return self._fd

    def _read(self):
        try:
            return self.stdscr.get_wch()
        except curses.error:
            return None

    def read_keys(self) -> List[Key]:
        keys = []
        read_any = False
        while True:
            ch = self._read()
            if ch is None:
                break
            read_any = True
            if ch == ESC:
                # ESC followed by a character is Alt+character
                follow = self._read()
                if isinstance(follow, str) and follow != ESC:
                    key = translate(follow)
                    keys.append(Key(key.code, key.modifiers | {"alt"}))
                    continue
                keys.append(Key("esc"))
                if follow is None:
                    break
                ch = follow
            key = translate(ch)
            if key is not None:
                keys.append(key)

        if read_any:
            self._empty_reads = 0
        else:
            self._empty_reads += 1
            if self._empty_reads >= EMPTY_READ_LIMIT:
                raise EOFError("terminal input closed")
        return keys

    def draw(self, render: Callable) -> None:
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()
        render(self.stdscr, width, height)
        self.stdscr.noutrefresh()
        curses.doupdate()
