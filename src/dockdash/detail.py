"""
Container detail screen.

Shows one container's inspect record split over panes. Each pane keeps its
own ViewportState, so switching panes never loses the scroll position of
another one. The content is rebuilt from the latest ContainerDetail on every
draw and the viewport bounds are recomputed against it first, so a shrinking
env list never leaves the view scrolled past its own end.

Panes:
  - Status: id, name, state, IP address, created, start time, restart policy
  - Details: image, command, entrypoint, environment, labels
  - Volumes: mounts (source -> destination)
  - Network: IP address, port bindings

Absent fields are left out; multi-value fields are rendered as a heading
followed by " - value" lines.
"""

import logging
from typing import List, Optional, Tuple

from . import ui
from .config import KeyBindings
from .event import AppCommand, Back, Key, Kill, RefreshDetail, Remove, Restart, Stop
from .model import ContainerDetail
from .state import ViewportState

logger = logging.getLogger(__name__)

PANES = ["Status", "Details", "Volumes", "Network"]
FOOTER_HEIGHT = 3

Line = Tuple[str, str]


def _fields(pairs: List[Line]) -> List[Line]:
    return [(key, value) for key, value in pairs if value and value != "-"]


def _section(title: str, values: List[str]) -> List[Line]:
    if not values:
        return []
    return [("", ""), (f"{title}:", "")] + [("", f" - {v}") for v in values]


def pane_lines(detail: ContainerDetail, pane: int) -> List[Line]:
    if pane == 0:
        return _fields([
            ("ID: ", detail.id),
            ("Name: ", detail.name),
            ("State: ", detail.state),
            ("IP Address: ", detail.ip_address),
            ("Created: ", detail.created),
            ("Start Time: ", detail.start_time),
            ("Restart Policy: ", detail.restart_policy),
        ])
    if pane == 1:
        lines = _fields([("Image: ", detail.image)])
        lines += _section("CMD", detail.cmd)
        lines += _section("Entrypoint", detail.entrypoint)
        lines += _section("Env", detail.env)
        lines += _section("Labels", detail.labels)
        return lines
    if pane == 2:
        return _section("Volumes", detail.mounts)[1:]
    lines = _fields([("IP Address: ", detail.ip_address)])
    section = _section("Port Configs", detail.ports)
    return lines + (section if lines else section[1:])


class ContainerDetailView:
    def __init__(self, bindings: Optional[KeyBindings] = None, refresh_every: int = 10):
        self.bindings = bindings or KeyBindings()
        self.refresh_every = refresh_every
        self.container_id: Optional[str] = None
        self.data: Optional[ContainerDetail] = None
        self.pane = 0
        self.viewports = [ViewportState() for _ in PANES]
        self._skipped_ticks = 0

    @property
    def viewport(self) -> ViewportState:
        return self.viewports[self.pane]

    @property
    def title(self) -> str:
        name = self.data.name if self.data else (self.container_id or "")[:12]
        return f"Container: {name}"

    def open(self, container_id: str) -> None:
        """Show a container from a clean slate: first pane, every viewport at origin."""
        logger.debug(f"Opening detail for container {container_id[:12]}")
        self.container_id = container_id
        self.data = None
        self.pane = 0
        for viewport in self.viewports:
            viewport.reset()
        self._skipped_ticks = 0

    def apply_refresh(self, detail: ContainerDetail) -> None:
        self.data = detail

    def tick(self) -> Optional[AppCommand]:
        self._skipped_ticks += 1
        if self._skipped_ticks < self.refresh_every or self.container_id is None:
            return None
        self._skipped_ticks = 0
        return RefreshDetail(self.container_id)

    def handle_input(self, key: Key) -> Optional[AppCommand]:
        name = key.name
        matches = self.bindings.matches
        viewport = self.viewport

        if matches("back", name):
            return Back()
        if matches("up", name):
            viewport.scroll_up()
        elif matches("down", name):
            viewport.scroll_down()
        elif matches("scroll_left", name):
            viewport.scroll_left()
        elif matches("scroll_right", name):
            viewport.scroll_right()
        elif matches("scroll_start", name):
            viewport.scroll_to_start()
        elif matches("scroll_end", name):
            viewport.scroll_to_end()
        elif matches("scroll_top", name):
            viewport.scroll_to_top()
        elif matches("scroll_bottom", name):
            viewport.scroll_to_bottom()
        elif matches("next_pane", name):
            self.pane = (self.pane + 1) % len(PANES)
        elif matches("previous_pane", name):
            self.pane = (self.pane - 1) % len(PANES)
        elif self.container_id is not None:
            return self._command_for(name, self.container_id)
        return None

    def _command_for(self, name: str, container_id: str) -> Optional[AppCommand]:
        matches = self.bindings.matches
        if matches("restart", name):
            return Restart(container_id)
        if matches("stop", name):
            return Stop(container_id)
        if matches("kill", name):
            return Kill(container_id)
        if matches("remove", name):
            return Remove(container_id, force=True)
        return None

    def lines(self) -> List[Line]:
        if self.data is None:
            return [("", "Loading...")]
        return pane_lines(self.data, self.pane)

    def footer_text(self) -> str:
        running = self.data is not None and self.data.is_running
        verbs = "| <R> restart | <S> stop | <X> kill " if running else "| <R> start "
        return f" <Esc/Q> back | <←/→> pane {verbs}| <Del/D> remove"

    def draw(self, win, rect: ui.Rect) -> None:
        body, footer = rect.split_bottom(FOOTER_HEIGHT)
        ui.draw_box(win, body, title=self.title)
        inner = body.inner()
        text_area = ui.Rect(inner.y, inner.x, max(0, inner.height - 1), max(0, inner.width - 1))

        lines = self.lines()
        viewport = self.viewport
        viewport.recompute_bounds([key + value for key, value in lines], text_area.height, text_area.width)
        ui.draw_paragraph(win, text_area, lines, viewport.vertical, viewport.horizontal)

        ui.draw_scrollbar(win, inner, *viewport.vertical_scrollbar())
        ui.draw_scrollbar(win, inner, *viewport.horizontal_scrollbar(), vertical=False)
        ui.draw_footer(win, footer, self.footer_text())
