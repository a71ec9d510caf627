"""
Resource list views, one per resource kind.

Each view binds a ListState to a row schema, a polling cadence and the
commands its keys emit. Views never call the daemon: they return an
AppCommand and the controller (app.py) does the rest.

Common Contract:
  - handle_input(key) -> Optional[AppCommand]
  - tick() -> Optional[AppCommand]   (RefreshList every N ticks)
  - apply_refresh(rows)              (wholesale replacement)
  - show_error(message)              (one-shot banner)
  - draw(win, rect)

Error Banner:
  After a failed removal the footer shows the daemon's complaint in red.
  The next key press of any kind only dismisses it, so a user reading the
  banner cannot fire a second destructive command by accident.

Key Classes:
  - ResourceListView: shared navigation, cadence, banner and drawing
  - ContainerListView: show-all filter, details and lifecycle verbs
  - ImageListView / VolumeListView: remove and force remove
  - NetworkListView: remove
"""

import logging
from typing import List, Optional, Sequence

from . import ui
from .config import KeyBindings
from .event import AppCommand, Key, Kill, OpenDetail, Quit, RefreshList, Remove, Restart, Stop
from .formatting import row_height, summarize_error
from .model import ContainerRow, ImageRow, NetworkRow, ResourceKind, Row, VolumeRow
from .state import ListState

logger = logging.getLogger(__name__)

FOOTER_HEIGHT = 3


class ResourceListView:
    kind: ResourceKind = ResourceKind.CONTAINERS
    columns: List[ui.Column] = []

    def __init__(self, bindings: Optional[KeyBindings] = None, refresh_every: int = 10):
        self.bindings = bindings or KeyBindings()
        self.refresh_every = refresh_every
        self.state: ListState[Row] = ListState()
        self.error: Optional[str] = None
        self._records: List[Row] = []
        self._skipped_ticks = 0

    # Data

    def apply_refresh(self, rows: Sequence[Row]) -> None:
        self._records = list(rows)
        self._sync()

    def displayed_rows(self) -> List[Row]:
        return self._records

    def _sync(self, keep_identity: bool = False) -> None:
        previous = self.state.selected_item
        rows = self.displayed_rows()
        self.state.replace_items(rows, row_height)
        if keep_identity and previous is not None:
            for index, row in enumerate(rows):
                if row.id == previous.id:
                    self.state.select(index)
                    break

    def show_error(self, message: str) -> None:
        self.error = summarize_error(self.kind, message)

    # Events

    def tick(self) -> Optional[AppCommand]:
        self._skipped_ticks += 1
        if self._skipped_ticks < self.refresh_every:
            return None
        self._skipped_ticks = 0
        return RefreshList(self.kind)

    def handle_input(self, key: Key) -> Optional[AppCommand]:
        if self.error is not None:
            self.error = None
            return None

        name = key.name
        if self.bindings.matches("quit", name):
            return Quit()
        if self.bindings.matches("down", name):
            self.state.next()
            return None
        if self.bindings.matches("up", name):
            self.state.previous()
            return None

        row = self.state.selected_item
        if row is None:
            return None
        return self.command_for(name, row)

    def command_for(self, name: str, row: Row) -> Optional[AppCommand]:
        if self.bindings.matches("remove", name):
            return Remove(row.id, force=False, kind=self.kind)
        return None

    # Drawing

    def footer_text(self) -> str:
        return " <Del/D> remove"

    def cells(self, row: Row) -> List[List[str]]:
        raise NotImplementedError

    def cell_attrs(self, row: Row) -> Optional[List[int]]:
        return None

    def draw(self, win, rect: ui.Rect) -> None:
        body, footer = rect.split_bottom(FOOTER_HEIGHT)
        ui.draw_box(win, body, title=self.kind.label)
        inner = body.inner()
        table = ui.Rect(inner.y, inner.x, inner.height, max(0, inner.width - 1))

        rows = [
            (index, self.cells(row), height, self.cell_attrs(row))
            for index, row, height in self.state.visible_rows(table.height - 1)
        ]
        ui.draw_table(win, table, self.columns, rows, self.state.selected)

        content_length, position = self.state.scrollbar_geometry()
        ui.draw_scrollbar(win, inner, content_length, position)

        if self.error is not None:
            ui.draw_footer(win, footer, self.error, error=True)
        else:
            ui.draw_footer(win, footer, self.footer_text())


class ContainerListView(ResourceListView):
    kind = ResourceKind.CONTAINERS
    columns = [
        ui.Column("ID", 12),
        ui.Column("Name", 20),
        ui.Column("Image", 30),
        ui.Column("State", 10),
        ui.Column("Ports", 28),
    ]

    def __init__(self, bindings: Optional[KeyBindings] = None, refresh_every: int = 10, show_all: bool = True):
        super().__init__(bindings, refresh_every)
        self.show_all = show_all

    def displayed_rows(self) -> List[Row]:
        if self.show_all:
            return self._records
        return [row for row in self._records if row.is_running]

    def toggle_show_all(self) -> None:
        self.show_all = not self.show_all
        logger.debug(f"Showing {'all' if self.show_all else 'running'} containers")
        self._sync(keep_identity=True)

    def handle_input(self, key: Key) -> Optional[AppCommand]:
        # The filter toggle works on an empty list too
        if self.error is None and self.bindings.matches("toggle_all", key.name):
            self.toggle_show_all()
            return None
        return super().handle_input(key)

    def command_for(self, name: str, row: ContainerRow) -> Optional[AppCommand]:
        if self.bindings.matches("details", name):
            return OpenDetail(row.id)
        if self.bindings.matches("restart", name):
            return Restart(row.id)
        if self.bindings.matches("stop", name):
            return Stop(row.id)
        if self.bindings.matches("kill", name):
            return Kill(row.id)
        if self.bindings.matches("remove", name):
            return Remove(row.id, force=True)
        return None

    def footer_text(self) -> str:
        toggle = "All" if self.show_all else "Running"
        text = f" <Ent> details | <T> {toggle}"
        row = self.state.selected_item
        if row is not None:
            verbs = "restart | <S> stop | <X> kill " if row.is_running else "start "
            text += f" | <R> {verbs}| <Del/D> remove"
        return text

    def cells(self, row: ContainerRow) -> List[List[str]]:
        return [[row.short_id], [row.name], [row.image], [row.state], row.ports]

    def cell_attrs(self, row: ContainerRow) -> Optional[List[int]]:
        return [0, 0, 0, ui.state_color(row.state), 0]


class ImageListView(ResourceListView):
    kind = ResourceKind.IMAGES
    columns = [
        ui.Column("ID", 30),
        ui.Column("Tags", 40),
        ui.Column("Size", 10),
        ui.Column("Created", 20),
    ]

    def command_for(self, name: str, row: ImageRow) -> Optional[AppCommand]:
        if self.bindings.matches("force_remove", name):
            return Remove(row.id, force=True, kind=self.kind)
        return super().command_for(name, row)

    def footer_text(self) -> str:
        return " <Del/D> remove | <F> force remove"

    def cells(self, row: ImageRow) -> List[List[str]]:
        return [[row.id], row.tags, [row.size], [row.created]]


class VolumeListView(ResourceListView):
    kind = ResourceKind.VOLUMES
    columns = [
        ui.Column("Name", 35),
        ui.Column("Driver", 15),
        ui.Column("Mountpoint", 50),
    ]

    def command_for(self, name: str, row: VolumeRow) -> Optional[AppCommand]:
        if self.bindings.matches("force_remove", name):
            return Remove(row.id, force=True, kind=self.kind)
        return super().command_for(name, row)

    def footer_text(self) -> str:
        return " <Del/D> remove | <F> force remove"

    def cells(self, row: VolumeRow) -> List[List[str]]:
        return [[row.name], [row.driver], [row.mountpoint]]


class NetworkListView(ResourceListView):
    kind = ResourceKind.NETWORKS
    columns = [
        ui.Column("ID", 20),
        ui.Column("Name", 35),
        ui.Column("Driver", 15),
        ui.Column("Created", 30),
    ]

    def cells(self, row: NetworkRow) -> List[List[str]]:
        return [[row.short_id], [row.name], [row.driver], [row.created]]


def build_list_views(bindings: KeyBindings, refresh_every: int, show_all: bool):
    return {
        ResourceKind.CONTAINERS: ContainerListView(bindings, refresh_every, show_all),
        ResourceKind.IMAGES: ImageListView(bindings, refresh_every),
        ResourceKind.VOLUMES: VolumeListView(bindings, refresh_every),
        ResourceKind.NETWORKS: NetworkListView(bindings, refresh_every),
    }
