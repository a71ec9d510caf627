"""
Screen and operation controller for dockdash.

The App owns everything that changes in response to events: which screen
is showing, which resource tab is active, and the single lifecycle
operation that is waiting on the daemon.

Architecture:
  1. EventHandler (event.py) merges the clock and the terminal into one
     stream of Tick / Input / Command events
  2. Each loop iteration:
     - draws the showing view
     - awaits one event and routes it to the showing view
     - executes whatever AppCommand the view returned
     - (re-)attempts the pending operation, if any
  3. Daemon calls run in a worker thread via asyncio.to_thread, so the
     loop suspends instead of blocking while the daemon answers

Invariants:
  - Exactly one screen is active: ListScreen(kind) or DetailScreen(id)
  - At most one pending operation; while it is set new Restart / Stop /
    Kill / Remove commands and OpenDetail are rejected (navigation still
    works)
  - A refresh result is applied only if its view is still the one showing
    when the call returns; otherwise it is dropped

Failure Policy:
  - Pending verb fails → left pending and retried next iteration, with no
    limit and no backoff (see DESIGN.md, known gap)
  - Image / volume / network removal fails → banner on that list view,
    not retried
  - Refresh fails → skipped, the previous data stays on screen
  - Event stream ends (terminal gone) → same as Quit
"""

import asyncio
import logging
from typing import Dict, Optional

from . import ui
from .backend import BackendError, DockerBackend
from .config import AppConfig
from .detail import PANES, ContainerDetailView
from .event import (
    AppCommand,
    Back,
    Command,
    Event,
    EventHandler,
    Input,
    Key,
    Kill,
    OpenDetail,
    PendingOperation,
    Quit,
    RefreshDetail,
    RefreshList,
    Remove,
    Restart,
    Stop,
    Tick,
)
from .formatting import build_rows, container_detail
from .model import DetailScreen, ListScreen, ResourceKind, Screen
from .views import ResourceListView, build_list_views

logger = logging.getLogger(__name__)

TAB_ORDER = [
    ResourceKind.CONTAINERS,
    ResourceKind.IMAGES,
    ResourceKind.VOLUMES,
    ResourceKind.NETWORKS,
]
TAB_KEYS = {str(i + 1): kind for i, kind in enumerate(TAB_ORDER)}
HEADER_HEIGHT = 2
MIN_HEIGHT = 8
MIN_WIDTH = 30


class App:
    def __init__(self, backend: DockerBackend, config: Optional[AppConfig] = None):
        config = config or AppConfig()
        self.backend = backend
        self.config = config
        self.bindings = config.keybindings
        refresh_every = config.ui.refresh_every_ticks

        self.views: Dict[ResourceKind, ResourceListView] = build_list_views(
            self.bindings, refresh_every, config.ui.show_all
        )
        self.detail = ContainerDetailView(self.bindings, refresh_every)

        self.tab = ResourceKind.CONTAINERS
        self.screen: Screen = ListScreen(self.tab)
        self.pending: Optional[PendingOperation] = None
        self.running = True
        self.events: Optional[EventHandler] = None
        self._failed_attempts = 0

    # --- Control loop ---

    async def run(self, terminal) -> None:
        async with EventHandler(terminal, self.config.ui.tick_rate) as events:
            self.events = events
            self.send(RefreshList(self.tab))
            while self.running:
                terminal.draw(self.draw)
                event = await events.next()
                if event is None:
                    logger.info("Event stream ended, quitting")
                    break
                await self.handle_event(event)
                await self.process_pending()
        self.events = None
        if self.pending is not None:
            logger.warning(f"Quit with operation still pending: {self.pending}")

    def send(self, command: AppCommand) -> None:
        self.events.send(command)

    @property
    def showing_view(self):
        if isinstance(self.screen, DetailScreen):
            return self.detail
        return self.views[self.screen.kind]

    async def handle_event(self, event: Event) -> None:
        command = None
        if isinstance(event, Tick):
            command = self.showing_view.tick()
        elif isinstance(event, Input):
            command = self.handle_key(event.key)
        elif isinstance(event, Command):
            command = event.command
        if command is not None:
            await self.dispatch(command)

    def handle_key(self, key: Key) -> Optional[AppCommand]:
        name = key.name
        if self.bindings.matches("force_quit", name):
            return Quit()

        view = self.showing_view
        if isinstance(self.screen, ListScreen) and view.error is None:
            if name in TAB_KEYS:
                self.switch_tab(TAB_KEYS[name])
                return None
            if self.bindings.matches("next_tab", name):
                self.switch_tab(TAB_ORDER[(TAB_ORDER.index(self.tab) + 1) % len(TAB_ORDER)])
                return None
            if self.bindings.matches("previous_tab", name):
                self.switch_tab(TAB_ORDER[(TAB_ORDER.index(self.tab) - 1) % len(TAB_ORDER)])
                return None

        return view.handle_input(key)

    def switch_tab(self, kind: ResourceKind) -> None:
        if kind == self.tab:
            return
        self.tab = kind
        self.screen = ListScreen(kind)
        self.send(RefreshList(kind))

    # --- Commands ---

    async def dispatch(self, command: AppCommand) -> None:
        if isinstance(command, Quit):
            self.running = False
        elif isinstance(command, Back):
            if isinstance(self.screen, DetailScreen):
                self.screen = ListScreen(self.tab)
        elif isinstance(command, OpenDetail):
            self._open_detail(command.id)
        elif isinstance(command, RefreshList):
            await self._refresh_list(command.kind)
        elif isinstance(command, RefreshDetail):
            await self._refresh_detail(command.id)
        elif isinstance(command, Remove) and command.kind != ResourceKind.CONTAINERS:
            await self._remove_resource(command)
        elif isinstance(command, (Restart, Stop, Kill, Remove)):
            self._set_pending(command)

    def _open_detail(self, container_id: str) -> None:
        if self.pending is not None:
            logger.debug(f"Ignoring details for {container_id[:12]}: {self.pending} is pending")
            return
        self.detail.open(container_id)
        self.screen = DetailScreen(container_id)
        self.send(RefreshDetail(container_id))

    def _set_pending(self, operation: PendingOperation) -> None:
        if self.pending is not None:
            logger.debug(f"Rejected {operation}: {self.pending} is pending")
            return
        self.pending = operation
        self._failed_attempts = 0
        if isinstance(operation, Remove):
            # The container is going away; do not wait for the daemon
            self.screen = ListScreen(self.tab)

    async def _refresh_list(self, kind: ResourceKind) -> None:
        try:
            records = await asyncio.to_thread(self.backend.list_resources, kind)
        except BackendError as e:
            logger.debug(f"Skipping {kind.value} refresh: {e}")
            return
        if self.screen != ListScreen(kind):
            logger.debug(f"Discarding stale {kind.value} refresh")
            return
        self.views[kind].apply_refresh(build_rows(kind, records))

    async def _refresh_detail(self, container_id: str) -> None:
        try:
            attrs = await asyncio.to_thread(self.backend.inspect_container, container_id)
        except BackendError as e:
            logger.debug(f"Skipping detail refresh for {container_id[:12]}: {e}")
            return
        if self.screen != DetailScreen(container_id):
            logger.debug(f"Discarding stale detail refresh for {container_id[:12]}")
            return
        self.detail.apply_refresh(container_detail(attrs))

    async def _remove_resource(self, command: Remove) -> None:
        try:
            await asyncio.to_thread(self.backend.remove_resource, command.kind, command.id, command.force)
        except BackendError as e:
            logger.warning(f"Failed to remove {command.kind.value} {command.id[:12]}: {e}")
            self.views[command.kind].show_error(str(e))
            return
        logger.info(f"Removed {command.kind.value} {command.id[:12]}")
        self.send(RefreshList(command.kind))

    # --- Pending operation ---

    async def process_pending(self) -> None:
        operation = self.pending
        if operation is None:
            return
        try:
            await asyncio.to_thread(self._execute, operation)
        except BackendError as e:
            self._failed_attempts += 1
            if self._failed_attempts == 1:
                logger.warning(f"{operation} failed, retrying: {e}")
            else:
                logger.debug(f"{operation} failed again (attempt {self._failed_attempts}): {e}")
            return

        logger.info(f"{operation} done")
        self.pending = None
        self._failed_attempts = 0
        if isinstance(self.screen, DetailScreen):
            self.send(RefreshDetail(self.screen.container_id))
        else:
            self.send(RefreshList(self.tab))

    def _execute(self, operation: PendingOperation) -> None:
        if isinstance(operation, Restart):
            self.backend.restart_container(operation.id)
        elif isinstance(operation, Stop):
            self.backend.stop_container(operation.id)
        elif isinstance(operation, Kill):
            self.backend.kill_container(operation.id)
        else:
            self.backend.remove_container(operation.id, force=operation.force)

    # --- Drawing ---

    def draw(self, win, width: int, height: int) -> None:
        if height < MIN_HEIGHT or width < MIN_WIDTH:
            ui.draw_too_small(win, width, height)
            return

        if isinstance(self.screen, DetailScreen):
            ui.draw_header(win, width, PANES, self.detail.pane, title=f" {self.detail.title} ")
        else:
            labels = [f"[{i + 1}] {kind.label}" for i, kind in enumerate(TAB_ORDER)]
            ui.draw_header(win, width, labels, TAB_ORDER.index(self.tab))

        body = ui.Rect(HEADER_HEIGHT, 0, height - HEADER_HEIGHT, width)
        self.showing_view.draw(win, body)
