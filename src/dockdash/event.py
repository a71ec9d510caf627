"""
Event types and the clock+input multiplexer.

The control loop in app.py consumes a single ordered stream of events:
  - Tick: the fixed-rate clock fired (drives redraws and polling cadence)
  - Input: a key press read from the terminal
  - Command: an AppCommand sent by the controller itself

Architecture:
  - EventHandler owns one unbounded asyncio.Queue
  - A clock task puts a Tick every tick_rate seconds, regardless of input;
    while one Tick is still queued further ticks are dropped, so a slow
    consumer sees one Tick instead of a backlog
  - The terminal's file descriptor is registered with loop.add_reader; when
    it becomes readable the input source is drained into Input events
  - send() enqueues a Command without suspending the caller
  - next() awaits whichever event arrives first

Shutdown:
  - close() (or leaving the async context) stops the clock task and removes
    the reader; already-queued events may still be delivered once
  - If the input source raises, production stops and next() returns None,
    which the controller treats as a quit request
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Protocol, Union

from .model import ResourceKind

logger = logging.getLogger(__name__)

TICK_FPS = 30.0


@dataclass(frozen=True)
class Key:
    """A key press: a key code ("a", "enter", "up", ...) plus modifiers."""
    code: str
    modifiers: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        # "ctrl+c", "alt+x", "enter"
        if not self.modifiers:
            return self.code
        return "+".join(sorted(self.modifiers)) + "+" + self.code

    @classmethod
    def ctrl(cls, code: str) -> "Key":
        return cls(code, frozenset({"ctrl"}))


# --- APP COMMANDS ---

@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class RefreshList:
    kind: ResourceKind


@dataclass(frozen=True)
class RefreshDetail:
    id: str


@dataclass(frozen=True)
class OpenDetail:
    id: str


@dataclass(frozen=True)
class Restart:
    id: str


@dataclass(frozen=True)
class Stop:
    id: str


@dataclass(frozen=True)
class Kill:
    id: str


@dataclass(frozen=True)
class Remove:
    id: str
    force: bool = False
    kind: ResourceKind = ResourceKind.CONTAINERS


AppCommand = Union[Quit, Back, RefreshList, RefreshDetail, OpenDetail, Restart, Stop, Kill, Remove]

# Verbs the controller tracks as its single pending operation
PendingOperation = Union[Restart, Stop, Kill, Remove]


# --- EVENTS ---

@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Input:
    key: Key


@dataclass(frozen=True)
class Command:
    command: AppCommand


Event = Union[Tick, Input, Command]


class InputSource(Protocol):
    """Raw key source backed by a readable file descriptor."""

    def fileno(self) -> int:
        ...

    def read_keys(self) -> List[Key]:
        """Drain every key currently available without blocking."""
        ...


class EventHandler:
    def __init__(self, input_source: InputSource, tick_rate: float = 1.0 / TICK_FPS):
        self.input_source = input_source
        self.tick_rate = tick_rate
        self._queue: "asyncio.Queue[Optional[Event]]" = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tick_task: Optional["asyncio.Task[None]"] = None
        self._reader_fd: Optional[int] = None
        self._closed = False
        self._exhausted = False
        self._tick_pending = False

    async def __aenter__(self) -> "EventHandler":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._tick_task = self._loop.create_task(self._run_clock())
        self._reader_fd = self.input_source.fileno()
        self._loop.add_reader(self._reader_fd, self._on_input_ready)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop_producers()

    async def next(self) -> Optional[Event]:
        """Wait for the next event; None once production has failed."""
        if self._exhausted and self._queue.empty():
            return None
        event = await self._queue.get()
        if event is None:
            self._exhausted = True
        elif isinstance(event, Tick):
            self._tick_pending = False
        return event

    def send(self, command: AppCommand) -> None:
        self._queue.put_nowait(Command(command))

    async def _run_clock(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.tick_rate)
            if self._closed:
                break
            # At most one Tick waits in the queue; ticks missed while the
            # consumer is busy collapse into it
            if not self._tick_pending:
                self._tick_pending = True
                self._queue.put_nowait(Tick())

    def _on_input_ready(self) -> None:
        try:
            keys = self.input_source.read_keys()
        except Exception as e:
            logger.error(f"Input source failed, stopping event production: {e}", exc_info=True)
            self._fail()
            return
        for key in keys:
            self._queue.put_nowait(Input(key))

    def _fail(self) -> None:
        self._closed = True
        self._stop_producers()
        self._queue.put_nowait(None)

    def _stop_producers(self) -> None:
        if self._reader_fd is not None and self._loop is not None:
            self._loop.remove_reader(self._reader_fd)
            self._reader_fd = None
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None
