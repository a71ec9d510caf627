import asyncio
import os
import time

import pytest

from dockdash.event import Command, EventHandler, Input, Key, Quit, RefreshList, Tick
from dockdash.model import ResourceKind

SLOW_TICK = 60.0


class PipeInput:
    """Key source over a real pipe: one key per byte written."""

    def __init__(self):
        self.read_fd, self.write_fd = os.pipe()

    def fileno(self):
        return self.read_fd

    def read_keys(self):
        data = os.read(self.read_fd, 1024)
        return [Key(chr(b)) for b in data]

    def press(self, text):
        os.write(self.write_fd, text.encode())

    def close(self):
        os.close(self.read_fd)
        os.close(self.write_fd)


class BrokenInput(PipeInput):
    def read_keys(self):
        raise OSError("terminal disconnected")


@pytest.fixture
def pipe_input():
    source = PipeInput()
    yield source
    source.close()


def run(coro):
    return asyncio.run(asyncio.wait_for(coro, timeout=5))


def test_key_names():
    assert Key("q").name == "q"
    assert Key.ctrl("c").name == "ctrl+c"
    assert Key("x", frozenset({"alt"})).name == "alt+x"


def test_clock_produces_ticks_without_input(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=0.01) as events:
            return [await events.next() for _ in range(3)]

    assert run(scenario()) == [Tick(), Tick(), Tick()]


def test_input_becomes_events_in_order(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=SLOW_TICK) as events:
            pipe_input.press("jk")
            return [await events.next(), await events.next()]

    assert run(scenario()) == [Input(Key("j")), Input(Key("k"))]


def test_sent_commands_keep_send_order(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=SLOW_TICK) as events:
            events.send(RefreshList(ResourceKind.IMAGES))
            events.send(Quit())
            return [await events.next(), await events.next()]

    assert run(scenario()) == [
        Command(RefreshList(ResourceKind.IMAGES)),
        Command(Quit()),
    ]


def test_input_failure_ends_the_stream():
    source = BrokenInput()
    try:
        async def scenario():
            async with EventHandler(source, tick_rate=SLOW_TICK) as events:
                source.press("x")
                first = await events.next()
                second = await events.next()
                return first, second, events.closed

        assert run(scenario()) == (None, None, True)
    finally:
        source.close()


def test_close_stops_the_clock(pipe_input):
    async def scenario():
        events = EventHandler(pipe_input, tick_rate=0.01)
        events.start()
        await events.next()
        events.close()
        # Let any already-scheduled tick land, then drain
        await asyncio.sleep(0.02)
        while not events._queue.empty():
            events._queue.get_nowait()
        await asyncio.sleep(0.05)
        return events._queue.empty(), events.closed

    assert run(scenario()) == (True, True)


def test_close_is_idempotent(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=SLOW_TICK) as events:
            events.close()
        return events.closed

    assert run(scenario()) is True


def test_busy_consumer_leaves_at_most_one_tick(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=0.01) as events:
            # A daemon call that keeps the consumer away for ~30 ticks
            await asyncio.to_thread(time.sleep, 0.3)
            queued = list(events._queue._queue)
            return sum(isinstance(e, Tick) for e in queued)

    assert run(scenario()) <= 1


def test_key_pressed_during_busy_call_is_not_buried(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=0.01) as events:
            await asyncio.to_thread(time.sleep, 0.2)
            pipe_input.press("q")
            await asyncio.sleep(0.05)
            return [await events.next(), await events.next()]

    first, second = run(scenario())
    assert Input(Key("q")) in (first, second)


def test_ticks_resume_after_one_is_consumed(pipe_input):
    async def scenario():
        async with EventHandler(pipe_input, tick_rate=0.01) as events:
            await asyncio.sleep(0.1)
            first = await events.next()
            second = await events.next()
            return first, second

    assert run(scenario()) == (Tick(), Tick())
