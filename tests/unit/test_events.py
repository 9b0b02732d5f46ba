"""Unit tests for EventEmitter."""

import asyncio
import logging

import pytest

from tweetboard.events import EventEmitter, EventType


@pytest.mark.unit
class TestEventEmitter:
    """Tests for handler registration and dispatch."""

    @pytest.mark.asyncio
    async def test_handlers_receive_arguments_in_order(self) -> None:
        emitter = EventEmitter()
        seen: list[tuple[str, int]] = []

        async def first(number: int) -> None:
            seen.append(("first", number))

        async def second(number: int) -> None:
            seen.append(("second", number))

        emitter.on(EventType.OPENED, first)
        emitter.on(EventType.OPENED, second)
        tasks = emitter.emit(EventType.OPENED, 7)
        await emitter.wait_idle()

        assert len(tasks) == 2
        assert seen == [("first", 7), ("second", 7)]

    @pytest.mark.asyncio
    async def test_emit_without_handlers(self) -> None:
        emitter = EventEmitter()

        assert emitter.emit(EventType.CLOSED) == []

    @pytest.mark.asyncio
    async def test_off_removes_handler(self) -> None:
        emitter = EventEmitter()
        calls: list[int] = []

        async def handler() -> None:
            calls.append(1)

        emitter.on(EventType.UPDATED, handler)
        emitter.off(EventType.UPDATED, handler)
        emitter.off(EventType.UPDATED, handler)
        emitter.emit(EventType.UPDATED)
        await emitter.wait_idle()

        assert calls == []
        assert emitter.handler_count(EventType.UPDATED) == 0

    @pytest.mark.asyncio
    async def test_failing_handler_is_logged_and_isolated(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        emitter = EventEmitter("test")
        calls: list[str] = []

        async def broken() -> None:
            raise RuntimeError("boom")

        async def healthy() -> None:
            calls.append("healthy")

        emitter.on(EventType.UPDATED, broken)
        emitter.on(EventType.UPDATED, healthy)
        with caplog.at_level(logging.ERROR):
            emitter.emit(EventType.UPDATED)
            await emitter.wait_idle()

        assert calls == ["healthy"]
        assert "event handler failed: boom" in caplog.text

    @pytest.mark.asyncio
    async def test_wait_idle_covers_chained_events(self) -> None:
        emitter = EventEmitter()
        seen: list[str] = []

        async def on_opened() -> None:
            await asyncio.sleep(0)
            emitter.emit(EventType.UPDATED)

        async def on_updated() -> None:
            seen.append("updated")

        emitter.on(EventType.OPENED, on_opened)
        emitter.on(EventType.UPDATED, on_updated)
        emitter.emit(EventType.OPENED)
        await emitter.wait_idle()

        assert seen == ["updated"]
        assert emitter.pending_count == 0

    @pytest.mark.asyncio
    async def test_close_cancels_pending_handlers(self) -> None:
        emitter = EventEmitter()
        release = asyncio.Event()

        async def slow() -> None:
            await release.wait()

        emitter.on(EventType.UPDATED, slow)
        (task,) = emitter.emit(EventType.UPDATED)
        await asyncio.sleep(0)
        await emitter.close()

        assert task.cancelled()
        assert emitter.handler_count(EventType.UPDATED) == 0
