"""Fire-and-forget outbound queue for one WebSocket connection."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable

import orjson

from src.errors import ChannelFailure
from src.config.websocket import WS_CLOSE_CHANNEL_FAILURE_CODE

logger = logging.getLogger(__name__)

FailureFn = Callable[[ChannelFailure], None]


class Channel:
    """Serialize frames onto a socket without making callers wait for the network.

    `deliver()` only enqueues. A writer task drains the queue in order. The first
    send error (or a full queue, meaning the peer stopped reading) fails the
    channel for good: the failure callback runs once, later deliveries are
    refused, and the socket is closed.
    """

    def __init__(self, ws: Any, *, max_queue: int) -> None:
        self._ws = ws
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max(1, int(max_queue)))
        self._on_failure: FailureFn | None = None
        self._task: asyncio.Task | None = None
        self._close_task: asyncio.Task | None = None
        self._failed = False
        self._closed = False

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def is_open(self) -> bool:
        return not (self._failed or self._closed)

    def start(self, *, on_failure: FailureFn | None = None) -> asyncio.Task:
        self._on_failure = on_failure
        if self._task is None:
            self._task = asyncio.create_task(self._writer_loop())
        return self._task

    def deliver(self, frame: dict[str, Any]) -> bool:
        if not self.is_open:
            return False
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            self._fail(ChannelFailure(f"outbound queue full ({self._queue.maxsize} frames)"))
            self._close_task = asyncio.create_task(self._close_quietly(WS_CLOSE_CHANNEL_FAILURE_CODE))
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued frame has been sent or discarded."""
        await self._queue.join()

    async def stop(self) -> None:
        self._closed = True
        self._discard_pending()
        for task in (self._task, self._close_task):
            if task is None or task is asyncio.current_task():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._task = None
        self._close_task = None

    async def close(self, *, code: int, reason: str = "") -> None:
        self._closed = True
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason=reason)

    async def _writer_loop(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self._ws.send_text(orjson.dumps(frame).decode("utf-8"))
            except asyncio.CancelledError:
                self._queue.task_done()
                raise
            except Exception as exc:
                self._queue.task_done()
                self._fail(ChannelFailure(f"send failed: {exc!r}"))
                await self._close_quietly(WS_CLOSE_CHANNEL_FAILURE_CODE)
                return
            self._queue.task_done()

    def _fail(self, failure: ChannelFailure) -> None:
        if self._failed:
            return
        self._failed = True
        self._discard_pending()
        if self._on_failure is not None:
            try:
                self._on_failure(failure)
            except Exception:
                logger.exception("channel failure callback raised")

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()

    async def _close_quietly(self, code: int) -> None:
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason="channel failure")


__all__ = ["Channel"]
