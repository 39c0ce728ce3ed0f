"""Per-connection idle watchdog."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from typing import Any

from src.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
)

logger = logging.getLogger(__name__)


class WebSocketLifecycle:
    """Close a socket once it has been silent for `idle_timeout_s`.

    Only inbound frames count as activity; relayed captures and answers going
    out do not keep a dead peer alive. A timeout of 0 disables the check.
    """

    def __init__(
        self,
        websocket: Any,
        *,
        connection_id: str | None = None,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
    ) -> None:
        self._ws = websocket
        self._connection_id = connection_id or "unregistered"
        self._idle_timeout_s = max(0.0, float(DEFAULT_WS_IDLE_TIMEOUT_S if idle_timeout_s is None else idle_timeout_s))
        self._watchdog_tick_s = max(
            0.001, float(DEFAULT_WS_WATCHDOG_TICK_S if watchdog_tick_s is None else watchdog_tick_s)
        )
        self._last_activity = time.monotonic()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def watchdog_tick_s(self) -> float:
        return self._watchdog_tick_s

    def touch(self) -> None:
        self._last_activity = time.monotonic()

    def idle_for(self) -> float:
        return time.monotonic() - self._last_activity

    def should_close(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    def _expired(self) -> bool:
        return self._idle_timeout_s > 0 and self.idle_for() >= self._idle_timeout_s

    async def _watchdog_loop(self) -> None:
        while not self._stop_event.is_set():
            await asyncio.sleep(self._watchdog_tick_s)
            if self._stop_event.is_set() or not self._expired():
                continue
            logger.info("connection %s idle for %.0fs; closing", self._connection_id, self.idle_for())
            self._stop_event.set()
            with contextlib.suppress(Exception):
                await self._ws.close(code=WS_CLOSE_IDLE_CODE, reason=WS_CLOSE_IDLE_REASON)
            return


__all__ = ["WebSocketLifecycle"]
