"""Long-lived relay connection that redials and re-identifies after every drop."""

from __future__ import annotations

import asyncio
import inspect
import logging
import contextlib
import collections
from typing import Any
from functools import partial
from collections.abc import Callable, Awaitable

import orjson
import websockets
from websockets.exceptions import WebSocketException

from src.config.reconnect import (
    RELAY_CLIENT_QUEUE_MAX,
    RELAY_CLIENT_BACKOFF_FACTOR,
    RELAY_CLIENT_PING_INTERVAL_S,
    RELAY_CLIENT_MAX_MESSAGE_BYTES,
    RELAY_CLIENT_RECONNECT_DELAY_S,
    RELAY_CLIENT_WS_PING_TIMEOUT_S,
    RELAY_CLIENT_WS_PING_INTERVAL_S,
    RELAY_CLIENT_TERMINAL_CLOSE_CODES,
    RELAY_CLIENT_RECONNECT_MAX_DELAY_S,
)

from src.state.supervisor_state import SupervisorState
from src.state.supervisor_event import SupervisorEvent

from .frames import build_ping
from .state_machine import ReconnectStateMachine

logger = logging.getLogger(__name__)

FrameCallback = Callable[[dict[str, Any]], Any]
ConnectFn = Callable[[str], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[None]]

_CONNECT_ERRORS = (WebSocketException, OSError, TimeoutError)


def _encode(frame: dict[str, Any]) -> str:
    return orjson.dumps(frame).decode("utf-8")


class ReconnectSupervisor:
    """Keep one relay connection alive for a client or an admin.

    On every successful open the same handshake is sent first, so the server
    rebinds the existing client session instead of creating a new one; then the
    outbox of frames produced while offline is flushed in order. The outbox is
    bounded and drops new frames when full. Received frames are decoded and
    handed to `on_frame`, which may be a plain function or a coroutine function.
    A close with a terminal code (a rejected admin token) stops the supervisor
    instead of redialing.

    `connect` and `sleep` are injectable so the retry schedule can be driven
    without a network or real time.
    """

    def __init__(
        self,
        url: str,
        handshake: dict[str, Any],
        *,
        on_frame: FrameCallback | None = None,
        base_delay_s: float = RELAY_CLIENT_RECONNECT_DELAY_S,
        max_delay_s: float = RELAY_CLIENT_RECONNECT_MAX_DELAY_S,
        backoff_factor: float = RELAY_CLIENT_BACKOFF_FACTOR,
        queue_max: int = RELAY_CLIENT_QUEUE_MAX,
        ping_interval_s: float = RELAY_CLIENT_PING_INTERVAL_S,
        connect: ConnectFn | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        self._url = url
        self._handshake = dict(handshake)
        self._on_frame = on_frame
        self._fsm = ReconnectStateMachine(base_delay_s=base_delay_s, max_delay_s=max_delay_s, factor=backoff_factor)
        self._queue_max = max(0, int(queue_max))
        self._outbox: collections.deque[dict[str, Any]] = collections.deque()
        self._ping_interval_s = max(0.0, float(ping_interval_s))
        self._connect = connect or partial(
            websockets.connect,
            ping_interval=RELAY_CLIENT_WS_PING_INTERVAL_S,
            ping_timeout=RELAY_CLIENT_WS_PING_TIMEOUT_S,
            max_size=RELAY_CLIENT_MAX_MESSAGE_BYTES,
        )
        self._sleep = sleep or self._wait_for_stop
        self._stop_event = asyncio.Event()
        self._ws: Any | None = None
        self._live = False
        self._task: asyncio.Task | None = None
        self.last_close_code: int | None = None
        self.connections_opened = 0
        self.frames_dropped = 0

    @property
    def state(self) -> SupervisorState:
        return self._fsm.state

    @property
    def connected(self) -> bool:
        return self._live

    @property
    def outbox_size(self) -> int:
        return len(self._outbox)

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    def request_stop(self) -> None:
        self._stop_event.set()

    async def stop(self) -> None:
        self.request_stop()
        ws = self._ws
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        task = self._task
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task
            self._task = None

    async def send(self, frame: dict[str, Any]) -> bool:
        """Send now when connected, otherwise queue; False when the frame was dropped."""
        ws = self._ws
        if self._live and ws is not None:
            try:
                await ws.send(_encode(frame))
                return True
            except _CONNECT_ERRORS as exc:
                logger.info("send failed, queueing frame for the next connection: %s", exc)
        return self._enqueue(frame)

    async def run(self) -> None:
        try:
            while not self._stop_event.is_set():
                self._fsm.fire(SupervisorEvent.DIAL)
                try:
                    ws = await self._connect(self._url)
                except _CONNECT_ERRORS as exc:
                    if self._stop_event.is_set():
                        break
                    self._fsm.fire(SupervisorEvent.FAILED)
                    delay = self._fsm.next_delay()
                    logger.warning(
                        "connect to %s failed (attempt %d): %s; retrying in %.1fs",
                        self._url,
                        self._fsm.attempt,
                        exc,
                        delay,
                    )
                    await self._sleep(delay)
                    continue

                self._fsm.fire(SupervisorEvent.OPENED)
                self._ws = ws
                self.connections_opened += 1
                logger.info("connected to %s (connection #%d)", self._url, self.connections_opened)
                try:
                    await self._on_open(ws)
                    await self._receive_loop(ws)
                except _CONNECT_ERRORS as exc:
                    logger.info("connection to %s lost: %s", self._url, exc)
                finally:
                    self._live = False
                    self._ws = None
                    with contextlib.suppress(Exception):
                        await ws.close()

                self.last_close_code = getattr(ws, "close_code", None)
                if self.last_close_code in RELAY_CLIENT_TERMINAL_CLOSE_CODES:
                    logger.error("relay %s closed with %s; not reconnecting", self._url, self.last_close_code)
                    self.request_stop()
                if self._stop_event.is_set():
                    break
                self._fsm.fire(SupervisorEvent.LOST)
                delay = self._fsm.next_delay()
                logger.info("disconnected from %s; reconnecting in %.1fs", self._url, delay)
                await self._sleep(delay)
        finally:
            self._fsm.fire(SupervisorEvent.STOP)
            logger.info("reconnect supervisor for %s stopped", self._url)

    def _enqueue(self, frame: dict[str, Any]) -> bool:
        if len(self._outbox) >= self._queue_max:
            self.frames_dropped += 1
            logger.warning(
                "outbox full (%d frames); dropping %s frame",
                self._queue_max,
                frame.get("type", "unknown"),
            )
            return False
        self._outbox.append(frame)
        return True

    async def _on_open(self, ws: Any) -> None:
        await ws.send(_encode(self._handshake))
        while self._outbox:
            frame = self._outbox[0]
            await ws.send(_encode(frame))
            self._outbox.popleft()
        self._live = True

    async def _receive_loop(self, ws: Any) -> None:
        ping_task = asyncio.create_task(self._ping_loop(ws)) if self._ping_interval_s > 0 else None
        try:
            async for raw in ws:
                await self._dispatch(raw)
        finally:
            if ping_task is not None:
                ping_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await ping_task

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            frame = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.debug("ignoring non-JSON frame from %s", self._url)
            return
        if not isinstance(frame, dict) or self._on_frame is None:
            return
        try:
            result = self._on_frame(frame)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("on_frame callback failed for %s frame", frame.get("type"))

    async def _ping_loop(self, ws: Any) -> None:
        while True:
            await asyncio.sleep(self._ping_interval_s)
            try:
                await ws.send(_encode(build_ping()))
            except _CONNECT_ERRORS:
                return

    async def _wait_for_stop(self, delay: float) -> None:
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)


__all__ = ["ReconnectSupervisor"]
