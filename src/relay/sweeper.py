"""Periodic reclamation of orphaned ledger entries."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from src.relay.router import Router

logger = logging.getLogger(__name__)


class LedgerSweeper:
    def __init__(self, router: Router, *, max_age_s: float, interval_s: float) -> None:
        self._router = router
        self._max_age_s = float(max_age_s)
        self._interval_s = max(0.01, float(interval_s))
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._stop_event.clear()
            self._task = asyncio.create_task(self._sweep_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    def sweep_once(self) -> list[str]:
        return self._router.sweep(self._max_age_s)

    async def _sweep_loop(self) -> None:
        while not self._stop_event.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_s)
            if self._stop_event.is_set():
                break
            try:
                self.sweep_once()
            except Exception:
                logger.exception("ledger sweep failed")


__all__ = ["LedgerSweeper"]
