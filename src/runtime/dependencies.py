"""Runtime dependency construction (relay core + admission control)."""

from __future__ import annotations

import logging

from src.state import RuntimeDeps
from src.relay.router import Router
from src.relay.ledger import RequestLedger
from src.state.settings import AppSettings
from src.relay.sweeper import LedgerSweeper
from src.relay.registry import ConnectionRegistry
from src.handlers.connections import ConnectionManager
from src.relay.collaborators import PayloadSink, build_token_authorizer

from .settings import load_settings

logger = logging.getLogger(__name__)


async def build_runtime_deps(settings: AppSettings | None = None, *, sink: PayloadSink | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    if not settings.auth.admin_tokens:
        logger.warning("no admin tokens configured; every admin handshake will be rejected")

    registry = ConnectionRegistry()
    ledger = RequestLedger()
    router = Router(
        registry=registry,
        ledger=ledger,
        sink=sink,
        max_payload_bytes=settings.limits.max_capture_payload_bytes,
    )
    sweeper = LedgerSweeper(
        router,
        max_age_s=settings.ledger.max_age_s,
        interval_s=settings.ledger.sweep_interval_s,
    )
    sweeper.start()

    return RuntimeDeps(
        connections=ConnectionManager(max_connections=settings.limits.max_concurrent_connections),
        registry=registry,
        ledger=ledger,
        router=router,
        authorizer=build_token_authorizer(settings.auth.admin_tokens),
        sweeper=sweeper,
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps"]
