"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from src.relay.router import Router
    from src.relay.ledger import RequestLedger
    from src.state.settings import AppSettings
    from src.relay.sweeper import LedgerSweeper
    from src.relay.registry import ConnectionRegistry
    from src.relay.collaborators import AdminAuthorizer
    from src.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    registry: ConnectionRegistry
    ledger: RequestLedger
    router: Router
    authorizer: AdminAuthorizer
    sweeper: LedgerSweeper
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.sweeper.stop()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
