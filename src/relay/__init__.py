from .router import Router
from .channel import Channel
from .ledger import RequestLedger
from .sweeper import LedgerSweeper
from .registry import ConnectionRegistry

__all__ = ["Channel", "ConnectionRegistry", "LedgerSweeper", "RequestLedger", "Router"]
