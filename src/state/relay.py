"""Relay bookkeeping records (dataclasses only)."""

from __future__ import annotations

from typing import TYPE_CHECKING
from dataclasses import field, dataclass

from .role import Role
from .request_status import RequestStatus

if TYPE_CHECKING:
    from src.relay.channel import Channel


@dataclass(slots=True)
class Connection:
    connection_id: str
    channel: Channel
    established_at: float
    role: Role = Role.UNKNOWN
    client_session_id: str | None = None
    admin_identity: str | None = None


@dataclass(slots=True)
class ClientSession:
    client_session_id: str
    current_connection_id: str | None
    first_seen_at: float
    last_seen_at: float


@dataclass(slots=True)
class AdminBinding:
    admin_identity: str
    last_connection_id: str | None = None
    client_session_ids: set[str] = field(default_factory=set)


@dataclass(slots=True)
class CaptureRequest:
    request_id: str
    origin_client_session_id: str
    created_at: float
    payload: str | None = None
    storage_ref: str | None = None
    status: RequestStatus = RequestStatus.PENDING


__all__ = ["AdminBinding", "CaptureRequest", "ClientSession", "Connection"]
