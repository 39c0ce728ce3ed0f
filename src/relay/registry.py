"""Registry of live relay connections and the client sessions bound to them."""

from __future__ import annotations

import time
import logging
import itertools
from collections.abc import Callable

from src.state.role import Role
from src.relay.channel import Channel
from src.errors import RoleConflict, MalformedFrame
from src.state.relay import AdminBinding, ClientSession, Connection

logger = logging.getLogger(__name__)

TimeFn = Callable[[], float]


class ConnectionRegistry:
    """Owns every live Connection plus the logical ClientSession bindings.

    All mutators are plain synchronous methods. On a single asyncio loop that
    makes each of them atomic, which is what keeps a late close from erasing a
    newer binding for the same client session.
    """

    def __init__(self, *, now_fn: TimeFn | None = None) -> None:
        self._now = now_fn or time.time
        self._ids = itertools.count(1)
        self._connections: dict[str, Connection] = {}
        self._sessions: dict[str, ClientSession] = {}
        self._bindings: dict[str, AdminBinding] = {}

    def register(self, channel: Channel) -> str:
        connection_id = f"conn-{next(self._ids)}"
        self._connections[connection_id] = Connection(
            connection_id=connection_id,
            channel=channel,
            established_at=self._now(),
        )
        return connection_id

    def identify(
        self,
        connection_id: str,
        role: Role,
        *,
        client_session_id: str | None = None,
        admin_identity: str | None = None,
    ) -> Connection:
        conn = self._connections.get(connection_id)
        if conn is None:
            raise KeyError(connection_id)
        role = Role(role)
        if role is Role.UNKNOWN:
            raise MalformedFrame("handshake role must be client or admin")
        if conn.role is not Role.UNKNOWN and conn.role is not role:
            raise RoleConflict(f"connection already identified as {conn.role.value}")

        if role is Role.CLIENT:
            if not client_session_id:
                raise MalformedFrame("client handshake requires clientSessionId")
            if conn.client_session_id and conn.client_session_id != client_session_id:
                raise RoleConflict("connection already bound to another client session")
            conn.role = role
            conn.client_session_id = client_session_id
            self._bind_session(client_session_id, connection_id)
            return conn

        identity = admin_identity or connection_id
        if conn.admin_identity and conn.admin_identity != identity:
            raise RoleConflict("connection already bound to another admin identity")
        conn.role = role
        conn.admin_identity = identity
        binding = self._bindings.get(identity)
        if binding is None:
            binding = AdminBinding(admin_identity=identity)
            self._bindings[identity] = binding
        binding.last_connection_id = connection_id
        return conn

    def _bind_session(self, client_session_id: str, connection_id: str) -> None:
        now = self._now()
        session = self._sessions.get(client_session_id)
        if session is None:
            self._sessions[client_session_id] = ClientSession(
                client_session_id=client_session_id,
                current_connection_id=connection_id,
                first_seen_at=now,
                last_seen_at=now,
            )
            return
        previous = session.current_connection_id
        if previous is not None and previous != connection_id:
            # The old socket may still be open; it simply stops receiving answers.
            logger.info(
                "client session %s rebound %s -> %s",
                client_session_id,
                previous,
                connection_id,
            )
        session.current_connection_id = connection_id
        session.last_seen_at = now

    def resolve(self, client_session_id: str) -> str | None:
        session = self._sessions.get(client_session_id)
        if session is None:
            return None
        return session.current_connection_id

    def remove(self, connection_id: str) -> Connection | None:
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return None
        if conn.client_session_id is not None:
            session = self._sessions.get(conn.client_session_id)
            # Only the current binding may clear itself.
            if session is not None and session.current_connection_id == connection_id:
                session.current_connection_id = None
                session.last_seen_at = self._now()
        if conn.admin_identity is not None:
            binding = self._bindings.get(conn.admin_identity)
            if binding is not None and binding.last_connection_id == connection_id:
                binding.last_connection_id = None
        return conn

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def session(self, client_session_id: str) -> ClientSession | None:
        return self._sessions.get(client_session_id)

    def is_session_live(self, client_session_id: str) -> bool:
        return self.resolve(client_session_id) is not None

    def touch(self, client_session_id: str) -> None:
        session = self._sessions.get(client_session_id)
        if session is not None:
            session.last_seen_at = self._now()

    def admins(self) -> tuple[Connection, ...]:
        return tuple(c for c in self._connections.values() if c.role is Role.ADMIN)

    def clients(self) -> tuple[Connection, ...]:
        """Connections that are the current binding of their client session."""
        return tuple(
            c
            for c in self._connections.values()
            if c.role is Role.CLIENT
            and c.client_session_id is not None
            and self.resolve(c.client_session_id) == c.connection_id
        )

    def note_observed(self, admin_identity: str, client_session_id: str) -> None:
        binding = self._bindings.get(admin_identity)
        if binding is not None:
            binding.client_session_ids.add(client_session_id)

    def binding(self, admin_identity: str) -> AdminBinding | None:
        return self._bindings.get(admin_identity)

    def counts(self) -> dict[str, int]:
        admins = self.admins()
        return {
            "connections": len(self._connections),
            "admins": len(admins),
            "adminIdentities": len({c.admin_identity for c in admins}),
            "clients": len(self.clients()),
            "clientSessions": len(self._sessions),
        }


__all__ = ["ConnectionRegistry"]
