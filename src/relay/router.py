"""Frame dispatch: correlates captures, answers and the parties they belong to."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Awaitable

from src.state.role import Role
from src.relay.ledger import RequestLedger
from src.state.relay import Connection, CaptureRequest
from src.state.request_status import RequestStatus
from src.relay.registry import ConnectionRegistry
from src.config.limits import DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES
from src.errors import RelayError, ChannelFailure, NoSuchRecipient, UnknownRequestId
from src.relay.collaborators import PayloadSink, discard_payload
from src.config.websocket import (
    WS_KEY_BODY,
    WS_KEY_ROLE,
    WS_KEY_TYPE,
    WS_TYPE_PING,
    WS_TYPE_PONG,
    WS_TYPE_READY,
    WS_TYPE_STATS,
    WS_KEY_PAYLOAD,
    WS_TYPE_ANSWER,
    WS_TYPE_NOTICE,
    WS_KEY_ADMIN_ID,
    WS_TYPE_CAPTURE,
    WS_TYPE_PENDING,
    WS_KEY_REQUEST_ID,
    WS_TYPE_ANSWERED,
    WS_TYPE_CAPTURED,
    WS_TYPE_HANDSHAKE,
    WS_ERROR_FORBIDDEN,
    WS_ERROR_NOT_IDENTIFIED,
    WS_KEY_CLIENT_SESSION_ID,
    WS_ERROR_SESSION_MISMATCH,
    WS_ERROR_PAYLOAD_TOO_LARGE,
)

from .frames import build_frame, build_error_frame, build_answer_frame, build_capture_frame

logger = logging.getLogger(__name__)

HandlerFn = Callable[[Connection, dict[str, Any]], Awaitable[None]]


class Router:
    """Per-frame state machine over an injected registry and ledger.

    Sends never wait on the network: every frame is handed to the target
    connection's channel. Admin fan-out walks a snapshot of the registry, and a
    failed admin is evicted without affecting the others.
    """

    def __init__(
        self,
        *,
        registry: ConnectionRegistry,
        ledger: RequestLedger,
        sink: PayloadSink | None = None,
        max_payload_bytes: int = DEFAULT_MAX_CAPTURE_PAYLOAD_BYTES,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._sink = sink or discard_payload
        self._max_payload_bytes = max(1, int(max_payload_bytes))
        self._handlers: dict[str, HandlerFn] = {
            WS_TYPE_HANDSHAKE: self._handle_handshake,
            WS_TYPE_CAPTURE: self._handle_capture,
            WS_TYPE_ANSWER: self._handle_answer,
            WS_TYPE_NOTICE: self._handle_notice,
            WS_TYPE_STATS: self._handle_stats,
            WS_TYPE_PENDING: self._handle_pending,
        }

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def ledger(self) -> RequestLedger:
        return self._ledger

    async def handle_frame(self, connection_id: str, frame: dict[str, Any]) -> None:
        conn = self._registry.get(connection_id)
        if conn is None:
            logger.debug("frame for evicted connection %s dropped", connection_id)
            return

        msg_type = frame[WS_KEY_TYPE]
        if msg_type == WS_TYPE_PING:
            self._deliver(conn, build_frame(WS_TYPE_PONG))
            return
        if msg_type == WS_TYPE_PONG:
            return

        handler = self._handlers.get(msg_type)
        if handler is None:
            logger.info("no handler for frame type %s from %s", msg_type, connection_id)
            return
        if msg_type != WS_TYPE_HANDSHAKE and conn.role is Role.UNKNOWN:
            self.send_error(connection_id, WS_ERROR_NOT_IDENTIFIED, "send a handshake before other frames")
            return

        try:
            await handler(conn, frame)
        except RelayError as exc:
            self.send_error(connection_id, exc.reason, exc.message, request_id=exc.request_id)

    def send_error(
        self,
        connection_id: str,
        reason: str,
        message: str,
        *,
        request_id: str | None = None,
        **details: Any,
    ) -> bool:
        conn = self._registry.get(connection_id)
        if conn is None:
            return False
        return self._deliver(conn, build_error_frame(reason, message, request_id=request_id, **details))

    def handle_close(self, connection_id: str) -> None:
        conn = self._registry.remove(connection_id)
        if conn is not None:
            logger.info(
                "connection %s closed role=%s session=%s",
                connection_id,
                conn.role.value,
                conn.client_session_id or conn.admin_identity,
            )

    def handle_channel_failure(self, connection_id: str, failure: ChannelFailure) -> None:
        logger.warning("channel failure on %s: %s; evicting", connection_id, failure)
        self._registry.remove(connection_id)

    def sweep(self, max_age_s: float) -> list[str]:
        orphaned = self._ledger.sweep(max_age_s, self._registry.is_session_live)
        for request_id in orphaned:
            logger.warning("orphaned request %s evicted after %.0fs", request_id, max_age_s)
        if orphaned:
            logger.warning("ledger sweep evicted %d orphaned request(s); pending=%d", len(orphaned), len(self._ledger))
        return orphaned

    def stats(self) -> dict[str, int]:
        counts = self._registry.counts()
        counts.update(
            pending=len(self._ledger),
            capturesTotal=self._ledger.opened_total,
            answeredTotal=self._ledger.answered_total,
            orphanedTotal=self._ledger.orphaned_total,
        )
        return counts

    def _deliver(self, conn: Connection, frame: dict[str, Any]) -> bool:
        if conn.channel.deliver(frame):
            return True
        if not conn.channel.is_open:
            self._registry.remove(conn.connection_id)
        return False

    def _broadcast_admins(self, frame: dict[str, Any], *, client_session_id: str | None = None) -> int:
        delivered = 0
        for admin in self._registry.admins():
            if not self._deliver(admin, frame):
                continue
            delivered += 1
            if client_session_id is not None and admin.admin_identity is not None:
                self._registry.note_observed(admin.admin_identity, client_session_id)
        return delivered

    async def _handle_handshake(self, conn: Connection, frame: dict[str, Any]) -> None:
        role = Role(frame[WS_KEY_ROLE])
        if role is Role.CLIENT:
            session_id = frame[WS_KEY_CLIENT_SESSION_ID]
            self._registry.identify(conn.connection_id, role, client_session_id=session_id)
            self._deliver(
                conn,
                build_frame(
                    WS_TYPE_READY,
                    role=role.value,
                    connectionId=conn.connection_id,
                    clientSessionId=session_id,
                ),
            )
            # Captures the server already holds survive the reconnect.
            pending = self._ledger.pending(session_id)
            for entry in pending:
                self._broadcast_admins(build_capture_frame(entry, replayed=True), client_session_id=session_id)
            logger.info("client session %s identified on %s; replayed=%d", session_id, conn.connection_id, len(pending))
            return

        self._registry.identify(conn.connection_id, role, admin_identity=frame.get(WS_KEY_ADMIN_ID))
        self._deliver(conn, build_frame(WS_TYPE_READY, role=role.value, connectionId=conn.connection_id))
        replayed = self._replay_to_admin(conn)
        logger.info("admin %s identified on %s; replayed=%d", conn.admin_identity, conn.connection_id, replayed)

    def _replay_to_admin(self, conn: Connection) -> int:
        replayed = 0
        for entry in self._ledger.pending():
            if not self._deliver(conn, build_capture_frame(entry, replayed=True)):
                break
            self._registry.note_observed(conn.admin_identity or conn.connection_id, entry.origin_client_session_id)
            replayed += 1
        return replayed

    async def _handle_capture(self, conn: Connection, frame: dict[str, Any]) -> None:
        if conn.role is not Role.CLIENT:
            self.send_error(conn.connection_id, WS_ERROR_FORBIDDEN, "only clients may send captures")
            return
        session_id = frame[WS_KEY_CLIENT_SESSION_ID]
        if session_id != conn.client_session_id:
            self.send_error(
                conn.connection_id,
                WS_ERROR_SESSION_MISMATCH,
                "clientSessionId does not match the handshake",
            )
            return
        if self._registry.resolve(session_id) != conn.connection_id:
            self.send_error(
                conn.connection_id,
                WS_ERROR_SESSION_MISMATCH,
                "session was rebound to a newer connection",
            )
            return
        payload: str = frame[WS_KEY_PAYLOAD]
        size = len(payload.encode("utf-8"))
        if size > self._max_payload_bytes:
            self.send_error(
                conn.connection_id,
                WS_ERROR_PAYLOAD_TOO_LARGE,
                f"capture payload exceeds {self._max_payload_bytes} bytes",
                maxBytes=self._max_payload_bytes,
                receivedBytes=size,
            )
            return

        # The entry stays invisible to replays and answers until the sink returns.
        request_id = self._ledger.reserve_id()
        storage_ref = await self._store(request_id, payload)
        if self._registry.resolve(session_id) != conn.connection_id:
            self.send_error(conn.connection_id, WS_ERROR_SESSION_MISMATCH, "session was rebound to a newer connection")
            return
        self._ledger.open(session_id, payload, storage_ref=storage_ref, request_id=request_id)
        self._registry.touch(session_id)
        entry = self._ledger.resolve(request_id)
        if entry is None:
            return

        self._deliver(conn, build_frame(WS_TYPE_CAPTURED, requestId=request_id, clientSessionId=session_id))
        delivered = self._broadcast_admins(build_capture_frame(entry), client_session_id=session_id)
        if delivered == 0:
            logger.info("capture %s from %s held: no admin online", request_id, session_id)
        else:
            logger.debug("capture %s from %s fanned out to %d admin(s)", request_id, session_id, delivered)

    async def _store(self, request_id: str, payload: str) -> str | None:
        try:
            return await self._sink(request_id, payload)
        except Exception:
            logger.exception("payload sink failed for request %s", request_id)
            return None

    async def _handle_answer(self, conn: Connection, frame: dict[str, Any]) -> None:
        if conn.role is not Role.ADMIN:
            self.send_error(conn.connection_id, WS_ERROR_FORBIDDEN, "only admins may answer")
            return
        entry = self._route_answer(frame[WS_KEY_REQUEST_ID], frame[WS_KEY_BODY])
        self._broadcast_admins(
            build_frame(
                WS_TYPE_ANSWERED,
                requestId=entry.request_id,
                clientSessionId=entry.origin_client_session_id,
                by=conn.admin_identity,
            )
        )

    def _route_answer(self, request_id: str, body: str) -> CaptureRequest:
        entry = self._ledger.resolve(request_id)
        if entry is None:
            raise UnknownRequestId(f"request {request_id} is not pending", request_id=request_id)

        session_id = entry.origin_client_session_id
        target_id = self._registry.resolve(session_id)
        target = self._registry.get(target_id) if target_id is not None else None
        if target is None or not self._deliver(target, build_answer_frame(request_id, body)):
            # No redelivery on reconnect; close so the answer cannot be retried forever.
            self._ledger.close(request_id, RequestStatus.ORPHANED)
            raise NoSuchRecipient(f"client session {session_id} is not connected", request_id=request_id)

        self._ledger.close(request_id, RequestStatus.ANSWERED)
        return entry

    async def _handle_notice(self, conn: Connection, frame: dict[str, Any]) -> None:
        if conn.role is not Role.ADMIN:
            self.send_error(conn.connection_id, WS_ERROR_FORBIDDEN, "only admins may send notices")
            return
        notice = build_frame(WS_TYPE_NOTICE, body=frame[WS_KEY_BODY])
        session_id = frame.get(WS_KEY_CLIENT_SESSION_ID)
        if session_id is None:
            sent = sum(1 for client in self._registry.clients() if self._deliver(client, notice))
            logger.info("notice from %s broadcast to %d client(s)", conn.admin_identity, sent)
            return
        target_id = self._registry.resolve(session_id)
        target = self._registry.get(target_id) if target_id is not None else None
        if target is None or not self._deliver(target, notice):
            raise NoSuchRecipient(f"client session {session_id} is not connected")

    async def _handle_stats(self, conn: Connection, frame: dict[str, Any]) -> None:
        if conn.role is not Role.ADMIN:
            self.send_error(conn.connection_id, WS_ERROR_FORBIDDEN, "only admins may read stats")
            return
        self._deliver(conn, build_frame(WS_TYPE_STATS, **self.stats()))

    async def _handle_pending(self, conn: Connection, frame: dict[str, Any]) -> None:
        if conn.role is not Role.ADMIN:
            self.send_error(conn.connection_id, WS_ERROR_FORBIDDEN, "only admins may list pending captures")
            return
        replayed = self._replay_to_admin(conn)
        logger.debug("admin %s requested pending captures; replayed=%d", conn.admin_identity, replayed)


__all__ = ["Router"]
