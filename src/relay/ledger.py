"""Pending capture requests keyed by request id."""

from __future__ import annotations

import time
import secrets
import itertools
from collections import OrderedDict
from collections.abc import Callable

from src.state.relay import CaptureRequest
from src.state.request_status import RequestStatus

TimeFn = Callable[[], float]
IdFactory = Callable[[], str]


class RequestLedger:
    """Track every capture awaiting an answer.

    Entries are kept in creation order. An answer is always matched by its
    request id, never by position, so operators may answer out of order.
    Closed entries are removed; closing twice is a no-op.
    """

    def __init__(self, *, now_fn: TimeFn | None = None, id_factory: IdFactory | None = None) -> None:
        self._now = now_fn or time.time
        self._seq = itertools.count(1)
        self._id_factory = id_factory or self._next_request_id
        self._pending: OrderedDict[str, CaptureRequest] = OrderedDict()
        self.opened_total = 0
        self.answered_total = 0
        self.orphaned_total = 0

    def _next_request_id(self) -> str:
        # ms timestamp + process counter keeps ids ordered; the random tail
        # keeps them unguessable across restarts.
        millis = int(time.time() * 1000)
        return f"{millis:012x}{next(self._seq):08x}-{secrets.token_hex(4)}"

    def reserve_id(self) -> str:
        """Mint a request id without making anything visible to `pending()` or `resolve()`."""
        return self._id_factory()

    def open(
        self,
        origin_client_session_id: str,
        payload: str | None = None,
        *,
        storage_ref: str | None = None,
        request_id: str | None = None,
    ) -> str:
        request_id = request_id or self._id_factory()
        if request_id in self._pending:
            raise RuntimeError(f"request id collision: {request_id}")
        self._pending[request_id] = CaptureRequest(
            request_id=request_id,
            origin_client_session_id=origin_client_session_id,
            created_at=self._now(),
            payload=payload,
            storage_ref=storage_ref,
        )
        self.opened_total += 1
        return request_id

    def resolve(self, request_id: str) -> CaptureRequest | None:
        return self._pending.get(request_id)

    def close(self, request_id: str, status: RequestStatus = RequestStatus.ANSWERED) -> CaptureRequest | None:
        entry = self._pending.pop(request_id, None)
        if entry is None:
            return None
        entry.status = status
        if status is RequestStatus.ORPHANED:
            self.orphaned_total += 1
        else:
            self.answered_total += 1
        return entry

    def pending(self, client_session_id: str | None = None) -> list[CaptureRequest]:
        if client_session_id is None:
            return list(self._pending.values())
        return [e for e in self._pending.values() if e.origin_client_session_id == client_session_id]

    def sweep(self, max_age_s: float, is_session_live: Callable[[str], bool]) -> list[str]:
        cutoff = self._now() - max(0.0, float(max_age_s))
        stale = [
            e.request_id
            for e in self._pending.values()
            if e.created_at < cutoff and not is_session_live(e.origin_client_session_id)
        ]
        for request_id in stale:
            self.close(request_id, RequestStatus.ORPHANED)
        return stale

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._pending


__all__ = ["RequestLedger"]
