"""Interfaces to the collaborators the relay core consumes but does not own."""

from __future__ import annotations

import secrets
from collections.abc import Callable, Iterable, Awaitable

# identity/token -> allowed to take the admin role
AdminAuthorizer = Callable[[str | None], bool]

# (request_id, payload) -> opaque storage reference, or None when not stored
PayloadSink = Callable[[str, str], Awaitable[str | None]]


def build_token_authorizer(tokens: Iterable[str]) -> AdminAuthorizer:
    expected = frozenset(t for t in (tok.strip() for tok in tokens) if t)

    def is_authorized_admin(token: str | None) -> bool:
        if not expected:
            # Misconfiguration: no tokens set. Treat as locked down.
            return False
        candidate = (token or "").strip()
        if not candidate:
            return False
        # Compare against every token so timing does not leak which one matched.
        matched = False
        for tok in expected:
            if secrets.compare_digest(candidate.encode("utf-8"), tok.encode("utf-8")):
                matched = True
        return matched

    return is_authorized_admin


async def discard_payload(request_id: str, payload: str) -> str | None:
    return None


__all__ = ["AdminAuthorizer", "PayloadSink", "build_token_authorizer", "discard_payload"]
