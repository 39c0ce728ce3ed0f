"""Capture request lifecycle states."""

from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    ANSWERED = "answered"
    ORPHANED = "orphaned"


__all__ = ["RequestStatus"]
