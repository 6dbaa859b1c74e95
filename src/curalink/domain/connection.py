"""Connection workflow enums."""

from __future__ import annotations

from enum import Enum
from typing import Tuple


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ConnectionAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"

    @property
    def target_status(self) -> ConnectionStatus:
        if self is ConnectionAction.ACCEPT:
            return ConnectionStatus.ACCEPTED
        return ConnectionStatus.REJECTED


def ordered_pair(a: int, b: int) -> Tuple[int, int]:
    """Canonical (low, high) key for an unordered user pair."""
    return (a, b) if a <= b else (b, a)
