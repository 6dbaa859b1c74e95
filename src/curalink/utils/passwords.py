"""Password hashing helpers backed by ``bcrypt``.

The cost factor is read from ``CURALINK_BCRYPT_ROUNDS`` (default 10).
"""

from __future__ import annotations

import os

import bcrypt
from loguru import logger

_ENV_ROUNDS = "CURALINK_BCRYPT_ROUNDS"
_DEFAULT_ROUNDS = 10


def _rounds() -> int:
    raw = os.getenv(_ENV_ROUNDS, "").strip()
    if not raw:
        return _DEFAULT_ROUNDS
    try:
        return max(4, min(int(raw), 16))
    except ValueError:
        logger.warning(f"{_ENV_ROUNDS}={raw!r} is not an integer, using {_DEFAULT_ROUNDS}")
        return _DEFAULT_ROUNDS


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=_rounds())).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Constant-time check; a missing or malformed hash never matches."""
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
