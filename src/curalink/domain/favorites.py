from __future__ import annotations

from enum import Enum


class FavoriteKind(str, Enum):
    EXPERTS = "experts"
    TRIALS = "trials"
    PUBLICATIONS = "publications"
