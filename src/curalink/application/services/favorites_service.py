from __future__ import annotations

from typing import Dict, List, Optional

from curalink.domain.errors import InvalidRequest
from curalink.domain.favorites import FavoriteKind
from curalink.domain.identity import Principal
from curalink.infrastructure.stores.favorite_store import FavoriteStore

MAX_ITEM_ID_LENGTH = 255


def parse_favorite(kind: Optional[str], item_id: Optional[str]) -> tuple[FavoriteKind, str]:
    try:
        parsed = FavoriteKind(str(kind or "").strip())
    except ValueError:
        raise InvalidRequest("Invalid payload") from None
    item = str(item_id or "").strip()
    if not item or len(item) > MAX_ITEM_ID_LENGTH:
        raise InvalidRequest("Invalid payload")
    return parsed, item


class FavoritesService:
    """Saved experts, trials and publications; add and remove are idempotent."""

    def __init__(self, favorite_store: Optional[FavoriteStore] = None, *, db_url: Optional[str] = None):
        self._store = favorite_store or FavoriteStore(db_url=db_url)

    def list(self, principal: Principal) -> Dict[str, List[str]]:
        return self._store.list_grouped(principal.user_id)

    def add(self, principal: Principal, kind: Optional[str], item_id: Optional[str]) -> bool:
        parsed, item = parse_favorite(kind, item_id)
        return self._store.add(principal.user_id, parsed, item)

    def remove(self, principal: Principal, kind: Optional[str], item_id: Optional[str]) -> bool:
        parsed, item = parse_favorite(kind, item_id)
        return self._store.remove(principal.user_id, parsed, item)
