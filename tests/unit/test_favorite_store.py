from __future__ import annotations

import pytest

from curalink.application.services.favorites_service import FavoritesService
from curalink.domain.errors import InvalidRequest
from curalink.domain.favorites import FavoriteKind
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.favorite_store import FavoriteStore
from curalink.infrastructure.stores.user_store import UserStore


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def user_id(db_url):
    return UserStore(db_url=db_url).create_user(email="fav@example.com")["id"]


@pytest.fixture()
def store(db_url):
    return FavoriteStore(db_url=db_url, auto_create_schema=True)


class TestFavoriteStore:
    def test_empty_list_has_all_kinds(self, store: FavoriteStore, user_id):
        assert store.list_grouped(user_id) == {"experts": [], "trials": [], "publications": []}

    def test_add_is_idempotent(self, store: FavoriteStore, user_id):
        assert store.add(user_id, FavoriteKind.TRIALS, "NCT01") is True
        assert store.add(user_id, FavoriteKind.TRIALS, "NCT01") is False
        assert store.list_grouped(user_id)["trials"] == ["NCT01"]

    def test_insertion_order_per_kind(self, store: FavoriteStore, user_id):
        store.add(user_id, FavoriteKind.PUBLICATIONS, "pmid-2")
        store.add(user_id, FavoriteKind.EXPERTS, "e1")
        store.add(user_id, FavoriteKind.PUBLICATIONS, "pmid-1")
        grouped = store.list_grouped(user_id)
        assert grouped["publications"] == ["pmid-2", "pmid-1"]
        assert grouped["experts"] == ["e1"]

    def test_remove_missing_is_noop(self, store: FavoriteStore, user_id):
        assert store.remove(user_id, FavoriteKind.EXPERTS, "nobody") is False
        store.add(user_id, FavoriteKind.EXPERTS, "e1")
        assert store.remove(user_id, FavoriteKind.EXPERTS, "e1") is True
        assert store.list_grouped(user_id)["experts"] == []


class TestFavoritesService:
    def test_unknown_kind_rejected(self, db_url, user_id):
        service = FavoritesService(db_url=db_url)
        principal = Principal(user_id=user_id, email="fav@example.com", role=Role.PATIENT)
        with pytest.raises(InvalidRequest):
            service.add(principal, "diseases", "x")
        with pytest.raises(InvalidRequest):
            service.remove(principal, "experts", "   ")

    def test_add_then_remove(self, db_url, user_id):
        service = FavoritesService(db_url=db_url)
        principal = Principal(user_id=user_id, email="fav@example.com")
        service.add(principal, "experts", " e7 ")
        assert service.list(principal)["experts"] == ["e7"]
        service.remove(principal, "experts", "e7")
        service.remove(principal, "experts", "e7")
        assert service.list(principal)["experts"] == []
