from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from curalink.api.main import app
from curalink.application.services.account_service import AccountService
from curalink.application.services.assistant_service import AssistantService
from curalink.application.services.connection_service import ConnectionService
from curalink.application.services.conversation_service import ConversationService
from curalink.application.services.favorites_service import FavoritesService
from curalink.application.services.identity_resolver import IdentityResolver
from curalink.application.services.message_service import MessageService
from curalink.application.services.notification_service import NotificationService
from curalink.infrastructure.stores.auth_store import AuthTokenStore
from curalink.infrastructure.stores.user_store import UserStore


class ApiHarness:
    """TestClient plus helpers for seeding users with live sessions."""

    def __init__(self, client: TestClient, db_url: str):
        self.client = client
        self.db_url = db_url
        self.users = UserStore(db_url=db_url)
        self.tokens = AuthTokenStore(db_url=db_url)

    def make_user(self, email: str, role: str | None = "researcher", name: str | None = None):
        row = self.users.create_user(
            email=email, name=name or email.split("@")[0], role=role, email_verified=True
        )
        token = self.tokens.create_session(row["id"], ttl=timedelta(hours=1))["token"]
        return row["id"], {"Authorization": f"Bearer {token}"}


@pytest.fixture
def api(tmp_path, monkeypatch):
    """Create test client with every route module bound to an isolated database."""
    db_url = f"sqlite:///{tmp_path / 'test.db'}"

    import curalink.api.dependencies as dependencies_module
    import curalink.api.routes.assistant as assistant_module
    import curalink.api.routes.auth as auth_module
    import curalink.api.routes.chat as chat_module
    import curalink.api.routes.connections as connections_module
    import curalink.api.routes.favorites as favorites_module
    import curalink.api.routes.notifications as notifications_module

    monkeypatch.setattr(dependencies_module, "_identity_resolver", IdentityResolver(db_url=db_url))
    monkeypatch.setattr(connections_module, "_connection_service", ConnectionService(db_url=db_url))
    monkeypatch.setattr(chat_module, "_message_service", MessageService(db_url=db_url))
    monkeypatch.setattr(chat_module, "_conversation_service", ConversationService(db_url=db_url))
    monkeypatch.setattr(favorites_module, "_favorites_service", FavoritesService(db_url=db_url))
    monkeypatch.setattr(
        notifications_module, "_notification_service", NotificationService(db_url=db_url)
    )
    monkeypatch.setattr(auth_module, "_account_service", AccountService(db_url=db_url))
    monkeypatch.setattr(assistant_module, "_assistant_service", AssistantService(None, db_url=db_url))

    return ApiHarness(TestClient(app), db_url)
