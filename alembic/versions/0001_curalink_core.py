"""curalink core tables

Revision ID: 0001_curalink_core
Revises:
Create Date: 2026-10-19

Users, sessions and verification tokens, researcher connections, chat
messages, favorites, notifications and FAQ chat exchanges.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import context, op


revision = "0001_curalink_core"
down_revision = None
branch_labels = None
depends_on = None


def _is_offline() -> bool:
    try:
        return bool(context.is_offline_mode())
    except Exception:
        return False


def _insp():
    return sa.inspect(op.get_bind())


def _has_table(name: str) -> bool:
    return _insp().has_table(name)


def _get_indexes(table: str) -> set[str]:
    idx = set()
    for i in _insp().get_indexes(table):
        idx.add(str(i.get("name") or ""))
    return idx


def _create_index(name: str, table: str, cols: list[str]) -> None:
    if _is_offline():
        op.create_index(name, table, cols)
        return
    if name in _get_indexes(table):
        return
    op.create_index(name, table, cols)


def _needs(table: str) -> bool:
    return _is_offline() or not _has_table(table)


def upgrade() -> None:
    if _needs("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("name", sa.String(length=255), nullable=True),
            sa.Column("image", sa.Text(), nullable=True),
            sa.Column("password_hash", sa.Text(), nullable=True),
            sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("role", sa.String(length=32), nullable=True),
            sa.Column("orcid_id", sa.String(length=19), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_users_email", "users", ["email"])

    if _needs("auth_sessions"):
        op.create_table(
            "auth_sessions",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("token", sa.String(length=64), nullable=False, unique=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_auth_sessions_token", "auth_sessions", ["token"])
    _create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])

    if _needs("verification_tokens"):
        op.create_table(
            "verification_tokens",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("identifier", sa.String(length=255), nullable=False),
            sa.Column("token", sa.String(length=64), nullable=False, unique=True),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_verification_tokens_identifier", "verification_tokens", ["identifier"])
    _create_index("ix_verification_tokens_token", "verification_tokens", ["token"])

    if _needs("researcher_connections"):
        op.create_table(
            "researcher_connections",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("receiver_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("pair_low_id", sa.Integer(), nullable=False),
            sa.Column("pair_high_id", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=16), server_default="pending", nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("pair_low_id", "pair_high_id", name="uq_researcher_connections_pair"),
            sa.CheckConstraint("requester_id <> receiver_id", name="ck_researcher_connections_distinct"),
        )
    _create_index("ix_researcher_connections_requester_id", "researcher_connections", ["requester_id"])
    _create_index("ix_researcher_connections_receiver_id", "researcher_connections", ["receiver_id"])
    _create_index("ix_researcher_connections_status", "researcher_connections", ["status"])

    if _needs("chat_messages"):
        op.create_table(
            "chat_messages",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("receiver_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("body", sa.Text(), server_default="", nullable=False),
            sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_chat_messages_sender_id", "chat_messages", ["sender_id"])
    _create_index("ix_chat_messages_receiver_id", "chat_messages", ["receiver_id"])
    _create_index("ix_chat_messages_is_read", "chat_messages", ["is_read"])
    _create_index("ix_chat_messages_created_at", "chat_messages", ["created_at"])

    if _needs("favorites"):
        op.create_table(
            "favorites",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("kind", sa.String(length=32), nullable=False),
            sa.Column("item_id", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("user_id", "kind", "item_id", name="uq_favorites_user_kind_item"),
        )
    _create_index("ix_favorites_user_id", "favorites", ["user_id"])

    if _needs("notifications"):
        op.create_table(
            "notifications",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("type", sa.String(length=32), server_default="general", nullable=False),
            sa.Column("title", sa.String(length=255), server_default="", nullable=False),
            sa.Column("message", sa.Text(), server_default="", nullable=False),
            sa.Column("link", sa.Text(), nullable=True),
            sa.Column("metadata_json", sa.Text(), server_default="{}", nullable=False),
            sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_notifications_user_id", "notifications", ["user_id"])
    _create_index("ix_notifications_is_read", "notifications", ["is_read"])
    _create_index("ix_notifications_created_at", "notifications", ["created_at"])

    if _needs("faq_chat_conversations"):
        op.create_table(
            "faq_chat_conversations",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("session_id", sa.String(length=128), nullable=False),
            sa.Column("user_message", sa.Text(), server_default="", nullable=False),
            sa.Column("assistant_response", sa.Text(), server_default="", nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
    _create_index("ix_faq_chat_conversations_user_id", "faq_chat_conversations", ["user_id"])
    _create_index("ix_faq_chat_conversations_session_id", "faq_chat_conversations", ["session_id"])
    _create_index("ix_faq_chat_conversations_created_at", "faq_chat_conversations", ["created_at"])


def downgrade() -> None:
    for table in (
        "faq_chat_conversations",
        "notifications",
        "favorites",
        "chat_messages",
        "researcher_connections",
        "verification_tokens",
        "auth_sessions",
        "users",
    ):
        op.drop_table(table)
