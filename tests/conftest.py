"""Shared fixtures: an ACL on disk, a mocked catalog and a controllable clock."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from couchpotato_bot.models.telegram import Chat, Message, TelegramUser
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.catalog_api import CouchPotatoAPI
from couchpotato_bot.services.message_router import MessageRouter
from couchpotato_bot.services.session_manager import SessionManager

PASSWORD = "hunter2"
OWNER_ID = 1
ALICE_ID = 1001


class FakeClock:
    """Monotonic clock the tests move forward by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_manager(clock: FakeClock) -> SessionManager:
    return SessionManager(ttl=120, timer=clock)


@pytest.fixture
def acl(tmp_path) -> AccessControlStore:
    """Empty ACL with no owner yet; the first ``/auth`` claims ownership."""
    store = AccessControlStore(tmp_path / "acl.json", PASSWORD)
    store.load()
    return store


@pytest.fixture
def owned_acl(tmp_path) -> AccessControlStore:
    """Empty ACL whose owner is configured up front."""
    store = AccessControlStore(tmp_path / "acl.json", PASSWORD, configured_owner=OWNER_ID)
    store.load()
    return store


@pytest.fixture
def catalog() -> AsyncMock:
    """Mocked CouchPotato client — never touches the network."""
    return AsyncMock(spec=CouchPotatoAPI)


@pytest.fixture
def make_message():
    """Factory for incoming Telegram messages."""

    def _make(
        text: str,
        user_id: int = ALICE_ID,
        username: str | None = "alice",
        message_id: int = 1,
    ) -> Message:
        return Message(
            message_id=message_id,
            from_user=TelegramUser(id=user_id, first_name="Alice", username=username),
            chat=Chat(id=user_id),
            text=text,
        )

    return _make


@pytest.fixture
def user(make_message):
    """Factory for the ``TelegramUser`` behind :func:`make_message`."""

    def _user(user_id: int = ALICE_ID, username: str | None = "alice") -> TelegramUser:
        return make_message("", user_id=user_id, username=username).from_user

    return _user


@pytest.fixture
def router(session_manager, owned_acl, catalog) -> MessageRouter:
    return MessageRouter(session_manager, owned_acl, catalog)
