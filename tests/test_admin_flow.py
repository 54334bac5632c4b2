"""Tests for /auth, /users and the revoke / unrevoke conversations."""

from __future__ import annotations

import json

import pytest

from conftest import ALICE_ID, OWNER_ID, PASSWORD
from couchpotato_bot import messages
from couchpotato_bot.errors import PersistenceFailure
from couchpotato_bot.models.telegram import TelegramUser
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.message_router import MessageRouter
from couchpotato_bot.services.session_manager import ConversationState

BOB_ID = 1002
CAROL_ID = 1003


@pytest.fixture
def admin_message(make_message):
    def _make(text: str, message_id: int = 1):
        return make_message(text, user_id=OWNER_ID, username="owner", message_id=message_id)

    return _make


@pytest.fixture
def members(owned_acl, user):
    """Alice, Bob and Carol are allowed; the configured owner is not listed."""
    owned_acl.authorize(user(ALICE_ID, "alice"), PASSWORD)
    owned_acl.authorize(user(BOB_ID, "bob"), PASSWORD)
    owned_acl.authorize(user(CAROL_ID, None), PASSWORD)


# ── /auth ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_first_auth_claims_ownership(session_manager, acl, catalog, make_message):
    router = MessageRouter(session_manager, acl, catalog)

    response = await router.route(make_message(f"/auth {PASSWORD}"))

    texts = [(r.chat_id, r.text) for r in response.replies]
    assert texts[0] == (ALICE_ID, messages.IS_AUTHORIZED)
    assert texts[1] == (ALICE_ID, f"{messages.YOUR_USER_ID}: {ALICE_ID}\n{messages.OWNER_CLAIMED}")
    assert acl.is_owner(ALICE_ID)


@pytest.mark.asyncio
async def test_auth_notifies_owner(router, owned_acl, make_message):
    response = await router.route(make_message(f"/auth {PASSWORD}"))

    assert owned_acl.is_allowed(ALICE_ID)
    assert [(r.chat_id, r.text) for r in response.replies] == [
        (ALICE_ID, messages.IS_AUTHORIZED),
        (OWNER_ID, f"alice{messages.USER_AUTHORIZED}"),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["/auth wrong", "/auth"])
async def test_auth_with_wrong_password(router, owned_acl, make_message, text):
    response = await router.route(make_message(text))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.INVALID_PASSWORD}"
    assert not owned_acl.is_allowed(ALICE_ID)


@pytest.mark.asyncio
async def test_auth_when_already_authorized(router, make_message, members):
    response = await router.route(make_message(f"/auth {PASSWORD}"))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.ALREADY_AUTHORIZED}"


@pytest.mark.asyncio
async def test_auth_when_banned(router, owned_acl, make_message, members):
    owned_acl.revoke(ALICE_ID)

    response = await router.route(make_message(f"/auth {PASSWORD}"))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.IS_REVOKED}"


@pytest.mark.asyncio
async def test_auth_persistence_failure_propagates(router, owned_acl, make_message, monkeypatch):
    def _fail(_acl):
        raise OSError("read-only file system")

    monkeypatch.setattr(owned_acl, "_write", _fail)

    with pytest.raises(PersistenceFailure):
        await router.route(make_message(f"/auth {PASSWORD}"))


# ── Admin access ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_admin_command_from_member(router, session_manager, make_message, members):
    response = await router.route(make_message("/revoke"))

    assert len(response.replies) == 1
    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.ADMIN_ONLY}"
    assert session_manager.get(ALICE_ID).is_idle


@pytest.mark.asyncio
async def test_admin_command_without_owner_prompts_config(tmp_path, session_manager, catalog, make_message):
    path = tmp_path / "acl.json"
    path.write_text(
        json.dumps({"allowed_users": [{"id": ALICE_ID, "first_name": "Alice"}], "revoked_users": []})
    )
    acl = AccessControlStore(path, PASSWORD)
    acl.load()
    router = MessageRouter(session_manager, acl, catalog)

    response = await router.route(make_message("/users"))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.ADMIN_ONLY}"
    assert response.replies[1].chat_id == ALICE_ID
    assert f"{messages.YOUR_USER_ID}: {ALICE_ID}" in response.replies[1].text
    assert messages.OWNER_CONFIG in response.replies[1].text


@pytest.mark.asyncio
async def test_users_lists_allowed_users(router, admin_message, members):
    response = await router.route(admin_message("/users"))

    assert response.replies[0].text.split("\n") == [
        f"*{messages.ALLOWED_USERS}:*",
        "*1*) alice",
        "*2*) bob",
        "*3*) Alice",
    ]


# ── /revoke ──────────────────────────────────────────────

@pytest.mark.asyncio
async def test_revoke_with_no_allowed_users(router, session_manager, admin_message):
    response = await router.route(admin_message("/revoke"))

    assert len(response.replies) == 1
    assert response.replies[0].text == messages.NO_ALLOWED_USERS
    assert response.replies[0].keyboard is None
    assert session_manager.get(OWNER_ID).is_idle


@pytest.mark.asyncio
async def test_revoke_lists_candidates(router, session_manager, admin_message, members):
    response = await router.route(admin_message("/revoke"))

    reply = response.replies[0]
    assert reply.keyboard == [["alice", "bob"], ["Alice"]]
    assert "*1*) alice" in reply.text
    session = session_manager.get(OWNER_ID)
    assert session.state is ConversationState.REVOKE_TARGET_PENDING
    assert [(c.user_id, c.keyboard_value) for c in session.candidates] == [
        (ALICE_ID, "alice"),
        (BOB_ID, "bob"),
        (CAROL_ID, "Alice"),
    ]


@pytest.mark.asyncio
async def test_revoke_confirmed(router, owned_acl, session_manager, admin_message, members):
    await router.route(admin_message("/revoke"))

    response = await router.route(admin_message("bob", message_id=2))
    assert response.replies[0].text == f"{messages.REVOKE_CONFIRM} @bob?"
    assert response.replies[0].keyboard == [["NO"], ["yes"]]
    assert session_manager.get(OWNER_ID).state is ConversationState.REVOKE_CONFIRM_PENDING

    response = await router.route(admin_message("yes", message_id=3))

    assert response.replies[0].text == f"{messages.ACCESS_REVOKED} @bob."
    assert owned_acl.is_revoked(BOB_ID)
    assert not owned_acl.is_allowed(BOB_ID)
    assert session_manager.get(OWNER_ID).is_idle


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", ["NO", "no", "maybe"])
async def test_revoke_cancelled(router, owned_acl, session_manager, admin_message, members, answer):
    await router.route(admin_message("/revoke"))
    await router.route(admin_message("bob", message_id=2))

    response = await router.route(admin_message(answer, message_id=3))

    assert response.replies[0].text == f"{messages.ACCESS_NOT_REVOKED} @bob."
    assert owned_acl.is_allowed(BOB_ID)
    assert session_manager.get(OWNER_ID).is_idle


@pytest.mark.asyncio
async def test_revoke_unknown_name(router, session_manager, admin_message, members):
    await router.route(admin_message("/revoke"))

    response = await router.route(admin_message("mallory", message_id=2))

    assert response.replies[0].text == f'{messages.ERROR_MARKER} {messages.USER_SELECTION_NOT_FOUND} "mallory".'
    assert session_manager.get(OWNER_ID).state is ConversationState.REVOKE_TARGET_PENDING


@pytest.mark.asyncio
async def test_revoked_user_loses_access(router, catalog, admin_message, make_message, members):
    await router.route(admin_message("/revoke"))
    await router.route(admin_message("alice", message_id=2))
    await router.route(admin_message("yes", message_id=3))

    response = await router.route(make_message("/q Inception"))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.NOT_AUTHORIZED}"
    catalog.search_movies.assert_not_called()


# ── /unrevoke ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_unrevoke_with_no_revoked_users(router, admin_message, members):
    response = await router.route(admin_message("/unrevoke"))

    assert response.replies[0].text == messages.NO_REVOKED_USERS


@pytest.mark.asyncio
async def test_unrevoke_round_trip(router, owned_acl, session_manager, admin_message, members):
    owned_acl.revoke(BOB_ID)

    response = await router.route(admin_message("/unrevoke"))
    assert response.replies[0].keyboard == [["bob"]]
    assert session_manager.get(OWNER_ID).state is ConversationState.UNREVOKE_TARGET_PENDING

    await router.route(admin_message("bob", message_id=2))
    assert session_manager.get(OWNER_ID).state is ConversationState.UNREVOKE_CONFIRM_PENDING

    response = await router.route(admin_message("yes", message_id=3))

    assert response.replies[0].text == f"{messages.ACCESS_UNREVOKED} @bob."
    assert owned_acl.is_allowed(BOB_ID)
    assert not owned_acl.is_revoked(BOB_ID)
    assert session_manager.get(OWNER_ID).is_idle


# ── Misc commands ────────────────────────────────────────

@pytest.mark.asyncio
async def test_help_shows_admin_section_to_owner(router, admin_message, make_message, members):
    owner_help = await router.route(admin_message("/help"))
    member_help = await router.route(make_message("/help"))

    assert "/revoke" in owner_help.replies[0].text
    assert "/revoke" not in member_help.replies[0].text
    assert "/q [movie name]" in member_help.replies[0].text


@pytest.mark.asyncio
async def test_start_needs_no_authorization(router, make_message):
    response = await router.route(make_message("/start"))

    assert response.replies[0].text.startswith("Hello @alice!")
    assert messages.NOT_AUTHORIZED in response.replies[0].text


@pytest.mark.asyncio
async def test_unknown_command(router, make_message, members):
    response = await router.route(make_message("/frobnicate"))

    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.UNKNOWN_COMMAND}"


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["/revoke", "/users", "/wanted", "/frobnicate"])
async def test_stranger_commands_are_not_authorized(router, catalog, session_manager, make_message, text):
    response = await router.route(make_message(text))

    assert len(response.replies) == 1
    assert response.replies[0].text == f"{messages.ERROR_MARKER} {messages.NOT_AUTHORIZED}"
    assert session_manager.get(ALICE_ID).is_idle
    catalog.trigger_full_search.assert_not_called()


# ── Identity of the revoke target ────────────────────────

@pytest.mark.asyncio
async def test_revoke_tells_apart_users_with_the_same_name(router, owned_acl, admin_message):
    owned_acl.authorize(TelegramUser(id=2001, first_name="John"), PASSWORD)
    owned_acl.authorize(TelegramUser(id=2002, first_name="John"), PASSWORD)
    owned_acl.authorize(TelegramUser(id=2003, first_name="Jane"), PASSWORD)

    response = await router.route(admin_message("/revoke"))
    assert response.replies[0].keyboard == [["John (2001)", "John (2002)"], ["Jane"]]

    await router.route(admin_message("John (2002)", message_id=2))
    response = await router.route(admin_message("yes", message_id=3))

    assert response.replies[0].text == f"{messages.ACCESS_REVOKED} @John (2002)."
    assert owned_acl.is_revoked(2002)
    assert owned_acl.is_allowed(2001)
    assert owned_acl.is_allowed(2003)


@pytest.mark.asyncio
async def test_owner_is_not_offered_for_revoke(session_manager, acl, catalog, make_message, user):
    router = MessageRouter(session_manager, acl, catalog)
    await router.route(make_message(f"/auth {PASSWORD}"))

    response = await router.route(make_message("/revoke"))
    assert response.replies[0].text == messages.NO_ALLOWED_USERS

    acl.authorize(user(BOB_ID, "bob"), PASSWORD)
    response = await router.route(make_message("/revoke"))
    assert response.replies[0].keyboard == [["bob"]]


@pytest.mark.asyncio
async def test_owner_keeps_access_after_revoking_others(session_manager, acl, catalog, make_message, user):
    router = MessageRouter(session_manager, acl, catalog)
    await router.route(make_message(f"/auth {PASSWORD}"))
    acl.authorize(user(BOB_ID, "bob"), PASSWORD)

    await router.route(make_message("/revoke"))
    await router.route(make_message("bob", message_id=2))
    await router.route(make_message("yes", message_id=3))
    catalog.search_movies.return_value = []
    response = await router.route(make_message("/q Heat", message_id=4))

    assert acl.is_revoked(BOB_ID)
    assert not acl.is_revoked(ALICE_ID)
    assert "Could not find Heat" in response.replies[0].text
