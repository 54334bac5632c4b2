"""Admin agent — list users and revoke / restore their access."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from couchpotato_bot import messages
from couchpotato_bot.agents.base import AgentResponse, BaseAgent, Reply
from couchpotato_bot.errors import BotError, SelectionNotFound
from couchpotato_bot.models.telegram import Message, TelegramUser
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.session_manager import (
    ConversationState,
    Session,
    SessionManager,
    UserChoice,
)
from couchpotato_bot.utils.formatters import bold, build_keyboard, confirm_keyboard, numbered

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _AccessFlow:
    """The parts that differ between the revoke and unrevoke conversations."""

    verb: str
    target_state: ConversationState
    confirm_state: ConversationState
    list_title: str
    empty_message: str
    confirm_question: str
    done_message: str
    cancelled_message: str


REVOKE = _AccessFlow(
    verb="revoke",
    target_state=ConversationState.REVOKE_TARGET_PENDING,
    confirm_state=ConversationState.REVOKE_CONFIRM_PENDING,
    list_title=messages.ALLOWED_USERS,
    empty_message=messages.NO_ALLOWED_USERS,
    confirm_question=messages.REVOKE_CONFIRM,
    done_message=messages.ACCESS_REVOKED,
    cancelled_message=messages.ACCESS_NOT_REVOKED,
)

UNREVOKE = _AccessFlow(
    verb="unrevoke",
    target_state=ConversationState.UNREVOKE_TARGET_PENDING,
    confirm_state=ConversationState.UNREVOKE_CONFIRM_PENDING,
    list_title=messages.REVOKED_USERS,
    empty_message=messages.NO_REVOKED_USERS,
    confirm_question=messages.UNREVOKE_CONFIRM,
    done_message=messages.ACCESS_UNREVOKED,
    cancelled_message=messages.ACCESS_NOT_UNREVOKED,
)

_FLOWS_BY_STATE = {
    state: flow
    for flow in (REVOKE, UNREVOKE)
    for state in (flow.target_state, flow.confirm_state)
}


def _button_labels(users: tuple[TelegramUser, ...]) -> list[str]:
    """Display names, with the id appended where two users share one."""
    names = [user.display_name for user in users]
    return [
        f"{name} ({user.id})" if names.count(name) > 1 else name
        for user, name in zip(users, names)
    ]


class AdminAgent(BaseAgent):
    """Owner-only conversations over the access control list.

    Flow
    ----
    1. ``/revoke`` lists the allowed users with a keyboard of their names.
    2. Picking a name asks for confirmation (``NO`` / ``yes``).
    3. ``yes`` moves the user to the revoked list; anything else cancels.

    ``/unrevoke`` is the same conversation over the revoked list.
    """

    states = frozenset(_FLOWS_BY_STATE)

    def __init__(self, acl: AccessControlStore, session_manager: SessionManager) -> None:
        self._acl = acl
        self._sessions = session_manager

    @property
    def name(self) -> str:
        return "AdminAgent"

    async def handle(self, message: Message, session: Session) -> AgentResponse:
        flow = _FLOWS_BY_STATE[session.state]
        if session.state is flow.target_state:
            return self._handle_target(message, session, flow)
        return self._handle_confirm(message, session, flow)

    # ── Entry points used by commands ────────────────────

    def list_users(self, message: Message) -> AgentResponse:
        lines = [bold(f"{messages.ALLOWED_USERS}:")]
        lines.extend(
            numbered(position, user.display_name)
            for position, user in enumerate(self._acl.allowed_users, 1)
        )
        return AgentResponse.text(message.chat.id, "\n".join(lines))

    def start_revoke(self, message: Message) -> AgentResponse:
        # The owner cannot lock themselves out
        users = tuple(u for u in self._acl.allowed_users if not self._acl.is_owner(u.id))
        return self._start(message, REVOKE, users)

    def start_unrevoke(self, message: Message) -> AgentResponse:
        return self._start(message, UNREVOKE, self._acl.revoked_users)

    # ── Private helpers ──────────────────────────────────

    def _start(
        self, message: Message, flow: _AccessFlow, users: tuple[TelegramUser, ...]
    ) -> AgentResponse:
        if not users:
            return AgentResponse.text(message.chat.id, flow.empty_message)

        candidates = tuple(
            UserChoice(id=position, user_id=user.id, keyboard_value=label)
            for position, (user, label) in enumerate(zip(users, _button_labels(users)), 1)
        )
        lines = [bold(f"{flow.list_title}:")]
        lines.extend(numbered(c.id, c.keyboard_value) for c in candidates)
        lines.append(messages.SELECT_FROM_MENU)

        user_id = message.from_user.id
        self._sessions.save(Session(user_id=user_id, state=flow.target_state, candidates=candidates))
        logger.info("user: %s, message: started %s with %d candidates", user_id, flow.verb, len(candidates))
        return AgentResponse(
            replies=[
                Reply(
                    chat_id=message.chat.id,
                    text="\n".join(lines),
                    keyboard=build_keyboard([c.keyboard_value for c in candidates], per_row=2),
                )
            ]
        )

    def _handle_target(self, message: Message, session: Session, flow: _AccessFlow) -> AgentResponse:
        label = message.text or ""
        target = next((c for c in session.candidates if c.keyboard_value == label), None)
        if target is None:
            raise SelectionNotFound(f'{messages.USER_SELECTION_NOT_FOUND} "{label}".')

        logger.info("user: %s, message: selected %s user %s", session.user_id, flow.verb, label)
        self._sessions.save(
            session.evolve(state=flow.confirm_state, target_name=label, target_id=target.user_id)
        )
        return AgentResponse(
            replies=[
                Reply(
                    chat_id=message.chat.id,
                    text=f"{flow.confirm_question} @{label}?",
                    keyboard=confirm_keyboard(),
                    force_reply=True,
                    selective=True,
                    reply_to_message_id=message.message_id,
                )
            ]
        )

    def _handle_confirm(self, message: Message, session: Session, flow: _AccessFlow) -> AgentResponse:
        answer = (message.text or "").strip()
        name = session.target_name
        logger.info("user: %s, message: selected %s confirmation %s", session.user_id, flow.verb, answer)

        try:
            if session.target_id is None:
                raise BotError(messages.USER_NOT_FOUND)

            if answer.lower() != "yes":
                return AgentResponse.text(message.chat.id, f"{flow.cancelled_message} @{name}.")

            if flow is REVOKE:
                self._acl.revoke(session.target_id)
            else:
                self._acl.unrevoke(session.target_id)
        finally:
            self._sessions.clear(session.user_id)

        return AgentResponse.text(message.chat.id, f"{flow.done_message} @{name}.")
