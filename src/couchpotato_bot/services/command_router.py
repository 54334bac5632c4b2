"""Command router — maps slash commands to handlers and access levels."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from couchpotato_bot import messages
from couchpotato_bot.agents.admin_agent import AdminAgent
from couchpotato_bot.agents.base import AgentResponse, Reply
from couchpotato_bot.agents.movie_agent import MovieAgent
from couchpotato_bot.errors import AdminOnly, BotError, NotAuthorized, WrongPassword
from couchpotato_bot.models.telegram import Message
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.session_manager import SessionManager
from couchpotato_bot.utils.formatters import format_help_text

logger = logging.getLogger(__name__)

# "/q@MyBot Inception" → "/q Inception"
_BOT_MENTION = re.compile(r"^(/\w+)@\w+")

Handler = Callable[[Message, re.Match[str]], Awaitable[AgentResponse]]


class Access(str, Enum):
    NONE = "none"
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Command:
    name: str
    pattern: re.Pattern[str]
    access: Access
    handler: Handler


class CommandRouter:
    """Dispatches ``/command`` messages after checking the caller's access."""

    def __init__(
        self,
        acl: AccessControlStore,
        session_manager: SessionManager,
        movie_agent: MovieAgent,
        admin_agent: AdminAgent,
    ) -> None:
        self._acl = acl
        self._sessions = session_manager
        self._movies = movie_agent
        self._admin = admin_agent
        self._commands = [
            self._command("start", r"/start(?:\s+.*)?", Access.NONE, self._start),
            self._command("auth", r"/auth(?:\s+(?P<arg>.+))?", Access.NONE, self._auth),
            self._command("help", r"/help", Access.USER, self._help),
            self._command("q", r"/[Qq](?:uery)?(?:\s+(?P<arg>.+))?", Access.USER, self._query),
            self._command("library", r"/library(?:\s+(?P<arg>.+))?", Access.USER, self._library),
            self._command("clear", r"/clear", Access.USER, self._clear),
            self._command("wanted", r"/wanted", Access.ADMIN, self._wanted),
            self._command("users", r"/users", Access.ADMIN, self._users),
            self._command("revoke", r"/revoke", Access.ADMIN, self._revoke),
            self._command("unrevoke", r"/unrevoke", Access.ADMIN, self._unrevoke),
        ]

    @staticmethod
    def _command(name: str, pattern: str, access: Access, handler: Handler) -> Command:
        return Command(name, re.compile(pattern, re.DOTALL), access, handler)

    async def dispatch(self, message: Message) -> AgentResponse:
        """Run the command in *message*, or raise a :class:`BotError`."""
        text = _BOT_MENTION.sub(r"\1", (message.text or "").strip())
        user_id = message.from_user.id

        for command in self._commands:
            match = command.pattern.fullmatch(text)
            if match is None:
                continue
            self._check_access(user_id, command.access)
            logger.info("user: %s, message: sent `/%s` command", user_id, command.name)
            return await command.handler(message, match)

        if not self._acl.has_access(user_id):
            raise NotAuthorized()
        raise BotError(messages.UNKNOWN_COMMAND)

    def _check_access(self, user_id: int, access: Access) -> None:
        if access is Access.NONE:
            return
        if not self._acl.has_access(user_id):
            raise NotAuthorized()
        if access is Access.ADMIN and not self._acl.is_owner(user_id):
            raise AdminOnly()

    # ── Handlers ─────────────────────────────────────────

    async def _start(self, message: Message, match: re.Match[str]) -> AgentResponse:
        user = message.from_user
        lines = [f"Hello @{user.display_name}!", "\n`/help` to continue..."]
        if not self._acl.has_access(user.id):
            lines.append(messages.NOT_AUTHORIZED)
        return AgentResponse.text(message.chat.id, "\n".join(lines))

    async def _help(self, message: Message, match: re.Match[str]) -> AgentResponse:
        user = message.from_user
        text = format_help_text(user.display_name, is_admin=self._acl.is_owner(user.id))
        return AgentResponse.text(message.chat.id, text)

    async def _query(self, message: Message, match: re.Match[str]) -> AgentResponse:
        movie_name = (match.group("arg") or "").strip()
        if movie_name:
            return await self._movies.search(message, movie_name)
        return self._movies.prompt_search(message)

    async def _library(self, message: Message, match: re.Match[str]) -> AgentResponse:
        query = (match.group("arg") or "").strip() or None
        return await self._movies.library(message, query)

    async def _clear(self, message: Message, match: re.Match[str]) -> AgentResponse:
        self._sessions.clear(message.from_user.id)
        return AgentResponse.text(message.chat.id, messages.CLEAR)

    async def _auth(self, message: Message, match: re.Match[str]) -> AgentResponse:
        user = message.from_user
        password = match.group("arg")
        if not password:
            raise WrongPassword()

        claimed_owner = self._acl.authorize(user, password.strip())
        response = AgentResponse.text(message.chat.id, messages.IS_AUTHORIZED)

        if claimed_owner:
            response.replies.append(
                Reply(
                    chat_id=user.id,
                    text=f"{messages.YOUR_USER_ID}: {user.id}\n{messages.OWNER_CLAIMED}",
                )
            )

        owner_id = self._acl.owner_id
        if owner_id is not None and owner_id != user.id:
            response.replies.append(
                Reply(chat_id=owner_id, text=f"{user.display_name}{messages.USER_AUTHORIZED}")
            )
        return response

    async def _wanted(self, message: Message, match: re.Match[str]) -> AgentResponse:
        return await self._movies.wanted(message)

    async def _users(self, message: Message, match: re.Match[str]) -> AgentResponse:
        return self._admin.list_users(message)

    async def _revoke(self, message: Message, match: re.Match[str]) -> AgentResponse:
        return self._admin.start_revoke(message)

    async def _unrevoke(self, message: Message, match: re.Match[str]) -> AgentResponse:
        return self._admin.start_unrevoke(message)
