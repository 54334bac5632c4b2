"""Message router — dispatches incoming messages to commands or agents."""

from __future__ import annotations

import logging

from couchpotato_bot import messages
from couchpotato_bot.agents.admin_agent import AdminAgent
from couchpotato_bot.agents.base import AgentResponse, BaseAgent, Reply
from couchpotato_bot.agents.movie_agent import MovieAgent
from couchpotato_bot.errors import AdminOnly, BotError, NoActiveFlow, NotAuthorized
from couchpotato_bot.models.telegram import Message
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.catalog_api import CouchPotatoAPI
from couchpotato_bot.services.command_router import CommandRouter
from couchpotato_bot.services.session_manager import SessionManager
from couchpotato_bot.utils.formatters import format_error

logger = logging.getLogger(__name__)


class MessageRouter:
    """Central router that decides who handles a message.

    Routing logic
    -------------
    * Text starting with ``/`` → ``CommandRouter``
    * Any other text → the agent owning the user's session state
    * No session state → ``NoActiveFlow``

    Every :class:`BotError` raised along the way becomes one error reply to
    the originating chat.  Other exceptions propagate to the caller.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        acl: AccessControlStore,
        catalog: CouchPotatoAPI,
    ) -> None:
        self._session_manager = session_manager
        self._acl = acl
        movie_agent = MovieAgent(catalog, session_manager)
        admin_agent = AdminAgent(acl, session_manager)
        self._agents: list[BaseAgent] = [movie_agent, admin_agent]
        self._admin_agent = admin_agent
        self._commands = CommandRouter(acl, session_manager, movie_agent, admin_agent)

    async def route(self, message: Message) -> AgentResponse:
        """Handle one incoming Telegram message and return the replies to send."""
        user = message.from_user
        if user is None or message.text is None:
            logger.debug("Ignoring message %s without sender or text", message.message_id)
            return AgentResponse()

        try:
            if message.text.startswith("/"):
                return await self._commands.dispatch(message)
            return await self._route_free_text(message)
        except BotError as exc:
            logger.warning("user: %s, message: %s", user.id, exc)
            return self._error_response(message, exc)

    async def _route_free_text(self, message: Message) -> AgentResponse:
        user_id = message.from_user.id
        if not self._acl.has_access(user_id):
            raise NotAuthorized()

        session = self._session_manager.get(user_id)
        if session.is_idle:
            raise NoActiveFlow()

        agent = next((a for a in self._agents if session.state in a.states), None)
        if agent is None:
            self._session_manager.clear(user_id)
            raise NoActiveFlow()

        if agent is self._admin_agent and not self._acl.is_owner(user_id):
            raise AdminOnly()

        logger.info("Routing %s (%s) → %s", user_id, session.state.value, agent.name)
        return await agent.handle(message, session)

    def _error_response(self, message: Message, exc: BotError) -> AgentResponse:
        user_id = message.from_user.id
        response = AgentResponse.text(message.chat.id, format_error(str(exc)))

        # A fresh deployment has no owner yet: tell authorized users their id
        # so one of them can be configured as BOT_OWNER.
        if isinstance(exc, AdminOnly) and self._acl.owner_id is None and self._acl.is_allowed(user_id):
            response.replies.append(
                Reply(
                    chat_id=user_id,
                    text=f"{messages.YOUR_USER_ID}: {user_id}\n{messages.OWNER_CONFIG}",
                )
            )
        return response
