"""Bot wiring — builds the shared services and processes Telegram updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from couchpotato_bot.config import Settings, settings
from couchpotato_bot.models.telegram import Update
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.catalog_api import CouchPotatoAPI
from couchpotato_bot.services.message_router import MessageRouter
from couchpotato_bot.services.session_manager import SessionManager
from couchpotato_bot.services.telegram_api import TelegramAPI

logger = logging.getLogger(__name__)


@dataclass
class Bot:
    """The services one bot process shares across all updates."""

    session_manager: SessionManager
    acl: AccessControlStore
    telegram: TelegramAPI
    router: MessageRouter

    async def startup(self) -> None:
        """Load the access list and log which bot account we are running as."""
        self.acl.load()
        if not self.telegram.configured:
            logger.warning("TELEGRAM_BOT_TOKEN not set — replies will only be logged")
            return
        try:
            me = await self.telegram.get_me()
        except httpx.HTTPError as exc:
            logger.error("Could not reach the Telegram Bot API: %s", exc)
            return
        logger.info("couchpotato bot %s initialized", me.display_name)

    async def process(self, update: Update) -> None:
        """Route one update and deliver every reply it produced."""
        message = update.message
        if message is None or message.from_user is None:
            logger.debug("Received non-message update %s, ignoring", update.update_id)
            return

        logger.info("Message from %s: %s", message.from_user.id, (message.text or "")[:80])
        response = await self.router.route(message)
        for reply in response.replies:
            await self.telegram.send(reply)


def build_bot(config: Settings = settings) -> Bot:
    session_manager = SessionManager(ttl=config.session_ttl_seconds)
    acl = AccessControlStore(config.acl_file, config.bot_password, config.bot_owner)
    catalog = CouchPotatoAPI(
        base_url=config.couchpotato_base_url,
        username=config.couchpotato_username,
        password=config.couchpotato_password,
    )
    telegram = TelegramAPI(token=config.telegram_bot_token, base_url=config.telegram_api_base_url)
    router = MessageRouter(session_manager, acl, catalog)
    return Bot(session_manager=session_manager, acl=acl, telegram=telegram, router=router)
