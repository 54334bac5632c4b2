"""Telegram Bot API — async HTTP client for sending messages and polling."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from couchpotato_bot.agents.base import Reply
from couchpotato_bot.config import settings
from couchpotato_bot.models.telegram import TelegramUser, Update

logger = logging.getLogger(__name__)


def build_reply_markup(reply: Reply) -> dict[str, Any]:
    """Translate a :class:`Reply` into Telegram's ``reply_markup`` object."""
    if reply.keyboard:
        return {
            "keyboard": reply.keyboard,
            "one_time_keyboard": True,
            "selective": reply.selective,
        }
    if reply.force_reply:
        return {"force_reply": True, "selective": reply.selective}
    return {"remove_keyboard": True}


class TelegramAPI:
    """Async HTTP wrapper around the Telegram Bot API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = settings.telegram_bot_token if token is None else token
        self._base_url = (base_url or settings.telegram_api_base_url).rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._token)

    async def send(self, reply: Reply) -> None:
        """Send *reply*; delivery failures are logged, never raised."""
        if not self._token:
            logger.warning("TELEGRAM_BOT_TOKEN not set — reply logged only: %s", reply.text)
            return

        payload: dict[str, Any] = {
            "chat_id": reply.chat_id,
            "text": reply.text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
            "disable_notification": True,
            "reply_markup": build_reply_markup(reply),
        }
        if reply.reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply.reply_to_message_id

        try:
            resp = await self._call("sendMessage", payload)
        except httpx.HTTPError as exc:
            logger.error("Failed to send reply to %s: %s", reply.chat_id, exc)
            return

        if resp.status_code == 200:
            logger.info("Reply sent to %s", reply.chat_id)
        else:
            logger.error(
                "Failed to send reply to %s: %s %s", reply.chat_id, resp.status_code, resp.text
            )

    async def get_me(self) -> TelegramUser:
        """Return the bot's own user; raises ``httpx.HTTPError`` on failure."""
        resp = await self._call("getMe", {})
        resp.raise_for_status()
        return TelegramUser.model_validate(resp.json()["result"])

    async def get_updates(self, offset: int | None, timeout: int) -> list[Update]:
        """Long-poll for new updates after *offset*."""
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        resp = await self._call("getUpdates", payload, read_timeout=timeout + 10)
        resp.raise_for_status()
        return [Update.model_validate(raw) for raw in resp.json().get("result", [])]

    async def _call(
        self, method: str, payload: dict[str, Any], read_timeout: float | None = None
    ) -> httpx.Response:
        url = f"{self._base_url}/bot{self._token}/{method}"
        timeout = httpx.Timeout(5.0, read=read_timeout) if read_timeout else httpx.Timeout(5.0)
        async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
            return await client.post(url, json=payload)
