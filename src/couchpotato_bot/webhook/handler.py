"""Telegram webhook handler — receives updates and replies to them."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Header, Response
from pydantic import ValidationError

from couchpotato_bot.bot import build_bot
from couchpotato_bot.config import settings
from couchpotato_bot.models.telegram import Update

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])

# ── Shared bot (created once, reused across requests) ──
bot = build_bot()


# ──────────────────────────────────────────────────────────────
# POST /webhook — Incoming updates
# ──────────────────────────────────────────────────────────────
@router.post("/webhook")
async def receive_update(
    payload: dict,
    secret_token: str | None = Header(None, alias="X-Telegram-Bot-Api-Secret-Token"),
) -> Response:
    """Process an incoming Telegram update.

    Expected payload structure (simplified)::

        {
          "update_id": 10000,
          "message": {
            "message_id": 1,
            "from": {"id": 42, "first_name": "Ann", "username": "ann"},
            "chat": {"id": 42, "type": "private"},
            "text": "/q Inception"
          }
        }

    A failure to persist the access control list is not caught here: it
    surfaces as a 500 so Telegram keeps the update and the failure is loud.
    """
    expected = settings.telegram_webhook_secret
    if expected and not secrets.compare_digest(secret_token or "", expected):
        logger.warning("Webhook call rejected (bad secret token)")
        return Response(content="Forbidden", status_code=403)

    try:
        update = Update.model_validate(payload)
    except ValidationError:
        logger.debug("Received unparseable update, ignoring")
        return Response(status_code=200)

    await bot.process(update)
    return Response(status_code=200)
