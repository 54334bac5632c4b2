"""Long-polling entry point — runs the bot without a public webhook."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import httpx

from couchpotato_bot.bot import Bot, build_bot
from couchpotato_bot.config import settings

logger = logging.getLogger(__name__)

# Back-off after a failed getUpdates call, in seconds
RETRY_DELAY_SECONDS = 5


async def poll(bot: Bot, timeout: int) -> None:
    """Fetch and process updates forever.

    Updates are handled one at a time.  ``PersistenceFailure`` is not
    caught, so a failed ACL write stops the process.
    """
    offset: int | None = None
    while True:
        try:
            updates = await bot.telegram.get_updates(offset, timeout=timeout)
        except httpx.HTTPError as exc:
            logger.error("getUpdates failed: %s", exc)
            await asyncio.sleep(RETRY_DELAY_SECONDS)
            continue

        for update in updates:
            offset = update.update_id + 1
            await bot.process(update)


async def run() -> None:
    bot = build_bot()
    await bot.startup()
    if not bot.telegram.configured:
        raise SystemExit("TELEGRAM_BOT_TOKEN must be set for polling mode")

    sweeper = asyncio.create_task(
        bot.session_manager.run_sweeper(settings.session_check_period_seconds)
    )
    try:
        await poll(bot, settings.polling_timeout_seconds)
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    logger.info("Starting %s in polling mode …", settings.app_name)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Shutting down %s …", settings.app_name)


if __name__ == "__main__":
    main()
