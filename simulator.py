"""Interactive CLI chat simulator — test the bot flows without Telegram."""

import asyncio
import itertools
import tempfile
from pathlib import Path

import httpx
from fastapi import FastAPI

from couchpotato_bot.mock_catalog.router import MOCK_URL_BASE
from couchpotato_bot.mock_catalog.router import router as mock_catalog_router
from couchpotato_bot.models.telegram import Chat, Message, TelegramUser
from couchpotato_bot.services.acl_store import AccessControlStore
from couchpotato_bot.services.catalog_api import CouchPotatoAPI
from couchpotato_bot.services.message_router import MessageRouter
from couchpotato_bot.services.session_manager import SessionManager

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

PASSWORD = "letmein"


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print("  🎬  CouchPotato Bot — Chat Simulator")
    print(f"{'=' * 52}{RESET}\n")

    print(f"{DIM}Tip: authorize with /auth {PASSWORD}, then try /q Inception{RESET}")
    print(f"{DIM}     Type 'quit' to exit, 'switch' to change user id{RESET}\n")

    user_id = int(input(f"{YELLOW}Enter Telegram user id to simulate: {RESET}").strip() or "1001")
    print(f"{DIM}Simulating as {user_id}{RESET}\n")

    # ── Mock CouchPotato, served in-process ──────────────
    mock_app = FastAPI()
    mock_app.include_router(mock_catalog_router)
    catalog = CouchPotatoAPI(
        base_url=f"http://mock{MOCK_URL_BASE}/api/simulator",
        username="",
        transport=httpx.ASGITransport(app=mock_app),
    )

    # ── Set up the framework ─────────────────────────────
    acl_file = Path(tempfile.mkdtemp()) / "acl.json"
    acl = AccessControlStore(acl_file, PASSWORD)
    acl.load()
    session_manager = SessionManager()
    router = MessageRouter(session_manager, acl, catalog)
    message_ids = itertools.count(1)

    while True:
        try:
            user_input = input(f"{BLUE}{BOLD}You:{RESET} ").strip()
        except (KeyboardInterrupt, EOFError):
            print(f"\n{DIM}Goodbye!{RESET}")
            break

        if not user_input:
            continue

        if user_input.lower() == "quit":
            print(f"{DIM}Goodbye!{RESET}")
            break

        if user_input.lower() == "switch":
            user_id = int(input(f"{YELLOW}New user id: {RESET}").strip())
            print(f"{DIM}Switched to {user_id}{RESET}\n")
            continue

        # ── Route the message through the framework ──────
        message = Message(
            message_id=next(message_ids),
            from_user=TelegramUser(id=user_id, first_name=f"User {user_id}"),
            chat=Chat(id=user_id),
            text=user_input,
        )
        response = await router.route(message)

        for reply in response.replies:
            target = "" if reply.chat_id == user_id else f" {DIM}(to {reply.chat_id}){RESET}"
            print(f"{GREEN}{BOLD}Bot:{RESET}{target} {reply.text}")
            if reply.keyboard:
                for row in reply.keyboard:
                    print(f"  {CYAN}{' | '.join(f'[{label}]' for label in row)}{RESET}")
        print()


if __name__ == "__main__":
    asyncio.run(main())
