"""Tests for the Telegram webhook endpoint."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from couchpotato_bot.webhook import handler

UPDATE = {
    "update_id": 10000,
    "message": {
        "message_id": 1,
        "from": {"id": 1001, "is_bot": False, "first_name": "Alice", "username": "alice"},
        "chat": {"id": 1001, "type": "private"},
        "text": "/q Inception",
    },
}


class RecordingBot:
    def __init__(self) -> None:
        self.updates = []

    async def process(self, update) -> None:
        self.updates.append(update)


@pytest.fixture
def bot(monkeypatch) -> RecordingBot:
    fake = RecordingBot()
    monkeypatch.setattr(handler, "bot", fake)
    monkeypatch.setattr(handler.settings, "telegram_webhook_secret", "")
    return fake


@pytest.fixture
def client(bot) -> TestClient:
    app = FastAPI()
    app.include_router(handler.router)
    return TestClient(app)


def test_update_is_processed(client, bot):
    resp = client.post("/webhook", json=UPDATE)

    assert resp.status_code == 200
    assert len(bot.updates) == 1
    message = bot.updates[0].message
    assert message.from_user.id == 1001
    assert message.text == "/q Inception"


def test_unparseable_update_is_acknowledged(client, bot):
    resp = client.post("/webhook", json={"hello": "world"})

    assert resp.status_code == 200
    assert bot.updates == []


def test_bad_secret_token_is_rejected(client, bot, monkeypatch):
    monkeypatch.setattr(handler.settings, "telegram_webhook_secret", "s3cret")

    resp = client.post("/webhook", json=UPDATE, headers={"X-Telegram-Bot-Api-Secret-Token": "nope"})

    assert resp.status_code == 403
    assert bot.updates == []


def test_matching_secret_token_is_accepted(client, bot, monkeypatch):
    monkeypatch.setattr(handler.settings, "telegram_webhook_secret", "s3cret")

    resp = client.post("/webhook", json=UPDATE, headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"})

    assert resp.status_code == 200
    assert len(bot.updates) == 1
