"""Pydantic models for the subset of the Telegram Bot API the bot consumes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    """A Telegram user as reported in ``message.from``.

    Unknown profile fields (``language_code``, ``is_premium`` …) are kept
    so the access control list stores whatever Telegram reported.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None

    @property
    def display_name(self) -> str:
        """``username``, falling back to the full name, then the numeric id."""
        if self.username:
            return self.username
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or str(self.id)


class Chat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: str = "private"


class Message(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    from_user: TelegramUser | None = Field(default=None, alias="from")
    chat: Chat
    text: str | None = None


class Update(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Message | None = None
