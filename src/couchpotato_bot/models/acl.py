"""On-disk layout of the access control list."""

from pydantic import BaseModel, Field

from couchpotato_bot.models.telegram import TelegramUser


class AccessList(BaseModel):
    """The whole ACL file, rewritten in full on every mutation."""

    allowed_users: list[TelegramUser] = Field(default_factory=list)
    revoked_users: list[TelegramUser] = Field(default_factory=list)
    owner: int | None = None
