"""Exceptions raised by the bot's handlers and stores.

Everything deriving from :class:`BotError` is turned into a single error
reply to the originating chat by the message router.
:class:`PersistenceFailure` is deliberately *not* a ``BotError``: it must
reach the process boundary instead of becoming a chat message.
"""

from __future__ import annotations

from couchpotato_bot import messages


class BotError(Exception):
    """A user-facing failure; ``str(exc)`` is the text shown in the chat."""

    default_message = messages.UNKNOWN_ERROR

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotAuthorized(BotError):
    default_message = messages.NOT_AUTHORIZED


class AdminOnly(BotError):
    default_message = messages.ADMIN_ONLY


class AlreadyAuthorized(BotError):
    default_message = messages.ALREADY_AUTHORIZED


class Banned(BotError):
    default_message = messages.IS_REVOKED


class WrongPassword(BotError):
    default_message = messages.INVALID_PASSWORD


class NoActiveFlow(BotError):
    default_message = messages.NO_STATE


class SelectionNotFound(BotError):
    pass


class UpstreamError(BotError):
    default_message = messages.UPSTREAM_ERROR


class NoResults(BotError):
    pass


class UserNotFound(BotError):
    default_message = messages.USER_NOT_FOUND


class OwnerProtected(BotError):
    default_message = messages.OWNER_PROTECTED


class PersistenceFailure(RuntimeError):
    """The access control list could not be read or written."""
