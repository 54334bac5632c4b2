"""Base agent — abstract interface every conversation agent implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from couchpotato_bot.models.telegram import Message
from couchpotato_bot.services.session_manager import ConversationState, Session


@dataclass
class Reply:
    """One outgoing Telegram message.

    ``keyboard`` is a list of rows of button labels, shown as a one-time
    custom reply keyboard.  Without a keyboard any previous one is removed,
    unless ``force_reply`` asks the client to open a reply to this message.
    """

    chat_id: int
    text: str
    keyboard: list[list[str]] | None = None
    force_reply: bool = False
    selective: bool = False
    reply_to_message_id: int | None = None


@dataclass
class AgentResponse:
    """Value object returned by an agent after processing a message."""

    replies: list[Reply] = field(default_factory=list)

    @classmethod
    def text(cls, chat_id: int, text: str) -> AgentResponse:
        return cls(replies=[Reply(chat_id=chat_id, text=text)])

    def extend(self, other: AgentResponse) -> AgentResponse:
        self.replies.extend(other.replies)
        return self


class BaseAgent(ABC):
    """Abstract base class for the agents driving multi-step conversations.

    An agent owns a set of :class:`ConversationState` values.  When a user
    sends free text while their session is in one of those states, the
    message router hands the message and the session to :meth:`handle`.
    """

    #: States whose free-text replies this agent handles.
    states: frozenset[ConversationState] = frozenset()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable agent name (used in logs and routing)."""

    @abstractmethod
    async def handle(self, message: Message, session: Session) -> AgentResponse:
        """Process a free-text reply and return the messages to send.

        Parameters
        ----------
        message:
            The Telegram message the user sent.
        session:
            The user's current session.  Agents never mutate it; they save
            a new record through the session manager.
        """
