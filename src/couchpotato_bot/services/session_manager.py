"""Session manager — tracks per-user conversation state."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# Session validity period in seconds
DEFAULT_TTL_SECONDS = 120
DEFAULT_MAX_SESSIONS = 10_000


class ConversationState(str, Enum):
    """What kind of free-text reply the bot is waiting for."""

    NONE = "none"
    SEARCH_PENDING = "search_pending"
    MOVIE_SELECTION_PENDING = "movie_selection_pending"
    PROFILE_SELECTION_PENDING = "profile_selection_pending"
    REVOKE_TARGET_PENDING = "revoke_target_pending"
    REVOKE_CONFIRM_PENDING = "revoke_confirm_pending"
    UNREVOKE_TARGET_PENDING = "unrevoke_target_pending"
    UNREVOKE_CONFIRM_PENDING = "unrevoke_confirm_pending"


@dataclass(frozen=True)
class MovieChoice:
    """One search result, as offered on the custom keyboard."""

    id: int
    title: str
    year: str
    rating: str
    movie_id: str
    thumb: str
    runtime: str
    via_imdb: bool
    keyboard_value: str


@dataclass(frozen=True)
class ProfileChoice:
    id: int
    label: str
    profile_id: str


@dataclass(frozen=True)
class UserChoice:
    id: int
    user_id: int
    keyboard_value: str


@dataclass(frozen=True)
class Session:
    """State plus scratch data for one user.

    Sessions are immutable: every transition builds a new record with
    :meth:`evolve` and saves it whole, so related fields (the movie list
    and the chosen movie, say) can never be half-updated.
    """

    user_id: int
    state: ConversationState = ConversationState.NONE
    movies: tuple[MovieChoice, ...] = field(default_factory=tuple)
    selected_movie: MovieChoice | None = None
    profiles: tuple[ProfileChoice, ...] = field(default_factory=tuple)
    candidates: tuple[UserChoice, ...] = field(default_factory=tuple)
    target_name: str | None = None
    target_id: int | None = None

    @property
    def is_idle(self) -> bool:
        return self.state is ConversationState.NONE

    def evolve(self, **changes) -> Session:
        return replace(self, **changes)


class SessionManager:
    """In-memory session store keyed by the sender's Telegram user id.

    Records expire ``ttl`` seconds after their last save.  An expired or
    missing record reads back as a fresh idle session.  When ``maxsize``
    users hold a session, saving a new one evicts the least recently used.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        maxsize: int = DEFAULT_MAX_SESSIONS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def get(self, user_id: int) -> Session:
        """Retrieve the live session for *user_id*, or an idle one."""
        session = self._cache.get(user_id)
        if session is None:
            return Session(user_id=user_id)
        return session

    def save(self, session: Session) -> None:
        """Replace the user's record and restart its expiry window."""
        self._cache[session.user_id] = session
        logger.debug("user: %s, message: session state is now %s", session.user_id, session.state.value)

    def clear(self, user_id: int) -> None:
        """Remove a session (e.g. on /clear or once a flow completes)."""
        self._cache.pop(user_id, None)
        logger.info("Session cleared for %s", user_id)

    def sweep(self) -> int:
        """Drop expired sessions now; returns how many were removed."""
        return len(self._cache.expire())

    @property
    def active_count(self) -> int:
        """Number of stored sessions (useful for monitoring)."""
        return self._cache.currsize

    async def run_sweeper(self, period: float) -> None:
        """Reclaim expired sessions every *period* seconds until cancelled."""
        while True:
            await asyncio.sleep(period)
            removed = self.sweep()
            if removed:
                logger.info("Reclaimed %d expired sessions", removed)
