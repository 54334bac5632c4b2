"""Movie agent — search → pick a movie → pick a quality profile → add."""

from __future__ import annotations

import logging

from couchpotato_bot import messages
from couchpotato_bot.agents.base import AgentResponse, BaseAgent, Reply
from couchpotato_bot.errors import BotError, NoResults, SelectionNotFound, UpstreamError
from couchpotato_bot.models.telegram import Message
from couchpotato_bot.services.catalog_api import CatalogMovie, CouchPotatoAPI, movie_url
from couchpotato_bot.services.session_manager import (
    ConversationState,
    MovieChoice,
    ProfileChoice,
    Session,
    SessionManager,
)
from couchpotato_bot.utils.formatters import (
    bold,
    build_keyboard,
    chunk,
    italic,
    link,
    numbered,
)

logger = logging.getLogger(__name__)

# Telegram rejects very long messages, so library listings are split
LIBRARY_BATCH_SIZE = 50


class MovieAgent(BaseAgent):
    """Drives the movie request conversation.

    Flow
    ----
    1. ``/q`` without a title asks for one (``SEARCH_PENDING``); ``/q <title>``
       searches straight away.
    2. The results are listed with a one-movie-per-row keyboard
       (``MOVIE_SELECTION_PENDING``).
    3. Picking a movie checks the library for a duplicate, then offers the
       enabled quality profiles (``PROFILE_SELECTION_PENDING``).
    4. Picking a profile adds the movie and ends the conversation.
    """

    states = frozenset(
        {
            ConversationState.SEARCH_PENDING,
            ConversationState.MOVIE_SELECTION_PENDING,
            ConversationState.PROFILE_SELECTION_PENDING,
        }
    )

    def __init__(self, catalog: CouchPotatoAPI, session_manager: SessionManager) -> None:
        self._catalog = catalog
        self._sessions = session_manager

    @property
    def name(self) -> str:
        return "MovieAgent"

    async def handle(self, message: Message, session: Session) -> AgentResponse:
        """Route to the appropriate step based on session state."""
        text = message.text or ""

        if session.state is ConversationState.SEARCH_PENDING:
            if not text.strip():
                return self.prompt_search(message)
            logger.info("user: %s, message: entered the movie name: %s", session.user_id, text)
            return await self.search(message, text.strip())

        if session.state is ConversationState.MOVIE_SELECTION_PENDING:
            logger.info("user: %s, message: choose the movie %s", session.user_id, text)
            return await self._handle_movie(message, session)

        logger.info("user: %s, message: choose the profile \"%s\"", session.user_id, text)
        return await self._handle_profile(message, session)

    # ── Entry points used by commands ────────────────────

    def prompt_search(self, message: Message) -> AgentResponse:
        """Ask for a movie title and wait for it."""
        user_id = message.from_user.id
        self._sessions.save(Session(user_id=user_id, state=ConversationState.SEARCH_PENDING))
        logger.info("user: %s, message: entered movie query mode", user_id)
        return AgentResponse(
            replies=[
                Reply(
                    chat_id=message.chat.id,
                    text=messages.MOVIES_LOOKUP,
                    force_reply=True,
                    selective=True,
                    reply_to_message_id=message.message_id,
                )
            ]
        )

    async def search(self, message: Message, query: str) -> AgentResponse:
        """Search CouchPotato for *query* and offer the results."""
        user_id = message.from_user.id
        movies = await self._catalog.search_movies(query)
        if not movies:
            self._sessions.save(Session(user_id=user_id, state=ConversationState.SEARCH_PENDING))
            raise NoResults(f"Could not find {query}, try searching again")

        logger.info("user: %s, message: requested to search for movie \"%s\"", user_id, query)
        choices = tuple(self._to_choice(position, movie) for position, movie in enumerate(movies, 1))

        lines = [bold(f"Found {len(choices)} movies:")]
        lines.extend(numbered(choice.id, self._describe(choice)) for choice in choices)
        lines.append(messages.SELECT_FROM_MENU)

        self._sessions.save(
            Session(
                user_id=user_id,
                state=ConversationState.MOVIE_SELECTION_PENDING,
                movies=choices,
            )
        )
        return AgentResponse(
            replies=[
                Reply(
                    chat_id=message.chat.id,
                    text="\n".join(lines),
                    keyboard=build_keyboard([c.keyboard_value for c in choices], per_row=1),
                    force_reply=True,
                    selective=True,
                    reply_to_message_id=message.message_id,
                )
            ]
        )

    async def library(self, message: Message, query: str | None) -> AgentResponse:
        """List library movies, optionally filtered by a title substring."""
        user_id = message.from_user.id
        try:
            movies = await self._catalog.list_library()
            logger.info("user: %s, message: all movies", user_id)
            if query:
                needle = query.casefold()
                movies = [m for m in movies if needle in m.title.casefold()]
            if not movies:
                raise NoResults(
                    f"{messages.QUERY_NO_RESULTS}: {query}" if query else messages.LIBRARY_EMPTY
                )

            movies.sort(key=lambda m: m.title.casefold())
            batches = chunk([link(m.title, m.url) for m in movies], LIBRARY_BATCH_SIZE)
            if query:
                batches[0].insert(0, bold(f"{messages.LIBRARY_FOUND}:"))
            return AgentResponse(
                replies=[Reply(chat_id=message.chat.id, text="\n".join(b)) for b in batches]
            )
        finally:
            self._sessions.clear(user_id)

    async def wanted(self, message: Message) -> AgentResponse:
        await self._catalog.trigger_full_search()
        logger.info("user: %s, message: triggered a full search", message.from_user.id)
        return AgentResponse.text(message.chat.id, messages.MOVIES_WANTED)

    # ── Private helpers ──────────────────────────────────

    async def _handle_movie(self, message: Message, session: Session) -> AgentResponse:
        """Resolve the picked movie, reject duplicates, then offer profiles."""
        if not session.movies:
            raise BotError(messages.SEARCH_AGAIN)

        label = message.text or ""
        movie = next((m for m in session.movies if m.keyboard_value == label), None)
        if movie is None:
            raise SelectionNotFound(f'{messages.MOVIE_NOT_FOUND} "{label}".')

        logger.info("user: %s, message: looking for existing movie", session.user_id)
        library = await self._catalog.list_library()
        if any(entry.matches(movie.movie_id) for entry in library):
            self._sessions.save(
                Session(user_id=session.user_id, state=ConversationState.SEARCH_PENDING)
            )
            raise BotError(messages.MOVIE_EXISTS)

        profiles = await self._catalog.list_profiles()
        enabled = [p for p in profiles if not p.hidden]
        logger.info(
            "user: %s, message: requested to get profile list with %d entries",
            session.user_id,
            len(profiles),
        )
        if not enabled:
            raise UpstreamError(messages.NO_PROFILES)

        choices = tuple(
            ProfileChoice(id=position, label=p.label, profile_id=p.profile_id)
            for position, p in enumerate(enabled, 1)
        )
        lines = [bold(f"{messages.FOUND_PROFILES}: {len(choices)}") + "\n"]
        lines.extend(numbered(choice.id, choice.label) for choice in choices)
        lines.append(messages.SELECT_FROM_MENU)

        self._sessions.save(
            session.evolve(
                state=ConversationState.PROFILE_SELECTION_PENDING,
                selected_movie=movie,
                profiles=choices,
            )
        )
        # Profile names are short, two per row keeps the keyboard compact
        return AgentResponse(
            replies=[
                Reply(
                    chat_id=message.chat.id,
                    text="\n".join(lines),
                    keyboard=build_keyboard([c.label for c in choices], per_row=2),
                    force_reply=True,
                    selective=True,
                    reply_to_message_id=message.message_id,
                )
            ]
        )

    async def _handle_profile(self, message: Message, session: Session) -> AgentResponse:
        """Add the chosen movie with the picked profile."""
        movie = session.selected_movie
        if movie is None or not session.profiles:
            self._sessions.clear(session.user_id)
            raise BotError(messages.TRY_AGAIN)

        label = message.text or ""
        profile = next((p for p in session.profiles if p.label == label), None)
        if profile is None:
            raise SelectionNotFound(f'{messages.PROFILE_NOT_FOUND} "{label}".')

        try:
            added = await self._catalog.add_movie(movie.movie_id, movie.title, profile.profile_id)
            if not added:
                raise UpstreamError(messages.MOVIE_ADD_FAIL)
        finally:
            self._sessions.clear(session.user_id)

        logger.info("user: %s, message: added movie \"%s\"", session.user_id, movie.title)
        poster = movie.thumb or movie_url(movie.movie_id, movie.via_imdb)
        return AgentResponse.text(message.chat.id, link(f"{messages.MOVIE_ADDED}!", poster))

    @staticmethod
    def _to_choice(position: int, movie: CatalogMovie) -> MovieChoice:
        keyboard_value = f"{movie.title} - {movie.year}" if movie.year else movie.title
        return MovieChoice(
            id=position,
            title=movie.title,
            year=movie.year,
            rating=movie.rating,
            movie_id=movie.movie_id,
            thumb=movie.thumb,
            runtime=movie.runtime,
            via_imdb=movie.via_imdb,
            keyboard_value=keyboard_value,
        )

    @staticmethod
    def _describe(choice: MovieChoice) -> str:
        parts = [link(choice.title, movie_url(choice.movie_id, choice.via_imdb))]
        if choice.year:
            parts.append(italic(choice.year))
        if choice.rating:
            parts.append(italic(choice.rating))
        if choice.runtime:
            parts.append(italic(f"{choice.runtime}m"))
        return " - ".join(parts)
