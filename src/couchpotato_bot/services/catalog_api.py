"""CouchPotato API — async HTTP client for the movie-management backend.

CouchPotato exposes every operation as ``GET <base>/api/<key>/<command>/``
with query-string parameters and a JSON body in response.  Any transport
failure, non-200 status or unexpected payload is logged here and raised as
:class:`~couchpotato_bot.errors.UpstreamError`, which the message router
turns into an error reply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from couchpotato_bot.config import settings
from couchpotato_bot.errors import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMDB_URL = "http://imdb.com/title/{}"
TMDB_URL = "https://www.themoviedb.org/movie/{}"


def movie_url(movie_id: str, via_imdb: bool) -> str:
    return (IMDB_URL if via_imdb else TMDB_URL).format(movie_id)


@dataclass
class CatalogMovie:
    """A ``movie.search`` result."""

    title: str
    year: str
    rating: str
    movie_id: str
    thumb: str
    runtime: str
    via_imdb: bool

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> CatalogMovie:
        imdb = raw.get("imdb") or ""
        ratings = (raw.get("rating") or {}).get("imdb") or []
        posters = (raw.get("images") or {}).get("poster") or []
        return cls(
            title=str(raw.get("original_title") or raw.get("title") or ""),
            year=str(raw.get("year") or ""),
            rating=f"{ratings[0]}/10" if ratings else "",
            movie_id=str(imdb or raw.get("tmdb_id") or ""),
            thumb=str(posters[0]) if posters else "",
            runtime=str(raw.get("runtime") or ""),
            via_imdb=bool(imdb),
        )


@dataclass
class LibraryMovie:
    """A ``media.list`` entry."""

    title: str
    imdb: str
    tmdb_id: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> LibraryMovie:
        info = raw.get("info") or {}
        return cls(
            title=str(raw.get("title") or info.get("original_title") or ""),
            imdb=str(raw.get("imdb") or info.get("imdb") or ""),
            tmdb_id=str(raw.get("tmdb_id") or info.get("tmdb_id") or ""),
        )

    @property
    def url(self) -> str:
        if self.imdb:
            return movie_url(self.imdb, via_imdb=True)
        return movie_url(self.tmdb_id, via_imdb=False)

    def matches(self, movie_id: str) -> bool:
        return bool(movie_id) and movie_id in (self.imdb, self.tmdb_id)


@dataclass
class CatalogProfile:
    """A quality profile from ``profile.list``."""

    profile_id: str
    label: str
    hidden: bool

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> CatalogProfile:
        return cls(
            profile_id=str(raw.get("_id", "")),
            label=str(raw.get("label", "")),
            hidden=bool(raw.get("hide", False)),
        )


class CouchPotatoAPI:
    """Async HTTP wrapper around the CouchPotato API."""

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.couchpotato_base_url).rstrip("/")
        username = settings.couchpotato_username if username is None else username
        password = settings.couchpotato_password if password is None else password
        self._auth = httpx.BasicAuth(username, password) if username else None
        self._transport = transport

    # ── Movies ───────────────────────────────────────────

    async def search_movies(self, query: str) -> list[CatalogMovie]:
        """Search the online movie databases CouchPotato is connected to."""
        data = await self._get("movie.search", {"q": query})
        return self._parse("movie.search", data.get("movies"), CatalogMovie.from_api)

    async def list_library(self) -> list[LibraryMovie]:
        """Every movie CouchPotato already manages."""
        data = await self._get("media.list")
        return self._parse("media.list", data.get("movies"), LibraryMovie.from_api)

    async def add_movie(self, identifier: str, title: str, profile_id: str) -> bool:
        """Add a movie to the wanted list.

        Returns ``True`` if CouchPotato reports success.
        """
        data = await self._get(
            "movie.add",
            {"identifier": identifier, "title": title, "profile_id": profile_id},
        )
        return bool(data.get("success", False))

    async def trigger_full_search(self) -> None:
        """Ask CouchPotato to search for releases of all wanted movies."""
        await self._get("movie.searcher.full_search")

    # ── Profiles ─────────────────────────────────────────

    async def list_profiles(self) -> list[CatalogProfile]:
        data = await self._get("profile.list")
        return self._parse("profile.list", data.get("list"), CatalogProfile.from_api)

    # ── Private helpers ──────────────────────────────────

    async def _get(self, command: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}/{command}/"
        try:
            async with httpx.AsyncClient(auth=self._auth, transport=self._transport) as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.exception("CouchPotato %s request error: %s", command, exc)
            raise UpstreamError() from exc

        if resp.status_code != 200:
            logger.error("CouchPotato %s failed: %s %s", command, resp.status_code, resp.text)
            raise UpstreamError()

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("CouchPotato %s returned non-JSON body: %s", command, resp.text[:200])
            raise UpstreamError() from exc

        if not isinstance(data, dict):
            logger.error("CouchPotato %s returned unexpected payload: %r", command, data)
            raise UpstreamError()
        return data

    @staticmethod
    def _parse(command: str, items: Any, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        """Build one record per entry of *items*; a malformed entry fails the whole call."""
        if items is None:
            return []
        if not isinstance(items, list):
            logger.error("CouchPotato %s returned unexpected list: %r", command, items)
            raise UpstreamError()
        try:
            return [parse(raw) for raw in items]
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            logger.error("CouchPotato %s returned a malformed entry: %s", command, exc)
            raise UpstreamError() from exc
