"""In-memory movie catalog — backs the mock CouchPotato API."""

from __future__ import annotations

import copy
import logging
from typing import Any

logger = logging.getLogger(__name__)

SAMPLE_MOVIES: list[dict[str, Any]] = [
    {
        "original_title": "Inception",
        "year": 2010,
        "imdb": "tt1375666",
        "tmdb_id": 27205,
        "rating": {"imdb": [8.8, 2400000]},
        "runtime": 148,
        "images": {"poster": ["https://image.tmdb.org/t/p/w154/inception.jpg"]},
    },
    {
        "original_title": "Inception: The Cobol Job",
        "year": 2010,
        "tmdb_id": 64956,
        "runtime": 15,
        "images": {"poster": []},
    },
    {
        "original_title": "The Dark Knight",
        "year": 2008,
        "imdb": "tt0468569",
        "tmdb_id": 155,
        "rating": {"imdb": [9.0, 2700000]},
        "runtime": 152,
        "images": {"poster": ["https://image.tmdb.org/t/p/w154/dark_knight.jpg"]},
    },
    {
        "original_title": "Interstellar",
        "year": 2014,
        "imdb": "tt0816692",
        "tmdb_id": 157336,
        "rating": {"imdb": [8.7, 2000000]},
        "runtime": 169,
        "images": {"poster": ["https://image.tmdb.org/t/p/w154/interstellar.jpg"]},
    },
]

SAMPLE_PROFILES: list[dict[str, Any]] = [
    {"_id": "p-best", "label": "Best"},
    {"_id": "p-hd", "label": "HD"},
    {"_id": "p-sd", "label": "SD", "hide": False},
    {"_id": "p-old", "label": "Legacy", "hide": True},
]


class MockCatalog:
    """Search index, library and quality profiles of a fake CouchPotato.

    The library starts with *The Dark Knight* so the duplicate check can be
    exercised.
    """

    def __init__(
        self,
        movies: list[dict[str, Any]] | None = None,
        profiles: list[dict[str, Any]] | None = None,
    ) -> None:
        self._movies = copy.deepcopy(SAMPLE_MOVIES if movies is None else movies)
        self._profiles = copy.deepcopy(SAMPLE_PROFILES if profiles is None else profiles)
        self._library: list[dict[str, Any]] = []
        self.full_searches = 0
        for movie in self._movies:
            if movie.get("imdb") == "tt0468569":
                self._add_to_library(movie)

    def search(self, query: str) -> list[dict[str, Any]]:
        needle = query.casefold()
        return [m for m in self._movies if needle in m["original_title"].casefold()]

    def library(self) -> list[dict[str, Any]]:
        return list(self._library)

    def profiles(self) -> list[dict[str, Any]]:
        return list(self._profiles)

    def add(self, identifier: str, title: str, profile_id: str) -> bool:
        """Add a searchable movie to the library; ``False`` if that is not possible."""
        if not any(p["_id"] == profile_id for p in self._profiles):
            logger.info("Mock catalog: unknown profile %s", profile_id)
            return False
        if any(identifier in (m["info"]["imdb"], str(m["info"]["tmdb_id"])) for m in self._library):
            logger.info("Mock catalog: %s already in library", identifier)
            return False
        movie = next(
            (
                m
                for m in self._movies
                if identifier in (m.get("imdb"), str(m.get("tmdb_id")))
            ),
            None,
        )
        if movie is None:
            logger.info("Mock catalog: unknown movie %s (%s)", identifier, title)
            return False
        self._add_to_library(movie, profile_id)
        logger.info("Mock catalog: added %s with profile %s", title, profile_id)
        return True

    def _add_to_library(self, movie: dict[str, Any], profile_id: str = "p-best") -> None:
        self._library.append(
            {
                "title": movie["original_title"],
                "profile_id": profile_id,
                "status": "active",
                "info": {
                    "imdb": movie.get("imdb", ""),
                    "tmdb_id": movie.get("tmdb_id", ""),
                    "original_title": movie["original_title"],
                },
            }
        )
