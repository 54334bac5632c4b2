"""Mock CouchPotato API router — simulates a CouchPotato server.

Endpoints (all ``GET``, under ``/mock-couchpotato/api/{api_key}``)
------------------------------------------------------------------
/movie.search/?q=...                         → search results
/media.list/                                 → library
/profile.list/                               → quality profiles
/movie.add/?identifier=&title=&profile_id=   → add to library
/movie.searcher.full_search/                 → start a full search
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from couchpotato_bot.config import settings
from couchpotato_bot.mock_catalog.catalog_store import MockCatalog

logger = logging.getLogger(__name__)

MOCK_URL_BASE = "/mock-couchpotato"


def verify_api_key(api_key: str) -> None:
    if settings.couchpotato_api_key and api_key != settings.couchpotato_api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


router = APIRouter(
    prefix=f"{MOCK_URL_BASE}/api/{{api_key}}",
    tags=["mock-couchpotato"],
    dependencies=[Depends(verify_api_key)],
)

# Shared catalog (in-memory singleton)
catalog = MockCatalog()


@router.get("/movie.search/")
async def movie_search(q: str = Query(..., description="Title to search for")):
    movies = catalog.search(q)
    logger.info("Mock search for %r: %d results", q, len(movies))
    return {"success": True, "movies": movies}


@router.get("/media.list/")
async def media_list():
    movies = catalog.library()
    return {"success": True, "total": len(movies), "movies": movies}


@router.get("/profile.list/")
async def profile_list():
    return {"success": True, "list": catalog.profiles()}


@router.get("/movie.add/")
async def movie_add(identifier: str, title: str, profile_id: str):
    return {"success": catalog.add(identifier, title, profile_id)}


@router.get("/movie.searcher.full_search/")
async def full_search():
    catalog.full_searches += 1
    logger.info("Mock full search started")
    return {"success": True}
