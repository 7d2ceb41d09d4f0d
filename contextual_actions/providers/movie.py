"""
Movie provider: detects movie intent, looks the subject up in a MovieCatalog,
and maps matches to card-style link actions.

Flow:
  1) intent check (movie / film / watch / cinema / theater)
  2) search term extraction (patterns -> text after the movie term -> cleanup)
  3) catalog lookup: search, else genre match + popular discover
  4) cards + trailing "see more"; no matches -> one fallback search link
Catalog failures yield no actions. Mapping failures propagate so the
orchestrator discards the whole output.
"""
# @file purpose: Implement the movie-domain provider.

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from loguru import logger

from ..core.action import Action, ContextOptions
from ..core.errors import CatalogError
from ..core.logging_utils import log_event
from ..io.catalog import MovieCatalog, MovieRecord

MOVIE_TERMS = ("movie", "film", "watch", "cinema", "theater")

_PATTERNS = (
    re.compile(
        r"(?:movie|film|watch)s?\s+(?:about|like|titled|called|named)?\s+[\"']?([^\"'?]+)[\"']?",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?:recommend|suggest)\s+(?:a|some)?\s+(?:movie|film)s?\s+(?:about|like|with)?\s+([^?]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"what\s+(?:movie|film)s?\s+(?:has|have|contain|feature|include|star)s?\s+([^?]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"find\s+(?:movie|film)s?\s+(?:about|with|starring|featuring|by|from)\s+([^?]+)",
        re.IGNORECASE,
    ),
)
_LEADING_FILLER = re.compile(r"^(about|like|with|called|titled|named|a|the|for|of)\s+", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[?.,!]")
_QUERY_NOISE = re.compile(r"(?:movie|film|watch|find|recommend|suggest)s?", re.IGNORECASE)


def is_movie_query(query: str) -> bool:
    if not query or not isinstance(query, str):
        return False
    lowered = query.lower()
    return any(term in lowered for term in MOVIE_TERMS)


def extract_search_term(query: str) -> str:
    """Best-effort subject of a movie query; empty string when nothing useful remains."""
    for pattern in _PATTERNS:
        match = pattern.search(query)
        if match and match.group(1):
            return match.group(1).strip()

    lowered = query.lower()
    for term in ("movie", "film", "watch"):
        idx = lowered.find(term)
        if idx != -1:
            after = query[idx + len(term):].strip()
            after = _LEADING_FILLER.sub("", after, count=1)
            after = _PUNCTUATION.sub("", after)
            if len(after) > 2:
                return after

    cleaned = _PUNCTUATION.sub("", _QUERY_NOISE.sub("", query)).strip()
    return cleaned if len(cleaned) > 3 else ""


class MovieActionsProvider:
    name = "movies"

    def __init__(
        self,
        catalog: Optional[MovieCatalog],
        *,
        site_url: str = "https://www.themoviedb.org",
        image_base_url: str = "https://image.tmdb.org/t/p/w92",
        limit: int = 5,
    ) -> None:
        self.catalog = catalog
        self.site_url = site_url.rstrip("/")
        self.image_base_url = image_base_url.rstrip("/")
        self.limit = max(1, limit)
        if catalog is None:
            logger.warning(log_event("actions.movies.disabled", reason="no catalog configured"))

    @property
    def enabled(self) -> bool:
        return self.catalog is not None

    async def get_actions(self, query: str, user_id: str, options: ContextOptions) -> list[Action]:
        if not self.enabled or not is_movie_query(query):
            return []

        term = extract_search_term(query)
        if not term:
            return []

        try:
            movies = await self.find_movies(term)
        except CatalogError as e:
            logger.warning(log_event("actions.movies.catalog_failed", term=term, error=str(e)))
            return []

        if not movies:
            return [self.fallback_action(term)]
        return self.movies_to_actions(movies, term)

    async def find_movies(self, term: str) -> list[MovieRecord]:
        if self.catalog is None:
            return []
        found = await self.catalog.search(term)
        if found:
            return found[: self.limit]

        lowered = term.lower()
        genres = await self.catalog.genres()
        genre_ids = [g.id for g in genres if g.name.lower() in lowered]
        popular = await self.catalog.discover(genre_ids=genre_ids or None)
        return popular[: self.limit]

    def fallback_action(self, term: str) -> Action:
        return Action(
            kind="link",
            label=f'Search for "{term}" on TMDB',
            target=f"{self.site_url}/search?query={quote(term, safe='')}",
            icon="search",
            emphasis="primary",
        )

    def movies_to_actions(self, movies: list[MovieRecord], term: str) -> list[Action]:
        actions: list[Action] = []
        for movie in movies:
            year = movie.year
            label = f"{movie.title} ({year})" if year else movie.title
            thumbnail = f"{self.image_base_url}{movie.poster_path}" if movie.poster_path else None
            actions.append(
                Action(
                    kind="link",
                    label=label,
                    target=f"{self.site_url}/movie/{movie.id}",
                    icon="film",
                    emphasis="secondary",
                    layout="card",
                    thumbnail=thumbnail,
                )
            )

        if movies:
            actions.append(
                Action(
                    kind="link",
                    label="See more movie results",
                    target=f"{self.site_url}/search/movie?query={quote(term, safe='')}",
                    icon="plus",
                    emphasis="neutral",
                    layout="pill",
                )
            )
        return actions
