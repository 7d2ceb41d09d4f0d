"""
Movie catalog protocol (abstraction).

The movie provider depends only on this surface, so tests can plug a stub
catalog and production plugs the TMDB HTTP client.
"""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict


class MovieRecord(BaseModel):
    """Minimal movie metadata used to build actions."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    release_date: str | None = None
    poster_path: str | None = None

    @property
    def year(self) -> int | None:
        # TMDB dates are "YYYY-MM-DD"; empty string means unknown
        if not self.release_date or len(self.release_date) < 4:
            return None
        try:
            return int(self.release_date[:4])
        except ValueError:
            return None


class Genre(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str


class MovieCatalog(Protocol):
    async def search(self, term: str) -> list[MovieRecord]: ...
    async def genres(self) -> list[Genre]: ...
    async def discover(self, *, genre_ids: list[int] | None = None) -> list[MovieRecord]: ...


def parse_movies(payload: Any) -> list[MovieRecord]:
    results = payload.get("results") if isinstance(payload, dict) else None
    return [MovieRecord.model_validate(item) for item in (results or [])]


def parse_genres(payload: Any) -> list[Genre]:
    genres = payload.get("genres") if isinstance(payload, dict) else None
    return [Genre.model_validate(item) for item in (genres or [])]
