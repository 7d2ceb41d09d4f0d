"""
TMDB-backed MovieCatalog implementation.

Conforms to io/catalog.py's MovieCatalog Protocol:
- search(term)            -> GET /search/movie
- genres()                -> GET /genre/movie/list
- discover(genre_ids=...) -> GET /discover/movie (popularity.desc)

Every non-2xx response, transport error or undecodable body raises CatalogError.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import CatalogError
from .catalog import Genre, MovieRecord, parse_genres, parse_movies


class TMDBClient:
    """
    A concrete MovieCatalog based on httpx.AsyncClient.
    - One short-lived AsyncClient per request keeps the client free of
      connection state shared across concurrent turns.
    - `transport` lets tests inject httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.themoviedb.org/3",
        language: str = "en-US",
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    # ---------------- catalog surface ----------------

    async def search(self, term: str) -> list[MovieRecord]:
        payload = await self._get_json(
            "/search/movie",
            {"query": term, "include_adult": "false", "page": 1},
        )
        return self._parse(parse_movies, payload, "/search/movie")

    async def genres(self) -> list[Genre]:
        payload = await self._get_json("/genre/movie/list", {})
        return self._parse(parse_genres, payload, "/genre/movie/list")

    async def discover(self, *, genre_ids: list[int] | None = None) -> list[MovieRecord]:
        params: dict[str, Any] = {
            "sort_by": "popularity.desc",
            "include_adult": "false",
            "include_video": "false",
            "page": 1,
        }
        if genre_ids:
            params["with_genres"] = ",".join(str(g) for g in genre_ids)
        payload = await self._get_json("/discover/movie", params)
        return self._parse(parse_movies, payload, "/discover/movie")

    # ---------------- internals ----------------

    def _parse(self, parser: Any, payload: Any, path: str) -> Any:
        try:
            return parser(payload)
        except ValidationError as e:
            raise CatalogError("catalog returned unexpected records", url=f"{self.base_url}{path}") from e

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        endpoint = f"{self.base_url}{path}"
        query = {"api_key": self.api_key, "language": self.language, **params}
        timeout = httpx.Timeout(self.timeout_seconds)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.get(endpoint, params=query)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(
                "catalog request rejected", url=endpoint, status=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise CatalogError(f"catalog request failed: {type(e).__name__}", url=endpoint) from e
        except ValueError as e:
            raise CatalogError("catalog returned invalid JSON", url=endpoint) from e
