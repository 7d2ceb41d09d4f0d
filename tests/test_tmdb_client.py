import httpx
import pytest

from contextual_actions.core.errors import CatalogError
from contextual_actions.io.tmdb_client import TMDBClient


def make_client(handler) -> TMDBClient:
    return TMDBClient("k3y", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_search_sends_key_and_parses_results() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "page": 1,
                "results": [
                    {"id": 603, "title": "The Matrix", "release_date": "1999-03-30", "poster_path": "/m.jpg", "vote_average": 8.2},
                    {"id": 604, "title": "The Matrix Reloaded", "release_date": ""},
                ],
            },
        )

    movies = await make_client(handler).search("matrix")

    request = seen[0]
    assert request.url.path == "/3/search/movie"
    assert request.url.params["api_key"] == "k3y"
    assert request.url.params["query"] == "matrix"
    assert request.url.params["language"] == "en-US"
    assert request.url.params["include_adult"] == "false"
    assert [(m.id, m.title, m.year) for m in movies] == [(603, "The Matrix", 1999), (604, "The Matrix Reloaded", None)]


@pytest.mark.asyncio
async def test_discover_passes_genres_and_popularity_sort() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": []})

    assert await make_client(handler).discover(genre_ids=[35, 18]) == []
    params = seen[0].url.params
    assert seen[0].url.path == "/3/discover/movie"
    assert params["with_genres"] == "35,18"
    assert params["sort_by"] == "popularity.desc"


@pytest.mark.asyncio
async def test_genres_are_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"genres": [{"id": 35, "name": "Comedy"}]})

    genres = await make_client(handler).genres()
    assert [(g.id, g.name) for g in genres] == [(35, "Comedy")]


@pytest.mark.asyncio
async def test_http_error_becomes_catalog_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"status_message": "Invalid API key"})

    with pytest.raises(CatalogError) as info:
        await make_client(handler).search("matrix")
    assert info.value.status == 401


@pytest.mark.asyncio
async def test_transport_error_becomes_catalog_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CatalogError):
        await make_client(handler).genres()


@pytest.mark.asyncio
async def test_unexpected_records_become_catalog_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "no id"}]})

    with pytest.raises(CatalogError):
        await make_client(handler).search("x")
