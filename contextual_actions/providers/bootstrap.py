"""
Startup wiring: build the one orchestrator instance the process uses and
register the built-in providers in a fixed order.
"""

from __future__ import annotations

from loguru import logger

from ..core.controller.orchestrator import Orchestrator
from ..core.logging_utils import log_event
from ..core.settings import Settings, settings as default_settings
from ..io.tmdb_client import TMDBClient
from .keyword import knowledge_base_provider
from .movie import MovieActionsProvider


def build_orchestrator(cfg: Settings | None = None) -> Orchestrator:
    cfg = cfg or default_settings
    orchestrator = Orchestrator(provider_timeout=cfg.provider_timeout_seconds)

    catalog = None
    if cfg.tmdb_api_key:
        catalog = TMDBClient(
            cfg.tmdb_api_key,
            base_url=cfg.tmdb_base_url,
            language=cfg.tmdb_language,
            timeout_seconds=cfg.request_timeout_seconds,
        )

    orchestrator.register(knowledge_base_provider())
    orchestrator.register(
        MovieActionsProvider(
            catalog,
            site_url=cfg.tmdb_site_url,
            image_base_url=cfg.tmdb_image_base_url,
            limit=cfg.movie_result_limit,
        )
    )
    logger.info(
        log_event(
            "actions.bootstrap.ready",
            providers=",".join(orchestrator.registry.names()),
            timeout=cfg.provider_timeout_seconds,
        )
    )
    return orchestrator
