"""
Centralised settings (environment variables / .env), kept testable and explicit.
"""
# @file purpose: Centralized settings using Pydantic Settings.

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CA_", env_file=".env", extra="ignore")

    # orchestration
    provider_timeout_seconds: float | None = 5.0
    event_name: str = "contextual_actions"
    log_level: str = "INFO"

    # movie provider (TMDB)
    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_site_url: str = "https://www.themoviedb.org"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w92"
    tmdb_language: str = "en-US"
    movie_result_limit: int = 5
    request_timeout_seconds: float = 10.0

    # http surface
    host: str = "127.0.0.1"
    port: int = 8080
    store_dir: str | None = None


settings = Settings()
