from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


REPO_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    upstream_base_url: str = Field(default="https://rbs.elektranbroadcast.com", alias="ONAIR_UPSTREAM_BASE_URL")
    use_relay: bool = Field(default=False, alias="ONAIR_USE_RELAY")

    api_host: str = Field(default="0.0.0.0", alias="ONAIR_API_HOST")
    api_port: int = Field(default=8787, alias="ONAIR_API_PORT")
    api_base_url: str = Field(default="http://127.0.0.1:8787", alias="ONAIR_API_BASE_URL")
    web_host: str = Field(default="127.0.0.1", alias="ONAIR_WEB_HOST")
    web_port: int = Field(default=8790, alias="ONAIR_WEB_PORT")

    now_playing_interval_ms: int = Field(default=3000, ge=100, alias="ONAIR_NOW_PLAYING_INTERVAL_MS")
    events_interval_ms: int = Field(default=7000, ge=100, alias="ONAIR_EVENTS_INTERVAL_MS")
    request_timeout_seconds: float = Field(default=10.0, gt=0.0, alias="ONAIR_REQUEST_TIMEOUT_SECONDS")
    default_page_size: int = Field(default=25, ge=1, alias="ONAIR_DEFAULT_PAGE_SIZE")

    export_dir: str = Field(default="exports", alias="ONAIR_EXPORT_DIR")
    state_dir: str = Field(default=".onair_state", alias="ONAIR_STATE_DIR")
    log_level: str = Field(default="INFO", alias="ONAIR_LOG_LEVEL")

    def resolve_path(self, path_value: str) -> Path:
        candidate = Path(path_value).expanduser()
        if candidate.is_absolute():
            return candidate
        return REPO_ROOT / candidate

    @property
    def export_path(self) -> Path:
        return self.resolve_path(self.export_dir)

    @property
    def state_path(self) -> Path:
        return self.resolve_path(self.state_dir)

    @property
    def client_base_url(self) -> str:
        """Base URL the dashboard polls: the relay when present, else the upstream API."""
        if self.use_relay:
            return f"{self.api_base_url.rstrip('/')}/api"
        return self.upstream_base_url.rstrip("/")

    def ensure_runtime_dirs(self) -> None:
        self.export_path.mkdir(parents=True, exist_ok=True)
        self.state_path.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.ensure_runtime_dirs()
    return settings
