"""Configuration management for album-purge.

Loads settings from .env / environment variables and provider endpoints
from config/provider.yaml (falling back to the Spotify defaults).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv


DEFAULT_CLIENT_ID = "c43fd49f237b4ce999032fd66350fe1c"
DEFAULT_SCOPE = "user-library-read user-library-modify"
DEFAULT_PORT = 9754
MAX_PAGE_SIZE = 50


class ProviderEndpoints(BaseModel):
    """Where the provider lives."""
    authorize_url: str = "https://accounts.spotify.com/authorize"
    token_url: str = "https://accounts.spotify.com/api/token"
    api_base_url: str = "https://api.spotify.com/v1"
    library_resource: str = "albums"

    @property
    def library_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/me/{self.library_resource}"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    client_id: str = Field(default=DEFAULT_CLIENT_ID, description="OAuth client ID (PKCE, no secret)")
    host: str = Field(default="localhost", description="Interface the callback listener binds to")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Callback listener port")
    redirect_uri: str = Field(default="", description="Redirect URI registered with the provider")
    scope: str = Field(default=DEFAULT_SCOPE, description="Space separated OAuth scopes")
    page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Albums per request")
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout for every outbound call, seconds")
    refresh_margin: int = Field(default=10, ge=0, description="Refresh this many seconds before expiry")
    open_browser: bool = Field(default=True, description="Open the authorization URL in a browser")

    def model_post_init(self, __context: object) -> None:
        if not self.redirect_uri:
            self.redirect_uri = f"http://{self.host}:{self.port}/cb"


class Config(BaseModel):
    """Full application configuration."""
    settings: Settings
    provider: ProviderEndpoints = Field(default_factory=ProviderEndpoints)

    def with_overrides(self, **overrides: object) -> Config:
        """Return a copy with the given settings replaced (None values are ignored)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        data = self.settings.model_dump()
        # Re-derive the redirect URI when the port or host changes unless it was pinned
        if ("port" in values or "host" in values) and "redirect_uri" not in values:
            if data["redirect_uri"] == f"http://{data['host']}:{data['port']}/cb":
                data["redirect_uri"] = ""
        data.update(values)
        return Config(settings=Settings(**data), provider=self.provider)


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "provider.yaml").exists():
            return parent
    # Fallback: cwd
    return Path.cwd()


def _load_provider(project_root: Path) -> ProviderEndpoints:
    """Load provider endpoints from provider.yaml, if present."""
    provider_path = project_root / "config" / "provider.yaml"
    if not provider_path.exists():
        return ProviderEndpoints()

    with open(provider_path) as f:
        data = yaml.safe_load(f) or {}

    return ProviderEndpoints(**data.get("provider", {}))


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _load_settings() -> Settings:
    """Load settings from environment variables.

    Supports both ALBUM_PURGE_* and the common SPOTIFY_* names.
    """
    return Settings(
        client_id=_env("ALBUM_PURGE_CLIENT_ID", "SPOTIFY_CLIENT_ID", default=DEFAULT_CLIENT_ID),
        host=_env("ALBUM_PURGE_HOST", default="localhost"),
        port=int(_env("ALBUM_PURGE_PORT", default=str(DEFAULT_PORT))),
        redirect_uri=_env("ALBUM_PURGE_REDIRECT_URI", "SPOTIFY_REDIRECT_URI"),
        scope=_env("ALBUM_PURGE_SCOPE", default=DEFAULT_SCOPE),
        page_size=int(_env("ALBUM_PURGE_PAGE_SIZE", default=str(MAX_PAGE_SIZE))),
        http_timeout=float(_env("ALBUM_PURGE_HTTP_TIMEOUT", default="10")),
        refresh_margin=int(_env("ALBUM_PURGE_REFRESH_MARGIN", default="10")),
        open_browser=_env("ALBUM_PURGE_OPEN_BROWSER", default="true").lower() in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache the full application configuration."""
    project_root = _find_project_root()

    # Load .env from project root if it exists
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    settings = _load_settings()
    provider = _load_provider(project_root)

    return Config(settings=settings, provider=provider)
