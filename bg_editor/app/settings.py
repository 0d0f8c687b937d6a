from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Tuple

from bg_editor.app.errors import ConfigError

DEFAULT_PRESET_BACKGROUNDS: Tuple[str, ...] = (
    "https://picsum.photos/id/1018/1024/768",  # Forest
    "https://picsum.photos/id/1015/1024/768",  # River
    "https://picsum.photos/id/1043/1024/768",  # City Street
    "https://picsum.photos/id/129/1024/768",   # Abstract Lights
    "https://picsum.photos/id/21/1024/768",    # Bokeh
    "https://picsum.photos/id/3/1024/768",     # Desk
)

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _get_env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None or v == "":
        raise ConfigError(f"Missing required env var: {name}")
    return v


def _first_env(*names: str) -> str | None:
    for name in names:
        v = os.getenv(name)
        if v:
            return v
    return None


@dataclass(frozen=True)
class Settings:
    # Gemini
    gemini_api_key: str | None
    gcp_project: str | None
    gcp_location: str
    image_model: str

    # Backgrounds / export
    preset_backgrounds: Tuple[str, ...] = DEFAULT_PRESET_BACKGROUNDS
    fetch_timeout_s: float = 30.0
    export_filename: str = "edited-image.png"

    # Session registry; None disables the limit
    session_idle_ttl_s: float | None = 3600.0
    max_sessions: int | None = 200

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Server
    host: str = "127.0.0.1"
    port: int = 8000


def _parse_presets(raw: str | None) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_PRESET_BACKGROUNDS
    urls = tuple(u.strip() for u in raw.split(",") if u.strip())
    if not urls:
        raise ConfigError("PRESET_BACKGROUNDS must list at least one URL")
    return urls


def load_settings() -> Settings:
    api_key = _first_env("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY")
    project = _first_env("GOOGLE_CLOUD_PROJECT", "PROJECT_ID")
    if not api_key and not project:
        raise ConfigError(
            "Either GEMINI_API_KEY (or API_KEY) or GOOGLE_CLOUD_PROJECT (Vertex AI with ADC) must be set"
        )

    try:
        fetch_timeout_s = float(os.getenv("FETCH_TIMEOUT_S", "30"))
        port = int(os.getenv("PORT", "8000"))
        idle_ttl_s = float(os.getenv("SESSION_IDLE_TTL_S", "3600"))
        max_sessions = int(os.getenv("MAX_SESSIONS", "200"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e

    return Settings(
        gemini_api_key=api_key,
        gcp_project=project,
        gcp_location=os.getenv("VERTEX_LOCATION", "us-central1"),
        image_model=_get_env("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image"),
        preset_backgrounds=_parse_presets(os.getenv("PRESET_BACKGROUNDS")),
        fetch_timeout_s=fetch_timeout_s,
        export_filename=os.getenv("EXPORT_FILENAME", "edited-image.png"),
        session_idle_ttl_s=idle_ttl_s if idle_ttl_s > 0 else None,
        max_sessions=max_sessions if max_sessions > 0 else None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_json=os.getenv("LOG_JSON", "true").lower().strip() in _TRUTHY,
        host=os.getenv("HOST", "127.0.0.1"),
        port=port,
    )
