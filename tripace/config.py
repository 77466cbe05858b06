"""Application configuration with environment-specific profiles.

Supports dev, staging, production and test environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

STRATEGIES = ("table", "generative")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    app_env: str = "dev"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    request_id_header_name: str = "X-Request-ID"

    # Rate limiting for endpoints that may call the generative service
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    generation_rate_limit: str = "20/minute"

    # "table" (deterministic) or "generative"
    split_strategy: str = "table"
    pace_plan_strategy: str = "table"

    # Generative-text service
    genai_api_key: str = ""
    genai_model: str = "gemini-2.0-flash"
    genai_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    genai_timeout_seconds: float = 30.0
    genai_temperature: float = 0.4

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def genai_configured(self) -> bool:
        return bool(self.genai_api_key)


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "generation_rate_limit": "60/minute",
    },
    "staging": {
        "log_level": "INFO",
        "generation_rate_limit": "20/minute",
    },
    "production": {
        "log_level": "WARNING",
        "generation_rate_limit": "10/minute",
        "genai_temperature": 0.3,
    },
    "test": {
        "log_level": "WARNING",
        "rate_limit_enabled": False,
    },
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_strategy(name: str) -> str:
    value = os.getenv(name, "table").strip().lower()
    if value not in STRATEGIES:
        raise ValueError(f"{name} must be one of {STRATEGIES}, got {value!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])
    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    return Settings(
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", profile.get("rate_limit_enabled", True)),
        rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        generation_rate_limit=os.getenv("GENERATION_RATE_LIMIT", profile.get("generation_rate_limit", "20/minute")),
        split_strategy=_env_strategy("SPLIT_STRATEGY"),
        pace_plan_strategy=_env_strategy("PACE_PLAN_STRATEGY"),
        genai_api_key=os.getenv("GENAI_API_KEY", ""),
        genai_model=os.getenv("GENAI_MODEL", "gemini-2.0-flash"),
        genai_base_url=os.getenv("GENAI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
        genai_timeout_seconds=float(os.getenv("GENAI_TIMEOUT_SECONDS", "30")),
        genai_temperature=float(os.getenv("GENAI_TEMPERATURE", str(profile.get("genai_temperature", 0.4)))),
    )
