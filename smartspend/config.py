from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st


@dataclass(frozen=True)
class AppConfig:
    currency: str = "USD"
    locale: str = "en_US"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    temperature: float = 0.2
    max_output_tokens: int = 3000
    request_timeout_seconds: float = 30.0
    rate_limit_requests: int = 3
    rate_limit_window_seconds: float = 300.0
    max_requests_per_minute: int = 30


def _section(secrets: dict, name: str) -> dict:
    section = secrets.get(name, {}) if isinstance(secrets, dict) else {}
    try:
        return dict(section)
    except (TypeError, ValueError):
        return {}


def _number(section: dict, key: str, default: Any, cast: type) -> Any:
    value = section.get(key)
    if value is None:
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        return default


def load_config() -> AppConfig:
    """Load configuration from Streamlit secrets with safe defaults.

    Handles missing `.streamlit/secrets.toml` gracefully, returning defaults.
    """
    # Accessing st.secrets can raise FileNotFoundError if no secrets file exists.
    try:
        raw_secrets = st.secrets  # type: ignore[attr-defined]
        secrets: dict = dict(raw_secrets) if raw_secrets else {}
    except FileNotFoundError:
        secrets = {}
    except Exception:
        secrets = {}

    api_section = _section(secrets, "api")
    app_section = _section(secrets, "app")
    budget_section = _section(secrets, "budget_ai")

    defaults = AppConfig()
    return AppConfig(
        currency=app_section.get("currency", defaults.currency),
        locale=app_section.get("locale", defaults.locale),
        gemini_api_key=api_section.get("gemini_api_key"),
        gemini_model=api_section.get("gemini_model", defaults.gemini_model),
        temperature=_number(budget_section, "temperature", defaults.temperature, float),
        max_output_tokens=_number(budget_section, "max_output_tokens", defaults.max_output_tokens, int),
        request_timeout_seconds=_number(
            budget_section, "request_timeout_seconds", defaults.request_timeout_seconds, float
        ),
        rate_limit_requests=_number(budget_section, "rate_limit_requests", defaults.rate_limit_requests, int),
        rate_limit_window_seconds=_number(
            budget_section, "rate_limit_window_seconds", defaults.rate_limit_window_seconds, float
        ),
        max_requests_per_minute=_number(
            budget_section, "max_requests_per_minute", defaults.max_requests_per_minute, int
        ),
    )
