"""
Centralized configuration for cvd-lens.
All settings come from environment variables for 12-factor deployment.

Components never read these constants directly: the session resolves them
once into a ``ServiceConfig`` and injects that value at construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from cvd_lens.core.constants import (
    DEFAULT_API_BASE,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


def _env_float(name: str, default: float) -> float:
    val = os.environ.get(name, "").strip()
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# External service
# ---------------------------------------------------------------------------
API_BASE = os.environ.get("CVD_API_BASE", "").strip()
API_URL = os.environ.get("CVD_API_URL", "").strip()
HTTP_TIMEOUT_SECONDS = _env_float("CVD_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)
USER_AGENT = os.environ.get("CVD_USER_AGENT", "").strip() or DEFAULT_USER_AGENT


def resolve_api_base(base: Optional[str] = None, url: Optional[str] = None) -> str:
    """Return the service base address.

    An explicit ``base`` wins (trailing slash stripped).  Otherwise the
    origin of ``url`` is used, e.g. ``https://host/api/simulate`` →
    ``https://host``.  An unparseable ``url`` falls through to the default.
    """
    if base:
        return base.rstrip("/")
    if url:
        try:
            parts = urlsplit(url)
        except ValueError:
            parts = None
        if parts is not None and parts.scheme in {"http", "https"} and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}"
    return DEFAULT_API_BASE


@dataclass(frozen=True)
class ServiceConfig:
    """Resolved, immutable settings for one session."""

    api_base: str = DEFAULT_API_BASE
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT

    def url_for(self, path: str) -> str:
        return f"{self.api_base}{path}"

    @classmethod
    def from_env(cls, api_base: Optional[str] = None) -> "ServiceConfig":
        """Build from the module-level settings; ``api_base`` overrides them."""
        return cls(
            api_base=resolve_api_base(api_base or API_BASE, API_URL),
            timeout_seconds=max(1.0, HTTP_TIMEOUT_SECONDS),
            user_agent=USER_AGENT,
        )
