"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • service            — FakeCVDService, an in-process stand-in for the
                         external API (httpx.MockTransport)
  • client             — CVDServiceClient wired to ``service``
  • image              — a small UploadedImage
  • make_confusion(...) — build a ConfusionResult
  • raw_report         — a valid /api/palette/analyze body
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import sys
from typing import Dict, List, Optional, Set

import httpx
import pytest

# Ensure the project root is on the path so all cvd_lens imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cvd_lens.config import ServiceConfig  # noqa: E402
from cvd_lens.core.constants import (  # noqa: E402
    PALETTE_ANALYZE_PATH,
    PALETTE_EXPORT_PATH,
    PALETTE_PATH,
    SIMULATE_PATH,
)
from cvd_lens.domain.models import ConfusionResult, UploadedImage  # noqa: E402
from cvd_lens.metrics import reset_metrics_for_tests  # noqa: E402
from cvd_lens.service.client import CVDServiceClient  # noqa: E402


TEST_API_BASE = "https://cvd.test"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


def multipart_field(request: httpx.Request, name: str) -> Optional[str]:
    """Value of a plain (non-file) multipart form field."""
    m = re.search(
        rb'name="' + name.encode() + rb'"\r\n\r\n(.*?)\r\n--',
        request.content,
        re.DOTALL,
    )
    return m.group(1).decode() if m else None


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


# ---------------------------------------------------------------------------
# Fake service
# ---------------------------------------------------------------------------

class FakeCVDService:
    """Answers the four endpoints; every knob is a plain attribute."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

        self.simulate_status: Dict[str, int] = {}
        self.simulate_detail: Dict[str, str] = {}
        self.simulate_delay: Dict[str, float] = {}
        self.default_delay: float = 0.0
        self.inflight = 0
        self.peak_inflight = 0
        self.completed: List[str] = []

        self.palette = [
            {"hex": "#1f77b4", "percent": 0.5},
            {"hex": "#ff7f0e", "percent": 0.3},
            {"hex": "#2ca02c", "percent": 0.2},
        ]
        self.palette_status = 200
        self.report: dict = sample_report()
        self.analyze_status = 200
        self.export_status = 200
        self.exports = {
            "cssVariables": ":root {\n  --color-1: #1f77b4;\n}\n",
            "tailwindSnippet": "colors: { brand1: '#1f77b4' }\n",
            "diff": "--- a/tokens.css\n+++ b/tokens.css\n",
        }
        self.transport_failures: Set[str] = set()

    # -- plumbing -----------------------------------------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> CVDServiceClient:
        return CVDServiceClient(ServiceConfig(api_base=TEST_API_BASE), transport=self.transport())

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        path = request.url.path
        if path in self.transport_failures:
            raise httpx.ConnectError("connection refused", request=request)
        if path == SIMULATE_PATH:
            return await self._simulate(request)
        if path == PALETTE_PATH:
            if self.palette_status != 200:
                return httpx.Response(self.palette_status, text="boom")
            return httpx.Response(200, json={"palette": self.palette})
        if path == PALETTE_ANALYZE_PATH:
            if self.analyze_status != 200:
                return httpx.Response(self.analyze_status, json={"detail": "analysis exploded"})
            return httpx.Response(200, json=self.report)
        if path == PALETTE_EXPORT_PATH:
            if self.export_status != 200:
                return httpx.Response(self.export_status, text="nope")
            return httpx.Response(200, json=self.exports)
        return httpx.Response(404, json={"detail": "Not Found"})

    async def _simulate(self, request: httpx.Request) -> httpx.Response:
        variant = multipart_field(request, "cvd_type") or ""
        self.inflight += 1
        self.peak_inflight = max(self.peak_inflight, self.inflight)
        try:
            await asyncio.sleep(self.simulate_delay.get(variant, self.default_delay))
        finally:
            self.inflight -= 1
        self.completed.append(variant)

        status = self.simulate_status.get(variant, 200)
        if status != 200:
            detail = self.simulate_detail.get(variant)
            if detail:
                return httpx.Response(status, json={"detail": detail})
            return httpx.Response(status, text="Internal Server Error")
        return httpx.Response(
            200,
            content=PNG_BYTES + variant.encode(),
            headers={"content-type": "image/png"},
        )


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

def confusion_payload(
    c1: str = "#1f77b4",
    c2: str = "#ff7f0e",
    risk: float = 0.5,
    readable: bool = True,
    contrast_loss: float = 0.4,
    worst: str = "deuteranopia",
) -> dict:
    return {
        "c1": c1,
        "c2": c2,
        "risk": risk,
        "readable": readable,
        "contrastLoss": contrast_loss,
        "originalContrast": 3.2,
        "cvdContrast": 2.8,
        "worstCVD": worst,
    }


def sample_report() -> dict:
    return {
        "cvdScores": {"protanopia": 72.5, "deuteranopia": 64.0, "tritanopia": 90.0, "overall": 75.5},
        "wcag": [
            {"fg": "#1f77b4", "bg": "#ffffff", "contrast": 4.6, "passAA": True},
            {"fg": "#1f77b4", "bg": "#111827", "contrast": 3.9, "passAA": False},
        ],
        "cvd": [
            confusion_payload("#1f77b4", "#ff7f0e", risk=0.2, readable=True),
            confusion_payload("#1f77b4", "#2ca02c", risk=0.8, readable=True, contrast_loss=1.6),
            confusion_payload("#ff7f0e", "#2ca02c", risk=0.4, readable=False),
        ],
        "suggestions": [
            {"type": "contrast", "pair": {"fg": "#1f77b4", "bg": "#111827"},
             "suggestedFg": "#5aa9e6", "delta": 1.26},
            {"type": "cvd", "target": "#2ca02c", "suggested": "#1b9e77"},
        ],
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_metrics_for_tests()
    yield


@pytest.fixture
def service() -> FakeCVDService:
    return FakeCVDService()


@pytest.fixture
def client(service) -> CVDServiceClient:
    return service.client()


@pytest.fixture
def image() -> UploadedImage:
    return UploadedImage(content=PNG_BYTES, media_type="image/png", filename="photo.png")


@pytest.fixture
def raw_report() -> dict:
    return sample_report()


@pytest.fixture
def make_confusion():
    def _factory(**kwargs) -> ConfusionResult:
        return ConfusionResult.model_validate(confusion_payload(**kwargs))
    return _factory
