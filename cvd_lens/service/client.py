"""
cvd_lens — External CVD service client.

Wraps all HTTP calls to the simulation/analysis service into a single,
reusable class.  Each public coroutine maps to one endpoint and raises the
stage-specific error from ``cvd_lens.core.errors`` on failure.  Nothing is
retried: a failed request surfaces immediately.

Usage::

    client  = CVDServiceClient(ServiceConfig.from_env())
    blob    = await client.simulate(image, SimulationVariant.PROTANOPIA)
    palette = await client.extract_palette(image, k=5)
    report  = await client.analyze_palette(colors, pairs)
    tokens  = await client.export_tokens(colors)
    await client.close()
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from cvd_lens.config import ServiceConfig
from cvd_lens.core.constants import (
    DEFAULT_BINARY_MEDIA_TYPE,
    PALETTE_ANALYZE_PATH,
    PALETTE_CLUSTER_COUNT,
    PALETTE_EXPORT_PATH,
    PALETTE_PATH,
    SIMULATE_PATH,
)
from cvd_lens.core.errors import (
    AnalysisError,
    ExportError,
    PaletteExtractionError,
    ServiceError,
    SimulationError,
    TransportError,
)
from cvd_lens.domain.enums import SimulationVariant
from cvd_lens.domain.models import (
    AnalysisReport,
    AnalyzeRequest,
    Blob,
    ColorPair,
    ExportRequest,
    PaletteEntry,
    PaletteResponse,
    TokenExport,
    UploadedImage,
)
from cvd_lens.metrics import record_request

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _error_detail(resp: httpx.Response) -> Optional[str]:
    """Return the service's ``{"detail": ...}`` message, if the body has one."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if not detail:
        return None
    return detail if isinstance(detail, str) else json.dumps(detail)


def _image_part(image: UploadedImage) -> dict:
    return {"file": (image.filename, image.content, image.media_type)}


class CVDServiceClient:
    """Async HTTP client for the CVD simulation/analysis service.

    Instantiate once per session; the internal httpx.AsyncClient is lazily
    created and shared by concurrent requests.  Pass ``transport`` to route
    requests somewhere other than the network (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: ServiceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> ServiceConfig:
        return self._config

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _client_get(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._config.user_agent},
                timeout=self._config.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _post(self, operation: str, path: str, **kwargs: Any) -> httpx.Response:
        """POST to ``path``.  Raises ``TransportError`` if no response arrives."""
        client = await self._client_get()
        url = self._config.url_for(path)
        logger.debug("POST %s (%s)", url, operation)
        try:
            resp = await client.post(url, **kwargs)
        except httpx.TransportError as exc:
            record_request(operation, ok=False)
            logger.warning("%s: transport failure: %s", operation, exc)
            raise TransportError(operation, str(exc) or type(exc).__name__) from exc

        record_request(operation, ok=resp.is_success)
        if not resp.is_success:
            logger.warning("%s: service returned HTTP %d", operation, resp.status_code)
        return resp

    @staticmethod
    def _parse(resp: httpx.Response, model: Type[M], error: Type[ServiceError]) -> M:
        try:
            return model.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Unexpected %s body: %s", model.__name__, exc)
            raise error(
                status_code=resp.status_code,
                detail=f"invalid response body: {exc}",
            ) from exc

    @staticmethod
    def _check(resp: httpx.Response, error: Type[ServiceError]) -> None:
        if not resp.is_success:
            raise error(status_code=resp.status_code, detail=_error_detail(resp))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def simulate(self, image: UploadedImage, variant: SimulationVariant) -> Blob:
        """Render ``image`` as seen with ``variant``; returns the image bytes."""
        variant = SimulationVariant(variant)
        try:
            resp = await self._post(
                "simulate",
                SIMULATE_PATH,
                files=_image_part(image),
                data={"cvd_type": variant.value},
            )
        except TransportError as exc:
            raise SimulationError(variant, reason=exc.reason) from exc

        if not resp.is_success:
            raise SimulationError(
                variant,
                status_code=resp.status_code,
                detail=_error_detail(resp),
            )
        media_type = resp.headers.get("content-type", "").split(";")[0].strip()
        return Blob(content=resp.content, media_type=media_type or DEFAULT_BINARY_MEDIA_TYPE)

    async def extract_palette(
        self,
        image: UploadedImage,
        k: int = PALETTE_CLUSTER_COUNT,
    ) -> List[PaletteEntry]:
        """Dominant colours of ``image`` in descending share order."""
        resp = await self._post(
            "palette",
            PALETTE_PATH,
            files=_image_part(image),
            data={"k": str(int(k))},
        )
        self._check(resp, PaletteExtractionError)
        return list(self._parse(resp, PaletteResponse, PaletteExtractionError).palette)

    async def analyze_palette(
        self,
        colors: Sequence[str],
        pairs: Sequence[ColorPair],
    ) -> AnalysisReport:
        """Contrast, confusion and suggestion report for a palette."""
        try:
            body = AnalyzeRequest(palette=list(colors), pairs=list(pairs))
        except ValidationError as exc:
            raise AnalysisError(detail=f"invalid request: {exc}") from exc
        resp = await self._post(
            "analyze",
            PALETTE_ANALYZE_PATH,
            json=body.model_dump(mode="json", by_alias=True),
        )
        self._check(resp, AnalysisError)
        return self._parse(resp, AnalysisReport, AnalysisError)

    async def export_tokens(self, colors: Sequence[str]) -> TokenExport:
        """Design-token artifacts (CSS variables, Tailwind snippet, diff)."""
        try:
            body = ExportRequest(palette=list(colors))
        except ValidationError as exc:
            raise ExportError(detail=f"invalid request: {exc}") from exc
        resp = await self._post(
            "export",
            PALETTE_EXPORT_PATH,
            json=body.model_dump(mode="json", by_alias=True),
        )
        self._check(resp, ExportError)
        return self._parse(resp, TokenExport, ExportError)

    async def close(self) -> None:
        """Cleanly close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "CVDServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
