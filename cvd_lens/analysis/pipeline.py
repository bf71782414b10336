"""
cvd_lens.analysis.pipeline — Two-stage palette → accessibility analysis.

    image ──► POST /api/palette (k=5) ──► palette
    palette ──► build_color_pairs ──► POST /api/palette/analyze ──► report

The stages are strictly sequential (stage 2 needs stage 1's output).  The
session calls the stages one at a time so that a failed analysis stage
still leaves the extracted palette visible; ``analyze()`` runs both.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from cvd_lens.analysis.ranking import build_color_pairs
from cvd_lens.core.constants import PALETTE_CLUSTER_COUNT
from cvd_lens.domain.models import AnalysisReport, PaletteEntry, UploadedImage
from cvd_lens.service.client import CVDServiceClient

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Palette extraction followed by contrast/confusion analysis."""

    def __init__(self, client: CVDServiceClient) -> None:
        self._client = client

    async def extract_palette(self, image: UploadedImage) -> List[PaletteEntry]:
        """Stage 1.  Raises ``PaletteExtractionError``."""
        palette = await self._client.extract_palette(image, k=PALETTE_CLUSTER_COUNT)
        logger.info("Extracted %d palette colours", len(palette))
        return palette

    async def analyze_palette(self, palette: Sequence[PaletteEntry]) -> AnalysisReport:
        """Stage 2.  Raises ``AnalysisError``."""
        colors = [entry.hex for entry in palette]
        pairs = build_color_pairs(palette)
        report = await self._client.analyze_palette(colors, pairs)
        logger.info(
            "Analysis complete: %d contrast rows, %d confusion rows, %d suggestions",
            len(report.wcag), len(report.cvd), len(report.suggestions),
        )
        return report

    async def analyze(self, image: UploadedImage) -> AnalysisReport:
        palette = await self.extract_palette(image)
        return await self.analyze_palette(palette)
