"""
cvd_lens.workflow — Session that drives the whole upload → simulate →
analyze → export flow and owns every reference it creates.

The session publishes an immutable ``ViewModel`` after each stage; the
presentation layer only ever reads it.  Each stage replaces the view with a
new one, and any reference dropped from the view is released in the same
step, so nothing outlives the view that shows it.

Usage::

    async with CVDSession(ServiceConfig.from_env()) as session:
        view = await session.upload(UploadedImage.from_path("photo.jpg"))
        await session.analyze()
        artifacts = await session.export_tokens()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from cvd_lens.analysis.pipeline import AnalysisPipeline
from cvd_lens.analysis.ranking import rank_confusion
from cvd_lens.analysis.view import ReportView, build_report_view
from cvd_lens.config import ServiceConfig
from cvd_lens.core.errors import CVDLensError
from cvd_lens.domain.enums import SimulationVariant
from cvd_lens.domain.models import (
    AnalysisReport,
    ConfusionResult,
    PaletteEntry,
    UploadedImage,
)
from cvd_lens.export import ExportBuilder, TokenArtifacts
from cvd_lens.resources import LocalReference, ResourceLifecycleManager
from cvd_lens.service.client import CVDServiceClient
from cvd_lens.simulation import SimulationOrchestrator, SimulationResultSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewModel:
    """What the presentation layer gets.  Populated incrementally."""
    original_ref: LocalReference
    simulation_results: Optional[SimulationResultSet] = None
    palette_entries: Optional[Tuple[PaletteEntry, ...]] = None
    analysis_report: Optional[AnalysisReport] = None
    ranked_cvd: Tuple[ConfusionResult, ...] = ()
    export_artifacts: Optional[TokenArtifacts] = None
    error: Optional[str] = None

    def owned_references(self) -> List[LocalReference]:
        refs = [self.original_ref]
        if self.simulation_results is not None:
            refs.extend(self.simulation_results.references())
        if self.export_artifacts is not None:
            refs.extend(self.export_artifacts.references())
        return refs

    def report_view(self) -> Optional[ReportView]:
        if self.analysis_report is None:
            return None
        return build_report_view(self.analysis_report, list(self.ranked_cvd))


class CVDSession:
    """One user's workflow against the CVD service."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        client: Optional[CVDServiceClient] = None,
        resources: Optional[ResourceLifecycleManager] = None,
    ) -> None:
        if config is None:
            config = client.config if client is not None else ServiceConfig.from_env()
        self._config = config
        self._owns_client = client is None
        self._client = client or CVDServiceClient(config)
        self._resources = resources or ResourceLifecycleManager()
        self._simulator = SimulationOrchestrator(self._client, self._resources)
        self._pipeline = AnalysisPipeline(self._client)
        self._exporter = ExportBuilder(self._client, self._resources)
        self._view: Optional[ViewModel] = None

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def view(self) -> Optional[ViewModel]:
        return self._view

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_view(self) -> ViewModel:
        if self._view is None:
            raise RuntimeError("no image uploaded")
        return self._view

    def _is_current(self, original: LocalReference) -> bool:
        return self._view is not None and self._view.original_ref is original

    def _publish(self, **changes) -> ViewModel:
        self._view = replace(self._require_view(), **changes)
        return self._view

    def _fail(self, original: LocalReference, stage: str, exc: CVDLensError) -> None:
        logger.warning("%s failed: %s", stage, exc)
        if self._is_current(original):
            self._publish(error=str(exc))

    def _release(self, refs: Iterable[LocalReference]) -> None:
        self._resources.release_all(refs)

    @staticmethod
    def _original_image(view: ViewModel) -> UploadedImage:
        blob = view.original_ref.blob()
        if isinstance(blob, UploadedImage):
            return blob
        return UploadedImage.from_blob(blob)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def upload(
        self,
        image: UploadedImage,
        variants: Iterable[SimulationVariant] = tuple(SimulationVariant),
    ) -> ViewModel:
        """Show ``image`` and its simulations, superseding any previous upload.

        The original is wrapped before any request is made, so it stays
        visible when simulation fails.  Raises ``SimulationError``.
        """
        previous = self._view
        original = self._resources.acquire(image)
        self._view = ViewModel(original_ref=original)
        if previous is not None:
            self._release(previous.owned_references())

        try:
            results = await self._simulator.simulate_all(image, variants)
        except CVDLensError as exc:
            self._fail(original, "Simulation", exc)
            raise

        if not self._is_current(original):
            logger.info("Upload superseded while simulating; dropping results")
            self._release(results.references())
            return self._require_view()
        return self._publish(simulation_results=results)

    async def analyze(self) -> AnalysisReport:
        """Extract the palette, then analyse it.

        The palette is published as soon as it arrives, so it survives a
        failing analysis stage.  Publishing it drops the report, ranking and
        export artifacts of any earlier run.  Raises ``PaletteExtractionError`` or
        ``AnalysisError``; ``ResourceStateError`` if the original was revoked.
        """
        view = self._require_view()
        original = view.original_ref
        image = self._original_image(view)
        self._publish(error=None)

        try:
            palette = await self._pipeline.extract_palette(image)
        except CVDLensError as exc:
            self._fail(original, "Palette extraction", exc)
            raise
        if self._is_current(original):
            # Outputs derived from an earlier palette go with it.
            stale = self._require_view().export_artifacts
            self._publish(
                palette_entries=tuple(palette),
                analysis_report=None,
                ranked_cvd=(),
                export_artifacts=None,
            )
            if stale is not None:
                self._release(stale.references())

        try:
            report = await self._pipeline.analyze_palette(palette)
        except CVDLensError as exc:
            self._fail(original, "Analysis", exc)
            raise
        if self._is_current(original):
            self._publish(
                analysis_report=report,
                ranked_cvd=tuple(rank_confusion(report.cvd)),
            )
        return report

    async def export_tokens(self) -> Optional[TokenArtifacts]:
        """Build token artifacts for the current palette.

        No-op returning ``None`` when there is no palette yet.  Replaces (and
        releases) artifacts from an earlier export.  Raises ``ExportError``.
        """
        view = self._require_view()
        original = view.original_ref
        try:
            artifacts = await self._exporter.build_token_artifacts(view.palette_entries or ())
        except CVDLensError as exc:
            self._fail(original, "Export", exc)
            raise
        if artifacts is None:
            return None

        if not self._is_current(original):
            logger.info("Upload superseded while exporting; dropping artifacts")
            self._release(artifacts.references())
            return None
        previous = self._require_view().export_artifacts
        self._publish(export_artifacts=artifacts, error=None)
        if previous is not None:
            self._release(previous.references())
        return artifacts

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def discard(self) -> None:
        """Drop the current view and release every reference it owns."""
        view, self._view = self._view, None
        if view is not None:
            self._release(view.owned_references())

    async def close(self) -> None:
        self.discard()
        if self._owns_client:
            await self._client.close()

    async def __aenter__(self) -> "CVDSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
