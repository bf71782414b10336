"""
cvd_lens.export — Design-token artifacts for a finalized palette.

The service returns three text documents; each is wrapped in its own
``LocalReference`` under a fixed filename so it can be downloaded (or
written to disk) independently of the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from cvd_lens.core.constants import (
    CSS_MEDIA_TYPE,
    CSS_TOKENS_FILENAME,
    TAILWIND_TOKENS_FILENAME,
    TEXT_MEDIA_TYPE,
    TOKENS_PATCH_FILENAME,
)
from cvd_lens.domain.models import Blob, PaletteEntry
from cvd_lens.resources import LocalReference, ResourceLifecycleManager
from cvd_lens.service.client import CVDServiceClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadableArtifact:
    filename: str
    reference: LocalReference

    @property
    def media_type(self) -> str:
        return self.reference.media_type

    def text(self) -> str:
        return self.reference.read().decode("utf-8")

    def save_to(self, directory: Union[str, Path]) -> Path:
        path = Path(directory) / self.filename
        path.write_bytes(self.reference.read())
        return path


@dataclass(frozen=True)
class TokenArtifacts:
    css_variables: DownloadableArtifact
    tailwind_snippet: DownloadableArtifact
    diff: DownloadableArtifact

    def artifacts(self) -> tuple:
        return (self.css_variables, self.tailwind_snippet, self.diff)

    def references(self) -> List[LocalReference]:
        return [a.reference for a in self.artifacts()]

    def save_to(self, directory: Union[str, Path]) -> List[Path]:
        out = Path(directory)
        out.mkdir(parents=True, exist_ok=True)
        return [a.save_to(out) for a in self.artifacts()]


class ExportBuilder:
    """Requests token artifacts for a palette and packages them for download."""

    def __init__(
        self,
        client: CVDServiceClient,
        resources: Optional[ResourceLifecycleManager] = None,
    ) -> None:
        self._client = client
        self._resources = resources or ResourceLifecycleManager()

    def _package(self, filename: str, text: str, media_type: str) -> DownloadableArtifact:
        blob = Blob(content=text.encode("utf-8"), media_type=media_type)
        return DownloadableArtifact(filename=filename, reference=self._resources.acquire(blob))

    async def build_token_artifacts(
        self,
        palette: Sequence[PaletteEntry],
    ) -> Optional[TokenArtifacts]:
        """Returns ``None`` without any request when ``palette`` is empty.

        Raises ``ExportError`` on a non-success response.
        """
        colors = [entry.hex for entry in palette]
        if not colors:
            logger.debug("Export skipped: empty palette")
            return None

        tokens = await self._client.export_tokens(colors)
        artifacts = TokenArtifacts(
            css_variables=self._package(CSS_TOKENS_FILENAME, tokens.css_variables, CSS_MEDIA_TYPE),
            tailwind_snippet=self._package(TAILWIND_TOKENS_FILENAME, tokens.tailwind_snippet, TEXT_MEDIA_TYPE),
            diff=self._package(TOKENS_PATCH_FILENAME, tokens.diff, TEXT_MEDIA_TYPE),
        )
        logger.info("Exported design tokens for %d colours", len(colors))
        return artifacts
