"""
cvd_lens.domain.models — Canonical Pydantic / dataclass models.

These are the single source of truth for data flowing between the service
client, the orchestrators and the session.  Wire models mirror the JSON
the external service speaks (camelCase aliases); Python code uses the
snake_case field names.

All models are immutable: every stage builds new values from the previous
stage's output and never edits one in place.

Import pattern::

    from cvd_lens.domain.models import UploadedImage, PaletteEntry, AnalysisReport
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cvd_lens.core.constants import (
    DEFAULT_BINARY_MEDIA_TYPE,
    DEFAULT_IMAGE_MEDIA_TYPE,
    DEFAULT_UPLOAD_FILENAME,
    OVERALL_SCORE_KEY,
)
from cvd_lens.domain.enums import SimulationVariant


HEX_PATTERN = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

HexColor = Annotated[str, Field(pattern=HEX_PATTERN)]
Score = Annotated[float, Field(ge=0.0, le=100.0)]


# ---------------------------------------------------------------------------
# Binary payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Blob:
    """An opaque binary payload plus its declared media type."""
    content: bytes
    media_type: str = DEFAULT_BINARY_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadedImage(Blob):
    """The user's image.  Owned by the caller until wrapped in a reference."""
    media_type: str = DEFAULT_IMAGE_MEDIA_TYPE
    filename: str = DEFAULT_UPLOAD_FILENAME

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UploadedImage":
        p = Path(path)
        media_type, _ = mimetypes.guess_type(p.name)
        return cls(
            content=p.read_bytes(),
            media_type=media_type or DEFAULT_IMAGE_MEDIA_TYPE,
            filename=p.name,
        )

    @classmethod
    def from_blob(cls, blob: Blob, filename: str = DEFAULT_UPLOAD_FILENAME) -> "UploadedImage":
        return cls(
            content=blob.content,
            media_type=blob.media_type or DEFAULT_IMAGE_MEDIA_TYPE,
            filename=filename,
        )


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------

class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PaletteEntry(_WireModel):
    """One dominant colour and its share of the image area."""
    hex: HexColor
    percent: float = Field(ge=0.0, le=1.0)


class PaletteResponse(_WireModel):
    """Body of ``POST /api/palette``; order is dominance order and kept as-is."""
    palette: List[PaletteEntry] = Field(default_factory=list)


class ColorPair(_WireModel):
    fg: HexColor
    bg: HexColor


class ContrastResult(_WireModel):
    fg: HexColor
    bg: HexColor
    contrast: float
    pass_aa: bool = Field(alias="passAA")


class ConfusionResult(_WireModel):
    """Confusion estimate for one unordered palette pair."""
    c1: HexColor
    c2: HexColor
    risk: float = Field(ge=0.0, le=1.0)
    readable: bool
    contrast_loss: float = Field(alias="contrastLoss")
    original_contrast: float = Field(alias="originalContrast")
    cvd_contrast: float = Field(alias="cvdContrast")
    worst_cvd: SimulationVariant = Field(alias="worstCVD")


class ContrastSuggestion(_WireModel):
    type: Literal["contrast"] = "contrast"
    pair: ColorPair
    suggested_fg: HexColor = Field(alias="suggestedFg")
    delta: float


class ConfusionSuggestion(_WireModel):
    type: str = "confusion"
    target: HexColor
    suggested: HexColor


# Anything that is not a contrast suggestion is treated as a confusion one.
Suggestion = Annotated[
    Union[ContrastSuggestion, ConfusionSuggestion],
    Field(union_mode="left_to_right"),
]


class AnalysisReport(_WireModel):
    """Body of ``POST /api/palette/analyze``.

    ``cvd_scores`` holds 0-100 visibility scores keyed by variant name plus
    ``"overall"``.  ``overall`` is present exactly when at least one variant
    score is: a missing overall is completed with the mean of the variant
    scores, and an overall without any variant score is rejected.
    """
    cvd_scores: Dict[str, Score] = Field(default_factory=dict, alias="cvdScores")
    wcag: List[ContrastResult] = Field(default_factory=list)
    cvd: List[ConfusionResult] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)

    @field_validator("cvd_scores", mode="before")
    @classmethod
    def _null_scores_are_empty(cls, v):
        return {} if v is None else v

    @field_validator("cvd_scores")
    @classmethod
    def _check_overall(cls, scores: Dict[str, float]) -> Dict[str, float]:
        allowed = {v.value for v in SimulationVariant} | {OVERALL_SCORE_KEY}
        unknown = sorted(set(scores) - allowed)
        if unknown:
            raise ValueError(f"unknown cvdScores keys: {', '.join(unknown)}")

        variant_scores = [s for key, s in scores.items() if key != OVERALL_SCORE_KEY]
        has_overall = OVERALL_SCORE_KEY in scores
        if has_overall and not variant_scores:
            raise ValueError("cvdScores.overall present without any variant score")
        if variant_scores and not has_overall:
            scores = dict(scores)
            scores[OVERALL_SCORE_KEY] = round(sum(variant_scores) / len(variant_scores), 1)
        return scores

    @field_validator("wcag", "cvd", "suggestions", mode="before")
    @classmethod
    def _null_lists_are_empty(cls, v):
        return [] if v is None else v

    def variant_score(self, variant: SimulationVariant) -> Optional[float]:
        return self.cvd_scores.get(SimulationVariant(variant).value)

    @property
    def overall_score(self) -> Optional[float]:
        return self.cvd_scores.get(OVERALL_SCORE_KEY)


class AnalyzeRequest(_WireModel):
    palette: List[HexColor]
    pairs: List[ColorPair]


class ExportRequest(_WireModel):
    palette: List[HexColor]


class TokenExport(_WireModel):
    """Body of ``POST /api/palette/export``: three text artifacts."""
    css_variables: str = Field(alias="cssVariables")
    tailwind_snippet: str = Field(alias="tailwindSnippet")
    diff: str
