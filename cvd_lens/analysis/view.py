"""
cvd_lens.analysis.view — Presentable rows derived from an AnalysisReport.

The presentation layer receives these instead of the raw report, so it
never has to re-derive labels, verdicts or the confusion ordering.  All
functions are pure.
"""

from __future__ import annotations

import math
from typing import List, Optional

from pydantic import BaseModel

from cvd_lens.analysis.ranking import rank_confusion
from cvd_lens.core.constants import (
    CONTRAST_DROP_THRESHOLD,
    LIGHT_REFERENCE_BG,
    OVERALL_SCORE_KEY,
)
from cvd_lens.domain.enums import ConfusionStatus, SimulationVariant
from cvd_lens.domain.models import (
    AnalysisReport,
    ConfusionResult,
    ContrastResult,
    ContrastSuggestion,
)


class ScoreCard(BaseModel):
    key: str
    label: str
    description: str
    score: float


class ContrastRow(BaseModel):
    fg: str
    bg: str
    background: str
    contrast: float
    passes: bool
    verdict: str


class ConfusionRow(BaseModel):
    c1: str
    c2: str
    status: ConfusionStatus
    risk_percent: int
    headline: str
    detail: str


class SuggestionRow(BaseModel):
    kind: str
    before: str
    after: str
    title: str
    text: str
    badge: str


class ReportView(BaseModel):
    scores: List[ScoreCard] = []
    contrast: List[ContrastRow] = []
    confusion: List[ConfusionRow] = []
    suggestions: List[SuggestionRow] = []


def risk_percent(risk: float) -> int:
    """Risk as a whole percentage, rounding halves up."""
    return int(math.floor(risk * 100 + 0.5))


def _ratio(value: float) -> str:
    return f"{value:g}:1"


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

def score_cards(report: AnalysisReport) -> List[ScoreCard]:
    cards: List[ScoreCard] = []
    for variant in SimulationVariant:
        score = report.variant_score(variant)
        if score is None:
            continue
        cards.append(ScoreCard(
            key=variant.value,
            label=variant.label,
            description=f"Visibility for {variant.value} (higher is better)",
            score=score,
        ))
    overall = report.overall_score
    if overall is not None:
        cards.append(ScoreCard(
            key=OVERALL_SCORE_KEY,
            label="Overall",
            description="Average accessibility for all types",
            score=overall,
        ))
    return cards


def contrast_row(result: ContrastResult) -> ContrastRow:
    background = (
        "white background" if result.bg.lower() == LIGHT_REFERENCE_BG else "dark background"
    )
    return ContrastRow(
        fg=result.fg,
        bg=result.bg,
        background=background,
        contrast=result.contrast,
        passes=result.pass_aa,
        verdict="Easy to read" if result.pass_aa else "Hard to read",
    )


def confusion_status(result: ConfusionResult) -> ConfusionStatus:
    if not result.readable:
        return ConfusionStatus.HARD_TO_READ
    if result.contrast_loss > CONTRAST_DROP_THRESHOLD:
        return ConfusionStatus.CONTRAST_DROP
    return ConfusionStatus.ACCESSIBLE


def confusion_row(result: ConfusionResult) -> ConfusionRow:
    status = confusion_status(result)
    percent = risk_percent(result.risk)
    worst = result.worst_cvd.value
    if status is ConfusionStatus.HARD_TO_READ:
        headline = "Hard to read"
        detail = f"In {worst}: contrast drops to {_ratio(result.cvd_contrast)}"
    elif status is ConfusionStatus.CONTRAST_DROP:
        headline = f"{percent}% confusion risk"
        detail = (
            f"Contrast: {_ratio(result.original_contrast)} → "
            f"{_ratio(result.cvd_contrast)} in {worst}"
        )
    else:
        headline = "Accessible"
        detail = f"Contrast: {_ratio(result.cvd_contrast)} (readable)"
    return ConfusionRow(
        c1=result.c1,
        c2=result.c2,
        status=status,
        risk_percent=percent,
        headline=headline,
        detail=detail,
    )


def suggestion_row(suggestion) -> SuggestionRow:
    if isinstance(suggestion, ContrastSuggestion):
        return SuggestionRow(
            kind="contrast",
            before=suggestion.pair.fg,
            after=suggestion.suggested_fg,
            title="Better text color",
            text=f"Change {suggestion.pair.fg} to {suggestion.suggested_fg}",
            badge=f"+{suggestion.delta:.1f} easier to read",
        )
    return SuggestionRow(
        kind="confusion",
        before=suggestion.target,
        after=suggestion.suggested,
        title="Less confusing color",
        text=f"Change {suggestion.target} to {suggestion.suggested}",
        badge="More distinct",
    )


def build_report_view(
    report: AnalysisReport,
    ranked: Optional[List[ConfusionResult]] = None,
) -> ReportView:
    """Every presentable row for ``report``.

    ``ranked`` is the already-ranked confusion list; it is computed with
    ``rank_confusion`` when omitted.
    """
    if ranked is None:
        ranked = rank_confusion(report.cvd)
    return ReportView(
        scores=score_cards(report),
        contrast=[contrast_row(r) for r in report.wcag],
        confusion=[confusion_row(r) for r in ranked],
        suggestions=[suggestion_row(s) for s in report.suggestions],
    )
