"""
cvd_lens.analysis.ranking — Pure pair construction and confusion ranking.

No I/O and no state: both functions map their input to a new list and
leave the input untouched.
"""

from __future__ import annotations

from typing import Iterable, List

from cvd_lens.core.constants import (
    CONFUSION_DISPLAY_LIMIT,
    CONFUSION_RISK_THRESHOLD,
    DARK_REFERENCE_BG,
    LIGHT_REFERENCE_BG,
)
from cvd_lens.domain.models import ColorPair, ConfusionResult, PaletteEntry


REFERENCE_BACKGROUNDS = (LIGHT_REFERENCE_BG, DARK_REFERENCE_BG)


def build_color_pairs(palette: Iterable[PaletteEntry]) -> List[ColorPair]:
    """Pair every palette colour with the light and the dark reference background.

    Returns exactly ``2 * len(palette)`` pairs, in palette order, light first::

        [#aa0000 on #ffffff, #aa0000 on #111827, #00aa00 on #ffffff, ...]
    """
    return [
        ColorPair(fg=entry.hex, bg=bg)
        for entry in palette
        for bg in REFERENCE_BACKGROUNDS
    ]


def is_problem(result: ConfusionResult) -> bool:
    """True for pairs worth showing: unreadable, or risk at/above the threshold."""
    return not result.readable or result.risk >= CONFUSION_RISK_THRESHOLD


def confusion_sort_key(result: ConfusionResult) -> tuple:
    """Unreadable before readable, then highest risk first."""
    return (result.readable, -result.risk)


def rank_confusion(
    results: Iterable[ConfusionResult],
    limit: int = CONFUSION_DISPLAY_LIMIT,
) -> List[ConfusionResult]:
    """Problems-first view of the service's unranked confusion results.

    Filters with ``is_problem``, orders with ``confusion_sort_key`` and keeps
    at most ``limit`` entries.  ``sorted`` is stable, so equal keys keep the
    service's relative order, and re-ranking a ranked list is a no-op.
    """
    problems = [r for r in results if is_problem(r)]
    return sorted(problems, key=confusion_sort_key)[: max(0, limit)]
