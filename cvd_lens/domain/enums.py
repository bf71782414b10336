"""
cvd_lens.domain.enums — All enumerations used across the package.

Keep this module import-clean (stdlib only).
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Simulation variants (closed set)
# ---------------------------------------------------------------------------

class SimulationVariant(str, Enum):
    """
    Colour-vision deficiency types the service can simulate.  The set is
    fixed; there is no discovery of new variants at runtime.
    """
    PROTANOPIA   = "protanopia"
    DEUTERANOPIA = "deuteranopia"
    TRITANOPIA   = "tritanopia"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def ordered(cls, variants) -> tuple:
        """Deduplicate ``variants`` and return them in canonical order."""
        wanted = {cls(v) for v in variants}
        return tuple(v for v in cls if v in wanted)


# ---------------------------------------------------------------------------
# Local reference state
# ---------------------------------------------------------------------------

class ReferenceState(str, Enum):
    LIVE    = "live"
    REVOKED = "revoked"


# ---------------------------------------------------------------------------
# Confusion row status (display only)
# ---------------------------------------------------------------------------

class ConfusionStatus(str, Enum):
    HARD_TO_READ  = "hard_to_read"
    CONTRAST_DROP = "contrast_drop"
    ACCESSIBLE    = "accessible"
