"""
cvd_lens — System-wide constants.

Every fixed literal the orchestration layer depends on lives here: endpoint
paths, the palette cluster count, the reference backgrounds used for pair
construction, the confusion ranking rule and the export filenames.
"""

# ---------------------------------------------------------------------------
# External service
# ---------------------------------------------------------------------------

DEFAULT_API_BASE: str = "https://cvd-backend.onrender.com"
DEFAULT_USER_AGENT: str = "cvd-lens/0.1"
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 60.0   # free-tier hosts cold-start slowly

SIMULATE_PATH: str = "/api/simulate"
PALETTE_PATH: str = "/api/palette"
PALETTE_ANALYZE_PATH: str = "/api/palette/analyze"
PALETTE_EXPORT_PATH: str = "/api/palette/export"

# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

# Canonical order; results are always reported in this order.
SIMULATION_VARIANT_ORDER = ("protanopia", "deuteranopia", "tritanopia")

DEFAULT_UPLOAD_FILENAME: str = "image.jpg"
DEFAULT_IMAGE_MEDIA_TYPE: str = "image/jpeg"
DEFAULT_BINARY_MEDIA_TYPE: str = "application/octet-stream"

# ---------------------------------------------------------------------------
# Palette / analysis
# ---------------------------------------------------------------------------

PALETTE_CLUSTER_COUNT: int = 5

LIGHT_REFERENCE_BG: str = "#ffffff"
DARK_REFERENCE_BG: str = "#111827"      # tailwind gray-900

# Confusion ranking: keep unreadable pairs or anything at/above this risk.
CONFUSION_RISK_THRESHOLD: float = 0.3
CONFUSION_DISPLAY_LIMIT: int = 10

# A CVD contrast loss above this many ratio points is flagged as a drop.
CONTRAST_DROP_THRESHOLD: float = 1.0

OVERALL_SCORE_KEY: str = "overall"

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

CSS_TOKENS_FILENAME: str = "tokens.css"
TAILWIND_TOKENS_FILENAME: str = "tailwind-colors.txt"
TOKENS_PATCH_FILENAME: str = "tokens.patch"

CSS_MEDIA_TYPE: str = "text/css"
TEXT_MEDIA_TYPE: str = "text/plain"

# ---------------------------------------------------------------------------
# Local references
# ---------------------------------------------------------------------------

REFERENCE_URL_SCHEME: str = "blob"
REFERENCE_NAMESPACE: str = "cvd-lens"
