"""
cvd_lens — Error taxonomy.

Every failure the core surfaces is one of these types.  Nothing is retried
or swallowed inside the core; callers decide whether to re-invoke.

    CVDLensError
    ├── TransportError
    ├── ServiceError
    │   ├── SimulationError
    │   ├── PaletteExtractionError
    │   ├── AnalysisError
    │   └── ExportError
    └── ResourceStateError
"""

from __future__ import annotations

from typing import Optional


class CVDLensError(Exception):
    """Base class for every error raised by cvd_lens."""


class TransportError(CVDLensError):
    """The external service could not be reached (connect, read, timeout)."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: could not reach service ({reason})")


class ServiceError(CVDLensError):
    """The service answered, but not with a usable success response."""

    default_message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(message or self.default_message)


class SimulationError(ServiceError):
    """One of the concurrent simulation requests failed.

    The message is the service-provided ``detail`` when there is one,
    otherwise a generic message naming the variant and HTTP status (or the
    transport ``reason`` when no response arrived).
    """

    def __init__(
        self,
        variant: str,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.variant = getattr(variant, "value", str(variant))
        cause = status_code if status_code is not None else reason
        message = detail or f"Simulation failed ({self.variant}): {cause}"
        super().__init__(message, status_code=status_code, detail=detail)


class PaletteExtractionError(ServiceError):
    default_message = "Palette extraction failed"


class AnalysisError(ServiceError):
    default_message = "Analysis failed"


class ExportError(ServiceError):
    default_message = "Export failed"


class ResourceStateError(CVDLensError):
    """A revoked LocalReference was used."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"reference {url} has been revoked")
