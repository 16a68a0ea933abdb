"""Error types raised by the resolution pipeline."""

from typing import Optional


class RepresentError(Exception):
    """Base class for all Represent errors."""


class ResolutionError(RepresentError):
    """Error that crosses the resolve() boundary.

    ``code`` mirrors the callable-function status the mobile client expects.
    """

    code = "internal"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputError(ResolutionError):
    """Address missing or too short; raised before any network call."""

    code = "invalid-argument"


class GeocodeError(ResolutionError):
    """No address match or unmappable state; aborts the resolution."""

    code = "failed-precondition"


class InternalError(ResolutionError):
    """Unexpected fault inside the pipeline."""

    code = "internal"


class SourceError(RepresentError):
    """Raised when an upstream data source fails or returns unusable data.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: Optional[int] = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class FederalSourceError(SourceError):
    """Primary federal roster failed or returned too few members."""


class StateSourceError(SourceError):
    """State legislator lookup failed."""
