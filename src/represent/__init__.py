"""Represent: resolve a US postal address to its elected legislators."""

from represent.errors import GeocodeError, InputError, InternalError, ResolutionError
from represent.models import GeoLocation, Office, Official, ResolutionResult
from represent.pipeline import RepresentativeLookup, resolve

__all__ = [
    "GeoLocation",
    "GeocodeError",
    "InputError",
    "InternalError",
    "Office",
    "Official",
    "RepresentativeLookup",
    "ResolutionError",
    "ResolutionResult",
    "resolve",
]
