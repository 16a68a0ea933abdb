"""Geocoding services for Represent.

This package turns a free-form address into a GeoLocation carrying the
state and the congressional and state legislative districts that contain it.
"""

from .base import GeocodeService, validate_address
from .registry import GeocodeServiceRegistry
from . import services  # noqa: F401

__all__ = [
    "GeocodeService",
    "GeocodeServiceRegistry",
    "validate_address",
]
