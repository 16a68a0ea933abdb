"""Geocodio API service implementation."""

from typing import Any, Optional

from loguru import logger

from represent.config import Settings
from represent.errors import GeocodeError
from represent.models import GeoLocation
from represent.normalize import STATE_TO_FIPS, normalize_state_to_code, pad_district

from ..base import GeocodeService
from ..registry import GeocodeServiceRegistry


def _first_district(entries: Any) -> Optional[str]:
    if isinstance(entries, list) and entries and isinstance(entries[0], dict):
        value = entries[0].get("district_number")
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


@GeocodeServiceRegistry.register
class GeocodioGeocoder(GeocodeService):
    """Geocodio API implementation (US only, district fields appended)."""

    def __init__(self, config: Settings):
        """Initialize Geocodio geocoder with configuration.

        Args:
            config: Application settings containing geocodio configuration
        """
        super().__init__(config)
        self.geocodio_config = config.geocode_services.geocodio

    @property
    def service_name(self) -> str:
        """Unique identifier for this service."""
        return "geocodio"

    @property
    def timeout(self) -> float:
        return self.geocodio_config.timeout

    def build_request(self, address: str) -> tuple[str, dict[str, Any]]:
        """Build a single-address request with district fields.

        Raises:
            GeocodeError: If API key is not configured
        """
        if not self.geocodio_config.api_key:
            logger.error(
                "Geocodio API key not configured. "
                "Set REPRESENT_GEOCODE_SERVICES__GEOCODIO__API_KEY environment variable."
            )
            raise GeocodeError("Could not geocode address")

        url = f"{self.geocodio_config.base_url}/{self.geocodio_config.api_version}/geocode"
        params = {
            "q": address,
            "fields": self.geocodio_config.fields,
            "api_key": self.geocodio_config.api_key,
        }
        return url, params

    def parse_response(self, response: dict[str, Any], address: str) -> GeoLocation:
        """Parse Geocodio API response into a GeoLocation.

        The Geocodio API returns JSON with format:
        {
            "results": [
                {
                    "formatted_address": "string",
                    "address_components": {"state": "IL", ...},
                    "location": {"lat": float, "lng": float},
                    "fields": {
                        "congressional_districts": [{"district_number": 7, ...}],
                        "state_legislative_districts": {
                            "senate": [{"district_number": "3", ...}],
                            "house": [{"district_number": "5", ...}]
                        }
                    }
                }
            ]
        }
        """
        results = response.get("results") or []
        if not results:
            logger.warning("Geocodio returned no results for '{}'", address)
            raise GeocodeError("Could not geocode address")

        best = results[0]
        components = best.get("address_components") or {}
        state = normalize_state_to_code(components.get("state"))
        if not state:
            logger.warning("Geocodio result has unknown state: {}", components.get("state"))
            raise GeocodeError("Could not geocode address")

        location = best.get("location") or {}
        try:
            lat = float(location["lat"])
            lng = float(location["lng"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Geocodio result has unusable coordinates: {}", location)
            raise GeocodeError("Could not geocode address")

        fields = best.get("fields") or {}
        legislative = fields.get("state_legislative_districts") or {}

        return GeoLocation(
            lat=lat,
            lng=lng,
            state_fips=STATE_TO_FIPS[state],
            state=state,
            congressional_district=pad_district(_first_district(fields.get("congressional_districts"))),
            upper_state_district=_first_district(legislative.get("senate")),
            lower_state_district=_first_district(legislative.get("house")),
            matched_address=best.get("formatted_address"),
        )
