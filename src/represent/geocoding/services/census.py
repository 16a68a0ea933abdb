"""Census Geocoder service implementation."""

from typing import Any, Optional

from loguru import logger

from represent.config import Settings
from represent.errors import GeocodeError
from represent.models import GeoLocation
from represent.normalize import fips_to_state, pad_district

from ..base import GeocodeService
from ..registry import GeocodeServiceRegistry

# Each layer family is a list of alternatives; an alternative matches when
# every needle is a case-insensitive substring of the layer key. Census
# renames layers with each Congress and redistricting vintage, e.g.
# "118th Congressional Districts" -> "119th Congressional Districts".
CONGRESSIONAL_LAYER = (("congressional districts",),)
UPPER_LAYER = (("state legislative districts", "upper"), ("sldu",))
LOWER_LAYER = (("state legislative districts", "lower"), ("sldl",))
STATES_LAYER = (("states",),)


def find_layer(
    geographies: dict[str, Any], family: tuple[tuple[str, ...], ...]
) -> Optional[dict[str, Any]]:
    """
    Return the first geography object of the layer matching ``family``.

    Args:
        geographies: The ``geographies`` map of a Census address match
        family: Alternatives of substrings identifying the layer

    Returns:
        First object in the matching layer, or None
    """
    for key, objects in geographies.items():
        lowered = key.lower()
        if not any(all(needle in lowered for needle in alt) for alt in family):
            continue
        if isinstance(objects, list) and objects and isinstance(objects[0], dict):
            return objects[0]
    return None


def congressional_district(layer: Optional[dict[str, Any]]) -> Optional[str]:
    """Read the district number from a congressional layer object."""
    if not layer:
        return None
    values = [layer.get(key) for key in ("DISTRICT", "BASENAME", "CONG_DIST")]
    # Vintage-specific code column such as CD119
    values += [v for k, v in layer.items() if k.upper().startswith("CD") and k[2:].isdigit()]
    values = [str(v).strip() for v in values if v is not None and str(v).strip()]

    # At-large BASENAMEs are prose ("Congressional District (at Large)")
    for value in values:
        if value.isdigit():
            return pad_district(value)
    return values[0] if values else None


def legislative_district(layer: Optional[dict[str, Any]]) -> Optional[str]:
    """Read the district label from a state legislative layer object."""
    if not layer:
        return None
    for key in ("BASENAME", "DISTRICT", "SLDU", "SLDL"):
        value = layer.get(key)
        if value:
            return str(value).strip()
    return None


@GeocodeServiceRegistry.register
class CensusGeocoder(GeocodeService):
    """US Census one-line-address geographies API implementation."""

    def __init__(self, config: Settings):
        """Initialize Census geocoder with configuration.

        Args:
            config: Application settings containing census configuration
        """
        super().__init__(config)
        self.census_config = config.geocode_services.census

    @property
    def service_name(self) -> str:
        """Unique identifier for this service."""
        return "census"

    @property
    def timeout(self) -> float:
        return self.census_config.timeout

    def build_request(self, address: str) -> tuple[str, dict[str, Any]]:
        url = f"{self.census_config.base_url}/geographies/onelineaddress"
        params = {
            "address": address,
            "benchmark": self.census_config.benchmark,
            "vintage": self.census_config.vintage,
            "layers": self.census_config.layers,
            "format": "json",
        }
        return url, params

    def parse_response(self, response: dict[str, Any], address: str) -> GeoLocation:
        """Parse Census API response into a GeoLocation.

        The Census API returns JSON with format:
        {
            "result": {
                "addressMatches": [
                    {
                        "matchedAddress": "100 W RANDOLPH ST, CHICAGO, IL, 60601",
                        "coordinates": {"x": -87.63, "y": 41.88},
                        "geographies": {
                            "States": [{"STATE": "17", ...}],
                            "119th Congressional Districts": [{"BASENAME": "7", ...}],
                            "2024 State Legislative Districts - Upper": [...],
                            "2024 State Legislative Districts - Lower": [...],
                            ...
                        }
                    }
                ]
            }
        }

        Only the first (best) match is used.
        """
        matches = (response.get("result") or {}).get("addressMatches") or []
        if not matches:
            logger.warning("Census returned no address match for '{}'", address)
            raise GeocodeError("Could not geocode address")

        match = matches[0]
        geographies = match.get("geographies") or {}
        coordinates = match.get("coordinates") or {}

        cd_layer = find_layer(geographies, CONGRESSIONAL_LAYER)
        upper_layer = find_layer(geographies, UPPER_LAYER)
        lower_layer = find_layer(geographies, LOWER_LAYER)
        states_layer = find_layer(geographies, STATES_LAYER)

        state_fips = None
        for layer in (cd_layer, upper_layer, lower_layer, states_layer):
            if layer and layer.get("STATE"):
                state_fips = str(layer["STATE"]).strip().zfill(2)
                break

        if not state_fips:
            logger.warning(
                "Census match has no state FIPS; layers={}", sorted(geographies.keys())
            )
            raise GeocodeError("Could not geocode address")

        state = fips_to_state(state_fips)
        if not state:
            logger.warning("Unknown state FIPS code '{}'", state_fips)
            raise GeocodeError("Could not geocode address")

        if cd_layer is None:
            logger.debug("No congressional layer in {}", sorted(geographies.keys()))

        try:
            lat = float(coordinates["y"])
            lng = float(coordinates["x"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Census match has unusable coordinates: {}", coordinates)
            raise GeocodeError("Could not geocode address")

        return GeoLocation(
            lat=lat,
            lng=lng,
            state_fips=state_fips,
            state=state,
            congressional_district=congressional_district(cd_layer),
            upper_state_district=legislative_district(upper_layer),
            lower_state_district=legislative_district(lower_layer),
            matched_address=match.get("matchedAddress"),
        )
