"""Abstract base class for geocoding services."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger

from represent.config import Settings
from represent.errors import GeocodeError, InputError
from represent.models import GeoLocation

MIN_ADDRESS_LENGTH = 5


def validate_address(address: Any) -> str:
    """
    Reject missing or too-short addresses before any network call.

    Returns:
        The address with surrounding whitespace removed.

    Raises:
        InputError: If the address is not a string of at least 5 characters.
    """
    if not isinstance(address, str) or len(address.strip()) < MIN_ADDRESS_LENGTH:
        raise InputError("Valid address is required")
    return address.strip()


class GeocodeService(ABC):
    """Abstract base class for all geocoding services."""

    def __init__(self, config: Settings):
        """Initialize the service with configuration.

        Args:
            config: Settings object containing service-specific configuration
        """
        self.config = config

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Unique identifier for this service."""
        pass

    @property
    @abstractmethod
    def timeout(self) -> float:
        """Per-request timeout in seconds."""
        pass

    @abstractmethod
    def build_request(self, address: str) -> tuple[str, dict[str, Any]]:
        """Build the request URL and query parameters for one address.

        Args:
            address: Validated one-line address

        Returns:
            Tuple of (url, params)
        """
        pass

    @abstractmethod
    def parse_response(self, response: dict[str, Any], address: str) -> GeoLocation:
        """Parse a service response into a GeoLocation.

        Args:
            response: Decoded JSON body
            address: The address that was submitted

        Returns:
            GeoLocation for the best match

        Raises:
            GeocodeError: If there is no usable match
        """
        pass

    async def submit_request(self, client: httpx.AsyncClient, address: str) -> dict[str, Any]:
        """Submit a geocoding request and decode the JSON body.

        Raises:
            GeocodeError: On HTTP errors, timeouts or undecodable bodies
        """
        url, params = self.build_request(address)
        logger.debug("Geocoding via {} ({}), timeout={}s", self.service_name, url, self.timeout)

        try:
            response = await client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException:
            logger.error("{} geocoder timed out after {}s", self.service_name, self.timeout)
            raise GeocodeError("Could not geocode address")

        except httpx.HTTPStatusError as e:
            logger.error(
                "{} geocoder HTTP error: status={} url={}",
                self.service_name,
                e.response.status_code,
                url,
            )
            raise GeocodeError("Could not geocode address")

        except httpx.HTTPError as e:
            logger.error("{} geocoder error: {}", self.service_name, str(e))
            raise GeocodeError("Could not geocode address")

        except ValueError as e:
            logger.error("{} geocoder returned invalid JSON: {}", self.service_name, str(e))
            raise GeocodeError("Could not geocode address")

    async def geocode(self, client: httpx.AsyncClient, address: str) -> GeoLocation:
        """Main workflow: validate → submit → parse.

        Args:
            client: Shared HTTP client
            address: Free-form postal address

        Returns:
            GeoLocation with state and available districts
        """
        address = validate_address(address)
        response = await self.submit_request(client, address)
        location = self.parse_response(response, address)
        logger.info(
            "Geocoded via {}: state={} cd={} sldu={} sldl={}",
            self.service_name,
            location.state,
            location.congressional_district,
            location.upper_state_district,
            location.lower_state_district,
        )
        return location
