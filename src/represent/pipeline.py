"""Address → representatives resolution pipeline.

Start → Geocoded → (FederalDone ∧ StateDone) → Merged → Done

Geocoding failure is terminal. The federal and state branches run
concurrently, each under its own timeout, and absorb their own failures as
empty results.
"""

import asyncio
from typing import Optional

import httpx
from loguru import logger

from represent.config import Settings, get_settings
from represent.dataset import LegislatorDataset
from represent.errors import InternalError, ResolutionError, StateSourceError
from represent.federal import FederalResolver
from represent.geocoding import GeocodeServiceRegistry, validate_address
from represent.merger import merge
from represent.models import GeoLocation, ResolutionResult
from represent.state import StateResolver


class RepresentativeLookup:
    """Resolve addresses to federal and state legislators.

    Holds one HTTP client for all upstream calls. Pass ``client`` to supply
    your own (it will not be closed); otherwise one is created lazily and
    closed by ``aclose()`` or on leaving ``async with``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        dataset: Optional[LegislatorDataset] = None,
    ):
        self.settings = settings or get_settings()
        self.dataset = dataset
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RepresentativeLookup":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def geocode(self, address: str) -> GeoLocation:
        """Locate an address; raises InputError or GeocodeError."""
        service = GeocodeServiceRegistry.for_settings(self.settings)
        return await service.geocode(self._get_client(), address)

    async def _federal_branch(self, location: GeoLocation) -> ResolutionResult:
        resolver = FederalResolver(self.settings, self._get_client(), self.dataset)
        try:
            return await asyncio.wait_for(
                resolver.resolve(location.state, location.congressional_district),
                timeout=self.settings.federal_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Federal lookup timed out after {}s", self.settings.federal_timeout)
        except Exception as e:
            logger.warning("Federal lookup failed: {}", str(e))
        return ResolutionResult()

    async def _state_branch(self, location: GeoLocation) -> ResolutionResult:
        resolver = StateResolver(self.settings, self._get_client())
        try:
            return await asyncio.wait_for(
                resolver.resolve(
                    location.lat,
                    location.lng,
                    location.state,
                    location.upper_state_district,
                    location.lower_state_district,
                ),
                timeout=self.settings.state_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Open States lookup timed out after {}s", self.settings.state_timeout)
        except StateSourceError as e:
            logger.warning(
                "Open States fetch failed (provider={}, status={}): {}",
                e.provider_name,
                e.status_code,
                e.message,
            )
        except Exception as e:
            logger.warning("Open States fetch failed: {}", str(e))
        return ResolutionResult()

    async def resolve(self, address: str) -> ResolutionResult:
        """
        Resolve an address to its federal and state legislators.

        Args:
            address: Free-form US postal address

        Returns:
            Merged ResolutionResult (federal officials first)

        Raises:
            InputError: Address missing or shorter than 5 characters
            GeocodeError: Address could not be geocoded to a known state
            InternalError: Any unexpected failure
        """
        address = validate_address(address)

        try:
            location = await self.geocode(address)
            logger.debug("Geocoded location: {}", location)

            federal, state = await asyncio.gather(
                self._federal_branch(location),
                self._state_branch(location),
            )
            result = merge(federal, state, normalized_address=location.matched_address)

        except ResolutionError:
            raise

        except Exception as e:
            logger.exception("Unexpected error resolving '{}'", address)
            raise InternalError("Failed to resolve representatives") from e

        logger.info(
            "Returning representatives: federal={} state={} total={} offices={}",
            len(federal.officials),
            len(state.officials),
            len(result.officials),
            [o.name for o in result.offices],
        )
        return result


async def resolve(address: str, settings: Optional[Settings] = None) -> ResolutionResult:
    """Resolve one address with a short-lived lookup."""
    async with RepresentativeLookup(settings) as lookup:
        return await lookup.resolve(address)
