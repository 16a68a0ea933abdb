"""Federal legislators: Congress.gov first, congress-legislators dataset on miss."""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx
from loguru import logger

from represent.config import FederalSource, Settings
from represent.dataset import LegislatorDataset, default_providers
from represent.errors import FederalSourceError
from represent.models import LEVEL_FEDERAL, ROLE_LOWER, ROLE_UPPER, Office, Official, ResolutionResult
from represent.normalize import (
    CHAMBER_HOUSE,
    CHAMBER_SENATE,
    current_chamber_term,
    districts_equal,
    member_key,
    member_state,
    normalize_state_to_code,
)

MAX_SENATORS = 2
MAX_REPRESENTATIVES = 1


@dataclass(frozen=True)
class FederalMember:
    """A legislator normalized from either federal source."""

    key: str
    name: str
    party: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    bioguide_id: Optional[str] = None


def _unique(members: Iterable[FederalMember], limit: int) -> list[FederalMember]:
    """Keep the first occurrence of each person, up to ``limit``."""
    seen: set[str] = set()
    kept: list[FederalMember] = []
    for member in members:
        if member.key in seen:
            continue
        seen.add(member.key)
        kept.append(member)
        if len(kept) == limit:
            break
    return kept


def senator_office(state: str) -> Office:
    return Office(
        name="United States Senator",
        division_id=f"ocd-division/country:us/state:{state.lower()}",
        levels=[LEVEL_FEDERAL],
        roles=[ROLE_UPPER],
    )


def representative_office(state: str, district: Optional[str]) -> Office:
    division = f"ocd-division/country:us/state:{state.lower()}"
    if district:
        division += f"/cd:{district}"
    return Office(
        name="United States Representative",
        division_id=division,
        levels=[LEVEL_FEDERAL],
        roles=[ROLE_LOWER],
    )


def build_result(
    senators: list[FederalMember],
    representatives: list[FederalMember],
    state: str,
    district: Optional[str],
    photo_base_url: str,
) -> ResolutionResult:
    """Map selected members into officials and offices."""
    result = ResolutionResult()

    def official(member: FederalMember) -> Official:
        return Official(
            name=member.name,
            party=member.party,
            phones=(member.phone,) if member.phone else (),
            urls=(member.url,) if member.url else (),
            photo_url=f"{photo_base_url}/{member.bioguide_id}.jpg" if member.bioguide_id else None,
        )

    for member in senators:
        result.add(official(member), senator_office(state))
    for member in representatives:
        result.add(official(member), representative_office(state, district))
    return result


# ---------------------------------------------------------------------------
# Congress.gov
# ---------------------------------------------------------------------------


def congress_member(raw: dict[str, Any]) -> Optional[FederalMember]:
    """Normalize a Congress.gov member record."""
    key = member_key(raw)
    if not key:
        return None
    name = raw.get("name") or f"{raw.get('firstName') or ''} {raw.get('lastName') or ''}".strip()
    bioguide = raw.get("bioguideId") or raw.get("bioguide_id")
    return FederalMember(
        key=key,
        name=name,
        party=raw.get("partyName") or raw.get("party"),
        phone=raw.get("phone"),
        url=raw.get("url"),
        bioguide_id=bioguide,
    )


def select_senators(members: list[dict[str, Any]], state: str) -> list[FederalMember]:
    """Senators from ``state``, deduplicated by person, at most two."""
    matched = []
    for raw in members:
        term = current_chamber_term(raw, CHAMBER_SENATE)
        if member_state(raw, term) != state:
            continue
        member = congress_member(raw)
        if member:
            matched.append(member)
    return _unique(matched, MAX_SENATORS)


def select_representatives(
    members: list[dict[str, Any]], state: str, district: str
) -> list[FederalMember]:
    """The representative for ``state``/``district`` (zero-insensitive)."""
    matched = []
    for raw in members:
        term = current_chamber_term(raw, CHAMBER_HOUSE)
        if member_state(raw, term) != state:
            continue
        raw_district = (term or {}).get("district") or raw.get("district")
        if not districts_equal(raw_district, district):
            continue
        member = congress_member(raw)
        if member:
            matched.append(member)
    return _unique(matched, MAX_REPRESENTATIVES)


def _sample_shape(members: list[dict[str, Any]]) -> list[str]:
    return sorted(members[0].keys()) if members else []


class CongressGovSource:
    """Congress.gov v3 member API client."""

    provider_name = "congress.gov"

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.config = settings.congress
        self.api_key = settings.congress_key()
        self.client = client

    async def _get(self, path: str, params: dict[str, Any], label: str) -> Any:
        if not self.api_key:
            raise FederalSourceError(self.provider_name, "CONGRESS_API_KEY is not configured")

        url = f"{self.config.base_url}{path}"
        params = {**params, "format": "json", "api_key": self.api_key}

        try:
            response = await self.client.get(url, params=params, timeout=self.config.timeout)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException:
            raise FederalSourceError(
                self.provider_name, f"{label} request timed out after {self.config.timeout}s"
            )

        except httpx.HTTPStatusError as e:
            raise FederalSourceError(
                self.provider_name,
                f"{label} request failed for {url}",
                status_code=e.response.status_code,
            )

        except httpx.HTTPError as e:
            raise FederalSourceError(self.provider_name, f"{label} request error: {e}")

        except ValueError as e:
            raise FederalSourceError(self.provider_name, f"{label} response is not JSON: {e}")

    async def fetch_member(self, bioguide_id: str) -> dict[str, Any]:
        """
        Fetch one member's detail record, including their full term history.

        Raises:
            FederalSourceError: On request failure or when no member is returned
        """
        payload = await self._get(f"/member/{bioguide_id}", {}, bioguide_id)
        member = payload.get("member") if isinstance(payload, dict) else None
        if not isinstance(member, dict):
            members = payload.get("members") if isinstance(payload, dict) else None
            member = members[0] if isinstance(members, list) and members else None
        if not isinstance(member, dict):
            raise FederalSourceError(self.provider_name, f"no member data for {bioguide_id}")
        return member

    async def fetch_members(
        self, state: str, chamber: str, district: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """
        Query current members for a state and chamber.

        Args:
            state: Two-letter state code
            chamber: 'Senate' or 'House'
            district: Optional district number (House only)

        Returns:
            Raw member records

        Raises:
            FederalSourceError: On missing key, HTTP errors, timeouts or bad JSON
        """
        params: dict[str, Any] = {
            "state": state,
            "chamber": chamber,
            "currentMember": "true",
            "limit": self.config.page_limit,
        }
        if district:
            params["district"] = district

        logger.debug("Congress.gov request: state={} chamber={} district={}", state, chamber, district)
        payload = await self._get("/member", params, chamber)

        members = payload.get("members") if isinstance(payload, dict) else None
        if not isinstance(members, list):
            raise FederalSourceError(
                self.provider_name,
                f"{chamber} response has no members list; keys={sorted(payload) if isinstance(payload, dict) else type(payload).__name__}",
            )
        return [m for m in members if isinstance(m, dict)]

    async def resolve(self, state: str, district: Optional[str]) -> ResolutionResult:
        """Senators and representative from Congress.gov."""
        all_senators = await self.fetch_members(state, "Senate")
        senators = select_senators(all_senators, state)
        if not senators:
            logger.info(
                "Senator filtering produced 0 results; state={} sample keys={} sample={}",
                state,
                _sample_shape(all_senators),
                all_senators[0] if all_senators else None,
            )
        logger.info(
            "Senators: fetched {}, filtered to {} (state={})",
            len(all_senators),
            len(senators),
            state,
        )

        representatives: list[FederalMember] = []
        if district:
            all_reps = await self.fetch_members(state, "House", district)
            representatives = select_representatives(all_reps, state, district)
            if not representatives:
                logger.info(
                    "House filtering produced 0 results; state={} district={} sample keys={} districts={}",
                    state,
                    district,
                    _sample_shape(all_reps),
                    [
                        (current_chamber_term(m, CHAMBER_HOUSE) or {}).get("district") or m.get("district")
                        for m in all_reps
                    ],
                )
            logger.info(
                "House: fetched {}, filtered to {} (state={} district={})",
                len(all_reps),
                len(representatives),
                state,
                district,
            )

        # Same person cannot hold both seats
        senator_keys = {s.key for s in senators}
        representatives = [r for r in representatives if r.key not in senator_keys]

        return build_result(senators, representatives, state, district, self.config.photo_base_url)


# ---------------------------------------------------------------------------
# congress-legislators dataset
# ---------------------------------------------------------------------------


def dataset_member(person: dict[str, Any], role: dict[str, Any]) -> Optional[FederalMember]:
    """Normalize a congress-legislators person and one of its roles."""
    ids = person.get("id") or {}
    names = person.get("name") or {}
    bioguide = ids.get("bioguide")
    name = names.get("official_full") or f"{names.get('first') or ''} {names.get('last') or ''}".strip()
    key = bioguide or name
    if not key:
        return None
    return FederalMember(
        key=key,
        name=name,
        party=role.get("party"),
        phone=role.get("phone"),
        url=role.get("url"),
        bioguide_id=bioguide,
    )


def select_from_dataset(
    records: Iterable[dict[str, Any]], state: str, district: Optional[str]
) -> tuple[list[FederalMember], list[FederalMember]]:
    """
    Pick senators and the representative from the fallback dataset.

    Only each person's latest role is considered, so a senator who once
    served in the House is not mistaken for a current representative.
    """
    senators: list[FederalMember] = []
    representatives: list[FederalMember] = []

    for person in records:
        roles = [r for r in person.get("roles") or [] if isinstance(r, dict)]
        if not roles:
            continue
        role = roles[-1]
        if normalize_state_to_code(role.get("state")) != state:
            continue

        if role.get("type") == "senator":
            member = dataset_member(person, role)
            if member:
                senators.append(member)
        elif role.get("type") == "representative" and district:
            if districts_equal(role.get("district"), district):
                member = dataset_member(person, role)
                if member:
                    representatives.append(member)

    return _unique(senators, MAX_SENATORS), _unique(representatives, MAX_REPRESENTATIVES)


# Process-wide dataset, shared by every FederalResolver built on the default
# providers.
_shared_dataset: Optional[LegislatorDataset] = None


def shared_dataset(settings: Settings) -> LegislatorDataset:
    """Return the process-scoped fallback dataset, creating it on first use."""
    global _shared_dataset
    if _shared_dataset is None:
        _shared_dataset = LegislatorDataset(default_providers(settings.dataset))
    return _shared_dataset


class FederalResolver:
    """Resolve senators and representative with layered fallback."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        dataset: Optional[LegislatorDataset] = None,
    ):
        self.settings = settings
        self.client = client
        self.congress = CongressGovSource(settings, client)
        self.dataset = dataset or shared_dataset(settings)

    async def from_dataset(self, state: str, district: Optional[str]) -> ResolutionResult:
        records = await self.dataset.get()
        senators, representatives = select_from_dataset(records, state, district)
        logger.info(
            "Fallback federal selection: senators={} house={} district={}",
            [s.name for s in senators],
            [r.name for r in representatives],
            district,
        )
        return build_result(
            senators, representatives, state, district, self.settings.congress.photo_base_url
        )

    async def resolve(self, state: str, district: Optional[str]) -> ResolutionResult:
        """
        Federal officials for a state and optional congressional district.

        Never raises for source failures: an exhausted fallback chain yields
        an empty result.
        """
        source = self.settings.resolved_federal_source()
        logger.info("Selected federal source: {}", source.value)

        if source is FederalSource.CONGRESS:
            try:
                result = await self.congress.resolve(state, district)
                minimum = self.settings.congress.min_officials
                if len(result.officials) >= minimum:
                    return result
                raise FederalSourceError(
                    CongressGovSource.provider_name,
                    f"insufficient federal members: got {len(result.officials)}, need {minimum}",
                )
            except FederalSourceError as e:
                logger.warning(
                    "Congress.gov unusable (status={}): {}; switching to fallback dataset",
                    e.status_code,
                    e.message,
                )

        try:
            return await self.from_dataset(state, district)
        except Exception as e:
            logger.warning("Fallback federal fetch failed: {}", str(e))
            return ResolutionResult()
