"""State legislators from the Open States people.geo API."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from represent.config import DistrictMatchPolicy, Settings
from represent.errors import StateSourceError
from represent.models import LEVEL_STATE, ROLE_LOWER, ROLE_UPPER, Office, Official, ResolutionResult
from represent.normalize import districts_equal

CHAMBER_UPPER = "upper"
CHAMBER_LOWER = "lower"

OFFICE_NAMES = {CHAMBER_UPPER: "State Senator", CHAMBER_LOWER: "State Representative"}
OFFICE_ROLES = {CHAMBER_UPPER: ROLE_UPPER, CHAMBER_LOWER: ROLE_LOWER}
DIVISION_TYPES = {CHAMBER_UPPER: "sldu", CHAMBER_LOWER: "sldl"}


@dataclass(frozen=True)
class Candidate:
    """A person returned by Open States with a usable current role."""

    person: dict[str, Any]
    role: dict[str, Any]

    @property
    def chamber(self) -> Optional[str]:
        return self.role.get("chamber") or self.role.get("org_classification")

    @property
    def district(self) -> str:
        return str(self.role.get("district") or self.role.get("label") or "")


def current_role(person: dict[str, Any]) -> Optional[dict[str, Any]]:
    role = person.get("current_role") or person.get("currentRole")
    if not role:
        roles = person.get("current_roles")
        role = roles[0] if isinstance(roles, list) and roles else None
    return role if isinstance(role, dict) else None


def build_candidates(people: list[Any]) -> list[Candidate]:
    """Every person exposing a parseable current role, in response order."""
    candidates = []
    for person in people:
        if not isinstance(person, dict):
            continue
        role = current_role(person)
        if role:
            candidates.append(Candidate(person, role))
    return candidates


def pick_legislator(
    candidates: list[Candidate],
    chamber: str,
    target: Optional[str],
    policy: DistrictMatchPolicy = DistrictMatchPolicy.LENIENT,
) -> Optional[Candidate]:
    """
    Choose the legislator for one chamber.

    Exact (zero-insensitive) district match wins. Without a target district
    the first candidate in the chamber is used. With a target but no exact
    match, LENIENT falls back to the first candidate in the chamber and
    STRICT returns None.
    """
    in_chamber = [c for c in candidates if c.chamber == chamber]
    if not in_chamber:
        return None
    if not target:
        return in_chamber[0]

    for candidate in in_chamber:
        if districts_equal(candidate.district, target):
            return candidate

    if policy is DistrictMatchPolicy.STRICT:
        logger.warning(
            "No {} chamber legislator for district {}; candidates were {}",
            chamber,
            target,
            [c.district for c in in_chamber],
        )
        return None

    fallback = in_chamber[0]
    logger.warning(
        "No {} chamber legislator for district {}; using {} (district {})",
        chamber,
        target,
        fallback.person.get("name"),
        fallback.district,
    )
    return fallback


def to_official(person: dict[str, Any]) -> Official:
    name = person.get("name") or f"{person.get('given_name') or ''} {person.get('family_name') or ''}".strip()
    party = person.get("party") or person.get("current_party")
    if not party:
        affiliations = person.get("current_party_affiliations") or []
        if affiliations and isinstance(affiliations[0], dict):
            party = affiliations[0].get("name")

    offices = person.get("offices") or []
    links = person.get("links") or []
    phone = offices[0].get("voice") if offices and isinstance(offices[0], dict) else None
    url = links[0].get("url") if links and isinstance(links[0], dict) else None

    return Official(
        name=name,
        party=party,
        phones=(phone,) if phone else (),
        urls=(url,) if url else (),
        photo_url=person.get("image") or None,
    )


def to_office(chamber: str, state: str, district: Optional[str]) -> Office:
    division = None
    if district:
        division = f"ocd-division/country:us/state:{state.lower()}/{DIVISION_TYPES[chamber]}:{district.lower()}"
    return Office(
        name=OFFICE_NAMES[chamber],
        division_id=division,
        levels=[LEVEL_STATE],
        roles=[OFFICE_ROLES[chamber]],
    )


class StateResolver:
    """Resolve state upper/lower chamber legislators for a point."""

    provider_name = "openstates"

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.config = settings.open_states
        self.api_key = settings.open_states_key()
        self.client = client

    async def fetch_people(self, lat: float, lng: float) -> list[Any]:
        """
        Query people.geo for everyone representing the point.

        Raises:
            StateSourceError: On HTTP errors, timeouts or unparseable bodies
        """
        url = f"{self.config.base_url}/people.geo"
        headers = {"X-API-Key": self.api_key or "", "Accept": "application/json"}

        try:
            response = await self.client.get(
                url,
                params={"lat": lat, "lng": lng},
                headers=headers,
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException:
            raise StateSourceError(self.provider_name, f"timed out after {self.config.timeout}s")
        except httpx.HTTPError as e:
            raise StateSourceError(self.provider_name, f"request error: {e}")

        if response.status_code >= 400:
            raise StateSourceError(
                self.provider_name,
                f"Open States error {response.status_code}: {response.text[:300]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise StateSourceError(self.provider_name, f"response is not JSON: {e}")

        people = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(people, list):
            raise StateSourceError(
                self.provider_name,
                f"response has no results list; keys={sorted(payload) if isinstance(payload, dict) else type(payload).__name__}",
            )
        return people

    async def resolve(
        self,
        lat: float,
        lng: float,
        state: str,
        upper_district: Optional[str] = None,
        lower_district: Optional[str] = None,
    ) -> ResolutionResult:
        """
        At most one upper and one lower chamber legislator.

        Returns an empty result when no API key is configured.

        Raises:
            StateSourceError: When the upstream call fails
        """
        if not self.api_key:
            logger.info("OPENSTATES_API_KEY not set; skipping state representatives")
            return ResolutionResult()

        people = await self.fetch_people(lat, lng)
        candidates = build_candidates(people)

        upper = pick_legislator(candidates, CHAMBER_UPPER, upper_district, self.config.district_match)
        lower = pick_legislator(candidates, CHAMBER_LOWER, lower_district, self.config.district_match)

        logger.info(
            "State selection: people={} candidates={} upper={} lower={} sldu={} sldl={}",
            len(people),
            len(candidates),
            upper.person.get("name") if upper else None,
            lower.person.get("name") if lower else None,
            upper_district,
            lower_district,
        )
        logger.debug(
            "State candidate sample: {}",
            [
                {"name": c.person.get("name"), "chamber": c.chamber, "district": c.district}
                for c in candidates[:10]
            ],
        )

        result = ResolutionResult()
        for chamber, picked in ((CHAMBER_UPPER, upper), (CHAMBER_LOWER, lower)):
            if picked is None:
                continue
            result.add(to_official(picked.person), to_office(chamber, state, picked.district or None))
        return result
