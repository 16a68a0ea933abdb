"""Rebuild and repair the congress-legislators dataset from Congress.gov.

Used by ``represent refresh-dataset`` when every mirror fails, and by its
``--repair`` option to fix records whose roles lost their state.
"""

from typing import Any, Iterable, Optional

from loguru import logger

from represent.errors import FederalSourceError
from represent.federal import CongressGovSource
from represent.normalize import (
    CHAMBER_HOUSE,
    STATE_TO_FIPS,
    current_chamber_term,
    member_key,
    normalize_state_to_code,
    normalize_terms,
)

ALL_STATES = tuple(sorted(STATE_TO_FIPS))

ROLE_TYPES = {"Senate": "senator", "House": "representative"}


def _district_number(value: Any) -> Optional[int]:
    text = str(value).strip() if value is not None else ""
    return int(text) if text.isdigit() else None


def _party(member: dict[str, Any], term: Optional[dict[str, Any]] = None) -> Optional[str]:
    party = (term or {}).get("party") or member.get("partyName") or member.get("party")
    if not party:
        history = member.get("partyHistory") or []
        if history and isinstance(history[-1], dict):
            party = history[-1].get("partyName")
    return party


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def dataset_record(member: dict[str, Any], state: str, chamber: str) -> dict[str, Any]:
    """Convert a Congress.gov member list entry into a congress-legislators record."""
    first, last = member.get("firstName"), member.get("lastName")
    role = {
        "type": ROLE_TYPES[chamber],
        "state": state,
        "party": _party(member),
        "phone": member.get("phone"),
        "url": member.get("url"),
    }
    if chamber == "House":
        term = current_chamber_term(member, CHAMBER_HOUSE) or {}
        role["district"] = _district_number(term.get("district") or member.get("district"))

    return {
        "id": _compact({"bioguide": member.get("bioguideId") or member.get("bioguide_id")}),
        "name": _compact(
            {
                "official_full": member.get("name") or f"{first or ''} {last or ''}".strip(),
                "first": first,
                "last": last,
            }
        ),
        "roles": [_compact(role)],
    }


async def build_from_congress(
    source: CongressGovSource, states: Iterable[str] = ALL_STATES
) -> list[dict[str, Any]]:
    """
    Build a dataset of current members by querying every state and chamber.

    A failed state/chamber query is logged and skipped.

    Raises:
        RuntimeError: If no API key is configured or nothing could be built
    """
    if not source.api_key:
        raise RuntimeError("CONGRESS_API_KEY is required to build the dataset from Congress.gov")

    records: list[dict[str, Any]] = []
    seen: set[str] = set()

    for state in states:
        for chamber in ROLE_TYPES:
            try:
                members = await source.fetch_members(state, chamber)
            except FederalSourceError as e:
                logger.warning("Failed to fetch {} members for {}: {}", chamber, state, e.message)
                continue

            for member in members:
                key = member_key(member)
                if not key or key in seen:
                    continue
                seen.add(key)
                records.append(dataset_record(member, state, chamber))

    if not records:
        raise RuntimeError("Congress.gov build returned no members")

    logger.info("Built {} legislators from Congress.gov", len(records))
    return records


def needs_repair(person: dict[str, Any]) -> bool:
    """A record whose roles carry no state, or only 'AL', is considered broken."""
    states = {r.get("state") for r in person.get("roles") or [] if isinstance(r, dict) and r.get("state")}
    return not states or states == {"AL"}


def roles_from_terms(member: dict[str, Any]) -> list[dict[str, Any]]:
    """Rebuild congress-legislators roles from a Congress.gov member's terms."""
    roles = []
    for term in normalize_terms(member.get("terms")):
        chamber = str(term.get("chamber") or "").lower()
        raw_state = term.get("state") or term.get("stateCode")
        state = normalize_state_to_code(raw_state) or raw_state
        role = {"state": state, "party": _party(member, term), "phone": term.get("phone"), "url": term.get("url")}

        if "senate" in chamber:
            roles.append(_compact({"type": "senator", **role}))
        elif "house" in chamber:
            roles.append(
                _compact({"type": "representative", "district": _district_number(term.get("district")), **role})
            )
    return roles


async def repair_records(
    records: list[dict[str, Any]], source: CongressGovSource
) -> tuple[list[dict[str, Any]], int]:
    """
    Re-read the terms of broken records from Congress.gov.

    Returns:
        Tuple of (records, number of records repaired). Records that could
        not be repaired are kept unchanged.
    """
    if not source.api_key:
        raise RuntimeError("CONGRESS_API_KEY is required to repair the dataset")

    repaired: list[dict[str, Any]] = []
    fixed = 0

    for person in records:
        bioguide = (person.get("id") or {}).get("bioguide")
        if not bioguide or not needs_repair(person):
            repaired.append(person)
            continue

        try:
            member = await source.fetch_member(bioguide)
        except FederalSourceError as e:
            logger.warning("Failed to fetch member {}: {}", bioguide, e.message)
            repaired.append(person)
            continue

        roles = roles_from_terms(member)
        if not roles:
            logger.warning("No roles built for {}", bioguide)
            repaired.append(person)
            continue

        repaired.append({**person, "roles": roles})
        fixed += 1

    logger.info("Repaired {} of {} legislators", fixed, len(records))
    return repaired, fixed
