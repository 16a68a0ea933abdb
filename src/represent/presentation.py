"""Flatten a ResolutionResult into the legislator list shown to users."""

from dataclasses import dataclass
from typing import Optional

from represent.models import LEVEL_FEDERAL, LEVEL_STATE, ROLE_LOWER, ROLE_UPPER, ResolutionResult

ALLOWED_LEVELS = {LEVEL_FEDERAL.lower(), LEVEL_STATE.lower()}
LEGISLATOR_ROLES = {ROLE_UPPER, ROLE_LOWER}


@dataclass(frozen=True)
class Representative:
    """One official paired with the office they hold."""

    office: str
    name: str
    party: Optional[str] = None
    phones: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    photo_url: Optional[str] = None


def filter_representatives(result: ResolutionResult) -> list[Representative]:
    """
    Keep federal and state legislators, one entry per office and name.

    Offices outside the country/administrativeArea1 levels or without a
    legislator role are dropped, as are indices that point past the
    officials list.
    """
    representatives: list[Representative] = []
    seen: set[str] = set()

    for office in result.offices:
        if not LEGISLATOR_ROLES.intersection(office.roles):
            continue
        if not ALLOWED_LEVELS.intersection(level.lower() for level in office.levels):
            continue

        for index in office.official_indices:
            if not 0 <= index < len(result.officials):
                continue
            official = result.officials[index]
            key = f"{office.name}|{official.name}"
            if key in seen:
                continue
            seen.add(key)
            representatives.append(
                Representative(
                    office=office.name,
                    name=official.name,
                    party=official.party,
                    phones=official.phones,
                    urls=official.urls,
                    photo_url=official.photo_url,
                )
            )

    return representatives
