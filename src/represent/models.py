"""Value types produced by the resolution pipeline."""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

ROLE_UPPER = "legislatorUpperBody"
ROLE_LOWER = "legislatorLowerBody"
LEVEL_FEDERAL = "country"
LEVEL_STATE = "administrativeArea1"


@dataclass(frozen=True)
class GeoLocation:
    """Geocoded address with the districts that contain it."""

    lat: float
    lng: float
    state_fips: str  # e.g. '17'
    state: str  # e.g. 'IL'
    congressional_district: Optional[str] = None  # zero-padded, e.g. '05'
    upper_state_district: Optional[str] = None
    lower_state_district: Optional[str] = None
    matched_address: Optional[str] = None


@dataclass(frozen=True)
class Official:
    """A single officeholder."""

    name: str
    party: Optional[str] = None
    phones: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    photo_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.party:
            data["party"] = self.party
        if self.phones:
            data["phones"] = list(self.phones)
        if self.urls:
            data["urls"] = list(self.urls)
        if self.photo_url:
            data["photoUrl"] = self.photo_url
        return data


@dataclass
class Office:
    """An office and the officials (by index) who hold it."""

    name: str
    division_id: Optional[str] = None
    levels: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    official_indices: list[int] = field(default_factory=list)

    def shifted(self, offset: int) -> "Office":
        """Return a copy whose official indices are moved by ``offset``."""
        return replace(
            self,
            levels=list(self.levels),
            roles=list(self.roles),
            official_indices=[i + offset for i in self.official_indices],
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "levels": list(self.levels),
            "roles": list(self.roles),
            "officialIndices": list(self.official_indices),
        }
        if self.division_id:
            data["divisionId"] = self.division_id
        return data


@dataclass
class ResolutionResult:
    """Officials and offices for one address. Returned by ``resolve()``."""

    officials: list[Official] = field(default_factory=list)
    offices: list[Office] = field(default_factory=list)
    normalized_address: Optional[str] = None

    def add(self, official: Official, office: Office) -> None:
        """Append an official and point ``office`` at it."""
        self.officials.append(official)
        office.official_indices = [len(self.officials) - 1]
        self.offices.append(office)

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase wire shape consumed by the mobile client."""
        data: dict[str, Any] = {
            "officials": [o.to_dict() for o in self.officials],
            "offices": [o.to_dict() for o in self.offices],
        }
        if self.normalized_address:
            data["normalizedAddress"] = self.normalized_address
        return data
