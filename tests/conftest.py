"""Pytest configuration and fixtures for Represent tests."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from represent.config import FederalSource, Settings
from represent.dataset import LegislatorDataset, default_providers

CHICAGO = "100 W Randolph St, Chicago, IL 60601"


# ========== PAYLOAD BUILDERS ==========


def census_payload(
    state_fips: str = "17",
    cd: Optional[str] = "13",
    sldu: Optional[str] = "7",
    sldl: Optional[str] = "13",
    cd_key: str = "119th Congressional Districts",
    upper_key: str = "2024 State Legislative Districts - Upper",
    lower_key: str = "2024 State Legislative Districts - Lower",
) -> dict[str, Any]:
    """Census one-line-address geographies response for one match."""
    geographies: dict[str, Any] = {
        "States": [{"STATE": state_fips, "NAME": "Illinois", "STUSAB": "IL"}],
        "Counties": [{"STATE": state_fips, "COUNTY": "031", "NAME": "Cook County"}],
    }
    if cd is not None:
        geographies[cd_key] = [{"STATE": state_fips, "BASENAME": cd, "CD119": cd.zfill(2)}]
    if sldu is not None:
        geographies[upper_key] = [{"STATE": state_fips, "BASENAME": sldu, "SLDU": sldu.zfill(3)}]
    if sldl is not None:
        geographies[lower_key] = [{"STATE": state_fips, "BASENAME": sldl, "SLDL": sldl.zfill(3)}]

    return {
        "result": {
            "input": {"address": {"address": CHICAGO}},
            "addressMatches": [
                {
                    "matchedAddress": "100 W RANDOLPH ST, CHICAGO, IL, 60601",
                    "coordinates": {"x": -87.6319, "y": 41.8847},
                    "geographies": geographies,
                }
            ],
        }
    }


def congress_member(
    name: str,
    bioguide: str,
    state: str = "Illinois",
    chambers: tuple[str, ...] = ("Senate",),
    district: Optional[int] = None,
    party: str = "Democratic",
    terms_shape: str = "item",
) -> dict[str, Any]:
    """Congress.gov v3 member list entry."""
    terms = [{"chamber": c, "startYear": 2000 + i * 2} for i, c in enumerate(chambers)]
    if terms_shape == "item":
        terms_field: Any = {"item": terms}
    elif terms_shape == "bare":
        terms_field = terms[-1]
    else:
        terms_field = terms
    member = {
        "bioguideId": bioguide,
        "name": name,
        "partyName": party,
        "state": state,
        "terms": terms_field,
        "url": f"https://api.congress.gov/v3/member/{bioguide}",
    }
    if district is not None:
        member["district"] = district
    return member


IL_SENATORS = [
    congress_member("Durbin, Richard J.", "D000563"),
    congress_member(
        "Duckworth, Tammy", "D000622", chambers=("House of Representatives", "Senate")
    ),
]
IL_REP_13 = congress_member(
    "Budzinski, Nikki", "B001315", chambers=("House of Representatives",), district=13
)


def legislator(
    bioguide: str,
    first: str,
    last: str,
    role_type: str,
    state: str,
    district: Optional[int] = None,
    party: str = "Democrat",
    prior_roles: tuple[dict[str, Any], ...] = (),
) -> dict[str, Any]:
    """congress-legislators person record."""
    role: dict[str, Any] = {
        "type": role_type,
        "state": state,
        "party": party,
        "phone": "202-224-0000",
        "url": f"https://example.senate.gov/{last.lower()}",
    }
    if district is not None:
        role["district"] = district
    return {
        "id": {"bioguide": bioguide},
        "name": {"first": first, "last": last, "official_full": f"{first} {last}"},
        "roles": [*prior_roles, role],
    }


def legislators_dataset(filler: int = 320) -> list[dict[str, Any]]:
    """IL delegation plus enough filler records to pass the size check."""
    records = [
        legislator("D000563", "Richard", "Durbin", "senator", "IL"),
        legislator(
            "D000622",
            "Tammy",
            "Duckworth",
            "senator",
            "IL",
            prior_roles=({"type": "representative", "state": "IL", "district": 13},),
        ),
        legislator("B001315", "Nikki", "Budzinski", "representative", "IL", district=13),
        legislator("Q000023", "Mike", "Quigley", "representative", "IL", district=5),
    ]
    for i in range(filler):
        records.append(
            legislator(f"X{i:06d}", "Filler", f"Member{i}", "representative", "TX", district=i % 38 + 1)
        )
    return records


def openstates_person(
    name: str, chamber: str, district: str, party: str = "Democratic"
) -> dict[str, Any]:
    """Open States people.geo result entry."""
    return {
        "id": f"ocd-person/{name.lower().replace(' ', '-')}",
        "name": name,
        "party": party,
        "image": f"https://ilga.gov/images/{name.split()[-1].lower()}.jpg",
        "current_role": {
            "title": "Senator" if chamber == "upper" else "Representative",
            "org_classification": chamber,
            "district": district,
            "division_id": f"ocd-division/country:us/state:il/sld{'u' if chamber == 'upper' else 'l'}:{district}",
        },
        "offices": [{"voice": "217-782-0000"}],
        "links": [{"url": "https://ilga.gov/"}],
    }


IL_STATE_PEOPLE = [
    openstates_person("Mike Simmons", "upper", "6"),
    openstates_person("Lakesia Collins", "upper", "5"),
    openstates_person("Kimberly du Buclet", "upper", "7"),
    openstates_person("Kam Buckner", "lower", "26"),
    openstates_person("Lindsey LaPointe", "lower", "13"),
]


# ========== HTTP ROUTER ==========


class Router:
    """Route mock HTTP requests by host to handler callables."""

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []

    def on(self, host: str, handler: Any) -> "Router":
        if not callable(handler):
            payload = handler
            handler = lambda request: httpx.Response(200, json=payload)  # noqa: E731
        self.routes[host] = handler
        return self

    def hosts(self) -> list[str]:
        return [r.url.host for r in self.calls]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.url.host}")
        return handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def congress_handler(
    senators: list[dict[str, Any]], representatives: list[dict[str, Any]]
) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        chamber = request.url.params.get("chamber")
        members = senators if chamber == "Senate" else representatives
        return httpx.Response(200, json={"members": members, "pagination": {"count": len(members)}})

    return handler


# ========== FIXTURES ==========


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with no API keys, no .env and a missing bundled dataset."""
    settings = Settings(
        _env_file=None,
        log_level="DEBUG",
        log_file=str(tmp_path / "logs" / "test.log"),
        congress_api_key=None,
        openstates_api_key=None,
        federal_source=FederalSource.AUTO,
    )
    settings.dataset.bundled_path = tmp_path / "legislators-current.json"
    return settings


@pytest.fixture
def keyed_settings(test_settings: Settings) -> Settings:
    """Settings with both Congress.gov and Open States keys configured."""
    test_settings.congress_api_key = "congress-test-key"
    test_settings.openstates_api_key = "openstates-test-key"
    return test_settings


@pytest.fixture
def dataset(test_settings: Settings, router: Router) -> LegislatorDataset:
    """Fresh, unloaded fallback dataset loading through the mock router."""
    return LegislatorDataset(default_providers(test_settings.dataset), client_factory=router.client)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def bundled_dataset(test_settings: Settings) -> list[dict[str, Any]]:
    """Write a bundled dataset file where the settings expect it."""
    records = legislators_dataset(filler=10)
    test_settings.dataset.bundled_path.write_text(json.dumps(records), encoding="utf-8")
    return records
