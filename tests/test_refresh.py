"""Tests for building and repairing the dataset from Congress.gov."""

import httpx
import pytest

from represent.federal import CongressGovSource, select_from_dataset
from represent.refresh import (
    ALL_STATES,
    build_from_congress,
    needs_repair,
    repair_records,
    roles_from_terms,
)

from conftest import IL_REP_13, IL_SENATORS, Router, congress_member, legislator

CONGRESS = "api.congress.gov"


def _by_state(request: httpx.Request) -> httpx.Response:
    state = request.url.params.get("state")
    chamber = request.url.params.get("chamber")
    members = {
        ("IL", "Senate"): IL_SENATORS,
        ("IL", "House"): [IL_REP_13],
        ("TX", "Senate"): [congress_member("Cornyn, John", "C001056", state="Texas", party="Republican")],
    }.get((state, chamber), [])
    return httpx.Response(200, json={"members": members})


class TestBuildFromCongress:
    """Tests for build_from_congress function."""

    def test_all_states_list(self):
        """Test that every state and DC is queried by default."""
        assert len(ALL_STATES) == 51
        assert "DC" in ALL_STATES

    @pytest.mark.asyncio
    async def test_builds_usable_records(self, keyed_settings, router: Router):
        """Test that built records work with the dataset selection."""
        router.on(CONGRESS, _by_state)

        async with router.client() as client:
            records = await build_from_congress(CongressGovSource(keyed_settings, client), ["IL", "TX"])

        assert [r["id"]["bioguide"] for r in records] == ["D000563", "D000622", "B001315", "C001056"]
        assert records[2]["roles"] == [
            {
                "type": "representative",
                "state": "IL",
                "party": "Democratic",
                "url": "https://api.congress.gov/v3/member/B001315",
                "district": 13,
            }
        ]
        senators, reps = select_from_dataset(records, "IL", "13")
        assert [s.name for s in senators] == ["Durbin, Richard J.", "Duckworth, Tammy"]
        assert [r.bioguide_id for r in reps] == ["B001315"]
        assert len(router.calls) == 4

    @pytest.mark.asyncio
    async def test_failed_state_is_skipped(self, keyed_settings, router: Router):
        """Test that one failing query does not abort the build."""

        def flaky(request):
            if request.url.params.get("state") == "TX":
                return httpx.Response(500)
            return _by_state(request)

        router.on(CONGRESS, flaky)

        async with router.client() as client:
            records = await build_from_congress(CongressGovSource(keyed_settings, client), ["TX", "IL"])

        assert len(records) == 3

    @pytest.mark.asyncio
    async def test_deduplicates_members(self, keyed_settings, router: Router):
        """Test that a member returned twice is recorded once."""
        router.on(CONGRESS, {"members": IL_SENATORS})

        async with router.client() as client:
            records = await build_from_congress(CongressGovSource(keyed_settings, client), ["IL"])

        assert [r["id"]["bioguide"] for r in records] == ["D000563", "D000622"]

    @pytest.mark.asyncio
    async def test_requires_key(self, test_settings, router: Router):
        """Test that no key fails before any request."""
        async with router.client() as client:
            with pytest.raises(RuntimeError, match="CONGRESS_API_KEY"):
                await build_from_congress(CongressGovSource(test_settings, client), ["IL"])

        assert router.calls == []

    @pytest.mark.asyncio
    async def test_nothing_built(self, keyed_settings, router: Router):
        """Test that an empty build is an error."""
        router.on(CONGRESS, {"members": []})

        async with router.client() as client:
            with pytest.raises(RuntimeError, match="no members"):
                await build_from_congress(CongressGovSource(keyed_settings, client), ["IL"])


class TestRepair:
    """Tests for repairing records whose roles lost their state."""

    DURBIN_DETAIL = {
        "member": {
            "bioguideId": "D000563",
            "partyHistory": [{"partyName": "Democratic"}],
            "terms": {
                "item": [
                    {"chamber": "House of Representatives", "stateCode": "IL", "district": 20},
                    {"chamber": "Senate", "stateCode": "IL"},
                ]
            },
        }
    }

    def test_needs_repair(self):
        """Test the broken-record heuristic."""
        assert needs_repair({"roles": [{"type": "senator"}]})
        assert needs_repair({"roles": [{"type": "senator", "state": "AL"}, {"state": "AL"}]})
        assert needs_repair({"roles": []})
        assert not needs_repair(legislator("D000563", "Richard", "Durbin", "senator", "IL"))

    def test_roles_from_terms(self):
        """Test roles rebuilt in term order from each terms shape."""
        roles = roles_from_terms(self.DURBIN_DETAIL["member"])
        assert roles == [
            {"type": "representative", "district": 20, "state": "IL", "party": "Democratic"},
            {"type": "senator", "state": "IL", "party": "Democratic"},
        ]

        bare = {"terms": {"chamber": "Senate", "state": "Illinois"}}
        assert roles_from_terms(bare) == [{"type": "senator", "state": "IL"}]

    @pytest.mark.asyncio
    async def test_repairs_broken_records(self, keyed_settings, router: Router):
        """Test that only broken records are fetched and rewritten."""
        router.on(CONGRESS, self.DURBIN_DETAIL)
        broken = {
            "id": {"bioguide": "D000563"},
            "name": {"official_full": "Richard Durbin"},
            "roles": [{"type": "senator", "state": "AL"}],
        }
        healthy = legislator("B001315", "Nikki", "Budzinski", "representative", "IL", district=13)

        async with router.client() as client:
            records, fixed = await repair_records([broken, healthy], CongressGovSource(keyed_settings, client))

        assert fixed == 1
        assert records[0]["name"] == {"official_full": "Richard Durbin"}
        assert records[0]["roles"][-1]["state"] == "IL"
        assert records[1] is healthy
        assert [r.url.path for r in router.calls] == ["/v3/member/D000563"]
        senators, _ = select_from_dataset(records, "IL", None)
        assert [s.name for s in senators] == ["Richard Durbin"]

    @pytest.mark.asyncio
    async def test_unrepairable_record_is_kept(self, keyed_settings, router: Router):
        """Test that a failed member lookup leaves the record unchanged."""
        router.on(CONGRESS, lambda request: httpx.Response(404))
        broken = {"id": {"bioguide": "X000001"}, "roles": [{"type": "senator"}]}

        async with router.client() as client:
            records, fixed = await repair_records([broken], CongressGovSource(keyed_settings, client))

        assert fixed == 0
        assert records == [broken]
