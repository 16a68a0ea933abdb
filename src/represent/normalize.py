"""State, district and term normalization shared by all sources.

Upstream APIs disagree on how they spell states ('IL', 'il', 'Illinois',
'Dist. of Columbia'), how they pad districts ('05' vs '5') and how they
nest term history. Everything is funnelled through the helpers here before
comparison.
"""

import re
from typing import Any, Optional

# FIPS (zero-padded string) -> USPS postal code
FIPS_TO_STATE: dict[str, str] = {
    "01": "AL", "02": "AK", "04": "AZ", "05": "AR", "06": "CA", "08": "CO",
    "09": "CT", "10": "DE", "11": "DC", "12": "FL", "13": "GA", "15": "HI",
    "16": "ID", "17": "IL", "18": "IN", "19": "IA", "20": "KS", "21": "KY",
    "22": "LA", "23": "ME", "24": "MD", "25": "MA", "26": "MI", "27": "MN",
    "28": "MS", "29": "MO", "30": "MT", "31": "NE", "32": "NV", "33": "NH",
    "34": "NJ", "35": "NM", "36": "NY", "37": "NC", "38": "ND", "39": "OH",
    "40": "OK", "41": "OR", "42": "PA", "44": "RI", "45": "SC", "46": "SD",
    "47": "TN", "48": "TX", "49": "UT", "50": "VT", "51": "VA", "53": "WA",
    "54": "WV", "55": "WI", "56": "WY",
}  # fmt: skip

STATE_TO_FIPS: dict[str, str] = {code: fips for fips, code in FIPS_TO_STATE.items()}

STATE_NAME_TO_CODE: dict[str, str] = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "district of columbia": "DC", "florida": "FL", "georgia": "GA", "hawaii": "HI",
    "idaho": "ID", "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI",
    "south carolina": "SC", "south dakota": "SD", "tennessee": "TN", "texas": "TX",
    "utah": "UT", "vermont": "VT", "virginia": "VA", "washington": "WA",
    "west virginia": "WV", "wisconsin": "WI", "wyoming": "WY",
}  # fmt: skip

CHAMBER_SENATE = "Senate"
CHAMBER_HOUSE = "House of Representatives"

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def fips_to_state(fips: Any) -> Optional[str]:
    """Map a numeric state FIPS code ('6', '06', 6) to its postal code."""
    if fips is None:
        return None
    return FIPS_TO_STATE.get(str(fips).strip().zfill(2))


def normalize_state_to_code(raw: Any) -> Optional[str]:
    """
    Normalize a state spelled as a postal code or full name.

    Args:
        raw: 'IL', 'il', 'Illinois', 'ILLINOIS', 'District of Columbia.', ...

    Returns:
        Two-letter USPS code, or None if the value is not recognized.
    """
    if not isinstance(raw, str):
        return None
    value = raw.strip()
    if not value:
        return None

    if len(value) == 2:
        code = value.upper()
        return code if code in STATE_TO_FIPS else None

    cleaned = _WHITESPACE.sub(" ", _PUNCTUATION.sub("", value.lower())).strip()
    if cleaned == "dist of columbia":
        cleaned = "district of columbia"
    return STATE_NAME_TO_CODE.get(cleaned)


def strip_leading_zeros(district: Any) -> str:
    """
    Canonical form of a district number for comparison.

    '05' and '5' both become '5'. An all-zero district ('00', the at-large
    convention) becomes '0'. Non-numeric labels ('At-Large', 'A') are
    returned stripped but otherwise unchanged. None becomes ''.
    """
    if district is None:
        return ""
    value = str(district).strip()
    stripped = value.lstrip("0")
    if value and not stripped:
        return "0"
    return stripped


def pad_district(district: Any) -> Optional[str]:
    """Zero-pad a congressional district number to two digits."""
    if district is None:
        return None
    value = str(district).strip()
    if not value:
        return None
    return value.zfill(2)


def districts_equal(left: Any, right: Any) -> bool:
    """Compare two districts ignoring leading zeros."""
    return strip_leading_zeros(left) == strip_leading_zeros(right)


def normalize_terms(terms: Any) -> list[dict[str, Any]]:
    """
    Coerce a member's ``terms`` field into a list of term dicts.

    Congress.gov has returned all three of these shapes over time:
    ``[{...}, ...]``, ``{"item": [{...}, ...]}`` and a bare ``{...}``.
    """
    if terms is None:
        return []
    if isinstance(terms, list):
        return [t for t in terms if isinstance(t, dict)]
    if isinstance(terms, dict):
        items = terms.get("item")
        if isinstance(items, list):
            return [t for t in items if isinstance(t, dict)]
        if isinstance(items, dict):
            return [items]
        return [terms]
    return []


def current_chamber_term(member: dict[str, Any], chamber: str) -> Optional[dict[str, Any]]:
    """
    Find the most recent term served in ``chamber``.

    Scans from the newest (last) term back to the oldest so a member who
    moved from the House to the Senate resolves to the Senate term, not
    simply the last array element.
    """
    wanted = chamber.lower()
    for term in reversed(normalize_terms(member.get("terms"))):
        term_chamber = term.get("chamber")
        if isinstance(term_chamber, str) and term_chamber.lower() == wanted:
            return term
    return None


def member_state(member: dict[str, Any], term: Optional[dict[str, Any]] = None) -> Optional[str]:
    """Resolve a member's state from the chamber term or the top-level record."""
    candidates = []
    if term:
        candidates += [term.get("state"), term.get("stateCode")]
    candidates += [member.get("state"), member.get("stateCode")]
    first_term = next(iter(normalize_terms(member.get("terms"))), None)
    if first_term:
        candidates += [first_term.get("state"), first_term.get("stateCode")]

    for raw in candidates:
        code = normalize_state_to_code(raw) if raw else None
        if code:
            return code
    return None


def member_key(member: dict[str, Any]) -> Optional[str]:
    """Stable per-person identifier for deduplication."""
    for key in ("bioguideId", "bioguide_id", "uri", "name"):
        value = member.get(key)
        if value:
            return str(value)
    return None
