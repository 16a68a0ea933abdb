"""Combine federal and state results into one index-consistent result."""

from typing import Optional

from represent.models import ResolutionResult


def merge(
    federal: ResolutionResult,
    state: ResolutionResult,
    normalized_address: Optional[str] = None,
) -> ResolutionResult:
    """
    Concatenate federal then state officials and offices.

    State office indices are shifted by the number of federal officials so
    they stay valid in the combined list. Inputs are not modified.
    """
    offset = len(federal.officials)
    return ResolutionResult(
        officials=[*federal.officials, *state.officials],
        offices=[*(o.shifted(0) for o in federal.offices), *(o.shifted(offset) for o in state.offices)],
        normalized_address=normalized_address,
    )
