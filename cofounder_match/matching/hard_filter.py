"""Hard filter: binary eligibility gate applied before any scoring.

A candidate passes only if all of the following hold:
- not blocked (checked first; short-circuits)
- can start no later than one calendar month after the viewer
- weekly hours are compatible
- remote/onsite preferences are compatible
- offers (can or wants) at least one role the viewer needs
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from cofounder_match.matching.config import MatchingConfig, get_matching_config
from cofounder_match.matching.models import (
    CandidateProfile,
    FilterCriteria,
    FilterResult,
    RelaxationSuggestion,
)

REASON_BLOCKED = "차단된 사용자"
REASON_START_DATE = "시작 시점 불일치"
REASON_TIME = "투입시간 불일치"
REASON_LOCATION = "위치선호 불일치"
REASON_ROLE = "역할 불일치"

RELAX_LOCATION = "원격/지역 허용 시"
RELAX_TIME = "시간 조건 완화 시"

_OPEN_LOCATION_PREFS = frozenset({"flexible", "hybrid"})


def is_time_compatible(
    hours1: float,
    hours2: float,
    tolerance: float = 0.5,
    absolute_gap: float = 10,
) -> bool:
    """Return True if two weekly hour commitments are compatible.

    Compatible when the larger value is within ``tolerance`` of the smaller one,
    or when the absolute gap is at most ``absolute_gap`` hours.
    """
    low = min(hours1, hours2)
    high = max(hours1, hours2)
    return high <= low * (1 + tolerance) or high - low <= absolute_gap


def is_location_compatible(pref1: str, pref2: str) -> bool:
    """Return True unless one side is remote-only and the other onsite-only."""
    if pref1 in _OPEN_LOCATION_PREFS or pref2 in _OPEN_LOCATION_PREFS:
        return True
    return pref1 == pref2


def latest_start_date(start_date: date, grace_months: int = 1) -> date:
    """Latest acceptable candidate start date.

    Months are added to the first of the month and the day offset is applied
    afterwards, so a day past the end of the target month rolls over into the
    next one (Jan 31 + 1 month is Mar 3 in 2025).
    """
    first = start_date.replace(day=1) + relativedelta(months=grace_months)
    return first + timedelta(days=start_date.day - 1)


def offers_needed_role(candidate: CandidateProfile, role_need: Sequence[str]) -> bool:
    """Return True if the candidate can or wants to fill any needed role."""
    offered = set(candidate.role_can) | set(candidate.role_want)
    return any(role in offered for role in role_need)


def apply_hard_filter(
    candidate: CandidateProfile,
    criteria: FilterCriteria,
    config: MatchingConfig | None = None,
    *,
    time_tolerance: float | None = None,
) -> FilterResult:
    """Check one candidate against the viewer's constraints.

    Args:
        candidate: Candidate projection to test.
        criteria: Viewer-derived constraints.
        config: Matching configuration (defaults to the singleton).
        time_tolerance: Overrides ``config.time_tolerance`` (used for relaxation).

    Returns:
        FilterResult with every failed condition listed.
    """
    config = config or get_matching_config()

    if candidate.is_blocked:
        return FilterResult(passed=False, reasons=[REASON_BLOCKED])

    reasons: list[str] = []

    if candidate.start_date > latest_start_date(
        criteria.start_date, config.start_date_grace_months
    ):
        reasons.append(REASON_START_DATE)

    tolerance = config.time_tolerance if time_tolerance is None else time_tolerance
    if not is_time_compatible(
        candidate.availability_hours,
        criteria.availability_hours,
        tolerance,
        config.time_absolute_gap_hours,
    ):
        reasons.append(REASON_TIME)

    if not is_location_compatible(candidate.location_pref, criteria.location_pref):
        reasons.append(REASON_LOCATION)

    if criteria.role_need and not offers_needed_role(candidate, criteria.role_need):
        reasons.append(REASON_ROLE)

    if reasons:
        return FilterResult(passed=False, reasons=reasons)
    return FilterResult(passed=True)


def filter_candidates(
    candidates: Sequence[CandidateProfile],
    criteria: FilterCriteria,
    config: MatchingConfig | None = None,
    *,
    time_tolerance: float | None = None,
) -> list[CandidateProfile]:
    """Return the candidates that pass the hard filter, in input order."""
    config = config or get_matching_config()
    return [
        candidate
        for candidate in candidates
        if apply_hard_filter(
            candidate, criteria, config, time_tolerance=time_tolerance
        ).passed
    ]


def generate_relaxation_suggestions(
    candidates: Sequence[CandidateProfile],
    criteria: FilterCriteria,
    config: MatchingConfig | None = None,
) -> list[RelaxationSuggestion]:
    """Suggest which loosened condition would enlarge the candidate pool.

    Re-runs the filter once with a flexible location preference and once with
    the relaxed time tolerance. Only relaxations that strictly increase the
    count are returned, largest gain first.
    """
    config = config or get_matching_config()
    baseline = len(filter_candidates(candidates, criteria, config))

    relaxed_counts = [
        (
            RELAX_LOCATION,
            len(
                filter_candidates(
                    candidates, replace(criteria, location_pref="flexible"), config
                )
            ),
        ),
        (
            RELAX_TIME,
            len(
                filter_candidates(
                    candidates,
                    criteria,
                    config,
                    time_tolerance=config.relaxed_time_tolerance,
                )
            ),
        ),
    ]

    suggestions = [
        RelaxationSuggestion(condition=condition, potential_gain=count - baseline)
        for condition, count in relaxed_counts
        if count > baseline
    ]
    return sorted(suggestions, key=lambda s: s.potential_gain, reverse=True)
