"""Profile normalizer: stored user records -> typed engine views."""

from __future__ import annotations

from cofounder_match.matching.models import (
    CandidateProfile,
    ExplanationProfile,
    FilterCriteria,
    ScoringProfile,
    UserProfile,
    parse_tag_list,
)
from cofounder_match.matching.numeric import round_half_up

__all__ = [
    "build_filter_criteria",
    "calculate_profile_completeness",
    "parse_tag_list",
    "to_candidate_profile",
    "to_explanation_profile",
    "to_public_profile",
    "to_scoring_profile",
]

# (field, weight) pairs; a field counts when it is set and non-empty
_COMPLETENESS_FIELDS: tuple[tuple[str, int], ...] = (
    ("bio", 5),
    ("location", 5),
    ("location_pref", 10),
    ("availability_hours", 10),
    ("start_date", 10),
    ("domains", 10),
    ("role_can", 5),
    ("role_want", 5),
    ("role_need", 10),
    ("skills", 5),
    ("comm_channel", 5),
    ("response_sla", 5),
    ("meeting_freq", 5),
    ("goal", 10),
)


def to_scoring_profile(user: UserProfile) -> ScoringProfile:
    """Build the full scoring view of a user."""
    return ScoringProfile(
        user_id=user.user_id,
        goal=user.goal,
        availability_hours=user.availability_hours,
        role_can=list(user.role_can),
        role_want=list(user.role_want),
        role_need=list(user.role_need),
        skills=list(user.skills),
        domains=list(user.domains),
        comm_channel=user.comm_channel,
        response_sla=user.response_sla,
        meeting_freq=user.meeting_freq,
        decision_consensus=user.decision_consensus,
        decision_data=user.decision_data,
        decision_speed=user.decision_speed,
        decision_flexibility=user.decision_flexibility,
        decision_risk=user.decision_risk,
        conflict_style=user.conflict_style,
        traits=user.traits,
        startup_mbti=user.startup_mbti,
        trust_score=user.trust_score,
    )


def to_explanation_profile(user: UserProfile) -> ExplanationProfile:
    """Build the display view used by the explanation generator."""
    return ExplanationProfile(
        nickname=user.nickname,
        goal=user.goal,
        availability_hours=user.availability_hours,
        role_can=list(user.role_can),
        role_want=list(user.role_want),
        role_need=list(user.role_need),
        domains=list(user.domains),
        meeting_freq=user.meeting_freq,
        conflict_style=user.conflict_style,
    )


def to_candidate_profile(user: UserProfile, is_blocked: bool = False) -> CandidateProfile:
    """Build the reduced projection used by the hard filter."""
    return CandidateProfile(
        user_id=user.user_id,
        availability_hours=user.availability_hours,
        start_date=user.start_date,
        location_pref=user.location_pref,
        role_can=list(user.role_can),
        role_want=list(user.role_want),
        role_need=list(user.role_need),
        goal=user.goal,
        is_blocked=is_blocked,
    )


def build_filter_criteria(viewer: UserProfile) -> FilterCriteria:
    """Derive hard-filter constraints from the viewer's current profile."""
    return FilterCriteria(
        availability_hours=viewer.availability_hours,
        start_date=viewer.start_date,
        location_pref=viewer.location_pref,
        role_need=list(viewer.role_need),
        goal=viewer.goal,
    )


def calculate_profile_completeness(user: UserProfile) -> int:
    """Weighted percentage of filled profile fields (0-100)."""
    total_weight = sum(weight for _, weight in _COMPLETENESS_FIELDS)
    filled_weight = 0
    for name, weight in _COMPLETENESS_FIELDS:
        value = getattr(user, name)
        if value is None or value == "" or value == []:
            continue
        filled_weight += weight
    return round_half_up(100 * filled_weight / total_weight)


def to_public_profile(user: UserProfile) -> dict:
    """Public projection shown on recommendation cards and detail pages."""
    return {
        "user_id": user.user_id,
        "nickname": user.nickname,
        "bio": user.bio,
        "location": user.location,
        "location_pref": user.location_pref,
        "availability_hours": user.availability_hours,
        "start_date": user.start_date.isoformat(),
        "domains": list(user.domains),
        "role_can": list(user.role_can),
        "role_want": list(user.role_want),
        "role_need": list(user.role_need),
        "goal": user.goal,
        "completeness": calculate_profile_completeness(user),
        "traits": user.traits.to_dict() if user.traits else None,
        "trust_score": user.trust_score.total if user.trust_score else 0,
    }
