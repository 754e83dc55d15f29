"""Data models for the matching engine.

Stored records (``UserProfile`` and its sub-records) are pydantic models so
that out-of-range values are rejected at the boundary. Everything computed per
request is a plain dataclass.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Goal = Literal["investment", "revenue", "tech_validation", "side_project", "hackathon"]
LocationPref = Literal["remote_only", "onsite_only", "hybrid", "flexible"]
CommChannel = Literal["slack", "discord", "kakao", "zoom", "notion", "other"]
MeetingFreq = Literal["daily", "twice_week", "weekly", "biweekly"]
ConflictStyle = Literal["direct", "indirect", "avoid", "compromise"]

EXTERNAL_ID_PATTERN = re.compile(r"^PST[0-9]{4}[A-Z]{2}[0-9]{5}$")

# Binary trait value meaning "leader" on the leadership axis
LEADER = 1

DecisionAxis = Annotated[int, Field(ge=1, le=5)]
TraitAxis = Annotated[int, Field(ge=1, le=2)]
Percent = Annotated[int, Field(ge=0, le=100)]
PercentValue = Annotated[float, Field(ge=0, le=100)]


def parse_tag_list(value: Any) -> list[str]:
    """Decode a serialized tag list, treating anything malformed as empty.

    Accepts a native sequence, a JSON-encoded array string, or None. Entries
    are stripped, blanks dropped and duplicates removed keeping first order.
    """
    if value is None:
        return []

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return []

    if not isinstance(value, (list, tuple, set, frozenset)):
        return []

    tags: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class TraitResult(BaseModel):
    """Six-question binary trait test (1 = first option, 2 = second option)."""

    leadership: TraitAxis
    execution: TraitAxis
    communication: TraitAxis
    risk: TraitAxis
    conflict: TraitAxis
    flexibility: TraitAxis

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


class TrustScore(BaseModel):
    """Trust bundle computed elsewhere for a user."""

    completeness: Percent
    evidence_strength: Percent
    activity: Percent
    reputation: Percent
    total: Percent

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


class StartupMBTI(BaseModel):
    """Externally sourced Startup-MBTI psychometric profile.

    Read-only: the engine never mutates it.
    """

    model_config = ConfigDict(frozen=True)

    external_id: str = Field(
        ..., description="External diagnosis id, e.g. PST2512ME63603"
    )
    mbti_type: str = Field(default="", description="Four-letter type such as ISTP")
    mbti_title: str | None = Field(default=None, description="Display title")

    # Founder traits
    innovation_learning: PercentValue
    sensitivity_nervous: PercentValue
    social_activity: PercentValue
    cooperation_care: PercentValue
    plan_execution: PercentValue

    # Perfectionism
    ap_perfectionism: PercentValue
    eop_perfectionism: PercentValue
    iop_perfectionism: PercentValue

    # Motivation
    motivation_growth: PercentValue
    motivation_achieve: PercentValue
    motivation_recognition: PercentValue

    # Reward
    reward_compensation: PercentValue
    reward_autonomy: PercentValue
    reward_stability: PercentValue

    # Partnership
    partner_selfishness: PercentValue
    partner_cooperation: PercentValue
    partner_entrepreneurship: PercentValue

    stress_index: PercentValue

    @field_validator("external_id")
    @classmethod
    def validate_external_id_format(cls, v: str) -> str:
        """Reject ids that do not match ``PST`` + 4 digits + 2 letters + 5 digits."""
        if not EXTERNAL_ID_PATTERN.fullmatch(v):
            raise ValueError(f"Invalid Startup-MBTI external id: {v!r}")
        return v

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


class UserProfile(BaseModel):
    """A user together with their stored co-founder profile."""

    # Account
    user_id: str = Field(..., description="User id")
    email: str = Field(..., description="Account email")
    nickname: str = Field(..., description="Display name")
    status: str = Field(default="active", description="Account status")
    last_active_at: datetime | None = Field(default=None, description="Last activity")

    # Profile basics
    is_public: bool = Field(default=True, description="Visible in explore")
    bio: str | None = Field(default=None, description="Short introduction")
    location: str | None = Field(default=None, description="City / region")
    location_pref: LocationPref = Field(default="flexible", description="Remote/onsite")
    availability_hours: int = Field(..., ge=0, description="Hours per week")
    start_date: date = Field(..., description="Earliest start date")
    goal: Goal = Field(..., description="Primary goal of the team")

    # Roles, skills, domains
    role_can: list[str] = Field(default_factory=list, description="Roles I can do")
    role_want: list[str] = Field(default_factory=list, description="Roles I want")
    role_need: list[str] = Field(default_factory=list, description="Roles I need")
    skills: list[str] = Field(default_factory=list, description="Skill tags")
    domains: list[str] = Field(default_factory=list, description="Domain tags")

    # Communication
    comm_channel: CommChannel | None = None
    response_sla: int | None = Field(default=None, ge=0, description="Reply SLA, hours")
    meeting_freq: MeetingFreq | None = None

    # Decision style (1-5)
    decision_consensus: DecisionAxis | None = None
    decision_data: DecisionAxis | None = None
    decision_speed: DecisionAxis | None = None
    decision_flexibility: DecisionAxis | None = None
    decision_risk: DecisionAxis | None = None

    conflict_style: ConflictStyle | None = None

    # Attached records
    traits: TraitResult | None = None
    trust_score: TrustScore | None = None
    startup_mbti: StartupMBTI | None = None

    @field_validator(
        "role_can", "role_want", "role_need", "skills", "domains", mode="before"
    )
    @classmethod
    def parse_tags(cls, v: Any) -> list[str]:
        """Accept lists or JSON strings; malformed values become empty."""
        return parse_tag_list(v)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> UserProfile:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


@dataclass
class ScoringProfile:
    """Full numeric/structural view of a profile used by the calculator."""

    user_id: str
    goal: str
    availability_hours: int
    role_can: list[str] = field(default_factory=list)
    role_want: list[str] = field(default_factory=list)
    role_need: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)
    comm_channel: str | None = None
    response_sla: int | None = None
    meeting_freq: str | None = None
    decision_consensus: int | None = None
    decision_data: int | None = None
    decision_speed: int | None = None
    decision_flexibility: int | None = None
    decision_risk: int | None = None
    conflict_style: str | None = None
    traits: TraitResult | None = None
    startup_mbti: StartupMBTI | None = None
    trust_score: TrustScore | None = None

    def decision_axes(self) -> tuple[int | None, ...]:
        """Return the five decision axes in a fixed order."""
        return (
            self.decision_consensus,
            self.decision_data,
            self.decision_speed,
            self.decision_flexibility,
            self.decision_risk,
        )


@dataclass
class ExplanationProfile:
    """Display-oriented subset of a profile used by the explainer."""

    nickname: str
    goal: str
    availability_hours: int
    role_can: list[str] = field(default_factory=list)
    role_want: list[str] = field(default_factory=list)
    role_need: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)
    meeting_freq: str | None = None
    conflict_style: str | None = None


@dataclass
class CandidateProfile:
    """Projection of a candidate sufficient for hard filtering."""

    user_id: str
    availability_hours: int
    start_date: date
    location_pref: str
    role_can: list[str] = field(default_factory=list)
    role_want: list[str] = field(default_factory=list)
    role_need: list[str] = field(default_factory=list)
    goal: str | None = None
    is_blocked: bool = False


@dataclass
class FilterCriteria:
    """Viewer-derived constraints for one recommendation request."""

    availability_hours: int
    start_date: date
    location_pref: str
    role_need: list[str] = field(default_factory=list)
    goal: str | None = None


@dataclass
class FilterResult:
    """Outcome of the hard filter for one candidate."""

    passed: bool
    reasons: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.passed and self.reasons:
            raise ValueError("FilterResult.passed=True is incompatible with reasons")
        if not self.passed and not self.reasons:
            raise ValueError("FilterResult.passed=False requires at least one reason")


@dataclass
class RelaxationSuggestion:
    """A filter condition that, if loosened, would add candidates."""

    condition: str
    potential_gain: int

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return asdict(self)


@dataclass
class ScoreBreakdown:
    """Every named sub-score for one (viewer, candidate) pair.

    Sub-scores are 0-100; the three penalty fields are non-negative deductions.
    """

    # Stability
    goal_alignment: int = 50
    commit_alignment: int = 100
    comm_rules_similarity: int = 50
    decision_style_similarity: int = 50
    conflict_style_similarity: int = 50
    # Synergy
    role_complementarity: int = 50
    skill_complementarity: int = 50
    domain_complementarity: int = 40
    # Trust
    profile_completeness: int = 30
    evidence_count: int = 0
    activity_level: int = 30
    reputation_score: int = 50
    # Startup-MBTI
    mbti_founder_trait: int = 50
    mbti_perfectionism: int = 50
    mbti_motivation: int = 50
    mbti_reward: int = 50
    mbti_partnership: int = 50
    # Penalties
    commit_gap_penalty: int = 0
    goal_conflict_penalty: int = 0
    style_clash_penalty: int = 0

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return asdict(self)


@dataclass
class MbtiCompatibility:
    """Startup-MBTI compatibility between two people."""

    overall: int
    founder_trait: int
    perfectionism: int
    motivation: int
    reward: int
    partnership: int
    strengths: list[str] = field(default_factory=list)
    cautions: list[str] = field(default_factory=list)

    @classmethod
    def neutral(cls) -> MbtiCompatibility:
        """Score used when either side has no Startup-MBTI record."""
        return cls(
            overall=50,
            founder_trait=50,
            perfectionism=50,
            motivation=50,
            reward=50,
            partnership=50,
        )


@dataclass
class ScoreResult:
    """Scores for one (viewer, candidate) pair."""

    stability: int
    synergy: int
    trust: int
    startup_mbti: int
    penalties: int
    total: int
    breakdown: ScoreBreakdown
    uses_mbti_weights: bool = False
    mbti_strengths: list[str] = field(default_factory=list)
    mbti_cautions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not (0 <= self.total <= 100):
            raise ValueError(f"total must be between 0 and 100 (got {self.total})")
        if self.penalties < 0:
            raise ValueError(f"penalties must be non-negative (got {self.penalties})")


@dataclass
class Explanation:
    """Human-readable reasons for a match plus an optional caution."""

    reasons_top3: list[str]
    caution: str | None = None

    def __post_init__(self) -> None:
        if len(self.reasons_top3) > 3:
            raise ValueError("Explanation holds at most 3 reasons")


@dataclass
class DetailedExplanation:
    """Long-form explanation for the detail screen."""

    strengths: list[str]
    considerations: list[str]
    compatibility: str


@dataclass
class MatchScore:
    """Cacheable summary of a scored pair."""

    candidate_id: str
    stability: int
    synergy: int
    trust: int
    penalties: int
    total: int
    reasons_top3: list[str] = field(default_factory=list)
    caution: str | None = None

    @classmethod
    def from_result(
        cls, candidate_id: str, result: ScoreResult, explanation: Explanation
    ) -> MatchScore:
        """Build the summary from a score result and its explanation."""
        return cls(
            candidate_id=candidate_id,
            stability=result.stability,
            synergy=result.synergy,
            trust=result.trust,
            penalties=result.penalties,
            total=result.total,
            reasons_top3=list(explanation.reasons_top3),
            caution=explanation.caution,
        )

    @classmethod
    def empty(cls, candidate_id: str) -> MatchScore:
        """Zero score used when a pair could not be scored."""
        return cls(
            candidate_id=candidate_id,
            stability=0,
            synergy=0,
            trust=0,
            penalties=0,
            total=0,
        )

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return asdict(self)


@dataclass
class MatchRecommendation:
    """One ranked candidate."""

    user_id: str
    nickname: str
    profile: dict
    match_score: MatchScore
    is_synthetic: bool = False

    @property
    def explanation(self) -> Explanation:
        return Explanation(
            reasons_top3=list(self.match_score.reasons_top3),
            caution=self.match_score.caution,
        )

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        explanation = self.explanation
        return {
            "user_id": self.user_id,
            "nickname": self.nickname,
            "profile": self.profile,
            "match_score": self.match_score.to_dict(),
            "explanation": {
                "reasons": explanation.reasons_top3,
                "caution": explanation.caution,
            },
        }


@dataclass
class RecommendationResult:
    """Ranked recommendations plus pool statistics."""

    recommendations: list[MatchRecommendation]
    total_candidates: int
    filtered_count: int
    relaxation_suggestions: list[RelaxationSuggestion] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "total_candidates": self.total_candidates,
            "filtered_count": self.filtered_count,
            "relaxation_suggestions": [
                s.to_dict() for s in self.relaxation_suggestions
            ],
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class MatchDetail:
    """Single-pair result with the full breakdown."""

    profile: dict
    match_score: MatchScore
    breakdown: ScoreBreakdown
    mbti_strengths: list[str] = field(default_factory=list)
    mbti_cautions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return {
            "profile": self.profile,
            "match_score": self.match_score.to_dict(),
            "breakdown": self.breakdown.to_dict(),
            "mbti_strengths": list(self.mbti_strengths),
            "mbti_cautions": list(self.mbti_cautions),
        }


@dataclass
class ExploreFilters:
    """Optional explore constraints; empty values mean "no constraint"."""

    domains: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    goals: list[str] = field(default_factory=list)
    location_prefs: list[str] = field(default_factory=list)
    min_hours: int | None = None
    max_hours: int | None = None

    def __post_init__(self) -> None:
        if (
            self.min_hours is not None
            and self.max_hours is not None
            and self.min_hours > self.max_hours
        ):
            raise ValueError(
                f"min_hours ({self.min_hours}) must not exceed max_hours ({self.max_hours})"
            )


@dataclass
class ExploreResult:
    """One page of explore results."""

    items: list[MatchRecommendation]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size) if self.page_size else 0

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }
