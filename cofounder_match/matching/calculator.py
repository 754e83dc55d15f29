"""Score calculator for co-founder matches.

The final score blends four dimensions and subtracts penalties::

    total = stability * w_s + synergy * w_y + trust * w_t [+ mbti * w_m] - penalties

The MBTI term (and the weight scheme that includes it) applies only when both
sides have a Startup-MBTI record.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cofounder_match.matching.config import MatchingConfig, get_matching_config
from cofounder_match.matching.mbti import calculate_startup_mbti_compatibility
from cofounder_match.matching.models import (
    LEADER,
    MbtiCompatibility,
    ScoreBreakdown,
    ScoreResult,
    ScoringProfile,
)
from cofounder_match.matching.numeric import clamp_score, round_half_up

# Maximum per-axis difference on the 1-5 decision scale
_DECISION_AXIS_RANGE = 4

# Trust sub-scores used when the candidate has no trust record
DEFAULT_TRUST_SCORE = 30
DEFAULT_TRUST_BREAKDOWN = {
    "profile_completeness": 30,
    "evidence_count": 0,
    "activity_level": 30,
    "reputation_score": 50,
}

CONTRIBUTOR_THRESHOLD = 70

CONTRIBUTOR_LABELS: dict[str, str] = {
    "goal_alignment": "목표 정렬",
    "commit_alignment": "커밋 정렬",
    "role_complementarity": "역할 상보성",
    "comm_rules_similarity": "소통 규칙",
    "decision_style_similarity": "의사결정 스타일",
    "conflict_style_similarity": "갈등 대응",
    "skill_complementarity": "스킬 상보성",
    "domain_complementarity": "도메인 시너지",
    "profile_completeness": "프로필 완성도",
    "mbti_founder_trait": "창업자 성향 호환",
    "mbti_perfectionism": "완벽주의 성향 호환",
    "mbti_motivation": "동기 요인 호환",
    "mbti_reward": "보상 요인 호환",
    "mbti_partnership": "파트너쉽 호환",
}

PENALTY_LABELS: dict[str, str] = {
    "commit_gap_penalty": "투입시간 격차가 큼",
    "goal_conflict_penalty": "목표 방향성 차이",
    "style_clash_penalty": "협업 스타일 충돌 가능",
}


@dataclass
class DimensionScore:
    """Rounded dimension score with the sub-scores that produced it."""

    score: int
    breakdown: dict[str, int] = field(default_factory=dict)


@dataclass
class PenaltyResult:
    """Penalty total with its three components."""

    total: int
    breakdown: dict[str, int] = field(default_factory=dict)


@dataclass
class Contributor:
    """A breakdown factor that scored high enough to be highlighted."""

    factor: str
    score: int
    label: str


@dataclass
class TopPenalty:
    """The single largest penalty applied to a pair."""

    factor: str
    penalty: int
    label: str


def _decision_style_similarity(
    viewer: ScoringProfile, candidate: ScoringProfile
) -> int:
    pairs = [
        (v, c)
        for v, c in zip(viewer.decision_axes(), candidate.decision_axes())
        if v is not None and c is not None
    ]
    if not pairs:
        return 50

    total_diff = sum(abs(v - c) for v, c in pairs)
    max_diff = len(pairs) * _DECISION_AXIS_RANGE
    return round_half_up(100 * (1 - total_diff / max_diff))


def calculate_stability(
    viewer: ScoringProfile,
    candidate: ScoringProfile,
    config: MatchingConfig | None = None,
) -> DimensionScore:
    """Goal, commitment, communication, decision and conflict alignment."""
    config = config or get_matching_config()

    goal_alignment = 100 if viewer.goal == candidate.goal else 50

    hours_diff = abs(viewer.availability_hours - candidate.availability_hours)
    max_hours = max(viewer.availability_hours, candidate.availability_hours)
    if max_hours > 0:
        commit_alignment = round_half_up(100 * (1 - hours_diff / max_hours))
    else:
        commit_alignment = 100

    comm_rules = 50
    if viewer.comm_channel and candidate.comm_channel:
        comm_rules = 100 if viewer.comm_channel == candidate.comm_channel else 60
    if (
        viewer.meeting_freq
        and candidate.meeting_freq
        and viewer.meeting_freq == candidate.meeting_freq
    ):
        comm_rules = min(100, comm_rules + 20)

    decision_style = _decision_style_similarity(viewer, candidate)

    conflict_style = 50
    if viewer.conflict_style and candidate.conflict_style:
        conflict_style = (
            100 if viewer.conflict_style == candidate.conflict_style else 60
        )

    score = round_half_up(
        goal_alignment * config.weight_goal_alignment
        + commit_alignment * config.weight_commit_alignment
        + comm_rules * config.weight_comm_rules
        + decision_style * config.weight_decision_style
        + conflict_style * config.weight_conflict_style
    )

    return DimensionScore(
        score=score,
        breakdown={
            "goal_alignment": goal_alignment,
            "commit_alignment": commit_alignment,
            "comm_rules_similarity": comm_rules,
            "decision_style_similarity": decision_style,
            "conflict_style_similarity": conflict_style,
        },
    )


def _needs_met(needs: list[str], provider: ScoringProfile) -> int:
    offered = set(provider.role_can) | set(provider.role_want)
    return sum(1 for role in needs if role in offered)


def calculate_synergy(
    viewer: ScoringProfile,
    candidate: ScoringProfile,
    config: MatchingConfig | None = None,
) -> DimensionScore:
    """Role, skill and domain complementarity."""
    config = config or get_matching_config()

    met = _needs_met(viewer.role_need, candidate) + _needs_met(
        candidate.role_need, viewer
    )
    total_needs = len(viewer.role_need) + len(candidate.role_need)
    role = round_half_up(100 * met / total_needs) if total_needs else 50

    all_skills = set(viewer.skills) | set(candidate.skills)
    candidate_skills = set(candidate.skills)
    overlap = sum(1 for skill in viewer.skills if skill in candidate_skills)
    if all_skills:
        skill = round_half_up(100 * (len(all_skills) - overlap) / len(all_skills))
    else:
        skill = 50

    candidate_domains = set(candidate.domains)
    shared = any(domain in candidate_domains for domain in viewer.domains)
    domain = 80 if shared else 40

    score = round_half_up(
        role * config.weight_role_complementarity
        + skill * config.weight_skill_complementarity
        + domain * config.weight_domain_complementarity
    )

    return DimensionScore(
        score=score,
        breakdown={
            "role_complementarity": role,
            "skill_complementarity": skill,
            "domain_complementarity": domain,
        },
    )


def calculate_trust(
    candidate: ScoringProfile, config: MatchingConfig | None = None
) -> DimensionScore:
    """Trust of the candidate only; the viewer's trust is never consulted."""
    config = config or get_matching_config()

    trust = candidate.trust_score
    if trust is None:
        return DimensionScore(
            score=DEFAULT_TRUST_SCORE, breakdown=dict(DEFAULT_TRUST_BREAKDOWN)
        )

    score = round_half_up(
        trust.completeness * config.weight_trust_completeness
        + trust.evidence_strength * config.weight_trust_evidence
        + trust.activity * config.weight_trust_activity
        + trust.reputation * config.weight_trust_reputation
    )

    return DimensionScore(
        score=score,
        breakdown={
            "profile_completeness": trust.completeness,
            "evidence_count": trust.evidence_strength,
            "activity_level": trust.activity,
            "reputation_score": trust.reputation,
        },
    )


def calculate_startup_mbti(
    viewer: ScoringProfile,
    candidate: ScoringProfile,
    config: MatchingConfig | None = None,
) -> MbtiCompatibility:
    """Startup-MBTI compatibility, neutral (50) if either side has no record."""
    if viewer.startup_mbti is None or candidate.startup_mbti is None:
        return MbtiCompatibility.neutral()
    return calculate_startup_mbti_compatibility(
        viewer.startup_mbti, candidate.startup_mbti, config
    )


def calculate_penalties(
    viewer: ScoringProfile,
    candidate: ScoringProfile,
    config: MatchingConfig | None = None,
) -> PenaltyResult:
    """Commit gap, goal conflict and style clash deductions."""
    config = config or get_matching_config()

    commit_gap = 0
    hours_diff = abs(viewer.availability_hours - candidate.availability_hours)
    if hours_diff >= config.commit_gap_threshold_hours:
        commit_gap = config.commit_gap_penalty

    goal_conflict = 0
    serious, casual = config.serious_goals, config.casual_goals
    if (viewer.goal in serious and candidate.goal in casual) or (
        viewer.goal in casual and candidate.goal in serious
    ):
        goal_conflict = config.goal_conflict_penalty

    style_clash = 0
    if viewer.traits is not None and candidate.traits is not None:
        if viewer.traits.leadership == LEADER and candidate.traits.leadership == LEADER:
            style_clash += config.style_clash_leader_penalty
        if viewer.traits.execution != candidate.traits.execution:
            style_clash += config.style_clash_execution_penalty
        if viewer.traits.conflict != candidate.traits.conflict:
            style_clash += config.style_clash_conflict_penalty
        style_clash = min(style_clash, config.style_clash_cap)

    return PenaltyResult(
        total=commit_gap + goal_conflict + style_clash,
        breakdown={
            "commit_gap_penalty": commit_gap,
            "goal_conflict_penalty": goal_conflict,
            "style_clash_penalty": style_clash,
        },
    )


class ScoreCalculator:
    """Computes a :class:`ScoreResult` for a (viewer, candidate) pair."""

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self.config = config or get_matching_config()

    def score(self, viewer: ScoringProfile, candidate: ScoringProfile) -> ScoreResult:
        """Score ``candidate`` from the viewer's point of view."""
        config = self.config

        stability = calculate_stability(viewer, candidate, config)
        synergy = calculate_synergy(viewer, candidate, config)
        trust = calculate_trust(candidate, config)
        mbti = calculate_startup_mbti(viewer, candidate, config)
        penalties = calculate_penalties(viewer, candidate, config)

        uses_mbti_weights = (
            viewer.startup_mbti is not None and candidate.startup_mbti is not None
        )
        if uses_mbti_weights:
            weighted = (
                stability.score * config.mbti_scheme_stability
                + synergy.score * config.mbti_scheme_synergy
                + trust.score * config.mbti_scheme_trust
                + mbti.overall * config.mbti_scheme_mbti
            )
        else:
            weighted = (
                stability.score * config.weight_stability
                + synergy.score * config.weight_synergy
                + trust.score * config.weight_trust
            )

        breakdown = ScoreBreakdown(
            **stability.breakdown,
            **synergy.breakdown,
            **trust.breakdown,
            mbti_founder_trait=mbti.founder_trait,
            mbti_perfectionism=mbti.perfectionism,
            mbti_motivation=mbti.motivation,
            mbti_reward=mbti.reward,
            mbti_partnership=mbti.partnership,
            **penalties.breakdown,
        )

        return ScoreResult(
            stability=stability.score,
            synergy=synergy.score,
            trust=trust.score,
            startup_mbti=mbti.overall,
            penalties=penalties.total,
            total=clamp_score(weighted - penalties.total),
            breakdown=breakdown,
            uses_mbti_weights=uses_mbti_weights,
            mbti_strengths=list(mbti.strengths),
            mbti_cautions=list(mbti.cautions),
        )


def calculate_match_score(
    viewer: ScoringProfile,
    candidate: ScoringProfile,
    config: MatchingConfig | None = None,
) -> ScoreResult:
    """Convenience wrapper around :meth:`ScoreCalculator.score`."""
    return ScoreCalculator(config).score(viewer, candidate)


def get_top_contributors(
    breakdown: ScoreBreakdown, limit: int = 5
) -> list[Contributor]:
    """Factors scoring at least 70, highest first."""
    contributors = [
        Contributor(factor=name, score=getattr(breakdown, name), label=label)
        for name, label in CONTRIBUTOR_LABELS.items()
        if getattr(breakdown, name) >= CONTRIBUTOR_THRESHOLD
    ]
    contributors.sort(key=lambda c: c.score, reverse=True)
    return contributors[:limit]


def get_top_penalty(breakdown: ScoreBreakdown) -> TopPenalty | None:
    """Return the largest non-zero penalty, or None."""
    best: TopPenalty | None = None
    for name, label in PENALTY_LABELS.items():
        penalty = getattr(breakdown, name)
        if penalty > 0 and (best is None or penalty > best.penalty):
            best = TopPenalty(factor=name, penalty=penalty, label=label)
    return best
