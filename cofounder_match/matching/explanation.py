"""Rule-based match explanations.

Turns a score breakdown into up to three short reasons and at most one
caution. Rules are evaluated in a fixed order, so the same inputs always
produce the same text.
"""

from __future__ import annotations

from typing import Protocol

from cofounder_match.matching.calculator import get_top_penalty
from cofounder_match.matching.models import (
    DetailedExplanation,
    Explanation,
    ExplanationProfile,
    ScoreBreakdown,
)

MAX_REASONS = 3
CARD_SUMMARY_REASONS = 2
CARD_SUMMARY_SEPARATOR = " · "

GOAL_LABELS: dict[str, str] = {
    "investment": "투자유치",
    "revenue": "매출창출",
    "tech_validation": "기술검증",
    "side_project": "사이드프로젝트",
    "hackathon": "해커톤",
}

ROLE_LABELS: dict[str, str] = {
    "planning": "기획",
    "development": "개발",
    "design": "디자인",
    "marketing": "마케팅",
    "operations": "운영",
    "other": "기타",
}

MEETING_FREQ_LABELS: dict[str, str] = {
    "daily": "매일",
    "twice_week": "주 2회",
    "weekly": "주 1회",
    "biweekly": "격주",
}

FALLBACK_REASON = "조건에 맞는 후보예요"


def label_for(labels: dict[str, str], value: str) -> str:
    """Display label for ``value``, or the raw value when unknown."""
    return labels.get(value, value)


class Explainer(Protocol):
    """Anything that can explain a scored pair."""

    def explain(
        self,
        viewer: ExplanationProfile,
        candidate: ExplanationProfile,
        breakdown: ScoreBreakdown,
    ) -> Explanation: ...


class RuleBasedExplainer:
    """Template-driven explainer with fixed thresholds."""

    def explain(
        self,
        viewer: ExplanationProfile,
        candidate: ExplanationProfile,
        breakdown: ScoreBreakdown,
    ) -> Explanation:
        """Return up to three reasons and an optional caution."""
        reasons = self.reasons(viewer, candidate, breakdown)
        return Explanation(
            reasons_top3=reasons[:MAX_REASONS],
            caution=self.caution(viewer, candidate, breakdown),
        )

    def reasons(
        self,
        viewer: ExplanationProfile,
        candidate: ExplanationProfile,
        breakdown: ScoreBreakdown,
    ) -> list[str]:
        """All reasons that apply, in rule order (never empty)."""
        reasons: list[str] = []

        if breakdown.goal_alignment >= 100:
            goal = label_for(GOAL_LABELS, candidate.goal)
            reasons.append(f'"{goal}" 목표가 일치해요')

        if breakdown.role_complementarity >= 70:
            offered = set(candidate.role_can) | set(candidate.role_want)
            matching = [role for role in viewer.role_need if role in offered]
            if matching:
                role = label_for(ROLE_LABELS, matching[0])
                reasons.append(f"찾고 계신 {role} 역할을 할 수 있어요")

        if breakdown.commit_alignment >= 80:
            reasons.append(
                f"주당 투입 시간이 비슷해요 ({candidate.availability_hours}시간)"
            )

        if breakdown.comm_rules_similarity >= 80:
            if candidate.meeting_freq:
                freq = label_for(MEETING_FREQ_LABELS, candidate.meeting_freq)
                reasons.append(f"{freq} 미팅 선호가 맞아요")
            else:
                reasons.append("소통 방식이 잘 맞을 것 같아요")

        if breakdown.decision_style_similarity >= 70:
            reasons.append("의사결정 스타일이 비슷해요")

        if breakdown.conflict_style_similarity >= 80:
            reasons.append("갈등 해결 방식이 비슷해요")

        if breakdown.domain_complementarity >= 70:
            candidate_domains = set(candidate.domains)
            if any(domain in candidate_domains for domain in viewer.domains):
                reasons.append("같은 도메인에 관심이 있어요")

        if breakdown.skill_complementarity >= 70:
            reasons.append("보유 스킬이 서로 보완돼요")

        if breakdown.profile_completeness >= 80:
            reasons.append("프로필이 꼼꼼하게 작성되어 있어요")

        return reasons or [FALLBACK_REASON]

    def caution(
        self,
        viewer: ExplanationProfile,
        candidate: ExplanationProfile,
        breakdown: ScoreBreakdown,
    ) -> str | None:
        """Caution for the largest penalty, else the first boundary warning."""
        hours_diff = abs(viewer.availability_hours - candidate.availability_hours)
        top_penalty = get_top_penalty(breakdown)

        if top_penalty is not None:
            if top_penalty.factor == "commit_gap_penalty":
                return f"투입 시간 차이가 커요 ({hours_diff}시간 차이)"
            if top_penalty.factor == "goal_conflict_penalty":
                viewer_goal = label_for(GOAL_LABELS, viewer.goal)
                candidate_goal = label_for(GOAL_LABELS, candidate.goal)
                return f"목표 방향성이 달라요 ({viewer_goal} vs {candidate_goal})"
            if top_penalty.factor == "style_clash_penalty":
                return "협업 스타일 충돌 가능성이 있어요"
            return top_penalty.label

        if hours_diff >= 15:
            return f"주당 투입 시간에 {hours_diff}시간 차이가 있어요"

        if viewer.goal != candidate.goal:
            goal = label_for(GOAL_LABELS, candidate.goal)
            return f'목표가 "{goal}"로 다를 수 있어요'

        if breakdown.decision_style_similarity < 50:
            return "의사결정 스타일에 차이가 있을 수 있어요"

        return None


_default_explainer = RuleBasedExplainer()


def generate_explanation(
    viewer: ExplanationProfile,
    candidate: ExplanationProfile,
    breakdown: ScoreBreakdown,
) -> Explanation:
    """Explain a pair with the default rule-based explainer."""
    return _default_explainer.explain(viewer, candidate, breakdown)


def generate_card_summary(
    viewer: ExplanationProfile,
    candidate: ExplanationProfile,
    breakdown: ScoreBreakdown,
) -> str:
    """One-line summary for a recommendation card."""
    reasons = _default_explainer.reasons(viewer, candidate, breakdown)
    return CARD_SUMMARY_SEPARATOR.join(reasons[:CARD_SUMMARY_REASONS])


def generate_detailed_explanation(
    viewer: ExplanationProfile,
    candidate: ExplanationProfile,
    breakdown: ScoreBreakdown,
) -> DetailedExplanation:
    """Strengths, things to discuss, and an overall compatibility comment."""
    explanation = generate_explanation(viewer, candidate, breakdown)

    considerations: list[str] = []
    if explanation.caution:
        considerations.append(explanation.caution)
    if breakdown.decision_style_similarity < 60:
        considerations.append("의사결정 방식에 대해 미리 이야기해 보세요")
    if breakdown.conflict_style_similarity < 60:
        considerations.append("갈등 발생 시 대응 방법을 합의해 두세요")

    core_average = (
        breakdown.goal_alignment
        + breakdown.commit_alignment
        + breakdown.role_complementarity
    ) / 3
    if core_average >= 80:
        compatibility = "핵심 조건이 잘 맞는 편이에요"
    elif core_average >= 60:
        compatibility = "대체로 괜찮지만 일부 조율이 필요해요"
    else:
        compatibility = "사전에 충분한 대화가 필요해요"

    return DetailedExplanation(
        strengths=list(explanation.reasons_top3),
        considerations=considerations,
        compatibility=compatibility,
    )
