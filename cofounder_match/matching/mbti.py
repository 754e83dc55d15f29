"""Startup-MBTI compatibility calculator.

Compares two Startup-MBTI profiles with three pairwise combinators:

- similarity: shared values reduce friction (stress sensitivity, ideals, pay)
- complementary: one high / one low works well (networker + focused executor)
- balance: a meaningful but not extreme gap is best (planning style)

Five category scores are blended into ``overall``. Each category also emits
display-only strengths and cautions that never affect the numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cofounder_match.matching.config import MatchingConfig, get_matching_config
from cofounder_match.matching.models import (
    EXTERNAL_ID_PATTERN,
    MbtiCompatibility,
    StartupMBTI,
)
from cofounder_match.matching.numeric import round_half_up

MAX_NOTES = 3


@dataclass
class CategoryScore:
    """Score of a single category with its qualitative notes."""

    score: int
    strengths: list[str] = field(default_factory=list)
    cautions: list[str] = field(default_factory=list)


def similarity_score(a: float, b: float) -> float:
    """100 for identical values, minus one point per point of difference."""
    return max(0, 100 - abs(a - b))


def complementary_score(a: float, b: float) -> float:
    """Peaks at 100 when ``a + b`` is in [100, 120]."""
    total = a + b
    if 100 <= total <= 120:
        return 100
    if 80 <= total < 100:
        return 80 + (total - 80)
    if 120 < total <= 140:
        return 100 - (total - 120)
    if total < 80:
        return total
    return max(0, 200 - total)


def balance_score(a: float, b: float) -> float:
    """Peaks at 100 when ``|a - b|`` is in [15, 35]."""
    diff = abs(a - b)
    if 15 <= diff <= 35:
        return 100
    if diff < 15:
        return 70 + diff * 2
    if diff <= 50:
        return 100 - (diff - 35) * 2
    return max(0, 100 - diff)


def founder_trait_compatibility(a: StartupMBTI, b: StartupMBTI) -> CategoryScore:
    """Innovation, sensitivity, social activity, cooperation and planning."""
    strengths: list[str] = []
    cautions: list[str] = []

    innovation = similarity_score(a.innovation_learning, b.innovation_learning)
    if innovation >= 80:
        strengths.append("혁신과 학습에 대한 가치관이 비슷합니다")
    elif innovation < 50:
        cautions.append("혁신 추구 정도가 달라 방향성 갈등이 있을 수 있습니다")

    sensitivity = similarity_score(a.sensitivity_nervous, b.sensitivity_nervous)
    if abs(a.sensitivity_nervous - b.sensitivity_nervous) > 50:
        cautions.append("스트레스 민감도 차이가 커서 이해 충돌이 있을 수 있습니다")

    social = complementary_score(a.social_activity, b.social_activity)
    if a.social_activity > 70 and b.social_activity < 30:
        strengths.append("외부 네트워킹과 내부 집중 역할을 분담할 수 있습니다")

    # plain average: higher is better for both
    cooperation = (a.cooperation_care + b.cooperation_care) / 2
    if cooperation >= 60:
        strengths.append("서로에 대한 배려와 협력 성향이 높습니다")
    elif cooperation < 40:
        cautions.append("협력보다 개인 성과를 중시하는 경향이 있습니다")

    planning = balance_score(a.plan_execution, b.plan_execution)
    if a.plan_execution > 70 and b.plan_execution > 70:
        strengths.append("둘 다 계획적이고 추진력이 강합니다")
    elif a.plan_execution > 70 or b.plan_execution > 70:
        strengths.append("한 명이 계획을 세우고 다른 한 명이 유연하게 대응할 수 있습니다")

    score = (innovation + sensitivity + social + cooperation + planning) / 5
    return CategoryScore(round_half_up(score), strengths, cautions)


def perfectionism_compatibility(a: StartupMBTI, b: StartupMBTI) -> CategoryScore:
    """Internal (AP), external (EOP) and ideal-driven (IOP) perfectionism."""
    strengths: list[str] = []
    cautions: list[str] = []

    if (a.ap_perfectionism + b.ap_perfectionism) / 2 >= 70:
        strengths.append("품질에 대한 기준이 높아 완성도 있는 결과물을 만들 수 있습니다")

    if abs(a.eop_perfectionism - b.eop_perfectionism) > 40:
        cautions.append("외부 평가에 대한 민감도 차이가 있어 우선순위 갈등이 생길 수 있습니다")

    ideals = similarity_score(a.iop_perfectionism, b.iop_perfectionism)
    if ideals >= 70:
        strengths.append("추구하는 이상과 비전이 비슷합니다")

    score = (
        similarity_score(a.ap_perfectionism, b.ap_perfectionism)
        + similarity_score(a.eop_perfectionism, b.eop_perfectionism)
        + ideals
    ) / 3
    return CategoryScore(round_half_up(score), strengths, cautions)


def motivation_compatibility(a: StartupMBTI, b: StartupMBTI) -> CategoryScore:
    """Growth, achievement and recognition motives."""
    strengths: list[str] = []
    cautions: list[str] = []

    if a.motivation_growth >= 70 and b.motivation_growth >= 70:
        strengths.append("함께 성장하고 배우는 것을 중요하게 생각합니다")

    if abs(a.motivation_achieve - b.motivation_achieve) > 40:
        cautions.append("성과에 대한 욕구 차이가 있어 업무 강도 조율이 필요합니다")

    if a.motivation_recognition > 70 and b.motivation_recognition < 40:
        strengths.append("한 명은 대외 활동, 다른 한 명은 내부 업무에 집중할 수 있습니다")

    score = (
        similarity_score(a.motivation_growth, b.motivation_growth)
        + similarity_score(a.motivation_achieve, b.motivation_achieve)
        + complementary_score(a.motivation_recognition, b.motivation_recognition)
    ) / 3
    return CategoryScore(round_half_up(score), strengths, cautions)


def reward_compatibility(a: StartupMBTI, b: StartupMBTI) -> CategoryScore:
    """Compensation, autonomy and stability expectations."""
    strengths: list[str] = []
    cautions: list[str] = []

    compensation_gap = abs(a.reward_compensation - b.reward_compensation)
    if compensation_gap > 40:
        cautions.append("보상에 대한 기대치가 달라 수익 분배 시 갈등이 있을 수 있습니다")
    elif compensation_gap <= 20:
        strengths.append("보상에 대한 기대치가 비슷합니다")

    if a.reward_autonomy >= 60 and b.reward_autonomy >= 60:
        strengths.append("자율적인 업무 환경을 선호해 독립적으로 일할 수 있습니다")

    if abs(a.reward_stability - b.reward_stability) > 40:
        cautions.append("안정성에 대한 니즈가 달라 리스크 감수 결정에서 갈등이 있을 수 있습니다")

    score = (
        similarity_score(a.reward_compensation, b.reward_compensation)
        + similarity_score(a.reward_autonomy, b.reward_autonomy)
        + similarity_score(a.reward_stability, b.reward_stability)
    ) / 3
    return CategoryScore(round_half_up(score), strengths, cautions)


def partnership_compatibility(a: StartupMBTI, b: StartupMBTI) -> CategoryScore:
    """Selfishness, partnership affinity and entrepreneurship."""
    strengths: list[str] = []
    cautions: list[str] = []

    selfishness = (a.partner_selfishness + b.partner_selfishness) / 2
    if selfishness <= 30:
        strengths.append("팀 이익을 개인보다 우선시하는 성향입니다")
    elif selfishness >= 50:
        cautions.append("개인 이익을 중시하는 성향이 있어 이해 충돌이 있을 수 있습니다")

    cooperation = (a.partner_cooperation + b.partner_cooperation) / 2
    if cooperation >= 60:
        strengths.append("함께 일하는 것을 즐기는 동업 친화적 성향입니다")
    elif cooperation <= 35:
        cautions.append("독자적으로 일하는 것을 선호해 협업 조율이 필요합니다")

    entrepreneurship = similarity_score(
        a.partner_entrepreneurship, b.partner_entrepreneurship
    )
    if a.partner_entrepreneurship >= 70 and b.partner_entrepreneurship >= 70:
        strengths.append("둘 다 도전적이고 혁신적인 기업가 정신이 강합니다")
    elif a.partner_entrepreneurship >= 70 or b.partner_entrepreneurship >= 70:
        strengths.append("한 명이 새로운 도전을 이끌고 다른 한 명이 안정적으로 실행할 수 있습니다")

    selfishness_penalty = (selfishness - 50) * 0.5 if selfishness > 50 else 0
    base = ((100 - selfishness) + cooperation + entrepreneurship) / 3
    return CategoryScore(
        round_half_up(max(0, base - selfishness_penalty)), strengths, cautions
    )


def calculate_startup_mbti_compatibility(
    a: StartupMBTI,
    b: StartupMBTI,
    config: MatchingConfig | None = None,
) -> MbtiCompatibility:
    """Compute the five category scores and their weighted overall score."""
    config = config or get_matching_config()

    founder = founder_trait_compatibility(a, b)
    perfectionism = perfectionism_compatibility(a, b)
    motivation = motivation_compatibility(a, b)
    reward = reward_compatibility(a, b)
    partnership = partnership_compatibility(a, b)

    overall = round_half_up(
        founder.score * config.mbti_weight_founder_trait
        + perfectionism.score * config.mbti_weight_perfectionism
        + motivation.score * config.mbti_weight_motivation
        + reward.score * config.mbti_weight_reward
        + partnership.score * config.mbti_weight_partnership
    )

    categories = (founder, perfectionism, motivation, reward, partnership)
    strengths = [note for category in categories for note in category.strengths]
    cautions = [note for category in categories for note in category.cautions]

    return MbtiCompatibility(
        overall=overall,
        founder_trait=founder.score,
        perfectionism=perfectionism.score,
        motivation=motivation.score,
        reward=reward.score,
        partnership=partnership.score,
        strengths=strengths[:MAX_NOTES],
        cautions=cautions[:MAX_NOTES],
    )


def calculate_stress_compatibility(a: StartupMBTI, b: StartupMBTI) -> int:
    """Bucket the stress index gap. Not part of ``overall``."""
    diff = abs(a.stress_index - b.stress_index)
    if diff <= 20:
        return 100
    if diff <= 40:
        return 80
    if diff <= 60:
        return 60
    return 40


def validate_external_id(external_id: str) -> bool:
    """Return True if ``external_id`` looks like ``PST2512ME63603``."""
    return bool(EXTERNAL_ID_PATTERN.fullmatch(external_id))
