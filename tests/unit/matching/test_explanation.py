"""Tests for rule-based match explanations."""


def _profile(nickname="viewer", **overrides):
    from cofounder_match.matching.models import ExplanationProfile

    data = {
        "nickname": nickname,
        "goal": "investment",
        "availability_hours": 20,
        "role_can": ["development"],
        "role_need": ["design"],
        "domains": ["fintech"],
        "meeting_freq": "weekly",
        "conflict_style": "direct",
    }
    data.update(overrides)
    return ExplanationProfile(**data)


def _quiet_breakdown(**overrides):
    """Breakdown in which no reason rule fires."""
    from cofounder_match.matching.models import ScoreBreakdown

    data = {"commit_alignment": 50}
    data.update(overrides)
    return ScoreBreakdown(**data)


def _example_breakdown():
    from cofounder_match.matching.models import ScoreBreakdown

    return ScoreBreakdown(
        goal_alignment=100,
        commit_alignment=100,
        comm_rules_similarity=100,
        decision_style_similarity=75,
        conflict_style_similarity=60,
        role_complementarity=100,
        skill_complementarity=67,
        domain_complementarity=80,
        profile_completeness=80,
    )


def _example_candidate():
    return _profile(
        "candidate",
        role_can=["design"],
        role_need=["development"],
        domains=["fintech", "commerce"],
        conflict_style="compromise",
    )


class TestGenerateExplanation:
    """Test generate_explanation."""

    def test_example_pair_top_three(self):
        """Reasons follow rule order and are cut at three."""
        from cofounder_match.matching.explanation import generate_explanation

        explanation = generate_explanation(
            _profile(), _example_candidate(), _example_breakdown()
        )

        assert explanation.reasons_top3 == [
            '"투자유치" 목표가 일치해요',
            "찾고 계신 디자인 역할을 할 수 있어요",
            "주당 투입 시간이 비슷해요 (20시간)",
        ]
        assert explanation.caution is None

    def test_fallback_reason(self):
        """When nothing stands out a single generic reason is returned."""
        from cofounder_match.matching.explanation import (
            FALLBACK_REASON,
            generate_explanation,
        )

        explanation = generate_explanation(
            _profile(), _profile("candidate"), _quiet_breakdown()
        )

        assert explanation.reasons_top3 == [FALLBACK_REASON]
        assert explanation.caution is None

    def test_role_reason_requires_a_covered_need(self):
        """A high role score alone is not enough without a matching role."""
        from cofounder_match.matching.explanation import RuleBasedExplainer

        candidate = _profile("candidate", role_can=["marketing"])
        breakdown = _quiet_breakdown(role_complementarity=100)

        reasons = RuleBasedExplainer().reasons(_profile(), candidate, breakdown)

        assert reasons == ["조건에 맞는 후보예요"]

    def test_role_reason_uses_wanted_roles(self):
        """A role the candidate wants also counts as covered."""
        from cofounder_match.matching.explanation import RuleBasedExplainer

        candidate = _profile("candidate", role_can=[], role_want=["design"])
        breakdown = _quiet_breakdown(role_complementarity=70)

        reasons = RuleBasedExplainer().reasons(_profile(), candidate, breakdown)

        assert reasons == ["찾고 계신 디자인 역할을 할 수 있어요"]

    def test_comm_reason_with_meeting_frequency(self):
        """The candidate's meeting frequency is named when set."""
        from cofounder_match.matching.explanation import RuleBasedExplainer

        candidate = _profile("candidate", meeting_freq="twice_week")
        breakdown = _quiet_breakdown(comm_rules_similarity=100)

        reasons = RuleBasedExplainer().reasons(_profile(), candidate, breakdown)

        assert reasons == ["주 2회 미팅 선호가 맞아요"]

    def test_comm_reason_without_meeting_frequency(self):
        """A generic communication reason is used otherwise."""
        from cofounder_match.matching.explanation import RuleBasedExplainer

        candidate = _profile("candidate", meeting_freq=None)
        breakdown = _quiet_breakdown(comm_rules_similarity=80)

        reasons = RuleBasedExplainer().reasons(_profile(), candidate, breakdown)

        assert reasons == ["소통 방식이 잘 맞을 것 같아요"]

    def test_unknown_codes_fall_back_to_raw_value(self):
        """Labels missing from the tables are shown as-is."""
        from cofounder_match.matching.explanation import RuleBasedExplainer

        viewer = _profile(role_need=["legal"])
        candidate = _profile("candidate", role_can=["legal"])
        breakdown = _quiet_breakdown(role_complementarity=100)

        reasons = RuleBasedExplainer().reasons(viewer, candidate, breakdown)

        assert reasons == ["찾고 계신 legal 역할을 할 수 있어요"]


class TestCaution:
    """Test caution selection."""

    def test_commit_gap_penalty_caution(self):
        """The commit gap caution reports the actual hour difference."""
        from cofounder_match.matching.explanation import generate_explanation

        viewer = _profile(availability_hours=40)
        candidate = _profile("candidate", availability_hours=10)
        breakdown = _quiet_breakdown(commit_gap_penalty=15)

        explanation = generate_explanation(viewer, candidate, breakdown)

        assert explanation.caution == "투입 시간 차이가 커요 (30시간 차이)"

    def test_goal_conflict_penalty_caution(self):
        """The goal conflict caution names both goals."""
        from cofounder_match.matching.explanation import generate_explanation

        candidate = _profile("candidate", goal="hackathon")
        breakdown = _quiet_breakdown(goal_conflict_penalty=20)

        explanation = generate_explanation(_profile(), candidate, breakdown)

        assert explanation.caution == "목표 방향성이 달라요 (투자유치 vs 해커톤)"

    def test_style_clash_penalty_caution(self):
        """Style clash has its own caution."""
        from cofounder_match.matching.explanation import generate_explanation

        breakdown = _quiet_breakdown(style_clash_penalty=10)

        explanation = generate_explanation(
            _profile(), _profile("candidate"), breakdown
        )

        assert explanation.caution == "협업 스타일 충돌 가능성이 있어요"

    def test_largest_penalty_wins(self):
        """Only the largest penalty produces a caution."""
        from cofounder_match.matching.explanation import generate_explanation

        viewer = _profile(availability_hours=40)
        candidate = _profile("candidate", availability_hours=10, goal="hackathon")
        breakdown = _quiet_breakdown(commit_gap_penalty=15, goal_conflict_penalty=20)

        explanation = generate_explanation(viewer, candidate, breakdown)

        assert explanation.caution.startswith("목표 방향성이 달라요")

    def test_hour_gap_heuristic(self):
        """A 15 hour gap is flagged even without a penalty."""
        from cofounder_match.matching.explanation import generate_explanation

        candidate = _profile("candidate", availability_hours=35)

        explanation = generate_explanation(_profile(), candidate, _quiet_breakdown())

        assert explanation.caution == "주당 투입 시간에 15시간 차이가 있어요"

    def test_goal_mismatch_heuristic(self):
        """Different goals without a penalty are flagged."""
        from cofounder_match.matching.explanation import generate_explanation

        candidate = _profile("candidate", goal="revenue")

        explanation = generate_explanation(_profile(), candidate, _quiet_breakdown())

        assert explanation.caution == '목표가 "매출창출"로 다를 수 있어요'

    def test_decision_style_heuristic(self):
        """A low decision style similarity is flagged last."""
        from cofounder_match.matching.explanation import generate_explanation

        breakdown = _quiet_breakdown(decision_style_similarity=40)

        explanation = generate_explanation(
            _profile(), _profile("candidate"), breakdown
        )

        assert explanation.caution == "의사결정 스타일에 차이가 있을 수 있어요"


class TestCardSummary:
    """Test generate_card_summary."""

    def test_joins_first_two_reasons(self):
        """The card shows the first two reasons separated by a dot."""
        from cofounder_match.matching.explanation import generate_card_summary

        summary = generate_card_summary(
            _profile(), _example_candidate(), _example_breakdown()
        )

        assert summary == '"투자유치" 목표가 일치해요 · 찾고 계신 디자인 역할을 할 수 있어요'

    def test_fallback_summary(self):
        """With no reasons the fallback text is the summary."""
        from cofounder_match.matching.explanation import (
            FALLBACK_REASON,
            generate_card_summary,
        )

        summary = generate_card_summary(
            _profile(), _profile("candidate"), _quiet_breakdown()
        )

        assert summary == FALLBACK_REASON


class TestDetailedExplanation:
    """Test generate_detailed_explanation."""

    def test_strong_pair(self):
        """Strong core factors and no considerations."""
        from cofounder_match.matching.explanation import generate_detailed_explanation

        detail = generate_detailed_explanation(
            _profile(), _example_candidate(), _example_breakdown()
        )

        assert len(detail.strengths) == 3
        assert detail.considerations == []
        assert detail.compatibility == "핵심 조건이 잘 맞는 편이에요"

    def test_weak_pair_lists_considerations(self):
        """Low decision and conflict similarity add discussion points."""
        from cofounder_match.matching.explanation import generate_detailed_explanation

        detail = generate_detailed_explanation(
            _profile(), _profile("candidate"), _quiet_breakdown()
        )

        assert detail.considerations == [
            "의사결정 방식에 대해 미리 이야기해 보세요",
            "갈등 발생 시 대응 방법을 합의해 두세요",
        ]
        assert detail.compatibility == "사전에 충분한 대화가 필요해요"

    def test_caution_comes_first(self):
        """The caution, when present, leads the considerations."""
        from cofounder_match.matching.explanation import generate_detailed_explanation

        breakdown = _quiet_breakdown(
            goal_alignment=100,
            decision_style_similarity=60,
            conflict_style_similarity=60,
            style_clash_penalty=5,
        )

        detail = generate_detailed_explanation(
            _profile(), _profile("candidate"), breakdown
        )

        assert detail.considerations == ["협업 스타일 충돌 가능성이 있어요"]
        # (100 + 50 + 50) / 3
        assert detail.compatibility == "대체로 괜찮지만 일부 조율이 필요해요"
