"""Tests for matching data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError


class TestUserProfile:
    """Test UserProfile validation."""

    def test_defaults(self, make_user):
        """Optional fields default to empty or None."""
        user = make_user()

        assert user.status == "active"
        assert user.is_public is True
        assert user.traits is None
        assert user.trust_score is None
        assert user.startup_mbti is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"goal": "world_domination"},
            {"location_pref": "moon"},
            {"availability_hours": -1},
            {"decision_speed": 6},
            {"decision_risk": 0},
            {"meeting_freq": "hourly"},
        ],
    )
    def test_rejects_invalid_values(self, make_user, overrides):
        """Out-of-domain values are rejected at the boundary."""
        with pytest.raises(ValidationError):
            make_user(**overrides)

    def test_to_dict_from_dict_round_trip(self, make_user, make_mbti):
        """UserProfile should serialize and deserialize losslessly."""
        from cofounder_match.matching.models import UserProfile

        user = make_user(startup_mbti=make_mbti(), conflict_style="avoid")

        data = user.to_dict()
        restored = UserProfile.from_dict(data)

        assert data["start_date"] == "2025-01-01"
        assert restored == user

    def test_startup_mbti_is_frozen(self, make_mbti):
        """StartupMBTI records are read-only."""
        mbti = make_mbti()

        with pytest.raises(ValidationError):
            mbti.stress_index = 10


class TestSubRecords:
    """Test TraitResult and TrustScore."""

    def test_trait_axes_are_binary(self):
        """Trait answers are 1 or 2."""
        from cofounder_match.matching.models import TraitResult

        with pytest.raises(ValidationError):
            TraitResult(
                leadership=3,
                execution=1,
                communication=1,
                risk=1,
                conflict=1,
                flexibility=1,
            )

    def test_trust_components_are_percentages(self):
        """Trust components must be within 0-100."""
        from cofounder_match.matching.models import TrustScore

        with pytest.raises(ValidationError):
            TrustScore(
                completeness=120, evidence_strength=0, activity=0, reputation=0, total=0
            )


class TestResultModels:
    """Test computed result dataclasses."""

    def test_score_result_rejects_out_of_range_total(self):
        """The total must be within [0, 100]."""
        from cofounder_match.matching.models import ScoreBreakdown, ScoreResult

        with pytest.raises(ValueError):
            ScoreResult(
                stability=0,
                synergy=0,
                trust=0,
                startup_mbti=50,
                penalties=0,
                total=101,
                breakdown=ScoreBreakdown(),
            )

    def test_explanation_holds_at_most_three_reasons(self):
        """Explanation rejects a fourth reason."""
        from cofounder_match.matching.models import Explanation

        with pytest.raises(ValueError):
            Explanation(reasons_top3=["a", "b", "c", "d"])

    def test_explore_filters_reject_inverted_hours(self):
        """min_hours may not exceed max_hours."""
        from cofounder_match.matching.models import ExploreFilters

        with pytest.raises(ValueError):
            ExploreFilters(min_hours=30, max_hours=10)

    def test_explore_result_total_pages(self):
        """Pages are rounded up."""
        from cofounder_match.matching.models import ExploreResult

        assert ExploreResult(items=[], total=41, page=1, page_size=20).total_pages == 3
        assert ExploreResult(items=[], total=0, page=1, page_size=20).total_pages == 0

    def test_match_recommendation_to_dict(self):
        """Recommendations serialize with a nested explanation."""
        from cofounder_match.matching.models import MatchRecommendation, MatchScore

        score = MatchScore(
            candidate_id="c1",
            stability=90,
            synergy=86,
            trust=66,
            penalties=0,
            total=86,
            reasons_top3=["a"],
            caution="b",
        )
        recommendation = MatchRecommendation(
            user_id="c1", nickname="C1", profile={"user_id": "c1"}, match_score=score
        )

        data = recommendation.to_dict()

        assert data["match_score"]["total"] == 86
        assert data["explanation"] == {"reasons": ["a"], "caution": "b"}
        assert recommendation.explanation.caution == "b"

    def test_recommendation_result_to_dict(self):
        """Generated timestamps are serialized as ISO strings."""
        from cofounder_match.matching.models import (
            RecommendationResult,
            RelaxationSuggestion,
        )

        result = RecommendationResult(
            recommendations=[],
            total_candidates=3,
            filtered_count=0,
            relaxation_suggestions=[RelaxationSuggestion("시간 조건 완화 시", 2)],
        )

        data = result.to_dict()

        assert data["relaxation_suggestions"] == [
            {"condition": "시간 조건 완화 시", "potential_gain": 2}
        ]
        assert datetime.fromisoformat(data["generated_at"]) == result.generated_at
