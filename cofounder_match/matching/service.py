"""Matching service: recommendations, match detail and explore.

This module provides the MatchingService class which handles:
- Fetching the viewer and candidate pool from the profile repository
- Hard filtering, scoring and explaining each candidate
- Ranking real users ahead of synthetic seed accounts
- Writing computed scores to the repository cache
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cofounder_match.config.settings import Settings, get_settings
from cofounder_match.matching.calculator import ScoreCalculator
from cofounder_match.matching.config import MatchingConfig, get_matching_config
from cofounder_match.matching.explanation import Explainer, RuleBasedExplainer
from cofounder_match.matching.hard_filter import (
    filter_candidates,
    generate_relaxation_suggestions,
)
from cofounder_match.matching.models import (
    Explanation,
    ExploreFilters,
    ExploreResult,
    MatchDetail,
    MatchRecommendation,
    MatchScore,
    RecommendationResult,
    ScoreResult,
    UserProfile,
)
from cofounder_match.matching.normalizer import (
    build_filter_criteria,
    to_candidate_profile,
    to_explanation_profile,
    to_public_profile,
    to_scoring_profile,
)

if TYPE_CHECKING:
    from cofounder_match.profiles.repository import ProfileRepository

logger = logging.getLogger(__name__)


class MatchingError(Exception):
    """Base class for matching errors with a user-facing message."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProfileNotFoundError(MatchingError):
    """The viewer has no profile yet."""

    status_code = 400


class CandidateNotFoundError(MatchingError):
    """The requested candidate does not exist or has no profile."""

    status_code = 404


class BlockedProfileError(MatchingError):
    """The viewer and candidate have blocked each other."""

    status_code = 403


MSG_ONBOARDING_REQUIRED = "프로필이 없습니다. 온보딩을 먼저 완료해주세요."
MSG_PROFILE_MISSING = "프로필이 없습니다."
MSG_CANDIDATE_MISSING = "후보를 찾을 수 없습니다."
MSG_PROFILE_BLOCKED = "해당 프로필을 볼 수 없습니다."


@dataclass
class _ScoredPair:
    result: ScoreResult
    explanation: Explanation


class MatchingService:
    """Ties filtering, scoring and explanation to the profile repository.

    Scoring is synchronous; the service is async only because the repository
    is.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        config: MatchingConfig | None = None,
        explainer: Explainer | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Profile repository used for reads and the score cache.
            config: Matching configuration (defaults to the singleton).
            explainer: Explanation strategy (defaults to the rule-based one).
            settings: Application settings (defaults to the singleton).
        """
        self.repository = repository
        self.config = config or get_matching_config()
        self.explainer = explainer or RuleBasedExplainer()
        self.settings = settings or get_settings()
        self.calculator = ScoreCalculator(self.config)

    def is_synthetic(self, user: UserProfile) -> bool:
        """Return True for synthetic seed accounts."""
        return user.email.lower().endswith(self.settings.synthetic_email_domain)

    def score_pair(self, viewer: UserProfile, candidate: UserProfile) -> _ScoredPair:
        """Score and explain ``candidate`` from the viewer's point of view."""
        result = self.calculator.score(
            to_scoring_profile(viewer), to_scoring_profile(candidate)
        )
        explanation = self.explainer.explain(
            to_explanation_profile(viewer),
            to_explanation_profile(candidate),
            result.breakdown,
        )
        return _ScoredPair(result=result, explanation=explanation)

    def _recommendation(
        self, candidate: UserProfile, match_score: MatchScore
    ) -> MatchRecommendation:
        return MatchRecommendation(
            user_id=candidate.user_id,
            nickname=candidate.nickname,
            profile=to_public_profile(candidate),
            match_score=match_score,
            is_synthetic=self.is_synthetic(candidate),
        )

    @staticmethod
    def _rank(items: list[MatchRecommendation]) -> list[MatchRecommendation]:
        # real users first, then highest total; ties keep input order
        return sorted(items, key=lambda r: (r.is_synthetic, -r.match_score.total))

    async def get_recommendations(
        self, user_id: str, limit: int | None = None
    ) -> RecommendationResult:
        """Rank eligible candidates for ``user_id``.

        Args:
            user_id: The viewer.
            limit: Maximum recommendations (defaults to settings).

        Returns:
            RecommendationResult with counts and relaxation suggestions.

        Raises:
            ProfileNotFoundError: If the viewer has no profile.
        """
        limit = self.settings.recommendation_limit if limit is None else limit
        if limit < 0:
            raise ValueError(f"limit must be non-negative (got {limit})")

        viewer = await self.repository.get_user(user_id)
        if viewer is None:
            raise ProfileNotFoundError(MSG_ONBOARDING_REQUIRED)

        blocked_ids = await self.repository.get_blocked_user_ids(user_id)
        pool = await self.repository.list_candidates(
            exclude_ids={user_id, *blocked_ids}
        )
        by_id = {user.user_id: user for user in pool}

        criteria = build_filter_criteria(viewer)
        candidates = [to_candidate_profile(user) for user in pool]
        passed = filter_candidates(candidates, criteria, self.config)

        recommendations: list[MatchRecommendation] = []
        for candidate in passed:
            user = by_id[candidate.user_id]
            scored = self.score_pair(viewer, user)
            match_score = MatchScore.from_result(
                user.user_id, scored.result, scored.explanation
            )
            recommendations.append(self._recommendation(user, match_score))

        await self._cache_scores(user_id, [r.match_score for r in recommendations])
        recommendations = self._rank(recommendations)[:limit]

        suggestions = generate_relaxation_suggestions(
            candidates, criteria, self.config
        )[: self.settings.relaxation_suggestion_limit]

        logger.info(
            "Recommendations for %s: %d candidates, %d passed, %d returned",
            user_id,
            len(pool),
            len(passed),
            len(recommendations),
        )

        return RecommendationResult(
            recommendations=recommendations,
            total_candidates=len(pool),
            filtered_count=len(passed),
            relaxation_suggestions=suggestions,
        )

    async def get_match_detail(self, viewer_id: str, candidate_id: str) -> MatchDetail:
        """Score a single pair and return the full breakdown.

        Raises:
            ProfileNotFoundError: If the viewer has no profile.
            CandidateNotFoundError: If the candidate has no profile.
            BlockedProfileError: If either user blocked the other.
        """
        viewer = await self.repository.get_user(viewer_id)
        if viewer is None:
            raise ProfileNotFoundError(MSG_PROFILE_MISSING)

        candidate = await self.repository.get_user(candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(MSG_CANDIDATE_MISSING)

        if await self.repository.is_blocked(viewer_id, candidate_id):
            raise BlockedProfileError(MSG_PROFILE_BLOCKED)

        scored = self.score_pair(viewer, candidate)
        match_score = MatchScore.from_result(
            candidate_id, scored.result, scored.explanation
        )
        await self._cache_scores(viewer_id, [match_score])

        return MatchDetail(
            profile=to_public_profile(candidate),
            match_score=match_score,
            breakdown=scored.result.breakdown,
            mbti_strengths=list(scored.result.mbti_strengths),
            mbti_cautions=list(scored.result.mbti_cautions),
        )

    async def explore(
        self,
        user_id: str,
        filters: ExploreFilters | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> ExploreResult:
        """Browse public profiles with optional filters.

        Every item is scored against the viewer when the viewer has a profile.
        A failure while scoring one item gives that item a zero score.

        Args:
            user_id: The viewer.
            filters: Optional explore constraints.
            page: 1-based page number.
            page_size: Items per page (defaults to settings).
        """
        filters = filters or ExploreFilters()
        page_size = self.settings.explore_page_size if page_size is None else page_size
        if page < 1:
            raise ValueError(f"page must be >= 1 (got {page})")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1 (got {page_size})")

        viewer = await self.repository.get_user(user_id)
        blocked_ids = await self.repository.get_blocked_user_ids(user_id)

        rows = await self.repository.query_explore(
            exclude_ids={user_id, *blocked_ids},
            min_hours=filters.min_hours,
            max_hours=filters.max_hours,
            goals=filters.goals,
            location_prefs=filters.location_prefs,
        )

        wanted_domains = set(filters.domains)
        wanted_roles = set(filters.roles)
        matches = [
            user
            for user in rows
            if (not wanted_domains or wanted_domains & set(user.domains))
            and (
                not wanted_roles
                or wanted_roles & (set(user.role_can) | set(user.role_want))
            )
        ]

        items = [
            self._recommendation(user, self._explore_score(viewer, user))
            for user in matches
        ]
        items = self._rank(items)

        start = (page - 1) * page_size
        return ExploreResult(
            items=items[start : start + page_size],
            total=len(items),
            page=page,
            page_size=page_size,
        )

    def _explore_score(
        self, viewer: UserProfile | None, candidate: UserProfile
    ) -> MatchScore:
        if viewer is None:
            return MatchScore.empty(candidate.user_id)
        try:
            scored = self.score_pair(viewer, candidate)
        except Exception:
            logger.exception(
                "Scoring failed for %s -> %s; using empty score",
                viewer.user_id,
                candidate.user_id,
            )
            return MatchScore.empty(candidate.user_id)
        return MatchScore.from_result(
            candidate.user_id, scored.result, scored.explanation
        )

    async def _cache_scores(self, viewer_id: str, scores: list[MatchScore]) -> None:
        try:
            await self.repository.cache_match_scores(viewer_id, scores)
        except Exception:
            logger.warning(
                "Failed to cache %d match scores for %s",
                len(scores),
                viewer_id,
                exc_info=True,
            )
