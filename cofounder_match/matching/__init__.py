"""Co-founder matching and compatibility scoring.

This module filters a candidate pool against a viewer's hard constraints,
scores each remaining pair across stability, synergy, trust and Startup-MBTI
compatibility, and explains the result in short human-readable reasons.

Public API:
    - MatchingService: Recommendations, match detail and explore
    - ScoreCalculator: Pure (viewer, candidate) scoring
    - RuleBasedExplainer: Reasons and cautions for a scored pair
    - MatchingConfig: Weights, penalties and filter tolerances
    - MatchingError: Base class for user-facing matching errors
"""

from cofounder_match.matching.calculator import (
    ScoreCalculator,
    calculate_match_score,
    get_top_contributors,
    get_top_penalty,
)
from cofounder_match.matching.config import (
    MatchingConfig,
    get_matching_config,
    reset_matching_config,
)
from cofounder_match.matching.explanation import (
    Explainer,
    RuleBasedExplainer,
    generate_card_summary,
    generate_detailed_explanation,
    generate_explanation,
)
from cofounder_match.matching.hard_filter import (
    apply_hard_filter,
    filter_candidates,
    generate_relaxation_suggestions,
)
from cofounder_match.matching.mbti import calculate_startup_mbti_compatibility
from cofounder_match.matching.models import (
    ExploreFilters,
    ExploreResult,
    MatchDetail,
    MatchRecommendation,
    MatchScore,
    RecommendationResult,
    ScoreBreakdown,
    ScoreResult,
    StartupMBTI,
    TraitResult,
    TrustScore,
    UserProfile,
)
from cofounder_match.matching.service import (
    BlockedProfileError,
    CandidateNotFoundError,
    MatchingError,
    MatchingService,
    ProfileNotFoundError,
)

__all__ = [
    "MatchingService",
    "MatchingError",
    "ProfileNotFoundError",
    "CandidateNotFoundError",
    "BlockedProfileError",
    "ScoreCalculator",
    "calculate_match_score",
    "get_top_contributors",
    "get_top_penalty",
    "calculate_startup_mbti_compatibility",
    "apply_hard_filter",
    "filter_candidates",
    "generate_relaxation_suggestions",
    "Explainer",
    "RuleBasedExplainer",
    "generate_explanation",
    "generate_card_summary",
    "generate_detailed_explanation",
    "MatchingConfig",
    "get_matching_config",
    "reset_matching_config",
    "UserProfile",
    "TraitResult",
    "TrustScore",
    "StartupMBTI",
    "ScoreBreakdown",
    "ScoreResult",
    "MatchScore",
    "MatchRecommendation",
    "RecommendationResult",
    "MatchDetail",
    "ExploreFilters",
    "ExploreResult",
]
