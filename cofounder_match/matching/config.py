"""Configuration settings for the matching engine."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Weight = Annotated[float, Field(ge=0.0, le=1.0)]

_WEIGHT_GROUPS: dict[str, tuple[str, ...]] = {
    "stability": (
        "weight_goal_alignment",
        "weight_commit_alignment",
        "weight_comm_rules",
        "weight_decision_style",
        "weight_conflict_style",
    ),
    "synergy": (
        "weight_role_complementarity",
        "weight_skill_complementarity",
        "weight_domain_complementarity",
    ),
    "trust": (
        "weight_trust_completeness",
        "weight_trust_evidence",
        "weight_trust_activity",
        "weight_trust_reputation",
    ),
    "base scheme": (
        "weight_stability",
        "weight_synergy",
        "weight_trust",
    ),
    "mbti scheme": (
        "mbti_scheme_stability",
        "mbti_scheme_synergy",
        "mbti_scheme_trust",
        "mbti_scheme_mbti",
    ),
    "mbti categories": (
        "mbti_weight_founder_trait",
        "mbti_weight_perfectionism",
        "mbti_weight_motivation",
        "mbti_weight_reward",
        "mbti_weight_partnership",
    ),
}


class MatchingConfig(BaseSettings):
    """Weights, penalties and filter tolerances for match scoring.

    The instance is frozen and passed into the calculator and filter, so a
    scoring call is a pure function of (config, viewer, candidate). Values can
    be overridden via environment variables with the `MATCHING_` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Stability sub-weights
    weight_goal_alignment: Weight = 0.25
    weight_commit_alignment: Weight = 0.25
    weight_comm_rules: Weight = 0.20
    weight_decision_style: Weight = 0.15
    weight_conflict_style: Weight = 0.15

    # Synergy sub-weights
    weight_role_complementarity: Weight = 0.50
    weight_skill_complementarity: Weight = 0.30
    weight_domain_complementarity: Weight = 0.20

    # Trust sub-weights (candidate side only)
    weight_trust_completeness: Weight = 0.40
    weight_trust_evidence: Weight = 0.30
    weight_trust_activity: Weight = 0.20
    weight_trust_reputation: Weight = 0.10

    # Total: scheme used when either side lacks Startup-MBTI
    weight_stability: Weight = Field(default=0.60, description="Stability weight")
    weight_synergy: Weight = Field(default=0.30, description="Synergy weight")
    weight_trust: Weight = Field(default=0.10, description="Trust weight")

    # Total: scheme used when both sides have Startup-MBTI
    mbti_scheme_stability: Weight = 0.50
    mbti_scheme_synergy: Weight = 0.20
    mbti_scheme_trust: Weight = 0.10
    mbti_scheme_mbti: Weight = 0.20

    # Startup-MBTI category weights
    mbti_weight_founder_trait: Weight = 0.25
    mbti_weight_perfectionism: Weight = 0.15
    mbti_weight_motivation: Weight = 0.20
    mbti_weight_reward: Weight = 0.15
    mbti_weight_partnership: Weight = 0.25

    # Penalties
    commit_gap_threshold_hours: Annotated[int, Field(ge=0)] = Field(
        default=30,
        description="Hour gap at which the commit gap penalty applies",
    )
    commit_gap_penalty: Annotated[int, Field(ge=0)] = 15
    goal_conflict_penalty: Annotated[int, Field(ge=0)] = 20
    serious_goals: tuple[str, ...] = ("investment", "revenue")
    casual_goals: tuple[str, ...] = ("side_project", "hackathon")
    style_clash_leader_penalty: Annotated[int, Field(ge=0)] = 5
    style_clash_execution_penalty: Annotated[int, Field(ge=0)] = 3
    style_clash_conflict_penalty: Annotated[int, Field(ge=0)] = 2
    style_clash_cap: Annotated[int, Field(ge=0)] = 10

    # Hard filter
    time_tolerance: Annotated[float, Field(ge=0.0)] = Field(
        default=0.5,
        description="Relative hours/week tolerance for time compatibility",
    )
    time_absolute_gap_hours: Annotated[int, Field(ge=0)] = Field(
        default=10,
        description="Absolute hours/week gap always tolerated",
    )
    relaxed_time_tolerance: Annotated[float, Field(ge=0.0)] = Field(
        default=1.0,
        description="Tolerance used when suggesting a relaxed time condition",
    )
    start_date_grace_months: Annotated[int, Field(ge=0)] = Field(
        default=1,
        description="Calendar months a candidate may start after the viewer",
    )

    @model_validator(mode="after")
    def validate_weight_groups_sum_to_one(self) -> MatchingConfig:
        """Ensure every weight group sums to 1.0 (within tolerance)."""
        for group, names in _WEIGHT_GROUPS.items():
            weight_sum = sum(getattr(self, name) for name in names)
            if abs(weight_sum - 1.0) > 1e-6:
                parts = ", ".join(f"{name}={getattr(self, name)}" for name in names)
                raise ValueError(
                    f"{group} weights must sum to 1.0. "
                    f"Got {weight_sum:.6f} ({parts})."
                )
        return self


# Singleton instance for easy import
_matching_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the matching configuration singleton."""
    global _matching_config
    if _matching_config is None:
        _matching_config = MatchingConfig()
    return _matching_config


def reset_matching_config() -> None:
    """Reset the matching configuration singleton (useful for testing)."""
    global _matching_config
    _matching_config = None
