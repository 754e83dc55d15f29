"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

MBTI_FIELDS = (
    "innovation_learning",
    "sensitivity_nervous",
    "social_activity",
    "cooperation_care",
    "plan_execution",
    "ap_perfectionism",
    "eop_perfectionism",
    "iop_perfectionism",
    "motivation_growth",
    "motivation_achieve",
    "motivation_recognition",
    "reward_compensation",
    "reward_autonomy",
    "reward_stability",
    "partner_selfishness",
    "partner_cooperation",
    "partner_entrepreneurship",
    "stress_index",
)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset settings, matching config and logging between tests."""
    yield
    from cofounder_match.config.settings import reset_settings
    from cofounder_match.matching.config import reset_matching_config
    from cofounder_match.utils.logging import reset_logging

    reset_settings()
    reset_matching_config()
    reset_logging()


@pytest.fixture
def matching_config():
    """Default matching configuration, ignoring any .env file."""
    from cofounder_match.matching.config import MatchingConfig

    return MatchingConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def settings(tmp_path):
    """Application settings pointing at a temporary database."""
    from cofounder_match.config.settings import Settings

    return Settings(_env_file=None, database_path=tmp_path / "matching.db")  # type: ignore[call-arg]


@pytest.fixture
def make_user():
    """Factory for UserProfile records with sensible defaults."""
    from cofounder_match.matching.models import UserProfile

    def _make(user_id: str = "viewer", **overrides) -> UserProfile:
        data = {
            "user_id": user_id,
            "email": f"{user_id}@example.com",
            "nickname": user_id.title(),
            "location_pref": "flexible",
            "availability_hours": 20,
            "start_date": date(2025, 1, 1),
            "goal": "investment",
            "role_can": ["development"],
            "role_want": [],
            "role_need": ["design"],
            "skills": ["python"],
            "domains": ["fintech"],
        }
        data.update(overrides)
        return UserProfile.model_validate(data)

    return _make


@pytest.fixture
def make_mbti():
    """Factory for StartupMBTI records; every factor defaults to 50."""
    from cofounder_match.matching.models import StartupMBTI

    def _make(external_id: str = "PST2512ME63603", **overrides) -> StartupMBTI:
        data = {name: 50 for name in MBTI_FIELDS}
        data.update(
            {"external_id": external_id, "mbti_type": "ISTP", "mbti_title": None}
        )
        data.update(overrides)
        return StartupMBTI.model_validate(data)

    return _make
