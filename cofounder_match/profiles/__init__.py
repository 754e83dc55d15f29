"""Profile storage and loading.

Public API:
- ProfileRepository: Async SQLite store for profiles, blocks and cached scores
- ProfileLoader: Load profile pools from YAML or JSON
- ProfilePool: Users and blocks read from a pool file
- StartupMbtiLinkError: Raised for invalid or duplicate Startup-MBTI links
"""

from cofounder_match.profiles.loader import ProfileLoader, ProfilePool
from cofounder_match.profiles.repository import ProfileRepository, StartupMbtiLinkError

__all__ = [
    "ProfileRepository",
    "ProfileLoader",
    "ProfilePool",
    "StartupMbtiLinkError",
]
