"""Profile pool loading and validation utilities."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cofounder_match.matching.models import UserProfile
from cofounder_match.profiles.repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass
class ProfilePool:
    """Users and block pairs read from a pool file."""

    users: list[UserProfile] = field(default_factory=list)
    blocks: list[tuple[str, str]] = field(default_factory=list)


class ProfileLoader:
    """Loads profile pools from YAML or JSON files.

    A pool file is a mapping with a ``users`` list of profile mappings and an
    optional ``blocks`` list of ``[blocker_id, blocked_id]`` pairs.
    """

    def load_profile(self, path: Path | str) -> UserProfile:
        """Load and validate a single profile mapping."""
        return UserProfile.model_validate(self._load_mapping(Path(path)))

    def load_pool(self, path: Path | str) -> ProfilePool:
        """Load and validate a pool of profiles.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not a valid pool document.
            pydantic.ValidationError: If a profile fails validation.
        """
        pool_path = Path(path)
        data = self._load_mapping(pool_path)

        raw_users = data.get("users") or []
        if not isinstance(raw_users, list):
            raise ValueError(f"'users' must be a list: {pool_path}")

        raw_blocks = data.get("blocks") or []
        if not isinstance(raw_blocks, list):
            raise ValueError(f"'blocks' must be a list: {pool_path}")

        blocks: list[tuple[str, str]] = []
        for pair in raw_blocks:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValueError(f"Block entries must be [blocker, blocked]: {pair!r}")
            blocks.append((str(pair[0]), str(pair[1])))

        users = [UserProfile.model_validate(item) for item in raw_users]
        logger.info(
            "Loaded %d profiles and %d blocks from %s",
            len(users),
            len(blocks),
            pool_path,
        )
        return ProfilePool(users=users, blocks=blocks)

    async def import_pool(
        self, path: Path | str, repository: ProfileRepository
    ) -> ProfilePool:
        """Load a pool file and write every user and block to ``repository``."""
        pool = self.load_pool(path)
        for user in pool.users:
            await repository.upsert_user(user)
        for blocker_id, blocked_id in pool.blocks:
            await repository.add_block(blocker_id, blocked_id)
        return pool

    def _load_mapping(self, path: Path) -> dict:
        if not path.exists():
            raise FileNotFoundError(f"Profile file not found: {path}")

        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            data = self._load_yaml(path)
        elif suffix == ".json":
            data = self._load_json(path)
        else:
            data = self._load_unknown(path)

        if not isinstance(data, dict):
            raise ValueError(f"Profile file must be a mapping/dict: {path}")
        return data

    def _load_yaml(self, path: Path) -> object:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML profile file: {path}") from e
        return {} if data is None else data

    def _load_json(self, path: Path) -> object:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON profile file: {path}") from e

    def _load_unknown(self, path: Path) -> object:
        """Auto-detect the format when the file extension is unknown."""
        raw = path.read_text(encoding="utf-8")

        if raw.lstrip().startswith(("{", "[")):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                pass

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid profile file format: {path}") from e
        return {} if data is None else data
