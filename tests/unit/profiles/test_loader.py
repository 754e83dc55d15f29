"""Tests for profile pool loading."""

import json

import pytest
import yaml
from pydantic import ValidationError


def _user_data(user_id, **overrides):
    data = {
        "user_id": user_id,
        "email": f"{user_id}@example.com",
        "nickname": user_id.title(),
        "availability_hours": 20,
        "start_date": "2025-01-01",
        "goal": "investment",
        "role_can": ["design"],
        "role_need": ["development"],
    }
    data.update(overrides)
    return data


class TestLoadPool:
    """Test ProfileLoader.load_pool."""

    def test_loads_yaml_pool(self, tmp_path):
        """A YAML pool yields validated users and block pairs."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "users": [_user_data("a"), _user_data("b", skills=["figma"])],
                    "blocks": [["a", "b"]],
                },
                allow_unicode=True,
            ),
            encoding="utf-8",
        )

        pool = ProfileLoader().load_pool(path)

        assert [u.user_id for u in pool.users] == ["a", "b"]
        assert pool.users[1].skills == ["figma"]
        assert pool.blocks == [("a", "b")]

    def test_loads_json_pool(self, tmp_path):
        """JSON pools are supported too."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.json"
        path.write_text(json.dumps({"users": [_user_data("a")]}), encoding="utf-8")

        pool = ProfileLoader().load_pool(path)

        assert [u.user_id for u in pool.users] == ["a"]
        assert pool.blocks == []

    @pytest.mark.parametrize(
        "content",
        [
            json.dumps({"users": [_user_data("a")]}),
            yaml.safe_dump({"users": [_user_data("a")]}),
        ],
    )
    def test_detects_format_for_unknown_extension(self, tmp_path, content):
        """Files without a known suffix are parsed as JSON or YAML."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.txt"
        path.write_text(content, encoding="utf-8")

        pool = ProfileLoader().load_pool(path)

        assert pool.users[0].user_id == "a"

    def test_empty_yaml_is_an_empty_pool(self, tmp_path):
        """An empty file loads as an empty pool."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text("", encoding="utf-8")

        pool = ProfileLoader().load_pool(path)

        assert pool.users == []
        assert pool.blocks == []

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        from cofounder_match.profiles.loader import ProfileLoader

        with pytest.raises(FileNotFoundError):
            ProfileLoader().load_pool(tmp_path / "missing.yaml")

    @pytest.mark.parametrize(
        ("filename", "content"),
        [
            ("pool.yaml", "- just\n- a list\n"),
            ("pool.yaml", "users: [unclosed\n"),
            ("pool.json", "{not json"),
            ("pool.yaml", "users: not-a-list\n"),
            ("pool.yaml", "users: []\nblocks: [[a, b, c]]\n"),
            ("pool.yaml", "blocks: {a: b}\n"),
        ],
    )
    def test_invalid_documents(self, tmp_path, filename, content):
        """Structurally invalid pools raise ValueError."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / filename
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError):
            ProfileLoader().load_pool(path)

    def test_invalid_profile(self, tmp_path):
        """Profiles failing validation raise ValidationError."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.json"
        path.write_text(
            json.dumps({"users": [_user_data("a", goal="fame")]}), encoding="utf-8"
        )

        with pytest.raises(ValidationError):
            ProfileLoader().load_pool(path)


class TestLoadProfile:
    """Test ProfileLoader.load_profile."""

    def test_loads_single_profile(self, tmp_path):
        """A single mapping loads as one UserProfile."""
        from cofounder_match.profiles.loader import ProfileLoader

        path = tmp_path / "alice.yaml"
        path.write_text(
            yaml.safe_dump(_user_data("alice", meeting_freq="weekly")),
            encoding="utf-8",
        )

        profile = ProfileLoader().load_profile(path)

        assert profile.user_id == "alice"
        assert profile.meeting_freq == "weekly"


class TestImportPool:
    """Test ProfileLoader.import_pool."""

    @pytest.mark.asyncio
    async def test_writes_users_and_blocks(self, tmp_path):
        """Imported users and blocks are readable from the repository."""
        from cofounder_match.profiles.loader import ProfileLoader
        from cofounder_match.profiles.repository import ProfileRepository

        path = tmp_path / "pool.json"
        path.write_text(
            json.dumps(
                {"users": [_user_data("a"), _user_data("b")], "blocks": [["a", "b"]]}
            ),
            encoding="utf-8",
        )
        repo = ProfileRepository(tmp_path / "profiles.db")
        await repo.initialize()

        try:
            pool = await ProfileLoader().import_pool(path, repo)

            assert len(pool.users) == 2
            assert (await repo.get_user("b")).nickname == "B"
            assert await repo.is_blocked("b", "a") is True
        finally:
            await repo.close()
