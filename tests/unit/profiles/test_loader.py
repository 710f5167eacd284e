"""Tests for pool snapshot loading."""

import json

import pytest

POOL_YAML = """
members:
  - user_id: alice
    skills:
      - name: Cattle Farming
        level: advanced
        category: agricultural
        can_teach: true
    interests:
      - name: Gardening
        category: outdoors
    availability:
      preferred_meeting_types: [in-person, phone-call]
      response_time: within-hour
  - user_id: bob
users:
  - user_id: alice
    display_name: Alice
    location:
      latitude: -27.47
      longitude: 153.03
"""


class TestProfileLoader:
    def test_load_yaml_pool(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text(POOL_YAML, encoding="utf-8")

        snapshot = ProfileLoader().load_pool(path)

        assert [m.user_id for m in snapshot.members] == ["alice", "bob"]
        assert snapshot.members[0].availability.response_time == "within-hour"
        assert snapshot.users[0].location.latitude == -27.47

    def test_load_json_pool(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.json"
        path.write_text(
            json.dumps({"members": [{"user_id": "carol"}], "users": []}),
            encoding="utf-8",
        )

        snapshot = ProfileLoader().load_pool(path)
        assert snapshot.members[0].user_id == "carol"
        assert snapshot.users == []

    @pytest.mark.asyncio
    async def test_snapshot_to_store(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text(POOL_YAML, encoding="utf-8")

        store = ProfileLoader().load_pool(path).to_store()
        assert (await store.get_profile("alice")).skills[0].can_teach is True
        assert (await store.get_user("alice")).display_name == "Alice"

    def test_missing_file_raises(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        with pytest.raises(FileNotFoundError):
            ProfileLoader().load_pool(tmp_path / "missing.yaml")

    def test_unsupported_suffix_raises(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.txt"
        path.write_text("members: []", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported"):
            ProfileLoader().load_pool(path)

    def test_invalid_yaml_raises_value_error(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text("members: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            ProfileLoader().load_pool(path)

    def test_duplicate_members_rejected(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.json"
        path.write_text(
            json.dumps({"members": [{"user_id": "a"}, {"user_id": "a"}]}),
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="Duplicate"):
            ProfileLoader().load_pool(path)

    def test_validate_pool_reports_sparse_members(self, tmp_path):
        from community_match.profiles.loader import ProfileLoader

        path = tmp_path / "pool.yaml"
        path.write_text(POOL_YAML, encoding="utf-8")
        loader = ProfileLoader()

        warnings = loader.validate_pool(loader.load_pool(path))

        assert "bob: no user record (location unknown)" in warnings
        assert "bob: skills list is empty" in warnings
        assert not any(w.startswith("alice") for w in warnings)
