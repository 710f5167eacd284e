"""Tests for the SQLite profile store."""

import pytest


class TestSQLiteProfileStore:
    @pytest.fixture
    async def store(self, tmp_path):
        """Create an initialized store backed by a temp database."""
        from community_match.profiles.repository import SQLiteProfileStore

        repo = SQLiteProfileStore(tmp_path / "nested" / "community.db")
        await repo.initialize()
        yield repo
        await repo.close()

    @pytest.mark.asyncio
    async def test_initialize_creates_database_file(self, store):
        assert store.db_path.exists()

    @pytest.mark.asyncio
    async def test_save_and_get_profile(self, store, make_member):
        profile = make_member("u1", communication_style="casual")
        await store.save_profile(profile)

        loaded = await store.get_profile("u1")
        assert loaded is not None
        assert loaded.communication_style == "casual"
        assert loaded.skills[0].name == "Cattle Farming"

    @pytest.mark.asyncio
    async def test_save_profile_upserts(self, store, make_member):
        await store.save_profile(make_member("u1"))
        await store.save_profile(make_member("u1", is_available_for_matching=False))

        profiles = await store.list_profiles()
        assert len(profiles) == 1
        assert profiles[0].is_available_for_matching is False

    @pytest.mark.asyncio
    async def test_get_missing_profile_returns_none(self, store):
        assert await store.get_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_list_eligible_profiles(self, store, make_member):
        from community_match.profiles.store import ProfileCriteria

        for member in (
            make_member("u3"),
            make_member("u1"),
            make_member("u2", is_available_for_matching=False),
        ):
            await store.save_profile(member)

        eligible = await store.list_eligible_profiles(ProfileCriteria())
        assert [p.user_id for p in eligible] == ["u1", "u3"]

    @pytest.mark.asyncio
    async def test_users_round_trip(self, store, make_user):
        await store.save_user(make_user("u1", lat=-33.9, lon=151.2, years_in_area=4))
        await store.save_user(make_user("u2"))

        user = await store.get_user("u1")
        assert user.location.longitude == 151.2
        assert user.years_in_area == 4

        users = await store.get_users(["u1", "u2", "u3"])
        assert set(users) == {"u1", "u2"}
        assert await store.get_users([]) == {}

    @pytest.mark.asyncio
    async def test_database_errors_surface_as_store_unavailable(self, tmp_path):
        from community_match.errors import StoreUnavailableError
        from community_match.profiles.repository import SQLiteProfileStore

        bad_path = tmp_path / "not-a-db.db"
        bad_path.write_bytes(b"this is not an sqlite database" * 64)
        repo = SQLiteProfileStore(bad_path)

        with pytest.raises(StoreUnavailableError):
            await repo.get_profile("u1")
        await repo.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("document", ["{not json", '{"user_id": 42, "skills": "x"}'])
    async def test_corrupt_documents_surface_as_store_unavailable(
        self, store, document
    ):
        from community_match.errors import StoreUnavailableError

        async with store._get_connection() as conn:
            await conn.execute(
                "INSERT INTO members (user_id, last_active, document) VALUES (?, ?, ?)",
                ("u1", "2024-01-01T00:00:00+00:00", document),
            )
            await conn.execute(
                "INSERT INTO users (user_id, document) VALUES (?, ?)",
                ("u1", document),
            )
            await conn.commit()

        with pytest.raises(StoreUnavailableError, match="Corrupt MemberProfile"):
            await store.get_profile("u1")
        with pytest.raises(StoreUnavailableError):
            await store.list_profiles()
        with pytest.raises(StoreUnavailableError, match="Corrupt UserRecord"):
            await store.get_users(["u1"])
