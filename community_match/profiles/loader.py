"""Pool snapshot loading and validation utilities."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from community_match.profiles.models import MemberProfile, UserRecord
from community_match.profiles.store import InMemoryProfileStore


@dataclass
class PoolSnapshot:
    """Members and user records loaded from a snapshot file."""

    members: list[MemberProfile] = field(default_factory=list)
    users: list[UserRecord] = field(default_factory=list)

    def to_store(self) -> InMemoryProfileStore:
        return InMemoryProfileStore(profiles=self.members, users=self.users)


class ProfileLoader:
    """Load a pool snapshot (``members`` and ``users`` lists) from YAML or JSON."""

    def load_pool(self, path: Path | str) -> PoolSnapshot:
        """Load and validate a pool snapshot file."""
        pool_path = Path(path)
        if not pool_path.exists():
            raise FileNotFoundError(f"Pool snapshot not found: {pool_path}")

        suffix = pool_path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            data = self._load_yaml(pool_path)
        elif suffix == ".json":
            data = self._load_json(pool_path)
        else:
            raise ValueError(f"Unsupported pool snapshot format: {pool_path}")

        members = [MemberProfile.model_validate(item) for item in data.get("members") or []]
        users = [UserRecord.model_validate(item) for item in data.get("users") or []]

        seen: set[str] = set()
        for member in members:
            if member.user_id in seen:
                raise ValueError(
                    f"Duplicate member profile for user {member.user_id}: {pool_path}"
                )
            seen.add(member.user_id)

        return PoolSnapshot(members=members, users=users)

    def validate_pool(self, snapshot: PoolSnapshot) -> list[str]:
        """Return warnings for members that will match poorly."""
        warnings: list[str] = []
        user_ids = {user.user_id for user in snapshot.users}

        for member in snapshot.members:
            if member.user_id not in user_ids:
                warnings.append(f"{member.user_id}: no user record (location unknown)")
            if not member.skills:
                warnings.append(f"{member.user_id}: skills list is empty")
            if not member.interests:
                warnings.append(f"{member.user_id}: interests list is empty")

        return warnings

    def _load_yaml(self, path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML pool snapshot: {path}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Pool snapshot must be a mapping/dict: {path}")
        return data

    def _load_json(self, path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON pool snapshot: {path}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Pool snapshot must be a mapping/dict: {path}")
        return data
