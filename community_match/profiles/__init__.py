"""Member profiles, user records and the stores that hold them.

Public API:
    - MemberProfile, UserRecord and their component models
    - ProfileStore: collaborator protocol consumed by the engine
    - InMemoryProfileStore / SQLiteProfileStore: store implementations
    - ProfileLoader: load pool snapshots from YAML/JSON
    - MemberDirectory: profile upserts, toggles and community statistics
"""

from community_match.profiles.directory import CommunityStats, MemberDirectory
from community_match.profiles.loader import PoolSnapshot, ProfileLoader
from community_match.profiles.models import (
    AgeRange,
    Availability,
    Connection,
    ConnectionStatus,
    ConnectionType,
    Interest,
    Location,
    MatchingPreferences,
    MemberProfile,
    Skill,
    TimeSlot,
    UserRecord,
    VerificationStatus,
)
from community_match.profiles.repository import SQLiteProfileStore
from community_match.profiles.store import (
    InMemoryProfileStore,
    ProfileCriteria,
    ProfileStore,
)

__all__ = [
    "AgeRange",
    "Availability",
    "CommunityStats",
    "Connection",
    "ConnectionStatus",
    "ConnectionType",
    "InMemoryProfileStore",
    "Interest",
    "Location",
    "MatchingPreferences",
    "MemberDirectory",
    "MemberProfile",
    "PoolSnapshot",
    "ProfileCriteria",
    "ProfileLoader",
    "ProfileStore",
    "SQLiteProfileStore",
    "Skill",
    "TimeSlot",
    "UserRecord",
    "VerificationStatus",
]
