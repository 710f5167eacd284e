"""Business logic for the connection ledger.

This module provides the ConnectionLedger class which handles:
- Recording connections on the acting member's own ledger
- Status changes, including blocking a peer
- Reading a member's connection history
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from community_match.errors import MatchNotFoundError
from community_match.profiles.models import (
    Connection,
    ConnectionStatus,
    ConnectionType,
    MemberProfile,
)
from community_match.profiles.store import ProfileStore

logger = logging.getLogger(__name__)


class ConnectionLedger:
    """Maintain each member's connection history.

    Every write touches exactly one profile document: the acting member's.
    The peer's ledger is left alone, so a connection recorded by A is not
    visible from B's history until B records its own.
    """

    def __init__(self, store: ProfileStore):
        """Initialize the ledger.

        Args:
            store: The profile store holding member documents.
        """
        self.store = store

    async def record_connection(
        self,
        seeker_id: str,
        target_id: str,
        connection_type: ConnectionType | str,
    ) -> Connection:
        """Record a connection from ``seeker_id`` to ``target_id``.

        An existing entry for the target is updated in place (type,
        last interaction, interaction count). Otherwise a new active entry
        is appended with an interaction count of 1.

        Args:
            seeker_id: The acting member.
            target_id: The peer being connected to.
            connection_type: matched, requested or mutual.

        Returns:
            The stored Connection entry.

        Raises:
            MatchNotFoundError: If the acting member has no profile.
        """
        connection_type = ConnectionType(connection_type)
        profile = await self._require(seeker_id)
        now = datetime.now(UTC)

        connection = profile.find_connection(target_id)
        if connection is not None:
            connection.type = connection_type
            connection.last_interaction = now
            connection.interaction_count += 1
        else:
            connection = Connection(
                peer_user_id=target_id,
                type=connection_type,
                status=ConnectionStatus.ACTIVE,
                created_at=now,
                last_interaction=now,
                interaction_count=1,
            )
            profile.connection_history.append(connection)

        profile.last_active = now
        await self.store.save_profile(profile)

        logger.info(
            "Recorded %s connection %s -> %s (interactions=%s)",
            connection.type.value,
            seeker_id,
            target_id,
            connection.interaction_count,
        )
        return connection

    async def set_status(
        self,
        seeker_id: str,
        target_id: str,
        status: ConnectionStatus | str,
    ) -> Connection:
        """Set the status of the entry for ``target_id`` on the seeker's ledger.

        Creates a ``requested`` entry carrying the status if none exists yet.

        Raises:
            MatchNotFoundError: If the acting member has no profile.
        """
        status = ConnectionStatus(status)
        profile = await self._require(seeker_id)
        now = datetime.now(UTC)

        connection = profile.find_connection(target_id)
        if connection is None:
            connection = Connection(
                peer_user_id=target_id,
                type=ConnectionType.REQUESTED,
                status=status,
                created_at=now,
                last_interaction=now,
            )
            profile.connection_history.append(connection)
        else:
            connection.status = status
            connection.last_interaction = now

        profile.last_active = now
        await self.store.save_profile(profile)

        logger.info(
            "Connection %s -> %s is now %s", seeker_id, target_id, status.value
        )
        return connection

    async def block(self, seeker_id: str, target_id: str) -> Connection:
        """Block ``target_id`` from the seeker's future candidate pools."""
        return await self.set_status(seeker_id, target_id, ConnectionStatus.BLOCKED)

    async def history(self, user_id: str) -> list[Connection]:
        """Return the member's connection history, oldest first."""
        profile = await self._require(user_id)
        return list(profile.connection_history)

    async def _require(self, user_id: str) -> MemberProfile:
        profile = await self.store.get_profile(user_id)
        if profile is None:
            raise MatchNotFoundError(
                f"Community member profile not found: {user_id}", user_id=user_id
            )
        return profile
