"""Connection ledger for community members."""

from community_match.ledger.service import ConnectionLedger

__all__ = ["ConnectionLedger"]
