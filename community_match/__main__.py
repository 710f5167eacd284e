"""Main entry point for community-match."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from community_match import __version__
from community_match.config.settings import Settings
from community_match.errors import MatchingError
from community_match.ledger.service import ConnectionLedger
from community_match.matching.config import MatchingConfig
from community_match.matching.models import MatchingFilters, MatchResult
from community_match.matching.service import MatchingService
from community_match.profiles.directory import MemberDirectory
from community_match.profiles.loader import ProfileLoader
from community_match.profiles.models import ConnectionType
from community_match.profiles.repository import SQLiteProfileStore
from community_match.profiles.store import ProfileStore
from community_match.utils.logging import configure_logging


def _min_score(value: str) -> float:
    score = float(value)
    if not (0.0 <= score <= 100.0):
        raise argparse.ArgumentTypeError("--min-score must be between 0 and 100")
    return score


def _default(value: object):
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return model_dump(mode="json")
    return str(value)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=_default))


def _add_store_arguments(parser: argparse.ArgumentParser, *, allow_pool: bool) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override profile DB path (defaults to settings)",
    )
    if allow_pool:
        parser.add_argument(
            "--pool",
            type=Path,
            default=None,
            help="Read members from a YAML/JSON pool snapshot instead of the DB",
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="community-match",
        description="Community-match: rank compatible community members",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m community_match load pool.yaml
  python -m community_match match user-1 --limit 5
  python -m community_match match user-1 --pool pool.yaml --mode assisted --json
  python -m community_match connect user-1 user-2 --type requested
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    # Find matches
    match_parser = subparsers.add_parser("match", help="Rank matches for a member")
    match_parser.add_argument("seeker_id", help="User id of the member seeking matches")
    _add_store_arguments(match_parser, allow_pool=True)
    match_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of matches (defaults to matching config)",
    )
    match_parser.add_argument(
        "--mode",
        choices=["deterministic", "assisted"],
        default=None,
        help="Scoring mode (overrides MATCHING_SCORING_MODE)",
    )
    match_parser.add_argument(
        "--skill-category",
        action="append",
        default=[],
        help="Only candidates with a skill in this category (repeatable)",
    )
    match_parser.add_argument(
        "--interest-category",
        action="append",
        default=[],
        help="Only candidates with an interest in this category (repeatable)",
    )
    match_parser.add_argument(
        "--skill-level",
        action="append",
        default=[],
        help="Only candidates with a skill at this level (repeatable)",
    )
    match_parser.add_argument(
        "--meeting-type",
        action="append",
        default=[],
        help="Only candidates offering this meeting type (repeatable)",
    )
    match_parser.add_argument(
        "--communication-style",
        action="append",
        default=[],
        help="Only candidates with this communication style (repeatable)",
    )
    match_parser.add_argument(
        "--gender",
        action="append",
        default=[],
        help="Gender preference: male/female/other/any (repeatable)",
    )
    match_parser.add_argument("--min-age", type=int, default=None)
    match_parser.add_argument("--max-age", type=int, default=None)
    match_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="User id to leave out of the pool (repeatable)",
    )
    match_parser.add_argument(
        "--max-distance",
        type=float,
        default=None,
        help="Distance cutoff in km (applies when both locations are known)",
    )
    match_parser.add_argument(
        "--min-score",
        type=_min_score,
        default=None,
        help="Drop matches scoring below this value (0-100)",
    )
    match_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )

    # Ledger
    connect_parser = subparsers.add_parser(
        "connect", help="Record a connection on a member's ledger"
    )
    connect_parser.add_argument("seeker_id")
    connect_parser.add_argument("target_id")
    connect_parser.add_argument(
        "--type",
        dest="connection_type",
        choices=[t.value for t in ConnectionType],
        default=ConnectionType.REQUESTED.value,
        help="Connection type (default: requested)",
    )
    _add_store_arguments(connect_parser, allow_pool=False)

    block_parser = subparsers.add_parser(
        "block", help="Block a peer from a member's future pools"
    )
    block_parser.add_argument("seeker_id")
    block_parser.add_argument("target_id")
    _add_store_arguments(block_parser, allow_pool=False)

    history_parser = subparsers.add_parser(
        "history", help="Show a member's connection history"
    )
    history_parser.add_argument("user_id")
    _add_store_arguments(history_parser, allow_pool=True)

    # Directory
    stats_parser = subparsers.add_parser("stats", help="Show community statistics")
    _add_store_arguments(stats_parser, allow_pool=True)

    load_parser = subparsers.add_parser(
        "load", help="Load a YAML/JSON pool snapshot into the profile DB"
    )
    load_parser.add_argument("pool_file", type=Path)
    _add_store_arguments(load_parser, allow_pool=False)

    return parser


def _filters_from_args(parsed: argparse.Namespace) -> MatchingFilters:
    return MatchingFilters.model_validate(
        {
            "skill_categories": parsed.skill_category,
            "interest_categories": parsed.interest_category,
            "skill_levels": parsed.skill_level,
            "availability_types": parsed.meeting_type,
            "communication_styles": parsed.communication_style,
            "gender_preference": parsed.gender,
            "min_age": parsed.min_age,
            "max_age": parsed.max_age,
            "exclude_user_ids": parsed.exclude,
            "max_distance": parsed.max_distance,
            "min_matching_score": parsed.min_score,
        }
    )


def _format_match(rank: int, match: MatchResult) -> str:
    name = match.user.display_name if match.user and match.user.display_name else ""
    distance = (
        f"{match.distance_km:.1f} km" if match.distance_km is not None else "distance unknown"
    )
    lines = [
        f"{rank:>2}. {match.score:>3} {match.candidate_id} {name}".rstrip(),
        f"    {distance}, {match.compatibility.score_source.value}",
        f"    {match.compatibility.reasoning}",
    ]
    lines.extend(f"    - {rec}" for rec in match.compatibility.recommendations)
    return "\n".join(lines)


async def _open_store(
    settings: Settings, parsed: argparse.Namespace
) -> tuple[ProfileStore, SQLiteProfileStore | None]:
    # Read-only commands fall back to the settings snapshot unless --db is given.
    if hasattr(parsed, "pool"):
        pool_path = parsed.pool or (None if parsed.db else settings.pool_path)
        if pool_path is not None:
            return ProfileLoader().load_pool(pool_path).to_store(), None

    repo = SQLiteProfileStore(parsed.db or settings.database_path)
    await repo.initialize()
    return repo, repo


async def _run_command(settings: Settings, parsed: argparse.Namespace) -> int:
    store, repo = await _open_store(settings, parsed)
    try:
        if parsed.command == "match":
            overrides = {"scoring_mode": parsed.mode} if parsed.mode else {}
            service = MatchingService(store, config=MatchingConfig(**overrides))
            matches = await service.find_matches(
                parsed.seeker_id, _filters_from_args(parsed), parsed.limit
            )
            if parsed.json:
                _print_json([match.to_dict() for match in matches])
            elif not matches:
                print("No matches found")
            else:
                for rank, match in enumerate(matches, start=1):
                    print(_format_match(rank, match))
            return 0

        if parsed.command == "connect":
            connection = await ConnectionLedger(store).record_connection(
                parsed.seeker_id, parsed.target_id, parsed.connection_type
            )
            _print_json(connection.to_dict())
            return 0

        if parsed.command == "block":
            await ConnectionLedger(store).block(parsed.seeker_id, parsed.target_id)
            print("ok")
            return 0

        if parsed.command == "history":
            connections = await ConnectionLedger(store).history(parsed.user_id)
            for conn in connections:
                print(
                    f"{conn.last_interaction.isoformat()} {conn.status.value} "
                    f"{conn.type.value} {conn.peer_user_id} x{conn.interaction_count}"
                )
            return 0

        if parsed.command == "stats":
            directory = MemberDirectory(
                store, active_window_days=settings.active_window_days
            )
            stats = await directory.community_stats()
            _print_json(stats.to_dict())
            return 0

        if parsed.command == "load":
            loader = ProfileLoader()
            snapshot = loader.load_pool(parsed.pool_file)
            for warning in loader.validate_pool(snapshot):
                print(f"Warning: {warning}", file=sys.stderr)
            for user in snapshot.users:
                await store.save_user(user)
            for member in snapshot.members:
                await store.save_profile(member)
            print(f"Loaded {len(snapshot.members)} members, {len(snapshot.users)} users")
            return 0

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1
    finally:
        if repo is not None:
            await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # If no command specified, show help
    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug("Running command: %s", parsed.command)

    try:
        return asyncio.run(_run_command(settings, parsed))
    except MatchingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
