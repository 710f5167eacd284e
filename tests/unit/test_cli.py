"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest

POOL_YAML = """
members:
  - user_id: alice
    skills:
      - {name: Cattle Farming, level: advanced, category: agricultural, can_teach: true}
    interests:
      - {name: Gardening, category: outdoors}
  - user_id: bob
    skills:
      - {name: Cattle Farming, level: beginner, category: agricultural, wants_to_learn: true}
    interests:
      - {name: Gardening, category: outdoors}
  - user_id: carol
    is_available_for_matching: false
users:
  - {user_id: alice, display_name: Alice, location: {latitude: 0.0, longitude: 0.0}}
  - {user_id: bob, display_name: Bob, location: {latitude: 0.05, longitude: 0.0}}
"""


@pytest.fixture
def pool_file(tmp_path):
    path = tmp_path / "pool.yaml"
    path.write_text(POOL_YAML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("POOL_PATH", raising=False)
    monkeypatch.delenv("MATCHING_SCORING_MODE", raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "community.db"))


def test_cli_without_command_prints_help(capsys) -> None:
    from community_match.__main__ import main

    assert main([]) == 0
    assert "community-match" in capsys.readouterr().out


def test_cli_match_from_pool_file_as_json(pool_file, capsys) -> None:
    from community_match.__main__ import main

    exit_code = main(["match", "alice", "--pool", str(pool_file), "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [entry["candidate"]["user_id"] for entry in payload] == ["bob"]
    assert payload[0]["score_source"] == "deterministic"
    assert payload[0]["distance_km"] > 0


def test_cli_match_text_output(pool_file, capsys) -> None:
    from community_match.__main__ import main

    assert main(["match", "alice", "--pool", str(pool_file)]) == 0

    out = capsys.readouterr().out
    assert "bob Bob" in out
    assert "Teach/learn opportunity around Cattle Farming" in out


def test_cli_match_unknown_seeker_errors_cleanly(pool_file, capsys) -> None:
    from community_match.__main__ import main

    assert main(["match", "ghost", "--pool", str(pool_file)]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_match_invalid_filter_errors_cleanly(pool_file, capsys) -> None:
    from community_match.__main__ import main

    exit_code = main(
        ["match", "alice", "--pool", str(pool_file), "--max-distance", "-5"]
    )

    assert exit_code == 1
    assert "max_distance" in capsys.readouterr().err


def test_cli_load_then_connect_block_and_history(pool_file, capsys) -> None:
    from community_match.__main__ import main

    assert main(["load", str(pool_file)]) == 0
    assert "Loaded 3 members, 2 users" in capsys.readouterr().out

    assert main(["connect", "alice", "bob", "--type", "matched"]) == 0
    connection = json.loads(capsys.readouterr().out)
    assert connection["peer_user_id"] == "bob"
    assert connection["interaction_count"] == 1

    assert main(["block", "alice", "bob"]) == 0
    capsys.readouterr()

    assert main(["history", "alice"]) == 0
    assert "blocked matched bob x1" in capsys.readouterr().out

    assert main(["match", "alice", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_cli_stats_from_pool(pool_file, capsys) -> None:
    from community_match.__main__ import main

    assert main(["stats", "--pool", str(pool_file)]) == 0

    stats = json.loads(capsys.readouterr().out)
    assert stats["total_members"] == 3
    assert stats["skill_categories"] == {"agricultural": 2}


def test_cli_missing_pool_file_errors_cleanly(tmp_path, capsys) -> None:
    from community_match.__main__ import main

    assert main(["match", "alice", "--pool", str(tmp_path / "nope.yaml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_version(capsys) -> None:
    from community_match import __version__
    from community_match.__main__ import main

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out
