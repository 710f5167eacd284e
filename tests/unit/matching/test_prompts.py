"""Tests for reasoning-service prompt builders."""

from datetime import date


class TestMemberSummary:
    def test_summary_contains_matching_fields_only(self, make_member, make_user):
        from community_match.matching.prompts import build_member_summary
        from community_match.profiles.models import Location

        user = make_user(
            "alice",
            date_of_birth=date(1980, 1, 1),
            occupation="Grazier",
            years_in_area=12,
            location=Location(latitude=-27.0, longitude=150.0, city="Dalby", state="QLD"),
        )

        summary = build_member_summary(make_member("alice"), user, today=date(2024, 6, 1))

        assert summary["age"] == 44
        assert summary["location"] == {"city": "Dalby", "state": "QLD", "region": None}
        assert summary["skills"][0]["can_teach"] is True
        assert summary["availability"]["meeting_types"] == ["in-person"]
        assert "preferences" not in summary
        assert "display_name" not in summary
        assert "latitude" not in summary["location"]

    def test_seeker_summary_includes_preferences(self, make_member):
        from community_match.matching.prompts import build_member_summary

        summary = build_member_summary(make_member("alice"), None, include_preferences=True)

        assert summary["preferences"]["max_distance_km"] == 50
        assert summary["age"] is None


class TestMatchPrompt:
    def test_prompt_embeds_both_members_and_schema(self):
        from community_match.matching.prompts import build_match_prompt

        prompt = build_match_prompt({"who": "seeker"}, {"who": "candidate"})

        assert '{"who": "seeker"}' in prompt
        assert '{"who": "candidate"}' in prompt
        assert "compatibilityFactors" in prompt
