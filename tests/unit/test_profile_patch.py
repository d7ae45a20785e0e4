"""
Unit tests for profile patch construction and presentation.
"""

from datetime import date
import pytest

from league_api.errors import ValidationFailed
from league_api.models import ProfileUpdate
from league_api.services.profile import (
    ProfilePatch,
    normalize_playing_since,
    present_profile,
    summarize_memberships
)


@pytest.mark.unit
class TestPlayingSince:

    def test_bare_year(self):
        assert normalize_playing_since("2023") == date(2023, 1, 1)

    def test_year_as_number(self):
        assert normalize_playing_since(2019) == date(2019, 1, 1)

    def test_full_date(self):
        assert normalize_playing_since("2020-06-15") == date(2020, 6, 15)

    def test_datetime_text_truncated(self):
        assert normalize_playing_since("2020-06-15T00:00:00Z") == date(2020, 6, 15)

    def test_invalid(self):
        with pytest.raises(ValidationFailed) as exc_info:
            normalize_playing_since("hace mucho")
        assert exc_info.value.status_code == 400


@pytest.mark.unit
class TestProfilePatch:

    def test_only_provided_fields(self):
        patch = ProfilePatch.from_update(ProfileUpdate(user_id=1, phone="5550001111"))
        assert patch.to_columns() == {"phone": "5550001111", "profile_completed": True}

    def test_empty_body_still_marks_completed(self):
        assert ProfilePatch.from_update(ProfileUpdate(user_id=1)).to_columns() == {"profile_completed": True}

    def test_public_names_map_to_columns(self):
        columns = ProfilePatch.from_update(ProfileUpdate(
            emergency_contact="Maria Lopez",
            emergency_phone="5559998888"
        )).to_columns()

        assert columns["emergency_contact_name"] == "Maria Lopez"
        assert columns["emergency_contact_phone"] == "5559998888"
        assert "emergency_contact" not in columns

    def test_empty_text_fields_are_ignored(self):
        columns = ProfilePatch.from_update(ProfileUpdate(phone="", address="", blood_type="")).to_columns()
        assert columns == {"profile_completed": True}

    def test_medical_conditions_applies_when_empty(self):
        columns = ProfilePatch.from_update(ProfileUpdate(medical_conditions="")).to_columns()
        assert columns["medical_conditions"] == ""

    def test_seasons_played_zero_applies(self):
        columns = ProfilePatch.from_update(ProfileUpdate(seasons_played=0)).to_columns()
        assert columns["seasons_played"] == 0

    def test_dates_are_parsed(self):
        columns = ProfilePatch.from_update(ProfileUpdate(
            birth_date="1995-03-20",
            playing_since="2023"
        )).to_columns()

        assert columns["birth_date"] == date(1995, 3, 20)
        assert columns["playing_since"] == date(2023, 1, 1)

    def test_invalid_birth_date(self):
        with pytest.raises(ValidationFailed):
            ProfilePatch.from_update(ProfileUpdate(birth_date="20/03/1995"))


@pytest.mark.unit
class TestPresentation:

    def test_present_profile(self):
        data = present_profile({
            "id": 1,
            "emergency_contact_name": "Maria",
            "emergency_contact_phone": None,
            "playing_since": date(2023, 1, 1),
        })

        assert data["emergency_contact"] == "Maria"
        assert data["emergency_phone"] == ""
        assert data["playing_since"] == "2023"
        assert data["emergency_contact_name"] == "Maria"

    def test_present_profile_without_playing_since(self):
        assert present_profile({"id": 1, "playing_since": None})["playing_since"] == ""

    def test_primary_is_first_row_with_team(self):
        team = {"id": 5, "name": "Halcones"}
        rows = [
            {"id": 1, "team_id": None, "team": None},
            {"id": 2, "team_id": 5, "team": team, "position": "QB", "jersey_number": 1},
        ]

        primary, teams = summarize_memberships(rows)

        assert primary["id"] == 2
        assert teams == [{
            "player_row_id": 2,
            "team_id": 5,
            "team": team,
            "position": "QB",
            "jersey_number": 1,
        }]

    def test_primary_falls_back_to_first_row(self):
        primary, teams = summarize_memberships([{"id": 1, "team_id": None, "team": None}])
        assert primary["id"] == 1
        assert teams == []

    def test_no_rows(self):
        assert summarize_memberships([]) == (None, [])
