"""
Tests for the command-line interface, run against the mock calendar fixture.
"""

import json

from typer.testing import CliRunner

from slotbooking import __version__
from slotbooking.cli.app import app

runner = CliRunner()


def _json(result) -> dict:
    lines = [line for line in result.stdout.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestCheckCommand:
    """Tests for `slotbooking check`."""

    def test_bookable_slot(self):
        """A free opening-hour slot on an empty day."""
        result = runner.invoke(app, ["check", "2026-11-04T10:00:00.000+09:00", "180", "--mock", "--json"])

        assert result.exit_code == 0
        data = _json(result)
        assert data["bookable"] is True
        assert data["normalized"]["end_at"] == "2026-11-04T13:00:00.000+09:00"

    def test_slot_one_buffer_after_event(self):
        """14:00 keeps the hour of spacing after the 10:00-13:00 fixture event."""
        result = runner.invoke(app, ["check", "2026-11-02T14:00:00.000+09:00", "180", "--mock", "--json"])

        assert result.exit_code == 0
        assert _json(result)["bookable"] is True

    def test_occupied_slot_exits_with_rejection_code(self):
        """Availability rejections exit with 3."""
        result = runner.invoke(app, ["check", "2026-11-02T13:00:00.000+09:00", "180", "--mock", "--json"])

        assert result.exit_code == 3
        assert _json(result)["reasons"] == ["slot already occupied or insufficient buffer"]

    def test_rule_rejection(self):
        """11:00 on an empty day is refused by the rules."""
        result = runner.invoke(app, ["check", "2026-11-04T11:00:00.000+09:00", "60", "--mock", "--json"])

        assert result.exit_code == 3
        assert "10:00, 14:00" in _json(result)["reasons"][0]

    def test_malformed_start_exits_with_invalid_input_code(self):
        """Malformed input exits with 2."""
        result = runner.invoke(app, ["check", "2026-11-04 10:00", "60", "--mock"])

        assert result.exit_code == 2

    def test_odd_duration_exits_with_invalid_input_code(self):
        """Durations must be whole hours."""
        result = runner.invoke(app, ["check", "2026-11-04T10:00:00.000+09:00", "90", "--mock"])

        assert result.exit_code == 2


class TestNearestCommand:
    """Tests for `slotbooking nearest`."""

    def test_nearest_slots(self):
        """Fixture events and the buffer shape the result."""
        result = runner.invoke(app, [
            "nearest",
            "--duration", "180",
            "--from", "2026-11-02T09:10:00.000+09:00",
            "--limit", "3",
            "--mock",
            "--json",
        ])

        assert result.exit_code == 0
        data = _json(result)
        assert data["from"] == "2026-11-02T10:00:00.000+09:00"
        assert [slot["start_at"] for slot in data["slots"]] == [
            "2026-11-02T14:00:00.000+09:00",
            "2026-11-02T15:00:00.000+09:00",
            "2026-11-04T10:00:00.000+09:00",
        ]

    def test_table_output(self):
        """Human output lists the slots."""
        result = runner.invoke(app, [
            "nearest", "-d", "180", "--from", "2026-11-02T09:10:00.000+09:00", "-n", "1", "--mock",
        ])

        assert result.exit_code == 0
        assert "Monday, 2026-11-02" in result.stdout


class TestBookCommand:
    """Tests for `slotbooking book`."""

    def test_book_creates_event(self):
        """A provisional event is created in the mock calendar."""
        result = runner.invoke(app, [
            "book", "2026-11-04T10:00:00.000+09:00", "180",
            "--car", "toyota-prius",
            "--name", "Tanahara",
            "--phone", "090-1234-5678",
            "--model", "Prius",
            "--mock",
            "--json",
        ])

        assert result.exit_code == 0
        assert _json(result) == {
            "car_id": "toyota-prius",
            "start_at": "2026-11-04T10:00:00.000+09:00",
            "duration_minutes": 180,
            "calendar_event_id": "mock_event_1",
        }

    def test_book_occupied_slot(self):
        """Rejected holds exit with 3."""
        result = runner.invoke(app, [
            "book", "2026-11-02T13:00:00.000+09:00", "180",
            "--car", "toyota-prius", "--name", "Tanahara", "--phone", "090-1234-5678",
            "--mock",
        ])

        assert result.exit_code == 3

    def test_book_invalid_phone(self):
        """Invalid customer data exits with 2."""
        result = runner.invoke(app, [
            "book", "2026-11-04T10:00:00.000+09:00", "180",
            "--car", "toyota-prius", "--name", "Tanahara", "--phone", "12345",
            "--mock",
        ])

        assert result.exit_code == 2


class TestOtherCommands:
    """Tests for connection check, version and configuration errors."""

    def test_check_connection_mock(self):
        """Mock connection reports the fixture calendar."""
        result = runner.invoke(app, ["check-connection", "--mock"])

        assert result.exit_code == 0
        assert "Mock Shop Calendar" in result.stdout

    def test_version(self):
        """Version is printed."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_missing_config_file(self, tmp_path):
        """A missing config exits with 1 outside mock mode."""
        result = runner.invoke(app, ["check-connection", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1

    def test_config_without_credentials(self, tmp_path):
        """Without a service account the calendar cannot be reached."""
        config = tmp_path / "config.yaml"
        config.write_text("google:\n  calendar_id: shop\n", encoding="utf-8")

        result = runner.invoke(app, [
            "check", "2026-11-04T10:00:00.000+09:00", "60", "--config", str(config),
        ])

        assert result.exit_code == 1

    def test_invalid_config_values(self, tmp_path):
        """A config that fails validation exits with 1, not the invalid-input code."""
        config = tmp_path / "config.yaml"
        config.write_text("business_hours:\n  open_hour: 25\n", encoding="utf-8")

        result = runner.invoke(app, [
            "check", "2026-11-04T10:00:00.000+09:00", "60", "--mock", "--config", str(config),
        ])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout

    def test_malformed_config_yaml(self, tmp_path):
        """YAML syntax errors in the config also exit with 1."""
        config = tmp_path / "config.yaml"
        config.write_text("google: [unclosed\n", encoding="utf-8")

        result = runner.invoke(app, ["nearest", "-d", "60", "--mock", "--config", str(config)])

        assert result.exit_code == 1
