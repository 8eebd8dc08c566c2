"""Tests for the command line interface."""

import logging

import pytest
import yaml
from typer.testing import CliRunner

from skillgate.cli import app

runner = CliRunner()

CATALOG = {
    "challenges": [
        {"id": "py-easy", "title": "Reverse", "language": "Python", "difficulty": "easy"},
        {"id": "py-medium", "title": "Word count", "language": "py", "difficulty": "medium"},
    ]
}


@pytest.fixture
def loaded_db(tmp_path, database_url) -> str:
    catalog_path = tmp_path / "challenges.yaml"
    catalog_path.write_text(yaml.dump(CATALOG))
    result = runner.invoke(app, ["load-challenges", str(catalog_path), "--db", database_url])
    assert result.exit_code == 0, result.output
    return database_url


class TestCli:
    """Tests for CLI commands."""

    def test_version(self):
        """Test --version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "skillgate v" in result.output

    def test_info(self):
        """Test info lists example commands."""
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "skillgate submit" in result.output

    def test_init_db(self, database_url):
        """Test init-db creates the database."""
        result = runner.invoke(app, ["init-db", "--db", database_url])
        assert result.exit_code == 0
        assert "Database ready" in result.output

    def test_validate(self, tmp_path):
        """Test validate accepts a good config and rejects a bad one."""
        good = tmp_path / "good.yaml"
        good.write_text(yaml.dump({"evaluation": {"pass_threshold": 75}}))
        bad = tmp_path / "bad.yaml"
        bad.write_text(yaml.dump({"evaluation": {"pass_threshold": 500}}))

        assert runner.invoke(app, ["validate", str(good)]).exit_code == 0
        assert runner.invoke(app, ["validate", str(bad)]).exit_code == 1
        assert runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")]).exit_code == 1

    def test_next_and_submit(self, tmp_path, loaded_db, good_python):
        """Test recommending and submitting against a loaded catalog."""
        result = runner.invoke(app, ["next", "alice", "python", "--db", loaded_db])
        assert result.exit_code == 0, result.output
        assert "py-medium" in result.output

        code_path = tmp_path / "solution.py"
        code_path.write_text(good_python)
        result = runner.invoke(
            app,
            ["submit", "alice", str(code_path), "--challenge", "py-medium", "--db", loaded_db],
        )
        assert result.exit_code == 0, result.output
        assert "PASSED" in result.output

        result = runner.invoke(app, ["rating", "alice", "--db", loaded_db])
        assert result.exit_code == 0
        assert "python" in result.output

        result = runner.invoke(app, ["stats", "alice", "--db", loaded_db])
        assert result.exit_code == 0
        assert "total attempts" in result.output

    def test_submit_unknown_challenge(self, tmp_path, loaded_db, good_python):
        """Test precondition failures exit with status 1."""
        code_path = tmp_path / "solution.py"
        code_path.write_text(good_python)
        result = runner.invoke(
            app, ["submit", "alice", str(code_path), "--challenge", "nope", "--db", loaded_db]
        )
        assert result.exit_code == 1
        assert "Challenge not found" in result.output

    def test_next_without_candidates(self, loaded_db):
        """Test an empty candidate set exits with status 1."""
        result = runner.invoke(app, ["next", "alice", "rust", "--db", loaded_db])
        assert result.exit_code == 1

    def test_can_attempt_and_challenge_rating(self, loaded_db):
        """Test eligibility and challenge rating output."""
        result = runner.invoke(app, ["can-attempt", "alice", "p1", "--db", loaded_db])
        assert result.exit_code == 0
        assert "Can attempt" in result.output

        result = runner.invoke(app, ["challenge-rating", "py-easy", "--db", loaded_db])
        assert result.exit_code == 0
        assert "Rating: 1000" in result.output


@pytest.fixture
def root_level():
    root = logging.getLogger()
    before = root.level
    yield root
    root.setLevel(before)


class TestLogLevel:
    """Tests for how the CLI picks its log level."""

    def test_config_log_level_applied(self, tmp_path, database_url, root_level):
        """Test a log level from the config file sets the root logger level."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"log_level": "error"}))

        result = runner.invoke(app, ["init-db", "-c", str(config_path), "--db", database_url])

        assert result.exit_code == 0, result.output
        assert root_level.level == logging.ERROR

    def test_verbose_overrides_config(self, tmp_path, database_url, root_level):
        """Test --verbose wins over the config file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"log_level": "error"}))

        result = runner.invoke(
            app, ["--verbose", "init-db", "-c", str(config_path), "--db", database_url]
        )

        assert result.exit_code == 0, result.output
        assert root_level.level == logging.DEBUG

    def test_quiet_by_default(self, database_url, root_level):
        """Test without a configured level the CLI only shows warnings."""
        result = runner.invoke(app, ["init-db", "--db", database_url])

        assert result.exit_code == 0, result.output
        assert root_level.level == logging.WARNING
