"""Tests for the command-line interface."""

from unittest.mock import patch

from click.testing import CliRunner

from userstore.cli import cli
from userstore.core.config import Settings


def test_help():
    runner = CliRunner()

    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "init-db" in result.output
    assert "count" in result.output
    assert "info" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_count_rejects_unknown_option():
    result = CliRunner().invoke(cli, ["count", "--bogus"])

    assert result.exit_code != 0


def test_info_shows_store_configuration():
    settings = Settings(
        _env_file=None,
        user_table_name="members",
        tokenized_columns=["email", "first_name"],
    )

    with patch("userstore.cli.get_settings", return_value=settings), patch(
        "userstore.cli.get_db_manager"
    ) as get_db_manager:
        get_db_manager.return_value.engine.url.render_as_string.return_value = (
            "sqlite+aiosqlite:///:memory:"
        )

        result = CliRunner().invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "members" in result.output
    assert "email, first_name" in result.output
    assert "sqlite+aiosqlite:///:memory:" in result.output
