"""Tests for the `db` CLI commands."""

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from constituency_api.cli.db_cmd import db_app

runner = CliRunner()


class TestDbCommands:
    """Tests for upgrade/downgrade/current."""

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        result = runner.invoke(db_app, ["upgrade", "--config", str(tmp_path / "nope.ini")])
        assert result.exit_code == 1
        assert "Alembic config not found" in result.output

    def test_upgrade_runs_alembic(self, tmp_path: Path) -> None:
        ini = tmp_path / "alembic.ini"
        ini.write_text("[alembic]\nscript_location = alembic\n")

        with patch("alembic.command.upgrade") as mock_upgrade:
            result = runner.invoke(db_app, ["upgrade", "001", "--config", str(ini)])

        assert result.exit_code == 0, result.output
        config, revision = mock_upgrade.call_args.args
        assert revision == "001"
        assert config.config_file_name == str(ini)

    def test_downgrade_defaults_to_previous(self, tmp_path: Path) -> None:
        ini = tmp_path / "alembic.ini"
        ini.write_text("[alembic]\nscript_location = alembic\n")

        with patch("alembic.command.downgrade") as mock_downgrade:
            result = runner.invoke(db_app, ["downgrade", "-c", str(ini)])

        assert result.exit_code == 0, result.output
        assert mock_downgrade.call_args.args[1] == "-1"
