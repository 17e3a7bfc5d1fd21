"""CLI tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from chatflow import __version__
from chatflow.cli.main import app

runner = CliRunner()


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self) -> None:
        """version prints the package version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_seed_created(self) -> None:
        """Seeding reports a newly installed workflow."""
        with patch("chatflow.cli.main._seed", new=AsyncMock(return_value=True)):
            result = runner.invoke(app, ["create-initial-chat-workflows"])

        assert result.exit_code == 0
        assert "Created" in result.output

    def test_seed_existing(self) -> None:
        """Seeding twice is reported as a no-op."""
        with patch("chatflow.cli.main._seed", new=AsyncMock(return_value=False)):
            result = runner.invoke(app, ["create-initial-chat-workflows"])

        assert result.exit_code == 0
        assert "already exist" in result.output

    def test_list_workflows(self) -> None:
        """Workflows are listed in a table."""
        rows = [("1234", "01_welcome", "published")]
        with patch("chatflow.cli.main._list", new=AsyncMock(return_value=rows)):
            result = runner.invoke(app, ["list-workflows"])

        assert result.exit_code == 0
        assert "01_welcome" in result.output
