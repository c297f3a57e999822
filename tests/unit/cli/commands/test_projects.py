"""Unit tests for list-projects command."""

from unittest.mock import patch

from tickbooks.api import OperationResult
from tickbooks.cli import cli
from tickbooks.models.entry import ProjectWithEntries
from tickbooks.services.errors import RemoteError


class TestListProjectsCommand:
    """Test suite for list-projects command."""

    def test_projects_table(self, runner, cli_env):
        projects = [
            ProjectWithEntries(
                project_name="Website",
                project_id="55",
                client_name="Acme Inc",
                entry_count=2,
                total_hours=5.0,
            )
        ]
        with patch(
            "tickbooks.cli.commands.projects.list_open_projects",
            return_value=OperationResult.success(projects),
        ):
            result = runner.invoke(cli, ["list-projects"])

        assert result.exit_code == 0
        assert "Acme Inc" in result.output
        assert "Website" in result.output
        assert "5.00 h" in result.output
        assert "Found 1 project(s)" in result.output

    def test_no_projects(self, runner, cli_env):
        with patch(
            "tickbooks.cli.commands.projects.list_open_projects",
            return_value=OperationResult.success([]),
        ):
            result = runner.invoke(cli, ["list-projects"])

        assert result.exit_code == 0
        assert "No projects with unbilled hours" in result.output

    def test_expired_credentials(self, runner, cli_env):
        error = RemoteError(401, "Unable to connect to the Tick API.", "tick")
        with patch(
            "tickbooks.cli.commands.projects.list_open_projects",
            return_value=OperationResult.failure(error),
        ):
            result = runner.invoke(cli, ["list-projects"])

        assert result.exit_code == 5
        assert "Authentication Failed" in result.output
        assert "TICK_EMAIL" in result.output

    def test_corrupt_join_record_file(self, runner, cli_env, tmp_path):
        (tmp_path / "join_records.json").write_text("{broken", encoding="utf-8")

        with patch("tickbooks.cli.commands.projects.list_open_projects") as mock_list:
            result = runner.invoke(cli, ["list-projects"])

        assert result.exit_code == 10
        assert "Join Record Error" in result.output
        mock_list.assert_not_called()
