"""Tests for CLI commands."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from physiopro.cli.commands import app
from physiopro.flows import ExerciseSearchOutput

runner = CliRunner()


class TestVersionCommand:
    def test_version_command(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "PhysioPro" in result.stdout
        assert "0.1.0" in result.stdout


class TestHealthCommand:
    def test_health_lists_providers(self):
        router = MagicMock()
        router.health_check = AsyncMock(return_value={"primary": True, "fallback": False})

        with patch("physiopro.llm.create_router_from_settings", return_value=router):
            result = runner.invoke(app, ["health"])

        assert result.exit_code == 0
        assert "primary" in result.stdout
        assert "OK" in result.stdout
        assert "UNAVAILABLE" in result.stdout


class TestExportCommand:
    def test_unknown_table(self):
        result = runner.invoke(app, ["export", "patients"])

        assert result.exit_code == 1
        assert "Unknown table" in result.stdout

    def test_help(self):
        result = runner.invoke(app, ["export", "--help"])

        assert result.exit_code == 0
        assert "--output" in result.stdout


class TestSearchExercisesCommand:
    def test_marks_suggestions_missing_from_library(self):
        router = MagicMock()
        flow_result = ExerciseSearchOutput(results=[" Plank ", "Wall Sit"])
        session_factory = MagicMock()

        with patch("physiopro.llm.create_router_from_settings", return_value=router), \
                patch("physiopro.flows.ExerciseSearchFlow.run", AsyncMock(return_value=flow_result)), \
                patch("physiopro.core.database.init_db", AsyncMock()), \
                patch("physiopro.core.database.dispose_engine", AsyncMock()), \
                patch("physiopro.core.database._get_session_factory", return_value=session_factory), \
                patch(
                    "physiopro.core.repository.ExerciseRepository.find_by_names",
                    AsyncMock(return_value=[SimpleNamespace(name="Plank", category="Strength", difficulty="Beginner")]),
                ):
            result = runner.invoke(app, ["search-exercises", "core stability"])

        assert result.exit_code == 0
        assert "Suggestions (2)" in result.stdout
        assert "Plank" in result.stdout
        assert "Wall Sit" in result.stdout
        assert result.stdout.count("yes") == 1

    def test_no_suggestions(self):
        with patch("physiopro.llm.create_router_from_settings", return_value=MagicMock()), \
                patch("physiopro.flows.ExerciseSearchFlow.run", AsyncMock(return_value=ExerciseSearchOutput())), \
                patch("physiopro.core.database.init_db", AsyncMock()), \
                patch("physiopro.core.database.dispose_engine", AsyncMock()), \
                patch("physiopro.core.database._get_session_factory", return_value=MagicMock()), \
                patch("physiopro.core.repository.ExerciseRepository.find_by_names", AsyncMock(return_value=[])):
            result = runner.invoke(app, ["search-exercises", "underwater yoga"])

        assert result.exit_code == 0
        assert "No suggestions returned" in result.stdout


class TestFlowStatsCommand:
    def test_empty_logs(self):
        result = runner.invoke(app, ["flow-stats"])

        assert result.exit_code == 0
        assert "AI Telemetry" in result.stdout

    def test_counts_recorded_runs(self, isolated_observability):
        with isolated_observability.flow_run(flow_name="exercise_search"):
            pass

        result = runner.invoke(app, ["flow-stats"])

        assert result.exit_code == 0
        assert "flows" in result.stdout
        assert "1" in result.stdout
