"""
Command Executor Tests
----------------------
Execution records and editor command mapping.
"""

import pytest

from commands.executor import CommandExecutor, ExecutionStatus
from commands.intents import EDITOR_COMMANDS
from commands.registry import CommandEntry


@pytest.fixture
def executor(workspace):
    return CommandExecutor(workspace)


class TestExecuteCommand:
    """File checks and result messages."""

    def test_existing_file(self, executor):
        entry = CommandEntry(function="analyzeCodebase", file="core/Analyzer.ts")
        result = executor.execute_command(entry)

        assert result.success
        assert result.status is ExecutionStatus.SUCCESS
        assert result.message == "Command found: analyzeCodebase (core/Analyzer.ts)"
        assert result.note == "Direct execution is only available for standalone modules"

    def test_missing_file(self, executor):
        entry = CommandEntry(function="ghost", file="core/Ghost.ts")
        result = executor.execute_command(entry)

        assert not result.success
        assert result.status is ExecutionStatus.FILE_NOT_FOUND
        assert result.error == "File not found: core/Ghost.ts"
        assert result.message == "Cannot execute: file core/Ghost.ts does not exist"

    def test_entry_without_file(self, executor):
        result = executor.execute_command(CommandEntry(function="floating"))
        assert result.status is ExecutionStatus.EXECUTION_ERROR
        assert result.file is None

    def test_directory_is_not_a_file(self, executor):
        result = executor.execute_command(CommandEntry(function="x", file="core"))
        assert result.status is ExecutionStatus.FILE_NOT_FOUND

    def test_custom_source_dir(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.ts").write_text("", encoding="utf-8")
        executor = CommandExecutor(tmp_path, source_dir="src")
        assert executor.execute_command(CommandEntry(function="a", file="a.ts")).success

    def test_to_dict(self, executor):
        result = executor.execute_command(CommandEntry(function="ghost", file="g.ts"))
        data = result.to_dict()
        assert data["success"] is False
        assert data["status"] == "FILE_NOT_FOUND"
        assert data["function"] == "ghost"
        assert data["timestamp"].endswith("+00:00")

    def test_format_result(self, executor):
        result = executor.execute_command(CommandEntry(function="ghost", file="g.ts"))
        assert executor.format_result(result) == result.message


class TestEditorCommands:
    """Intent -> editor command."""

    @pytest.mark.parametrize("intent, command", [
        ("analyze", "reasoning.captureNow"),
        ("status", "reasoning.showOutput"),
        ("context", "reasoning.showOutput"),
        ("reflect", "reasoning.showOutput"),
        ("synthesize", "reasoning.showOutput"),
        ("go", "reasoning.showOutput"),
        ("help", "reasoning.showOutput"),
    ])
    def test_known_intents(self, executor, intent, command):
        assert executor.map_intent_to_editor_command(intent) == command

    def test_case_insensitive(self, executor):
        assert executor.map_intent_to_editor_command(" Analyze ") == "reasoning.captureNow"

    @pytest.mark.parametrize("intent", ["commit", "patterns", "unknown"])
    def test_unmapped_intents(self, executor, intent):
        assert executor.map_intent_to_editor_command(intent) is None

    def test_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            EDITOR_COMMANDS["commit"] = "git.commit"
