"""Tests for tool dispatch."""

import json
import sys

import pytest

from developer.config import Config
from developer.errors import (
    InvalidArguments,
    InvalidCommand,
    InvalidPath,
    PermissionDenied,
    PromptNotFound,
    ResourceNotFound,
    UnknownTool,
)
from developer.server import Developer, format_result

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell syntax")


def test_text_editor_round_trip(developer, test_project):
    """Test write, str_replace, view and undo through the dispatcher."""
    path = str(test_project / "notes.txt")

    developer.call_tool("text_editor", {"command": "write", "path": path, "file_text": "alpha\n"})
    developer.call_tool(
        "text_editor",
        {"command": "str_replace", "path": path, "old_str": "alpha", "new_str": "beta"},
    )

    view = developer.call_tool("text_editor", {"command": "view", "path": path})
    assert "beta" in view.text

    developer.call_tool("text_editor", {"command": "undo_edit", "path": path})
    assert (test_project / "notes.txt").read_text() == "alpha\n"


def test_relative_path_rejected(developer):
    """Test that relative paths fail before any file access."""
    with pytest.raises(InvalidPath) as excinfo:
        developer.call_tool("text_editor", {"command": "view", "path": "src/main.py"})

    assert "is not an absolute path" in excinfo.value.message


def test_unknown_command(developer, test_project):
    """Test the allowed command list in the error."""
    with pytest.raises(InvalidCommand) as excinfo:
        developer.call_tool(
            "text_editor", {"command": "delete", "path": str(test_project / "README.md")}
        )

    assert excinfo.value.message == (
        "Unknown command 'delete'. Allowed commands are: view, write, str_replace, undo_edit"
    )


def test_unknown_command_checked_before_path(developer):
    """Test that the command is validated first."""
    with pytest.raises(InvalidCommand):
        developer.call_tool("text_editor", {"command": "delete", "path": "relative.txt"})


@pytest.mark.parametrize(
    "arguments,missing",
    [
        ({"command": "write"}, "file_text"),
        ({"command": "str_replace", "new_str": "x"}, "old_str"),
        ({"command": "str_replace", "old_str": "x"}, "new_str"),
    ],
)
def test_missing_command_arguments(developer, test_project, arguments, missing):
    """Test that command-specific arguments are required."""
    arguments = {**arguments, "path": str(test_project / "README.md")}

    with pytest.raises(InvalidArguments) as excinfo:
        developer.call_tool("text_editor", arguments)

    assert missing in excinfo.value.message


def test_malformed_arguments(developer):
    """Test schema validation failures."""
    with pytest.raises(InvalidArguments) as excinfo:
        developer.call_tool("workflow", {"step_description": "x", "step_number": "one"})

    assert "Invalid arguments for workflow" in excinfo.value.message


def test_unknown_tool(developer):
    """Test calling a tool that does not exist."""
    with pytest.raises(UnknownTool):
        developer.call_tool("browser", {})


def test_handle_returns_error_result(developer):
    """Test that handle converts failures into error results."""
    result = developer.handle("text_editor", {"command": "view", "path": "relative.txt"})

    assert result.is_error
    assert "is not an absolute path" in result.text


def test_sandbox_applies_to_text_editor(developer, test_project):
    """Test that the project .gitignore restricts the editor."""
    with pytest.raises(PermissionDenied):
        developer.call_tool(
            "text_editor", {"command": "view", "path": str(test_project / "secret.txt")}
        )


@posix_only
def test_shell_tool(developer):
    """Test running a command through the dispatcher."""
    result = developer.call_tool("shell", {"command": "echo hello"})

    assert result.text == "hello\n"
    assert developer.read_resource("shell://history") == "echo hello"


@posix_only
def test_sandbox_applies_to_shell(developer, test_project):
    """Test that the project .gitignore restricts shell arguments."""
    with pytest.raises(PermissionDenied):
        developer.call_tool("shell", {"command": f"cat {test_project / 'secret.txt'}"})


def test_workflow_tool(developer):
    """Test recording a workflow step."""
    result = developer.call_tool(
        "workflow",
        {
            "step_description": "Plan the change",
            "step_number": 1,
            "total_steps": 2,
            "next_step_needed": True,
        },
    )

    assert json.loads(result.text)["step_history_length"] == 1


def test_workflow_validation_is_soft(developer):
    """Test that workflow validation errors are results, not exceptions."""
    result = developer.call_tool(
        "workflow",
        {
            "step_description": "Branch",
            "step_number": 1,
            "total_steps": 2,
            "next_step_needed": True,
            "branch_id": "b",
        },
    )

    assert result.is_error
    assert "branch_from_step" in result.text


def test_config_drives_tools(test_project):
    """Test that configuration reaches the tools."""
    config = Config(
        max_history=3,
        shell_executable="/bin/sh",
        workflow_allow_branches=False,
        workflow_max_steps=4,
        workflow_log_steps=False,
    )

    developer = Developer(config, root=test_project)

    assert developer.text_editor.history.max_history == 3
    assert developer.shell.config.executable == "/bin/sh"
    assert developer.workflow.allow_branches is False
    assert developer.workflow.max_steps == 4


def test_custom_ignore_file(temp_dir, test_config):
    """Test the configured ignore file name."""
    (temp_dir / ".developerignore").write_text("*.key\n")
    test_config.ignore_file = ".developerignore"

    developer = Developer(test_config, root=temp_dir)

    with pytest.raises(PermissionDenied):
        developer.call_tool("text_editor", {"command": "view", "path": str(temp_dir / "a.key")})


def test_list_tools(developer):
    """Test tool discovery."""
    tools = {tool["name"]: tool for tool in developer.list_tools()}

    assert set(tools) == {"text_editor", "shell", "workflow"}
    assert tools["text_editor"]["inputSchema"]["required"] == ["command", "path"]
    assert tools["shell"]["inputSchema"]["required"] == ["command"]
    assert "branch_id" in tools["workflow"]["inputSchema"]["properties"]
    assert json.loads(developer.tools_schema_json()) == developer.list_tools()


def test_server_info(developer):
    """Test server metadata."""
    info = developer.server_info()

    assert info["name"] == "developer"
    assert info["instructions"]


def test_resources(developer, test_project):
    """Test resource listing and reading."""
    uris = [r["uri"] for r in developer.list_resources()]
    assert uris == ["file://workspace", "shell://history"]

    assert str(test_project) in developer.read_resource("file://workspace")
    assert developer.read_resource("shell://history") == ""

    with pytest.raises(ResourceNotFound):
        developer.read_resource("file://elsewhere")


def test_prompts(developer):
    """Test prompt listing and rendering."""
    assert [p["name"] for p in developer.list_prompts()] == ["developer_workflow"]

    prompt = developer.get_prompt("developer_workflow", {"task": "fix the build"})
    assert "'fix the build'" in prompt

    with pytest.raises(PromptNotFound):
        developer.get_prompt("developer_workflow", {})

    with pytest.raises(PromptNotFound):
        developer.get_prompt("other", {"task": "x"})


def test_call_log(test_project, test_config, temp_dir):
    """Test that calls are recorded when a log directory is configured."""
    test_config.log_dir = temp_dir / "logs"
    developer = Developer(test_config, root=test_project)
    path = str(test_project / "big.txt")

    developer.call_tool("text_editor", {"command": "write", "path": path, "file_text": "x" * 50})
    with pytest.raises(InvalidPath):
        developer.call_tool("text_editor", {"command": "view", "path": "relative"})

    calls = developer.call_logger.read_calls()
    assert [c["ok"] for c in calls] == [True, False]
    assert calls[0]["arguments"]["file_text_length"] == 50
    assert "file_text" not in calls[0]["arguments"]
    assert calls[1]["error"] == "InvalidPath"


def test_format_result(developer, test_project):
    """Test audience filtering."""
    path = str(test_project / "README.md")
    result = developer.call_tool("text_editor", {"command": "view", "path": path})

    assert format_result(result, "assistant") == result.content[0].text
    assert format_result(result, "user") == result.content[1].text
