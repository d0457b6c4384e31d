"""Tool dispatch for the developer tools."""

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from developer.config import Config
from developer.constants import SERVER_INSTRUCTIONS, SERVER_NAME, SERVER_VERSION
from developer.errors import (
    InvalidArguments,
    InvalidCommand,
    PromptNotFound,
    ResourceNotFound,
    ToolError,
    UnknownTool,
)
from developer.host import HostPlatform
from developer.results import ToolResult
from developer.tools.shell import Shell
from developer.tools.text_editor import TextEditor
from developer.tools.workflow import Workflow, WorkflowStep
from developer.utils.ignore import SandboxFilter
from developer.utils.logging import CallLogger
from developer.utils.paths import PathResolver

logger = logging.getLogger(__name__)

TEXT_EDITOR_COMMANDS = ("view", "write", "str_replace", "undo_edit")

TEXT_EDITOR_DESCRIPTION = """Text Editor Tool: File Content Manipulation

Provides commands to perform text editing operations on files, such as viewing, creating, overwriting, and modifying content, along with an undo capability for recent changes.

Commands:
- view: View the content of a file
- write: Create or overwrite a file with the given content
- str_replace: Replace a specific string in a file with a new string
- undo_edit: Undo the last edit made by write or str_replace to a file

Parameters:
- command (required): One of view, write, str_replace, undo_edit
- path (required): Absolute path to the file to operate on
- file_text (for write): The entire new content for the file
- old_str (for str_replace): The exact string to be replaced (must be unique)
- new_str (for str_replace): The string that will replace old_str

Important Notes:
- Files are limited to 400KB in size and 400,000 characters
- write command completely replaces file content
- str_replace requires exact and unique match of old_str
- Undo history is maintained for recent changes per file"""

SHELL_DESCRIPTION = "Execute shell commands on the system"

WORKFLOW_DESCRIPTION = """Workflow Tool: Guiding Complex Problem-Solving

Manages multi-step problem-solving processes with support for sequential progression, branching paths, and step revisions. This tool helps structure reasoning, explore alternatives, and adapt approaches as understanding evolves.

When to Use:
- Deconstruct complex problems into manageable steps
- Plan and design iteratively with potential revisions
- Explore multiple solution paths via branching
- Perform in-depth analysis with course correction
- Handle problems with unclear scope

Key Features:
- Sequential Progression: Steps are tracked in order
- Dynamic total_steps: Can be adjusted as workflow progresses
- Branching: Create and switch between alternative solution paths
- Step Revision: Mark steps that update or correct prior steps
- Context Preservation: Workflow state maintained across calls"""


class TextEditorParams(BaseModel):
    """Arguments of the text_editor tool."""

    command: str = Field(
        description="Allowed options are: `view`, `write`, `str_replace`, `undo_edit`."
    )
    path: str = Field(
        description=(
            "Absolute path to the file to operate on, e.g. `/repo/file.py`. For the `write` "
            "command, parent directories will be created if they do not exist."
        )
    )
    file_text: Optional[str] = Field(
        None, description="Content to write to the file (required for write command)"
    )
    old_str: Optional[str] = Field(
        None, description="String to replace (required for str_replace command)"
    )
    new_str: Optional[str] = Field(
        None, description="New string to replace with (required for str_replace command)"
    )


class ShellParams(BaseModel):
    """Arguments of the shell tool."""

    command: str = Field(description="Command to execute")


class DeveloperWorkflowPrompt(BaseModel):
    """Arguments of the developer_workflow prompt."""

    task: str = Field(description="The development task to perform")


class Developer:
    """Routes tool calls to the text editor, shell and workflow tools."""

    def __init__(
        self,
        config: Optional[Config] = None,
        root: Optional[Path] = None,
        sandbox: Optional[SandboxFilter] = None,
        platform: Optional[HostPlatform] = None,
    ):
        """Initialize the tools.

        Args:
            config: Configuration (loaded from the environment when omitted)
            root: Directory whose ignore file builds the sandbox (default: cwd)
            sandbox: Prebuilt sandbox filter, overrides ``root``
            platform: Platform capabilities (detected when omitted)
        """
        self.config = config or Config.load()
        self.root = Path(root) if root else Path(os.getcwd())
        self.platform = platform or HostPlatform.detect()

        self.sandbox = sandbox or SandboxFilter.load(self.root, self.config.ignore_file)
        self.paths = PathResolver(self.platform)

        self.text_editor = TextEditor(
            max_history=self.config.max_history,
            sandbox=self.sandbox,
            platform=self.platform,
        )
        self.shell = Shell(
            sandbox=self.sandbox,
            platform=self.platform,
            executable=self.config.shell_executable,
            timeout=self.config.shell_timeout,
            annotate_exit_status=self.config.shell_annotate_exit,
        )
        self.workflow = Workflow(
            allow_branches=self.config.workflow_allow_branches,
            max_steps=self.config.workflow_max_steps,
            log_steps=self.config.workflow_log_steps,
        )

        self.call_logger: Optional[CallLogger] = None
        if self.config.log_dir:
            self.call_logger = CallLogger(self.config.log_dir)

        self._tools: dict[str, tuple[str, type[BaseModel], Callable[..., ToolResult]]] = {
            "text_editor": (TEXT_EDITOR_DESCRIPTION, TextEditorParams, self._text_editor),
            "shell": (SHELL_DESCRIPTION, ShellParams, self._shell),
            "workflow": (WORKFLOW_DESCRIPTION, WorkflowStep, self._workflow),
        }

    def call_tool(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ToolResult:
        """Run one tool call.

        Args:
            name: Tool name
            arguments: Tool arguments
            cancel_event: Set by the caller to abandon a running shell command

        Returns:
            ToolResult (workflow validation problems come back with ``is_error``)

        Raises:
            ToolError: The call failed
        """
        arguments = arguments or {}
        start_time = time.monotonic()
        ok = False
        error = None

        try:
            if name not in self._tools:
                raise UnknownTool(
                    f"Unknown tool '{name}'. Available tools are: {', '.join(self._tools)}"
                )

            _, params_model, handler = self._tools[name]
            params = self._parse(name, params_model, arguments)
            result = handler(params, cancel_event)
            ok = not result.is_error
            return result

        except ToolError as e:
            error = e.kind
            logger.info("Tool %s failed: %s", name, e.message)
            raise

        finally:
            if self.call_logger is not None:
                duration_ms = int((time.monotonic() - start_time) * 1000)
                self.call_logger.log_call(name, arguments, ok, duration_ms, error)

    def handle(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ToolResult:
        """Like ``call_tool`` but returns failures as error results."""
        try:
            return self.call_tool(name, arguments, cancel_event)
        except ToolError as e:
            return ToolResult.error(e.message)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe every tool with its JSON schema."""
        return [
            {
                "name": name,
                "description": description,
                "inputSchema": params_model.model_json_schema(),
            }
            for name, (description, params_model, _) in self._tools.items()
        ]

    def tools_schema_json(self) -> str:
        """Tool descriptions as pretty JSON."""
        return json.dumps(self.list_tools(), indent=2)

    def server_info(self) -> dict[str, Any]:
        """Name, version and usage instructions of this server."""
        return {
            "name": SERVER_NAME,
            "version": SERVER_VERSION,
            "instructions": SERVER_INSTRUCTIONS,
        }

    def list_resources(self) -> list[dict[str, str]]:
        """Resources that can be read with ``read_resource``."""
        return [
            {"uri": "file://workspace", "name": "workspace"},
            {"uri": "shell://history", "name": "shell-history"},
        ]

    def read_resource(self, uri: str) -> str:
        """Read a resource by URI."""
        if uri == "file://workspace":
            return f"Developer workspace at {self.root} with text editing, shell, and workflow tools"
        if uri == "shell://history":
            return "\n".join(self.shell.get_history())
        raise ResourceNotFound(f"Resource not found: {uri}", {"uri": uri})

    def list_prompts(self) -> list[dict[str, Any]]:
        """Prompts that can be rendered with ``get_prompt``."""
        return [
            {
                "name": "developer_workflow",
                "description": "A prompt for common developer workflows",
                "arguments": [
                    {
                        "name": "task",
                        "description": "The development task to perform",
                        "required": True,
                    }
                ],
            }
        ]

    def get_prompt(self, name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        """Render a prompt."""
        if name != "developer_workflow":
            raise PromptNotFound(f"Prompt not found: {name}")

        try:
            prompt = DeveloperWorkflowPrompt.model_validate(arguments or {})
        except ValidationError as e:
            raise PromptNotFound("No task provided to developer_workflow") from e

        return (
            f"You are a developer assistant. Help with this task: '{prompt.task}'. "
            "You have access to text editing, shell commands, and workflow tools."
        )

    def _parse(self, name: str, params_model: type[BaseModel], arguments: dict) -> BaseModel:
        try:
            return params_model.model_validate(arguments)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidArguments(f"Invalid arguments for {name}: {problems}") from e

    def _text_editor(
        self, params: TextEditorParams, cancel_event: Optional[threading.Event]
    ) -> ToolResult:
        if params.command not in TEXT_EDITOR_COMMANDS:
            raise InvalidCommand(
                f"Unknown command '{params.command}'. "
                "Allowed commands are: view, write, str_replace, undo_edit"
            )

        path = self.paths.resolve(params.path)

        if params.command == "view":
            return self.text_editor.view(path)

        if params.command == "write":
            if params.file_text is None:
                raise InvalidArguments("file_text is required for write command")
            return self.text_editor.write(path, params.file_text)

        if params.command == "str_replace":
            if params.old_str is None:
                raise InvalidArguments("old_str is required for str_replace command")
            if params.new_str is None:
                raise InvalidArguments("new_str is required for str_replace command")
            return self.text_editor.str_replace(path, params.old_str, params.new_str)

        return self.text_editor.undo_edit(path)

    def _shell(self, params: ShellParams, cancel_event: Optional[threading.Event]) -> ToolResult:
        return self.shell.run(params.command, cancel_event)

    def _workflow(
        self, params: WorkflowStep, cancel_event: Optional[threading.Event]
    ) -> ToolResult:
        return self.workflow.execute_step(params)


def format_result(result: ToolResult, audience: str = "user") -> str:
    """Text of the blocks addressed to ``audience``."""
    return "\n".join(c.text for c in result.for_audience(audience))
