"""Shell command execution with sandbox checks."""

import logging
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Optional

from developer.constants import MAX_SHELL_OUTPUT_CHARS, SHELL_POLL_INTERVAL
from developer.errors import (
    CommandCancelled,
    CommandTimeout,
    OutputTooLarge,
    PermissionDenied,
    ProcessError,
)
from developer.host import HostPlatform, ShellConfig
from developer.results import ASSISTANT, USER, Content, ToolResult
from developer.utils.ignore import SandboxFilter

logger = logging.getLogger(__name__)


@dataclass
class ShellOutput:
    """Result of command execution."""

    command: str
    output: str
    exit_code: int
    duration_ms: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def combine_output(stdout: str, stderr: str) -> str:
    """Join the captured streams, stdout first."""
    if not stderr:
        return stdout
    if not stdout:
        return stderr
    return stdout + stderr


class Shell:
    """Runs command lines through the host shell."""

    def __init__(
        self,
        sandbox: Optional[SandboxFilter] = None,
        platform: Optional[HostPlatform] = None,
        executable: Optional[str] = None,
        timeout: Optional[float] = None,
        annotate_exit_status: bool = False,
    ):
        """Initialize the shell tool.

        Args:
            sandbox: Optional ignore rules checked against command arguments
            platform: Platform capabilities (detected when omitted)
            executable: Optional shell program override
            timeout: Optional seconds before the child is killed (None waits forever)
            annotate_exit_status: Append a success/failure line to the output
        """
        self.sandbox = sandbox
        self.platform = platform or HostPlatform.detect()
        self.config: ShellConfig = self.platform.shell_config(executable)
        self.timeout = timeout
        self.annotate_exit_status = annotate_exit_status

        self._history: list[str] = []
        self._history_lock = threading.Lock()

    def execute(
        self,
        command: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ShellOutput:
        """Run a command and wait for it to finish.

        Args:
            command: Command line passed to the shell as one argument
            cancel_event: Set by the caller to abandon the command

        Returns:
            ShellOutput with the combined, normalized output

        Raises:
            PermissionDenied: The command references a restricted path
            ProcessError: The shell could not be started or waited on
            CommandCancelled: ``cancel_event`` was set before completion
            CommandTimeout: The configured timeout elapsed
            OutputTooLarge: The output exceeds the character limit
        """
        self._check_sandbox(command)

        start_time = time.monotonic()

        try:
            process = subprocess.Popen(
                self.config.argv(command),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                **self.platform.popen_kwargs(),
            )
        except OSError as e:
            raise ProcessError(f"Failed to spawn command '{command}': {e}") from e

        with self._history_lock:
            self._history.append(command)

        logger.debug("Started pid %d: %s", process.pid, command)

        try:
            stdout, stderr = self._wait(process, command, cancel_event, start_time)
        except BaseException:
            # Never leave the child running once the caller is gone
            self._kill(process)
            raise

        duration_ms = int((time.monotonic() - start_time) * 1000)

        combined = combine_output(
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )
        normalized = self.platform.normalize_line_endings(combined)

        char_count = len(normalized)
        if char_count > MAX_SHELL_OUTPUT_CHARS:
            raise OutputTooLarge(
                f"Shell output from command '{command}' has too many characters ({char_count}). "
                f"Maximum character count is {MAX_SHELL_OUTPUT_CHARS}."
            )

        logger.debug(
            "Command exited with %d after %dms: %s", process.returncode, duration_ms, command
        )

        return ShellOutput(
            command=command,
            output=normalized,
            exit_code=process.returncode,
            duration_ms=duration_ms,
        )

    def run(self, command: str, cancel_event: Optional[threading.Event] = None) -> ToolResult:
        """Execute a command and format the output as a tool result."""
        result = self.execute(command, cancel_event)

        text = result.output
        if self.annotate_exit_status:
            if result.success:
                status = "Command succeeded"
            else:
                status = f"Command failed with exit code {result.exit_code}"
            if text and not text.endswith("\n"):
                text += "\n"
            text += status

        return ToolResult.success(
            Content(text, audience=[ASSISTANT]),
            Content(text, audience=[USER], priority=0.0),
        )

    def get_history(self) -> list[str]:
        """Commands started by this shell, oldest first."""
        with self._history_lock:
            return list(self._history)

    def _check_sandbox(self, command: str) -> None:
        if self.sandbox is None:
            return
        arg = self.sandbox.denied_command_argument(command)
        if arg is not None:
            raise PermissionDenied(
                f"The command attempts to access '{arg}' which is restricted by ignore patterns"
            )

    def _wait(
        self,
        process: subprocess.Popen,
        command: str,
        cancel_event: Optional[threading.Event],
        start_time: float,
    ) -> tuple[bytes, bytes]:
        if cancel_event is None and self.timeout is None:
            try:
                return process.communicate()
            except OSError as e:
                raise ProcessError(f"Failed to wait for command '{command}': {e}") from e

        while True:
            try:
                return process.communicate(timeout=SHELL_POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                pass
            except OSError as e:
                raise ProcessError(f"Failed to wait for command '{command}': {e}") from e

            if cancel_event is not None and cancel_event.is_set():
                raise CommandCancelled(f"Command '{command}' was cancelled")

            if self.timeout is not None and time.monotonic() - start_time > self.timeout:
                raise CommandTimeout(f"Command '{command}' timed out after {self.timeout}s")

    def _kill(self, process: subprocess.Popen) -> None:
        logger.info("Killing pid %d", process.pid)
        self.platform.kill(process)
        try:
            process.communicate(timeout=5)
        except (subprocess.TimeoutExpired, OSError, ValueError) as e:
            logger.warning("Could not reap pid %d: %s", process.pid, e)
