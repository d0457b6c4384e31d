"""Platform capabilities: path syntax, line endings and the default shell.

Selected once with ``HostPlatform.detect()`` and passed to the components
that need it.
"""

import ntpath
import os
import re
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional

from developer.constants import (
    DEFAULT_POSIX_SHELL,
    POSIX_SHELL_ARGS,
    WINDOWS_SHELL,
    WINDOWS_SHELL_ARGS,
)

_WINDOWS_VAR = re.compile(r"%([^%]+)%")


@dataclass(frozen=True)
class ShellConfig:
    """How to invoke the host shell."""

    executable: str
    args: tuple[str, ...]

    def argv(self, command: str) -> list[str]:
        """Build the argument vector running ``command`` as one argument."""
        return [self.executable, *self.args, command]


class HostPlatform:
    """Base platform capabilities (POSIX conventions)."""

    name = "posix"
    line_ending = "\n"

    def expand_path(self, raw: str) -> str:
        """Expand a leading ``~`` to the home directory."""
        return os.path.expanduser(raw)

    def is_absolute(self, path: str) -> bool:
        """Check whether a path string is absolute."""
        return path.startswith("/")

    def join(self, base: str, path: str) -> str:
        """Join ``path`` onto ``base``."""
        return os.path.join(base, path)

    def normalize_line_endings(self, text: str) -> str:
        """Convert CRLF to LF."""
        return text.replace("\r\n", "\n")

    def shell_config(self, executable: Optional[str] = None) -> ShellConfig:
        """Get the shell used for command execution.

        Args:
            executable: Optional override of the shell program

        Returns:
            ShellConfig for ``$SHELL -c`` (bash when SHELL is unset)
        """
        shell = executable or os.environ.get("SHELL") or DEFAULT_POSIX_SHELL
        return ShellConfig(shell, tuple(POSIX_SHELL_ARGS))

    def popen_kwargs(self) -> dict:
        """Extra ``subprocess.Popen`` arguments for shell children."""
        # Own process group so the whole pipeline can be killed
        return {"start_new_session": True}

    def kill(self, process: subprocess.Popen) -> None:
        """Kill a shell child and everything it started."""
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            process.kill()

    @classmethod
    def detect(cls) -> "HostPlatform":
        """Select the capabilities of the running interpreter's platform."""
        if sys.platform == "win32":
            return WindowsPlatform()
        return PosixPlatform()


class PosixPlatform(HostPlatform):
    """Linux, macOS and other POSIX hosts."""


class WindowsPlatform(HostPlatform):
    """Windows hosts."""

    name = "windows"
    line_ending = "\r\n"

    def expand_path(self, raw: str) -> str:
        # Unset variables expand to nothing
        return _WINDOWS_VAR.sub(lambda m: os.environ.get(m.group(1), ""), raw)

    def is_absolute(self, path: str) -> bool:
        return ":\\" in path or path.startswith("\\\\")

    def join(self, base: str, path: str) -> str:
        return ntpath.join(base, path)

    def normalize_line_endings(self, text: str) -> str:
        return text.replace("\r\n", "\n").replace("\n", "\r\n")

    def shell_config(self, executable: Optional[str] = None) -> ShellConfig:
        return ShellConfig(executable or WINDOWS_SHELL, tuple(WINDOWS_SHELL_ARGS))

    def popen_kwargs(self) -> dict:
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}

    def kill(self, process: subprocess.Popen) -> None:
        process.kill()
