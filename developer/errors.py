"""Error types raised by the developer tools.

Every hard failure of a tool call is a ``ToolError``. The message is meant
for the calling agent, so it always names the offending path, command or
limit.
"""

from typing import Optional


class ToolError(Exception):
    """Base class for tool call failures."""

    def __init__(self, message: str, data: Optional[dict] = None):
        """Initialize the error.

        Args:
            message: Human-readable message shown to the caller
            data: Optional structured details
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}

    @property
    def kind(self) -> str:
        """Short error name used in logs."""
        return type(self).__name__


class InvalidPath(ToolError):
    """A path argument was not absolute."""


class PermissionDenied(ToolError):
    """A path or command matched the sandbox ignore rules."""


class NotFound(ToolError):
    """A file that must exist does not."""


class InvalidTarget(ToolError):
    """A directory was given where a file is expected."""


class TooLarge(ToolError):
    """A file or input exceeds the size limits."""


class OutputTooLarge(TooLarge):
    """Shell output exceeds the character limit."""


class AmbiguousMatch(ToolError):
    """``old_str`` occurs more than once."""


class NoMatch(ToolError):
    """``old_str`` does not occur."""


class NoHistory(ToolError):
    """There is nothing to undo."""


class InvalidCommand(ToolError):
    """Unknown text editor command."""


class InvalidArguments(ToolError):
    """Tool arguments are missing or malformed."""


class UnknownTool(ToolError):
    """The requested tool does not exist."""


class FileAccessError(ToolError):
    """A filesystem operation failed."""


class ProcessError(ToolError):
    """A shell process could not be spawned or waited on."""


class CommandCancelled(ToolError):
    """The caller abandoned a running shell command."""


class CommandTimeout(ToolError):
    """A shell command ran past the configured timeout."""


class ResourceNotFound(ToolError):
    """Unknown resource URI."""


class PromptNotFound(ToolError):
    """Unknown prompt name or missing prompt argument."""
