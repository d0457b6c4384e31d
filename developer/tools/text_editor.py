"""File viewing, writing, exact string replacement and undo."""

import logging
from pathlib import Path
from typing import Optional

from developer.constants import (
    DEFAULT_MAX_UNDO_HISTORY,
    MAX_CHAR_COUNT,
    MAX_VIEW_FILE_BYTES,
    MAX_WRITE_CHAR_COUNT,
    SNIPPET_LINES,
)
from developer.errors import (
    AmbiguousMatch,
    FileAccessError,
    InvalidTarget,
    NoHistory,
    NoMatch,
    NotFound,
    PermissionDenied,
    TooLarge,
)
from developer.host import HostPlatform
from developer.results import ASSISTANT, USER, Content, ToolResult
from developer.utils.history import UndoHistoryStore
from developer.utils.ignore import SandboxFilter
from developer.utils.lang import get_language_identifier

logger = logging.getLogger(__name__)


class TextEditor:
    """Handles file edits with undo history and sandbox checks."""

    def __init__(
        self,
        max_history: int = DEFAULT_MAX_UNDO_HISTORY,
        sandbox: Optional[SandboxFilter] = None,
        platform: Optional[HostPlatform] = None,
    ):
        """Initialize the editor.

        Args:
            max_history: Undo snapshots kept per file (0 means unbounded)
            sandbox: Optional ignore rules restricting file access
            platform: Platform capabilities (detected when omitted)
        """
        self.history = UndoHistoryStore(max_history)
        self.sandbox = sandbox
        self.platform = platform or HostPlatform.detect()

    def view(self, path: Path) -> ToolResult:
        """Read a whole file.

        Args:
            path: Absolute path to the file

        Returns:
            ToolResult with the fenced file content
        """
        path = Path(path)
        self._check_sandbox(path)

        if not path.is_file():
            raise NotFound(f"The path '{path}' does not exist or is not a file.")

        try:
            size = path.stat().st_size
        except OSError as e:
            raise FileAccessError(f"Failed to get file metadata for '{path}': {e}") from e

        if size > MAX_VIEW_FILE_BYTES:
            raise TooLarge(
                f"File '{path}' is too large ({size / 1024:.2f}KB). "
                "Maximum size is 400KB to prevent memory issues."
            )

        content = self._read(path)

        char_count = len(content)
        if char_count > MAX_CHAR_COUNT:
            raise TooLarge(
                f"File '{path}' has too many characters ({char_count}). "
                f"Maximum character count is {MAX_CHAR_COUNT}."
            )

        language = get_language_identifier(path)
        formatted = f"### {path}\n```{language}\n{content}\n```"

        return ToolResult.success(
            Content(formatted, audience=[ASSISTANT]),
            Content(formatted, audience=[USER], priority=0.0),
        )

    def write(self, path: Path, file_text: str) -> ToolResult:
        """Create or overwrite a file.

        Args:
            path: Absolute path to the file
            file_text: Complete new content

        Returns:
            ToolResult confirming the write
        """
        path = Path(path)
        self._check_sandbox(path)

        if path.is_dir():
            raise InvalidTarget(
                f"The path '{path}' is an existing directory. "
                "The 'write' command can only target files."
            )

        if len(file_text) > MAX_WRITE_CHAR_COUNT:
            raise TooLarge(
                f"Input content for '{path}' has too many characters ({len(file_text)}). "
                f"Maximum allowed is {MAX_WRITE_CHAR_COUNT}."
            )

        with self.history.locked():
            self._save_history(path)

            normalized = self.platform.normalize_line_endings(file_text)

            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileAccessError(f"Failed to create directories for '{path}': {e}") from e

            self._write(path, normalized)

        logger.debug("Wrote %d characters to %s", len(normalized), path)

        language = get_language_identifier(path)
        formatted = f"### {path}\n```{language}\n{file_text}\n```"

        return ToolResult.success(
            Content(f"Successfully wrote to {path}", audience=[ASSISTANT]),
            Content(formatted, audience=[USER], priority=0.2),
        )

    def str_replace(self, path: Path, old_str: str, new_str: str) -> ToolResult:
        """Replace the single occurrence of ``old_str`` with ``new_str``.

        Args:
            path: Absolute path to the file
            old_str: Exact text to replace (must occur exactly once)
            new_str: Replacement text

        Returns:
            ToolResult with a snippet of the edited region
        """
        path = Path(path)
        self._check_sandbox(path)

        if not path.exists():
            raise NotFound(
                f"File '{path}' does not exist, you can write a new file with the `write` command"
            )

        with self.history.locked():
            content = self._read(path)

            occurrences = content.count(old_str)
            if occurrences > 1:
                raise AmbiguousMatch(
                    "'old_str' must appear exactly once in the file, "
                    f"but it appears multiple times ({occurrences}) in '{path}'"
                )
            if occurrences == 0:
                raise NoMatch(
                    "'old_str' must appear exactly once in the file, "
                    f"but it does not appear in '{path}'. Make sure the string exactly "
                    "matches existing file content, including whitespace!"
                )

            self._save_history(path, content)

            new_content = content.replace(old_str, new_str, 1)
            self._write(path, self.platform.normalize_line_endings(new_content))

        language = get_language_identifier(path)

        # Line where the match starts, counted in the original content
        replacement_line = content[: content.index(old_str)].count("\n")
        start_line = max(replacement_line - SNIPPET_LINES, 0)
        end_line = replacement_line + SNIPPET_LINES + new_str.count("\n")

        lines = [line.rstrip("\r") for line in new_content.split("\n")]
        snippet = "\n".join(lines[start_line : end_line + 1])

        output = f"```{language}\n{snippet}\n```"
        message = (
            f"The file {path} has been edited, and the section now reads:\n{output}\n"
            "Review the changes above for errors. Undo and edit the file again if necessary!"
        )

        return ToolResult.success(
            Content(message, audience=[ASSISTANT]),
            Content(output, audience=[USER], priority=0.2),
        )

    def undo_edit(self, path: Path) -> ToolResult:
        """Restore the content a file had before its last edit.

        A file created by ``write`` comes back as an empty file; it is not
        deleted.

        Args:
            path: Absolute path to the file

        Returns:
            ToolResult confirming the undo
        """
        path = Path(path)
        self._check_sandbox(path)

        with self.history.locked():
            previous = self.history.pop(path)
            if previous is None:
                raise NoHistory(f"No edit history available to undo for '{path}'")

            # Written verbatim, the snapshot already has the right line endings
            self._write(path, previous)

        logger.debug("Restored %s, %d snapshots left", path, self.history.depth(path))

        return ToolResult.success(Content("Undid the last edit"))

    def _check_sandbox(self, path: Path) -> None:
        if self.sandbox is not None and self.sandbox.is_denied(path):
            raise PermissionDenied(f"The file '{path}' is restricted by ignore patterns")

    def _save_history(self, path: Path, content: Optional[str] = None) -> None:
        """Snapshot the current content of ``path`` before it is changed."""
        if content is None:
            if path.is_dir():
                return
            content = self._read(path) if path.exists() else ""
        self.history.save(path, content)

    def _read(self, path: Path) -> str:
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise FileAccessError(f"Failed to read file '{path}': not valid UTF-8 text ({e})") from e
        except OSError as e:
            raise FileAccessError(f"Failed to read file '{path}': {e}") from e

    def _write(self, path: Path, content: str) -> None:
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise FileAccessError(f"Failed to write file '{path}': {e}") from e
