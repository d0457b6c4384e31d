"""Sandbox ignore rules handling using pathspec."""

import logging
import os
from pathlib import Path, PurePath
from typing import Iterable, Optional

import pathspec

from developer.constants import DEFAULT_IGNORE_FILE

logger = logging.getLogger(__name__)


class SandboxFilter:
    """Denies access to paths matched by gitignore-style rules.

    The compiled rules never change after construction, so one instance is
    shared by every tool.
    """

    def __init__(self, root: Path, patterns: Iterable[str] = ()):
        """Initialize the filter.

        Args:
            root: Directory the patterns are relative to
            patterns: Gitignore pattern lines (later lines win, ``!`` negates)
        """
        self.root = Path(os.path.abspath(root))
        lines = [p.rstrip("\n") for p in patterns]
        self.spec = pathspec.GitIgnoreSpec.from_lines(lines)
        self._empty = not any(p.strip() and not p.strip().startswith("#") for p in lines)

    @classmethod
    def load(cls, root: Path, filename: str = DEFAULT_IGNORE_FILE) -> "SandboxFilter":
        """Build a filter from the ignore file in ``root``.

        A missing or unreadable file gives a filter that allows everything.

        Args:
            root: Directory holding the ignore file
            filename: Name of the ignore file

        Returns:
            SandboxFilter instance
        """
        ignore_path = Path(root) / filename
        if not ignore_path.is_file():
            logger.debug("No ignore file at %s, sandbox allows all paths", ignore_path)
            return cls(root)

        try:
            with open(ignore_path, encoding="utf-8") as f:
                patterns = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read ignore file %s: %s", ignore_path, e)
            return cls(root)

        logger.info("Loaded %d ignore patterns from %s", len(patterns), ignore_path)
        return cls(root, patterns)

    def is_denied(self, path: Path) -> bool:
        """Check if a path is restricted.

        Args:
            path: Path to check (relative paths are taken from the cwd)

        Returns:
            True if the rules match the path as a file
        """
        if self._empty:
            return False
        return self.spec.match_file(self._match_key(Path(path)))

    def is_denied_command(self, command: str) -> bool:
        """Check if a command line references a restricted path."""
        return self.denied_command_argument(command) is not None

    def denied_command_argument(self, command: str) -> Optional[str]:
        """Find the first restricted path argument of a command line.

        The program name and flags are skipped. Only arguments naming an
        existing path can be classified; the rest are ignored.

        Args:
            command: Command line as typed

        Returns:
            The offending argument, or None if the command is allowed
        """
        if self._empty:
            return None

        for arg in command.split()[1:]:
            if arg.startswith("-"):
                continue
            path = Path(arg)
            if not path.exists():
                continue
            if self.is_denied(path):
                return arg

        return None

    def get_patterns(self) -> list[str]:
        """Get the non-empty pattern lines."""
        return [p.pattern for p in self.spec.patterns if getattr(p, "include", None) is not None]

    def _match_key(self, path: Path) -> str:
        absolute = Path(os.path.abspath(path))
        try:
            return absolute.relative_to(self.root).as_posix()
        except ValueError:
            # Outside the root only unanchored patterns can match
            anchor = PurePath(absolute.anchor)
            return absolute.relative_to(anchor).as_posix()
