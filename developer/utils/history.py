"""Per-file undo history."""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from developer.constants import DEFAULT_MAX_UNDO_HISTORY


class UndoHistoryStore:
    """Bounded stacks of prior file contents, keyed by path.

    A snapshot of ``""`` stands for "the file did not exist". All access goes
    through one reentrant lock; callers that need snapshot-then-write to be
    atomic hold ``locked()`` around both steps.
    """

    def __init__(self, max_history: int = DEFAULT_MAX_UNDO_HISTORY):
        """Initialize the store.

        Args:
            max_history: Snapshots kept per path (0 keeps everything)
        """
        if max_history < 0:
            raise ValueError("max_history must not be negative")
        self.max_history = max_history
        self._history: dict[Path, list[str]] = {}
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock for a read-modify-write sequence."""
        with self._lock:
            yield

    def save(self, path: Path, content: str) -> None:
        """Push a snapshot, dropping the oldest ones beyond the limit.

        Args:
            path: File the snapshot belongs to
            content: Full file content before the edit
        """
        with self._lock:
            stack = self._history.setdefault(path, [])
            stack.append(content)
            if self.max_history > 0 and len(stack) > self.max_history:
                del stack[: len(stack) - self.max_history]

    def pop(self, path: Path) -> Optional[str]:
        """Remove and return the newest snapshot, or None if there is none."""
        with self._lock:
            stack = self._history.get(path)
            if not stack:
                return None
            return stack.pop()

    def depth(self, path: Path) -> int:
        """Number of snapshots held for a path."""
        with self._lock:
            return len(self._history.get(path, ()))

    def snapshots(self, path: Path) -> list[str]:
        """Copy of the snapshots for a path, oldest first."""
        with self._lock:
            return list(self._history.get(path, ()))

    def clear(self, path: Optional[Path] = None) -> None:
        """Forget the history of one path, or of every path."""
        with self._lock:
            if path is None:
                self._history.clear()
            else:
                self._history.pop(path, None)
