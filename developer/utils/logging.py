"""Logging setup and tool call transcripts."""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

# Arguments that may carry whole files are logged by length only
_CONTENT_ARGS = {"file_text", "old_str", "new_str", "step_description"}


def configure_logging(level: str = "WARNING") -> None:
    """Send package diagnostics to stderr.

    stdout is left alone because transports may use it for protocol traffic.

    Args:
        level: Log level name
    """
    package_logger = logging.getLogger("developer")
    package_logger.setLevel(level)

    if not any(getattr(h, "_developer", False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handler._developer = True
        package_logger.addHandler(handler)


def summarize_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Make tool arguments safe to log.

    Args:
        arguments: Raw tool arguments

    Returns:
        Copy with file contents replaced by their lengths
    """
    summary: dict[str, Any] = {}
    for key in sorted(arguments):
        value = arguments[key]
        if key in _CONTENT_ARGS and isinstance(value, str):
            summary[f"{key}_length"] = len(value)
        elif isinstance(value, (str, int, float, bool)) or value is None:
            summary[key] = value
        else:
            summary[f"{key}_type"] = type(value).__name__
    return summary


class CallLogger:
    """Appends one NDJSON record per tool call."""

    def __init__(self, log_root: Path, run_id: Optional[str] = None):
        """Initialize call logger.

        Args:
            log_root: Directory holding one subdirectory per run
            run_id: Optional run ID (generated if not provided)
        """
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self.log_dir = Path(log_root) / self.run_id
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.calls_path = self.log_dir / "calls.ndjson"
        self._lock = threading.Lock()

    def log_call(
        self,
        tool: str,
        arguments: dict[str, Any],
        ok: bool,
        duration_ms: int,
        error: Optional[str] = None,
    ) -> None:
        """Log a tool call.

        Args:
            tool: Tool name
            arguments: Raw tool arguments
            ok: Whether the call produced a non-error result
            duration_ms: Wall time of the call
            error: Error type name for failed calls
        """
        entry = {
            "ts": datetime.now().isoformat(),
            "tool": tool,
            "ok": ok,
            "duration_ms": duration_ms,
            "arguments": summarize_arguments(arguments),
        }

        if error:
            entry["error"] = error

        with self._lock:
            with open(self.calls_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")

    def read_calls(self) -> list[dict]:
        """Read back the records written so far."""
        if not self.calls_path.exists():
            return []
        with open(self.calls_path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def get_log_path(self) -> str:
        """Get the path to the log directory.

        Returns:
            Absolute path to log directory
        """
        return str(self.log_dir.absolute())
