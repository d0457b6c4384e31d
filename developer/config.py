"""Configuration loading and management."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from developer.constants import DEFAULT_IGNORE_FILE, DEFAULT_MAX_UNDO_HISTORY

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer for %s: %r. Falling back to %s.", name, raw, default)
        return default


def _float_from_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        logger.warning("Invalid number for %s: %r. Falling back to %s.", name, raw, default)
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Invalid boolean for %s: %r. Falling back to %s.", name, raw, default)
    return default


@dataclass
class Config:
    """Developer tools configuration.

    Loads from the environment and an optional .env file.
    """

    # Text editor
    max_history: int = DEFAULT_MAX_UNDO_HISTORY

    # Sandbox
    ignore_file: str = DEFAULT_IGNORE_FILE

    # Shell
    shell_executable: Optional[str] = None
    shell_timeout: Optional[float] = None
    shell_annotate_exit: bool = False

    # Workflow
    workflow_allow_branches: bool = True
    workflow_max_steps: Optional[int] = None
    workflow_log_steps: bool = True

    # Logging
    log_level: str = "WARNING"
    log_dir: Optional[Path] = None

    @classmethod
    def load(cls, dotenv_path: Optional[Path] = None) -> "Config":
        """Load configuration from the environment.

        Args:
            dotenv_path: Optional .env file (searched for when omitted)

        Returns:
            Config instance
        """
        load_dotenv(dotenv_path)

        log_dir = os.getenv("DEVELOPER_LOG_DIR")

        return cls(
            max_history=_int_from_env("TEXT_EDITOR_MAX_HISTORY", DEFAULT_MAX_UNDO_HISTORY),
            ignore_file=os.getenv("DEVELOPER_IGNORE_FILE") or DEFAULT_IGNORE_FILE,
            shell_executable=os.getenv("DEVELOPER_SHELL") or None,
            shell_timeout=_float_from_env("SHELL_TIMEOUT", None),
            shell_annotate_exit=_bool_from_env("SHELL_ANNOTATE_EXIT", False),
            workflow_allow_branches=_bool_from_env("WORKFLOW_ALLOW_BRANCHES", True),
            workflow_max_steps=_int_from_env("WORKFLOW_MAX_STEPS", None),
            workflow_log_steps=_bool_from_env("WORKFLOW_LOG_STEPS", True),
            log_level=(os.getenv("DEVELOPER_LOG_LEVEL") or "WARNING").upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.max_history < 0:
            errors.append("max_history must not be negative")

        if self.shell_timeout is not None and self.shell_timeout <= 0:
            errors.append("shell_timeout must be positive")

        if self.workflow_max_steps is not None and self.workflow_max_steps <= 0:
            errors.append("workflow_max_steps must be positive")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors

    def to_dict(self) -> dict:
        """Convert config to dictionary (for logging/display)."""
        return {
            "max_history": self.max_history,
            "ignore_file": self.ignore_file,
            "shell_executable": self.shell_executable,
            "shell_timeout": self.shell_timeout,
            "shell_annotate_exit": self.shell_annotate_exit,
            "workflow_allow_branches": self.workflow_allow_branches,
            "workflow_max_steps": self.workflow_max_steps,
            "workflow_log_steps": self.workflow_log_steps,
            "log_level": self.log_level,
            "log_dir": str(self.log_dir) if self.log_dir else None,
        }
