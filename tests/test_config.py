"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest

from developer.config import Config

ENV_VARS = [
    "TEXT_EDITOR_MAX_HISTORY",
    "DEVELOPER_IGNORE_FILE",
    "DEVELOPER_SHELL",
    "SHELL_TIMEOUT",
    "SHELL_ANNOTATE_EXIT",
    "WORKFLOW_ALLOW_BRANCHES",
    "WORKFLOW_MAX_STEPS",
    "WORKFLOW_LOG_STEPS",
    "DEVELOPER_LOG_LEVEL",
    "DEVELOPER_LOG_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, temp_dir):
    """Environment without any developer settings."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return temp_dir / "missing.env"


def test_defaults(clean_env):
    """Test defaults with nothing configured."""
    config = Config.load(clean_env)

    assert config.max_history == 10
    assert config.ignore_file == ".gitignore"
    assert config.shell_executable is None
    assert config.shell_timeout is None
    assert config.shell_annotate_exit is False
    assert config.workflow_allow_branches is True
    assert config.workflow_max_steps is None
    assert config.workflow_log_steps is True
    assert config.log_level == "WARNING"
    assert config.log_dir is None
    assert config.validate() == []


def test_load_from_environment(clean_env, monkeypatch):
    """Test reading every setting from the environment."""
    monkeypatch.setenv("TEXT_EDITOR_MAX_HISTORY", "25")
    monkeypatch.setenv("DEVELOPER_IGNORE_FILE", ".developerignore")
    monkeypatch.setenv("DEVELOPER_SHELL", "/bin/sh")
    monkeypatch.setenv("SHELL_TIMEOUT", "2.5")
    monkeypatch.setenv("SHELL_ANNOTATE_EXIT", "yes")
    monkeypatch.setenv("WORKFLOW_ALLOW_BRANCHES", "false")
    monkeypatch.setenv("WORKFLOW_MAX_STEPS", "12")
    monkeypatch.setenv("WORKFLOW_LOG_STEPS", "0")
    monkeypatch.setenv("DEVELOPER_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEVELOPER_LOG_DIR", "/tmp/developer-logs")

    config = Config.load(clean_env)

    assert config.max_history == 25
    assert config.ignore_file == ".developerignore"
    assert config.shell_executable == "/bin/sh"
    assert config.shell_timeout == 2.5
    assert config.shell_annotate_exit is True
    assert config.workflow_allow_branches is False
    assert config.workflow_max_steps == 12
    assert config.workflow_log_steps is False
    assert config.log_level == "DEBUG"
    assert config.log_dir == Path("/tmp/developer-logs")


def test_invalid_values_fall_back(clean_env, monkeypatch, caplog):
    """Test that unparsable values keep the defaults."""
    monkeypatch.setenv("TEXT_EDITOR_MAX_HISTORY", "lots")
    monkeypatch.setenv("SHELL_TIMEOUT", "soon")
    monkeypatch.setenv("WORKFLOW_ALLOW_BRANCHES", "maybe")

    with caplog.at_level("WARNING", logger="developer.config"):
        config = Config.load(clean_env)

    assert config.max_history == 10
    assert config.shell_timeout is None
    assert config.workflow_allow_branches is True
    assert "TEXT_EDITOR_MAX_HISTORY" in caplog.text


def test_zero_history_is_allowed(clean_env, monkeypatch):
    """Test that 0 is a valid unbounded history limit."""
    monkeypatch.setenv("TEXT_EDITOR_MAX_HISTORY", "0")

    config = Config.load(clean_env)

    assert config.max_history == 0
    assert config.validate() == []


def test_load_from_dotenv(clean_env, temp_dir):
    """Test reading settings from a .env file."""
    dotenv = temp_dir / ".env"
    dotenv.write_text("TEXT_EDITOR_MAX_HISTORY=4\nDEVELOPER_SHELL=/bin/sh\n")

    try:
        config = Config.load(dotenv)
    finally:
        os.environ.pop("TEXT_EDITOR_MAX_HISTORY", None)
        os.environ.pop("DEVELOPER_SHELL", None)

    assert config.max_history == 4
    assert config.shell_executable == "/bin/sh"


def test_validate():
    """Test validation errors."""
    config = Config(
        max_history=-1,
        shell_timeout=0,
        workflow_max_steps=0,
        log_level="LOUD",
    )

    errors = config.validate()

    assert len(errors) == 4
    assert any("max_history" in e for e in errors)
    assert any("Unknown log level" in e for e in errors)


def test_to_dict():
    """Test the display dictionary."""
    config = Config(log_dir=Path("/tmp/logs"))

    data = config.to_dict()

    assert data["max_history"] == 10
    assert data["log_dir"] == "/tmp/logs"
    assert set(data) == {
        "max_history",
        "ignore_file",
        "shell_executable",
        "shell_timeout",
        "shell_annotate_exit",
        "workflow_allow_branches",
        "workflow_max_steps",
        "workflow_log_steps",
        "log_level",
        "log_dir",
    }
