"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from developer.config import Config
from developer.server import Developer
from developer.tools.shell import Shell
from developer.tools.text_editor import TextEditor
from developer.utils.ignore import SandboxFilter


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def test_project(temp_dir):
    """Create a test project structure."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "main.py").write_text("def hello():\n    return 'world'\n")
    (temp_dir / "src" / "utils.py").write_text("def add(a, b):\n    return a + b\n")

    (temp_dir / "README.md").write_text("# Test Project\n")
    (temp_dir / "secret.txt").write_text("secret content\n")
    (temp_dir / "app.env").write_text("TOKEN=abc\n")

    (temp_dir / ".gitignore").write_text("secret.txt\n*.env\nbuild/\n")

    yield temp_dir


@pytest.fixture
def sandbox(test_project):
    """Sandbox filter built from the test project's .gitignore."""
    return SandboxFilter.load(test_project)


@pytest.fixture
def editor():
    """Text editor without sandbox rules."""
    return TextEditor()


@pytest.fixture
def shell():
    """Shell tool using /bin/sh."""
    return Shell(executable="/bin/sh")


@pytest.fixture
def test_config():
    """Configuration that does not read the environment."""
    return Config(shell_executable="/bin/sh", workflow_log_steps=False)


@pytest.fixture
def developer(test_project, test_config):
    """Dispatcher rooted at the test project."""
    return Developer(test_config, root=test_project)
