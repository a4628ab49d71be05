"""Pytest configuration and shared fixtures."""
import os

import pytest
from fakes import EchoTool, FailingTool, FakeModelClient

from cliagent.agent import ConversationEngine, ToolRegistry


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "google": os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
    }


@pytest.fixture
def echo_tool():
    return EchoTool()


@pytest.fixture
def registry(echo_tool):
    """Registry with an echo tool and an always-failing tool."""
    return ToolRegistry([echo_tool, FailingTool()])


@pytest.fixture
def make_engine(registry):
    """Build an engine over a scripted client.

    Usage: ``engine, client = make_engine([[fragment(text("hi"))]])``
    """
    def _make(responses, **client_kwargs):
        client = FakeModelClient(responses, **client_kwargs)
        return ConversationEngine(client, registry), client

    return _make


@pytest.fixture
def workspace(tmp_path):
    """Small directory tree for tool tests."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("import os\n\nprint('hello')\n")
    (tmp_path / "src" / "util.py").write_text("def helper():\n    return 42\n")
    (tmp_path / "README.md").write_text("# Project\nHello World\nhello again\n")
    (tmp_path / ".hidden").write_text("secret")
    return tmp_path
