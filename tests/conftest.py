"""Shared fixtures for chatrelay tests."""

import sys
from pathlib import Path
from typing import Dict, List

import pytest

# Add the src directory to the path so we can import chatrelay
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chatrelay.backends import Backend, BackendError  # noqa: E402
from chatrelay.config.manager import Settings  # noqa: E402
from chatrelay.sessions import SessionStore  # noqa: E402


class FakeBackend(Backend):
    """Backend that answers from a script and records what it was sent."""

    def __init__(self, name="ollama", reply="hello", error=None):
        super().__init__(model=f"{name}-test")
        self.name = name
        self.label = name.capitalize()
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def generate(self, messages):
        self.calls.append([dict(m) for m in messages])
        if self.error:
            raise BackendError(self.error)
        return self.reply


@pytest.fixture
def temp_home_dir(tmp_path, monkeypatch):
    """Create a temporary home directory for testing."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    return tmp_path


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def settings(data_dir):
    return Settings(data_dir=data_dir)


@pytest.fixture
def store(data_dir):
    return SessionStore(data_dir)


@pytest.fixture
def backends():
    """One fake backend per provider tag."""
    return {"ollama": FakeBackend("ollama"), "groq": FakeBackend("groq", reply="cloud")}


@pytest.fixture
def backend_factory(backends):
    return lambda provider: backends[provider.value]
