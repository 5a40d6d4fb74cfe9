"""Pytest fixtures for ai-shell tests."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from ai_shell.providers import Completion, ProviderBase


class FakeProvider(ProviderBase):
    """Provider returning canned answers and recording every request."""

    name = "fake"

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def complete(self, messages, model, count=1):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "model": model,
            "count": count,
        })
        if self.error is not None:
            raise self.error
        text = self.responses.pop(0) if self.responses else ""
        return Completion(choices=[text], model=model)

    def list_models(self):
        return ["fake-model"]


async def fragments(*chunks):
    """Async source yielding the given fragments in order."""
    for chunk in chunks:
        yield chunk


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_path(temp_dir, monkeypatch):
    """Point AI_SHELL_CONFIG at a fresh (not yet created) file."""
    path = temp_dir / ".ai-shell"
    monkeypatch.setenv("AI_SHELL_CONFIG", str(path))
    return path


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clean environment variables that might affect tests."""
    for var in ["MISTRAL_API_KEY", "AI_SHELL_CONFIG"]:
        monkeypatch.delenv(var, raising=False)
