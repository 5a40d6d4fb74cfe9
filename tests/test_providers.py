"""Tests for the Mistral provider and error translation."""

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from mistralai import Mistral
from mistralai.models import AssistantMessage, SystemMessage, UserMessage

from ai_shell.errors import KnownError
from ai_shell.providers import Completion, MistralProvider, get_provider, translate_error


class FakeAPIError(Exception):
    """Stand-in for an SDK error carrying an HTTP status and body."""

    def __init__(self, status_code, body=""):
        super().__init__(f"API error {status_code}")
        self.status_code = status_code
        self.body = body


class FakeChat:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    async def complete_async(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def make_response(*texts, model="mistral-small-latest"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=t)) for t in texts],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
        model=model,
    )


@pytest.fixture
def provider_with(monkeypatch):
    """Build a MistralProvider whose client is a FakeChat."""
    def build(response=None, error=None):
        chat = FakeChat(response, error)
        provider = MistralProvider("test-key")
        monkeypatch.setattr(provider, "_create_client", lambda: SimpleNamespace(chat=chat))
        return provider, chat
    return build


# ============================================================================
# translate_error Tests
# ============================================================================

class TestTranslateError:
    """Tests for translate_error."""

    def test_connect_error(self):
        """Test connection failures name the host."""
        request = httpx.Request("POST", "https://api.mistral.ai/v1/chat/completions")
        error = translate_error(httpx.ConnectError("refused", request=request))

        assert isinstance(error, KnownError)
        assert "api.mistral.ai" in str(error)
        assert "ConnectError" in str(error)

    def test_connect_error_without_request(self):
        """Test a connection error built without a request still translates."""
        error = translate_error(httpx.ConnectTimeout("timeout"))
        assert isinstance(error, KnownError)
        assert "api.mistral.ai" in str(error)

    def test_quota_error(self):
        """Test a 429 explains billing and includes the pretty body."""
        error = translate_error(FakeAPIError(429, '{"message":"quota exceeded"}'))

        assert isinstance(error, KnownError)
        assert "429" in str(error)
        assert "facturation" in str(error)
        assert '"message": "quota exceeded"' in str(error)

    def test_other_status_with_body(self):
        """Test other statuses with a body carry status and body."""
        error = translate_error(FakeAPIError(500, "internal failure"))
        assert isinstance(error, KnownError)
        assert "500" in str(error)
        assert "internal failure" in str(error)

    def test_status_without_body(self):
        """Test a status with no body is left untranslated."""
        assert translate_error(FakeAPIError(500, "")) is None

    def test_unknown_error(self):
        """Test unrelated errors are not translated."""
        assert translate_error(ValueError("boom")) is None


# ============================================================================
# Completion Tests
# ============================================================================

class TestCompletion:
    """Tests for the Completion dataclass."""

    def test_text_is_first_choice(self):
        assert Completion(choices=["a", "b"]).text == "a"

    def test_text_empty_without_choices(self):
        assert Completion().text == ""


# ============================================================================
# MistralProvider Tests
# ============================================================================

class TestMistralProvider:
    """Tests for MistralProvider."""

    def test_empty_key_rejected(self):
        """Test a missing key raises a KnownError."""
        with pytest.raises(KnownError):
            MistralProvider("")

    def test_get_provider(self):
        """Test the factory returns a Mistral client."""
        assert isinstance(get_provider("key"), MistralProvider)

    def test_create_client(self):
        """Test the SDK client is built with the configured key."""
        client = MistralProvider("key")._create_client()
        assert isinstance(client, Mistral)
        assert hasattr(client.chat, "complete_async")

    def test_models(self):
        """Test the default model is in the model list."""
        provider = MistralProvider("key")
        assert provider.get_default_model() in provider.list_models()
        assert "codestral-latest" in provider.list_models()

    def test_convert_messages(self):
        """Test roles map to Mistral message types."""
        converted = MistralProvider("key")._convert_messages([
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u"},
            {"role": "assistant", "content": "a"},
        ])
        assert isinstance(converted[0], SystemMessage)
        assert isinstance(converted[1], UserMessage)
        assert isinstance(converted[2], AssistantMessage)

    def test_content_to_text(self):
        """Test string, empty and chunked content."""
        to_text = MistralProvider._content_to_text
        assert to_text("ls") == "ls"
        assert to_text(None) == ""
        chunks = [SimpleNamespace(text="ls "), SimpleNamespace(text=None), SimpleNamespace(text="-la")]
        assert to_text(chunks) == "ls -la"

    def test_complete(self, provider_with):
        """Test a successful completion."""
        provider, chat = provider_with(make_response("ls", "ls -la"))
        completion = asyncio.run(provider.complete(
            [{"role": "user", "content": "lister"}], "mistral-small-latest", count=2,
        ))

        assert completion.choices == ["ls", "ls -la"]
        assert completion.text == "ls"
        assert completion.usage == {"prompt_tokens": 12, "completion_tokens": 3}
        assert chat.kwargs["n"] == 2
        assert chat.kwargs["stream"] is False

    def test_complete_caps_choices(self, provider_with):
        """Test the number of choices sent is capped at 10."""
        provider, chat = provider_with(make_response("ls"))
        asyncio.run(provider.complete([{"role": "user", "content": "x"}], "m", count=50))
        assert chat.kwargs["n"] == 10

    def test_complete_translates_errors(self, provider_with):
        """Test explainable API errors become KnownError."""
        original = FakeAPIError(429, "{}")
        provider, _ = provider_with(error=original)

        with pytest.raises(KnownError) as excinfo:
            asyncio.run(provider.complete([{"role": "user", "content": "x"}], "m"))
        assert excinfo.value.__cause__ is original

    def test_complete_propagates_unknown_errors(self, provider_with):
        """Test unexplained errors propagate unchanged."""
        provider, _ = provider_with(error=RuntimeError("boom"))
        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(provider.complete([{"role": "user", "content": "x"}], "m"))
