# tests/test_llm_client.py
import pytest
from google.api_core import exceptions as google_exceptions

from promptiq import llm_client
from promptiq.errors import EmptyGeneration, GenerationFailed, ProviderQuotaExceeded
from promptiq.llm_client import GeminiClient


class _Response:
    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error

    @property
    def text(self):
        if self._error is not None:
            raise self._error
        return self._text


class _Model:
    """Stands in for genai.GenerativeModel; remembers how it was built."""

    instances = []
    outcome = None

    def __init__(self, model_name, system_instruction):
        self.model_name = model_name
        self.system_instruction = system_instruction
        self.contents = []
        _Model.instances.append(self)

    def generate_content(self, contents):
        self.contents.append(contents)
        outcome = _Model.outcome
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def gemini(monkeypatch):
    _Model.instances = []
    _Model.outcome = _Response(text="## Role: helper")
    configured = {}
    monkeypatch.setattr(llm_client.genai, "configure", lambda **kw: configured.update(kw))
    monkeypatch.setattr(llm_client.genai, "GenerativeModel", _Model)

    client = GeminiClient("key-123", "gemini-test")
    client.init()
    assert configured == {"api_key": "key-123"}
    return client


def test_generate_sends_system_instruction_and_user_turn(gemini):
    assert gemini.generate("SYSTEM", "idea") == "## Role: helper"
    model = _Model.instances[-1]
    assert model.model_name == "gemini-test"
    assert model.system_instruction == "SYSTEM"
    assert model.contents == ["idea"]


@pytest.mark.parametrize(
    "error",
    [
        google_exceptions.ResourceExhausted("Quota exceeded for requests per minute"),
        google_exceptions.TooManyRequests("slow down"),
    ],
)
def test_rate_limits_become_provider_quota(gemini, error):
    _Model.outcome = error
    with pytest.raises(ProviderQuotaExceeded) as info:
        gemini.generate("SYSTEM", "idea")
    assert info.value.status_code == 429


def test_other_api_errors_are_generation_failures(gemini):
    _Model.outcome = google_exceptions.InternalServerError("backend exploded")
    with pytest.raises(GenerationFailed) as info:
        gemini.generate("SYSTEM", "idea")
    assert "backend exploded" in info.value.message


@pytest.mark.parametrize("error", [ConnectionError("socket closed"), ValueError("bad contents")])
def test_non_api_errors_are_generation_failures(gemini, error):
    _Model.outcome = error
    with pytest.raises(GenerationFailed) as info:
        gemini.generate("SYSTEM", "idea")
    assert info.value.__cause__ is error


def test_blocked_response_is_empty_generation(gemini):
    _Model.outcome = _Response(error=ValueError("no parts"))
    with pytest.raises(EmptyGeneration):
        gemini.generate("SYSTEM", "idea")


def test_missing_key(monkeypatch):
    monkeypatch.setattr(llm_client.genai, "configure", lambda **kw: pytest.fail("configured without a key"))
    client = GeminiClient("", "gemini-test")
    client.init()
    with pytest.raises(GenerationFailed):
        client.generate("SYSTEM", "idea")


def test_close_disables_client(gemini):
    gemini.close()
    with pytest.raises(GenerationFailed):
        gemini.generate("SYSTEM", "idea")
