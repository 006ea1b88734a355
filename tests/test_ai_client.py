from typing import Any

import pytest
import requests

from conftest import make_case_type

import casecoach.ai_client as ai_client
from casecoach.ai_client import CaseGenerator, build_case_prompt
from casecoach.config import Settings
from casecoach.errors import RemoteRequestFailed
from casecoach.models import Industry

INDUSTRY = Industry(id="energy", name="Energy & Utilities", icon="⚡")
CASE_TYPE = make_case_type("market_entry", "Market Entry")


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no json")
        return self._body


def _generator() -> CaseGenerator:
    env = {
        "CASECOACH_API_URL": "https://llm.example.test/v1/chat/completions",
        "CASECOACH_MODEL": "test-model",
        "CASECOACH_TEMPERATURE": "0.5",
        "CASECOACH_TIMEOUT": "12",
    }
    return CaseGenerator(Settings.from_env(env))


def test_generate_case_posts_chat_request(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_post(url: str, **kwargs: Any) -> FakeResponse:
        captured["url"] = url
        captured.update(kwargs)
        return FakeResponse(200, {"choices": [{"message": {"content": "  A utility wants to...  "}}]})

    monkeypatch.setattr(ai_client.requests, "post", fake_post)
    text = _generator().generate_case("sk-test-1234567", INDUSTRY, CASE_TYPE)

    assert text == "  A utility wants to...  "
    assert captured["url"] == "https://llm.example.test/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer sk-test-1234567"
    assert captured["timeout"] == 12.0
    body = captured["json"]
    assert body["model"] == "test-model"
    assert body["temperature"] == 0.5
    assert body["stream"] is False
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert "Market Entry" in body["messages"][1]["content"]
    assert "Energy & Utilities" in body["messages"][1]["content"]


def test_error_status_uses_error_message(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        ai_client.requests,
        "post",
        lambda url, **kwargs: FakeResponse(401, {"error": {"message": "Invalid API key"}}),
    )
    with pytest.raises(RemoteRequestFailed, match="API error: 401 - Invalid API key") as excinfo:
        _generator().generate_case("sk-bad-key-000", INDUSTRY, CASE_TYPE)
    assert excinfo.value.status == 401


def test_error_status_without_json_body(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ai_client.requests, "post", lambda url, **kwargs: FakeResponse(503, None, "down"))
    with pytest.raises(RemoteRequestFailed, match="503 - Unknown error"):
        _generator().generate_case("sk-test-1234567", INDUSTRY, CASE_TYPE)


def test_connection_error_is_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(url: str, **kwargs: Any) -> FakeResponse:
        raise requests.exceptions.ConnectionError("no route to host")

    monkeypatch.setattr(ai_client.requests, "post", fail)
    with pytest.raises(RemoteRequestFailed, match="Connection error") as excinfo:
        _generator().generate_case("sk-test-1234567", INDUSTRY, CASE_TYPE)
    assert excinfo.value.status is None


def test_timeout_is_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    def slow(url: str, **kwargs: Any) -> FakeResponse:
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(ai_client.requests, "post", slow)
    with pytest.raises(RemoteRequestFailed, match="timed out after 12s"):
        _generator().generate_case("sk-test-1234567", INDUSTRY, CASE_TYPE)


def test_response_without_text_is_a_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ai_client.requests, "post", lambda url, **kwargs: FakeResponse(200, {"choices": []}))
    with pytest.raises(RemoteRequestFailed, match="did not contain generated text"):
        _generator().generate_case("sk-test-1234567", INDUSTRY, CASE_TYPE)


def test_test_credential_sends_single_user_message(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_post(url: str, **kwargs: Any) -> FakeResponse:
        captured.update(kwargs)
        return FakeResponse(200, {"choices": [{"message": {"content": "test successful"}}]})

    monkeypatch.setattr(ai_client.requests, "post", fake_post)
    _generator().test_credential("sk-test-1234567")
    assert len(captured["json"]["messages"]) == 1
    assert "temperature" not in captured["json"]


def test_build_case_prompt_mentions_structure() -> None:
    prompt = build_case_prompt(INDUSTRY, CASE_TYPE)
    assert "Client background" in prompt
    assert "4-5 sentences" in prompt
