import pytest
import requests

from accountability_dashboard import text_improver
from accountability_dashboard.text_improver import build_payload, extract_text, improve_text


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def _reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_payload_carries_prompt_and_instruction():
    payload = build_payload("texto original", "results")
    prompt = payload["contents"][0]["parts"][0]["text"]
    assert "Resultados Alcançados" in prompt
    assert prompt.endswith("texto original")
    assert payload["generationConfig"]["temperature"] == 0.3
    assert "prestação de contas" in payload["systemInstruction"]["parts"][0]["text"]


def test_extract_text_handles_empty_response():
    assert extract_text({}) is None
    assert extract_text(_reply("  pronto  ")) == "pronto"


def test_short_text_is_not_sent(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(requests, "post", fail)
    assert improve_text("oi", "actions", api_key="k") is None


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(text_improver, "GEMINI_API_KEY", None)
    assert improve_text("texto suficientemente longo", "actions") is None


def test_unknown_mode():
    with pytest.raises(ValueError):
        improve_text("texto suficientemente longo", "summary", api_key="k")


def test_successful_call(monkeypatch):
    calls = {}

    def fake_post(url, params=None, json=None, headers=None):
        calls["url"] = url
        calls["params"] = params
        calls["json"] = json
        return FakeResponse(_reply("Texto aprimorado."))

    monkeypatch.setattr(requests, "post", fake_post)
    result = improve_text("fizemos a migração", "actions", api_key="secret", model="gemini-test")

    assert result == "Texto aprimorado."
    assert calls["url"].endswith("/models/gemini-test:generateContent")
    assert calls["params"] == {"key": "secret"}
    assert "fizemos a migração" in calls["json"]["contents"][0]["parts"][0]["text"]


def test_http_error_returns_none(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse({}, status_code=500))
    assert improve_text("fizemos a migração", "results", api_key="k") is None


def test_network_error_returns_none(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "post", boom)
    assert improve_text("fizemos a migração", "results", api_key="k") is None
