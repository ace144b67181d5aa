"""Tests for the FastAPI gateway.

WHY: The CLI pipeline depends on the exact request/response contract of
/transcribe and /generate-voiceover, including the ``{"error", ...}``
body it surfaces to the user. These tests pin that contract down.

HOW: Endpoint tests use FastAPI TestClient with the completion client
dependency overridden by a MagicMock whose complete() is an AsyncMock,
so the upstream model is never called. CompletionClient itself is
tested separately against httpx.MockTransport.

RULES:
- The upstream AI gateway is never contacted
- dependency_overrides are cleared after every test
"""

from __future__ import annotations

import asyncio
import base64
import io
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from media_localizer import __version__
from media_localizer.server.app import app, get_completion_client
from media_localizer.server.gateway import CompletionClient, GatewayError, media_data_url
from media_localizer.server.prompts import EMOTION_DIRECTIONS


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def completion():
    """Stand-in for CompletionClient; tests set complete.return_value."""
    fake = MagicMock(spec=CompletionClient)
    fake.complete = AsyncMock(return_value="[00:00:00] Speaker 1: Hello there.")
    return fake


@pytest.fixture
def client(completion):
    app.dependency_overrides[get_completion_client] = lambda: completion
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(name="talk.mp3", content=b"fake audio data", mime_type="audio/mpeg"):
    return {"file": (name, io.BytesIO(content), mime_type)}


# ---------------------------------------------------------------------------
# POST /transcribe
# ---------------------------------------------------------------------------


class TestTranscribeEndpoint:

    def test_success(self, client, completion):
        resp = client.post("/transcribe", files=_upload())

        assert resp.status_code == 200
        body = resp.json()
        assert body == {
            "success": True,
            "transcription": "[00:00:00] Speaker 1: Hello there.",
            "fileName": "talk.mp3",
            "fileSize": len(b"fake audio data"),
            "targetLanguage": None,
        }

        kwargs = completion.complete.await_args.kwargs
        assert kwargs["max_tokens"] == 16000
        assert kwargs["temperature"] == 0.1
        assert "TRANSLATION" not in kwargs["system_prompt"]
        media_part = kwargs["user_content"][1]
        expected = "data:audio/mpeg;base64," + base64.b64encode(b"fake audio data").decode()
        assert media_part == {"type": "image_url", "image_url": {"url": expected}}

    def test_target_language_adds_translation_instructions(self, client, completion):
        resp = client.post("/transcribe", files=_upload(), data={"targetLanguage": "Spanish"})

        assert resp.status_code == 200
        assert resp.json()["targetLanguage"] == "Spanish"
        prompt = completion.complete.await_args.kwargs["system_prompt"]
        assert "--- ORIGINAL TRANSCRIPTION ---" in prompt
        assert "--- TRANSLATION (Spanish) ---" in prompt

    def test_no_file(self, client, completion):
        resp = client.post("/transcribe", data={"targetLanguage": "French"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "No file provided"
        completion.complete.assert_not_awaited()

    def test_upstream_failure(self, client, completion):
        completion.complete.side_effect = GatewayError("AI processing failed: 429")

        resp = client.post("/transcribe", files=_upload())

        assert resp.status_code == 500
        assert resp.json()["error"] == "AI processing failed: 429"

    def test_unexpected_failure_is_wrapped(self, client, completion):
        completion.complete.side_effect = RuntimeError("socket closed")

        resp = client.post("/transcribe", files=_upload())

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to process file", "details": "socket closed"}

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("AI_API_KEY", raising=False)
        app.dependency_overrides.clear()

        resp = TestClient(app).post("/transcribe", files=_upload())

        assert resp.status_code == 500
        assert resp.json()["error"] == "AI service not configured"


# ---------------------------------------------------------------------------
# POST /generate-voiceover
# ---------------------------------------------------------------------------


class TestVoiceoverEndpoint:

    def test_success(self, client, completion):
        completion.complete.return_value = "Hello [PAUSE] *there*!"

        resp = client.post(
            "/generate-voiceover",
            json={"text": "Hello there!", "emotion": "happy", "language": "English"},
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "originalText": "Hello there!",
            "voiceoverScript": "Hello [PAUSE] *there*!",
            "emotion": "happy",
            "language": "English",
            "emotionDescription": EMOTION_DIRECTIONS["happy"],
        }
        kwargs = completion.complete.await_args.kwargs
        assert kwargs["max_tokens"] == 8000
        assert kwargs["temperature"] == 0.7
        assert "Emotion Style: HAPPY" in kwargs["system_prompt"]
        assert kwargs["user_content"].endswith("Hello there!")

    def test_defaults(self, client, completion):
        resp = client.post("/generate-voiceover", json={"text": "Hi"})

        assert resp.status_code == 200
        assert resp.json()["emotion"] == "neutral"
        assert resp.json()["language"] == "English"

    def test_unknown_emotion_uses_neutral_direction(self, client, completion):
        resp = client.post("/generate-voiceover", json={"text": "Hi", "emotion": "grumpy"})

        assert resp.status_code == 200
        assert resp.json()["emotionDescription"] == EMOTION_DIRECTIONS["neutral"]
        assert EMOTION_DIRECTIONS["neutral"] in completion.complete.await_args.kwargs["system_prompt"]

    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   \n"}])
    def test_no_text(self, client, completion, payload):
        resp = client.post("/generate-voiceover", json=payload)

        assert resp.status_code == 400
        assert resp.json()["error"] == "No text provided"
        completion.complete.assert_not_awaited()

    def test_malformed_body(self, client):
        resp = client.post(
            "/generate-voiceover",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request body"

    def test_empty_upstream_reply(self, client, completion):
        completion.complete.side_effect = GatewayError("No voiceover script generated")

        resp = client.post("/generate-voiceover", json={"text": "Hi"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "No voiceover script generated"


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# CompletionClient
# ---------------------------------------------------------------------------


def _complete_with(handler, **overrides):
    kwargs = dict(
        model="test-model",
        system_prompt="system",
        user_content="user",
        max_tokens=100,
        temperature=0.5,
        empty_message="Nothing came back",
    )
    kwargs.update(overrides)
    client = CompletionClient(
        api_key="upstream-key",
        url="http://upstream.local/v1/chat/completions",
        transport=httpx.MockTransport(handler),
    )
    return asyncio.run(client.complete(**kwargs))


class TestCompletionClient:

    def test_request_and_reply(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Transcript"}}]})

        assert _complete_with(handler) == "Transcript"

        request = seen[0]
        assert request.headers["authorization"] == "Bearer upstream-key"
        body = json.loads(request.content)
        assert body == {
            "model": "test-model",
            "messages": [
                {"role": "system", "content": "system"},
                {"role": "user", "content": "user"},
            ],
            "max_tokens": 100,
            "temperature": 0.5,
        }

    def test_upstream_status_is_reported(self):
        def handler(request):
            return httpx.Response(402, text="payment required")

        with pytest.raises(GatewayError, match="AI processing failed: 402") as exc_info:
            _complete_with(handler)
        assert exc_info.value.status_code == 500

    @pytest.mark.parametrize("body", [
        {"choices": []},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {}}]},
        {},
    ])
    def test_empty_reply(self, body):
        def handler(request):
            return httpx.Response(200, json=body)

        with pytest.raises(GatewayError, match="Nothing came back"):
            _complete_with(handler)


def test_media_data_url():
    assert media_data_url(b"abc", "video/mp4") == "data:video/mp4;base64,YWJj"
