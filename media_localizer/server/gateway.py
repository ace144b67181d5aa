"""Upstream chat-completions client used by the gateway handlers.

WHY: Both handlers end in the same call: POST a system prompt and a user
message to an OpenAI-compatible /chat/completions endpoint and pull the
first choice's content out of the reply. Sharing that call keeps error
handling identical for transcription and voice-over.

HOW: complete() builds the request body, sends it with httpx, and
returns ``choices[0].message.content``. Media is sent inline as a
base64 data URL inside an ``image_url`` content part, which is how the
hosted multimodal model accepts audio and video.

RULES:
- Non-2xx upstream responses raise GatewayError("AI processing failed: <status>")
- A reply without content raises GatewayError with the caller's message
- The API key is passed in by the caller; this module never reads env
- transport is for tests (httpx.MockTransport)
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from media_localizer.config import AI_GATEWAY_URL

logger = logging.getLogger(__name__)

UPSTREAM_TIMEOUT_S = 600.0


class GatewayError(Exception):
    """An error the handlers turn into a JSON ``{"error": ...}`` response."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[str] = None) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or message
        super().__init__(message)


def media_data_url(content: bytes, mime_type: str) -> str:
    """Inline media as ``data:<mime>;base64,<payload>``."""
    encoded = base64.b64encode(content).decode("ascii")
    return "data:{};base64,{}".format(mime_type, encoded)


class CompletionClient:
    """Thin async wrapper around one chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._url = url or AI_GATEWAY_URL
        self._transport = transport

    async def complete(
        self,
        model: str,
        system_prompt: str,
        user_content: Union[str, List[Dict[str, Any]]],
        max_tokens: int,
        temperature: float,
        empty_message: str,
    ) -> str:
        """Send one system + user exchange and return the reply text.

        Args:
            model: Upstream model identifier.
            system_prompt: Instructions for the model.
            user_content: Plain text, or a list of multimodal content parts.
            max_tokens: Completion token limit.
            temperature: Sampling temperature.
            empty_message: Error message when the reply has no content.
        """
        body = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(UPSTREAM_TIMEOUT_S, connect=30.0),
            transport=self._transport,
        ) as client:
            resp = await client.post(
                self._url,
                json=body,
                headers={"Authorization": "Bearer {}".format(self._api_key)},
            )

        if not resp.is_success:
            logger.error("AI gateway error: %s - %s", resp.status_code, resp.text)
            raise GatewayError("AI processing failed: {}".format(resp.status_code))

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None

        if not content:
            logger.error("No content in AI gateway response: %s", resp.text[:2000])
            raise GatewayError(empty_message)

        return content
