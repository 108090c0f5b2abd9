"""
AI tutor proxy.

Forwards a prompt to the Anthropic messages API and returns the upstream JSON
unchanged, so the API key never reaches the browser.

Usage:
    message = await ask_tutor("Correct my sentence: ...")
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from lingotutor.config import settings

logger = logging.getLogger(__name__)


class TutorUnavailableError(Exception):
    """Raised when no API key is configured or the upstream cannot be reached."""


class TutorResponseError(Exception):
    """The upstream answered with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(res: httpx.Response) -> str:
    fallback = "Failed to get response from AI"
    try:
        data = res.json()
    except ValueError:
        return res.text or fallback
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return res.text or fallback


async def ask_tutor(
    prompt: str,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Send a single-turn prompt to the tutor model.

    Raises TutorUnavailableError if no key is set or the request fails in
    transport, TutorResponseError if the upstream returns a non-2xx status.
    """
    if not settings.anthropic_api_key:
        raise TutorUnavailableError(
            "API key not configured. Set ANTHROPIC_API_KEY in the environment."
        )

    payload = {
        "model": settings.tutor_model,
        "max_tokens": settings.tutor_max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    headers = {
        "content-type": "application/json",
        "x-api-key": settings.anthropic_api_key,
        "anthropic-version": settings.anthropic_version,
    }

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.tutor_timeout)
    try:
        res = await client.post(settings.anthropic_api_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error("Tutor request failed: %s", e)
        raise TutorUnavailableError(f"Tutor service unreachable: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if res.is_error:
        message = _error_message(res)
        logger.error("Tutor API error %s: %s", res.status_code, message)
        raise TutorResponseError(res.status_code, message)

    return res.json()


def reply_text(message: dict[str, Any]) -> str:
    """Concatenate the text blocks of a messages-API response."""
    return "".join(
        block.get("text", "")
        for block in message.get("content") or []
        if block.get("type") == "text"
    )
