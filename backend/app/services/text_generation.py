"""
Text generation client.

Calls the Gemini generateContent REST API for dashboard summaries and
support-chat auto-replies. The provider is optional: without an API key,
or when it fails, callers get a fixed fallback sentence and the failure is
logged.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from backend.app.core.config import settings
from backend.app.core.reliability import CircuitOpenError, ai_circuit_breaker

logger = logging.getLogger("eparcel")

MISSING_KEY_ANALYSIS = "AI Analysis unavailable (Missing API Key)."
EMPTY_ANALYSIS = "Analysis could not be generated."
FAILED_ANALYSIS = "Error generating analysis."
OFFLINE_REPLY = "Auto-reply: System currently offline."
EMPTY_REPLY = "I received your message."
FAILED_REPLY = "I received your message, but I cannot reply right now."


class TextGenerationError(Exception):
    """Raised when the provider call fails (transport, HTTP status or payload)."""


class TextGenerator:
    """Minimal Gemini client."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = settings.gemini_model,
        api_url: str = settings.gemini_api_url,
        timeout: float = settings.ai_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._transport = transport
        self._model = model
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def generate(self, prompt: str) -> Optional[str]:
        """
        Generate text for a prompt.

        Returns:
            The generated text, or None if the provider returned no text.

        Raises:
            TextGenerationError: On transport, HTTP or payload errors.
        """
        url = f"{self._api_url}/{self._model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self._api_key}, json=body)
                response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise TextGenerationError("Text generation request timed out") from e
        except httpx.HTTPStatusError as e:
            raise TextGenerationError(f"Provider returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise TextGenerationError(f"Text generation request failed: {e}") from e

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> Optional[str]:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts).strip()
        return text or None


def get_text_generator() -> TextGenerator:
    """FastAPI dependency; overridden in tests."""
    return TextGenerator(api_key=settings.gemini_api_key)


async def _generate_guarded(generator: TextGenerator, prompt: str) -> Optional[str]:
    return await ai_circuit_breaker.call(generator.generate, prompt)


async def generate_dashboard_analysis(generator: TextGenerator, stats: Dict[str, Any], role: str) -> str:
    """Short executive summary of dashboard stats for a user of `role`."""
    if not generator.is_configured:
        return MISSING_KEY_ANALYSIS

    prompt = (
        "You are an intelligent logistics assistant for the eParcel system.\n"
        f"Analyze the following JSON statistics for a {role} user and provide a brief, "
        "professional executive summary (max 50 words) highlighting key performance "
        "indicators or action items.\n\n"
        f"Stats: {json.dumps(stats)}"
    )
    try:
        text = await _generate_guarded(generator, prompt)
    except (TextGenerationError, CircuitOpenError) as e:
        logger.error("Dashboard analysis failed: %s", e)
        return FAILED_ANALYSIS
    return text or EMPTY_ANALYSIS


async def simulate_chat_response(
    generator: TextGenerator,
    last_message: str,
    sender_role: str,
    context: str,
) -> str:
    """Support-agent style reply to the user's last chat message."""
    if not generator.is_configured:
        return OFFLINE_REPLY

    prompt = (
        "You are acting as a helpful support agent in the eParcel logistics system.\n"
        f"The user who sent the message is a {sender_role}.\n"
        f"Context: {context}\n"
        f'User Message: "{last_message}"\n\n'
        "Reply naturally as if you are the staff member or client on the other end. "
        "Keep it short and helpful."
    )
    try:
        text = await _generate_guarded(generator, prompt)
    except (TextGenerationError, CircuitOpenError) as e:
        logger.error("Chat auto-reply failed: %s", e)
        return FAILED_REPLY
    return text or EMPTY_REPLY
