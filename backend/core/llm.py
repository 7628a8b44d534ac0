"""
Async LLM client for structured extraction.

Talks to an OpenAI-compatible chat completions endpoint (Groq by default)
in JSON mode. Provides:
- JSON completions (system prompt + user content -> raw JSON text)
- A ready-made completion callable for the material extractor
"""
import logging
from typing import Any, Dict, Optional

import httpx

from .config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The LLM endpoint was unreachable, timed out, or rejected the request."""


def _headers() -> dict:
    """Build headers for chat completion requests."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.GROQ_API_KEY}",
    }


def _error_message(resp: httpx.Response) -> str:
    """Best-effort extraction of the provider's error message."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200] or "Unknown error"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("message") or "Unknown error"
    return str(error or "Unknown error")


async def complete_json(
    system: str,
    prompt: str,
    model: Optional[str] = None,
    temperature: float = 0.0,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Send a JSON-mode chat completion request.

    Args:
        system: System prompt
        prompt: User message content
        model: Model to use (defaults to GROQ_EXTRACTION_MODEL)
        temperature: Sampling temperature (0.0-1.0)
        timeout: Request timeout in seconds (defaults to HTTP_TIMEOUT_SECONDS)
        client: Optional shared client (tests pass one with a mock transport)

    Returns:
        The message content string ("" if the provider returned none)

    Raises:
        LLMError: On missing key, non-2xx status, timeout, or transport failure
    """
    if not settings.GROQ_API_KEY:
        raise LLMError("No LLM API key configured (set GROQ_API_KEY)")

    payload: Dict[str, Any] = {
        "model": model or settings.GROQ_EXTRACTION_MODEL,
        "temperature": temperature,
        "response_format": {"type": "json_object"},
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
    }

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)

    try:
        resp = await client.post(settings.GROQ_API_URL, headers=_headers(), json=payload)
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.error(f"LLM request failed: {resp.status_code} - {message}")
            raise LLMError(f"LLM request failed: {resp.status_code} - {message}")
        data = resp.json()
    except httpx.HTTPError as e:
        logger.error(f"LLM request failed: {e}")
        raise LLMError(f"LLM request failed: {e}") from e
    except ValueError as e:
        raise LLMError(f"LLM response is not JSON: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    # OpenAI-style response: {"choices": [{"message": {"content": "..."}}]}
    choices = data.get("choices") if isinstance(data, dict) else None
    if not choices:
        return ""
    return (choices[0].get("message") or {}).get("content") or ""


async def extraction_completion(system: str, prompt: str) -> str:
    """Completion callable with extraction defaults (temperature 0, JSON mode)."""
    return await complete_json(system, prompt, temperature=0.0)
