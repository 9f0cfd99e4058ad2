"""Google Gemini API wrapper for feature extraction prompts."""

import asyncio
import logging

from google import genai
from google.genai import types

from config import settings

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def _generate(client: genai.Client, prompt: str, model: str) -> str:
    response = client.models.generate_content(
        model=model,
        contents=prompt,
        config=types.GenerateContentConfig(
            temperature=0.0,
            max_output_tokens=1024,
            response_mime_type="application/json",
        ),
    )
    return (response.text or "").strip()


async def generate_text(prompt: str, model: str | None = None) -> str:
    """Send a prompt to Gemini and return the raw response text.

    Tries the primary model first and the fallback model on failure. Raises
    RuntimeError when Gemini is not configured; API errors propagate so the
    caller's retry policy can handle them.
    """
    client = get_client()
    if client is None:
        raise RuntimeError("Gemini model not configured (GEMINI_API_KEY missing)")

    primary = model or settings.gemini_model
    try:
        return await asyncio.to_thread(_generate, client, prompt, primary)
    except Exception as e:
        fallback = settings.gemini_fallback_model
        if not fallback or fallback == primary:
            raise
        logger.warning("Primary model %s failed, trying fallback %s: %s", primary, fallback, e)
        return await asyncio.to_thread(_generate, client, prompt, fallback)
