"""
LLM Service
============
OpenAI client wrapper for chat completions.
The client is created lazily so a missing API key only fails the first call.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from config.settings import MODELS

logger = logging.getLogger(__name__)

# Module-level client (initialized once)
_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    """Get or create the OpenAI async client."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            api_key=MODELS["api_key"] or None,
            base_url=MODELS["endpoint"] or None,
        )
    return _client


async def chat(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    response_format: Optional[dict] = None,
) -> dict:
    """
    Send a chat completion request.

    Args:
        messages: List of message dicts (role, content)
        model: Model deployment to use (defaults to main model from settings)
        temperature: Override temperature
        max_tokens: Override max tokens
        response_format: Optional structured output hint, e.g. {"type": "json_object"}

    Returns:
        Dict with the response content, role and token usage
    """
    client = get_client()
    model = model or MODELS["main"]
    temperature = temperature if temperature is not None else MODELS["temperature"]
    max_tokens = max_tokens or MODELS["max_tokens"]

    kwargs = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if response_format:
        kwargs["response_format"] = response_format

    response = await client.chat.completions.create(**kwargs)
    usage = response.usage
    return {
        "content": response.choices[0].message.content or "",
        "role": response.choices[0].message.role,
        "usage": {
            "prompt_tokens": usage.prompt_tokens if usage else 0,
            "completion_tokens": usage.completion_tokens if usage else 0,
        },
    }
