"""
LLM client for trade analysis.

Talks to an OpenAI-compatible chat completions endpoint. Failures surface
as UpstreamFailure so routes return the upstream message with a 500.
Structured analyses ask for JSON and go through ``complete_json``.
"""

import json
import logging
import re
from typing import Any, Optional

from openai import OpenAI

from tradersjournal.config import settings, get_llm_api_key, get_llm_base_url, get_llm_model
from tradersjournal.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Chat-completion client used for AI trade summaries.

    The LLM only narrates the trades it is given; it never sees other users' data.
    """

    def __init__(self, client: Optional[Any] = None):
        """Initialize LLM client. ``client`` overrides the OpenAI client (tests)."""
        self.api_key = get_llm_api_key()
        self.base_url = get_llm_base_url()
        self.model = get_llm_model()
        self._client = client

    @property
    def is_available(self) -> bool:
        """Check if LLM is available and enabled."""
        if self._client is not None:
            return True
        return settings.llm_enabled and self.api_key is not None

    def _get_client(self):
        """Get or create the OpenAI-compatible client."""
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
            )
        return self._client

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run one chat completion.

        Raises:
            UpstreamFailure: no API key configured, or the API call failed
        """
        if not self.is_available:
            raise UpstreamFailure("LLM API key not set.")

        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens or settings.llm_max_tokens,
                temperature=settings.llm_temperature if temperature is None else temperature,
            )
        except Exception as e:
            logger.error(f"LLM generation failed: {e}")
            raise UpstreamFailure("LLM API error", message=str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        return content or "No summary generated."

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> dict:
        """
        Run one chat completion that must answer with a JSON object.

        Raises:
            UpstreamFailure: the call failed, or the reply held no JSON object
        """
        response = self.complete(system_prompt, user_prompt, max_tokens=max_tokens, temperature=temperature)
        parsed = parse_json_response(response)
        if parsed is None:
            logger.warning(f"Could not parse JSON from LLM response (length: {len(response)})")
            raise UpstreamFailure("Invalid response format", message="AI reply was not a JSON object")
        return parsed


def _loads_object(text: str) -> Optional[dict]:
    text = text.strip()
    if not text:
        return None
    # Trailing commas before } or ] are the usual model slip
    for candidate in (text, re.sub(r",\s*([}\]])", r"\1", text)):
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, dict):
            return result
    return None


def parse_json_response(response: Optional[str]) -> Optional[dict]:
    """
    Pull a JSON object out of an LLM reply.

    Tries the bare reply, then fenced code blocks, then the outermost braces.
    Returns None if none of them holds an object.
    """
    if not response:
        return None

    result = _loads_object(response)
    if result is not None:
        return result

    for block in re.findall(r"```(?:json)?\s*([\s\S]*?)\s*```", response):
        result = _loads_object(block)
        if result is not None:
            return result

    start = response.find("{")
    end = response.rfind("}")
    if start != -1 and end > start:
        return _loads_object(response[start:end + 1])
    return None


# Singleton instance cache
_llm_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get LLM client instance (singleton)."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
