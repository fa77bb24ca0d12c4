"""LLM integration for AI trade summaries and analyses."""

from tradersjournal.llm.client import LLMClient, get_llm_client, parse_json_response
from tradersjournal.llm.prompts import build_summary_prompt

__all__ = ["LLMClient", "get_llm_client", "parse_json_response", "build_summary_prompt"]
