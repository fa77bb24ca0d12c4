"""
Structured AI analyses of a trader's journal.

Each analysis turns the caller's trades (or their journal statistics) into a
prompt, runs it through ``LLMClient`` and returns a plain dict for the API.
JSON replies are validated; a reply that does not fit raises UpstreamFailure.
"""

import logging
from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from tradersjournal.errors import UpstreamFailure
from tradersjournal.llm.client import LLMClient
from tradersjournal.llm.prompts import (
    build_behavior_prompt,
    build_patterns_prompt,
    build_risk_prompt,
    build_strategy_prompt,
)

logger = logging.getLogger(__name__)

# Behavioral patterns need a handful of trades to mean anything
MIN_BEHAVIOR_TRADES = 5


class _AnalysisReply(BaseModel):
    # Models answer in either snake_case or camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BehaviorAnalysis(_AnalysisReply):
    behavioral_patterns: list[str] = Field(default_factory=list)
    psychological_insights: str = ""
    actionable_steps: list[str] = Field(default_factory=list)


class RiskAssessment(_AnalysisReply):
    risk_score: int = Field(ge=1, le=100)
    risk_level: Literal["low", "moderate", "high", "extreme"]
    analysis: str = ""
    recommendations: list[str] = Field(default_factory=list)


def _validated(model: type[BaseModel], payload: dict, kind: str) -> dict:
    try:
        return model.model_validate(payload).model_dump()
    except ValidationError as e:
        logger.warning(f"Unexpected {kind} reply from LLM: {e.error_count()} errors")
        raise UpstreamFailure("Invalid response format", message=f"AI {kind} reply did not match the expected shape") from e


def analyze_behavior(llm: LLMClient, trades: Sequence[Mapping[str, Any]]) -> dict:
    """Behavioral patterns, psychological insights and next steps."""
    if len(trades) < MIN_BEHAVIOR_TRADES:
        return BehaviorAnalysis(
            psychological_insights="Not enough trading data to analyze behavioral patterns.",
            actionable_steps=["Add more trades to get a comprehensive behavioral analysis"],
        ).model_dump()

    system_prompt, user_prompt = build_behavior_prompt(trades)
    payload = llm.complete_json(system_prompt, user_prompt, max_tokens=700, temperature=0.6)
    return _validated(BehaviorAnalysis, payload, "behavior")


def assess_risk(llm: LLMClient, trades: Sequence[Mapping[str, Any]]) -> dict:
    """Risk score (1-100), risk level, narrative and recommendations."""
    if not trades:
        return RiskAssessment(
            risk_score=50,
            risk_level="moderate",
            analysis="Not enough trading data to analyze risk profile.",
            recommendations=["Add more trades to get a comprehensive risk assessment"],
        ).model_dump()

    system_prompt, user_prompt = build_risk_prompt(trades)
    payload = llm.complete_json(system_prompt, user_prompt, max_tokens=600, temperature=0.5)
    return _validated(RiskAssessment, payload, "risk")


def analyze_patterns(llm: LLMClient, trades: Sequence[Mapping[str, Any]]) -> dict:
    """Markdown write-up of patterns, strengths and weaknesses."""
    if not trades:
        return {"analysis": "Not enough trading data to analyze patterns."}

    system_prompt, user_prompt = build_patterns_prompt(trades)
    return {"analysis": llm.complete(system_prompt, user_prompt, max_tokens=800, temperature=0.7)}


def suggest_strategy(llm: LLMClient, performance: Mapping[str, Any]) -> dict:
    """Markdown strategy suggestions from journal statistics."""
    if not performance.get("total_trades"):
        return {"suggestions": "Not enough performance data to generate strategy suggestions."}

    system_prompt, user_prompt = build_strategy_prompt(performance)
    return {"suggestions": llm.complete(system_prompt, user_prompt, max_tokens=800, temperature=0.7)}
