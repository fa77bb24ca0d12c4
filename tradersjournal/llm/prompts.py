"""
Prompt templates for AI trade summaries and structured trade analyses.
"""

import json
from typing import Any, Iterable, Literal, Mapping

SummaryMode = Literal["tags", "strategy"]

SYSTEM_PROMPTS: dict[str, str] = {
    "tags": "You are a helpful trading performance analyst.",
    "strategy": "You are a helpful trading performance coach.",
}

INTRODUCTIONS: dict[str, str] = {
    "tags": (
        "You are a trading performance analyst AI. Given the following trade records "
        "with tags, analyze the tag-trade relations, tag performance, and provide "
        "actionable insights."
    ),
    "strategy": (
        "You are a trading performance coach AI. Given the following trade records, "
        "analyze the user's trading strengths, weaknesses, and provide actionable, "
        "specific strategy improvement tips."
    ),
}

CLOSINGS: dict[str, str] = {
    "tags": "Summary:",
    "strategy": "Actionable Insights:",
}


def format_trade_line(trade: Mapping[str, Any]) -> str:
    tags = trade.get("tags")
    if isinstance(tags, list):
        tags = ", ".join(tags)
    return (
        f"Date: {trade.get('date')}, Pair: {trade.get('currency_pair')}, "
        f"Type: {trade.get('trade_type')}, P/L: {trade.get('profit_loss')}, "
        f"Tag: {tags or '-'}"
    )


def build_summary_prompt(trades: Iterable[Mapping[str, Any]], mode: SummaryMode = "tags") -> tuple[str, str]:
    """
    Build the (system, user) prompt pair for a trade summary.

    Unknown modes fall back to ``tags``.
    """
    if mode not in INTRODUCTIONS:
        mode = "tags"
    lines = "\n".join(format_trade_line(t) for t in trades)
    user_prompt = f"{INTRODUCTIONS[mode]}\n\nTrades:\n{lines}\n\n{CLOSINGS[mode]}"
    return SYSTEM_PROMPTS[mode], user_prompt


# ==================== STRUCTURED ANALYSES ====================

BEHAVIOR_SYSTEM_PROMPT = "You are a helpful trading psychologist. Respond only with valid JSON."

BEHAVIOR_PROMPT = """You are a professional trading psychologist. Analyze the following trading data to identify behavioral patterns and psychological insights.

Trading Data:
{trades}

Please provide a JSON response with the following structure:
{{
  "behavioral_patterns": ["pattern1", "pattern2", "pattern3"],
  "psychological_insights": "detailed psychological analysis text",
  "actionable_steps": ["step1", "step2", "step3"]
}}

Focus on:
- Emotional decision-making patterns
- Risk-taking behavior
- Consistency in trading approach
- Psychological biases
- Specific behavioral improvements"""

RISK_SYSTEM_PROMPT = "You are a helpful risk management analyst. Respond only with valid JSON."

RISK_PROMPT = """You are a professional risk management analyst. Analyze the following trading data and provide a comprehensive risk assessment.

Trading Data:
{trades}

Please provide a JSON response with the following structure:
{{
  "risk_score": number (1-100),
  "risk_level": "low" | "moderate" | "high" | "extreme",
  "analysis": "detailed risk analysis text",
  "recommendations": ["recommendation1", "recommendation2", "recommendation3"]
}}

Focus on:
- Position sizing consistency
- Risk-to-reward ratios
- Stop-loss discipline
- Overall risk exposure
- Specific recommendations for improvement"""

PATTERNS_SYSTEM_PROMPT = "You are a helpful trading performance analyst."

PATTERNS_PROMPT = """You are a professional trading analyst. Analyze the following trading data and provide insights on patterns, strengths, weaknesses, and actionable recommendations.

Trading Data:
{trades}

Please provide a comprehensive analysis including:
1. Key patterns identified
2. Strengths in the trading approach
3. Areas for improvement
4. Specific actionable recommendations

Format the response in markdown with clear sections."""

STRATEGY_SYSTEM_PROMPT = "You are a helpful trading strategist."

STRATEGY_PROMPT = """You are a professional trading strategist. Based on the following performance data, provide strategic suggestions for improvement.

Performance Data:
{performance}

Please provide a comprehensive analysis with specific strategy suggestions including:
1. Current strategy assessment
2. Identified weaknesses
3. Specific strategy improvements
4. Risk management enhancements
5. Entry/exit optimization suggestions

Format the response in markdown with clear sections and actionable recommendations."""


def format_behavior_line(trade: Mapping[str, Any]) -> str:
    return (
        f"Date: {trade.get('date')}, Pair: {trade.get('currency_pair')}, "
        f"Type: {trade.get('trade_type')}, P/L: {trade.get('profit_loss')}, "
        f"Entry: {trade.get('entry_price')}, Exit: {trade.get('exit_price')}, "
        f"Duration: {trade.get('duration') or 'N/A'}"
    )


def format_risk_line(trade: Mapping[str, Any]) -> str:
    return (
        f"Date: {trade.get('date')}, Pair: {trade.get('currency_pair')}, "
        f"Type: {trade.get('trade_type')}, P/L: {trade.get('profit_loss')}, "
        f"Lot Size: {trade.get('lot_size')}, Pips: {trade.get('pips')}"
    )


def _trade_block(trades: Iterable[Mapping[str, Any]], formatter) -> str:
    return "\n".join(formatter(t) for t in trades)


def build_behavior_prompt(trades: Iterable[Mapping[str, Any]]) -> tuple[str, str]:
    return BEHAVIOR_SYSTEM_PROMPT, BEHAVIOR_PROMPT.format(trades=_trade_block(trades, format_behavior_line))


def build_risk_prompt(trades: Iterable[Mapping[str, Any]]) -> tuple[str, str]:
    return RISK_SYSTEM_PROMPT, RISK_PROMPT.format(trades=_trade_block(trades, format_risk_line))


def build_patterns_prompt(trades: Iterable[Mapping[str, Any]]) -> tuple[str, str]:
    return PATTERNS_SYSTEM_PROMPT, PATTERNS_PROMPT.format(trades=_trade_block(trades, format_trade_line))


def build_strategy_prompt(performance: Mapping[str, Any]) -> tuple[str, str]:
    """Prompt pair over precomputed journal statistics (no raw trades)."""
    return STRATEGY_SYSTEM_PROMPT, STRATEGY_PROMPT.format(performance=json.dumps(performance, indent=2, default=str))
