"""Investment Consensus MCP Server using FastMCP."""

import asyncio
import json
import logging
import os
from typing import Any

from fastmcp import FastMCP

from consensus_mcp import SCHEMA_VERSION, SERVER_VERSION
from consensus_mcp.data.yfinance_client import shutdown_executor
from consensus_mcp.prompts.templates import get_prompt
from consensus_mcp.tools import distribute_weights, method_scores, summary_analysis, weight_presets

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="investment-consensus",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_summary_analysis(
    symbol: str,
    weights: dict[str, float] | None = None,
    selected_methods: list[str] | None = None,
    preset: str | None = None,
) -> str:
    """
    Blend Buffett, Munger, Lynch, Ackman and Quantitative analyses into one
    BUY/HOLD/SELL recommendation.

    Each selected method is scored 0-100 with a confidence, weighted, and
    combined. BUY needs a weighted score >= 70 backed by at least two BUY
    signals; SELL needs <= 39 backed by at least two SELL signals;
    everything else is HOLD.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, MSFT)
        weights: Method name -> relative weight 0-100 (e.g., {"warren_buffett": 40})
        selected_methods: Methods to run (default: all five)
        preset: "Value Investor", "Growth Focused" or "Comprehensive"; applied first

    Returns:
        JSON with per-method scores, the weights used, and the recommendation
        with key insights, strengths and concerns
    """
    result = await summary_analysis(
        symbol=symbol,
        weights=weights,
        selected_methods=selected_methods,
        preset=preset,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_method_scores(symbol: str, methods: list[str] | None = None) -> str:
    """
    Per-method scores without blending.

    Args:
        symbol: Stock ticker symbol
        methods: Methods to run (default: all five)

    Returns:
        JSON with signal, score, confidence and reasoning per method
    """
    result = await method_scores(symbol=symbol, methods=methods)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_weight_presets() -> str:
    """
    List the named weight presets and the default weights.

    Returns:
        JSON with each preset's selection and weights
    """
    result = await weight_presets()
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_distributed_weights(selected_methods: list[str]) -> str:
    """
    Split 100 points equally across the given methods.

    Leftover points go to the earliest methods in the order
    Buffett, Munger, Lynch, Ackman, Quantitative.

    Args:
        selected_methods: Methods to weight

    Returns:
        JSON with selected_methods, weights and total
    """
    result = await distribute_weights(selected_methods=selected_methods)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# PROMPTS
# ============================================================================


def _prompt_text(name: str, arguments: dict[str, Any], fallback: str) -> str:
    result = get_prompt(name, arguments)
    if result:
        return result["messages"][0]["content"]
    return fallback


@mcp.prompt
def recommendation_memo(symbol: str) -> str:
    """Write an investment memo around the blended recommendation."""
    return _prompt_text(
        "recommendation_memo",
        {"symbol": symbol},
        f"Analyze {symbol} using get_summary_analysis.",
    )


@mcp.prompt
def preset_comparison(symbol: str) -> str:
    """Compare the recommendation across weight presets."""
    return _prompt_text(
        "preset_comparison",
        {"symbol": symbol},
        f"Compare presets for {symbol} using get_summary_analysis.",
    )


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Investment Consensus MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())


if __name__ == "__main__":
    main()
