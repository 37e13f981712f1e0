"""Prompt templates for consensus analysis."""

from typing import Any

# Prompt definitions
PROMPTS = {
    "recommendation_memo": {
        "description": "Investment memo built on the blended multi-method recommendation",
        "arguments": [{"name": "symbol", "required": True}],
    },
    "preset_comparison": {
        "description": "Compare the recommendation under each weight preset",
        "arguments": [{"name": "symbol", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "recommendation_memo":
        symbol = arguments.get("symbol", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Write an investment memo for {symbol}.

Use these tools in order:
1. get_summary_analysis("{symbol}")
2. get_method_scores("{symbol}") only if any method came back unavailable

Then provide:
1. **Recommendation**: BUY / HOLD / SELL with confidence and weighted score
2. **Method Breakdown**: one line per method with signal, score and confidence
3. **Strengths**: from the strengths list, verbatim
4. **Concerns**: from the concerns list, verbatim
5. **Gaps**: methods that were unavailable and why

Do not change the recommendation. Explain it.""",
                }
            ]
        }

    if name == "preset_comparison":
        symbol = arguments.get("symbol", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Compare how {symbol} looks under each weighting style.

Use these tools:
1. get_weight_presets()
2. get_summary_analysis("{symbol}", preset=<name>) once per preset

Then provide a table with one row per preset:
| Preset | Recommendation | Confidence | Weighted Score | Methods Used |

Finish with 2-3 sentences on where the presets agree, where they
disagree, and which methods drive the difference.""",
                }
            ]
        }

    return None
