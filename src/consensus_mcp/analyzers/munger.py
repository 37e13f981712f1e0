"""Munger-style business quality analysis on a 0-10 scale."""

from typing import Any

from consensus_mcp.analyzers.scoring import directional_signal, pct, require_any, tier

# Quality > Predictability = Management > Valuation
COMPONENT_WEIGHTS = {
    "moat": 0.35,
    "predictability": 0.25,
    "management": 0.25,
    "valuation": 0.15,
}
BULLISH_MIN = 7.5
BEARISH_MAX = 4.5


def score_moat(snapshot: dict[str, Any]) -> dict[str, float]:
    """Return on capital, pricing power, capital intensity and intangibles."""
    pb = snapshot.get("price_to_book_ratio")
    parts = {
        "roic": tier(snapshot.get("return_on_invested_capital"), [(0.15, 10), (0.10, 7), (0.05, 4)]),
        "pricing_power": tier(snapshot.get("gross_margin"), [(0.40, 10), (0.25, 7), (0.15, 4)]),
        "capital_intensity": tier(snapshot.get("asset_turnover"), [(1.5, 10), (1.0, 7), (0.5, 4)]),
        "intangibles": tier(pb, [(3.0, 8), (1.5, 6)], default=5),
    }
    parts["score"] = sum(parts.values()) / 4
    return parts


def score_management(snapshot: dict[str, Any]) -> dict[str, float]:
    """Capital allocation, leverage, liquidity and payout discipline."""
    roe = snapshot.get("return_on_equity") or 0
    roa = snapshot.get("return_on_assets") or 0
    if roe >= 0.15 and roa >= 0.08:
        allocation = 10
    elif roe >= 0.10 and roa >= 0.05:
        allocation = 7
    else:
        allocation = 4

    de = snapshot.get("debt_to_equity") or 0
    debt = 10 if de <= 0.3 else 7 if de <= 0.7 else 3

    current_ratio = snapshot.get("current_ratio") or 0
    if 1.5 <= current_ratio <= 3.0:
        cash = 10
    elif current_ratio >= 1.0:
        cash = 6
    else:
        cash = 2

    payout = snapshot.get("payout_ratio") or 0
    payout_score = 8 if 0 < payout <= 0.6 else 5 if payout > 0.6 else 6

    parts = {
        "capital_allocation": allocation,
        "debt_management": debt,
        "cash_management": cash,
        "payout_discipline": payout_score,
        # Share count history is not in the snapshot; neutral
        "share_count": 6,
    }
    parts["score"] = sum(parts.values()) / 5
    return parts


def score_predictability(snapshot: dict[str, Any]) -> dict[str, float]:
    """Steady growth, margins and cash generation."""
    growth = snapshot.get("revenue_growth") or 0
    if 0.05 <= growth <= 0.15:
        revenue = 10
    elif growth >= 0:
        revenue = 7
    else:
        revenue = 3
    parts = {
        "revenue_stability": revenue,
        "operating_consistency": tier(
            snapshot.get("operating_margin"), [(0.15, 10), (0.08, 7), (0, 4)], default=1, strict=True
        ),
        "margin_consistency": tier(
            snapshot.get("net_margin"), [(0.10, 10), (0.05, 7), (0, 4)], default=1, strict=True
        ),
        "cash_generation": tier(
            snapshot.get("free_cash_flow_yield"), [(0.08, 10), (0.04, 7), (0, 4)], default=1, strict=True
        ),
    }
    parts["score"] = sum(parts.values()) / 4
    return parts


def score_valuation(snapshot: dict[str, Any]) -> dict[str, float]:
    """Free-cash-flow yield as the single valuation yardstick."""
    fcf_yield = snapshot.get("free_cash_flow_yield")
    return {
        "fcf_yield": fcf_yield if fcf_yield is not None else 0.0,
        "score": tier(fcf_yield, [(0.08, 10), (0.05, 7), (0.03, 4)], default=1),
    }


def analyze_munger(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Munger-style analysis.

    Returns:
        Dict with signal (bullish/neutral/bearish), confidence (0-95),
        overall_score (0-10), reasoning and the four component breakdowns

    Raises:
        ValueError: If no profitability data is available
    """
    require_any(
        snapshot,
        ("return_on_invested_capital", "return_on_equity", "gross_margin", "operating_margin"),
        "munger",
    )

    components = {
        "moat": score_moat(snapshot),
        "management": score_management(snapshot),
        "predictability": score_predictability(snapshot),
        "valuation": score_valuation(snapshot),
    }
    overall = round(sum(components[name]["score"] * w for name, w in COMPONENT_WEIGHTS.items()), 2)

    signal = directional_signal(overall, BULLISH_MIN, BEARISH_MAX)
    if signal == "bullish":
        confidence = min(95.0, 60 + (overall - BULLISH_MIN) * 14)
    elif signal == "bearish":
        confidence = min(95.0, 60 + (BEARISH_MAX - overall) * 14)
    else:
        confidence = 50 + abs(overall - 6) * 5

    reasoning = (
        f"Moat {components['moat']['score']:.1f}/10, "
        f"predictability {components['predictability']['score']:.1f}/10, "
        f"management {components['management']['score']:.1f}/10, "
        f"valuation {components['valuation']['score']:.1f}/10 "
        f"(FCF yield {pct(snapshot.get('free_cash_flow_yield'))})."
    )

    return {
        "ticker": snapshot.get("ticker"),
        "signal": signal,
        "confidence": round(confidence, 1),
        "overall_score": overall,
        "reasoning": reasoning,
        **components,
    }
