"""Bill Ackman-style concentrated quality investing analysis."""

from typing import Any

from consensus_mcp.analyzers.scoring import clamp, directional_signal, pct, require_any, tier, tier_below

COMPONENT_WEIGHTS = {
    "business_quality": 0.30,
    "financial_discipline": 0.25,
    "valuation": 0.30,
    "activism_potential": 0.15,
}
BULLISH_MIN = 7.5
BEARISH_MAX = 4.0

# Conservative DCF assumptions
DCF_GROWTH_RATE = 0.05
DCF_DISCOUNT_RATE = 0.12
DCF_TERMINAL_MULTIPLE = 12
DCF_YEARS = 5
CONSERVATISM_FACTOR = 0.80

TARGET_OPERATING_MARGIN = 0.15


def assess_competitive_advantage(snapshot: dict[str, Any]) -> str:
    roe = snapshot.get("return_on_equity") or 0
    operating = snapshot.get("operating_margin") or 0
    gross = snapshot.get("gross_margin") or 0
    if roe > 0.20 and operating > 0.15 and gross > 0.40:
        return "strong"
    if roe > 0.15 and operating > 0.10 and gross > 0.25:
        return "moderate"
    return "weak"


def assess_share_count_trend(snapshot: dict[str, Any]) -> str:
    """Inferred from cash generation vs payout: high FCF with low payout suggests buybacks."""
    fcf_yield = snapshot.get("free_cash_flow_yield") or 0
    payout = snapshot.get("payout_ratio") or 0
    if fcf_yield > 0.08 and payout < 0.3:
        return "decreasing"
    if fcf_yield > 0.05:
        return "stable"
    return "increasing"


def analyze_business_quality(snapshot: dict[str, Any]) -> dict[str, Any]:
    fcf_yield = snapshot.get("free_cash_flow_yield")
    fcf_consistent = fcf_yield is not None and fcf_yield > 0.05
    advantage = assess_competitive_advantage(snapshot)
    score = (
        tier(snapshot.get("revenue_growth"), [(0.15, 3), (0.08, 2), (0, 1)], strict=True)
        + tier(snapshot.get("operating_margin"), [(0.20, 3), (0.15, 2), (0.10, 1)], strict=True)
        + tier(snapshot.get("return_on_equity"), [(0.20, 2), (0.15, 1)], strict=True)
        + (2 if fcf_consistent else 0)
        + {"strong": 2, "moderate": 1}.get(advantage, 0)
    )
    return {
        "competitive_advantage": advantage,
        "free_cash_flow_consistency": fcf_consistent,
        "score": min(10, score),
    }


def analyze_financial_discipline(snapshot: dict[str, Any]) -> dict[str, Any]:
    payout = snapshot.get("payout_ratio")
    capital_returns = payout is not None and payout > 0
    trend = assess_share_count_trend(snapshot)
    current_ratio = snapshot.get("current_ratio")
    healthy_liquidity = current_ratio is not None and 1.5 < current_ratio < 3.0
    score = (
        tier_below(snapshot.get("debt_to_equity"), [(0.3, 3), (0.6, 2), (1.0, 1)])
        + (2 if capital_returns else 0)
        + {"decreasing": 2, "stable": 1}.get(trend, 0)
        + (1 if healthy_liquidity else 0)
    )
    return {
        "capital_returns": capital_returns,
        "share_count_trend": trend,
        "score": min(10, score),
    }


def conservative_equity_value(snapshot: dict[str, Any]) -> float | None:
    """
    Discounted free cash flow over five years plus a terminal multiple,
    cut by the conservatism factor. None without positive FCF.
    """
    fcf = snapshot.get("free_cash_flow")
    if fcf is None or fcf <= 0:
        return None
    value = 0.0
    cash_flow = fcf
    for year in range(1, DCF_YEARS + 1):
        cash_flow *= 1 + DCF_GROWTH_RATE
        value += cash_flow / (1 + DCF_DISCOUNT_RATE) ** year
    value += cash_flow * DCF_TERMINAL_MULTIPLE / (1 + DCF_DISCOUNT_RATE) ** DCF_YEARS
    return value * CONSERVATISM_FACTOR


def analyze_valuation(snapshot: dict[str, Any]) -> dict[str, Any]:
    intrinsic = conservative_equity_value(snapshot)
    market_cap = snapshot.get("market_cap")
    margin_of_safety = (intrinsic - market_cap) / market_cap if intrinsic and market_cap else None
    score = (
        tier(margin_of_safety, [(0.40, 5), (0.25, 4), (0.10, 2), (0, 1)], strict=True)
        + tier_below(snapshot.get("price_to_earnings_ratio"), [(12, 2), (18, 1)])
        + tier(snapshot.get("free_cash_flow_yield"), [(0.08, 1)], strict=True)
    )
    return {
        "intrinsic_value": intrinsic,
        "margin_of_safety": margin_of_safety,
        "score": min(10, score),
    }


def analyze_activism_potential(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Room for an engaged owner to lift margins and asset efficiency."""
    revenue_growth = snapshot.get("revenue_growth") or 0
    operating = snapshot.get("operating_margin") or 0
    operational_gaps = revenue_growth > 0.05 and operating < TARGET_OPERATING_MARGIN

    score = 3 if operational_gaps else 0
    margin_improvement = None
    if 0 < operating < TARGET_OPERATING_MARGIN:
        margin_improvement = TARGET_OPERATING_MARGIN - operating
        score += 2

    roa = snapshot.get("return_on_assets")
    if roa is not None:
        score += 0 if roa > 0.10 else 1 if roa > 0.05 else 2

    if operational_gaps and margin_improvement is not None and margin_improvement > 0.05:
        opportunity = "high"
    elif operational_gaps or (margin_improvement is not None and margin_improvement > 0.02):
        opportunity = "medium"
    else:
        opportunity = "low"
    score += {"high": 2, "medium": 1}.get(opportunity, 0)

    return {
        "operational_gaps": operational_gaps,
        "margin_improvement": margin_improvement,
        "value_creation_opportunity": opportunity,
        "score": min(10, score),
    }


def analyze_ackman(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Ackman-style analysis.

    Returns:
        Dict with signal, confidence (5-95), overall_score (0-10),
        reasoning and the four component breakdowns

    Raises:
        ValueError: If no quality or valuation data is available
    """
    require_any(
        snapshot,
        ("operating_margin", "return_on_equity", "free_cash_flow", "price_to_earnings_ratio"),
        "ackman",
    )

    components = {
        "business_quality": analyze_business_quality(snapshot),
        "financial_discipline": analyze_financial_discipline(snapshot),
        "valuation": analyze_valuation(snapshot),
        "activism_potential": analyze_activism_potential(snapshot),
    }
    overall = round(sum(components[name]["score"] * w for name, w in COMPONENT_WEIGHTS.items()), 2)
    signal = directional_signal(overall, BULLISH_MIN, BEARISH_MAX)

    quality = components["business_quality"]
    valuation = components["valuation"]
    confidence = overall * 9
    if quality["competitive_advantage"] == "strong":
        confidence += 5
    if valuation["margin_of_safety"] is not None and valuation["margin_of_safety"] > 0.20:
        confidence += 5
    if (snapshot.get("return_on_equity") or 0) > 0.20:
        confidence += 5
    confidence = round(clamp(confidence, 5, 95))

    reasoning = (
        f"{quality['competitive_advantage'].capitalize()} competitive position "
        f"(quality {quality['score']}/10), discipline "
        f"{components['financial_discipline']['score']}/10, margin of safety "
        f"{pct(valuation['margin_of_safety'])}, "
        f"{components['activism_potential']['value_creation_opportunity']} activist opportunity."
    )

    return {
        "ticker": snapshot.get("ticker"),
        "signal": signal,
        "confidence": confidence,
        "overall_score": overall,
        "reasoning": reasoning,
        **components,
    }
