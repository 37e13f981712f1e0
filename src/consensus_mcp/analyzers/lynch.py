"""Peter Lynch growth-at-a-reasonable-price analysis."""

from typing import Any

from consensus_mcp.analyzers.scoring import clamp, directional_signal, require_any, tier, tier_below

COMPONENT_WEIGHTS = {
    "garp": 0.35,
    "growth": 0.30,
    "business_quality": 0.25,
    "ten_bagger": 0.10,
}
BULLISH_MIN = 7.5
BEARISH_MAX = 4.5


def blended_growth(snapshot: dict[str, Any]) -> float | None:
    earnings = snapshot.get("earnings_growth")
    revenue = snapshot.get("revenue_growth")
    if earnings is not None and revenue is not None:
        return (earnings + revenue) / 2
    return earnings if earnings is not None else revenue


def analyze_garp(snapshot: dict[str, Any]) -> dict[str, Any]:
    """PEG computed from trailing P/E and blended growth; 3/10 when it cannot be computed."""
    pe = snapshot.get("price_to_earnings_ratio")
    growth = blended_growth(snapshot)
    peg = pe / (growth * 100) if pe and growth and growth > 0 else None
    score = tier_below(peg, [(0.5, 10), (1.0, 8), (1.5, 6), (2.0, 4)], default=2) if peg is not None else 3
    return {"peg_ratio": peg, "pe_ratio": pe, "growth_rate": growth, "score": score}


def analyze_growth(snapshot: dict[str, Any]) -> dict[str, Any]:
    revenue = snapshot.get("revenue_growth")
    earnings = snapshot.get("earnings_growth")
    consistent = (revenue or 0) > 0.05 and (earnings or 0) > 0.05
    score = (
        tier(revenue, [(0.20, 3), (0.10, 2), (0.05, 1)], strict=True)
        + tier(earnings, [(0.25, 4), (0.15, 3), (0.10, 2), (0.05, 1)], strict=True)
        + (1 if consistent else 0)
    )
    return {
        "revenue_growth": revenue,
        "earnings_growth": earnings,
        "consistent_growth": consistent,
        "score": min(10, score),
    }


def analyze_business_quality(snapshot: dict[str, Any]) -> dict[str, Any]:
    score = (
        tier(snapshot.get("gross_margin"), [(0.40, 2), (0.25, 1)], strict=True)
        + tier(snapshot.get("operating_margin"), [(0.20, 2), (0.10, 1)], strict=True)
        + tier_below(snapshot.get("debt_to_equity"), [(0.3, 3), (0.6, 2), (1.0, 1)])
        + tier(snapshot.get("return_on_equity"), [(0.20, 2), (0.15, 1)], strict=True)
    )
    return {"score": min(10, score)}


def analyze_ten_bagger(snapshot: dict[str, Any], growth: dict[str, Any]) -> dict[str, Any]:
    """Smaller companies with long growth runways have more room to multiply."""
    market_cap = snapshot.get("market_cap")
    size_points = tier_below(market_cap, [(2e9, 3), (10e9, 2)], default=1) if market_cap else 2
    fastest = max(growth["revenue_growth"] or 0, growth["earnings_growth"] or 0)
    # Years of runway: faster growers are assumed to sustain it longer
    runway = 10 if fastest > 0.25 else 7 if fastest > 0.15 else 5 if fastest > 0.08 else 3
    runway_points = 2 if runway > 7 else 1 if runway > 4 else 0
    score = min(10, size_points + runway_points)
    return {
        "growth_runway_years": runway,
        "probability": min(score * 10, 80),
        "score": score,
    }


def analyze_lynch(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Lynch GARP analysis.

    Returns:
        Dict with signal, confidence (5-95), component breakdowns and reasoning

    Raises:
        ValueError: If neither growth nor valuation data is available
    """
    require_any(
        snapshot,
        ("price_to_earnings_ratio", "revenue_growth", "earnings_growth"),
        "lynch",
    )

    garp = analyze_garp(snapshot)
    growth = analyze_growth(snapshot)
    quality = analyze_business_quality(snapshot)
    ten_bagger = analyze_ten_bagger(snapshot, growth)

    components = {
        "garp": garp,
        "growth": growth,
        "business_quality": quality,
        "ten_bagger": ten_bagger,
    }
    overall = round(sum(components[name]["score"] * w for name, w in COMPONENT_WEIGHTS.items()), 2)
    signal = directional_signal(overall, BULLISH_MIN, BEARISH_MAX)

    confidence = overall * 10
    if garp["peg_ratio"] is not None:
        confidence += 5
    if growth["consistent_growth"]:
        confidence += 5
    confidence = round(clamp(confidence, 5, 95))

    peg_text = f"PEG {garp['peg_ratio']:.2f}" if garp["peg_ratio"] is not None else "PEG unavailable"
    reasoning = (
        f"{peg_text}; growth {growth['score']}/10, quality {quality['score']}/10, "
        f"ten-bagger potential {ten_bagger['score']}/10. Overall {overall:.1f}/10 ({signal})."
    )

    return {
        "ticker": snapshot.get("ticker"),
        "signal": signal,
        "confidence": confidence,
        "overall_score": overall,
        "reasoning": reasoning,
        **components,
    }
