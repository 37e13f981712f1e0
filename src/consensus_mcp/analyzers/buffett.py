"""Buffett-style compounding-machine analysis.

A compounding machine earns a high return on capital, reinvests a large
share of it, and earns a high return on that new capital too.
"""

from typing import Any

from consensus_mcp.analyzers.scoring import clamp, pct, require_any

ROIC_MIN = 0.15
REINVESTMENT_MIN = 0.20
ROIIC_MIN = 0.15

# Sub-score ceilings; a metric below its threshold is capped at half
ROIC_POINTS = 40
REINVESTMENT_POINTS = 30
ROIIC_POINTS = 30
PARTIAL_PASS_CAP = 75


def _sub_score(value: float, threshold: float, points: float, passed: bool) -> float:
    raw = (value / threshold) * points
    return min(points, raw) if passed else min(points / 2, raw)


def estimate_roiic(snapshot: dict[str, Any]) -> float:
    """Return on incremental capital from margin, turnover and growth, bounded to [0, 1]."""
    operating_margin = snapshot.get("operating_margin") or 0
    asset_turnover = snapshot.get("asset_turnover") or 1
    revenue_growth = snapshot.get("revenue_growth") or 0
    return clamp(operating_margin * asset_turnover * (1 + revenue_growth), 0, 1)


def analyze_buffett(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Score a company as a compounding machine.

    Args:
        snapshot: FinancialSnapshot dict

    Returns:
        Dict with roic, reinvestment_rate, roiic, is_compounding_machine,
        compounding_score (0-100), sub-scores, investment_thesis,
        strengths and concerns

    Raises:
        ValueError: If no return or growth data is available
    """
    require_any(
        snapshot,
        ("return_on_invested_capital", "revenue_growth", "earnings_growth", "operating_margin"),
        "buffett",
    )

    roic = snapshot.get("return_on_invested_capital") or 0
    reinvestment_rate = max(
        snapshot.get("revenue_growth") or 0,
        (snapshot.get("earnings_growth") or 0) * 0.7,
    )
    roiic = estimate_roiic(snapshot)

    meets_roic = roic >= ROIC_MIN
    meets_reinvestment = reinvestment_rate >= REINVESTMENT_MIN
    meets_roiic = roiic >= ROIIC_MIN
    is_compounding_machine = meets_roic and meets_reinvestment and meets_roiic

    roic_score = _sub_score(roic, ROIC_MIN, ROIC_POINTS, meets_roic)
    reinvestment_score = _sub_score(
        reinvestment_rate, REINVESTMENT_MIN, REINVESTMENT_POINTS, meets_reinvestment
    )
    roiic_score = _sub_score(roiic, ROIIC_MIN, ROIIC_POINTS, meets_roiic)

    compounding_score = max(0.0, roic_score + reinvestment_score + roiic_score)
    if not is_compounding_machine:
        compounding_score = min(PARTIAL_PASS_CAP, compounding_score)

    strengths: list[str] = []
    concerns: list[str] = []
    if meets_roic:
        strengths.append(f"High return on invested capital ({pct(roic)})")
    else:
        concerns.append(f"ROIC of {pct(roic)} is below the {pct(ROIC_MIN)} hurdle")
    if meets_reinvestment:
        strengths.append(f"Reinvesting heavily for growth ({pct(reinvestment_rate)})")
    else:
        concerns.append(f"Limited reinvestment runway ({pct(reinvestment_rate)})")
    if meets_roiic:
        strengths.append(f"New capital earns attractive returns ({pct(roiic)})")
    else:
        concerns.append(f"Incremental returns are modest ({pct(roiic)})")

    if is_compounding_machine:
        thesis = (
            f"{snapshot.get('ticker', 'This company')} qualifies as a compounding machine: "
            "high returns on capital, heavy reinvestment and strong incremental returns."
        )
    else:
        failed = 3 - sum((meets_roic, meets_reinvestment, meets_roiic))
        thesis = (
            f"{snapshot.get('ticker', 'This company')} misses {failed} of 3 compounding "
            "criteria; returns may not compound at the rate long-term owners need."
        )

    return {
        "roic": roic,
        "reinvestment_rate": reinvestment_rate,
        "roiic": roiic,
        "is_compounding_machine": is_compounding_machine,
        "compounding_score": round(compounding_score),
        "roic_score": round(roic_score),
        "reinvestment_score": round(reinvestment_score),
        "roiic_score": round(roiic_score),
        "investment_thesis": thesis,
        "strengths": strengths,
        "concerns": concerns,
    }
