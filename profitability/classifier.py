"""
profitability/classifier.py

Maps spend/revenue pairs to a profitability status and month-over-month
profit series to a trend direction.
No parsing logic, no I/O, no side effects.
"""

from __future__ import annotations

from collections.abc import Mapping


class URLStatus:
    PROFITABLE = "profitable"
    IMPROVING = "improving"
    LOSING = "losing"
    TURNOFF = "turnoff"

    ALL: tuple[str, ...] = (PROFITABLE, IMPROVING, LOSING, TURNOFF)


class TrendDirection:
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


UNBOUNDED_ROI: float = 999.0
"""ROI reported when a URL earns revenue without any spend."""

PROFITABLE_ROI_THRESHOLD: float = 40.0
TURNOFF_ROI_THRESHOLD: float = -40.0
TREND_STABILITY_BAND: float = 1.0


def compute_roi(spend: float, revenue: float) -> float:
    """
    Return ROI in percent for *spend* (target currency) against *revenue*.

    Zero spend yields ``UNBOUNDED_ROI`` when there is revenue and ``0.0``
    otherwise.
    """
    if spend > 0:
        return (revenue - spend) / spend * 100
    return UNBOUNDED_ROI if revenue > 0 else 0.0


def classify_status(spend: float, revenue: float) -> str:
    """
    Classify one URL from its converted spend and its content revenue.

        ROI                 |  status
        --------------------|-------------
        spend = revenue = 0 |  improving
        > 40                |  profitable
        0 ... 40            |  improving
        -40 ... < 0         |  losing
        < -40               |  turnoff
    """
    if spend == 0 and revenue == 0:
        return URLStatus.IMPROVING
    roi = compute_roi(spend, revenue)
    if roi > PROFITABLE_ROI_THRESHOLD:
        return URLStatus.PROFITABLE
    if 0 <= roi <= PROFITABLE_ROI_THRESHOLD:
        return URLStatus.IMPROVING
    if roi < TURNOFF_ROI_THRESHOLD:
        return URLStatus.TURNOFF
    return URLStatus.LOSING


def classify_trend(profit_by_month: Mapping[str, float]) -> str:
    """
    Compare the earliest and latest month's profit.

    Month keys are ``YYYY-MM`` strings, so lexical order is chronological.
    Fewer than two months, or a change within the stability band, is stable.
    """
    if len(profit_by_month) < 2:
        return TrendDirection.STABLE
    months = sorted(profit_by_month)
    first = profit_by_month[months[0]]
    last = profit_by_month[months[-1]]
    if last > first + TREND_STABILITY_BAND:
        return TrendDirection.IMPROVING
    if last < first - TREND_STABILITY_BAND:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def per_click(amount: float, clicks: int) -> float:
    return amount / clicks if clicks > 0 else 0.0
