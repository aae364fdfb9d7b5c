"""
Visitor totals per calendar period, compared against the previous period.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Optional

from rptra import date_utils
from rptra.date_utils import DateRange
from rptra.schemas import AGE_BRACKETS, PeriodTotals, VisitPeriod, VisitSummary


def _count(visit: dict, bracket: str) -> int:
    # Older records stored the counts as strings.
    try:
        return int(float(visit.get(bracket) or 0))
    except (TypeError, ValueError):
        return 0


def visit_total(visit: dict) -> int:
    return sum(_count(visit, bracket) for bracket in AGE_BRACKETS)


def period_totals(visits: Iterable[dict], period: DateRange) -> PeriodTotals:
    brackets = {bracket: 0 for bracket in AGE_BRACKETS}
    days = 0
    for visit in visits:
        visit_date = date_utils.parse_datetime(visit.get("date"))
        if visit_date is None or not period.contains(visit_date):
            continue
        days += 1
        for bracket in AGE_BRACKETS:
            brackets[bracket] += _count(visit, bracket)
    return PeriodTotals(
        start=period.start.isoformat(),
        end=period.end.isoformat(),
        total=sum(brackets.values()),
        days=days,
        brackets=brackets,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def summarize_visits(
    visits: Iterable[dict], period: VisitPeriod, now: Optional[datetime] = None
) -> VisitSummary:
    visits = list(visits)
    period = VisitPeriod(period)
    current_range, previous_range = date_utils.period_ranges(period.value, now)
    current = period_totals(visits, current_range)
    previous = period_totals(visits, previous_range)
    change = current.total - previous.total
    change_percent = (
        _round_half_up(change / previous.total * 100) if previous.total > 0 else 0
    )
    return VisitSummary(
        period=period,
        label=date_utils.period_label(period.value, current_range),
        current=current,
        previous=previous,
        change=change,
        changePercent=change_percent,
    )
