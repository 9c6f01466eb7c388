"""
spend_aggregator.py — Spending Totals
Sums expense amounts inside a period window, either for one category or for
every category at once.
"""

from collections import defaultdict
from typing import Iterable

from constants import Category
from services.period_resolver import PeriodRange


def sum_spending(expenses: Iterable, category, period_range: PeriodRange) -> float:
    """Total spent in `period_range`; `category=None` means every category."""
    wanted = Category(category) if category is not None else None
    total = 0.0
    for e in expenses:
        if not period_range.contains(e.date):
            continue
        if wanted is not None and Category(e.category) is not wanted:
            continue
        total += float(e.amount)
    return total


def sum_by_category(expenses: Iterable, period_range: PeriodRange) -> dict[Category, float]:
    """Single pass grouping of in-range spend by category."""
    totals: dict[Category, float] = defaultdict(float)
    for e in expenses:
        if period_range.contains(e.date):
            totals[Category(e.category)] += float(e.amount)
    return dict(totals)
