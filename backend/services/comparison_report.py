"""
comparison_report.py — Budget vs. Spending
Builds per-category status rows and the overall summary shown on the
budget comparison screen.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from constants import CATEGORY_ORDER, DEFAULT_ALERT_THRESHOLD, Category, Period
from services.budget_status import evaluate
from services.period_resolver import PeriodRange


def _threshold(budget) -> float:
    threshold = getattr(budget, "alerts_threshold", None)
    return DEFAULT_ALERT_THRESHOLD if threshold is None else float(threshold)


def build_row(budget, spent: float) -> dict:
    """One BudgetStatusRow for `budget` given what was spent in its window."""
    budgeted = float(budget.amount)
    result = evaluate(budgeted, spent, _threshold(budget))
    return {
        "category": Category(budget.category).value,
        "budgeted": budgeted,
        "spent": spent,
        "remaining": result.remaining,
        "percentage": result.percentage,
        "status": result.status.value,
        "overage": result.overage,
    }


@dataclass
class ComparisonReport:
    total_budget: float
    total_spent: float
    total_remaining: float
    overall_percentage: float
    categories: list = field(default_factory=list)
    period: Optional[Period] = None
    period_range: Optional[PeriodRange] = None

    def summary(self) -> dict:
        return {
            "totalBudget": self.total_budget,
            "totalSpent": self.total_spent,
            "totalRemaining": self.total_remaining,
            "overallPercentage": self.overall_percentage,
        }

    def to_dict(self) -> dict:
        data = {"summary": self.summary(), "categories": self.categories}
        if self.period_range is not None:
            data["period"] = {"type": (self.period or Period.MONTHLY).value, **self.period_range.to_dict()}
        return data


def build_comparison(
    budgets: Iterable,
    expenses_by_category: dict,
    period: Optional[Period] = None,
    period_range: Optional[PeriodRange] = None,
) -> ComparisonReport:
    spend = {Category(k): float(v) for k, v in expenses_by_category.items()}
    budgets = sorted(budgets, key=lambda b: CATEGORY_ORDER[Category(b.category)])

    rows = [build_row(b, spend.get(Category(b.category), 0.0)) for b in budgets]

    total_budget = sum(row["budgeted"] for row in rows)
    # Spend in categories without a budget still counts toward the period total
    total_spent = sum(spend.values())

    if total_budget > 0:
        # Ratio rounded on its own, not averaged from row percentages
        overall = math.floor(total_spent / total_budget * 10000 + 0.5) / 100
    else:
        overall = 0.0

    return ComparisonReport(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=max(0.0, total_budget - total_spent),
        overall_percentage=overall,
        categories=rows,
        period=period,
        period_range=period_range,
    )
