"""
budget_status.py — Budget Health
Single source of truth for percentage used, remaining amount and the
no-budget / over / warning / good classification.
"""

import math
from dataclasses import dataclass

from constants import BudgetStatusKind


def round_half_up(value: float, scale: int = 100) -> float:
    """Round to 1/scale with halves going up, e.g. scale=100 -> 2 decimals."""
    return math.floor(value * scale + 0.5) / scale


@dataclass(frozen=True)
class BudgetStatus:
    percentage: float
    remaining: float
    overage: float
    status: BudgetStatusKind


def evaluate(budgeted: float, spent: float, threshold: float) -> BudgetStatus:
    assert budgeted >= 0, "budgeted amount must be non-negative"
    assert spent >= 0, "spent amount must be non-negative"
    assert 0 <= threshold <= 100, "alert threshold must be between 0 and 100"

    percentage = round_half_up(spent / budgeted * 100) if budgeted > 0 else 0.0
    remaining = max(0.0, budgeted - spent)

    # Order matters: a zero budget means "not configured", even with spend
    if budgeted == 0:
        status = BudgetStatusKind.NO_BUDGET
    elif spent > budgeted:
        status = BudgetStatusKind.OVER
    elif percentage > threshold:
        status = BudgetStatusKind.WARNING
    else:
        status = BudgetStatusKind.GOOD

    overage = spent - budgeted if status is BudgetStatusKind.OVER else 0.0
    return BudgetStatus(percentage=percentage, remaining=remaining, overage=overage, status=status)
