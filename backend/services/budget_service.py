"""
budget_service.py — Budgets
Budget upserts and the three read views (all budgets, one category,
budget-vs-spending comparison). Every view computes status through
comparison_report.build_row so the numbers never drift apart.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from constants import CATEGORY_ORDER, DEFAULT_ALERT_THRESHOLD, DEFAULT_PERIOD, Category, Period
from models.budget import Budget
from services.comparison_report import ComparisonReport, build_comparison, build_row
from services.expense_service import ExpenseService
from services.period_resolver import normalize_period, resolve_period, utc_now
from services.spend_aggregator import sum_by_category, sum_spending

logger = logging.getLogger(__name__)


class BudgetService:
    @staticmethod
    def to_dict(b: Budget) -> dict:
        return {
            "id": b.id,
            "category": b.category,
            "amount": b.amount,
            "period": b.period,
            "alerts": {"enabled": b.alerts_enabled, "threshold": b.alerts_threshold},
            "startDate": b.start_date.isoformat() if b.start_date else None,
            "createdAt": b.created_at.isoformat() if b.created_at else None,
            "updatedAt": b.updated_at.isoformat() if b.updated_at else None,
        }

    @staticmethod
    def _with_status(b: Budget, spent: float) -> dict:
        row = build_row(b, spent)
        data = BudgetService.to_dict(b)
        for key in ("spent", "percentage", "remaining", "status", "overage"):
            data[key] = row[key]
        return data

    @staticmethod
    def get_budget(db: Session, user_id: int, category: Category) -> Budget | None:
        return db.query(Budget).filter_by(user_id=user_id, category=Category(category).value).first()

    @staticmethod
    def list_budgets(db: Session, user_id: int, period: Period | None = None) -> list:
        query = db.query(Budget).filter_by(user_id=user_id)
        if period is not None:
            query = query.filter_by(period=Period(period).value)
        budgets = query.all()
        return sorted(budgets, key=lambda b: CATEGORY_ORDER[Category(b.category)])

    @staticmethod
    def set_budget(
        db: Session,
        user_id: int,
        category: Category,
        amount: float,
        period: Period | None = None,
        alerts: dict | None = None,
    ) -> tuple[Budget, bool]:
        """Create or update the user's budget for `category`. Returns (budget, created)."""
        alerts = alerts or {}
        period_value = Period(period or DEFAULT_PERIOD).value
        try:
            b = BudgetService.get_budget(db, user_id, category)
            created = b is None
            if created:
                b = Budget(
                    user_id=user_id,
                    category=Category(category).value,
                    amount=amount,
                    period=period_value,
                    alerts_enabled=alerts["enabled"] if alerts.get("enabled") is not None else True,
                    alerts_threshold=(
                        alerts["threshold"] if alerts.get("threshold") is not None else DEFAULT_ALERT_THRESHOLD
                    ),
                )
                db.add(b)
            else:
                b.amount = amount
                b.period = period_value
                # Unspecified alert settings keep their stored values
                if alerts.get("enabled") is not None:
                    b.alerts_enabled = alerts["enabled"]
                if alerts.get("threshold") is not None:
                    b.alerts_threshold = alerts["threshold"]
            db.commit()
            db.refresh(b)
            return b, created
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete_budget(db: Session, user_id: int, category: Category) -> bool:
        b = BudgetService.get_budget(db, user_id, category)
        if b is None:
            return False
        try:
            db.delete(b)
            db.commit()
            return True
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def budgets_with_status(db: Session, user_id: int, reference: datetime | None = None) -> list:
        """
        Every budget with spend measured over its own period around `reference`:
        weekly budgets over the current week, yearly ones over the current year.
        Earlier versions used the current month for every budget.
        """
        reference = reference or utc_now()
        budgets = BudgetService.list_budgets(db, user_id)

        # One expense fetch per distinct period kind, not per budget
        spend_by_period = {}
        for kind in {normalize_period(b.period) for b in budgets}:
            window = resolve_period(kind, reference)
            expenses = ExpenseService.expenses_in_range(db, user_id, window)
            spend_by_period[kind] = sum_by_category(expenses, window)

        result = []
        for b in budgets:
            spent = spend_by_period[normalize_period(b.period)].get(Category(b.category), 0.0)
            result.append(BudgetService._with_status(b, spent))
        return result

    @staticmethod
    def budget_status(db: Session, b: Budget, reference: datetime | None = None) -> dict:
        """A single budget's status for the period containing `reference`."""
        kind = normalize_period(b.period)
        window = resolve_period(kind, reference or utc_now())
        expenses = ExpenseService.expenses_in_range(db, b.user_id, window, category=b.category)
        data = BudgetService._with_status(b, sum_spending(expenses, b.category, window))
        data["period"] = {"type": kind.value, **window.to_dict()}
        return data

    @staticmethod
    def comparison(
        db: Session, user_id: int, period: Period | str | None = None, reference: datetime | None = None
    ) -> ComparisonReport:
        kind = normalize_period(period)
        window = resolve_period(kind, reference or utc_now())
        budgets = BudgetService.list_budgets(db, user_id, period=kind)
        expenses = ExpenseService.expenses_in_range(db, user_id, window)
        logger.debug(f"Comparison for user {user_id}: {len(budgets)} budgets, {len(expenses)} expenses")
        return build_comparison(budgets, sum_by_category(expenses, window), period=kind, period_range=window)
