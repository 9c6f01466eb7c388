"""
expense_service.py — Expenses
CRUD, filtered/paginated listing and the statistics shown on the dashboard.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from constants import DAILY_TREND_DAYS, RECENT_EXPENSES_LIMIT, Category
from models.expense import Expense
from services.period_resolver import PeriodRange, to_naive_utc, utc_now

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "date": Expense.date,
    "amount": Expense.amount,
    "title": Expense.title,
    "category": Expense.category,
    "createdAt": Expense.created_at,
}


def parse_date_param(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime query value into naive UTC."""
    return to_naive_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def _escape_like(text: str) -> str:
    """Match `%`, `_` and `\\` literally in LIKE patterns."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_date_only(value: str) -> bool:
    return len(value.strip()) <= 10


class ExpenseService:
    @staticmethod
    def to_dict(e: Expense) -> dict:
        return {
            "id": e.id,
            "title": e.title,
            "amount": e.amount,
            "category": e.category,
            "description": e.description,
            "date": e.date.isoformat() if e.date else None,
            "createdAt": e.created_at.isoformat() if e.created_at else None,
            "updatedAt": e.updated_at.isoformat() if e.updated_at else None,
        }

    @staticmethod
    def _date_filtered(query, start_date: str | None, end_date: str | None):
        if start_date:
            query = query.filter(Expense.date >= parse_date_param(start_date))
        if end_date:
            end = parse_date_param(end_date)
            if _is_date_only(end_date):
                # A bare date means the whole day
                query = query.filter(Expense.date < end + timedelta(days=1))
            else:
                query = query.filter(Expense.date <= end)
        return query

    @staticmethod
    def get_expense(db: Session, user_id: int, expense_id: int) -> Expense | None:
        return db.query(Expense).filter_by(id=expense_id, user_id=user_id).first()

    @staticmethod
    def list_expenses(
        db: Session,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        category: Category | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        search: str | None = None,
        sort_by: str = "date",
        order: str = "desc",
    ) -> tuple[list, int]:
        query = db.query(Expense).filter(Expense.user_id == user_id)
        if category:
            query = query.filter(Expense.category == Category(category).value)
        query = ExpenseService._date_filtered(query, start_date, end_date)
        if search:
            pattern = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(Expense.title.ilike(pattern, escape="\\"), Expense.description.ilike(pattern, escape="\\"))
            )

        total = query.count()

        column = _SORT_COLUMNS.get(sort_by, Expense.date)
        ordering = column.asc() if order == "asc" else column.desc()
        items = (
            query.order_by(ordering, Expense.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def expenses_in_range(db: Session, user_id: int, period_range: PeriodRange, category=None) -> list:
        """Fetch the user's expenses inside `period_range` (whole last day included)."""
        query = db.query(Expense).filter(
            Expense.user_id == user_id,
            Expense.date >= period_range.start,
            Expense.date < period_range.end_exclusive,
        )
        if category is not None:
            query = query.filter(Expense.category == Category(category).value)
        return query.all()

    @staticmethod
    def create_expense(db: Session, user_id: int, data: dict) -> Expense:
        try:
            e = Expense(
                user_id=user_id,
                title=data["title"],
                amount=data["amount"],
                category=Category(data["category"]).value,
                description=data.get("description"),
                date=to_naive_utc(data["date"]) if data.get("date") else utc_now(),
            )
            db.add(e)
            db.commit()
            db.refresh(e)
            return e
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def update_expense(db: Session, expense: Expense, data: dict) -> Expense:
        try:
            for field in ("title", "amount"):
                if data.get(field) is not None:
                    setattr(expense, field, data[field])
            if "description" in data:
                expense.description = data["description"]
            if data.get("category") is not None:
                expense.category = Category(data["category"]).value
            if data.get("date") is not None:
                expense.date = to_naive_utc(data["date"])
            db.commit()
            db.refresh(expense)
            return expense
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete_expense(db: Session, expense: Expense) -> None:
        try:
            db.delete(expense)
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def get_stats(
        db: Session,
        user_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
        now: datetime | None = None,
    ) -> dict:
        """Totals, per-category breakdown, recent expenses and a 7-day daily trend."""
        base = ExpenseService._date_filtered(
            db.query(Expense).filter(Expense.user_id == user_id), start_date, end_date
        )

        total_amount, total_count = base.with_entities(
            func.coalesce(func.sum(Expense.amount), 0.0), func.count(Expense.id)
        ).one()

        by_category = (
            base.with_entities(
                Expense.category,
                func.sum(Expense.amount).label("total"),
                func.count(Expense.id).label("count"),
                func.avg(Expense.amount).label("avg"),
            )
            .group_by(Expense.category)
            .order_by(func.sum(Expense.amount).desc())
            .all()
        )
        breakdown = [
            {"category": row.category, "total": row.total, "count": row.count, "avgAmount": row.avg}
            for row in by_category
        ]

        recent = base.order_by(Expense.date.desc(), Expense.id.desc()).limit(RECENT_EXPENSES_LIMIT).all()

        since = (now or utc_now()) - timedelta(days=DAILY_TREND_DAYS)
        trend_rows = db.query(Expense).filter(Expense.user_id == user_id, Expense.date >= since).all()
        daily: dict[str, dict] = {}
        for e in trend_rows:
            day = e.date.date().isoformat()
            bucket = daily.setdefault(day, {"date": day, "total": 0.0, "count": 0})
            bucket["total"] += e.amount
            bucket["count"] += 1

        return {
            "overview": {
                "totalAmount": float(total_amount),
                "totalCount": total_count,
                "averageAmount": float(total_amount) / total_count if total_count else 0,
            },
            "categoryBreakdown": breakdown,
            "recentExpenses": [ExpenseService.to_dict(e) for e in recent],
            "dailyTrend": [daily[k] for k in sorted(daily)],
        }
