from datetime import datetime
from types import SimpleNamespace

from constants import Category, Period
from services.comparison_report import build_comparison, build_row
from services.period_resolver import resolve_period


def _budget(category, amount, threshold=80.0):
    return SimpleNamespace(category=category, amount=amount, alerts_threshold=threshold)


def test_build_row_shape():
    row = build_row(_budget("Food & Dining", 300), 260.0)
    assert row == {
        "category": "Food & Dining",
        "budgeted": 300.0,
        "spent": 260.0,
        "remaining": 40.0,
        "percentage": 86.67,
        "status": "warning",
        "overage": 0.0,
    }


def test_build_row_missing_threshold_uses_default():
    row = build_row(_budget("Travel", 100, threshold=None), 85.0)
    assert row["status"] == "warning"


def test_summary_counts_unbudgeted_spend():
    budgets = [_budget(Category.FOOD_AND_DINING, 300), _budget(Category.SHOPPING, 200)]
    spend = {Category.FOOD_AND_DINING: 260.0, Category.SHOPPING: 270.0, Category.TRAVEL: 120.0}

    report = build_comparison(budgets, spend)

    assert report.total_budget == 500
    assert report.total_spent == 650
    assert report.total_remaining == 0
    assert report.overall_percentage == 130.0
    assert [row["category"] for row in report.categories] == ["Food & Dining", "Shopping"]
    assert "Travel" not in {row["category"] for row in report.categories}


def test_rows_follow_category_order():
    budgets = [_budget("Other", 10), _budget("Shopping", 10), _budget("Food & Dining", 10)]
    report = build_comparison(budgets, {})
    assert [row["category"] for row in report.categories] == ["Food & Dining", "Shopping", "Other"]


def test_budgeted_category_without_spend_defaults_to_zero():
    report = build_comparison([_budget("Education", 150)], {"Travel": 40})
    row = report.categories[0]
    assert row["spent"] == 0.0
    assert row["status"] == "good"
    assert report.total_spent == 40


def test_overall_percentage_is_not_an_average_of_rows():
    budgets = [_budget("Food & Dining", 300), _budget("Healthcare", 700)]
    report = build_comparison(budgets, {"Food & Dining": 260})
    assert [row["percentage"] for row in report.categories] == [86.67, 0.0]
    assert report.overall_percentage == 26.0


def test_no_budgets_gives_zero_percentage():
    report = build_comparison([], {"Travel": 120})
    assert report.total_budget == 0
    assert report.total_spent == 120
    assert report.total_remaining == 0
    assert report.overall_percentage == 0
    assert report.categories == []


def test_zero_budget_row_is_no_budget():
    report = build_comparison([_budget("Entertainment", 0)], {"Entertainment": 25})
    assert report.categories[0]["status"] == "no-budget"
    assert report.categories[0]["remaining"] == 0


def test_to_dict_includes_period_bounds():
    window = resolve_period("weekly", datetime(2024, 3, 13))
    report = build_comparison([_budget("Travel", 100)], {"Travel": 50}, period=Period.WEEKLY, period_range=window)
    data = report.to_dict()
    assert data["period"] == {"type": "weekly", "start": "2024-03-10T00:00:00", "end": "2024-03-16T00:00:00"}
    assert data["summary"] == {
        "totalBudget": 100.0,
        "totalSpent": 50.0,
        "totalRemaining": 50.0,
        "overallPercentage": 50.0,
    }
