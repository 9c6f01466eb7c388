import pytest

from constants import BudgetStatusKind
from services.budget_status import evaluate, round_half_up


def test_warning_when_over_threshold():
    result = evaluate(300, 260, 80)
    assert result.percentage == 86.67
    assert result.status is BudgetStatusKind.WARNING
    assert result.remaining == 40
    assert result.overage == 0


def test_over_budget_reports_overage():
    result = evaluate(300, 350, 80)
    assert result.status is BudgetStatusKind.OVER
    assert result.remaining == 0
    assert result.overage == 50
    assert result.percentage == 116.67


@pytest.mark.parametrize("spent", [0, 10, 500])
def test_zero_budget_is_always_no_budget(spent):
    result = evaluate(0, spent, 80)
    assert result.status is BudgetStatusKind.NO_BUDGET
    assert result.percentage == 0
    assert result.overage == 0


def test_over_wins_even_when_rounded_percentage_is_within_threshold():
    # 100.000001% rounds to 100.0, which is not above a 100% threshold
    result = evaluate(1_000_000, 1_000_000.01, 100)
    assert result.percentage == 100.0
    assert result.status is BudgetStatusKind.OVER


def test_percentage_equal_to_threshold_is_good():
    assert evaluate(100, 80, 80).status is BudgetStatusKind.GOOD
    assert evaluate(100, 80.01, 80).status is BudgetStatusKind.WARNING


def test_spending_exactly_the_budget_is_not_over():
    result = evaluate(200, 200, 80)
    assert result.status is BudgetStatusKind.WARNING
    assert result.remaining == 0


def test_good_under_threshold():
    result = evaluate(500, 100, 80)
    assert result.status is BudgetStatusKind.GOOD
    assert result.percentage == 20.0
    assert result.remaining == 400


@pytest.mark.parametrize("budgeted,spent", [(0, 0), (0, 25), (100, 99.99), (100, 100), (100, 250.5)])
def test_remaining_is_never_negative(budgeted, spent):
    assert evaluate(budgeted, spent, 80).remaining == max(0, budgeted - spent)


def test_evaluate_is_deterministic():
    assert evaluate(300, 260, 80) == evaluate(300, 260, 80)


def test_round_half_up_rounds_halves_away_from_even():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(0.375) == 0.38
    assert round_half_up(86.666) == 86.67
