from enum import Enum


class Category(str, Enum):
    """Closed set of expense/budget categories, in canonical display order."""

    FOOD_AND_DINING = "Food & Dining"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS_AND_UTILITIES = "Bills & Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    PERSONAL_CARE = "Personal Care"
    OTHER = "Other"


class Period(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"


class BudgetStatusKind(str, Enum):
    NO_BUDGET = "no-budget"
    OVER = "over"
    WARNING = "warning"
    GOOD = "good"


CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}

DEFAULT_PERIOD = Period.MONTHLY
DEFAULT_ALERT_THRESHOLD = 80.0  # percent of budget
DEFAULT_PREFERENCES = {"currency": "USD", "theme": "light", "emailNotifications": True}

MIN_PASSWORD_LENGTH = 6
RECENT_EXPENSES_LIMIT = 5
DAILY_TREND_DAYS = 7
EXPENSE_SORT_FIELDS = ("date", "amount", "title", "category", "createdAt")
