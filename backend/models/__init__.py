# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.expense import Expense
from models.budget import Budget
from models.password_reset_token import PasswordResetToken

__all__ = [
    "User",
    "Expense",
    "Budget",
    "PasswordResetToken",
]
