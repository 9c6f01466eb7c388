import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import get_current_user
from constants import Category, Period
from database import get_db
from services.budget_service import BudgetService
from services.expense_service import parse_date_param

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/budgets", tags=["Budgets"])


class AlertSettings(BaseModel):
    enabled: Optional[bool] = None
    threshold: Optional[float] = Field(default=None, ge=0, le=100)


class BudgetUpdate(BaseModel):
    amount: float = Field(ge=0)
    period: Optional[Period] = None
    alerts: Optional[AlertSettings] = None


class BudgetSet(BudgetUpdate):
    category: Category


def _reference(date: Optional[str]):
    if not date:
        return None
    try:
        return parse_date_param(date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date format: {e}")


def _upsert(db: Session, user_id: int, category: Category, body: BudgetUpdate):
    try:
        alerts = body.alerts.model_dump(exclude_unset=True) if body.alerts else None
        budget, created = BudgetService.set_budget(db, user_id, category, body.amount, body.period, alerts)
        return JSONResponse(
            status_code=201 if created else 200,
            content={
                "success": True,
                "message": "Budget created successfully" if created else "Budget updated successfully",
                "data": BudgetService.to_dict(budget),
            },
        )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Budget already exists for this category")
    except Exception:
        logger.exception("Set budget error")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("")
async def list_budgets(date: Optional[str] = None, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """All budgets with spending for the period each one covers."""
    reference = _reference(date)
    try:
        return {"success": True, "data": BudgetService.budgets_with_status(db, user_id, reference)}
    except Exception:
        logger.exception("Get budgets error")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("")
async def set_budget(body: BudgetSet, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return _upsert(db, user_id, body.category, body)


@router.get("/comparison")
async def budget_comparison(
    period: str = "monthly",
    date: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Budget vs. spending for every budget of the given period."""
    reference = _reference(date)
    try:
        report = BudgetService.comparison(db, user_id, period, reference)
        return {"success": True, "data": report.to_dict()}
    except Exception:
        logger.exception("Get budget comparison error")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/{category}")
async def get_budget(
    category: Category,
    date: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reference = _reference(date)
    try:
        budget = BudgetService.get_budget(db, user_id, category)
        if not budget:
            raise HTTPException(status_code=404, detail="Budget not found for this category")
        return {"success": True, "data": BudgetService.budget_status(db, budget, reference)}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get budget error")
        raise HTTPException(status_code=500, detail="Server error")


@router.put("/{category}")
async def update_budget(
    category: Category,
    body: BudgetUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _upsert(db, user_id, category, body)


@router.delete("/{category}")
async def delete_budget(category: Category, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        if not BudgetService.delete_budget(db, user_id, category):
            raise HTTPException(status_code=404, detail="Budget not found for this category")
        return {"success": True, "message": "Budget deleted successfully"}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Delete budget error")
        raise HTTPException(status_code=500, detail="Server error")
