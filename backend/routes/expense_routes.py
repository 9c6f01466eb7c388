import logging
import math
from datetime import datetime
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, BeforeValidator, Field, StringConstraints
from sqlalchemy.orm import Session

from auth import get_current_user
from constants import Category
from database import get_db
from services.expense_service import ExpenseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/expenses", tags=["Expenses"])


def _midnight_if_bare_date(value):
    if isinstance(value, str) and len(value.strip()) == 10:
        return value.strip() + "T00:00:00"
    return value


ExpenseDate = Annotated[datetime, BeforeValidator(_midnight_if_bare_date)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


class ExpenseCreate(BaseModel):
    title: Title
    amount: float = Field(ge=0.01)
    category: Category
    description: Optional[Description] = None
    date: Optional[ExpenseDate] = None


class ExpenseUpdate(BaseModel):
    title: Optional[Title] = None
    amount: Optional[float] = Field(default=None, ge=0.01)
    category: Optional[Category] = None
    description: Optional[Description] = None
    date: Optional[ExpenseDate] = None


def _bad_date(e: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail=f"Invalid date format: {e}")


@router.get("")
async def list_expenses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[Category] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    search: Optional[str] = None,
    sortBy: Literal["date", "amount", "title", "category", "createdAt"] = "date",
    order: Literal["asc", "desc"] = "desc",
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        items, total = ExpenseService.list_expenses(
            db, user_id, page=page, limit=limit, category=category,
            start_date=startDate, end_date=endDate, search=search,
            sort_by=sortBy, order=order,
        )
        return {
            "success": True,
            "data": [ExpenseService.to_dict(e) for e in items],
            "pagination": {
                "currentPage": page,
                "totalPages": math.ceil(total / limit),
                "totalItems": total,
                "itemsPerPage": limit,
            },
        }
    except ValueError as e:
        raise _bad_date(e)
    except Exception:
        logger.exception("Get expenses error")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/stats")
async def expense_stats(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return {"success": True, "data": ExpenseService.get_stats(db, user_id, startDate, endDate)}
    except ValueError as e:
        raise _bad_date(e)
    except Exception:
        logger.exception("Get expense stats error")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/{expense_id}")
async def get_expense(expense_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    expense = ExpenseService.get_expense(db, user_id, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return {"success": True, "data": ExpenseService.to_dict(expense)}


@router.post("", status_code=201)
async def create_expense(body: ExpenseCreate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        expense = ExpenseService.create_expense(db, user_id, body.model_dump())
        return {"success": True, "message": "Expense created successfully", "data": ExpenseService.to_dict(expense)}
    except Exception:
        logger.exception("Create expense error")
        raise HTTPException(status_code=500, detail="Server error")


@router.put("/{expense_id}")
async def update_expense(
    expense_id: int,
    body: ExpenseUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        expense = ExpenseService.get_expense(db, user_id, expense_id)
        if not expense:
            raise HTTPException(status_code=404, detail="Expense not found")

        data = body.model_dump(exclude_unset=True)
        expense = ExpenseService.update_expense(db, expense, data)
        return {"success": True, "message": "Expense updated successfully", "data": ExpenseService.to_dict(expense)}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Update expense error")
        raise HTTPException(status_code=500, detail="Server error")


@router.delete("/{expense_id}")
async def delete_expense(expense_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        expense = ExpenseService.get_expense(db, user_id, expense_id)
        if not expense:
            raise HTTPException(status_code=404, detail="Expense not found")

        ExpenseService.delete_expense(db, expense)
        return {"success": True, "message": "Expense deleted successfully"}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Delete expense error")
        raise HTTPException(status_code=500, detail="Server error")
