"""Payouts tied to attendance: relief vendor payments and employee cash advances."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardroster.database import get_db
from guardroster import crud, schemas
from guardroster.models import CASH_ADVANCE_STATUSES

router = APIRouter(prefix="/api", tags=["payroll"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Vendor not found"}}},
    }
}


def _check_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")


# ---------- vendor_payments ----------
@router.get("/vendor-payments", response_model=List[schemas.VendorPaymentRead], summary="Vendor payments, newest first")
async def list_vendor_payments(
    vendor_id: Optional[int] = Query(None, description="Vendor row id"),
    customer_id: Optional[int] = Query(None, description="Customer row id"),
    start: Optional[date] = Query(None, description="From payment date (inclusive)"),
    end: Optional[date] = Query(None, description="To payment date (inclusive)"),
    db: AsyncSession = Depends(get_db),
):
    _check_range(start, end)
    items = await crud.list_vendor_payments(db, vendor_id=vendor_id, customer_id=customer_id, start=start, end=end)
    return [schemas.VendorPaymentRead.model_validate(p) for p in items]


@router.post("/vendor-payments", response_model=schemas.VendorPaymentRead, status_code=201, summary="Record a vendor payment", responses=RESPONSE_404)
async def create_vendor_payment(
    data: schemas.VendorPaymentCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_vendor(db, data.vendor_id):
        raise HTTPException(status_code=404, detail="Vendor not found")
    if not await crud.get_customer(db, data.customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    p = await crud.create_vendor_payment(db, data)
    return schemas.VendorPaymentRead.model_validate(p)


# ---------- cash_advances ----------
@router.get("/cash-advances", response_model=schemas.CashAdvanceListResponse, summary="Cash advances with totals")
async def list_cash_advances(
    employee_id: Optional[int] = Query(None, description="Employee row id"),
    start: Optional[date] = Query(None, description="From request date (inclusive)"),
    end: Optional[date] = Query(None, description="To request date (inclusive)"),
    status: Optional[str] = Query(None, description="pending / approved / rejected"),
    db: AsyncSession = Depends(get_db),
):
    _check_range(start, end)
    if status and status not in CASH_ADVANCE_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {list(CASH_ADVANCE_STATUSES)}")
    items = await crud.list_cash_advances(db, employee_id=employee_id, start=start, end=end, status=status)
    totals = crud.cash_advance_totals(items)
    return schemas.CashAdvanceListResponse(
        items=[schemas.CashAdvanceRead.model_validate(ca) for ca in items],
        **totals,
    )


@router.post("/cash-advances", response_model=schemas.CashAdvanceRead, status_code=201, summary="Log a cash advance", responses=RESPONSE_404)
async def create_cash_advance(
    data: schemas.CashAdvanceCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_employee(db, data.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    if data.status not in CASH_ADVANCE_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {list(CASH_ADVANCE_STATUSES)}")
    ca = await crud.create_cash_advance(db, data)
    return schemas.CashAdvanceRead.model_validate(ca)
