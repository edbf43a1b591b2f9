"""Shift assignments: one employee, one customer site, one date, planned start / end."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardroster.database import get_db
from guardroster import crud, schemas
from guardroster.crud import ShiftAssignmentConflictError
from guardroster.models import SHIFT_STATUSES

router = APIRouter(prefix="/api/shift-assignments", tags=["shift-assignments"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Shift assignment not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Employee already has a shift at this time on this date"}}},
    }
}

RESPONSE_422 = {422: {"description": "Invalid query parameters or body"}}


def _with_names(sa) -> schemas.ShiftAssignmentWithNames:
    d = schemas.ShiftAssignmentRead.model_validate(sa).model_dump()
    d["employee_name"] = sa.employee.name if sa.employee else None
    d["customer_name"] = sa.customer.company_name if sa.customer else None
    return schemas.ShiftAssignmentWithNames(**d)


@router.get("", response_model=List[schemas.ShiftAssignmentWithNames], summary="Shift assignments")
async def list_shift_assignments(
    start: Optional[date] = Query(None, description="From date (inclusive)"),
    end: Optional[date] = Query(None, description="To date (inclusive)"),
    employee_id: Optional[int] = Query(None, description="Employee row id"),
    customer_id: Optional[int] = Query(None, description="Customer row id"),
    status: Optional[str] = Query(None, description="scheduled / completed / cancelled / in_progress"),
    db: AsyncSession = Depends(get_db),
):
    if status and status not in SHIFT_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {list(SHIFT_STATUSES)}")
    items = await crud.list_shift_assignments(
        db, start=start, end=end, employee_id=employee_id, customer_id=customer_id, status=status, load_names=True
    )
    return [_with_names(sa) for sa in items]


@router.get("/{shift_id}", response_model=schemas.ShiftAssignmentWithNames, summary="Get one shift assignment", responses=RESPONSE_404)
async def get_shift_assignment(
    shift_id: int,
    db: AsyncSession = Depends(get_db),
):
    sa = await crud.get_shift_assignment(db, shift_id, load_names=True)
    if not sa:
        raise HTTPException(status_code=404, detail="Shift assignment not found")
    return _with_names(sa)


@router.post("", response_model=schemas.ShiftAssignmentRead, status_code=201, summary="Schedule an employee at a customer", responses={**RESPONSE_404, **RESPONSE_409, **RESPONSE_422})
async def create_shift_assignment(
    data: schemas.ShiftAssignmentCreate,
    db: AsyncSession = Depends(get_db),
):
    emp = await crud.get_employee(db, data.employee_id)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee not found")
    if data.customer_id is not None and not await crud.get_customer(db, data.customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    if data.status not in SHIFT_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {list(SHIFT_STATUSES)}")
    try:
        sa = await crud.create_shift_assignment(db, data)
    except ShiftAssignmentConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return schemas.ShiftAssignmentRead.model_validate(sa)


@router.patch("/{shift_id}", response_model=schemas.ShiftAssignmentRead, summary="Update a shift assignment", responses={**RESPONSE_404, **RESPONSE_409, **RESPONSE_422})
async def update_shift_assignment(
    shift_id: int,
    data: schemas.ShiftAssignmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    sa = await crud.get_shift_assignment(db, shift_id)
    if not sa:
        raise HTTPException(status_code=404, detail="Shift assignment not found")
    if data.status is not None and data.status not in SHIFT_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {list(SHIFT_STATUSES)}")
    if data.customer_id is not None and not await crud.get_customer(db, data.customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    try:
        sa = await crud.update_shift_assignment(db, sa, data)
    except ShiftAssignmentConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return schemas.ShiftAssignmentRead.model_validate(sa)


@router.delete("/{shift_id}", status_code=204, summary="Delete a shift assignment (attendance keeps its record, unlinked)", responses=RESPONSE_404)
async def delete_shift_assignment(
    shift_id: int,
    db: AsyncSession = Depends(get_db),
):
    sa = await crud.get_shift_assignment(db, shift_id)
    if not sa:
        raise HTTPException(status_code=404, detail="Shift assignment not found")
    await crud.delete_shift_assignment(db, sa)
