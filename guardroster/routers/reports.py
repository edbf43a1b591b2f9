"""Reports: attendance per customer per day / week, and one employee's attendance over a period."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardroster.config import settings
from guardroster.database import get_db
from guardroster import crud, schemas
from guardroster.services.attendance_report import (
    GRANULARITIES,
    build_attendance_report,
    summarize_by_customer,
    summarize_employee_attendance,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/attendance", response_model=schemas.AttendanceReportResponse, summary="Attendance rate per customer per day or week")
async def get_attendance_report(
    start: date = Query(..., description="From date (inclusive)"),
    end: date = Query(..., description="To date (inclusive)"),
    granularity: str = Query("day", description="day / week"),
    customer_id: Optional[int] = Query(None, description="Only this customer"),
    db: AsyncSession = Depends(get_db),
):
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    if granularity not in GRANULARITIES:
        raise HTTPException(status_code=400, detail=f"granularity must be one of: {list(GRANULARITIES)}")
    customers = await crud.list_report_customers(db)
    if customer_id is not None:
        customers = [c for c in customers if c.id == customer_id]
    shifts = await crud.list_report_shifts(db, start, end)
    attendance = await crud.list_report_attendance(db, start, end)
    rows = build_attendance_report(
        start, end, granularity, customers, shifts, attendance, first_weekday=settings.report_week_start
    )
    logger.debug("attendance report %s..%s (%s): %d rows", start, end, granularity, len(rows))
    return schemas.AttendanceReportResponse(
        start=start,
        end=end,
        granularity=granularity,
        rows=[schemas.ReportRowRead.model_validate(r) for r in rows],
        summaries=[schemas.CustomerSummaryRead.model_validate(s) for s in summarize_by_customer(rows)],
    )


@router.get(
    "/employees/{employee_id}/attendance-summary",
    response_model=schemas.EmployeeAttendanceSummaryRead,
    summary="Shifts, hours and attendance counts for one employee",
)
async def get_employee_attendance_summary(
    employee_id: int,
    start: date = Query(..., description="From date (inclusive)"),
    end: date = Query(..., description="To date (inclusive)"),
    db: AsyncSession = Depends(get_db),
):
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    if not await crud.get_employee(db, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    shifts, records = await crud.list_employee_summary_inputs(db, employee_id, start, end)
    summary = summarize_employee_attendance(shifts, records)
    return schemas.EmployeeAttendanceSummaryRead(
        employee_id=employee_id,
        start=start,
        end=end,
        **summary.__dict__,
    )
