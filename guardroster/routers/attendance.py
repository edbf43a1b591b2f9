"""Attendance: capture roster, single / bulk / edit submission, daily board, overtime, relief payment retry."""
from dataclasses import replace
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardroster.database import get_db
from guardroster import crud, schemas
from guardroster.services import attendance_capture as capture
from guardroster.services.attendance_capture import (
    AttendanceAlreadyRecordedError,
    AttendanceRecordNotFoundError,
    AttendanceValidationError,
    EmployeeNotScheduledError,
    NO_LOCATION,
    UNKNOWN_CUSTOMER,
    UNKNOWN_EMPLOYEE,
)
from guardroster.services.attendance_form import AttendanceEntry, entry_from_flags, set_times
from guardroster.services.attendance_hours import format_hhmm
from guardroster.services.attendance_report import daily_stats

router = APIRouter(prefix="/api/attendance", tags=["attendance"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Attendance record not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Employee is not scheduled on this date"}}},
    }
}

RESPONSE_422 = {422: {"description": "Invalid query parameters or body"}}


def _entry_from_request(employee_id: int, data: schemas.AttendanceEntryIn) -> AttendanceEntry:
    try:
        entry = entry_from_flags(employee_id, is_present=data.is_present, is_absent=data.is_absent, status=data.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    entry = set_times(entry, data.check_in or "", data.check_out or "")
    return replace(
        entry,
        notes=data.notes or "",
        replacement_type=data.replacement_type,
        replacement_vendor_id=data.replacement_vendor_id,
        replacement_employee_id=data.replacement_employee_id,
        replacement_notes=data.replacement_notes or "",
        vendor_cost=data.vendor_cost,
        relieving_cost=data.relieving_cost,
        replacement_is_overtime=data.replacement_is_overtime,
    )


def _submit_response(result: capture.SubmitResult) -> schemas.AttendanceSubmitResponse:
    return schemas.AttendanceSubmitResponse(
        date=result.date,
        mode=result.mode,
        saved=result.saved,
        skipped=result.skipped,
        failed=result.failed,
        results=[
            schemas.AttendanceItemResultRead(
                employee_id=r.employee_id,
                outcome=r.outcome,
                attendance_id=r.attendance_id,
                status=r.status,
                hours_worked=r.hours_worked,
                error=r.error,
                payment=schemas.PaymentResultRead(**r.payment.__dict__),
            )
            for r in result.results
        ],
    )


def _roster_row(entry: capture.RosterEntry, record) -> schemas.RosterRow:
    row = schemas.RosterRow(**entry.__dict__)
    if record is None:
        return row
    row.attendance_id = record.id
    row.status = record.status
    row.is_present = record.status == "present"
    row.is_absent = record.status == "absent"
    row.check_in = format_hhmm(record.check_in_time)
    row.check_out = format_hhmm(record.check_out_time)
    row.notes = record.notes or ""
    row.replacement_type = record.replacement_type
    row.replacement_vendor_id = record.replacement_vendor_id
    row.replacement_employee_id = record.replacement_employee_id
    row.replacement_notes = record.replacement_notes or ""
    row.relieving_cost = record.relieving_cost
    row.replacement_is_overtime = bool(record.replacement_is_overtime)
    return row


# ---------- capture screen ----------
@router.get("/roster", response_model=schemas.RosterResponse, summary="Employees scheduled on a date, prefilled with existing attendance")
async def get_roster(
    on_date: date = Query(..., alias="date", description="Attendance date"),
    customer_id: Optional[int] = Query(None, description="Only this customer"),
    db: AsyncSession = Depends(get_db),
):
    pairs, warnings = await capture.load_roster(db, on_date, customer_id=customer_id)
    return schemas.RosterResponse(
        date=on_date,
        rows=[_roster_row(entry, record) for entry, record in pairs],
        warnings=warnings,
    )


@router.get("/replacement-candidates", response_model=schemas.ReplacementCandidatesResponse, summary="Active vendors and employees that can cover an absence")
async def get_replacement_candidates(
    employee_id: Optional[int] = Query(None, description="Absent employee, left out of the list"),
    db: AsyncSession = Depends(get_db),
):
    vendors, employees, warnings = await capture.load_replacement_candidates(db, employee_id=employee_id)
    return schemas.ReplacementCandidatesResponse(
        vendors=[schemas.VendorBrief.model_validate(v) for v in vendors],
        employees=[schemas.EmployeeBrief.model_validate(e) for e in employees],
        warnings=warnings,
    )


@router.post("", response_model=schemas.AttendanceSubmitResponse, summary="Record attendance for one scheduled employee", responses={**RESPONSE_409, **RESPONSE_422})
async def mark_attendance(
    data: schemas.AttendanceMarkRequest,
    db: AsyncSession = Depends(get_db),
):
    entry = _entry_from_request(data.employee_id, data)
    try:
        result = await capture.submit_single(db, data.date, entry)
    except AttendanceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmployeeNotScheduledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _submit_response(result)


@router.post("/bulk", response_model=schemas.AttendanceSubmitResponse, summary="Record attendance for every scheduled employee on a date", responses=RESPONSE_422)
async def mark_attendance_bulk(
    data: schemas.AttendanceBulkRequest,
    db: AsyncSession = Depends(get_db),
):
    entries = {e.employee_id: _entry_from_request(e.employee_id, e) for e in data.entries}
    try:
        result = await capture.submit_bulk(db, data.date, entries, customer_id=data.customer_id)
    except AttendanceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _submit_response(result)


# ---------- daily board / list ----------
@router.get("/daily", response_model=schemas.DailyAttendanceResponse, summary="All attendance on a date with present / late / absent stats")
async def get_daily_attendance(
    on_date: date = Query(..., alias="date", description="Attendance date"),
    db: AsyncSession = Depends(get_db),
):
    records = await crud.list_attendance_for_date(db, on_date)
    rows = []
    for a in records:
        shift = a.shift
        customer = shift.customer if shift else None
        rows.append(schemas.DailyAttendanceRow(
            id=a.id,
            employee_id=a.employee_id,
            employee_name=a.employee.name if a.employee else UNKNOWN_EMPLOYEE,
            customer_name=customer.company_name if customer else UNKNOWN_CUSTOMER,
            location=(shift.location if shift else None) or NO_LOCATION,
            check_in=format_hhmm(a.check_in_time),
            check_out=format_hhmm(a.check_out_time),
            status=a.status,
            hours_worked=a.hours_worked or 0,
            is_overtime=bool(a.is_overtime),
        ))
    stats = daily_stats(a.status for a in records)
    return schemas.DailyAttendanceResponse(
        date=on_date,
        records=rows,
        stats=schemas.DailyAttendanceStats(**stats.__dict__),
    )


@router.get("", response_model=List[schemas.AttendanceRead], summary="Attendance records")
async def list_attendance(
    employee_id: Optional[int] = Query(None, description="Employee row id"),
    start: Optional[date] = Query(None, description="From date (inclusive)"),
    end: Optional[date] = Query(None, description="To date (inclusive)"),
    is_overtime: Optional[bool] = Query(None, description="Only overtime / only regular"),
    db: AsyncSession = Depends(get_db),
):
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    items = await crud.list_attendance(db, employee_id=employee_id, start=start, end=end, is_overtime=is_overtime)
    return [schemas.AttendanceRead.model_validate(a) for a in items]


# ---------- overtime ----------
@router.post("/overtime", response_model=schemas.AttendanceRead, status_code=201, summary="Log an overtime shift", responses={**RESPONSE_409, **RESPONSE_422})
async def log_overtime(
    data: schemas.OvertimeCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        record = await capture.log_overtime(db, data)
    except AttendanceValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttendanceAlreadyRecordedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return schemas.AttendanceRead.model_validate(record)


# ---------- single record ----------
@router.get("/{attendance_id}", response_model=schemas.AttendanceRead, summary="Get one attendance record", responses=RESPONSE_404)
async def get_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
):
    a = await crud.get_attendance(db, attendance_id)
    if not a:
        raise HTTPException(status_code=404, detail="Attendance record not found")
    return schemas.AttendanceRead.model_validate(a)


@router.patch("/{attendance_id}", response_model=schemas.AttendanceSubmitResponse, summary="Edit an attendance record (date stays fixed)", responses={**RESPONSE_404, **RESPONSE_422})
async def edit_attendance(
    attendance_id: int,
    data: schemas.AttendanceEditRequest,
    db: AsyncSession = Depends(get_db),
):
    entry = _entry_from_request(0, data)
    try:
        result = await capture.submit_edit(db, attendance_id, entry)
    except AttendanceRecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttendanceValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _submit_response(result)


@router.post("/{attendance_id}/vendor-payment", response_model=schemas.PaymentResultRead, summary="Retry the vendor payment of a vendor-covered absence", responses={**RESPONSE_404, **RESPONSE_409})
async def retry_vendor_payment(
    attendance_id: int,
    data: schemas.VendorPaymentRetry,
    db: AsyncSession = Depends(get_db),
):
    try:
        payment = await capture.retry_vendor_payment(db, attendance_id, data.amount)
    except AttendanceRecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttendanceValidationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return schemas.PaymentResultRead(**payment.__dict__)
