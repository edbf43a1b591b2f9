"""
Attendance capture: single / bulk / edit submission against the roster of scheduled shifts.

Flow per employee:
1. Skip entries without a status (nothing is written, nothing is defaulted).
2. Shape the entry (replacement fields only on absences, only for the chosen kind), validate the replacement.
3. Upsert the record on (employee_id, date), or update by id in edit mode, and commit it on its own.
4. Vendor relief with a positive cost: create a VendorPayment as a separate, separately committed step.
   A failure there is reported on the item and never undoes step 3.

A failed item is rolled back alone and the batch moves on; every item gets a result.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from guardroster import crud
from guardroster.config import settings
from guardroster.models import AttendanceRecord, Employee, Vendor
from guardroster.schemas import OvertimeCreate, VendorPaymentCreate
from guardroster.services.attendance_form import AttendanceEntry, normalized
from guardroster.services.attendance_hours import hours_between, hours_worked, parse_hhmm, shift_span

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "Unknown Employee"
UNKNOWN_CUSTOMER = "Unknown Customer"
NO_LOCATION = "No location specified"


class AttendanceValidationError(ValueError):
    """The submission cannot be accepted as given"""
    pass


class ReplacementNotAllowedError(ValueError):
    """The chosen relief vendor / employee cannot cover this absence"""
    pass


class EmployeeNotScheduledError(ValueError):
    """Employee has no scheduled shift on the date"""
    pass


class AttendanceRecordNotFoundError(ValueError):
    pass


class AttendanceAlreadyRecordedError(ValueError):
    """An attendance record already exists for the employee and date"""
    pass


@dataclass(frozen=True)
class RosterEntry:
    """Snapshot of one scheduled employee; plain values so it survives session rollbacks."""
    schedule_id: int
    employee_id: int
    employee_code: str
    employee_name: str
    customer_id: Optional[int]
    customer_name: str
    location: str
    shift_date: date
    start_time: time
    end_time: time


@dataclass
class PaymentResult:
    outcome: str = "not_required"  # not_required / created / failed
    payment_id: Optional[int] = None
    message: Optional[str] = None


@dataclass
class AttendanceItemResult:
    employee_id: int
    outcome: str  # saved / skipped / failed
    attendance_id: Optional[int] = None
    status: Optional[str] = None
    hours_worked: Optional[Decimal] = None
    error: Optional[str] = None
    payment: PaymentResult = field(default_factory=PaymentResult)


@dataclass
class SubmitResult:
    date: date
    mode: str
    results: List[AttendanceItemResult] = field(default_factory=list)

    def _count(self, outcome: str) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def saved(self) -> int:
        return self._count("saved")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")


# ---------- roster / candidates (read side) ----------


async def fetch_roster(db: AsyncSession, on_date: date, customer_id: Optional[int] = None) -> List[RosterEntry]:
    """One entry per employee scheduled on on_date; the earliest shift wins when there are several."""
    rows = await crud.list_scheduled_for_date(db, on_date, customer_id=customer_id)
    roster: Dict[int, RosterEntry] = {}
    for sa, emp, cust in rows:
        if emp.id in roster:
            continue
        roster[emp.id] = RosterEntry(
            schedule_id=sa.id,
            employee_id=emp.id,
            employee_code=emp.employee_code,
            employee_name=emp.name or UNKNOWN_EMPLOYEE,
            customer_id=sa.customer_id,
            customer_name=cust.company_name if cust else UNKNOWN_CUSTOMER,
            location=sa.location or NO_LOCATION,
            shift_date=sa.shift_date,
            start_time=sa.start_time,
            end_time=sa.end_time,
        )
    return list(roster.values())


async def load_roster(
    db: AsyncSession, on_date: date, customer_id: Optional[int] = None
) -> Tuple[List[Tuple[RosterEntry, Optional[AttendanceRecord]]], List[str]]:
    """Roster plus any existing attendance for prefilling. A failed read leaves the list empty with a warning."""
    try:
        roster = await fetch_roster(db, on_date, customer_id=customer_id)
        existing = await crud.get_attendance_map(db, [r.employee_id for r in roster], on_date)
    except SQLAlchemyError as e:
        logger.warning("load_roster %s failed: %s", on_date, e)
        return [], ["Failed to fetch scheduled employees"]
    return [(r, existing.get(r.employee_id)) for r in roster], []


async def load_replacement_candidates(
    db: AsyncSession, employee_id: Optional[int] = None
) -> Tuple[List[Vendor], List[Employee], List[str]]:
    """Active vendors and active employees; the absent employee is never offered as their own relief."""
    warnings: List[str] = []
    vendors: List[Vendor] = []
    employees: List[Employee] = []
    try:
        vendors = await crud.list_active_vendors(db)
    except SQLAlchemyError as e:
        logger.warning("load vendors failed: %s", e)
        warnings.append("Failed to fetch vendors")
    try:
        employees = await crud.list_active_employees(db, exclude_id=employee_id)
    except SQLAlchemyError as e:
        logger.warning("load employees failed: %s", e)
        warnings.append("Failed to fetch employees")
    return vendors, employees, warnings


# ---------- shaping / validation ----------


def _positive(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is None or v <= 0:
        return None
    return v


def build_record_values(entry: AttendanceEntry, on_date: date) -> Dict[str, object]:
    """Column values for one (already normalized) entry."""
    check_in_time = None
    check_out_time = None
    if entry.check_in:
        check_in_time = datetime.combine(on_date, parse_hhmm(entry.check_in))
    if entry.check_out:
        if entry.check_in:
            _, check_out_time = shift_span(on_date, entry.check_in, entry.check_out)
        else:
            check_out_time = datetime.combine(on_date, parse_hhmm(entry.check_out))
    return {
        "employee_id": entry.employee_id,
        "date": on_date,
        "status": entry.status,
        "check_in_time": check_in_time,
        "check_out_time": check_out_time,
        "hours_worked": hours_worked(entry.check_in, entry.check_out),
        "is_overtime": False,
        "notes": entry.notes or None,
        "replacement_type": entry.replacement_type,
        "replacement_vendor_id": entry.replacement_vendor_id,
        "replacement_employee_id": entry.replacement_employee_id,
        "replacement_notes": entry.replacement_notes or None,
        "replacement_is_overtime": bool(entry.replacement_is_overtime),
        "relieving_cost": _positive(entry.relieving_cost),
    }


async def validate_replacement(db: AsyncSession, entry: AttendanceEntry) -> None:
    """Relief must be an active vendor, or an active employee other than the absent one (row id vs row id)."""
    if not entry.is_absent or not entry.replacement_type:
        return
    if entry.replacement_type == "vendor" and entry.replacement_vendor_id is not None:
        vendor = await crud.get_vendor(db, entry.replacement_vendor_id)
        if not vendor:
            raise ReplacementNotAllowedError("Replacement vendor does not exist")
        if vendor.status != "active":
            raise ReplacementNotAllowedError("Replacement vendor is not active")
    if entry.replacement_type == "employee" and entry.replacement_employee_id is not None:
        if entry.replacement_employee_id == entry.employee_id:
            raise ReplacementNotAllowedError("An employee cannot replace themself")
        emp = await crud.get_employee(db, entry.replacement_employee_id)
        if not emp:
            raise ReplacementNotAllowedError("Replacement employee does not exist")
        if emp.status != "active":
            raise ReplacementNotAllowedError("Replacement employee is not active")


def _payment_due(entry: AttendanceEntry) -> bool:
    return entry.is_absent and entry.replacement_type == "vendor" and _positive(entry.vendor_cost) is not None


# ---------- vendor payment (second phase) ----------


async def record_vendor_payment(
    db: AsyncSession,
    *,
    vendor_id: Optional[int],
    customer_id: Optional[int],
    amount: Decimal,
    on_date: date,
    employee_name: str,
    employee_code: str,
) -> PaymentResult:
    """Create and commit the relief payment. Never raises; the outcome is reported."""
    if vendor_id is None:
        return PaymentResult(outcome="failed", message="No replacement vendor selected")
    if customer_id is None:
        return PaymentResult(outcome="failed", message="No customer linked to the shift")
    note = settings.relief_payment_note_template.format(
        employee_name=employee_name, employee_code=employee_code, date=on_date.isoformat()
    )
    try:
        payment = await crud.create_vendor_payment(
            db,
            VendorPaymentCreate(
                vendor_id=vendor_id,
                customer_id=customer_id,
                amount=amount,
                payment_date=on_date,
                notes=note,
            ),
        )
        payment_id = payment.id
        await db.commit()
    except (ValueError, SQLAlchemyError) as e:
        await db.rollback()
        logger.warning("vendor payment for %s on %s failed: %s", employee_code, on_date, e)
        return PaymentResult(outcome="failed", message=str(e))
    return PaymentResult(outcome="created", payment_id=payment_id)


# ---------- submission ----------


async def _save_entry(
    db: AsyncSession,
    entry: AttendanceEntry,
    on_date: date,
    *,
    schedule_id: Optional[int],
    customer_id: Optional[int],
    employee_name: str,
    employee_code: str,
    record: Optional[AttendanceRecord] = None,
) -> AttendanceItemResult:
    """Write one entry (upsert, or update of `record` in edit mode) then run the payment step."""
    if not entry.status:
        return AttendanceItemResult(employee_id=entry.employee_id, outcome="skipped", error="No status set")
    try:
        entry = normalized(entry)
        await validate_replacement(db, entry)
        values = build_record_values(entry, on_date)
        covered_by = await crud.get_covering_vendor_id(db, entry.employee_id, on_date)
        if record is None:
            values["schedule_id"] = schedule_id
            attendance_id = await crud.upsert_attendance(db, values)
        else:
            values.pop("employee_id")
            values.pop("date")
            # an edited overtime shift stays overtime unless it becomes an absence
            values["is_overtime"] = bool(record.is_overtime) and entry.status != "absent"
            record = await crud.update_attendance(db, record, values)
            attendance_id = record.id
        await db.commit()
    except (ValueError, SQLAlchemyError) as e:
        await db.rollback()
        logger.warning("attendance for %s on %s not saved: %s", employee_code, on_date, e)
        return AttendanceItemResult(employee_id=entry.employee_id, outcome="failed", status=entry.status, error=str(e))

    result = AttendanceItemResult(
        employee_id=entry.employee_id,
        outcome="saved",
        attendance_id=attendance_id,
        status=entry.status,
        hours_worked=values["hours_worked"],
    )
    if _payment_due(entry) and covered_by is not None and covered_by == entry.replacement_vendor_id:
        # resubmitting the same cover never bills the vendor again; extra payments go through the retry
        result.payment = PaymentResult(message="Vendor cover already recorded for this absence")
    elif _payment_due(entry):
        result.payment = await record_vendor_payment(
            db,
            vendor_id=entry.replacement_vendor_id,
            customer_id=customer_id,
            amount=entry.vendor_cost,
            on_date=on_date,
            employee_name=employee_name,
            employee_code=employee_code,
        )
    return result


async def submit_single(db: AsyncSession, on_date: date, entry: AttendanceEntry) -> SubmitResult:
    """Single-employee mode: the employee must be scheduled on the date and a status is required."""
    if not entry.status:
        raise AttendanceValidationError("Status is required")
    roster = await fetch_roster(db, on_date)
    target = next((r for r in roster if r.employee_id == entry.employee_id), None)
    if target is None:
        raise EmployeeNotScheduledError("Employee is not scheduled on this date")
    item = await _save_entry(
        db,
        entry,
        on_date,
        schedule_id=target.schedule_id,
        customer_id=target.customer_id,
        employee_name=target.employee_name,
        employee_code=target.employee_code,
    )
    return SubmitResult(date=on_date, mode="single", results=[item])


async def submit_bulk(
    db: AsyncSession,
    on_date: date,
    entries: Mapping[int, AttendanceEntry],
    customer_id: Optional[int] = None,
) -> SubmitResult:
    """Bulk mode: walk every scheduled employee in roster order, one write at a time."""
    if not any(e.status for e in entries.values()):
        raise AttendanceValidationError("Set a status for at least one employee")
    roster = await fetch_roster(db, on_date, customer_id=customer_id)
    result = SubmitResult(date=on_date, mode="bulk")
    on_roster = set()
    for r in roster:
        on_roster.add(r.employee_id)
        entry = entries.get(r.employee_id) or AttendanceEntry(employee_id=r.employee_id)
        item = await _save_entry(
            db,
            entry,
            on_date,
            schedule_id=r.schedule_id,
            customer_id=r.customer_id,
            employee_name=r.employee_name,
            employee_code=r.employee_code,
        )
        result.results.append(item)
    for employee_id in entries:
        if employee_id not in on_roster:
            result.results.append(
                AttendanceItemResult(employee_id=employee_id, outcome="skipped", error="Employee is not scheduled on this date")
            )
    return result


async def submit_edit(db: AsyncSession, attendance_id: int, entry: AttendanceEntry) -> SubmitResult:
    """Edit mode: one existing record by id; its employee and date stay as they are."""
    record = await crud.get_attendance(db, attendance_id)
    if not record:
        raise AttendanceRecordNotFoundError("Attendance record not found")
    if not entry.status:
        raise AttendanceValidationError("Status is required")
    on_date = record.date
    employee_name = record.employee.name if record.employee else UNKNOWN_EMPLOYEE
    employee_code = record.employee.employee_code if record.employee else ""
    customer_id = record.shift.customer_id if record.shift else None
    entry = replace(entry, employee_id=record.employee_id)
    item = await _save_entry(
        db,
        entry,
        on_date,
        schedule_id=record.schedule_id,
        customer_id=customer_id,
        employee_name=employee_name,
        employee_code=employee_code,
        record=record,
    )
    return SubmitResult(date=on_date, mode="edit", results=[item])


async def retry_vendor_payment(db: AsyncSession, attendance_id: int, amount: Decimal) -> PaymentResult:
    """Run the payment step again for an existing vendor-covered absence."""
    record = await crud.get_attendance(db, attendance_id)
    if not record:
        raise AttendanceRecordNotFoundError("Attendance record not found")
    if record.status != "absent" or record.replacement_type != "vendor":
        raise AttendanceValidationError("Record is not an absence covered by a vendor")
    return await record_vendor_payment(
        db,
        vendor_id=record.replacement_vendor_id,
        customer_id=record.shift.customer_id if record.shift else None,
        amount=amount,
        on_date=record.date,
        employee_name=record.employee.name if record.employee else UNKNOWN_EMPLOYEE,
        employee_code=record.employee.employee_code if record.employee else "",
    )


# ---------- overtime ----------


async def log_overtime(db: AsyncSession, data: OvertimeCreate) -> AttendanceRecord:
    """Insert a present record flagged as overtime; one record per employee and date still applies."""
    employee = await crud.get_employee(db, data.employee_id)
    if not employee:
        raise AttendanceValidationError("Employee does not exist")
    customer = await crud.get_customer(db, data.customer_id)
    if not customer:
        raise AttendanceValidationError("Customer does not exist")
    check_in_time, check_out_time = shift_span(data.date, data.start_time, data.end_time)
    notes = data.notes or f"Overtime: {data.overtime_hours.normalize():f} hours for {customer.company_name}"
    values = {
        "employee_id": data.employee_id,
        "date": data.date,
        "status": "present",
        "check_in_time": check_in_time,
        "check_out_time": check_out_time,
        "hours_worked": hours_between(data.start_time, data.end_time),
        "is_overtime": True,
        "notes": notes,
    }
    try:
        record = await crud.create_attendance(db, values)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AttendanceAlreadyRecordedError("Attendance already recorded for this employee on this date")
    return record
