"""CRUD operations - customers, employees, vendors, shift assignments, attendance, vendor payments, cash advances."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any, Iterable
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from guardroster.models import (
    Customer, Employee, Vendor, ShiftAssignment, AttendanceRecord, VendorPayment, CashAdvance,
)
from guardroster.schemas import (
    ShiftAssignmentCreate, ShiftAssignmentUpdate, VendorPaymentCreate, CashAdvanceCreate,
)
from guardroster.services.attendance_report import (
    CustomerRef, ShiftRow, AttendanceRow, EmployeeShiftRow, EmployeeAttendanceRow,
)


# ---------- customers / employees / vendors (lookups) ----------
async def get_customer(db: AsyncSession, customer_id: int) -> Optional[Customer]:
    r = await db.execute(select(Customer).where(Customer.id == customer_id))
    return r.scalar_one_or_none()


async def list_active_customers(db: AsyncSession) -> List[Customer]:
    r = await db.execute(select(Customer).where(Customer.status == "active").order_by(Customer.company_name))
    return list(r.scalars().all())


async def get_employee(db: AsyncSession, employee_id: int) -> Optional[Employee]:
    r = await db.execute(select(Employee).where(Employee.id == employee_id))
    return r.scalar_one_or_none()


async def list_active_employees(db: AsyncSession, exclude_id: Optional[int] = None) -> List[Employee]:
    """Active employees ordered by name; exclude_id drops one row id (e.g. the absent employee)."""
    q = select(Employee).where(Employee.status == "active").order_by(Employee.name)
    if exclude_id is not None:
        q = q.where(Employee.id != exclude_id)
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_vendor(db: AsyncSession, vendor_id: int) -> Optional[Vendor]:
    r = await db.execute(select(Vendor).where(Vendor.id == vendor_id))
    return r.scalar_one_or_none()


async def list_active_vendors(db: AsyncSession) -> List[Vendor]:
    r = await db.execute(select(Vendor).where(Vendor.status == "active").order_by(Vendor.company_name))
    return list(r.scalars().all())


# ---------- shift_assignments ----------
async def get_shift_assignment(db: AsyncSession, shift_id: int, load_names: bool = False) -> Optional[ShiftAssignment]:
    q = select(ShiftAssignment).where(ShiftAssignment.id == shift_id)
    if load_names:
        q = q.options(selectinload(ShiftAssignment.employee), selectinload(ShiftAssignment.customer))
    r = await db.execute(q)
    return r.scalar_one_or_none()


async def list_shift_assignments(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
    employee_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    status: Optional[str] = None,
    load_names: bool = False,
) -> List[ShiftAssignment]:
    q = select(ShiftAssignment).order_by(ShiftAssignment.shift_date, ShiftAssignment.start_time, ShiftAssignment.id)
    if start is not None:
        q = q.where(ShiftAssignment.shift_date >= start)
    if end is not None:
        q = q.where(ShiftAssignment.shift_date <= end)
    if employee_id is not None:
        q = q.where(ShiftAssignment.employee_id == employee_id)
    if customer_id is not None:
        q = q.where(ShiftAssignment.customer_id == customer_id)
    if status:
        q = q.where(ShiftAssignment.status == status)
    if load_names:
        q = q.options(selectinload(ShiftAssignment.employee), selectinload(ShiftAssignment.customer))
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_scheduled_for_date(
    db: AsyncSession,
    on_date: date,
    customer_id: Optional[int] = None,
) -> List[Any]:
    """Shift assignments with status scheduled on on_date, joined with employee (inner) and customer (outer).
    Rows expose ShiftAssignment, Employee, Customer; ordered by start time."""
    q = (
        select(ShiftAssignment, Employee, Customer)
        .join(Employee, ShiftAssignment.employee_id == Employee.id)
        .outerjoin(Customer, ShiftAssignment.customer_id == Customer.id)
        .where(ShiftAssignment.shift_date == on_date, ShiftAssignment.status == "scheduled")
        .order_by(ShiftAssignment.start_time, ShiftAssignment.id)
    )
    if customer_id is not None:
        q = q.where(ShiftAssignment.customer_id == customer_id)
    r = await db.execute(q)
    return list(r.all())


class ShiftAssignmentConflictError(ValueError):
    """Employee already has a shift starting at the same time on that date"""
    pass


async def _has_clashing_shift(
    db: AsyncSession, employee_id: int, shift_date: date, start_time, exclude_id: Optional[int] = None
) -> bool:
    q = select(ShiftAssignment.id).where(
        ShiftAssignment.employee_id == employee_id,
        ShiftAssignment.shift_date == shift_date,
        ShiftAssignment.start_time == start_time,
        ShiftAssignment.status != "cancelled",
    )
    if exclude_id is not None:
        q = q.where(ShiftAssignment.id != exclude_id)
    r = await db.execute(q.limit(1))
    return r.scalar_one_or_none() is not None


async def create_shift_assignment(db: AsyncSession, data: ShiftAssignmentCreate) -> ShiftAssignment:
    if await _has_clashing_shift(db, data.employee_id, data.shift_date, data.start_time):
        raise ShiftAssignmentConflictError("Employee already has a shift at this time on this date")
    sa = ShiftAssignment(**data.model_dump())
    db.add(sa)
    await db.flush()
    await db.refresh(sa)
    return sa


async def update_shift_assignment(db: AsyncSession, sa: ShiftAssignment, data: ShiftAssignmentUpdate) -> ShiftAssignment:
    update_data = data.model_dump(exclude_unset=True)
    shift_date = update_data.get("shift_date", sa.shift_date)
    start_time = update_data.get("start_time", sa.start_time)
    if await _has_clashing_shift(db, sa.employee_id, shift_date, start_time, exclude_id=sa.id):
        raise ShiftAssignmentConflictError("Employee already has a shift at this time on this date")
    for k, v in update_data.items():
        setattr(sa, k, v)
    await db.flush()
    await db.refresh(sa)
    return sa


async def delete_shift_assignment(db: AsyncSession, sa: ShiftAssignment) -> None:
    await db.delete(sa)


# ---------- attendance ----------
ATTENDANCE_CONFLICT_KEYS = ("employee_id", "date")


def _dialect_insert(db: AsyncSession):
    """INSERT construct with ON CONFLICT support for the bound dialect."""
    name = db.get_bind().dialect.name
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"upsert is not supported on {name}")
    return insert


async def get_attendance(db: AsyncSession, attendance_id: int) -> Optional[AttendanceRecord]:
    r = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.id == attendance_id)
        .execution_options(populate_existing=True)
        .options(
            selectinload(AttendanceRecord.employee),
            selectinload(AttendanceRecord.shift).selectinload(ShiftAssignment.customer),
        )
    )
    return r.scalar_one_or_none()


async def get_attendance_id_for(db: AsyncSession, employee_id: int, on_date: date) -> Optional[int]:
    r = await db.execute(
        select(AttendanceRecord.id).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date == on_date,
        )
    )
    return r.scalar_one_or_none()


async def get_covering_vendor_id(db: AsyncSession, employee_id: int, on_date: date) -> Optional[int]:
    """Vendor already recorded as covering this employee's absence on on_date, if any."""
    r = await db.execute(
        select(AttendanceRecord.replacement_vendor_id).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date == on_date,
            AttendanceRecord.status == "absent",
            AttendanceRecord.replacement_type == "vendor",
        )
    )
    return r.scalar_one_or_none()


async def get_attendance_map(db: AsyncSession, employee_ids: Iterable[int], on_date: date) -> Dict[int, AttendanceRecord]:
    """employee_id -> existing attendance on on_date (for prefilling the capture form)."""
    ids = list(employee_ids)
    if not ids:
        return {}
    r = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id.in_(ids),
            AttendanceRecord.date == on_date,
        ).execution_options(populate_existing=True)
    )
    return {a.employee_id: a for a in r.scalars().all()}


async def list_attendance(
    db: AsyncSession,
    employee_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    is_overtime: Optional[bool] = None,
) -> List[AttendanceRecord]:
    q = (
        select(AttendanceRecord)
        .order_by(AttendanceRecord.date.desc(), AttendanceRecord.id)
        .execution_options(populate_existing=True)
    )
    if employee_id is not None:
        q = q.where(AttendanceRecord.employee_id == employee_id)
    if start is not None:
        q = q.where(AttendanceRecord.date >= start)
    if end is not None:
        q = q.where(AttendanceRecord.date <= end)
    if is_overtime is not None:
        q = q.where(AttendanceRecord.is_overtime == is_overtime)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_attendance_for_date(db: AsyncSession, on_date: date) -> List[AttendanceRecord]:
    """Attendance on one date with employee and shift -> customer loaded (daily board)."""
    r = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.date == on_date)
        .execution_options(populate_existing=True)
        .options(
            selectinload(AttendanceRecord.employee),
            selectinload(AttendanceRecord.shift).selectinload(ShiftAssignment.customer),
        )
        .order_by(AttendanceRecord.id)
    )
    return list(r.scalars().all())


async def upsert_attendance(db: AsyncSession, values: Dict[str, Any]) -> int:
    """Insert or update the record for (employee_id, date); returns its id."""
    insert = _dialect_insert(db)
    stmt = insert(AttendanceRecord).values(**values)
    set_ = {k: stmt.excluded[k] for k in values if k not in ATTENDANCE_CONFLICT_KEYS}
    # ON CONFLICT updates skip Column.onupdate, so stamp it here
    set_["updated_at"] = datetime.utcnow()
    stmt = stmt.on_conflict_do_update(index_elements=list(ATTENDANCE_CONFLICT_KEYS), set_=set_)
    await db.execute(stmt)
    attendance_id = await get_attendance_id_for(db, values["employee_id"], values["date"])
    return attendance_id


async def update_attendance(db: AsyncSession, record: AttendanceRecord, values: Dict[str, Any]) -> AttendanceRecord:
    for k, v in values.items():
        setattr(record, k, v)
    await db.flush()
    await db.refresh(record)
    return record


async def create_attendance(db: AsyncSession, values: Dict[str, Any]) -> AttendanceRecord:
    record = AttendanceRecord(**values)
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record


# ---------- report inputs ----------
async def list_report_customers(db: AsyncSession) -> List[CustomerRef]:
    return [CustomerRef(id=c.id, name=c.company_name) for c in await list_active_customers(db)]


async def list_report_shifts(db: AsyncSession, start: date, end: date) -> List[ShiftRow]:
    r = await db.execute(
        select(ShiftAssignment.shift_date, ShiftAssignment.customer_id, ShiftAssignment.status).where(
            ShiftAssignment.shift_date >= start,
            ShiftAssignment.shift_date <= end,
            ShiftAssignment.status == "scheduled",
        )
    )
    return [ShiftRow(shift_date=row.shift_date, customer_id=row.customer_id, status=row.status) for row in r.all()]


async def list_report_attendance(db: AsyncSession, start: date, end: date) -> List[AttendanceRow]:
    """Attendance in range; customer resolved through the linked shift (None when unlinked)."""
    r = await db.execute(
        select(
            AttendanceRecord.date,
            AttendanceRecord.status,
            AttendanceRecord.replacement_type,
            ShiftAssignment.customer_id,
        )
        .outerjoin(ShiftAssignment, AttendanceRecord.schedule_id == ShiftAssignment.id)
        .where(AttendanceRecord.date >= start, AttendanceRecord.date <= end)
    )
    return [
        AttendanceRow(date=row.date, status=row.status, customer_id=row.customer_id, replacement_type=row.replacement_type)
        for row in r.all()
    ]


async def list_employee_summary_inputs(
    db: AsyncSession, employee_id: int, start: date, end: date
) -> tuple:
    shifts = await list_shift_assignments(db, start=start, end=end, employee_id=employee_id)
    records = await list_attendance(db, employee_id=employee_id, start=start, end=end)
    return (
        [EmployeeShiftRow(start_time=s.start_time, end_time=s.end_time) for s in shifts],
        [EmployeeAttendanceRow(status=a.status, hours_worked=a.hours_worked, is_overtime=bool(a.is_overtime)) for a in records],
    )


# ---------- vendor_payments ----------
async def create_vendor_payment(db: AsyncSession, data: VendorPaymentCreate) -> VendorPayment:
    p = VendorPayment(**data.model_dump())
    db.add(p)
    await db.flush()
    await db.refresh(p)
    return p


async def list_vendor_payments(
    db: AsyncSession,
    vendor_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[VendorPayment]:
    q = select(VendorPayment).order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc())
    if vendor_id is not None:
        q = q.where(VendorPayment.vendor_id == vendor_id)
    if customer_id is not None:
        q = q.where(VendorPayment.customer_id == customer_id)
    if start is not None:
        q = q.where(VendorPayment.payment_date >= start)
    if end is not None:
        q = q.where(VendorPayment.payment_date <= end)
    r = await db.execute(q)
    return list(r.scalars().all())


# ---------- cash_advances ----------
async def create_cash_advance(db: AsyncSession, data: CashAdvanceCreate) -> CashAdvance:
    ca = CashAdvance(**data.model_dump())
    db.add(ca)
    await db.flush()
    await db.refresh(ca)
    return ca


async def list_cash_advances(
    db: AsyncSession,
    employee_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    status: Optional[str] = None,
) -> List[CashAdvance]:
    q = select(CashAdvance).order_by(CashAdvance.date_requested.desc(), CashAdvance.id.desc())
    if employee_id is not None:
        q = q.where(CashAdvance.employee_id == employee_id)
    if start is not None:
        q = q.where(CashAdvance.date_requested >= start)
    if end is not None:
        q = q.where(CashAdvance.date_requested <= end)
    if status:
        q = q.where(CashAdvance.status == status)
    r = await db.execute(q)
    return list(r.scalars().all())


def cash_advance_totals(items: Iterable[CashAdvance]) -> Dict[str, Decimal]:
    total = Decimal("0")
    total_approved = Decimal("0")
    for ca in items:
        amount = Decimal(ca.amount or 0)
        total += amount
        if ca.status == "approved":
            total_approved += amount
    return {"total": total, "total_approved": total_approved}
