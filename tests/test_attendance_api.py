"""
Attendance and report endpoints, called directly with a session.
Covers: roster prefill, request flag handling, daily board, attendance report, employee summary.
"""
from datetime import date, time
from decimal import Decimal

import pytest
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guardroster.database import Base
from guardroster.models import Customer, Employee, ShiftAssignment, Vendor
from guardroster.routers import attendance as attendance_router
from guardroster.routers import reports as reports_router
from guardroster.schemas import (
    AttendanceBulkEntry, AttendanceBulkRequest, AttendanceEditRequest, AttendanceMarkRequest, OvertimeCreate,
)

D = date(2025, 3, 5)


@pytest.fixture
async def async_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield session_factory
    finally:
        await engine.dispose()


async def _seed(db: AsyncSession):
    acme = Customer(customer_code="CUS001", company_name="Acme Towers")
    bay = Customer(customer_code="CUS002", company_name="bay Mall")
    db.add_all([acme, bay])
    a = Employee(employee_code="EMP001", name="Ravi Kumar")
    b = Employee(employee_code="EMP002", name="Sunil Das")
    db.add_all([a, b])
    v = Vendor(vendor_code="VEN001", company_name="Shield Relief Services")
    db.add(v)
    await db.flush()
    db.add_all([
        ShiftAssignment(employee_id=a.id, customer_id=acme.id, shift_date=D, start_time=time(9, 0), end_time=time(17, 0), location="Lobby"),
        ShiftAssignment(employee_id=b.id, customer_id=bay.id, shift_date=D, start_time=time(22, 0), end_time=time(6, 0)),
    ])
    await db.commit()
    return acme.id, bay.id, a.id, b.id, v.id


@pytest.mark.asyncio
async def test_bulk_then_roster_prefill(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        resp = await attendance_router.mark_attendance_bulk(
            data=AttendanceBulkRequest(date=D, entries=[
                AttendanceBulkEntry(employee_id=a, is_present=True, check_in="9:00", check_out="17:00"),
                AttendanceBulkEntry(employee_id=b, is_absent=True, replacement_type="vendor",
                                    replacement_vendor_id=v, vendor_cost=Decimal("500"), replacement_notes="night cover"),
            ]),
            db=db,
        )
        assert (resp.saved, resp.skipped, resp.failed) == (2, 0, 0)

        roster = await attendance_router.get_roster(on_date=D, customer_id=None, db=db)
        assert roster.warnings == []
        rows = {r.employee_id: r for r in roster.rows}
        assert rows[a].is_present and not rows[a].is_absent
        assert rows[a].check_in == "09:00"
        assert rows[a].check_out == "17:00"
        assert rows[a].location == "Lobby"
        assert rows[b].is_absent
        assert rows[b].replacement_vendor_id == v
        assert rows[b].replacement_notes == "night cover"
        assert rows[b].customer_name == "bay Mall"

        only_acme = await attendance_router.get_roster(on_date=D, customer_id=acme, db=db)
        assert [r.employee_id for r in only_acme.rows] == [a]


@pytest.mark.asyncio
async def test_mark_rejects_bad_requests(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        with pytest.raises(HTTPException) as exc:
            await attendance_router.mark_attendance(data=AttendanceMarkRequest(date=D, employee_id=a), db=db)
        assert exc.value.status_code == 400
        with pytest.raises(HTTPException) as exc:
            await attendance_router.mark_attendance(
                data=AttendanceMarkRequest(date=date(2025, 3, 9), employee_id=a, status="present"), db=db
            )
        assert exc.value.status_code == 409
        with pytest.raises(HTTPException) as exc:
            await attendance_router.mark_attendance(
                data=AttendanceMarkRequest(date=D, employee_id=a, status="sick"), db=db
            )
        assert exc.value.status_code == 400


def test_request_rejects_both_flags():
    with pytest.raises(ValueError):
        AttendanceMarkRequest(date=D, employee_id=1, is_present=True, is_absent=True)


def test_request_rejects_flags_contradicting_status():
    with pytest.raises(ValueError):
        AttendanceMarkRequest(date=D, employee_id=1, status="present", is_present=False)
    with pytest.raises(ValueError):
        AttendanceMarkRequest(date=D, employee_id=1, status="late", is_absent=True)
    ok = AttendanceMarkRequest(date=D, employee_id=1, status="late", is_present=False, is_absent=False)
    assert ok.status == "late"
    assert AttendanceMarkRequest(date=D, employee_id=1, status="absent", is_absent=True).is_absent


def test_request_rejects_bad_time_and_negative_cost():
    with pytest.raises(ValueError):
        AttendanceMarkRequest(date=D, employee_id=1, status="present", check_in="25:99")
    with pytest.raises(ValueError):
        AttendanceMarkRequest(date=D, employee_id=1, status="absent", vendor_cost=Decimal("-1"))


@pytest.mark.asyncio
async def test_daily_board_and_edit(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        await attendance_router.mark_attendance(
            data=AttendanceMarkRequest(date=D, employee_id=a, status="present", check_in="09:00", check_out="17:00"), db=db
        )
        marked = await attendance_router.mark_attendance(data=AttendanceMarkRequest(date=D, employee_id=b, status="absent"), db=db)

        board = await attendance_router.get_daily_attendance(on_date=D, db=db)
        assert (board.stats.present, board.stats.late, board.stats.absent) == (1, 0, 1)
        assert board.stats.rate == Decimal("50.0")
        names = {r.employee_name: r for r in board.records}
        assert names["Ravi Kumar"].customer_name == "Acme Towers"
        assert names["Ravi Kumar"].hours_worked == Decimal("8.00")
        assert names["Sunil Das"].location == "No location specified"

        edited = await attendance_router.edit_attendance(
            attendance_id=marked.results[0].attendance_id,
            data=AttendanceEditRequest(status="late", check_in="22:30", check_out="06:00"),
            db=db,
        )
        assert edited.results[0].hours_worked == Decimal("7.50")
        board = await attendance_router.get_daily_attendance(on_date=D, db=db)
        assert board.stats.late == 1
        assert board.stats.rate == Decimal("100.0")

        with pytest.raises(HTTPException) as exc:
            await attendance_router.edit_attendance(attendance_id=9999, data=AttendanceEditRequest(status="late"), db=db)
        assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_overtime_endpoint_conflict(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        data = OvertimeCreate(employee_id=a, customer_id=acme, date=D, start_time="18:00", end_time="21:30", overtime_hours=Decimal("3.5"))
        created = await attendance_router.log_overtime(data=data, db=db)
        assert created.is_overtime
        assert created.notes == "Overtime: 3.5 hours for Acme Towers"
        with pytest.raises(HTTPException) as exc:
            await attendance_router.log_overtime(data=data, db=db)
        assert exc.value.status_code == 409

        overtime_only = await attendance_router.list_attendance(employee_id=a, start=None, end=None, is_overtime=True, db=db)
        assert [r.id for r in overtime_only] == [created.id]


@pytest.mark.asyncio
async def test_attendance_report_endpoint(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        await attendance_router.mark_attendance_bulk(
            data=AttendanceBulkRequest(date=D, entries=[
                AttendanceBulkEntry(employee_id=a, status="present"),
                AttendanceBulkEntry(employee_id=b, status="absent", replacement_type="vendor", replacement_vendor_id=v),
            ]),
            db=db,
        )
        report = await reports_router.get_attendance_report(start=D, end=D, granularity="day", customer_id=None, db=db)
        assert [(r.customer_name, r.attendance_rate) for r in report.rows] == [("Acme Towers", 100), ("bay Mall", 100)]
        assert report.rows[1].relief_count == 1
        assert {s.customer_name: s.overall_rate for s in report.summaries} == {"Acme Towers": 100, "bay Mall": 100}

        only_bay = await reports_router.get_attendance_report(start=D, end=D, granularity="week", customer_id=bay, db=db)
        assert [r.customer_id for r in only_bay.rows] == [bay]
        assert only_bay.rows[0].date == date(2025, 3, 2)

        with pytest.raises(HTTPException) as exc:
            await reports_router.get_attendance_report(start=D, end=date(2025, 3, 1), granularity="day", customer_id=None, db=db)
        assert exc.value.status_code == 400
        with pytest.raises(HTTPException) as exc:
            await reports_router.get_attendance_report(start=D, end=D, granularity="month", customer_id=None, db=db)
        assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_employee_attendance_summary_endpoint(async_session):
    async with async_session() as db:
        acme, bay, a, b, v = await _seed(db)
        await attendance_router.mark_attendance(
            data=AttendanceMarkRequest(date=D, employee_id=b, status="present", check_in="22:00", check_out="06:00"), db=db
        )
        await attendance_router.log_overtime(
            data=OvertimeCreate(employee_id=b, customer_id=bay, date=date(2025, 3, 6), start_time="18:00", end_time="22:00", overtime_hours=Decimal("4")),
            db=db,
        )
        summary = await reports_router.get_employee_attendance_summary(employee_id=b, start=date(2025, 3, 1), end=date(2025, 3, 31), db=db)
        assert summary.total_shifts == 1
        assert summary.scheduled_hours == Decimal("8.00")
        assert summary.attendance_records == 2
        assert summary.hours_worked == Decimal("12.00")
        assert summary.overtime_hours == Decimal("4.00")
        assert summary.status_counts["present"] == 2

        with pytest.raises(HTTPException) as exc:
            await reports_router.get_employee_attendance_summary(employee_id=9999, start=D, end=D, db=db)
        assert exc.value.status_code == 404
