"""
Attendance report aggregation (no DB).
Covers: rate formula, relief counting, empty cells dropped, week buckets, ordering, customer summaries, daily board stats.
"""
from datetime import date, time
from decimal import Decimal
import pytest

from guardroster.services.attendance_report import (
    AttendanceRow,
    CustomerRef,
    EmployeeAttendanceRow,
    EmployeeShiftRow,
    ReportRow,
    ShiftRow,
    attendance_rate,
    build_attendance_report,
    daily_stats,
    period_buckets,
    summarize_by_customer,
    summarize_employee_attendance,
    week_start,
)

D = date(2025, 3, 5)  # Wednesday


def test_rate_counts_relief_as_attended():
    """10 scheduled, 7 present, 2 relieved absences -> 90"""
    assert attendance_rate(7, 2, 10) == 90


def test_rate_zero_when_nothing_scheduled():
    assert attendance_rate(3, 0, 0) == 0


def test_rate_rounds_half_up():
    # 1 / 8 = 12.5 -> 13
    assert attendance_rate(1, 0, 8) == 13
    # 2 / 3 = 66.67 -> 67
    assert attendance_rate(2, 0, 3) == 67


def test_week_start_defaults_to_sunday():
    assert week_start(D) == date(2025, 3, 2)
    assert week_start(date(2025, 3, 2)) == date(2025, 3, 2)
    assert week_start(D, first_weekday=0) == date(2025, 3, 3)


def test_period_buckets():
    assert period_buckets(date(2025, 3, 1), date(2025, 3, 3), "day") == [
        date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3),
    ]
    # Sat 1st sits in the week of Sun Feb 23
    assert period_buckets(date(2025, 3, 1), date(2025, 3, 10), "week") == [
        date(2025, 2, 23), date(2025, 3, 2), date(2025, 3, 9),
    ]
    assert period_buckets(date(2025, 3, 5), date(2025, 3, 1), "day") == []
    with pytest.raises(ValueError):
        period_buckets(D, D, "month")


def test_report_counts_and_rate():
    customers = [CustomerRef(1, "Acme Towers")]
    shifts = [ShiftRow(D, 1) for _ in range(10)]
    attendance = (
        [AttendanceRow(D, "present", 1) for _ in range(7)]
        + [AttendanceRow(D, "absent", 1, "vendor"), AttendanceRow(D, "absent", 1, "employee")]
        + [AttendanceRow(D, "absent", 1)]
    )
    rows = build_attendance_report(D, D, "day", customers, shifts, attendance)
    assert len(rows) == 1
    r = rows[0]
    assert r.scheduled_count == 10
    assert r.present_count == 7
    assert r.absent_count == 3
    assert r.relief_count == 2
    assert r.attendance_rate == 90


def test_late_counts_as_neither_present_nor_relief():
    customers = [CustomerRef(1, "Acme Towers")]
    shifts = [ShiftRow(D, 1), ShiftRow(D, 1)]
    attendance = [AttendanceRow(D, "present", 1), AttendanceRow(D, "late", 1)]
    r = build_attendance_report(D, D, "day", customers, shifts, attendance)[0]
    assert r.late_count == 1
    assert r.attendance_rate == 50


def test_customer_without_scheduled_shifts_is_dropped():
    customers = [CustomerRef(1, "Acme Towers"), CustomerRef(2, "Bay Mall")]
    shifts = [ShiftRow(D, 1)]
    # attendance without a schedule at Bay Mall never creates a row on its own
    attendance = [AttendanceRow(D, "present", 1), AttendanceRow(D, "present", 2)]
    rows = build_attendance_report(D, D, "day", customers, shifts, attendance)
    assert [r.customer_id for r in rows] == [1]


def test_only_scheduled_shifts_in_range_count():
    customers = [CustomerRef(1, "Acme Towers")]
    shifts = [
        ShiftRow(D, 1),
        ShiftRow(D, 1, status="cancelled"),
        ShiftRow(date(2025, 3, 20), 1),
        ShiftRow(D, None),
    ]
    rows = build_attendance_report(D, D, "day", customers, shifts, [])
    assert rows[0].scheduled_count == 1
    assert rows[0].attendance_rate == 0


def test_inactive_customer_attendance_ignored():
    """Only customers passed in (the active ones) get rows"""
    rows = build_attendance_report(D, D, "day", [CustomerRef(1, "Acme Towers")], [ShiftRow(D, 9)], [AttendanceRow(D, "present", 9)])
    assert rows == []


def test_week_granularity_groups_by_week_start():
    customers = [CustomerRef(1, "Acme Towers")]
    shifts = [ShiftRow(date(2025, 3, 3), 1), ShiftRow(date(2025, 3, 7), 1), ShiftRow(date(2025, 3, 10), 1)]
    attendance = [AttendanceRow(date(2025, 3, 3), "present", 1), AttendanceRow(date(2025, 3, 10), "absent", 1)]
    rows = build_attendance_report(date(2025, 3, 1), date(2025, 3, 14), "week", customers, shifts, attendance)
    assert [(r.date, r.scheduled_count, r.present_count) for r in rows] == [
        (date(2025, 3, 2), 2, 1),
        (date(2025, 3, 9), 1, 0),
    ]
    assert rows[0].attendance_rate == 50
    assert rows[1].attendance_rate == 0


def test_rows_sorted_by_date_then_customer_name():
    customers = [CustomerRef(1, "zeta Plaza"), CustomerRef(2, "Alpha Park"), CustomerRef(3, "beta Works")]
    d2 = date(2025, 3, 6)
    shifts = [ShiftRow(d2, 2), ShiftRow(D, 1), ShiftRow(D, 3), ShiftRow(D, 2)]
    rows = build_attendance_report(D, d2, "day", customers, shifts, [])
    assert [(r.date, r.customer_name) for r in rows] == [
        (D, "Alpha Park"),
        (D, "beta Works"),
        (D, "zeta Plaza"),
        (d2, "Alpha Park"),
    ]


def test_summary_recomputes_rate_from_sums():
    """Day rates 100 and 0 average to 50, but 1 of 3 shifts attended is 33"""
    rows = [
        ReportRow(date=D, customer_id=1, customer_name="Acme Towers", scheduled_count=1, present_count=1, attendance_rate=100),
        ReportRow(date=date(2025, 3, 6), customer_id=1, customer_name="Acme Towers", scheduled_count=2, absent_count=2, attendance_rate=0),
    ]
    summaries = summarize_by_customer(rows)
    assert len(summaries) == 1
    s = summaries[0]
    assert s.total_scheduled == 3
    assert s.total_present == 1
    assert s.total_absent == 2
    assert s.overall_rate == 33


def test_daily_stats():
    stats = daily_stats(["present", "present", "late", "absent"])
    assert (stats.present, stats.late, stats.absent) == (2, 1, 1)
    assert stats.rate == Decimal("75.0")
    assert daily_stats(["present", "absent", "absent"]).rate == Decimal("33.3")
    assert daily_stats([]).rate == Decimal("0")


def test_employee_summary():
    shifts = [
        EmployeeShiftRow(time(9, 0), time(17, 0)),
        EmployeeShiftRow(time(22, 0), time(6, 0)),
    ]
    records = [
        EmployeeAttendanceRow("present", Decimal("8.00")),
        EmployeeAttendanceRow("late", Decimal("7.50")),
        EmployeeAttendanceRow("present", Decimal("4.00"), is_overtime=True),
        EmployeeAttendanceRow("absent"),
    ]
    s = summarize_employee_attendance(shifts, records)
    assert s.total_shifts == 2
    assert s.scheduled_hours == Decimal("16.00")
    assert s.attendance_records == 4
    assert s.hours_worked == Decimal("19.50")
    assert s.overtime_hours == Decimal("4.00")
    assert s.status_counts == {"present": 2, "late": 1, "absent": 1}
