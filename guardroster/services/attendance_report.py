"""
Attendance report aggregation (pure functions, no DB).

- Period buckets are days or weeks (week bucket = date of the configured first weekday on or before the date).
- The full bucket x active-customer grid is built before scanning, so empty cells can be dropped afterwards.
- attendance rate = round((present + relief) / scheduled * 100), 0 when nothing was scheduled.
  A covered absence (vendor or employee replacement) counts as relief.
- Customer summaries add up the counts and recompute the rate from the sums, never averaging row rates.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from guardroster.models import REPLACEMENT_TYPES
from guardroster.services.attendance_hours import hours_between

GRANULARITIES = ("day", "week")


@dataclass(frozen=True)
class CustomerRef:
    id: int
    name: str


@dataclass(frozen=True)
class ShiftRow:
    shift_date: date
    customer_id: Optional[int]
    status: str = "scheduled"


@dataclass(frozen=True)
class AttendanceRow:
    date: date
    status: str
    customer_id: Optional[int]
    replacement_type: Optional[str] = None


@dataclass
class ReportRow:
    date: date
    customer_id: int
    customer_name: str
    scheduled_count: int = 0
    present_count: int = 0
    late_count: int = 0
    absent_count: int = 0
    relief_count: int = 0
    attendance_rate: int = 0


@dataclass
class CustomerSummary:
    customer_id: int
    customer_name: str
    total_scheduled: int = 0
    total_present: int = 0
    total_late: int = 0
    total_absent: int = 0
    total_relief: int = 0
    overall_rate: int = 0


def attendance_rate(present: int, relief: int, scheduled: int) -> int:
    if scheduled <= 0:
        return 0
    pct = Decimal(present + relief) * Decimal(100) / Decimal(scheduled)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def week_start(d: date, first_weekday: int = 6) -> date:
    """First day of the week containing d; first_weekday uses Python numbering (0=Monday, 6=Sunday)."""
    return d - timedelta(days=(d.weekday() - first_weekday) % 7)


def bucket_for(d: date, granularity: str, first_weekday: int = 6) -> date:
    if granularity == "week":
        return week_start(d, first_weekday)
    return d


def period_buckets(start: date, end: date, granularity: str, first_weekday: int = 6) -> List[date]:
    """Every bucket key touched by [start, end] (both inclusive)."""
    if granularity not in GRANULARITIES:
        raise ValueError(f"granularity must be one of {list(GRANULARITIES)}")
    if start > end:
        return []
    step = timedelta(days=7 if granularity == "week" else 1)
    current = bucket_for(start, granularity, first_weekday)
    last = bucket_for(end, granularity, first_weekday)
    buckets = []
    while current <= last:
        buckets.append(current)
        current += step
    return buckets


def _name_key(name: str) -> Tuple[str, str]:
    # case-insensitive first, like a locale compare
    return (name.casefold(), name)


def build_attendance_report(
    start: date,
    end: date,
    granularity: str,
    customers: Iterable[CustomerRef],
    shifts: Iterable[ShiftRow],
    attendance: Iterable[AttendanceRow],
    first_weekday: int = 6,
) -> List[ReportRow]:
    """One row per (bucket, customer) with at least one scheduled shift, sorted by bucket then customer name."""
    customers = list(customers)
    grid: Dict[Tuple[date, int], ReportRow] = {}
    for bucket in period_buckets(start, end, granularity, first_weekday):
        for c in customers:
            grid[(bucket, c.id)] = ReportRow(date=bucket, customer_id=c.id, customer_name=c.name)

    for sh in shifts:
        if sh.status != "scheduled" or sh.customer_id is None:
            continue
        if not (start <= sh.shift_date <= end):
            continue
        row = grid.get((bucket_for(sh.shift_date, granularity, first_weekday), sh.customer_id))
        if row is not None:
            row.scheduled_count += 1

    for att in attendance:
        if att.customer_id is None:
            continue
        if not (start <= att.date <= end):
            continue
        row = grid.get((bucket_for(att.date, granularity, first_weekday), att.customer_id))
        if row is None:
            continue
        if att.status == "present":
            row.present_count += 1
        elif att.status == "late":
            row.late_count += 1
        elif att.status == "absent":
            row.absent_count += 1
            if att.replacement_type in REPLACEMENT_TYPES:
                row.relief_count += 1

    rows = []
    for row in grid.values():
        if row.scheduled_count <= 0:
            continue
        row.attendance_rate = attendance_rate(row.present_count, row.relief_count, row.scheduled_count)
        rows.append(row)
    rows.sort(key=lambda r: (r.date, _name_key(r.customer_name)))
    return rows


def summarize_by_customer(rows: Iterable[ReportRow]) -> List[CustomerSummary]:
    """Fold report rows into one summary per customer, in first-seen order."""
    by_customer: Dict[int, CustomerSummary] = {}
    for r in rows:
        s = by_customer.get(r.customer_id)
        if s is None:
            s = CustomerSummary(customer_id=r.customer_id, customer_name=r.customer_name)
            by_customer[r.customer_id] = s
        s.total_scheduled += r.scheduled_count
        s.total_present += r.present_count
        s.total_late += r.late_count
        s.total_absent += r.absent_count
        s.total_relief += r.relief_count
    for s in by_customer.values():
        s.overall_rate = attendance_rate(s.total_present, s.total_relief, s.total_scheduled)
    return list(by_customer.values())


# ---------- daily attendance board ----------


@dataclass
class DailyStats:
    present: int = 0
    late: int = 0
    absent: int = 0
    rate: Decimal = Decimal("0")


def daily_stats(statuses: Iterable[str]) -> DailyStats:
    """Counts for one day's records; rate = (present + late) / total * 100 to one decimal."""
    stats = DailyStats()
    for s in statuses:
        if s == "present":
            stats.present += 1
        elif s == "late":
            stats.late += 1
        elif s == "absent":
            stats.absent += 1
    total = stats.present + stats.late + stats.absent
    if total > 0:
        pct = Decimal(stats.present + stats.late) * Decimal(100) / Decimal(total)
        stats.rate = pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return stats


# ---------- employee 360 ----------


@dataclass(frozen=True)
class EmployeeShiftRow:
    start_time: object
    end_time: object


@dataclass(frozen=True)
class EmployeeAttendanceRow:
    status: str
    hours_worked: Optional[Decimal] = None
    is_overtime: bool = False


@dataclass
class EmployeeAttendanceSummary:
    total_shifts: int = 0
    scheduled_hours: Decimal = Decimal("0")
    attendance_records: int = 0
    hours_worked: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    status_counts: Dict[str, int] = field(default_factory=dict)


def summarize_employee_attendance(
    shifts: Iterable[EmployeeShiftRow],
    records: Iterable[EmployeeAttendanceRow],
) -> EmployeeAttendanceSummary:
    summary = EmployeeAttendanceSummary(status_counts={"present": 0, "late": 0, "absent": 0})
    for sh in shifts:
        summary.total_shifts += 1
        if sh.start_time is not None and sh.end_time is not None:
            summary.scheduled_hours += hours_between(sh.start_time, sh.end_time)
    for rec in records:
        summary.attendance_records += 1
        summary.status_counts[rec.status] = summary.status_counts.get(rec.status, 0) + 1
        hrs = Decimal(rec.hours_worked or 0)
        summary.hours_worked += hrs
        if rec.is_overtime:
            summary.overtime_hours += hrs
    return summary
