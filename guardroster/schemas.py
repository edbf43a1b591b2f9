"""API request/response models - Pydantic."""
from datetime import date, datetime, time
from decimal import Decimal

# Alias: a field called `date` typed as `date` makes Pydantic complain about name clashing
DateType = date
from typing import Optional, List, Dict
import re
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from guardroster.services.attendance_hours import parse_hhmm


YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_hhmm(v: Optional[str]) -> Optional[str]:
    """Accept '' / None as 'not given'; otherwise normalise to HH:MM."""
    if v is None:
        return None
    v = v.strip()
    if not v:
        return ""
    return parse_hhmm(v).strftime("%H:%M")


# ---------- lookups ----------
class EmployeeBrief(BaseModel):
    id: int
    employee_code: str
    name: str
    model_config = ConfigDict(from_attributes=True)


class VendorBrief(BaseModel):
    id: int
    vendor_code: str
    company_name: str
    model_config = ConfigDict(from_attributes=True)


# ---------- shift_assignments ----------
class ShiftAssignmentBase(BaseModel):
    employee_id: int = Field(..., description="Employee row id")
    customer_id: Optional[int] = Field(None, description="Customer row id")
    shift_date: date = Field(..., description="Shift date")
    start_time: time = Field(..., description="Planned start")
    end_time: time = Field(..., description="Planned end; earlier than start means overnight")
    location: Optional[str] = None
    status: str = Field("scheduled", description="scheduled / completed / cancelled / in_progress")
    notes: Optional[str] = None


class ShiftAssignmentCreate(ShiftAssignmentBase):
    pass


class ShiftAssignmentUpdate(BaseModel):
    customer_id: Optional[int] = None
    shift_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class ShiftAssignmentRead(ShiftAssignmentBase):
    id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ShiftAssignmentWithNames(ShiftAssignmentRead):
    """Shift assignment with employee and customer names"""
    employee_name: Optional[str] = None
    customer_name: Optional[str] = None


# ---------- attendance capture ----------
class AttendanceEntryIn(BaseModel):
    """One employee's answers on the attendance form. Send status, or the is_present / is_absent checkboxes; both must agree."""
    status: Optional[str] = Field(None, description="present / late / absent; empty means do not submit")
    is_present: Optional[bool] = None
    is_absent: Optional[bool] = None
    check_in: Optional[str] = Field(None, description="HH:MM")
    check_out: Optional[str] = Field(None, description="HH:MM")
    notes: Optional[str] = None
    replacement_type: Optional[str] = Field(None, description="vendor / employee, only for absences")
    replacement_vendor_id: Optional[int] = None
    replacement_employee_id: Optional[int] = None
    replacement_notes: Optional[str] = None
    vendor_cost: Optional[Decimal] = Field(None, ge=0, description="Creates a vendor payment when > 0 and the vendor cover is new")
    relieving_cost: Optional[Decimal] = Field(None, ge=0, description="Cost of an internal relief")
    replacement_is_overtime: bool = False

    @field_validator("check_in", "check_out")
    @classmethod
    def _hhmm(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def _flags_match_status(self):
        if self.is_present and self.is_absent:
            raise ValueError("is_present and is_absent cannot both be set")
        if self.status:
            if self.is_present is not None and self.is_present != (self.status == "present"):
                raise ValueError("is_present contradicts status")
            if self.is_absent is not None and self.is_absent != (self.status == "absent"):
                raise ValueError("is_absent contradicts status")
        return self


class AttendanceMarkRequest(AttendanceEntryIn):
    """Single-employee mode"""
    date: DateType = Field(..., description="Attendance date")
    employee_id: int = Field(..., description="Employee row id")


class AttendanceBulkEntry(AttendanceEntryIn):
    employee_id: int = Field(..., description="Employee row id")


class AttendanceBulkRequest(BaseModel):
    """Bulk mode: every employee scheduled that date (optionally one customer)"""
    date: DateType = Field(..., description="Attendance date")
    customer_id: Optional[int] = Field(None, description="Only employees scheduled at this customer")
    entries: List[AttendanceBulkEntry] = Field(default_factory=list)


class AttendanceEditRequest(AttendanceEntryIn):
    """Edit mode: the date of an existing record cannot change"""
    pass


class PaymentResultRead(BaseModel):
    outcome: str = Field(..., description="not_required / created / failed")
    payment_id: Optional[int] = None
    message: Optional[str] = None


class AttendanceItemResultRead(BaseModel):
    employee_id: int
    outcome: str = Field(..., description="saved / skipped / failed")
    attendance_id: Optional[int] = None
    status: Optional[str] = None
    hours_worked: Optional[Decimal] = None
    error: Optional[str] = None
    payment: PaymentResultRead


class AttendanceSubmitResponse(BaseModel):
    date: DateType
    mode: str = Field(..., description="single / bulk / edit")
    saved: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[AttendanceItemResultRead] = Field(default_factory=list)


class AttendanceRead(BaseModel):
    id: int
    employee_id: int
    schedule_id: Optional[int] = None
    date: DateType
    status: str
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    hours_worked: Optional[Decimal] = None
    is_overtime: bool = False
    notes: Optional[str] = None
    replacement_type: Optional[str] = None
    replacement_vendor_id: Optional[int] = None
    replacement_employee_id: Optional[int] = None
    replacement_notes: Optional[str] = None
    replacement_is_overtime: bool = False
    relieving_cost: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RosterRow(BaseModel):
    """Scheduled employee for the capture screen, prefilled with any existing attendance"""
    schedule_id: int
    employee_id: int
    employee_code: str
    employee_name: str
    customer_id: Optional[int] = None
    customer_name: str
    location: str
    shift_date: DateType
    start_time: time
    end_time: time
    attendance_id: Optional[int] = None
    status: Optional[str] = None
    is_present: bool = False
    is_absent: bool = False
    check_in: str = ""
    check_out: str = ""
    notes: str = ""
    replacement_type: Optional[str] = None
    replacement_vendor_id: Optional[int] = None
    replacement_employee_id: Optional[int] = None
    replacement_notes: str = ""
    relieving_cost: Optional[Decimal] = None
    replacement_is_overtime: bool = False


class RosterResponse(BaseModel):
    date: DateType
    rows: List[RosterRow] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ReplacementCandidatesResponse(BaseModel):
    vendors: List[VendorBrief] = Field(default_factory=list)
    employees: List[EmployeeBrief] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class DailyAttendanceRow(BaseModel):
    id: int
    employee_id: int
    employee_name: str
    customer_name: str
    location: str
    check_in: str = ""
    check_out: str = ""
    status: str
    hours_worked: Decimal = Decimal("0")
    is_overtime: bool = False


class DailyAttendanceStats(BaseModel):
    present: int = 0
    late: int = 0
    absent: int = 0
    rate: Decimal = Field(Decimal("0"), description="(present + late) / total * 100, one decimal")


class DailyAttendanceResponse(BaseModel):
    date: DateType
    records: List[DailyAttendanceRow] = Field(default_factory=list)
    stats: DailyAttendanceStats


class OvertimeCreate(BaseModel):
    employee_id: int
    customer_id: int
    date: DateType
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    overtime_hours: Decimal = Field(..., gt=0, description="Overtime hours claimed")
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, v):
        v = validate_hhmm(v)
        if not v:
            raise ValueError("time is required")
        return v


# ---------- vendor_payments ----------
class VendorPaymentBase(BaseModel):
    vendor_id: int = Field(..., description="Vendor row id")
    customer_id: int = Field(..., description="Customer row id")
    amount: Decimal = Field(..., gt=0, description="Amount, must be greater than 0")
    payment_date: date
    notes: Optional[str] = None


class VendorPaymentCreate(VendorPaymentBase):
    pass


class VendorPaymentRead(VendorPaymentBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class VendorPaymentRetry(BaseModel):
    """Re-run the payment step of a vendor-covered absence"""
    amount: Decimal = Field(..., gt=0)


# ---------- cash_advances ----------
class CashAdvanceBase(BaseModel):
    employee_id: int = Field(..., description="Employee row id")
    amount: Decimal = Field(..., gt=0, description="Amount, must be greater than 0")
    date_requested: date
    deduction_month: str = Field(..., description="YYYY-MM")
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("deduction_month")
    @classmethod
    def _year_month(cls, v: str) -> str:
        v = (v or "").strip()
        if not YEAR_MONTH_PATTERN.match(v):
            raise ValueError("deduction_month must be YYYY-MM")
        return v


class CashAdvanceCreate(CashAdvanceBase):
    status: str = Field("approved", description="Logged directly, so approved unless stated")


class CashAdvanceRead(CashAdvanceBase):
    id: int
    status: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CashAdvanceListResponse(BaseModel):
    items: List[CashAdvanceRead] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    total_approved: Decimal = Decimal("0")


# ---------- reports ----------
class ReportRowRead(BaseModel):
    date: DateType = Field(..., description="Day, or first day of the week")
    customer_id: int
    customer_name: str
    scheduled_count: int
    present_count: int
    late_count: int
    absent_count: int
    relief_count: int
    attendance_rate: int
    model_config = ConfigDict(from_attributes=True)


class CustomerSummaryRead(BaseModel):
    customer_id: int
    customer_name: str
    total_scheduled: int
    total_present: int
    total_late: int
    total_absent: int
    total_relief: int
    overall_rate: int
    model_config = ConfigDict(from_attributes=True)


class AttendanceReportResponse(BaseModel):
    start: DateType
    end: DateType
    granularity: str
    rows: List[ReportRowRead] = Field(default_factory=list)
    summaries: List[CustomerSummaryRead] = Field(default_factory=list)


class EmployeeAttendanceSummaryRead(BaseModel):
    employee_id: int
    start: DateType
    end: DateType
    total_shifts: int = 0
    scheduled_hours: Decimal = Decimal("0")
    attendance_records: int = 0
    hours_worked: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    status_counts: Dict[str, int] = Field(default_factory=dict)
