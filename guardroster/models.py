"""Database models - customers, guards, relief vendors, shift assignments, attendance and payouts.
Row ids (id) are the identity used for every relation and comparison; *_code columns are human-facing business codes."""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import String, Date, Time, Text, Numeric, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from guardroster.database import Base


SHIFT_STATUSES = ("scheduled", "completed", "cancelled", "in_progress")
ATTENDANCE_STATUSES = ("present", "late", "absent")
REPLACEMENT_TYPES = ("vendor", "employee")
CASH_ADVANCE_STATUSES = ("pending", "approved", "rejected")


class Customer(Base):
    """Customer site that books guards."""
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_code: Mapped[str] = mapped_column(String(30), unique=True, comment="Business code, e.g. CUS001")
    company_name: Mapped[str] = mapped_column(String(200), index=True, comment="Company name")
    contact_person: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    address: Mapped[Optional[str]] = mapped_column(String(500))
    guards_required: Mapped[Optional[int]] = mapped_column(comment="Guards required per day")
    monthly_bill: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), comment="Monthly billing amount")
    status: Mapped[str] = mapped_column(String(20), default="active", index=True, comment="active / inactive")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shift_assignments: Mapped[List["ShiftAssignment"]] = relationship("ShiftAssignment", back_populates="customer")


class Employee(Base):
    """Guard on the payroll."""
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    employee_code: Mapped[str] = mapped_column(String(30), unique=True, comment="Business code, e.g. EMP001")
    name: Mapped[str] = mapped_column(String(100), index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    department: Mapped[Optional[str]] = mapped_column(String(100))
    position: Mapped[Optional[str]] = mapped_column(String(100))
    hire_date: Mapped[Optional[date]] = mapped_column(Date)
    salary: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), comment="Monthly salary")
    status: Mapped[str] = mapped_column(String(20), default="active", index=True, comment="active / inactive")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shift_assignments: Mapped[List["ShiftAssignment"]] = relationship(
        "ShiftAssignment", back_populates="employee", cascade="all, delete-orphan"
    )
    attendance_records: Mapped[List["AttendanceRecord"]] = relationship(
        "AttendanceRecord", back_populates="employee", cascade="all, delete-orphan",
        foreign_keys="AttendanceRecord.employee_id",
    )
    cash_advances: Mapped[List["CashAdvance"]] = relationship(
        "CashAdvance", back_populates="employee", cascade="all, delete-orphan"
    )


class Vendor(Base):
    """Relief guard agency that covers absences."""
    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vendor_code: Mapped[str] = mapped_column(String(30), unique=True, comment="Business code, e.g. VEN001")
    company_name: Mapped[str] = mapped_column(String(200), index=True)
    contact_person: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    address: Mapped[Optional[str]] = mapped_column(String(500))
    service_type: Mapped[Optional[str]] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), default="active", index=True, comment="active / inactive")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    payments: Mapped[List["VendorPayment"]] = relationship("VendorPayment", back_populates="vendor")


class ShiftAssignment(Base):
    """Planned booking of one employee at one customer site for a time window on a date."""
    __tablename__ = "shift_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), index=True)
    customer_id: Mapped[Optional[int]] = mapped_column(ForeignKey("customers.id", ondelete="SET NULL"), index=True)
    shift_date: Mapped[date] = mapped_column(Date, index=True, comment="Shift date")
    start_time: Mapped[time] = mapped_column(Time, comment="Planned start")
    end_time: Mapped[time] = mapped_column(Time, comment="Planned end (earlier than start means overnight)")
    location: Mapped[Optional[str]] = mapped_column(String(200), comment="Post / location at the site")
    status: Mapped[str] = mapped_column(String(20), default="scheduled", index=True, comment="scheduled / completed / cancelled / in_progress")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="shift_assignments")
    customer: Mapped[Optional["Customer"]] = relationship("Customer", back_populates="shift_assignments")
    attendance_records: Mapped[List["AttendanceRecord"]] = relationship("AttendanceRecord", back_populates="shift")


class AttendanceRecord(Base):
    """Realized outcome for one employee on one date (employee_id + date unique).
    Replacement columns only carry values when status is absent; vendor and employee replacement are mutually exclusive."""
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), index=True)
    schedule_id: Mapped[Optional[int]] = mapped_column(ForeignKey("shift_assignments.id", ondelete="SET NULL"), index=True)
    date: Mapped[date] = mapped_column(Date, index=True, comment="Attendance date")
    status: Mapped[str] = mapped_column(String(20), default="present", comment="present / late / absent")
    check_in_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    hours_worked: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    is_overtime: Mapped[bool] = mapped_column(Boolean, default=False, comment="Logged through the overtime form")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    replacement_type: Mapped[Optional[str]] = mapped_column(String(20), comment="vendor / employee")
    replacement_vendor_id: Mapped[Optional[int]] = mapped_column(ForeignKey("vendors.id", ondelete="SET NULL"))
    replacement_employee_id: Mapped[Optional[int]] = mapped_column(ForeignKey("employees.id", ondelete="SET NULL"))
    replacement_notes: Mapped[Optional[str]] = mapped_column(Text)
    replacement_is_overtime: Mapped[bool] = mapped_column(Boolean, default=False, comment="Relieving employee works it as overtime")
    relieving_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), comment="Cost of an internal relief")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee: Mapped["Employee"] = relationship(
        "Employee", back_populates="attendance_records", foreign_keys=[employee_id]
    )
    shift: Mapped[Optional["ShiftAssignment"]] = relationship("ShiftAssignment", back_populates="attendance_records")
    replacement_vendor: Mapped[Optional["Vendor"]] = relationship("Vendor")
    replacement_employee: Mapped[Optional["Employee"]] = relationship("Employee", foreign_keys=[replacement_employee_id])


class VendorPayment(Base):
    """Payout to a relief vendor. Created by hand or as a side effect of a vendor-covered absence."""
    __tablename__ = "vendor_payments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vendor_id: Mapped[int] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_date: Mapped[date] = mapped_column(Date, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="payments")
    customer: Mapped["Customer"] = relationship("Customer")


class CashAdvance(Base):
    """Salary advance, deducted from a later month's pay."""
    __tablename__ = "cash_advances"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    date_requested: Mapped[date] = mapped_column(Date, index=True)
    deduction_month: Mapped[str] = mapped_column(String(7), comment="YYYY-MM")
    reason: Mapped[str] = mapped_column(String(500))
    status: Mapped[str] = mapped_column(String(20), default="approved", comment="pending / approved / rejected")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="cash_advances")
