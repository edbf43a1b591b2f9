"""customers, employees, vendors, shift_assignments, attendance, vendor_payments, cash_advances

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("customer_code", sa.String(30), nullable=False, comment="Business code, e.g. CUS001"),
        sa.Column("company_name", sa.String(200), nullable=False, comment="Company name"),
        sa.Column("contact_person", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("guards_required", sa.Integer(), nullable=True, comment="Guards required per day"),
        sa.Column("monthly_bill", sa.Numeric(12, 2), nullable=True, comment="Monthly billing amount"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", comment="active / inactive"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_code"),
    )
    op.create_index(op.f("ix_customers_company_name"), "customers", ["company_name"], unique=False)
    op.create_index(op.f("ix_customers_status"), "customers", ["status"], unique=False)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_code", sa.String(30), nullable=False, comment="Business code, e.g. EMP001"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True, comment="Monthly salary"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", comment="active / inactive"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_code"),
    )
    op.create_index(op.f("ix_employees_name"), "employees", ["name"], unique=False)
    op.create_index(op.f("ix_employees_status"), "employees", ["status"], unique=False)

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("vendor_code", sa.String(30), nullable=False, comment="Business code, e.g. VEN001"),
        sa.Column("company_name", sa.String(200), nullable=False),
        sa.Column("contact_person", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("service_type", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", comment="active / inactive"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("vendor_code"),
    )
    op.create_index(op.f("ix_vendors_company_name"), "vendors", ["company_name"], unique=False)
    op.create_index(op.f("ix_vendors_status"), "vendors", ["status"], unique=False)

    op.create_table(
        "shift_assignments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("shift_date", sa.Date(), nullable=False, comment="Shift date"),
        sa.Column("start_time", sa.Time(), nullable=False, comment="Planned start"),
        sa.Column("end_time", sa.Time(), nullable=False, comment="Planned end (earlier than start means overnight)"),
        sa.Column("location", sa.String(200), nullable=True, comment="Post / location at the site"),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled", comment="scheduled / completed / cancelled / in_progress"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_assignments_employee_id"), "shift_assignments", ["employee_id"], unique=False)
    op.create_index(op.f("ix_shift_assignments_customer_id"), "shift_assignments", ["customer_id"], unique=False)
    op.create_index(op.f("ix_shift_assignments_shift_date"), "shift_assignments", ["shift_date"], unique=False)
    op.create_index(op.f("ix_shift_assignments_status"), "shift_assignments", ["status"], unique=False)

    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("schedule_id", sa.Integer(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False, comment="Attendance date"),
        sa.Column("status", sa.String(20), nullable=False, server_default="present", comment="present / late / absent"),
        sa.Column("check_in_time", sa.DateTime(), nullable=True),
        sa.Column("check_out_time", sa.DateTime(), nullable=True),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_overtime", sa.Boolean(), nullable=False, server_default=sa.false(), comment="Logged through the overtime form"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("replacement_type", sa.String(20), nullable=True, comment="vendor / employee"),
        sa.Column("replacement_vendor_id", sa.Integer(), nullable=True),
        sa.Column("replacement_employee_id", sa.Integer(), nullable=True),
        sa.Column("replacement_notes", sa.Text(), nullable=True),
        sa.Column("replacement_is_overtime", sa.Boolean(), nullable=False, server_default=sa.false(), comment="Relieving employee works it as overtime"),
        sa.Column("relieving_cost", sa.Numeric(12, 2), nullable=True, comment="Cost of an internal relief"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["schedule_id"], ["shift_assignments.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["replacement_vendor_id"], ["vendors.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["replacement_employee_id"], ["employees.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )
    op.create_index(op.f("ix_attendance_employee_id"), "attendance", ["employee_id"], unique=False)
    op.create_index(op.f("ix_attendance_schedule_id"), "attendance", ["schedule_id"], unique=False)
    op.create_index(op.f("ix_attendance_date"), "attendance", ["date"], unique=False)

    op.create_table(
        "vendor_payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_payments_vendor_id"), "vendor_payments", ["vendor_id"], unique=False)
    op.create_index(op.f("ix_vendor_payments_customer_id"), "vendor_payments", ["customer_id"], unique=False)
    op.create_index(op.f("ix_vendor_payments_payment_date"), "vendor_payments", ["payment_date"], unique=False)

    op.create_table(
        "cash_advances",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("date_requested", sa.Date(), nullable=False),
        sa.Column("deduction_month", sa.String(7), nullable=False, comment="YYYY-MM"),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="approved", comment="pending / approved / rejected"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cash_advances_employee_id"), "cash_advances", ["employee_id"], unique=False)
    op.create_index(op.f("ix_cash_advances_date_requested"), "cash_advances", ["date_requested"], unique=False)


def downgrade() -> None:
    op.drop_table("cash_advances")
    op.drop_table("vendor_payments")
    op.drop_table("attendance")
    op.drop_table("shift_assignments")
    op.drop_table("vendors")
    op.drop_table("employees")
    op.drop_table("customers")
