"""
Vendor payments and cash advances.
Covers: payment ledger filters, cash advance validation and totals.
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guardroster.database import Base
from guardroster.models import Customer, Employee, Vendor
from guardroster.routers import payroll as payroll_router
from guardroster.schemas import CashAdvanceCreate, VendorPaymentCreate


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


@pytest.mark.asyncio
async def test_vendor_payment_ledger(async_session):
    async with async_session() as db:
        cust = Customer(customer_code="CUS001", company_name="Acme Towers")
        v1 = Vendor(vendor_code="VEN001", company_name="Shield Relief Services")
        v2 = Vendor(vendor_code="VEN002", company_name="Night Owl Security")
        db.add_all([cust, v1, v2])
        await db.commit()

        for vendor_id, amount, day in [(v1.id, "500", 3), (v1.id, "750", 10), (v2.id, "300", 5)]:
            await payroll_router.create_vendor_payment(
                data=VendorPaymentCreate(vendor_id=vendor_id, customer_id=cust.id, amount=Decimal(amount), payment_date=date(2025, 3, day)),
                db=db,
            )

        all_payments = await payroll_router.list_vendor_payments(vendor_id=None, customer_id=None, start=None, end=None, db=db)
        assert [p.payment_date.day for p in all_payments] == [10, 5, 3]

        v1_early = await payroll_router.list_vendor_payments(
            vendor_id=v1.id, customer_id=None, start=date(2025, 3, 1), end=date(2025, 3, 5), db=db
        )
        assert [p.amount for p in v1_early] == [Decimal("500")]

        with pytest.raises(HTTPException) as exc:
            await payroll_router.create_vendor_payment(
                data=VendorPaymentCreate(vendor_id=9999, customer_id=cust.id, amount=Decimal("1"), payment_date=date(2025, 3, 1)),
                db=db,
            )
        assert exc.value.status_code == 404


def test_vendor_payment_amount_must_be_positive():
    with pytest.raises(ValueError):
        VendorPaymentCreate(vendor_id=1, customer_id=1, amount=Decimal("0"), payment_date=date(2025, 3, 1))


def test_cash_advance_validation():
    with pytest.raises(ValueError):
        CashAdvanceCreate(employee_id=1, amount=Decimal("100"), date_requested=date(2025, 3, 1), deduction_month="2025-13", reason="rent")
    with pytest.raises(ValueError):
        CashAdvanceCreate(employee_id=1, amount=Decimal("-5"), date_requested=date(2025, 3, 1), deduction_month="2025-04", reason="rent")
    with pytest.raises(ValueError):
        CashAdvanceCreate(employee_id=1, amount=Decimal("100"), date_requested=date(2025, 3, 1), deduction_month="2025-04", reason="")
    ca = CashAdvanceCreate(employee_id=1, amount=Decimal("100"), date_requested=date(2025, 3, 1), deduction_month=" 2025-04 ", reason="rent")
    assert ca.deduction_month == "2025-04"
    assert ca.status == "approved"


@pytest.mark.asyncio
async def test_cash_advances_totals(async_session):
    async with async_session() as db:
        emp = Employee(employee_code="EMP001", name="Ravi Kumar")
        db.add(emp)
        await db.commit()

        for amount, status in [("1000", "approved"), ("500", "pending"), ("250", "approved")]:
            await payroll_router.create_cash_advance(
                data=CashAdvanceCreate(employee_id=emp.id, amount=Decimal(amount), date_requested=date(2025, 3, 1),
                                       deduction_month="2025-04", reason="medical", status=status),
                db=db,
            )

        resp = await payroll_router.list_cash_advances(employee_id=emp.id, start=None, end=None, status=None, db=db)
        assert len(resp.items) == 3
        assert resp.total == Decimal("1750")
        assert resp.total_approved == Decimal("1250")

        approved = await payroll_router.list_cash_advances(employee_id=emp.id, start=None, end=None, status="approved", db=db)
        assert approved.total == Decimal("1250")

        with pytest.raises(HTTPException) as exc:
            await payroll_router.list_cash_advances(employee_id=None, start=None, end=None, status="paid", db=db)
        assert exc.value.status_code == 400
        with pytest.raises(HTTPException) as exc:
            await payroll_router.create_cash_advance(
                data=CashAdvanceCreate(employee_id=9999, amount=Decimal("10"), date_requested=date(2025, 3, 1),
                                       deduction_month="2025-04", reason="medical"),
                db=db,
            )
        assert exc.value.status_code == 404
