"""Seed a small demo roster: 2 customers, 4 guards, 2 relief vendors, shifts for today and tomorrow.
Use GET /api/attendance/roster?date=<today> afterwards to see the capture screen data."""
import asyncio
import sys
from pathlib import Path
from datetime import date, time, timedelta
from decimal import Decimal

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from guardroster.database import AsyncSessionLocal
from guardroster.models import Customer, Employee, ShiftAssignment, Vendor


async def run():
    today = date.today()
    async with AsyncSessionLocal() as db:
        customers = [
            Customer(customer_code="CUS001", company_name="Acme Towers", guards_required=2, monthly_bill=Decimal("180000")),
            Customer(customer_code="CUS002", company_name="Bay Mall", guards_required=2, monthly_bill=Decimal("150000")),
        ]
        employees = [
            Employee(employee_code="EMP001", name="Ravi Kumar", position="Guard"),
            Employee(employee_code="EMP002", name="Sunil Das", position="Guard"),
            Employee(employee_code="EMP003", name="Amit Shah", position="Guard"),
            Employee(employee_code="EMP004", name="Priya Nair", position="Supervisor"),
        ]
        vendors = [
            Vendor(vendor_code="VEN001", company_name="Shield Relief Services", service_type="Relief guards"),
            Vendor(vendor_code="VEN002", company_name="Night Owl Security", service_type="Night cover"),
        ]
        db.add_all(customers + employees + vendors)
        await db.flush()
        # day shift at Acme, night shift (overnight) at Bay Mall
        plan = [
            (employees[0], customers[0], time(8, 0), time(20, 0), "Main Gate"),
            (employees[1], customers[0], time(8, 0), time(20, 0), "Lobby"),
            (employees[2], customers[1], time(20, 0), time(8, 0), "Parking"),
            (employees[3], customers[1], time(20, 0), time(8, 0), None),
        ]
        for offset in (0, 1):
            for emp, cust, start, end, location in plan:
                db.add(ShiftAssignment(
                    employee_id=emp.id,
                    customer_id=cust.id,
                    shift_date=today + timedelta(days=offset),
                    start_time=start,
                    end_time=end,
                    location=location,
                ))
        await db.commit()
    print(f"Seeded 2 customers, 4 employees, 2 vendors and 8 shifts starting {today.isoformat()}.")


if __name__ == "__main__":
    asyncio.run(run())
