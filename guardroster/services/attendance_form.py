"""
Per-employee attendance form state as immutable values.

A form is a mapping employee_id -> AttendanceEntry. Every change goes through a reducer that returns a new
entry (or a new form); nothing is mutated in place. status is the single source of truth; is_present / is_absent
are projections for checkbox rendering.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Dict, Mapping, Optional

from guardroster.models import ATTENDANCE_STATUSES, REPLACEMENT_TYPES

Form = Mapping[int, "AttendanceEntry"]


@dataclass(frozen=True)
class AttendanceEntry:
    employee_id: int
    status: Optional[str] = None
    check_in: str = ""
    check_out: str = ""
    notes: str = ""
    replacement_type: Optional[str] = None
    replacement_vendor_id: Optional[int] = None
    replacement_employee_id: Optional[int] = None
    replacement_notes: str = ""
    vendor_cost: Optional[Decimal] = None
    relieving_cost: Optional[Decimal] = None
    replacement_is_overtime: bool = False

    @property
    def is_present(self) -> bool:
        return self.status == "present"

    @property
    def is_absent(self) -> bool:
        return self.status == "absent"

    @property
    def needs_replacement(self) -> bool:
        """The replacement section is shown only for absences."""
        return self.is_absent


def set_status(entry: AttendanceEntry, status: Optional[str]) -> AttendanceEntry:
    if status is not None and status not in ATTENDANCE_STATUSES:
        raise ValueError(f"status must be one of {list(ATTENDANCE_STATUSES)}")
    return replace(entry, status=status)


def set_present(entry: AttendanceEntry, checked: bool) -> AttendanceEntry:
    """Checkbox 'present': checking clears absent; unchecking clears the status."""
    if checked:
        return replace(entry, status="present")
    if entry.status == "present":
        return replace(entry, status=None)
    return entry


def set_absent(entry: AttendanceEntry, checked: bool) -> AttendanceEntry:
    """Checkbox 'absent': checking clears present; unchecking clears the status."""
    if checked:
        return replace(entry, status="absent")
    if entry.status == "absent":
        return replace(entry, status=None)
    return entry


def set_times(entry: AttendanceEntry, check_in: Optional[str] = None, check_out: Optional[str] = None) -> AttendanceEntry:
    changes = {}
    if check_in is not None:
        changes["check_in"] = check_in.strip()
    if check_out is not None:
        changes["check_out"] = check_out.strip()
    return replace(entry, **changes)


def set_replacement_type(entry: AttendanceEntry, replacement_type: Optional[str]) -> AttendanceEntry:
    """Switching the kind clears the other kind's selection."""
    if replacement_type is not None and replacement_type not in REPLACEMENT_TYPES:
        raise ValueError(f"replacement_type must be one of {list(REPLACEMENT_TYPES)}")
    if replacement_type == "vendor":
        return replace(
            entry,
            replacement_type="vendor",
            replacement_employee_id=None,
            relieving_cost=None,
            replacement_is_overtime=False,
        )
    if replacement_type == "employee":
        return replace(entry, replacement_type="employee", replacement_vendor_id=None, vendor_cost=None)
    return replace(
        entry,
        replacement_type=None,
        replacement_vendor_id=None,
        replacement_employee_id=None,
        vendor_cost=None,
        relieving_cost=None,
        replacement_is_overtime=False,
    )


def choose_vendor(entry: AttendanceEntry, vendor_id: int, cost: Optional[Decimal] = None) -> AttendanceEntry:
    entry = set_replacement_type(entry, "vendor")
    return replace(entry, replacement_vendor_id=vendor_id, vendor_cost=cost)


def choose_employee(
    entry: AttendanceEntry,
    replacement_employee_id: int,
    relieving_cost: Optional[Decimal] = None,
    is_overtime: bool = False,
) -> AttendanceEntry:
    entry = set_replacement_type(entry, "employee")
    return replace(
        entry,
        replacement_employee_id=replacement_employee_id,
        relieving_cost=relieving_cost,
        replacement_is_overtime=is_overtime,
    )


def normalized(entry: AttendanceEntry) -> AttendanceEntry:
    """Shape an entry for persistence: replacement fields survive only on absences, and only for the chosen kind."""
    if not entry.is_absent:
        entry = set_replacement_type(entry, None)
        return replace(entry, replacement_notes="")
    return set_replacement_type(entry, entry.replacement_type)


def entry_from_flags(
    employee_id: int,
    is_present: Optional[bool] = None,
    is_absent: Optional[bool] = None,
    status: Optional[str] = None,
) -> AttendanceEntry:
    """Collapse checkbox flags (bulk screen) or a direct status (single screen) into one status."""
    if is_present and is_absent:
        raise ValueError("is_present and is_absent cannot both be set")
    entry = set_status(AttendanceEntry(employee_id=employee_id), status)
    if is_present is not None:
        entry = set_present(entry, is_present)
    if is_absent is not None:
        entry = set_absent(entry, is_absent)
    return entry


def update_form(form: Form, employee_id: int, reducer: Callable[..., AttendanceEntry], *args, **kwargs) -> Dict[int, AttendanceEntry]:
    """Apply a reducer to one employee's entry and return a new form; other entries are shared untouched."""
    current = form.get(employee_id) or AttendanceEntry(employee_id=employee_id)
    new_form = dict(form)
    new_form[employee_id] = reducer(current, *args, **kwargs)
    return new_form
