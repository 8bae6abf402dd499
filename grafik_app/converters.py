from typing import List

from grafik_app.models import (
    Absence as DjangoAbsence,
    Employee as DjangoEmployee,
    ShiftTemplate as DjangoShiftTemplate,
)
from scheduling_core.base import (
    Absence as CoreAbsence,
    Employee as CoreEmployee,
    EmployeePreferences,
    ShiftTemplate as CoreShiftTemplate,
)


def employee_to_core(employee: DjangoEmployee) -> CoreEmployee:
    """
    Convert a Django Employee model instance to a core Employee dataclass.
    The preferences JSON becomes an EmployeePreferences record.
    """
    return CoreEmployee(
        id=int(employee.id),
        first_name=employee.first_name,
        last_name=employee.last_name,
        contract_hours=float(employee.contract_hours or 0),
        hours_per_week=float(employee.hours_per_week or 0),
        role=employee.role,
        is_active=employee.is_active,
        position=employee.position,
        email=employee.email,
        preferences=EmployeePreferences.from_dict(employee.preferences),
    )


def template_to_core(template: DjangoShiftTemplate) -> CoreShiftTemplate:
    # start_time and end_time are already Python time objects from TimeField
    return CoreShiftTemplate(
        id=int(template.id),
        name=template.name,
        start_time=template.start_time,
        end_time=template.end_time,
        break_duration=template.break_duration,
        capacity=template.capacity,
        is_default=template.is_default,
    )


def absence_to_core(absence: DjangoAbsence) -> CoreAbsence:
    return CoreAbsence(
        employee_id=int(absence.employee_id),
        start_date=absence.start_date,
        end_date=absence.end_date,
        status=absence.status,
        type=absence.type,
    )


def employees_to_core(employees: List[DjangoEmployee]) -> List[CoreEmployee]:
    return [employee_to_core(e) for e in employees]


def templates_to_core(templates: List[DjangoShiftTemplate]) -> List[CoreShiftTemplate]:
    return [template_to_core(t) for t in templates]


def absences_to_core(absences: List[DjangoAbsence]) -> List[CoreAbsence]:
    return [absence_to_core(a) for a in absences]
