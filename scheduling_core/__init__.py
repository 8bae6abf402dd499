"""Scheduling core - pure Python calendar rules and schedule generators, independent of Django."""

from .base import (
    Absence,
    Employee,
    EmployeePreferences,
    GeneratedShift,
    GeneratorResult,
    SchedulingProblem,
    SettingsError,
    ShiftTemplate,
    TeamSettings,
)
from .generator import TemplateScheduleGenerator, generate_monthly_schedule
from .algorithm import (
    StaffingRequirement,
    StaffingScheduler,
    find_best_employee_for_slot,
    validate_shift_assignment,
)

__all__ = [
    'Absence',
    'Employee',
    'EmployeePreferences',
    'GeneratedShift',
    'GeneratorResult',
    'SchedulingProblem',
    'SettingsError',
    'ShiftTemplate',
    'TeamSettings',
    'TemplateScheduleGenerator',
    'generate_monthly_schedule',
    'StaffingRequirement',
    'StaffingScheduler',
    'find_best_employee_for_slot',
    'validate_shift_assignment',
]
