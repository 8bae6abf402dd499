"""Base classes and interfaces for scheduling algorithms."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from datetime import date, time
from typing import List, Dict, Optional, Any

from .utils import parse_time, shift_hours, format_time


SHIFT_PREFERENCES = ('morning', 'afternoon', 'evening', 'flexible')


class SettingsError(ValueError):
    """A preferences or settings document has the wrong shape."""

    def __init__(self, field_name: str, detail: str):
        super().__init__(f"{field_name}: {detail}")
        self.field_name = field_name


def _known_values(cls, data: Any, kind: str) -> Dict[str, Any]:
    """Known, non-null fields of a JSON document; numbers cast to the field type."""
    if not isinstance(data, dict):
        raise SettingsError(kind, f"expected a mapping, got {type(data).__name__}")
    values = {}
    for name, f in cls.__dataclass_fields__.items():
        value = data.get(name)
        if value is None:
            continue
        if f.type in (int, float):
            try:
                value = f.type(value)
            except (TypeError, ValueError):
                raise SettingsError(name, f"expected a number, got {value!r}")
        values[name] = value
    return values


def _weekdays(field_name: str, values: Any) -> List[int]:
    if not isinstance(values, (list, tuple)):
        raise SettingsError(field_name, f"expected a list of weekdays, got {values!r}")
    try:
        days = [int(v) for v in values]
    except (TypeError, ValueError):
        raise SettingsError(field_name, f"invalid weekday in {values!r}")
    if any(not 0 <= d <= 6 for d in days):
        raise SettingsError(field_name, f"weekday out of range in {values!r}")
    return days


@dataclass
class EmployeePreferences:
    """Shift preferences of a single employee."""
    shift_preference: str = 'flexible'
    preferred_days: List[int] = field(default_factory=list)  # 0=Mon ... 6=Sun
    avoided_days: List[int] = field(default_factory=list)
    max_hours_per_week: float = 40
    max_consecutive_days: int = 6
    min_hours_between_shifts: float = 11
    notes: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'EmployeePreferences':
        """Build preferences from their JSON form.

        Null values fall back to the defaults and unknown keys are ignored.
        Raises SettingsError when the document or a value has the wrong shape.
        """
        if not data:
            return cls()
        values = _known_values(cls, data, 'preferences')
        for name in ('preferred_days', 'avoided_days'):
            if name in values:
                values[name] = _weekdays(name, values[name])
        if 'notes' in values:
            values['notes'] = str(values['notes'])
        prefs = cls(**values)
        if prefs.shift_preference not in SHIFT_PREFERENCES:
            prefs.shift_preference = 'flexible'
        return prefs

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Employee:
    """Employee data structure."""
    id: int
    first_name: str
    last_name: str
    contract_hours: float = 0  # monthly target, 0 = full-time for the month
    hours_per_week: float = 40
    role: str = 'employee'
    is_active: bool = True
    position: str = ''
    email: Optional[str] = None
    preferences: Optional[EmployeePreferences] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_manager(self) -> bool:
        return self.role == 'manager'


@dataclass
class ShiftTemplate:
    """Reusable shift definition."""
    id: int
    name: str
    start_time: time
    end_time: time
    break_duration: int = 0  # minutes
    capacity: int = 1
    is_default: bool = False

    def __post_init__(self):
        self.start_time = parse_time(self.start_time)
        self.end_time = parse_time(self.end_time)

    @property
    def net_hours(self) -> float:
        return shift_hours(self.start_time, self.end_time, self.break_duration)


@dataclass
class Absence:
    """Leave record blocking shift assignment for an inclusive date range."""
    employee_id: int
    start_date: date
    end_date: date
    status: str = 'approved'
    type: str = 'vacation'

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def blocks(self, employee_id: int, day: date) -> bool:
        return self.employee_id == employee_id and self.status == 'approved' and self.covers(day)


@dataclass
class OpeningHours:
    start: time
    end: time

    def __post_init__(self):
        self.start = parse_time(self.start)
        self.end = parse_time(self.end)


def _default_opening_hours() -> Dict[int, Optional[OpeningHours]]:
    hours = {day: OpeningHours(time(8, 0), time(20, 0)) for day in range(5)}
    hours[5] = OpeningHours(time(9, 0), time(17, 0))
    hours[6] = None
    return hours


def _opening_hours(raw: Any) -> Dict[int, Optional[OpeningHours]]:
    """``{"0": {"start": "08:00", "end": "20:00"}, "6": null}`` keyed by weekday."""
    if not isinstance(raw, dict):
        raise SettingsError('opening_hours', f"expected a mapping, got {type(raw).__name__}")
    hours = {}
    for day, entry in raw.items():
        weekday = _weekdays('opening_hours', [day])[0]
        if not entry:
            hours[weekday] = None
            continue
        if not isinstance(entry, dict) or 'start' not in entry or 'end' not in entry:
            raise SettingsError('opening_hours', f"day {day} needs start and end, got {entry!r}")
        try:
            hours[weekday] = OpeningHours(entry['start'], entry['end'])
        except (TypeError, ValueError):
            raise SettingsError('opening_hours', f"day {day} has an invalid time in {entry!r}")
    return hours


@dataclass
class TeamSettings:
    """Per-team scheduling settings."""
    default_shift_duration: int = 480  # minutes
    min_shift_duration: int = 240
    max_shift_duration: int = 720
    break_duration: int = 30
    week_starts_on: int = 0  # 0=Monday, 6=Sunday
    working_days: List[int] = field(default_factory=lambda: [0, 1, 2, 3, 4])
    opening_hours: Dict[int, Optional[OpeningHours]] = field(default_factory=_default_opening_hours)
    respect_polish_trading_sundays: bool = True
    auto_calculate_breaks: bool = True
    overtime_threshold_daily: float = 8
    overtime_threshold_weekly: float = 40
    min_rest_between_shifts: float = 11
    max_consecutive_work_days: int = 6
    max_weekends_per_month: int = 2

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'TeamSettings':
        """Build settings from their JSON form; unknown keys are ignored."""
        if not data:
            return cls()
        values = _known_values(cls, data, 'settings')
        if 'opening_hours' in values:
            values['opening_hours'] = _opening_hours(values['opening_hours'])
        if 'working_days' in values:
            values['working_days'] = _weekdays('working_days', values['working_days'])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['opening_hours'] = {
            str(day): ({'start': format_time(h.start), 'end': format_time(h.end)} if h else None)
            for day, h in self.opening_hours.items()
        }
        return data

    def hours_for(self, weekday: int) -> Optional[OpeningHours]:
        return self.opening_hours.get(weekday)


@dataclass
class GeneratedShift:
    """Single shift produced by a scheduling algorithm."""
    employee_id: int
    date: date
    start_time: time
    end_time: time
    break_duration: int = 0
    type: str = 'regular'

    @property
    def hours(self) -> float:
        return shift_hours(self.start_time, self.end_time, self.break_duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'employee_id': self.employee_id,
            'date': self.date.isoformat(),
            'start_time': format_time(self.start_time),
            'end_time': format_time(self.end_time),
            'break_duration': self.break_duration,
            'type': self.type,
        }


@dataclass
class UnfilledSlot:
    date: date
    reason: str
    template_id: Optional[int] = None


@dataclass
class GeneratorResult:
    """Generated shifts with warnings and statistics."""
    success: bool = True
    shifts: List[GeneratedShift] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    unfilled_slots: List[UnfilledSlot] = field(default_factory=list)
    statistics: Dict[str, Any] = field(default_factory=dict)

    def fail(self, message: str) -> 'GeneratorResult':
        self.success = False
        self.warnings.append(message)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'shifts': [s.to_dict() for s in self.shifts],
            'warnings': list(self.warnings),
            'unfilled_slots': [
                {'date': slot.date.isoformat(), 'reason': slot.reason, 'template_id': slot.template_id}
                for slot in self.unfilled_slots
            ],
            'statistics': self.statistics,
        }


@dataclass
class SchedulingProblem:
    """Problem definition for scheduling."""
    team_id: int
    start_date: date
    end_date: date
    settings: TeamSettings
    employees: List[Employee]
    absences: List[Absence]
    templates: List[ShiftTemplate]

    @property
    def active_employees(self) -> List[Employee]:
        return [e for e in self.employees if e.is_active]

    def is_absent(self, employee_id: int, day: date) -> bool:
        return any(a.blocks(employee_id, day) for a in self.absences)


class SchedulingAlgorithm(ABC):
    """Abstract base class for scheduling algorithms."""

    @abstractmethod
    def generate(self, problem: SchedulingProblem) -> GeneratorResult:
        """Solve the scheduling problem and return the generated shifts."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Algorithm name for display."""
        pass
