"""Tenant setup: organizations, their teams and team members."""
import logging
from typing import Any, Dict, Iterable, Optional

from django.db import transaction
from django.utils.text import slugify

from grafik_app.exceptions import EmployeeLimitExceeded, InvalidSettings, TeamLimitExceeded
from grafik_app.models import Employee, Organization, Team, default_team_settings
from scheduling_core.base import EmployeePreferences, SettingsError, TeamSettings

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50

EMPLOYEE_COLORS = [
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#f97316",  # orange
    "#6366f1",  # indigo
]

EMPLOYEE_FIELDS = {
    'first_name', 'last_name', 'email', 'phone', 'role', 'position', 'contract_type',
    'employment_type', 'custom_hours', 'contract_hours', 'hours_per_week', 'hourly_rate',
    'preferences', 'notification_preferences', 'is_active',
}

SETTINGS_ERRORS = {
    'opening_hours': "Nieprawidłowe godziny otwarcia",
    'working_days': "Nieprawidłowe dni robocze",
    'preferred_days': "Nieprawidłowe preferowane dni",
    'avoided_days': "Nieprawidłowe dni do unikania",
}


def generate_slug(name: str) -> str:
    return slugify(name)[:SLUG_MAX_LENGTH].strip('-') or 'organizacja'


def unique_slug(name: str) -> str:
    base = generate_slug(name)
    slug = base
    suffix = 2
    while Organization.objects.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def create_organization(name: str, description: str = '', subscription_tier: str = 'free') -> Organization:
    organization = Organization.objects.create(
        name=name,
        slug=unique_slug(name),
        description=description,
        subscription_tier=subscription_tier,
    )
    logger.info("Created organization %s (%s)", organization.name, organization.slug)
    return organization


def merge_team_settings(current: Optional[Dict[str, Any]], updates: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Overlay ``updates`` on ``current`` and normalize through TeamSettings.

    Opening hours are merged per weekday.
    """
    if updates is not None and not isinstance(updates, dict):
        raise InvalidSettings("Nieprawidłowe ustawienia zespołu")
    merged = dict(current or default_team_settings())
    updates = dict(updates or {})
    if isinstance(updates.get('opening_hours'), dict):
        opening_hours = dict(merged.get('opening_hours') or {})
        opening_hours.update({str(day): hours for day, hours in updates['opening_hours'].items()})
        updates['opening_hours'] = opening_hours
    merged.update(updates)
    try:
        return TeamSettings.from_dict(merged).to_dict()
    except SettingsError as exc:
        logger.info("Rejected team settings: %s", exc)
        raise InvalidSettings(SETTINGS_ERRORS.get(exc.field_name, "Nieprawidłowe ustawienia zespołu")) from exc


def normalize_preferences(data: Any) -> Dict[str, Any]:
    """Employee preferences JSON with nulls replaced by defaults."""
    try:
        return EmployeePreferences.from_dict(data).to_dict()
    except SettingsError as exc:
        logger.info("Rejected employee preferences: %s", exc)
        raise InvalidSettings(SETTINGS_ERRORS.get(exc.field_name, "Nieprawidłowe preferencje pracownika")) from exc


@transaction.atomic
def create_team(organization: Organization, name: str, description: str = '',
                settings: Optional[Dict[str, Any]] = None) -> Team:
    count = organization.teams.count()
    if count >= organization.max_teams:
        raise TeamLimitExceeded(organization.max_teams)
    team = Team.objects.create(
        organization=organization,
        name=name,
        description=description,
        settings=merge_team_settings(None, settings),
    )
    logger.info("Created team %s in %s", team.name, organization.slug)
    return team


def update_team_settings(team: Team, updates: Dict[str, Any]) -> Team:
    team.settings = merge_team_settings(team.settings, updates)
    team.save(update_fields=['settings', 'updated_at'])
    return team


def next_color(existing_colors: Iterable[str]) -> str:
    """The palette color used least often; ties go to the earlier one."""
    existing = list(existing_colors)
    counts = [existing.count(color) for color in EMPLOYEE_COLORS]
    return EMPLOYEE_COLORS[counts.index(min(counts))]


@transaction.atomic
def create_employee(team: Team, **fields) -> Employee:
    organization = team.organization
    if organization is not None:
        active = team.employees.filter(is_active=True).count()
        if active >= organization.max_employees_per_team:
            raise EmployeeLimitExceeded(organization.max_employees_per_team)

    data = {k: v for k, v in fields.items() if k in EMPLOYEE_FIELDS and v is not None}
    contract_hours = data.get('contract_hours')
    data.setdefault('contract_hours', 160)
    data.setdefault('hours_per_week', contract_hours / 4 if contract_hours else 40)

    employee = Employee.objects.create(
        team=team,
        color=next_color(team.employees.values_list('color', flat=True)),
        **data,
    )
    logger.info("Created employee %s in team %s", employee.full_name, team.id)
    return employee
