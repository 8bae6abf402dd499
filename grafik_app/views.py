import json
import logging
from datetime import date, timedelta
from functools import wraps

from django.db import transaction
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from grafik_app.converters import absences_to_core, employees_to_core
from grafik_app.exceptions import GrafikError
from grafik_app.forms import AbsenceForm, EmployeeForm, OrganizationForm, ShiftForm, ShiftTemplateForm, TeamForm
from grafik_app.models import Absence, Employee, Organization, Shift, ShiftTemplate, Team
from grafik_app.services import absences as absence_service
from grafik_app.services import holiday_api
from grafik_app.services import organizations as org_service
from grafik_app.services import scheduling
from grafik_app.services.schedule_stats import ScheduleStatistics
from grafik_app.utils import day_label, parse_date_range, parse_id, parse_period, workdays_in_month
from scheduling_core.algorithm import find_best_employee_for_slot, validate_shift_assignment
from scheduling_core.base import EmployeePreferences
from scheduling_core.polish_holidays import month_calendar, special_days
from scheduling_core.utils import format_time, month_bounds, to_date, week_bounds
from scheduling_core.work_hours import (
    calculate_working_hours,
    employment_type_label,
    format_hours,
    month_name,
    yearly_working_hours,
)

logger = logging.getLogger(__name__)


def domain_errors(view):
    """Turn GrafikError into a JSON error response with the error's status code."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except GrafikError as exc:
            logger.info("%s %s rejected: %s", request.method, request.path, exc.message)
            return JsonResponse({'error': exc.message}, status=exc.status_code)
    return wrapper


def parse_json(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise GrafikError("Nieprawidłowy format JSON")
    if not isinstance(data, dict):
        raise GrafikError("Nieprawidłowy format JSON")
    return data


def form_error(form):
    fields = {name: [e['message'] for e in errors] for name, errors in form.errors.get_json_data().items()}
    return JsonResponse({'error': "Nieprawidłowe dane formularza", 'fields': fields}, status=400)


def bind_update(form_class, instance, data, **kwargs):
    """Bind a partial update: current values overlaid with the submitted ones."""
    current = model_to_dict(instance, fields=form_class._meta.fields)
    current.update(data)
    return form_class(current, instance=instance, **kwargs)


def submitted(form, data) -> dict:
    return {k: v for k, v in form.cleaned_data.items() if k in data}


def period_from_query(request):
    """``?start=&end=`` or ``?year=&month=`` (default: the current month)."""
    if request.GET.get('start') or request.GET.get('end'):
        return parse_date_range(request.GET.get('start'), request.GET.get('end'))
    today = date.today()
    year, month = parse_period(request.GET.get('year', today.year), request.GET.get('month', today.month))
    return month_bounds(year, month)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def organization_to_dict(org):
    return {
        'id': org.id,
        'name': org.name,
        'slug': org.slug,
        'description': org.description,
        'subscription_tier': org.subscription_tier,
        'max_teams': org.max_teams,
        'max_employees_per_team': org.max_employees_per_team,
        'is_active': org.is_active,
        'team_count': org.teams.count(),
    }


def team_to_dict(team):
    return {
        'id': team.id,
        'organization_id': team.organization_id,
        'name': team.name,
        'description': team.description,
        'settings': team.team_settings().to_dict(),
    }


def employee_to_dict(emp):
    return {
        'id': emp.id,
        'team_id': emp.team_id,
        'first_name': emp.first_name,
        'last_name': emp.last_name,
        'full_name': emp.full_name,
        'email': emp.email,
        'phone': emp.phone,
        'color': emp.color,
        'role': emp.role,
        'position': emp.position,
        'contract_type': emp.contract_type,
        'employment_type': emp.employment_type,
        'employment_type_label': employment_type_label(emp.employment_type),
        'custom_hours': emp.custom_hours,
        'contract_hours': emp.contract_hours,
        'hours_per_week': emp.hours_per_week,
        'hourly_rate': float(emp.hourly_rate) if emp.hourly_rate is not None else None,
        'preferences': EmployeePreferences.from_dict(emp.preferences).to_dict(),
        'notification_preferences': emp.notification_preferences,
        'is_active': emp.is_active,
    }


def template_to_dict(template):
    return {
        'id': template.id,
        'team_id': template.team_id,
        'name': template.name,
        'start_time': format_time(template.start_time),
        'end_time': format_time(template.end_time),
        'break_duration': template.break_duration,
        'color': template.color,
        'is_default': template.is_default,
        'capacity': template.capacity,
    }


def shift_to_dict(shift):
    return {
        'id': shift.id,
        'team_id': shift.team_id,
        'employee_id': shift.employee_id,
        'date': shift.date.isoformat(),
        'start_time': format_time(shift.start_time),
        'end_time': format_time(shift.end_time),
        'break_duration': shift.break_duration,
        'hours': shift.hours,
        'type': shift.type,
        'status': shift.status,
        'position': shift.position,
        'notes': shift.notes,
        'is_overtime': shift.is_overtime,
        'is_published': shift.is_published,
        'created_by': shift.created_by,
    }


def absence_to_dict(absence):
    return {
        'id': absence.id,
        'team_id': absence.team_id,
        'employee_id': absence.employee_id,
        'type': absence.type,
        'type_label': absence.get_type_display(),
        'start_date': absence.start_date.isoformat(),
        'end_date': absence.end_date.isoformat(),
        'status': absence.status,
        'reason': absence.reason,
    }


# ---------------------------------------------------------------------------
# Organizations and teams
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_organizations(request):
    """List organizations or create one with a unique slug."""
    if request.method == "GET":
        return JsonResponse([organization_to_dict(o) for o in Organization.objects.all()], safe=False)

    data = parse_json(request)
    form = OrganizationForm(data)
    if not form.is_valid():
        return form_error(form)
    org = org_service.create_organization(**form.cleaned_data)
    return JsonResponse(organization_to_dict(org), status=201)


@csrf_exempt
@require_http_methods(["GET"])
def api_organization_detail(request, organization_id):
    org = get_object_or_404(Organization, pk=organization_id)
    return JsonResponse(organization_to_dict(org))


@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_organization_teams(request, organization_id):
    org = get_object_or_404(Organization, pk=organization_id)
    if request.method == "GET":
        return JsonResponse([team_to_dict(t) for t in org.teams.all()], safe=False)

    data = parse_json(request)
    form = TeamForm(data)
    if not form.is_valid():
        return form_error(form)
    team = org_service.create_team(org, settings=data.get('settings'), **form.cleaned_data)
    return JsonResponse(team_to_dict(team), status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@domain_errors
@transaction.atomic
def api_team_detail(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    if request.method == "PATCH":
        data = parse_json(request)
        form = bind_update(TeamForm, team, data)
        if not form.is_valid():
            return form_error(form)
        form.save()
        if isinstance(data.get('settings'), dict):
            org_service.update_team_settings(team, data['settings'])
    return JsonResponse(team_to_dict(team))


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_team_employees(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    if request.method == "GET":
        employees = team.employees.all()
        if request.GET.get('include_inactive') not in ('1', 'true'):
            employees = employees.filter(is_active=True)
        return JsonResponse([employee_to_dict(e) for e in employees], safe=False)

    data = parse_json(request)
    form = EmployeeForm(data)
    if not form.is_valid():
        return form_error(form)
    fields = submitted(form, data)
    if 'preferences' in data:
        fields['preferences'] = org_service.normalize_preferences(data['preferences'])
    if isinstance(data.get('notification_preferences'), dict):
        fields['notification_preferences'] = data['notification_preferences']
    employee = org_service.create_employee(team, **fields)
    return JsonResponse(employee_to_dict(employee), status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@domain_errors
def api_employee_detail(request, employee_id):
    employee = get_object_or_404(Employee, pk=employee_id)
    if request.method == "DELETE":
        employee.delete()
        return JsonResponse({'success': True})

    if request.method == "PATCH":
        data = parse_json(request)
        form = bind_update(EmployeeForm, employee, data)
        if not form.is_valid():
            return form_error(form)
        employee = form.save(commit=False)
        if 'preferences' in data:
            employee.preferences = org_service.normalize_preferences(data['preferences'])
        if isinstance(data.get('notification_preferences'), dict):
            employee.notification_preferences = {**employee.notification_preferences,
                                                 **data['notification_preferences']}
        employee.save()
    return JsonResponse(employee_to_dict(employee))


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_employee_hours(request, employee_id):
    """Worked vs. required hours of one employee in a month."""
    employee = get_object_or_404(Employee, pk=employee_id)
    today = date.today()
    year, month = parse_period(request.GET.get('year', today.year), request.GET.get('month', today.month))
    stats = ScheduleStatistics(employee.team).employee_month_hours(employee, year, month)
    return JsonResponse({
        'employee_id': employee.id,
        'year': year,
        'month': month,
        **stats,
        'worked_label': format_hours(stats['worked_hours']),
        'required_label': format_hours(stats['required_hours']),
    })


# ---------------------------------------------------------------------------
# Shift templates
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_team_shift_templates(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    if request.method == "GET":
        return JsonResponse([template_to_dict(t) for t in team.shift_templates.all()], safe=False)

    form = ShiftTemplateForm(parse_json(request))
    if not form.is_valid():
        return form_error(form)
    template = form.save(commit=False)
    template.team = team
    template.save()
    return JsonResponse(template_to_dict(template), status=201)


@csrf_exempt
@require_http_methods(["PATCH", "DELETE"])
@domain_errors
def api_shift_template_detail(request, template_id):
    template = get_object_or_404(ShiftTemplate, pk=template_id)
    if request.method == "DELETE":
        template.delete()
        return JsonResponse({'success': True})

    form = bind_update(ShiftTemplateForm, template, parse_json(request))
    if not form.is_valid():
        return form_error(form)
    return JsonResponse(template_to_dict(form.save()))


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_team_shifts(request, team_id):
    """List shifts of a period, or create one; rule violations come back as warnings."""
    team = get_object_or_404(Team, pk=team_id)
    if request.method == "GET":
        start_date, end_date = period_from_query(request)
        shifts = team.shifts.filter(date__gte=start_date, date__lte=end_date)
        if request.GET.get('employee'):
            employee_id = parse_id(request.GET['employee'], "Nieprawidłowy identyfikator pracownika")
            shifts = shifts.filter(employee_id=employee_id)
        return JsonResponse([shift_to_dict(s) for s in shifts], safe=False)

    form = ShiftForm(parse_json(request), team=team)
    if not form.is_valid():
        return form_error(form)
    shift = form.save(commit=False)
    shift.team = team
    shift.created_by = shift.created_by or 'manual'

    employee = shift.employee
    others = (team.shifts
              .filter(employee=employee, date__gte=shift.date - timedelta(days=1), date__lte=shift.date)
              .exclude(status='cancelled'))
    absences = absences_to_core(list(employee.absences.filter(status='approved')))
    _, warnings = validate_shift_assignment(shift, employees_to_core([employee])[0], list(others), absences)

    shift.save()
    return JsonResponse({**shift_to_dict(shift), 'warnings': warnings}, status=201)


@csrf_exempt
@require_http_methods(["PATCH", "DELETE"])
@domain_errors
def api_shift_detail(request, shift_id):
    shift = get_object_or_404(Shift, pk=shift_id)
    if request.method == "DELETE":
        shift.delete()
        return JsonResponse({'success': True})

    form = bind_update(ShiftForm, shift, parse_json(request), team=shift.team)
    if not form.is_valid():
        return form_error(form)
    return JsonResponse(shift_to_dict(form.save()))


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_quick_assign(request, team_id):
    """Best available employee for ``?date=``."""
    team = get_object_or_404(Team, pk=team_id)
    try:
        day = to_date(request.GET.get('date'))
    except (TypeError, ValueError):
        raise GrafikError("Nieprawidłowy format daty (oczekiwano RRRR-MM-DD)")
    employees = employees_to_core(list(team.employees.filter(is_active=True)))
    monday, sunday = week_bounds(day)
    shifts = list(team.shifts.exclude(status='cancelled').filter(date__gte=monday, date__lte=sunday))
    absences = absences_to_core(list(team.absences.filter(status='approved')))
    best = find_best_employee_for_slot(day, employees, shifts, absences)
    if best is None:
        return JsonResponse({'employee': None, 'score': None})
    employee, score = best
    return JsonResponse({'employee': {'id': employee.id, 'full_name': employee.full_name}, 'score': score})


# ---------------------------------------------------------------------------
# Absences
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
@domain_errors
def api_team_absences(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    if request.method == "GET":
        absences = team.absences.select_related('employee')
        if request.GET.get('status'):
            absences = absences.filter(status=request.GET['status'])
        if request.GET.get('year'):
            year, _ = parse_period(request.GET['year'], 1)
            absences = absences.filter(start_date__year__lte=year, end_date__year__gte=year)
        return JsonResponse([absence_to_dict(a) for a in absences], safe=False)

    form = AbsenceForm(parse_json(request), team=team)
    if not form.is_valid():
        return form_error(form)
    data = form.cleaned_data
    absence = absence_service.create_absence(
        data['employee'], data['start_date'], data['end_date'],
        type=data.get('type') or 'vacation', reason=data.get('reason', ''),
    )
    return JsonResponse(absence_to_dict(absence), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@domain_errors
def api_absence_status(request, absence_id, action):
    absence = get_object_or_404(Absence, pk=absence_id)
    transition = absence_service.STATUS_TRANSITIONS.get(action)
    if transition is None:
        raise GrafikError(f"Nieznana operacja: {action}")
    return JsonResponse(absence_to_dict(transition(absence)))


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_team_absence_stats(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    year, _ = parse_period(request.GET.get('year', date.today().year), 1)
    return JsonResponse({'year': year, **absence_service.absence_stats(team, year)})


# ---------------------------------------------------------------------------
# Calendar and holidays
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_calendar_month(request, year, month):
    """Day-by-day calendar with Polish holidays, trading Sundays and working hours.

    With ``?team=<id>`` the response also counts the days that team is open.
    """
    year, month = parse_period(year, month)
    first_day, last_day = month_bounds(year, month)
    days = month_calendar(year, month)
    for day in days:
        day['label'] = day_label(to_date(day['date']))
    data = {
        'year': year,
        'month': month,
        'month_name': month_name(month),
        'days': days,
        'special_days': [d.to_dict() for d in special_days(first_day, last_day)],
        'working_hours': calculate_working_hours(year, month).to_dict(),
    }
    if request.GET.get('team'):
        team = get_object_or_404(Team, pk=parse_id(request.GET['team'], "Nieprawidłowy identyfikator zespołu"))
        data['team_open_days'] = workdays_in_month(year, month, team)
    return JsonResponse(data)


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_working_hours(request, year):
    year, _ = parse_period(year, 1)
    custom = request.GET.get('custom_hours')
    try:
        custom_hours = float(custom) if custom else None
    except ValueError:
        raise GrafikError("Nieprawidłowa liczba godzin")
    return JsonResponse({
        'year': year,
        **yearly_working_hours(year, request.GET.get('employment_type', 'full'), custom_hours),
    })


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_holidays(request):
    if not request.GET.get('year'):
        raise GrafikError("Parametr year jest wymagany")
    holidays, cached = holiday_api.get_holidays(request.GET['year'], request.GET.get('country'))
    return JsonResponse({
        'holidays': holidays,
        'cached': cached,
        'upcoming': holiday_api.upcoming_holidays(holidays),
    })


# ---------------------------------------------------------------------------
# Schedule generation, statistics and publishing
# ---------------------------------------------------------------------------
@csrf_exempt
@require_http_methods(["POST"])
@domain_errors
def api_generate_schedule(request, team_id):
    """Generate a month; ``save`` persists the shifts, otherwise it is a preview."""
    team = get_object_or_404(Team, pk=team_id)
    data = parse_json(request)
    year, month = parse_period(data.get('year'), data.get('month'))
    options = {
        'algorithm': data.get('algorithm', 'templates'),
        'seed': data.get('seed'),
        'requirements': data.get('staffing_requirements'),
    }

    if data.get('save'):
        result, shifts = scheduling.generate_and_save(team, year, month, replace=bool(data.get('replace')),
                                                      **options)
        return JsonResponse({**result.to_dict(), 'saved': len(shifts)},
                            status=201 if result.success else 400)

    result = scheduling.generate_for_team(team, year, month, **options)
    return JsonResponse({**result.to_dict(), 'saved': 0}, status=200 if result.success else 400)


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_team_statistics(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    start_date, end_date = period_from_query(request)
    return JsonResponse(ScheduleStatistics(team).calculate(start_date, end_date))


@csrf_exempt
@require_http_methods(["GET"])
@domain_errors
def api_team_conflicts(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    start_date, end_date = period_from_query(request)
    conflicts = ScheduleStatistics(team).detect_conflicts(start_date, end_date)
    return JsonResponse({
        'conflicts': conflicts,
        'errors': sum(1 for c in conflicts if c['severity'] == 'error'),
        'warnings': sum(1 for c in conflicts if c['severity'] == 'warning'),
    })


@csrf_exempt
@require_http_methods(["POST"])
@domain_errors
def api_publish_schedule(request, team_id):
    team = get_object_or_404(Team, pk=team_id)
    data = parse_json(request)
    year, month = parse_period(data.get('year'), data.get('month'))
    return JsonResponse({'success': True, **scheduling.publish_schedule(team, year, month)})
