"""
Tests for the JSON API: tenants, employees, shifts, absences, calendar
and schedule generation.
"""
from datetime import date, time

import pytest

from grafik_app.models import Absence, Employee, HolidayCache, Schedule, Shift, ShiftTemplate, Team


@pytest.fixture
def team():
    return Team.objects.create(name="Sklep Centrum")


@pytest.fixture
def anna(team):
    return Employee.objects.create(team=team, first_name="Anna", last_name="Nowak", email="anna@example.com")


@pytest.fixture
def bartek(team):
    return Employee.objects.create(team=team, first_name="Bartek", last_name="Wójcik")


@pytest.fixture
def morning(team):
    return ShiftTemplate.objects.create(team=team, name="Poranna", start_time=time(8, 0), end_time=time(16, 0))


def post(client, url, data):
    return client.post(url, data, content_type='application/json')


# ---------------------------------------------------------------------------
# Organizations and teams
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_create_organization_and_team(client):
    response = post(client, '/api/organizations/', {'name': "Sklep Centrum", 'description': "Sieć osiedlowa"})
    assert response.status_code == 201
    org = response.json()
    assert org['slug'] == 'sklep-centrum'
    assert org['max_teams'] == 1

    response = post(client, f"/api/organizations/{org['id']}/teams/", {'name': "Kasy"})
    assert response.status_code == 201
    assert response.json()['settings']['min_rest_between_shifts'] == 11

    response = post(client, f"/api/organizations/{org['id']}/teams/", {'name': "Magazyn"})
    assert response.status_code == 403
    assert response.json()['error'] == "Osiągnięto limit zespołów (1). Ulepsz plan, aby dodać więcej."

    teams = client.get(f"/api/organizations/{org['id']}/teams/").json()
    assert [t['name'] for t in teams] == ["Kasy"]


@pytest.mark.django_db
def test_organization_validation(client):
    response = post(client, '/api/organizations/', {'name': "A"})
    assert response.status_code == 400
    assert response.json()['fields']['name'] == ["Nazwa musi mieć minimum 2 znaki"]

    response = client.post('/api/organizations/', "{not json", content_type='application/json')
    assert response.status_code == 400
    assert response.json() == {'error': "Nieprawidłowy format JSON"}


@pytest.mark.django_db
def test_unknown_organization(client):
    assert client.get('/api/organizations/999/').status_code == 404


@pytest.mark.django_db
def test_update_team_settings(client, team):
    response = client.patch(f'/api/teams/{team.id}/', {'settings': {'break_duration': 15}},
                            content_type='application/json')
    assert response.status_code == 200
    assert response.json()['settings']['break_duration'] == 15
    assert response.json()['name'] == "Sklep Centrum"


@pytest.mark.django_db
def test_malformed_opening_hours_rejected(client, team):
    org = post(client, '/api/organizations/', {'name': "Sklep Centrum"}).json()
    url = f"/api/organizations/{org['id']}/teams/"

    for opening_hours in ({'0': {'start': "08:00"}}, {'0': {'start': "8am", 'end': "16:00"}}):
        response = post(client, url, {'name': "Kasy", 'settings': {'opening_hours': opening_hours}})
        assert response.status_code == 400
        assert response.json() == {'error': "Nieprawidłowe godziny otwarcia"}

    response = post(client, url, {'name': "Kasy", 'settings': "codziennie"})
    assert response.json() == {'error': "Nieprawidłowe ustawienia zespołu"}
    # rejected attempts do not count against the team limit
    assert post(client, url, {'name': "Kasy"}).status_code == 201

    response = client.patch(f'/api/teams/{team.id}/', {
        'name': "Sklep Rynek",
        'settings': {'opening_hours': {'5': {'end': "14:00"}}},
    }, content_type='application/json')
    assert response.status_code == 400
    team.refresh_from_db()
    assert team.name == "Sklep Centrum"
    assert team.team_settings().hours_for(5).end == time(17, 0)


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_create_and_update_employee(client, team):
    response = post(client, f'/api/teams/{team.id}/employees/', {
        'first_name': "Anna",
        'last_name': "Nowak",
        'preferences': {'shift_preference': 'morning', 'avoided_days': [5]},
    })
    assert response.status_code == 201
    employee = response.json()
    assert employee['contract_hours'] == 160
    assert employee['employment_type_label'] == "Pełny etat"
    assert employee['is_active'] is True
    assert employee['email'] is None
    assert employee['preferences']['shift_preference'] == 'morning'
    assert employee['preferences']['max_hours_per_week'] == 40

    response = client.patch(f"/api/employees/{employee['id']}/", {'last_name': "Kowalska"},
                            content_type='application/json')
    assert response.status_code == 200
    assert response.json()['full_name'] == "Anna Kowalska"
    assert response.json()['preferences']['avoided_days'] == [5]


@pytest.mark.django_db
def test_employee_validation(client, team):
    response = post(client, f'/api/teams/{team.id}/employees/', {
        'first_name': "Anna", 'last_name': "Nowak", 'employment_type': 'custom',
    })
    assert response.status_code == 400
    assert response.json()['fields']['custom_hours'] == ["Podaj liczbę godzin dla niestandardowego etatu"]

    response = post(client, f'/api/teams/{team.id}/employees/', {'first_name': "A", 'last_name': "Nowak"})
    assert response.status_code == 400
    assert 'first_name' in response.json()['fields']


@pytest.mark.django_db
def test_null_preferences_are_stored_as_defaults(client, team, morning):
    response = post(client, f'/api/teams/{team.id}/employees/', {
        'first_name': "Anna",
        'last_name': "Nowak",
        'preferences': {'avoided_days': None, 'preferred_days': None, 'max_hours_per_week': None},
    })
    assert response.status_code == 201
    assert response.json()['preferences']['avoided_days'] == []
    assert response.json()['preferences']['max_hours_per_week'] == 40
    assert Employee.objects.get().preferences['avoided_days'] == []

    # rows written before preferences were normalized may still hold nulls
    Employee.objects.create(team=team, first_name="Bartek", last_name="Wójcik",
                            contract_hours=40, preferences={'avoided_days': None})

    response = post(client, f'/api/teams/{team.id}/schedule/generate/', {'year': 2025, 'month': 6})
    assert response.status_code == 200
    assert response.json()['success'] is True


@pytest.mark.django_db
def test_malformed_preferences_rejected(client, team, anna):
    url = f'/api/teams/{team.id}/employees/'
    response = post(client, url, {'first_name': "Ewa", 'last_name': "Kowalczyk", 'preferences': [1, 2]})
    assert response.status_code == 400
    assert response.json() == {'error': "Nieprawidłowe preferencje pracownika"}

    response = post(client, url, {'first_name': "Ewa", 'last_name': "Kowalczyk",
                                  'preferences': {'preferred_days': [9]}})
    assert response.json() == {'error': "Nieprawidłowe preferowane dni"}
    assert team.employees.count() == 1

    response = client.patch(f'/api/employees/{anna.id}/', {'preferences': {'avoided_days': "sobota"}},
                            content_type='application/json')
    assert response.status_code == 400
    assert response.json() == {'error': "Nieprawidłowe dni do unikania"}


@pytest.mark.django_db
def test_list_and_delete_employees(client, team, anna, bartek):
    bartek.is_active = False
    bartek.save()

    assert [e['id'] for e in client.get(f'/api/teams/{team.id}/employees/').json()] == [anna.id]
    everyone = client.get(f'/api/teams/{team.id}/employees/?include_inactive=1').json()
    assert len(everyone) == 2

    assert client.delete(f'/api/employees/{anna.id}/').json() == {'success': True}
    assert not Employee.objects.filter(pk=anna.id).exists()


@pytest.mark.django_db
def test_employee_hours(client, team, anna):
    Shift.objects.create(team=team, employee=anna, date=date(2025, 6, 2), start_time=time(8, 0), end_time=time(16, 0))

    data = client.get(f'/api/employees/{anna.id}/hours/?year=2025&month=6').json()
    assert data['worked_hours'] == 8
    assert data['required_hours'] == 160
    assert data['worked_label'] == "8h"


# ---------------------------------------------------------------------------
# Shift templates and shifts
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_shift_templates(client, team):
    response = post(client, f'/api/teams/{team.id}/shift-templates/', {
        'name': "Nocna", 'start_time': "22:00", 'end_time': "06:00",
    })
    assert response.status_code == 201
    template = response.json()
    assert template['capacity'] == 1
    assert template['break_duration'] == 0

    response = client.patch(f"/api/shift-templates/{template['id']}/", {'capacity': 2},
                            content_type='application/json')
    assert response.json()['capacity'] == 2
    assert response.json()['start_time'] == "22:00"

    response = post(client, f'/api/teams/{team.id}/shift-templates/', {
        'name': "Zła", 'start_time': "25:00", 'end_time': "06:00",
    })
    assert response.status_code == 400


@pytest.mark.django_db
def test_create_shift_returns_rule_warnings(client, team, anna):
    response = post(client, f'/api/teams/{team.id}/shifts/', {
        'employee': anna.id, 'date': '2025-06-19', 'start_time': '08:00', 'end_time': '16:00',
    })
    assert response.status_code == 201
    shift = response.json()
    assert shift['warnings'] == ["Dzień jest świętem publicznym"]
    assert shift['hours'] == 8
    assert shift['created_by'] == 'manual'
    assert shift['status'] == 'scheduled'

    response = post(client, f'/api/teams/{team.id}/shifts/', {
        'employee': anna.id, 'date': '2025-06-20', 'start_time': '06:00', 'end_time': '10:00',
    })
    # 14h after the previous day's shift
    assert response.json()['warnings'] == []


@pytest.mark.django_db
def test_create_shift_short_rest_warning(client, team, anna):
    Shift.objects.create(team=team, employee=anna, date=date(2025, 6, 2),
                         start_time=time(14, 0), end_time=time(23, 0))
    response = post(client, f'/api/teams/{team.id}/shifts/', {
        'employee': anna.id, 'date': '2025-06-03', 'start_time': '06:00', 'end_time': '14:00',
    })
    assert response.status_code == 201
    assert response.json()['warnings'] == ["Za krótki odpoczynek (7.0h zamiast min. 11h)"]


@pytest.mark.django_db
def test_shift_validation(client, team, anna):
    response = post(client, f'/api/teams/{team.id}/shifts/', {
        'employee': anna.id, 'date': '2025-06-02', 'start_time': '16:00', 'end_time': '08:00',
    })
    assert response.status_code == 400
    assert response.json()['fields']['end_time'] == ["Godzina zakończenia musi być późniejsza niż rozpoczęcia"]

    other_team = Team.objects.create(name="Inny sklep")
    outsider = Employee.objects.create(team=other_team, first_name="Ewa", last_name="Lis")
    response = post(client, f'/api/teams/{team.id}/shifts/', {
        'employee': outsider.id, 'date': '2025-06-02', 'start_time': '08:00', 'end_time': '16:00',
    })
    assert response.status_code == 400
    assert 'employee' in response.json()['fields']


@pytest.mark.django_db
def test_list_and_update_shifts(client, team, anna):
    shift = Shift.objects.create(team=team, employee=anna, date=date(2025, 6, 2),
                                 start_time=time(8, 0), end_time=time(16, 0))
    Shift.objects.create(team=team, employee=anna, date=date(2025, 7, 1),
                         start_time=time(8, 0), end_time=time(16, 0))

    june = client.get(f'/api/teams/{team.id}/shifts/?year=2025&month=6').json()
    assert [s['id'] for s in june] == [shift.id]
    ranged = client.get(f'/api/teams/{team.id}/shifts/?start=2025-06-01&end=2025-07-31').json()
    assert len(ranged) == 2

    response = client.patch(f'/api/shifts/{shift.id}/', {'status': 'confirmed'}, content_type='application/json')
    assert response.status_code == 200
    assert response.json()['status'] == 'confirmed'

    response = client.get(f'/api/teams/{team.id}/shifts/?start=2025-07-01&end=2025-06-01')
    assert response.status_code == 400

    own = client.get(f'/api/teams/{team.id}/shifts/?year=2025&month=6&employee={anna.id}').json()
    assert [s['id'] for s in own] == [shift.id]
    response = client.get(f'/api/teams/{team.id}/shifts/?year=2025&month=6&employee=abc')
    assert response.status_code == 400
    assert response.json() == {'error': "Nieprawidłowy identyfikator pracownika"}


@pytest.mark.django_db
def test_quick_assign(client, team, anna, bartek):
    Shift.objects.create(team=team, employee=anna, date=date(2025, 6, 2),
                         start_time=time(8, 0), end_time=time(16, 0))

    data = client.get(f'/api/teams/{team.id}/quick-assign/?date=2025-06-04').json()
    assert data == {'employee': {'id': bartek.id, 'full_name': "Bartek Wójcik"}, 'score': 100.0}

    assert client.get(f'/api/teams/{team.id}/quick-assign/?date=jutro').status_code == 400


# ---------------------------------------------------------------------------
# Absences
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_absence_workflow(client, team, anna):
    response = post(client, f'/api/teams/{team.id}/absences/', {
        'employee': anna.id, 'type': 'vacation', 'start_date': '2025-07-01', 'end_date': '2025-07-04',
    })
    assert response.status_code == 201
    absence = response.json()
    assert absence['status'] == 'pending'
    assert absence['type_label'] == "Urlop wypoczynkowy"

    response = post(client, f'/api/teams/{team.id}/absences/', {
        'employee': anna.id, 'type': 'sick_leave', 'start_date': '2025-07-03', 'end_date': '2025-07-08',
    })
    assert response.status_code == 409

    response = client.post(f"/api/absences/{absence['id']}/approve/")
    assert response.json()['status'] == 'approved'
    assert client.post(f"/api/absences/{absence['id']}/archive/").status_code == 400

    approved = client.get(f'/api/teams/{team.id}/absences/?status=approved&year=2025').json()
    assert [a['id'] for a in approved] == [absence['id']]

    stats = client.get(f'/api/teams/{team.id}/absences/stats/?year=2025').json()
    assert stats['approved'] == 1
    assert stats['total_days'] == 4


@pytest.mark.django_db
def test_absence_end_before_start(client, team, anna):
    response = post(client, f'/api/teams/{team.id}/absences/', {
        'employee': anna.id, 'start_date': '2025-07-04', 'end_date': '2025-07-01',
    })
    assert response.status_code == 400
    assert not Absence.objects.exists()


# ---------------------------------------------------------------------------
# Calendar and holidays
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_calendar_month(client):
    data = client.get('/api/calendar/2025/6/').json()

    assert data['month_name'] == "Czerwiec"
    assert len(data['days']) == 30
    assert data['working_hours']['total_working_days'] == 20
    corpus_christi = data['days'][18]
    assert corpus_christi['is_public_holiday']
    assert corpus_christi['label'] == "Boże Ciało"
    assert {'date': '2025-06-29', 'name': "Niedziela handlowa", 'type': 'trading_sunday'} in data['special_days']

    assert 'team_open_days' not in data
    assert client.get('/api/calendar/2025/13/').status_code == 400


@pytest.mark.django_db
def test_calendar_month_for_team(client, team):
    data = client.get(f'/api/calendar/2025/6/?team={team.id}').json()
    assert data['team_open_days'] == 20

    team.settings = {**team.settings, 'working_days': [0, 1, 2, 3, 4, 5]}
    team.save()
    data = client.get(f'/api/calendar/2025/6/?team={team.id}').json()
    assert data['team_open_days'] == 24

    response = client.get('/api/calendar/2025/6/?team=abc')
    assert response.status_code == 400
    assert response.json() == {'error': "Nieprawidłowy identyfikator zespołu"}
    assert client.get('/api/calendar/2025/6/?team=999').status_code == 404


@pytest.mark.django_db
def test_working_hours(client):
    data = client.get('/api/working-hours/2025/').json()
    assert data['total'] == 2016

    half = client.get('/api/working-hours/2025/?employment_type=half').json()
    assert half['total'] == 1008
    assert client.get('/api/working-hours/2025/?employment_type=custom&custom_hours=abc').status_code == 400


@pytest.mark.django_db
def test_holidays_endpoint(client):
    assert client.get('/api/holidays/').json() == {'error': "Parametr year jest wymagany"}

    holidays = [{"date": "2025-11-11", "localName": "Narodowe Święto Niepodległości"}]
    HolidayCache.objects.create(year=2025, country_code='PL', holidays=holidays)

    data = client.get('/api/holidays/?year=2025').json()
    assert data['holidays'] == holidays
    assert data['cached'] is True


# ---------------------------------------------------------------------------
# Schedule generation, statistics and publishing
# ---------------------------------------------------------------------------
@pytest.mark.django_db
def test_generate_preview_and_save(client, team, anna, morning):
    url = f'/api/teams/{team.id}/schedule/generate/'

    preview = post(client, url, {'year': 2025, 'month': 6, 'seed': 1})
    assert preview.status_code == 200
    assert preview.json()['success'] is True
    assert len(preview.json()['shifts']) == 20
    assert preview.json()['saved'] == 0
    assert not Shift.objects.exists()

    saved = post(client, url, {'year': 2025, 'month': 6, 'save': True})
    assert saved.status_code == 201
    assert saved.json()['saved'] == 20
    assert Shift.objects.filter(team=team, created_by='generator').count() == 20

    replaced = post(client, url, {'year': 2025, 'month': 6, 'save': True, 'replace': True})
    assert replaced.json()['saved'] == 20
    assert Shift.objects.count() == 20


@pytest.mark.django_db
def test_generate_with_staffing_algorithm(client, team, anna, bartek):
    response = post(client, f'/api/teams/{team.id}/schedule/generate/', {
        'year': 2025, 'month': 6, 'algorithm': 'staffing',
        'staffing_requirements': {'5': {'min_employees': 0}},
    })
    assert response.status_code == 200
    days = {s['date'] for s in response.json()['shifts']}
    assert '2025-06-07' not in days        # Saturday not staffed
    assert '2025-06-19' not in days        # Corpus Christi
    assert '2025-06-02' in days


@pytest.mark.django_db
def test_generate_errors(client, team, anna):
    url = f'/api/teams/{team.id}/schedule/generate/'

    response = post(client, url, {'year': 2025, 'month': 6})
    assert response.status_code == 400
    assert response.json()['success'] is False
    assert response.json()['warnings'] == ["Brak szablonów zmian - dodaj szablony w zakładce Szablony"]

    assert post(client, url, {'year': 2025, 'month': 0}).status_code == 400
    assert post(client, url, {'year': 2025, 'month': 6, 'algorithm': 'genetic'}).json() == \
        {'error': "Nieznany algorytm: genetic"}
    assert client.get(url).status_code == 405


@pytest.mark.django_db
def test_statistics_conflicts_and_publish(client, team, anna, bartek, morning):
    post(client, f'/api/teams/{team.id}/schedule/generate/', {'year': 2025, 'month': 6, 'save': True})

    stats = client.get(f'/api/teams/{team.id}/statistics/?year=2025&month=6').json()
    assert stats['total_shifts'] == 20
    assert stats['total_hours'] == 160

    conflicts = client.get(f'/api/teams/{team.id}/conflicts/?year=2025&month=6').json()
    assert conflicts == {'conflicts': [], 'errors': 0, 'warnings': 0}

    published = post(client, f'/api/teams/{team.id}/schedule/publish/', {'year': 2025, 'month': 6}).json()
    assert published['success'] is True
    assert published['published_shifts'] == 20
    assert published['message'] == "Grafik Czerwiec 2025 opublikowany"
    assert published['recipients'] == [{'id': anna.id, 'name': "Anna Nowak", 'email': "anna@example.com"}]
    assert Schedule.objects.get(team=team, year=2025, month=6).is_published
    assert not Shift.objects.filter(is_published=False).exists()
