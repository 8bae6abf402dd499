from django.urls import path

from . import views

urlpatterns = [
    # Organizations and teams
    path('api/organizations/', views.api_organizations, name='api_organizations'),
    path('api/organizations/<int:organization_id>/', views.api_organization_detail, name='api_organization_detail'),
    path('api/organizations/<int:organization_id>/teams/', views.api_organization_teams, name='api_organization_teams'),
    path('api/teams/<int:team_id>/', views.api_team_detail, name='api_team_detail'),

    # Employees
    path('api/teams/<int:team_id>/employees/', views.api_team_employees, name='api_team_employees'),
    path('api/employees/<int:employee_id>/', views.api_employee_detail, name='api_employee_detail'),
    path('api/employees/<int:employee_id>/hours/', views.api_employee_hours, name='api_employee_hours'),

    # Shift templates and shifts
    path('api/teams/<int:team_id>/shift-templates/', views.api_team_shift_templates, name='api_team_shift_templates'),
    path('api/shift-templates/<int:template_id>/', views.api_shift_template_detail, name='api_shift_template_detail'),
    path('api/teams/<int:team_id>/shifts/', views.api_team_shifts, name='api_team_shifts'),
    path('api/shifts/<int:shift_id>/', views.api_shift_detail, name='api_shift_detail'),
    path('api/teams/<int:team_id>/quick-assign/', views.api_quick_assign, name='api_quick_assign'),

    # Absences
    path('api/teams/<int:team_id>/absences/', views.api_team_absences, name='api_team_absences'),
    path('api/teams/<int:team_id>/absences/stats/', views.api_team_absence_stats, name='api_team_absence_stats'),
    path('api/absences/<int:absence_id>/<str:action>/', views.api_absence_status, name='api_absence_status'),

    # Calendar and holidays
    path('api/calendar/<int:year>/<int:month>/', views.api_calendar_month, name='api_calendar_month'),
    path('api/working-hours/<int:year>/', views.api_working_hours, name='api_working_hours'),
    path('api/holidays/', views.api_holidays, name='api_holidays'),

    # Schedule
    path('api/teams/<int:team_id>/schedule/generate/', views.api_generate_schedule, name='api_generate_schedule'),
    path('api/teams/<int:team_id>/schedule/publish/', views.api_publish_schedule, name='api_publish_schedule'),
    path('api/teams/<int:team_id>/statistics/', views.api_team_statistics, name='api_team_statistics'),
    path('api/teams/<int:team_id>/conflicts/', views.api_team_conflicts, name='api_team_conflicts'),
]
