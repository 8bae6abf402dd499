from django.db import models
from django.db.models import JSONField

from scheduling_core.base import TeamSettings
from scheduling_core.utils import shift_hours


def default_team_settings():
    return TeamSettings().to_dict()


def default_notification_preferences():
    return {
        'receive_email': False,
        'schedule_published': True,
        'shift_changes': True,
        'reminders': False,
    }


class Organization(models.Model):
    TIER_CHOICES = [
        ('free', 'Free'),
        ('pro', 'Pro'),
        ('enterprise', 'Enterprise'),
    ]
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=60, unique=True)
    description = models.TextField(blank=True)
    subscription_tier = models.CharField(max_length=20, choices=TIER_CHOICES, default='free')
    max_teams = models.PositiveIntegerField(default=1)
    max_employees_per_team = models.PositiveIntegerField(default=10)
    settings = JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Team(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='teams',
                                     null=True, blank=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    # Serialized scheduling_core.base.TeamSettings
    settings = JSONField(default=default_team_settings, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def team_settings(self) -> TeamSettings:
        return TeamSettings.from_dict(self.settings)


class Employee(models.Model):
    ROLE_CHOICES = [
        ('manager', 'Kierownik'),
        ('employee', 'Pracownik'),
        ('part-time', 'Niepełny etat'),
        ('trainee', 'Stażysta'),
    ]
    CONTRACT_CHOICES = [
        ('full_time', 'Umowa o pracę (pełny etat)'),
        ('part_time', 'Umowa o pracę (część etatu)'),
        ('contract', 'Umowa cywilnoprawna'),
        ('intern', 'Staż'),
    ]
    EMPLOYMENT_CHOICES = [
        ('full', 'Pełny etat'),
        ('half', '½ etatu'),
        ('custom', 'Niestandardowy'),
    ]
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='employees')
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    color = models.CharField(max_length=7, default='#3b82f6')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='employee')
    position = models.CharField(max_length=100, blank=True)
    contract_type = models.CharField(max_length=20, choices=CONTRACT_CHOICES, default='full_time')
    employment_type = models.CharField(max_length=10, choices=EMPLOYMENT_CHOICES, default='full')
    custom_hours = models.FloatField(null=True, blank=True, help_text="Daily hours for the custom employment type")
    # Monthly target; 0 means the full-time figure of the month
    contract_hours = models.FloatField(default=160)
    hours_per_week = models.FloatField(default=40)
    hourly_rate = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    preferences = JSONField(default=dict, blank=True)
    notification_preferences = JSONField(default=default_notification_preferences, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class ShiftTemplate(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='shift_templates')
    name = models.CharField(max_length=100)
    start_time = models.TimeField()
    end_time = models.TimeField()
    break_duration = models.PositiveIntegerField(default=0, help_text="Minutes")
    color = models.CharField(max_length=7, default='#3b82f6')
    is_default = models.BooleanField(default=False)
    capacity = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_time']

    def __str__(self):
        return f"{self.name} ({self.start_time:%H:%M}-{self.end_time:%H:%M})"


class Shift(models.Model):
    TYPE_CHOICES = [
        ('regular', 'Zwykła'),
        ('overtime', 'Nadgodziny'),
        ('training', 'Szkolenie'),
        ('on_call', 'Dyżur'),
    ]
    STATUS_CHOICES = [
        ('scheduled', 'Zaplanowana'),
        ('confirmed', 'Potwierdzona'),
        ('in-progress', 'W trakcie'),
        ('completed', 'Zakończona'),
        ('cancelled', 'Anulowana'),
    ]
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='shifts')
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='shifts')
    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    break_duration = models.PositiveIntegerField(default=0)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='regular')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled')
    position = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    is_overtime = models.BooleanField(default=False)
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    created_by = models.CharField(max_length=64, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['team', 'date'], name='grafik_shift_team_date_idx'),
            models.Index(fields=['employee', 'date'], name='grafik_shift_emp_date_idx'),
        ]

    def __str__(self):
        return f"{self.date} - {self.employee} - {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def hours(self) -> float:
        return shift_hours(self.start_time, self.end_time, self.break_duration)


class Absence(models.Model):
    TYPE_CHOICES = [
        ('vacation', 'Urlop wypoczynkowy'),
        ('vacation_on_demand', 'Urlop na żądanie'),
        ('sick_leave', 'L4 - Zwolnienie lekarskie'),
        ('uz', 'UZ - Urlop okolicznościowy'),
        ('maternity', 'Urlop macierzyński'),
        ('paternity', 'Urlop ojcowski'),
        ('childcare', 'Urlop wychowawczy'),
        ('unpaid', 'Urlop bezpłatny'),
        ('training', 'Szkolenie'),
        ('delegation', 'Delegacja'),
        ('blood_donation', 'Honorowe krwiodawstwo'),
        ('military', 'Ćwiczenia wojskowe'),
        ('other', 'Inne'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Oczekuje'),
        ('approved', 'Zatwierdzona'),
        ('rejected', 'Odrzucona'),
        ('cancelled', 'Anulowana'),
    ]
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='absences')
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='absences')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='vacation')
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    reason = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.employee} - {self.get_type_display()} ({self.start_date} - {self.end_date})"


class Schedule(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='schedules')
    year = models.IntegerField()
    month = models.IntegerField()
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('team', 'year', 'month')

    def __str__(self):
        return f"{self.team} - {self.year}-{self.month:02d}"


class HolidayCache(models.Model):
    """Public holidays fetched from the holiday API, one row per year and country."""
    year = models.IntegerField()
    country_code = models.CharField(max_length=2, default='PL')
    holidays = JSONField(default=list)
    fetched_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('year', 'country_code')

    def __str__(self):
        return f"{self.country_code} {self.year}"
