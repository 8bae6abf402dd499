"""
Django ModelForms validating the JSON API payloads.

Views bind them to the decoded request body; validation errors are
returned as ``{'error': ..., 'fields': {name: [messages]}}`` with status 400.
Fields whose model column has a default are optional.
"""
from __future__ import annotations

from django import forms

from .models import Absence, Employee, Organization, Shift, ShiftTemplate, Team

TIME_FORMATS = ['%H:%M', '%H:%M:%S']


class OptionalDefaultsMixin:
    """Fields backed by a model column with a default are not required."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            model_field = self._meta.model._meta.get_field(name)
            if model_field.has_default():
                field.required = False


class OrganizationForm(forms.ModelForm):
    name = forms.CharField(min_length=2, max_length=100, error_messages={
        'required': "Nazwa organizacji jest wymagana",
        'min_length': "Nazwa musi mieć minimum 2 znaki",
        'max_length': "Nazwa może mieć maksymalnie 100 znaków",
    })
    description = forms.CharField(required=False, max_length=500, error_messages={
        'max_length': "Opis może mieć maksymalnie 500 znaków",
    })

    class Meta:
        model = Organization
        fields = ["name", "description"]


class TeamForm(forms.ModelForm):
    class Meta:
        model = Team
        fields = ["name", "description"]


class EmployeeForm(OptionalDefaultsMixin, forms.ModelForm):
    """
    Employee master data. Preferences and notification preferences are
    JSON documents handled by the view, not by this form.
    """
    first_name = forms.CharField(min_length=2, max_length=50, error_messages={
        'required': "Imię jest wymagane",
        'min_length': "Imię musi mieć minimum 2 znaki",
    })
    last_name = forms.CharField(min_length=2, max_length=50, error_messages={
        'required': "Nazwisko jest wymagane",
        'min_length': "Nazwisko musi mieć minimum 2 znaki",
    })
    email = forms.EmailField(required=False, error_messages={'invalid': "Nieprawidłowy format email"})
    custom_hours = forms.FloatField(required=False, min_value=1, max_value=12, error_messages={
        'min_value': "Minimalna liczba godzin to 1",
        'max_value': "Maksymalna liczba godzin to 12",
    })

    class Meta:
        model = Employee
        fields = [
            "first_name", "last_name", "email", "phone", "role", "position",
            "contract_type", "employment_type", "custom_hours", "contract_hours",
            "hours_per_week", "hourly_rate", "is_active",
        ]

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('employment_type') == 'custom' and not cleaned.get('custom_hours'):
            self.add_error('custom_hours', "Podaj liczbę godzin dla niestandardowego etatu")
        if not cleaned.get('email'):
            cleaned['email'] = None
        return cleaned


class ShiftTemplateForm(OptionalDefaultsMixin, forms.ModelForm):
    """Templates may cross midnight; the generator handles overnight shifts."""
    start_time = forms.TimeField(input_formats=TIME_FORMATS, error_messages={
        'invalid': "Nieprawidłowy format godziny",
    })
    end_time = forms.TimeField(input_formats=TIME_FORMATS, error_messages={
        'invalid': "Nieprawidłowy format godziny",
    })
    capacity = forms.IntegerField(required=False, min_value=1)

    class Meta:
        model = ShiftTemplate
        fields = ["name", "start_time", "end_time", "break_duration", "color", "is_default", "capacity"]

    def clean_capacity(self):
        return self.cleaned_data.get('capacity') or 1


class ShiftForm(OptionalDefaultsMixin, forms.ModelForm):
    start_time = forms.TimeField(input_formats=TIME_FORMATS, error_messages={
        'required': "Godzina rozpoczęcia jest wymagana",
        'invalid': "Nieprawidłowy format godziny",
    })
    end_time = forms.TimeField(input_formats=TIME_FORMATS, error_messages={
        'required': "Godzina zakończenia jest wymagana",
        'invalid': "Nieprawidłowy format godziny",
    })
    break_duration = forms.IntegerField(required=False, min_value=0, max_value=120, error_messages={
        'min_value': "Przerwa nie może być ujemna",
        'max_value': "Przerwa może trwać maksymalnie 2 godziny",
    })
    notes = forms.CharField(required=False, max_length=500, error_messages={
        'max_length': "Notatka może mieć maksymalnie 500 znaków",
    })

    class Meta:
        model = Shift
        fields = ["employee", "date", "start_time", "end_time", "break_duration",
                  "type", "status", "position", "notes", "is_overtime"]
        error_messages = {
            'employee': {'required': "Wybierz pracownika"},
            'date': {'required': "Data jest wymagana"},
        }

    def __init__(self, *args, team=None, **kwargs):
        super().__init__(*args, **kwargs)
        if team is not None:
            self.fields['employee'].queryset = team.employees.all()

    def clean_break_duration(self):
        return self.cleaned_data.get('break_duration') or 0

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('start_time'), cleaned.get('end_time')
        if start and end and end <= start:
            self.add_error('end_time', "Godzina zakończenia musi być późniejsza niż rozpoczęcia")
        return cleaned


class AbsenceForm(OptionalDefaultsMixin, forms.ModelForm):

    class Meta:
        model = Absence
        fields = ["employee", "type", "start_date", "end_date", "reason"]
        error_messages = {
            'employee': {'required': "Wybierz pracownika"},
        }

    def __init__(self, *args, team=None, **kwargs):
        super().__init__(*args, **kwargs)
        if team is not None:
            self.fields['employee'].queryset = team.employees.all()

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('start_date'), cleaned.get('end_date')
        if start and end and end < start:
            self.add_error('end_date', "Data zakończenia nie może być wcześniejsza niż data rozpoczęcia")
        return cleaned
