from django.contrib import admin

from .models import Absence, Employee, HolidayCache, Organization, Schedule, Shift, ShiftTemplate, Team


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'subscription_tier', 'max_teams', 'max_employees_per_team', 'is_active')
    list_filter = ('subscription_tier', 'is_active')
    search_fields = ('name', 'slug', 'description')
    prepopulated_fields = {'slug': ('name',)}
    fieldsets = (
        ('Podstawowe informacje', {
            'fields': ('name', 'slug', 'description', 'is_active')
        }),
        ('Plan', {
            'fields': ('subscription_tier', 'max_teams', 'max_employees_per_team'),
            'description': 'Limity zespołów i pracowników wynikające z planu.'
        }),
    )


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'created_at')
    list_filter = ('organization',)
    search_fields = ('name',)


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'team', 'role', 'employment_type', 'contract_hours', 'is_active')
    list_filter = ('team', 'role', 'employment_type', 'contract_type', 'is_active')
    search_fields = ('first_name', 'last_name', 'email', 'position')


@admin.register(ShiftTemplate)
class ShiftTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'team', 'start_time', 'end_time', 'break_duration', 'capacity', 'is_default')
    list_filter = ('team', 'is_default')


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ('date', 'employee', 'start_time', 'end_time', 'type', 'status', 'is_published')
    list_filter = ('team', 'type', 'status', 'is_published')
    date_hierarchy = 'date'
    search_fields = ('employee__first_name', 'employee__last_name', 'notes')


@admin.register(Absence)
class AbsenceAdmin(admin.ModelAdmin):
    list_display = ('employee', 'type', 'start_date', 'end_date', 'status')
    list_filter = ('team', 'type', 'status')
    date_hierarchy = 'start_date'
    actions = ['approve_selected', 'reject_selected']

    @admin.action(description='Zatwierdź wybrane nieobecności')
    def approve_selected(self, request, queryset):
        from grafik_app.services.absences import approve_absence
        for absence in queryset:
            approve_absence(absence)

    @admin.action(description='Odrzuć wybrane nieobecności')
    def reject_selected(self, request, queryset):
        from grafik_app.services.absences import reject_absence
        for absence in queryset:
            reject_absence(absence)


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ('team', 'year', 'month', 'is_published', 'published_at')
    list_filter = ('team', 'is_published', 'year')


@admin.register(HolidayCache)
class HolidayCacheAdmin(admin.ModelAdmin):
    list_display = ('year', 'country_code', 'fetched_at')
    readonly_fields = ('fetched_at',)
