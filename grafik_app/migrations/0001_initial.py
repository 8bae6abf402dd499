from django.db import migrations, models
import django.db.models.deletion
import grafik_app.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='HolidayCache',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.IntegerField()),
                ('country_code', models.CharField(default='PL', max_length=2)),
                ('holidays', models.JSONField(default=list)),
                ('fetched_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'unique_together': {('year', 'country_code')},
            },
        ),
        migrations.CreateModel(
            name='Organization',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('slug', models.SlugField(max_length=60, unique=True)),
                ('description', models.TextField(blank=True)),
                ('subscription_tier', models.CharField(
                    choices=[('free', 'Free'), ('pro', 'Pro'), ('enterprise', 'Enterprise')],
                    default='free', max_length=20)),
                ('max_teams', models.PositiveIntegerField(default=1)),
                ('max_employees_per_team', models.PositiveIntegerField(default=10)),
                ('settings', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('settings', models.JSONField(blank=True, default=grafik_app.models.default_team_settings)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    related_name='teams', to='grafik_app.organization')),
            ],
        ),
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=50)),
                ('last_name', models.CharField(max_length=50)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('color', models.CharField(default='#3b82f6', max_length=7)),
                ('role', models.CharField(
                    choices=[('manager', 'Kierownik'), ('employee', 'Pracownik'),
                             ('part-time', 'Niepełny etat'), ('trainee', 'Stażysta')],
                    default='employee', max_length=20)),
                ('position', models.CharField(blank=True, max_length=100)),
                ('contract_type', models.CharField(
                    choices=[('full_time', 'Umowa o pracę (pełny etat)'),
                             ('part_time', 'Umowa o pracę (część etatu)'),
                             ('contract', 'Umowa cywilnoprawna'), ('intern', 'Staż')],
                    default='full_time', max_length=20)),
                ('employment_type', models.CharField(
                    choices=[('full', 'Pełny etat'), ('half', '½ etatu'), ('custom', 'Niestandardowy')],
                    default='full', max_length=10)),
                ('custom_hours', models.FloatField(
                    blank=True, help_text='Daily hours for the custom employment type', null=True)),
                ('contract_hours', models.FloatField(default=160)),
                ('hours_per_week', models.FloatField(default=40)),
                ('hourly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('preferences', models.JSONField(blank=True, default=dict)),
                ('notification_preferences', models.JSONField(
                    blank=True, default=grafik_app.models.default_notification_preferences)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='employees', to='grafik_app.team')),
            ],
            options={
                'ordering': ['first_name', 'last_name'],
            },
        ),
        migrations.CreateModel(
            name='ShiftTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('break_duration', models.PositiveIntegerField(default=0, help_text='Minutes')),
                ('color', models.CharField(default='#3b82f6', max_length=7)),
                ('is_default', models.BooleanField(default=False)),
                ('capacity', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='shift_templates',
                    to='grafik_app.team')),
            ],
            options={
                'ordering': ['start_time'],
            },
        ),
        migrations.CreateModel(
            name='Shift',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('break_duration', models.PositiveIntegerField(default=0)),
                ('type', models.CharField(
                    choices=[('regular', 'Zwykła'), ('overtime', 'Nadgodziny'),
                             ('training', 'Szkolenie'), ('on_call', 'Dyżur')],
                    default='regular', max_length=20)),
                ('status', models.CharField(
                    choices=[('scheduled', 'Zaplanowana'), ('confirmed', 'Potwierdzona'),
                             ('in-progress', 'W trakcie'), ('completed', 'Zakończona'),
                             ('cancelled', 'Anulowana')],
                    default='scheduled', max_length=20)),
                ('position', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('is_overtime', models.BooleanField(default=False)),
                ('is_published', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.CharField(blank=True, default='', max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='shifts', to='grafik_app.employee')),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='shifts', to='grafik_app.team')),
            ],
            options={
                'ordering': ['date', 'start_time'],
                'indexes': [
                    models.Index(fields=['team', 'date'], name='grafik_shift_team_date_idx'),
                    models.Index(fields=['employee', 'date'], name='grafik_shift_emp_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Absence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(
                    choices=[('vacation', 'Urlop wypoczynkowy'), ('vacation_on_demand', 'Urlop na żądanie'),
                             ('sick_leave', 'L4 - Zwolnienie lekarskie'), ('uz', 'UZ - Urlop okolicznościowy'),
                             ('maternity', 'Urlop macierzyński'), ('paternity', 'Urlop ojcowski'),
                             ('childcare', 'Urlop wychowawczy'), ('unpaid', 'Urlop bezpłatny'),
                             ('training', 'Szkolenie'), ('delegation', 'Delegacja'),
                             ('blood_donation', 'Honorowe krwiodawstwo'), ('military', 'Ćwiczenia wojskowe'),
                             ('other', 'Inne')],
                    default='vacation', max_length=30)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('status', models.CharField(
                    choices=[('pending', 'Oczekuje'), ('approved', 'Zatwierdzona'),
                             ('rejected', 'Odrzucona'), ('cancelled', 'Anulowana')],
                    default='pending', max_length=20)),
                ('reason', models.TextField(blank=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='absences', to='grafik_app.employee')),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='absences', to='grafik_app.team')),
            ],
            options={
                'ordering': ['-start_date'],
            },
        ),
        migrations.CreateModel(
            name='Schedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.IntegerField()),
                ('month', models.IntegerField()),
                ('is_published', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='schedules', to='grafik_app.team')),
            ],
            options={
                'unique_together': {('team', 'year', 'month')},
            },
        ),
    ]
