from django.apps import AppConfig


class GrafikAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'grafik_app'
    verbose_name = 'Grafik'
