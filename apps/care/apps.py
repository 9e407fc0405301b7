from django.apps import AppConfig


class CareConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.care'
    verbose_name = 'Cuidado pastoral'
