from django.apps import AppConfig


class DiscipleshipConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.discipleship'
    verbose_name = 'Discipulado'
