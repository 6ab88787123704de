from django.apps import AppConfig


class CountdownConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.countdown'
    verbose_name = 'Countdown'
