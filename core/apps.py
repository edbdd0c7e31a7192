from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Rental Marketplace'

    def ready(self):
        # Register notification signal receivers
        from . import signals  # noqa: F401
