from django.apps import AppConfig


class GenerationStatusConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'generation_status'

    def ready(self):
        # registers the drf-spectacular extension for the secret header
        from . import auth  # noqa: F401
