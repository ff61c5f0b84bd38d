from django.apps import AppConfig


class HootsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hoots"
