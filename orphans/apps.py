from django.apps import AppConfig


class OrphansConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orphans"
