from django.apps import AppConfig


class TeamsConfig(AppConfig):
    """队伍、成员与付款流水"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.teams"
    label = "teams"
    verbose_name = "Teams"
