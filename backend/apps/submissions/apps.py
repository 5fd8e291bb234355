from django.apps import AppConfig


class SubmissionsConfig(AppConfig):
    """第一/第二阶段作品提交"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.submissions"
    label = "submissions"
    verbose_name = "Submissions"
