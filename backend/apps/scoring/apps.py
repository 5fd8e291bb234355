from django.apps import AppConfig


class ScoringConfig(AppConfig):
    """评分、排名与成绩发布"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.scoring"
    label = "scoring"
    verbose_name = "Scoring"
