from django.apps import AppConfig


class StudyStatsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "studystats"
    verbose_name = "Study stats"
