# services/progress-service/src/apps/progress/apps.py
"""
Progress Application Configuration
"""

from django.apps import AppConfig


class ProgressConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.progress'
    verbose_name = 'Student Progress'

    def ready(self):
        from apps.progress.achievements import validate_catalog

        validate_catalog()
