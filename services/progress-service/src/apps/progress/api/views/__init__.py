# services/progress-service/src/apps/progress/api/views/__init__.py
"""
Progress Service API Views

ViewSets for REST API endpoints.
"""

from .progress_views import StudentProgressViewSet
from .lesson_views import LessonViewSet, FeedbackViewSet

__all__ = [
    'StudentProgressViewSet',
    'LessonViewSet',
    'FeedbackViewSet',
]
