# services/progress-service/src/apps/progress/api/serializers/__init__.py
"""
Progress Service API Serializers
"""

from .progress_serializers import StudentProgressSerializer, SkillHistoryEntrySerializer
from .achievement_serializers import (
    AchievementUnlockSerializer,
    AchievementDefinitionSerializer,
    AchievementStatsSerializer,
    AchievementCatalogSerializer,
)
from .lesson_serializers import LessonSerializer, LessonFeedbackSerializer, FeedbackSubmitSerializer

__all__ = [
    'StudentProgressSerializer',
    'SkillHistoryEntrySerializer',
    'AchievementUnlockSerializer',
    'AchievementDefinitionSerializer',
    'AchievementStatsSerializer',
    'AchievementCatalogSerializer',
    'LessonSerializer',
    'LessonFeedbackSerializer',
    'FeedbackSubmitSerializer',
]
