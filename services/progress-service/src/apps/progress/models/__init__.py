# services/progress-service/src/apps/progress/models/__init__.py
"""
Progress Service Models

Database models for student progression:
- Skill levels and sports
- Student progress aggregate and skill history
- Lessons, attendance and instructor feedback
- Achievement unlocks
"""

from .levels import SkillLevel, Sport
from .progress import StudentProgress, SkillHistoryEntry
from .lesson import Lesson, LessonStudent
from .feedback import LessonFeedback
from .achievement import AchievementCategory, AchievementRarity, AchievementUnlock

__all__ = [
    # Enumerations
    'SkillLevel',
    'Sport',
    'AchievementCategory',
    'AchievementRarity',

    # Progress
    'StudentProgress',
    'SkillHistoryEntry',

    # Source facts
    'Lesson',
    'LessonStudent',
    'LessonFeedback',

    # Achievements
    'AchievementUnlock',
]
