# services/progress-service/src/apps/progress/services/__init__.py
"""
Progress Service Business Logic Layer

Service classes for progress evaluation and its triggers.
"""

from .exceptions import (
    ProgressServiceError,
    StudentNotFoundError,
    MalformedFeedbackError,
    LessonNotFoundError,
    LessonStateError,
    RetryableEvaluationError,
    EvaluationConflictError,
    StorageUnavailableError,
    ProgressConflictError,
    TransientStorageError,
    CriterionEvaluationError,
)
from .streak_service import compute_streak
from .aggregation_service import (
    CompletedLessonFact,
    ProgressAggregator,
    ProgressSnapshot,
    SkillHistoryDraft,
    merge_progress_percent,
    merge_skills_learned,
)
from .achievement_service import AchievementRuleEngine, AchievementService
from .persistence_service import ProgressWriter
from .evaluation_service import EvaluationService, EvaluationState, schedule_evaluation
from .lesson_service import LessonService
from .feedback_service import FeedbackService

__all__ = [
    # Exceptions
    'ProgressServiceError',
    'StudentNotFoundError',
    'MalformedFeedbackError',
    'LessonNotFoundError',
    'LessonStateError',
    'RetryableEvaluationError',
    'EvaluationConflictError',
    'StorageUnavailableError',
    'ProgressConflictError',
    'TransientStorageError',
    'CriterionEvaluationError',

    # Engine
    'compute_streak',
    'CompletedLessonFact',
    'ProgressAggregator',
    'ProgressSnapshot',
    'SkillHistoryDraft',
    'merge_progress_percent',
    'merge_skills_learned',
    'AchievementRuleEngine',
    'AchievementService',
    'ProgressWriter',
    'EvaluationService',
    'EvaluationState',
    'schedule_evaluation',

    # Triggers
    'LessonService',
    'FeedbackService',
]
