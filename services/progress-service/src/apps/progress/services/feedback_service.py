# services/progress-service/src/apps/progress/services/feedback_service.py
"""
Feedback Service

Stores instructor feedback and queues a progress evaluation for the
student once it is committed.
"""

import uuid
import logging
from typing import Dict, Any, List

from django.db import transaction

from ..models import Lesson, LessonFeedback, SkillLevel, Sport
from .evaluation_service import schedule_evaluation
from .exceptions import LessonNotFoundError, MalformedFeedbackError

logger = logging.getLogger(__name__)


class FeedbackService:
    """
    Service class for instructor feedback.
    """

    RATING_FIELDS = ('technique', 'control', 'confidence', 'safety', 'overall')

    @staticmethod
    def submit_feedback(data: Dict[str, Any]) -> LessonFeedback:
        """
        Store a feedback record.

        Args:
            data: Feedback fields; lesson_id, student_id, instructor_id,
                the five ratings and current_level are required

        Returns:
            Created LessonFeedback

        Raises:
            LessonNotFoundError: No such lesson
            MalformedFeedbackError: Missing rating or unknown level
        """
        FeedbackService._validate(data)

        with transaction.atomic():
            try:
                lesson = Lesson.objects.get(id=data['lesson_id'])
            except Lesson.DoesNotExist:
                raise LessonNotFoundError(data['lesson_id'])

            feedback = LessonFeedback.objects.create(
                lesson=lesson,
                student_id=data['student_id'],
                instructor_id=data['instructor_id'],
                date=data.get('date') or lesson.date,
                sport=data.get('sport') or Sport.SKIING,
                technique=data['technique'],
                control=data['control'],
                confidence=data['confidence'],
                safety=data['safety'],
                overall=data['overall'],
                current_level=data['current_level'],
                areas_of_focus=_clean_list(data.get('areas_of_focus')),
                next_steps=_clean_list(data.get('next_steps')),
                strengths=_clean_list(data.get('strengths')),
                areas_for_improvement=_clean_list(data.get('areas_for_improvement')),
                instructor_notes=data.get('instructor_notes') or '',
                skills_improved=_clean_list(data.get('skills_improved')),
                new_skills_learned=_clean_list(data.get('new_skills_learned')),
                level_up=bool(data.get('level_up', False)),
                new_level=data.get('new_level') or None,
            )

            schedule_evaluation(feedback.student_id)

        logger.info(
            f"Stored feedback {feedback.id} for student {feedback.student_id}",
            extra={'lesson_id': str(lesson.id), 'student_id': str(feedback.student_id)}
        )
        return feedback

    @staticmethod
    def _validate(data: Dict[str, Any]) -> None:
        for field in FeedbackService.RATING_FIELDS:
            if data.get(field) is None:
                raise MalformedFeedbackError(f"Missing rating: {field}", field=field)

        for field in ('current_level', 'new_level'):
            value = data.get(field)
            if value and value not in SkillLevel.values:
                raise MalformedFeedbackError(f"Unknown skill level: {value!r}", field=field)

        if not data.get('current_level'):
            raise MalformedFeedbackError("Missing current level", field='current_level')


def _clean_list(values) -> List[str]:
    return [v for v in (values or []) if v]
