# services/progress-service/src/apps/progress/services/lesson_service.py
"""
Lesson Service

Lesson completion workflow. Completing a lesson queues a progress
evaluation for every attending student.
"""

import uuid
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..models import Lesson
from .evaluation_service import schedule_evaluation
from .exceptions import LessonNotFoundError, LessonStateError

logger = logging.getLogger(__name__)


class LessonService:
    """
    Service class for lesson status transitions.
    """

    COMPLETABLE_STATUSES = (Lesson.Status.SCHEDULED, Lesson.Status.IN_PROGRESS)

    @staticmethod
    def complete_lesson(lesson_id: uuid.UUID) -> Lesson:
        """
        Mark a lesson completed.

        Args:
            lesson_id: Lesson UUID

        Returns:
            Completed Lesson

        Raises:
            LessonNotFoundError: No such lesson
            LessonStateError: Lesson is not scheduled or in progress
        """
        with transaction.atomic():
            try:
                lesson = Lesson.objects.select_for_update().get(id=lesson_id)
            except (Lesson.DoesNotExist, ValidationError):
                raise LessonNotFoundError(lesson_id)

            if lesson.status not in LessonService.COMPLETABLE_STATUSES:
                raise LessonStateError(lesson.status, Lesson.Status.COMPLETED)

            lesson.status = Lesson.Status.COMPLETED
            lesson.completed_at = timezone.now()
            lesson.save(update_fields=['status', 'completed_at', 'updated_at'])

            student_ids = lesson.student_ids
            for student_id in student_ids:
                schedule_evaluation(student_id)

        logger.info(
            f"Completed lesson {lesson.id} for {len(student_ids)} student(s)",
            extra={'lesson_id': str(lesson.id)}
        )
        return lesson
