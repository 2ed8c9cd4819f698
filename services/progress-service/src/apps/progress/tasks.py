# services/progress-service/src/apps/progress/tasks.py
"""
Progress Celery Tasks

Asynchronous progress evaluation queued after lesson completion and
feedback submission.
"""

import logging
from celery import shared_task

from django.conf import settings

from .services.evaluation_service import EvaluationService
from .services.exceptions import ProgressServiceError, RetryableEvaluationError

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name='progress.evaluate_student_activity',
    max_retries=3,
)
def evaluate_student_activity(self, student_id: str):
    """
    Re-evaluate progress and achievements for a student.

    Conflicts and storage outages are retried; input errors are logged
    and dropped.

    Args:
        student_id: Student UUID string

    Returns:
        Names of newly unlocked achievements
    """
    try:
        unlocks = EvaluationService().on_student_activity(student_id)

    except RetryableEvaluationError as e:
        logger.warning(
            f"Progress evaluation for student {student_id} will be retried: {e.message}",
            extra={'student_id': student_id, 'code': e.code, 'retries': self.request.retries}
        )
        raise self.retry(exc=e, countdown=settings.PROGRESS_TASK_RETRY_COUNTDOWN)

    except ProgressServiceError as e:
        logger.error(
            f"Progress evaluation for student {student_id} rejected: {e.message}",
            extra={'student_id': student_id, 'code': e.code, 'details': e.details}
        )
        return []

    return [unlock.definition_name for unlock in unlocks]
