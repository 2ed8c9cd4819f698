# services/progress-service/src/apps/progress/services/evaluation_service.py
"""
Evaluation Service

Single entry point run whenever a student's activity changes: recompute
progress, evaluate achievements and commit both together.
"""

import uuid
import logging
from enum import Enum
from typing import List, Tuple, Optional, Set

from django.conf import settings
from django.db import transaction, OperationalError, InterfaceError
from django.utils import timezone

from ..achievements import ACHIEVEMENT_CATALOG
from ..events import publish_achievement_unlocked, publish_progress_updated
from ..models import (
    AchievementUnlock,
    Lesson,
    LessonFeedback,
    LessonStudent,
    StudentProgress,
)
from .achievement_service import AchievementRuleEngine, AchievementService
from .aggregation_service import CompletedLessonFact, ProgressAggregator
from .exceptions import (
    EvaluationConflictError,
    ProgressConflictError,
    ProgressServiceError,
    StorageUnavailableError,
    StudentNotFoundError,
    TransientStorageError,
)
from .locks import student_lock
from .persistence_service import ProgressWriter
from .streak_service import compute_streak
from .student_directory import StudentDirectory, StudentProfile

logger = logging.getLogger(__name__)


class EvaluationState(str, Enum):
    IDLE = 'idle'
    AGGREGATING = 'aggregating'
    EVALUATING = 'evaluating'
    COMMITTING = 'committing'
    FAILED = 'failed'


class EvaluationService:
    """
    Orchestrates one evaluation run for a student.

    Runs under the per-student lock. A lost version race re-reads and
    recomputes from fresh state; transient storage failures retry the
    whole cycle. Both are bounded by settings.
    """

    def __init__(self, directory: StudentDirectory = None, catalog=ACHIEVEMENT_CATALOG):
        self.directory = directory or StudentDirectory()
        self.catalog = catalog
        self.state = EvaluationState.IDLE

    def on_student_activity(self, student_id) -> List[AchievementUnlock]:
        """
        Re-evaluate a student after a lesson completion or feedback.

        Args:
            student_id: Student UUID

        Returns:
            Newly unlocked achievements, empty when nothing changed

        Raises:
            StudentNotFoundError: Invalid or unknown student
            MalformedFeedbackError: A feedback record cannot be used
            EvaluationConflictError: Concurrent runs kept colliding
            StorageUnavailableError: Storage kept failing
        """
        student_id = self._validate_student_id(student_id)

        with student_lock(student_id):
            profile = self.directory.get_profile(student_id)
            return self._run_with_retries(student_id, profile)

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _run_with_retries(self, student_id: str, profile: StudentProfile) -> List[AchievementUnlock]:
        conflicts = 0
        storage_failures = 0

        while True:
            try:
                return self._run_cycle(student_id, profile)

            except ProgressConflictError as e:
                conflicts += 1
                if conflicts > settings.PROGRESS_CONFLICT_RETRIES:
                    self._transition(student_id, EvaluationState.FAILED)
                    raise EvaluationConflictError(student_id) from e
                logger.warning(
                    f"Progress conflict for student {student_id}, recomputing (attempt {conflicts})",
                    extra={'student_id': student_id}
                )

            except TransientStorageError as e:
                storage_failures += 1
                if storage_failures > settings.PROGRESS_STORAGE_RETRIES:
                    self._transition(student_id, EvaluationState.FAILED)
                    raise StorageUnavailableError(student_id) from e
                logger.warning(
                    f"Storage failure for student {student_id}, retrying (attempt {storage_failures})",
                    extra={'student_id': student_id}
                )

            except ProgressServiceError:
                self._transition(student_id, EvaluationState.FAILED)
                raise

            except Exception:
                self._transition(student_id, EvaluationState.FAILED)
                logger.exception(
                    f"Unexpected error evaluating student {student_id}",
                    extra={'student_id': student_id}
                )
                raise

    def _run_cycle(self, student_id: str, profile: StudentProfile) -> List[AchievementUnlock]:
        self._transition(student_id, EvaluationState.AGGREGATING)
        now = timezone.now()

        prior, lessons, feedback, unlocked = self._load(student_id)

        snapshot = ProgressAggregator.recompute(student_id, prior, lessons, feedback, now)
        snapshot.streak_days = compute_streak(fact.date for fact in lessons)
        history_entry = ProgressAggregator.build_history_entry(prior, snapshot, feedback, now)

        self._transition(student_id, EvaluationState.EVALUATING)
        new_unlocks = AchievementRuleEngine(profile).evaluate(
            snapshot, feedback, unlocked, self.catalog, now
        )
        snapshot.total_points += sum(u.points for u in new_unlocks)

        self._transition(student_id, EvaluationState.COMMITTING)
        progress = ProgressWriter.commit(snapshot, history_entry, new_unlocks)

        transaction.on_commit(lambda: self._publish(progress, new_unlocks))
        self._transition(student_id, EvaluationState.IDLE)

        if new_unlocks:
            logger.info(
                f"Student {student_id} unlocked {len(new_unlocks)} achievement(s)",
                extra={
                    'student_id': student_id,
                    'achievements': [u.definition_id for u in new_unlocks],
                }
            )
        return new_unlocks

    def _load(self, student_id: str) -> Tuple[
        Optional[StudentProgress], List[CompletedLessonFact], List[LessonFeedback], Set[str]
    ]:
        try:
            prior = StudentProgress.objects.filter(student_id=student_id).first()
            lessons = [
                CompletedLessonFact(
                    student_id=student_id,
                    date=attendance.lesson.date,
                    lesson_id=str(attendance.lesson_id),
                )
                for attendance in LessonStudent.objects.filter(
                    student_id=student_id,
                    lesson__status=Lesson.Status.COMPLETED
                ).select_related('lesson')
            ]
            feedback = list(LessonFeedback.objects.filter(student_id=student_id))
            unlocked = AchievementService.get_unlocked_keys(student_id)
        except (OperationalError, InterfaceError) as e:
            raise TransientStorageError(student_id, message=str(e)) from e

        return prior, lessons, feedback, unlocked

    def _publish(self, progress: StudentProgress, new_unlocks: List[AchievementUnlock]) -> None:
        for unlock in new_unlocks:
            publish_achievement_unlocked(
                student_id=progress.student_id,
                definition_id=unlock.definition_id,
                definition_name=unlock.definition_name,
                category=unlock.category,
                points=unlock.points,
            )
        publish_progress_updated(
            student_id=progress.student_id,
            overall_level=progress.overall_level,
            completed_lessons=progress.completed_lessons,
            streak_days=progress.streak_days,
            total_points=progress.total_points,
            version=progress.version,
        )

    def _transition(self, student_id: str, state: EvaluationState) -> None:
        logger.debug(
            f"Evaluation of student {student_id}: {self.state.value} -> {state.value}",
            extra={'student_id': student_id}
        )
        self.state = state

    @staticmethod
    def _validate_student_id(student_id) -> str:
        try:
            return str(uuid.UUID(str(student_id)))
        except (TypeError, ValueError, AttributeError):
            raise StudentNotFoundError(student_id, message=f"Invalid student id: {student_id!r}")


def schedule_evaluation(student_id) -> None:
    """
    Queue an evaluation once the current transaction commits.

    Nothing is queued if the transaction rolls back. Queueing failures
    are logged and never reach the caller.
    """
    from ..tasks import evaluate_student_activity

    def enqueue():
        try:
            evaluate_student_activity.delay(str(student_id))
        except Exception as e:
            logger.error(
                f"Failed to queue progress evaluation for student {student_id}: {e}",
                extra={'student_id': str(student_id)}
            )

    transaction.on_commit(enqueue)
