# services/progress-service/src/apps/progress/services/persistence_service.py
"""
Persistence Service

Commits a progress snapshot, its history entry and new achievement
unlocks in one transaction.
"""

import logging
from decimal import Decimal
from typing import List

from django.db import transaction, IntegrityError, OperationalError, InterfaceError
from django.db.models import F

from ..models import StudentProgress, SkillHistoryEntry, AchievementUnlock
from .aggregation_service import ProgressSnapshot, SkillHistoryDraft
from .exceptions import ProgressConflictError, TransientStorageError

logger = logging.getLogger(__name__)


class ProgressWriter:
    """
    All-or-nothing writer for the progress aggregate.

    The progress row is written conditionally on the version the
    snapshot was computed from. Losing that race, or colliding on a
    unique unlock, rolls everything back and raises
    ProgressConflictError.
    """

    @staticmethod
    def commit(
        snapshot: ProgressSnapshot,
        history_entry: SkillHistoryDraft,
        new_unlocks: List[AchievementUnlock]
    ) -> StudentProgress:
        """
        Write snapshot, history entry and unlocks atomically.

        Args:
            snapshot: Recomputed progress state
            history_entry: History draft for this recompute
            new_unlocks: Unsaved unlock instances

        Returns:
            The committed StudentProgress row

        Raises:
            ProgressConflictError: Another writer committed first
            TransientStorageError: The database failed the write
        """
        student_id = snapshot.student_id

        try:
            with transaction.atomic():
                progress = ProgressWriter._write_progress(snapshot)

                SkillHistoryEntry.objects.create(
                    student_id=student_id,
                    sport=history_entry.sport,
                    level_before=history_entry.level_before,
                    level_after=history_entry.level_after,
                    progress_percent=Decimal(str(round(history_entry.progress_percent, 2))),
                    skills_learned=list(history_entry.skills_learned),
                    recorded_at=history_entry.recorded_at or snapshot.last_updated,
                )

                if new_unlocks:
                    AchievementUnlock.objects.bulk_create(new_unlocks)

        except IntegrityError as e:
            logger.warning(
                f"Integrity conflict committing progress for student {student_id}: {e}",
                extra={'student_id': student_id}
            )
            raise ProgressConflictError(student_id, snapshot.expected_version) from e
        except (OperationalError, InterfaceError) as e:
            logger.warning(
                f"Storage failure committing progress for student {student_id}: {e}",
                extra={'student_id': student_id}
            )
            raise TransientStorageError(student_id, message=str(e)) from e

        logger.info(
            f"Committed progress for student {student_id}",
            extra={
                'student_id': student_id,
                'version': progress.version,
                'new_unlocks': len(new_unlocks),
            }
        )
        return progress

    @staticmethod
    def _write_progress(snapshot: ProgressSnapshot) -> StudentProgress:
        fields = {
            'overall_level': snapshot.overall_level,
            'total_lessons': snapshot.total_lessons,
            'completed_lessons': snapshot.completed_lessons,
            'skill_state': snapshot.skill_state,
            'streak_days': snapshot.streak_days,
            'total_points': snapshot.total_points,
            'last_activity': snapshot.last_activity,
            'last_updated': snapshot.last_updated,
        }

        if snapshot.expected_version is None:
            return StudentProgress.objects.create(
                student_id=snapshot.student_id,
                version=1,
                **fields
            )

        updated = StudentProgress.objects.filter(
            student_id=snapshot.student_id,
            version=snapshot.expected_version
        ).update(version=F('version') + 1, **fields)

        if updated == 0:
            raise ProgressConflictError(snapshot.student_id, snapshot.expected_version)

        return StudentProgress.objects.get(student_id=snapshot.student_id)
