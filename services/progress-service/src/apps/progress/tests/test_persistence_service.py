# services/progress-service/src/apps/progress/tests/test_persistence_service.py
"""
Progress Writer Tests

Tests for the atomic commit of progress, history and unlocks.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import patch
from uuid import uuid4

from django.db import OperationalError

from apps.progress.achievements import get_definition
from apps.progress.models import AchievementUnlock, SkillHistoryEntry, StudentProgress
from apps.progress.services.achievement_service import build_unlock
from apps.progress.services.aggregation_service import ProgressAggregator
from apps.progress.services.exceptions import ProgressConflictError, TransientStorageError
from apps.progress.services.persistence_service import ProgressWriter

pytestmark = pytest.mark.django_db

NOW = datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)


class TestProgressWriter:
    """Tests for ProgressWriter.commit."""

    def setup_method(self):
        self.student_id = str(uuid4())

    def _draft(self, prior=None):
        snapshot = ProgressAggregator.recompute(self.student_id, prior, [], [], NOW)
        history = ProgressAggregator.build_history_entry(prior, snapshot, [], NOW)
        return snapshot, history

    def _unlock(self, definition_id):
        return build_unlock(get_definition(definition_id), self.student_id, NOW)

    def test_first_commit_creates_progress(self):
        snapshot, history = self._draft()
        snapshot.total_points = 10

        progress = ProgressWriter.commit(snapshot, history, [self._unlock('welcome_to_slopes')])

        assert progress.version == 1
        assert progress.total_points == 10
        assert SkillHistoryEntry.objects.filter(student_id=self.student_id).count() == 1
        assert AchievementUnlock.objects.filter(student_id=self.student_id).count() == 1

    def test_update_bumps_version(self):
        snapshot, history = self._draft()
        ProgressWriter.commit(snapshot, history, [])
        prior = StudentProgress.objects.get(student_id=self.student_id)

        snapshot, history = self._draft(prior)
        snapshot.completed_lessons = 2
        progress = ProgressWriter.commit(snapshot, history, [])

        assert progress.version == 2
        assert progress.completed_lessons == 2
        assert SkillHistoryEntry.objects.filter(student_id=self.student_id).count() == 2

    def test_stale_version_conflicts(self):
        snapshot, history = self._draft()
        ProgressWriter.commit(snapshot, history, [])
        prior = StudentProgress.objects.get(student_id=self.student_id)

        winner, winner_history = self._draft(prior)
        ProgressWriter.commit(winner, winner_history, [])

        loser, loser_history = self._draft(prior)
        with pytest.raises(ProgressConflictError):
            ProgressWriter.commit(loser, loser_history, [self._unlock('first_lesson')])

        assert StudentProgress.objects.get(student_id=self.student_id).version == 2
        assert SkillHistoryEntry.objects.filter(student_id=self.student_id).count() == 2
        assert not AchievementUnlock.objects.filter(student_id=self.student_id).exists()

    def test_existing_unversioned_row_is_updated(self):
        StudentProgress.objects.create(student_id=self.student_id)
        prior = StudentProgress.objects.get(student_id=self.student_id)

        snapshot, history = self._draft(prior)
        snapshot.completed_lessons = 1
        progress = ProgressWriter.commit(snapshot, history, [])

        assert progress.version == 1
        assert progress.completed_lessons == 1
        assert StudentProgress.objects.filter(student_id=self.student_id).count() == 1

    def test_concurrent_first_insert_conflicts(self):
        snapshot, history = self._draft()
        ProgressWriter.commit(snapshot, history, [])

        duplicate, duplicate_history = self._draft()
        with pytest.raises(ProgressConflictError):
            ProgressWriter.commit(duplicate, duplicate_history, [])

        assert StudentProgress.objects.filter(student_id=self.student_id).count() == 1

    def test_duplicate_unlock_rolls_back_everything(self):
        snapshot, history = self._draft()
        ProgressWriter.commit(snapshot, history, [self._unlock('welcome_to_slopes')])
        prior = StudentProgress.objects.get(student_id=self.student_id)

        snapshot, history = self._draft(prior)
        snapshot.completed_lessons = 5
        with pytest.raises(ProgressConflictError):
            ProgressWriter.commit(snapshot, history, [self._unlock('welcome_to_slopes')])

        progress = StudentProgress.objects.get(student_id=self.student_id)
        assert progress.version == 1
        assert progress.completed_lessons == 0
        assert SkillHistoryEntry.objects.filter(student_id=self.student_id).count() == 1
        assert AchievementUnlock.objects.filter(student_id=self.student_id).count() == 1

    def test_failure_mid_commit_leaves_nothing(self):
        snapshot, history = self._draft()

        with patch.object(
            AchievementUnlock.objects, 'bulk_create', side_effect=OperationalError('connection lost')
        ):
            with pytest.raises(TransientStorageError):
                ProgressWriter.commit(snapshot, history, [self._unlock('welcome_to_slopes')])

        assert not StudentProgress.objects.filter(student_id=self.student_id).exists()
        assert not SkillHistoryEntry.objects.filter(student_id=self.student_id).exists()
        assert not AchievementUnlock.objects.filter(student_id=self.student_id).exists()
