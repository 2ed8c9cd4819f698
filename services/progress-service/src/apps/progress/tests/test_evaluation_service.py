# services/progress-service/src/apps/progress/tests/test_evaluation_service.py
"""
Evaluation Service Tests

End-to-end tests for EvaluationService.on_student_activity.
"""

import pytest
from datetime import date, timedelta
from unittest.mock import patch

import httpx
from django.core.cache import cache

from apps.progress.models import AchievementUnlock, SkillHistoryEntry, StudentProgress
from apps.progress.services.evaluation_service import EvaluationService, EvaluationState
from apps.progress.services.exceptions import (
    EvaluationConflictError,
    MalformedFeedbackError,
    ProgressConflictError,
    StorageUnavailableError,
    StudentNotFoundError,
    TransientStorageError,
)
from apps.progress.services.locks import lock_key
from apps.progress.services.persistence_service import ProgressWriter
from shared.common.clients import ServiceNotFoundError

pytestmark = pytest.mark.django_db


def names(unlocks):
    return [u.definition_name for u in unlocks]


class TestOnStudentActivity:
    """Tests for the evaluation entry point."""

    def test_first_lesson_scenario(self, student_id, make_lesson, make_feedback):
        lesson = make_lesson([student_id])
        make_feedback(student_id, lesson, overall=5, current_level='developing_turns')

        unlocks = EvaluationService().on_student_activity(student_id)

        assert 'First Steps' in names(unlocks)
        progress = StudentProgress.objects.get(student_id=student_id)
        assert progress.completed_lessons == 1
        assert progress.overall_level == 'developing_turns'
        assert progress.skill_state['skiing']['progress_percent'] == 100.0
        assert progress.streak_days == 1
        assert progress.total_points == sum(u.points for u in unlocks)
        assert progress.version == 1

    def test_progress_row_created_outside_engine(self, student_id, make_lesson):
        StudentProgress.objects.create(student_id=student_id)
        make_lesson([student_id])

        unlocks = EvaluationService().on_student_activity(student_id)

        assert 'First Steps' in names(unlocks)
        progress = StudentProgress.objects.get(student_id=student_id)
        assert progress.version == 1
        assert progress.completed_lessons == 1

    def test_second_run_without_new_data_unlocks_nothing(self, student_id, make_lesson, make_feedback):
        lesson = make_lesson([student_id])
        make_feedback(student_id, lesson, overall=5)
        service = EvaluationService()

        first = service.on_student_activity(student_id)
        second = service.on_student_activity(student_id)

        assert first
        assert second == []
        assert AchievementUnlock.objects.filter(student_id=student_id).count() == len(first)
        progress = StudentProgress.objects.get(student_id=student_id)
        assert progress.total_points == sum(u.points for u in first)

    def test_no_regression_of_overall_level(self, student_id, make_lesson, make_feedback):
        lessons = [make_lesson([student_id], lesson_date=date(2024, 1, 1) + timedelta(days=i * 2)) for i in range(10)]
        make_feedback(student_id, lessons[0], current_level='confident_turns')
        EvaluationService().on_student_activity(student_id)

        make_feedback(student_id, lessons[-1], current_level='developing_turns')
        EvaluationService().on_student_activity(student_id)

        progress = StudentProgress.objects.get(student_id=student_id)
        assert progress.overall_level == 'confident_turns'
        assert progress.completed_lessons == 10

    def test_streak_boundary(self, student_id, make_lesson):
        day1 = date(2024, 1, 1)
        for offset in (0, 1, 3):
            make_lesson([student_id], lesson_date=day1 + timedelta(days=offset))

        EvaluationService().on_student_activity(student_id)

        assert StudentProgress.objects.get(student_id=student_id).streak_days == 2

    def test_only_completed_lessons_count(self, student_id, make_lesson):
        make_lesson([student_id])
        make_lesson([student_id], status='scheduled')
        make_lesson([student_id], status='cancelled')

        EvaluationService().on_student_activity(student_id)

        assert StudentProgress.objects.get(student_id=student_id).completed_lessons == 1

    def test_history_entry_per_run(self, student_id, make_lesson, make_feedback):
        lesson = make_lesson([student_id])
        make_feedback(student_id, lesson, sport='snowboarding', current_level='linking_turns')
        service = EvaluationService()

        service.on_student_activity(student_id)
        service.on_student_activity(student_id)

        entries = SkillHistoryEntry.objects.filter(student_id=student_id)
        assert entries.count() == 2
        latest = entries.first()
        assert latest.sport == 'snowboarding'
        assert latest.level_after == 2

    def test_state_returns_to_idle(self, student_id, make_lesson):
        make_lesson([student_id])
        service = EvaluationService()

        service.on_student_activity(student_id)

        assert service.state == EvaluationState.IDLE

    def test_lock_released_after_run(self, student_id, make_lesson):
        make_lesson([student_id])

        EvaluationService().on_student_activity(student_id)

        assert cache.get(lock_key(student_id)) is None


class TestInputErrors:
    """Tests for rejected evaluations."""

    def test_invalid_student_id(self):
        with pytest.raises(StudentNotFoundError):
            EvaluationService().on_student_activity('not-a-uuid')

    def test_unknown_student(self, student_id, user_service):
        user_service.get_user.side_effect = ServiceNotFoundError('user-service', f'/api/v1/users/{student_id}/')

        with pytest.raises(StudentNotFoundError):
            EvaluationService().on_student_activity(student_id)

        assert not StudentProgress.objects.filter(student_id=student_id).exists()

    def test_malformed_feedback_does_not_mutate_state(self, student_id, make_lesson, make_feedback):
        lesson = make_lesson([student_id])
        make_feedback(student_id, lesson, current_level='expert')
        service = EvaluationService()

        with pytest.raises(MalformedFeedbackError):
            service.on_student_activity(student_id)

        assert service.state == EvaluationState.FAILED
        assert not StudentProgress.objects.filter(student_id=student_id).exists()
        assert not AchievementUnlock.objects.filter(student_id=student_id).exists()


class TestCollaboratorFailures:
    """Tests for degraded user lookups."""

    def test_lookup_failure_skips_only_profile_criterion(self, student_id, user_service, make_lesson):
        user_service.get_user.side_effect = httpx.ConnectError('user service down')
        make_lesson([student_id])

        unlocks = EvaluationService().on_student_activity(student_id)

        assert names(unlocks) == ['Welcome to SlopesMaster!', 'First Steps']

    def test_custom_avatar_unlocks_picture_perfect(self, student_id, user_service):
        user_service.get_user.side_effect = None
        user_service.get_user.return_value = {
            'success': True,
            'data': {'id': str(student_id), 'avatar_url': 'https://cdn.example.com/avatar.png'},
        }

        unlocks = EvaluationService().on_student_activity(student_id)

        assert names(unlocks) == ['Welcome to SlopesMaster!', 'Picture Perfect']


class TestRetries:
    """Tests for conflict and storage retry handling."""

    def test_conflict_is_retried_with_fresh_state(self, student_id, make_lesson):
        make_lesson([student_id])
        real_commit = ProgressWriter.commit
        calls = []

        def flaky_commit(*args, **kwargs):
            calls.append(args[0].expected_version)
            if len(calls) == 1:
                raise ProgressConflictError(str(student_id), 0)
            return real_commit(*args, **kwargs)

        with patch.object(ProgressWriter, 'commit', side_effect=flaky_commit):
            unlocks = EvaluationService().on_student_activity(student_id)

        assert len(calls) == 2
        assert 'First Steps' in names(unlocks)

    def test_repeated_conflict_surfaces_retryable_error(self, student_id, make_lesson):
        make_lesson([student_id])
        service = EvaluationService()

        with patch.object(
            ProgressWriter, 'commit', side_effect=ProgressConflictError(str(student_id), 0)
        ) as commit:
            with pytest.raises(EvaluationConflictError):
                service.on_student_activity(student_id)

        assert commit.call_count == 2
        assert service.state == EvaluationState.FAILED
        assert not AchievementUnlock.objects.filter(student_id=student_id).exists()

    def test_storage_failures_retried_then_surfaced(self, student_id, make_lesson, settings):
        settings.PROGRESS_STORAGE_RETRIES = 2
        make_lesson([student_id])

        with patch.object(
            ProgressWriter, 'commit', side_effect=TransientStorageError(str(student_id))
        ) as commit:
            with pytest.raises(StorageUnavailableError):
                EvaluationService().on_student_activity(student_id)

        assert commit.call_count == 3

    def test_transient_failure_then_success(self, student_id, make_lesson):
        make_lesson([student_id])
        real_commit = ProgressWriter.commit
        attempts = []

        def flaky_commit(*args, **kwargs):
            attempts.append(1)
            if len(attempts) == 1:
                raise TransientStorageError(str(student_id))
            return real_commit(*args, **kwargs)

        with patch.object(ProgressWriter, 'commit', side_effect=flaky_commit):
            unlocks = EvaluationService().on_student_activity(student_id)

        assert len(attempts) == 2
        assert AchievementUnlock.objects.filter(student_id=student_id).count() == len(unlocks)

    def test_unexpected_error_marks_run_failed(self, student_id, make_lesson):
        StudentProgress.objects.create(student_id=student_id, overall_level='black_diamond')
        make_lesson([student_id])
        service = EvaluationService()

        with patch('apps.progress.services.evaluation_service.logger') as logger:
            with pytest.raises(ValueError):
                service.on_student_activity(student_id)

        assert service.state == EvaluationState.FAILED
        logger.exception.assert_called_once()
        assert not AchievementUnlock.objects.filter(student_id=student_id).exists()

    def test_held_lock_raises_conflict(self, student_id, settings):
        settings.PROGRESS_LOCK_WAIT_SECONDS = 0.1
        cache.add(lock_key(student_id), 'another-worker', timeout=30)

        with pytest.raises(EvaluationConflictError):
            EvaluationService().on_student_activity(student_id)

        assert cache.get(lock_key(student_id)) == 'another-worker'
        assert not StudentProgress.objects.filter(student_id=student_id).exists()


class TestStreakAchievements:
    """Streak achievements unlock at their exact lengths."""

    def test_three_then_seven_day_streak(self, student_id, make_lesson):
        start = date(2024, 1, 1)
        for offset in range(3):
            make_lesson([student_id], lesson_date=start + timedelta(days=offset))

        first = names(EvaluationService().on_student_activity(student_id))

        for offset in range(3, 7):
            make_lesson([student_id], lesson_date=start + timedelta(days=offset))

        second = names(EvaluationService().on_student_activity(student_id))

        assert 'Weekend Warrior' in first
        assert 'Week Warrior' not in first
        assert second == ['Week Warrior']
        assert StudentProgress.objects.get(student_id=student_id).streak_days == 7
