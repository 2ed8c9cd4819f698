# services/progress-service/src/apps/progress/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for progress service tests.
"""

import pytest
from datetime import date, timedelta
from unittest.mock import MagicMock, patch
from uuid import uuid4

from django.core.cache import cache
from rest_framework.test import APIClient


class MockUser:
    """Mock user for testing."""
    def __init__(self):
        self.id = uuid4()
        self.is_authenticated = True


@pytest.fixture(autouse=True)
def clear_cache():
    """Drop progress locks left in the local-memory cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def user_service():
    """Stub the user service client; by default every student exists without an avatar."""
    client = MagicMock()
    client.get_user.side_effect = lambda user_id: {'id': user_id, 'avatar_url': None}
    with patch(
        'apps.progress.services.student_directory.get_user_service_client',
        return_value=client
    ):
        yield client


@pytest.fixture
def student_id():
    """Generate a random student ID."""
    return uuid4()


@pytest.fixture
def instructor_id():
    """Generate a random instructor ID."""
    return uuid4()


@pytest.fixture
def api_client():
    client = APIClient()
    client.force_authenticate(user=MockUser())
    return client


@pytest.fixture
def make_lesson(db, instructor_id):
    """Create a lesson attended by the given students."""
    from apps.progress.models import Lesson, LessonStudent

    def _make_lesson(student_ids, lesson_date=None, status=Lesson.Status.COMPLETED, title='Group lesson'):
        lesson = Lesson.objects.create(
            instructor_id=instructor_id,
            title=title,
            date=lesson_date or date.today(),
            status=status,
        )
        for sid in student_ids:
            LessonStudent.objects.create(lesson=lesson, student_id=sid)
        return lesson

    return _make_lesson


@pytest.fixture
def make_feedback(db, instructor_id):
    """Create a feedback record for a student on a lesson."""
    from apps.progress.models import LessonFeedback

    def _make_feedback(student_id, lesson, overall=4, current_level='developing_turns', **extra):
        values = {
            'student_id': student_id,
            'instructor_id': instructor_id,
            'lesson': lesson,
            'date': lesson.date,
            'sport': 'skiing',
            'technique': 4,
            'control': 4,
            'confidence': 4,
            'safety': 5,
            'overall': overall,
            'current_level': current_level,
        }
        values.update(extra)
        return LessonFeedback.objects.create(**values)

    return _make_feedback


@pytest.fixture
def consecutive_days():
    """Return n consecutive dates ending today."""
    def _days(n, end=None):
        end = end or date.today()
        return [end - timedelta(days=offset) for offset in range(n)][::-1]
    return _days
