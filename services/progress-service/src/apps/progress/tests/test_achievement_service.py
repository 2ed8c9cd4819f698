# services/progress-service/src/apps/progress/tests/test_achievement_service.py
"""
Achievement Service Tests

Tests for rule evaluation and the achievement read operations.
"""

import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

from django.conf import settings

from apps.progress.achievements import (
    ACHIEVEMENT_CATALOG,
    AchievementDefinition,
    Criterion,
    get_definition,
    validate_catalog,
)
from apps.progress.models import AchievementUnlock
from apps.progress.services.achievement_service import (
    AchievementRuleEngine,
    AchievementService,
    build_unlock,
    compare,
)
from apps.progress.services.aggregation_service import ProgressSnapshot
from apps.progress.services.student_directory import StudentProfile

NOW = datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)


def snapshot(student_id, completed_lessons=0, overall_level='first_time', streak_days=0):
    return ProgressSnapshot(
        student_id=str(student_id),
        overall_level=overall_level,
        total_lessons=completed_lessons,
        completed_lessons=completed_lessons,
        skill_state={},
        streak_days=streak_days,
        total_points=0,
        last_activity=NOW,
        last_updated=NOW,
    )


def rating(overall):
    return SimpleNamespace(overall=overall)


def definition(id, criterion_type, comparator, threshold, points=10):
    return AchievementDefinition(
        id=id,
        name=id.replace('_', ' ').title(),
        description='test',
        icon='*',
        category='milestone',
        criteria=Criterion(type=criterion_type, comparator=comparator, threshold=threshold),
        rarity='common',
        points=points,
    )


class TestCatalog:
    """Tests for the static achievement catalog."""

    def test_catalog_is_valid(self):
        validate_catalog()
        assert len(ACHIEVEMENT_CATALOG) == 17

    def test_duplicate_ids_rejected(self):
        entry = definition('dup', 'account_created', 'eq', 1)
        with pytest.raises(ValueError):
            validate_catalog((entry, entry))

    def test_unknown_criterion_type_rejected(self):
        with pytest.raises(ValueError):
            validate_catalog((definition('odd', 'moon_phase', 'eq', 1),))

    def test_first_steps_definition(self):
        first = get_definition('first_lesson')
        assert first.name == 'First Steps'
        assert first.criteria == Criterion(type='lessons_completed', comparator='eq', threshold=1)
        assert first.points == 25


class TestCompare:
    """Tests for criterion comparators."""

    def test_eq(self):
        assert compare(5, 'eq', 5)
        assert not compare(6, 'eq', 5)

    def test_gte(self):
        assert compare(4.5, 'gte', 4.5)
        assert not compare(4, 'gte', 4.5)

    def test_lte(self):
        assert compare(2, 'lte', 3)
        assert not compare(4, 'lte', 3)

    def test_unknown_comparator_falls_back_to_gte(self):
        assert compare(7, 'between', 5)
        assert not compare(3, 'between', 5)


class TestAchievementRuleEngine:
    """Tests for AchievementRuleEngine.evaluate."""

    def setup_method(self):
        self.student_id = uuid4()
        self.profile = StudentProfile(student_id=str(self.student_id), avatar_url=None)

    def _names(self, unlocks):
        return [u.definition_name for u in unlocks]

    def test_first_lesson_unlocks_in_catalog_order(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id, completed_lessons=1, overall_level='developing_turns', streak_days=1),
            [rating(5)],
            set(),
            now=NOW,
        )

        assert self._names(unlocks) == [
            'Welcome to SlopesMaster!',
            'First Steps',
            'Turn Developer',
            'Perfect Performance',
            'High Achiever',
            'First Feedback',
        ]
        assert all(u.unlocked_at == NOW for u in unlocks)
        assert all(u.student_id == self.student_id for u in unlocks)

    def test_already_unlocked_by_name_is_skipped(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id, completed_lessons=1),
            [],
            {'Welcome to SlopesMaster!', 'First Steps'},
            now=NOW,
        )

        assert self._names(unlocks) == []

    def test_already_unlocked_by_id_is_skipped(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id, completed_lessons=1),
            [],
            {'welcome_to_slopes', 'first_lesson'},
            now=NOW,
        )

        assert unlocks == []

    def test_eq_threshold_passed_does_not_unlock(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id, completed_lessons=6),
            [],
            {'Welcome to SlopesMaster!'},
            now=NOW,
        )

        assert 'Getting the Hang of It' not in self._names(unlocks)

    def test_rating_uses_best_overall(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id),
            [rating(3), rating(5), rating(None)],
            {'Welcome to SlopesMaster!'},
            now=NOW,
        )

        assert self._names(unlocks) == ['Perfect Performance', 'High Achiever']

    def test_streak_unlock(self):
        engine = AchievementRuleEngine(self.profile)
        unlocks = engine.evaluate(
            snapshot(self.student_id, streak_days=3),
            [],
            {'Welcome to SlopesMaster!'},
            now=NOW,
        )

        assert self._names(unlocks) == ['Weekend Warrior']

    def test_custom_avatar_unlocks_picture_perfect(self):
        profile = StudentProfile(student_id=str(self.student_id), avatar_url='https://cdn.example.com/me.png')
        unlocks = AchievementRuleEngine(profile).evaluate(
            snapshot(self.student_id), [], {'Welcome to SlopesMaster!'}, now=NOW
        )

        assert self._names(unlocks) == ['Picture Perfect']

    def test_default_avatar_does_not_count(self):
        profile = StudentProfile(
            student_id=str(self.student_id),
            avatar_url=settings.PROGRESS_DEFAULT_AVATAR_URL
        )
        unlocks = AchievementRuleEngine(profile).evaluate(
            snapshot(self.student_id), [], {'Welcome to SlopesMaster!'}, now=NOW
        )

        assert unlocks == []

    def test_profile_lookup_failure_only_skips_that_criterion(self):
        profile = StudentProfile(student_id=str(self.student_id), lookup_failed=True)
        unlocks = AchievementRuleEngine(profile).evaluate(
            snapshot(self.student_id, completed_lessons=1), [], set(), now=NOW
        )

        assert self._names(unlocks) == ['Welcome to SlopesMaster!', 'First Steps']

    def test_unknown_criterion_type_is_skipped(self):
        catalog = (
            definition('broken', 'moon_phase', 'eq', 1),
            definition('welcome', 'account_created', 'eq', 1),
        )
        unlocks = AchievementRuleEngine(self.profile).evaluate(
            snapshot(self.student_id), [], set(), catalog=catalog, now=NOW
        )

        assert [u.definition_id for u in unlocks] == ['welcome']

    def test_unknown_comparator_evaluates_as_gte(self):
        catalog = (definition('many_lessons', 'lessons_completed', 'around', 3),)
        unlocks = AchievementRuleEngine(self.profile).evaluate(
            snapshot(self.student_id, completed_lessons=5), [], set(), catalog=catalog, now=NOW
        )

        assert [u.definition_id for u in unlocks] == ['many_lessons']

    def test_unlock_copies_catalog_fields(self):
        first = get_definition('first_lesson')
        unlock = build_unlock(first, str(self.student_id), NOW)

        assert unlock.definition_id == 'first_lesson'
        assert unlock.definition_name == 'First Steps'
        assert unlock.icon == first.icon
        assert unlock.category == 'milestone'
        assert unlock.rarity == 'common'
        assert unlock.points == 25


@pytest.mark.django_db
class TestAchievementService:
    """Tests for achievement read operations."""

    def setup_method(self):
        self.student_id = uuid4()

    def _unlock(self, definition_id, minutes_ago=0, keyed=True):
        unlock = build_unlock(get_definition(definition_id), str(self.student_id), NOW - timedelta(minutes=minutes_ago))
        if not keyed:
            unlock.definition_id = None
        unlock.save()
        return unlock

    def test_student_achievements_newest_first(self):
        self._unlock('welcome_to_slopes', minutes_ago=30)
        self._unlock('first_lesson', minutes_ago=10)

        names = [u.definition_name for u in AchievementService.get_student_achievements(self.student_id)]

        assert names == ['First Steps', 'Welcome to SlopesMaster!']

    def test_filter_by_category(self):
        self._unlock('welcome_to_slopes')
        self._unlock('first_feedback')

        social = AchievementService.get_student_achievements(self.student_id, category='social')

        assert [u.definition_id for u in social] == ['first_feedback']

    def test_unlocked_keys_include_names_and_ids(self):
        self._unlock('welcome_to_slopes')
        self._unlock('first_lesson', keyed=False)

        keys = AchievementService.get_unlocked_keys(self.student_id)

        assert keys == {'Welcome to SlopesMaster!', 'welcome_to_slopes', 'First Steps'}

    def test_stats(self):
        for minutes, definition_id in enumerate(
            ['welcome_to_slopes', 'first_lesson', 'ten_lessons', 'five_star_rating', 'first_feedback', 'three_day_streak']
        ):
            self._unlock(definition_id, minutes_ago=60 - minutes)

        stats = AchievementService.get_achievement_stats(self.student_id)

        assert stats['total_achievements'] == 6
        assert stats['total_points'] == 10 + 25 + 100 + 100 + 20 + 50
        assert stats['by_category'] == {'milestone': 3, 'skill': 1, 'social': 1, 'streak': 1}
        assert stats['by_rarity'] == {'common': 4, 'rare': 2}
        assert len(stats['recent_achievements']) == 5
        assert stats['recent_achievements'][0].definition_id == 'three_day_streak'

    def test_stats_for_student_without_achievements(self):
        stats = AchievementService.get_achievement_stats(self.student_id)

        assert stats['total_achievements'] == 0
        assert stats['total_points'] == 0
        assert stats['recent_achievements'] == []

    def test_all_achievements_split(self):
        self._unlock('welcome_to_slopes')
        self._unlock('first_lesson', keyed=False)

        result = AchievementService.get_all_achievements(self.student_id)

        assert len(result['unlocked']) == 2
        assert len(result['locked']) == len(ACHIEVEMENT_CATALOG) - 2
        locked_ids = {d.id for d in result['locked']}
        assert 'welcome_to_slopes' not in locked_ids
        assert 'first_lesson' not in locked_ids

    def test_other_students_not_included(self):
        self._unlock('welcome_to_slopes')

        assert AchievementService.get_student_achievements(uuid4()).count() == 0
        assert AchievementUnlock.objects.count() == 1
