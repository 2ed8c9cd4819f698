# services/progress-service/src/apps/progress/services/achievement_service.py
"""
Achievement Service

Rule evaluation against the static catalog, plus read operations over
a student's unlocked achievements.
"""

import uuid
import logging
from datetime import datetime
from typing import List, Dict, Any, Optional, Iterable, Sequence, Set

from django.db.models import QuerySet
from django.utils import timezone

from ..achievements import (
    ACHIEVEMENT_CATALOG,
    AchievementDefinition,
    Comparator,
    CriterionType,
    get_definition,
    get_definition_by_name,
)
from ..models import AchievementUnlock
from .aggregation_service import ProgressSnapshot
from .exceptions import CriterionEvaluationError
from .student_directory import StudentProfile

logger = logging.getLogger(__name__)


def compare(observed: float, comparator: str, threshold: float) -> bool:
    """Apply a criterion comparator. Unknown comparators behave as gte."""
    if comparator == Comparator.EQ:
        return observed == threshold
    if comparator == Comparator.LTE:
        return observed <= threshold
    if comparator != Comparator.GTE:
        logger.debug(f"Unknown comparator {comparator!r}, using gte")
    return observed >= threshold


class AchievementRuleEngine:
    """
    Evaluates catalog criteria against a progress snapshot.

    Produces unsaved AchievementUnlock instances for definitions that
    are satisfied and not yet unlocked, in catalog order.
    """

    def __init__(self, profile: Optional[StudentProfile] = None):
        self.profile = profile

    def evaluate(
        self,
        snapshot: ProgressSnapshot,
        feedback_records: Sequence[Any],
        already_unlocked: Set[str],
        catalog: Iterable[AchievementDefinition] = ACHIEVEMENT_CATALOG,
        now: datetime = None
    ) -> List[AchievementUnlock]:
        """
        Find newly earned achievements.

        Args:
            snapshot: Recomputed progress snapshot (streak included)
            feedback_records: All feedback records of the student
            already_unlocked: Display names and ids already unlocked
            catalog: Achievement definitions to evaluate
            now: Unlock timestamp

        Returns:
            New unlocks in catalog order
        """
        now = now or timezone.now()
        unlocks = []

        for definition in catalog:
            if definition.name in already_unlocked or definition.id in already_unlocked:
                continue

            try:
                observed = self.observed_value(definition, snapshot, feedback_records)
                satisfied = compare(
                    observed,
                    definition.criteria.comparator,
                    definition.criteria.threshold
                )
            except (CriterionEvaluationError, TypeError, ValueError) as e:
                logger.warning(
                    f"Skipping achievement {definition.id} for student {snapshot.student_id}: {e}",
                    extra={'student_id': snapshot.student_id, 'definition_id': definition.id}
                )
                continue

            if satisfied:
                unlocks.append(build_unlock(definition, snapshot.student_id, now))

        return unlocks

    def observed_value(
        self,
        definition: AchievementDefinition,
        snapshot: ProgressSnapshot,
        feedback_records: Sequence[Any]
    ) -> float:
        criterion_type = definition.criteria.type

        if criterion_type == CriterionType.LESSONS_COMPLETED:
            return snapshot.completed_lessons
        if criterion_type == CriterionType.SKILL_LEVEL:
            return snapshot.overall_level_ordinal
        if criterion_type == CriterionType.RATING_ACHIEVED:
            ratings = [r.overall for r in feedback_records if r.overall is not None]
            return max(ratings) if ratings else 0
        if criterion_type == CriterionType.FEEDBACK_COUNT:
            return len(feedback_records)
        if criterion_type == CriterionType.STREAK_DAYS:
            return snapshot.streak_days
        if criterion_type == CriterionType.ACCOUNT_CREATED:
            return 1
        if criterion_type == CriterionType.PROFILE_PICTURE_ADDED:
            if self.profile is None or self.profile.lookup_failed:
                raise CriterionEvaluationError(
                    definition.id,
                    f"Profile of student {snapshot.student_id} is unavailable"
                )
            return 1 if self.profile.has_custom_avatar else 0

        raise CriterionEvaluationError(
            definition.id,
            f"Unknown criterion type: {criterion_type!r}"
        )


def build_unlock(definition: AchievementDefinition, student_id: str, now: datetime) -> AchievementUnlock:
    return AchievementUnlock(
        student_id=uuid.UUID(str(student_id)),
        definition_id=definition.id,
        definition_name=definition.name,
        description=definition.description,
        icon=definition.icon,
        category=definition.category,
        rarity=definition.rarity,
        points=definition.points,
        unlocked_at=now,
    )


def _unlock_points(unlock: AchievementUnlock) -> int:
    definition = get_definition(unlock.definition_id) if unlock.definition_id else None
    definition = definition or get_definition_by_name(unlock.definition_name)
    return definition.points if definition else unlock.points


class AchievementService:
    """
    Read operations over unlocked achievements.
    """

    @staticmethod
    def get_student_achievements(
        student_id: uuid.UUID,
        category: str = None
    ) -> QuerySet:
        """Unlocks of a student, newest first."""
        queryset = AchievementUnlock.objects.filter(student_id=student_id)
        if category:
            queryset = queryset.filter(category=category)
        return queryset.order_by('-unlocked_at')

    @staticmethod
    def get_unlocked_keys(student_id: uuid.UUID) -> Set[str]:
        """Display names and definition ids the student has unlocked."""
        keys = set()
        for name, definition_id in AchievementUnlock.objects.filter(
            student_id=student_id
        ).values_list('definition_name', 'definition_id'):
            keys.add(name)
            if definition_id:
                keys.add(definition_id)
        return keys

    @staticmethod
    def get_achievement_stats(student_id: uuid.UUID) -> Dict[str, Any]:
        """
        Summary of a student's achievements.

        Returns:
            Dict with total count, total points, counts by category and
            rarity, and the five most recent unlocks
        """
        unlocks = list(AchievementService.get_student_achievements(student_id))

        by_category = {}
        by_rarity = {}
        for unlock in unlocks:
            by_category[unlock.category] = by_category.get(unlock.category, 0) + 1
            rarity = unlock.rarity or 'common'
            by_rarity[rarity] = by_rarity.get(rarity, 0) + 1

        return {
            'total_achievements': len(unlocks),
            'total_points': sum(_unlock_points(u) for u in unlocks),
            'by_category': by_category,
            'by_rarity': by_rarity,
            'recent_achievements': unlocks[:5],
        }

    @staticmethod
    def get_all_achievements(student_id: uuid.UUID) -> Dict[str, Any]:
        """
        Catalog split into what the student has unlocked and what is
        still locked.
        """
        unlocked = list(AchievementService.get_student_achievements(student_id))
        keys = set()
        for unlock in unlocked:
            keys.add(unlock.definition_name)
            if unlock.definition_id:
                keys.add(unlock.definition_id)

        locked = [
            d for d in ACHIEVEMENT_CATALOG
            if d.name not in keys and d.id not in keys
        ]
        return {'unlocked': unlocked, 'locked': locked}
