# services/progress-service/src/apps/progress/achievements.py
"""
Achievement Catalog

Static achievement definitions, loaded once per process and never
mutated. Order here is the order in which unlocks are emitted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class CriterionType(str, Enum):
    """What a criterion measures."""
    ACCOUNT_CREATED = 'account_created'
    PROFILE_PICTURE_ADDED = 'profile_picture_added'
    LESSONS_COMPLETED = 'lessons_completed'
    SKILL_LEVEL = 'skill_level'
    RATING_ACHIEVED = 'rating_achieved'
    FEEDBACK_COUNT = 'feedback_count'
    STREAK_DAYS = 'streak_days'


class Comparator(str, Enum):
    EQ = 'eq'
    GTE = 'gte'
    LTE = 'lte'


@dataclass(frozen=True)
class Criterion:
    """Comparison of an observed value against a threshold."""
    type: str
    comparator: str
    threshold: float


@dataclass(frozen=True)
class AchievementDefinition:
    """Catalog entry for one achievement."""
    id: str
    name: str
    description: str
    icon: str
    category: str
    criteria: Criterion
    rarity: str = 'common'
    points: int = 0


def _definition(id, name, description, icon, category, criterion_type, comparator, threshold, rarity, points):
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        criteria=Criterion(type=criterion_type, comparator=comparator, threshold=threshold),
        rarity=rarity,
        points=points,
    )


ACHIEVEMENT_CATALOG: Tuple[AchievementDefinition, ...] = (
    # Account
    _definition(
        'welcome_to_slopes', 'Welcome to SlopesMaster!',
        'Created your account and joined the community', '🎿',
        'milestone', 'account_created', 'eq', 1, 'common', 10,
    ),
    _definition(
        'profile_picture', 'Picture Perfect',
        'Added a profile picture to your account', '📸',
        'social', 'profile_picture_added', 'eq', 1, 'common', 15,
    ),

    # Lesson milestones
    _definition(
        'first_lesson', 'First Steps',
        'Completed your first ski lesson', '🎯',
        'milestone', 'lessons_completed', 'eq', 1, 'common', 25,
    ),
    _definition(
        'five_lessons', 'Getting the Hang of It',
        'Completed 5 ski lessons', '⛷️',
        'milestone', 'lessons_completed', 'eq', 5, 'common', 50,
    ),
    _definition(
        'ten_lessons', 'Dedicated Learner',
        'Completed 10 ski lessons', '🏂',
        'milestone', 'lessons_completed', 'eq', 10, 'rare', 100,
    ),
    _definition(
        'twenty_five_lessons', 'Seasoned Skier',
        'Completed 25 ski lessons', '🏔️',
        'milestone', 'lessons_completed', 'eq', 25, 'epic', 250,
    ),
    _definition(
        'fifty_lessons', 'Mountain Master',
        'Completed 50 ski lessons', '👑',
        'milestone', 'lessons_completed', 'eq', 50, 'legendary', 500,
    ),

    # Skill levels
    _definition(
        'developing_turns', 'Turn Developer',
        'Reached Developing Turns skill level', '🔄',
        'skill', 'skill_level', 'eq', 1, 'common', 30,
    ),
    _definition(
        'linking_turns', 'Turn Linker',
        'Reached Linking Turns skill level', '🔗',
        'skill', 'skill_level', 'eq', 2, 'rare', 75,
    ),
    _definition(
        'confident_turns', 'Confident Carver',
        'Reached Confident Turns skill level', '💪',
        'skill', 'skill_level', 'eq', 3, 'epic', 150,
    ),
    _definition(
        'consistent_blue', 'Blue Run Champion',
        'Reached Consistent Blue Runs skill level', '🏆',
        'skill', 'skill_level', 'eq', 4, 'legendary', 300,
    ),

    # Performance
    _definition(
        'five_star_rating', 'Perfect Performance',
        'Received a 5-star overall rating from an instructor', '⭐',
        'skill', 'rating_achieved', 'eq', 5, 'rare', 100,
    ),
    _definition(
        'high_achiever', 'High Achiever',
        'Maintained an average rating of 4.5 or higher', '🌟',
        'skill', 'rating_achieved', 'gte', 4.5, 'epic', 200,
    ),

    # Feedback
    _definition(
        'first_feedback', 'First Feedback',
        'Received your first instructor feedback', '📝',
        'social', 'feedback_count', 'eq', 1, 'common', 20,
    ),
    _definition(
        'feedback_collector', 'Feedback Collector',
        'Received feedback from 10 lessons', '📚',
        'social', 'feedback_count', 'eq', 10, 'rare', 75,
    ),

    # Streaks
    _definition(
        'three_day_streak', 'Weekend Warrior',
        'Had lessons 3 days in a row', '🔥',
        'streak', 'streak_days', 'eq', 3, 'common', 50,
    ),
    _definition(
        'seven_day_streak', 'Week Warrior',
        'Had lessons 7 days in a row', '🔥🔥',
        'streak', 'streak_days', 'eq', 7, 'rare', 150,
    ),
)


_BY_ID: Dict[str, AchievementDefinition] = {d.id: d for d in ACHIEVEMENT_CATALOG}
_BY_NAME: Dict[str, AchievementDefinition] = {d.name: d for d in ACHIEVEMENT_CATALOG}


def get_definition(definition_id: str) -> Optional[AchievementDefinition]:
    return _BY_ID.get(definition_id)


def get_definition_by_name(name: str) -> Optional[AchievementDefinition]:
    return _BY_NAME.get(name)


def validate_catalog(catalog=ACHIEVEMENT_CATALOG) -> None:
    """
    Check catalog integrity.

    Raises:
        ValueError: On duplicate ids or names, or an unknown category,
            criterion type or comparator
    """
    categories = {'skill', 'milestone', 'social', 'streak'}
    criterion_types = {t.value for t in CriterionType}
    comparators = {c.value for c in Comparator}
    seen_ids, seen_names = set(), set()

    for definition in catalog:
        if definition.id in seen_ids:
            raise ValueError(f"Duplicate achievement id: {definition.id}")
        if definition.name in seen_names:
            raise ValueError(f"Duplicate achievement name: {definition.name}")
        seen_ids.add(definition.id)
        seen_names.add(definition.name)

        if definition.category not in categories:
            raise ValueError(f"Unknown category {definition.category!r} for {definition.id}")
        if definition.criteria.type not in criterion_types:
            raise ValueError(f"Unknown criterion type {definition.criteria.type!r} for {definition.id}")
        if definition.criteria.comparator not in comparators:
            raise ValueError(f"Unknown comparator {definition.criteria.comparator!r} for {definition.id}")
