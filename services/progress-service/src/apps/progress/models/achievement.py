# services/progress-service/src/apps/progress/models/achievement.py
"""
Achievement Unlock Model

One row per student per unlocked achievement. Display fields are copied
from the catalog at unlock time.
"""

import uuid

from django.db import models
from django.utils import timezone


class AchievementCategory(models.TextChoices):
    SKILL = 'skill', 'Skill'
    MILESTONE = 'milestone', 'Milestone'
    SOCIAL = 'social', 'Social'
    STREAK = 'streak', 'Streak'


class AchievementRarity(models.TextChoices):
    COMMON = 'common', 'Common'
    RARE = 'rare', 'Rare'
    EPIC = 'epic', 'Epic'
    LEGENDARY = 'legendary', 'Legendary'


class AchievementUnlock(models.Model):
    """
    Achievement earned by a student.

    Rows recorded before catalog ids existed carry only the display name;
    reconcile_achievement_ids backfills their definition_id.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student_id = models.UUIDField(db_index=True)

    definition_id = models.CharField(max_length=64, null=True, blank=True)
    definition_name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    icon = models.CharField(max_length=20, blank=True, default='')
    category = models.CharField(
        max_length=20,
        choices=AchievementCategory.choices,
        default=AchievementCategory.MILESTONE
    )
    rarity = models.CharField(
        max_length=20,
        choices=AchievementRarity.choices,
        default=AchievementRarity.COMMON
    )
    points = models.PositiveIntegerField(default=0)

    unlocked_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'achievement_unlocks'
        ordering = ['-unlocked_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student_id', 'definition_name'],
                name='unique_student_achievement_name'
            ),
            models.UniqueConstraint(
                fields=['student_id', 'definition_id'],
                name='unique_student_achievement_id'
            ),
        ]
        indexes = [
            models.Index(fields=['student_id', 'category']),
        ]

    def __str__(self):
        return f"{self.student_id} - {self.definition_name}"
