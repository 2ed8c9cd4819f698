# services/progress-service/src/apps/progress/models/progress.py
"""
Student Progress Models

Per-student progress aggregate and its append-only skill history.
"""

import uuid

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone

from .levels import SkillLevel, Sport


class StudentProgress(models.Model):
    """
    Cumulative progress state of one student.

    Rewritten as a whole by the evaluation engine on each recompute.
    `version` is bumped on every committed write and guards concurrent
    writers against lost updates.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student_id = models.UUIDField(unique=True)

    overall_level = models.CharField(
        max_length=30,
        choices=SkillLevel.choices,
        default=SkillLevel.FIRST_TIME
    )
    total_lessons = models.PositiveIntegerField(default=0)
    completed_lessons = models.PositiveIntegerField(default=0)

    # {sport: {level, progress_percent, skills_learned, last_updated}}
    skill_state = models.JSONField(default=dict, blank=True)

    streak_days = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)

    last_activity = models.DateTimeField(null=True, blank=True)
    last_updated = models.DateTimeField(default=timezone.now)
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'student_progress'
        ordering = ['-last_updated']
        verbose_name_plural = 'Student progress'

    def __str__(self):
        return f"{self.student_id} - {self.overall_level}"

    @property
    def overall_level_ordinal(self) -> int:
        return SkillLevel.ordinal(self.overall_level)

    def sport_state(self, sport: str) -> dict:
        return self.skill_state.get(sport, {})


class SkillHistoryEntry(models.Model):
    """
    Audit record written once per committed progress recompute.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student_id = models.UUIDField(db_index=True)

    sport = models.CharField(max_length=20, choices=Sport.choices, default=Sport.SKIING)
    level_before = models.PositiveSmallIntegerField(default=0)
    level_after = models.PositiveSmallIntegerField(default=0)
    progress_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    skills_learned = models.JSONField(default=list, blank=True)

    recorded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'skill_history_entries'
        ordering = ['-recorded_at']
        indexes = [
            models.Index(fields=['student_id', '-recorded_at']),
        ]
        verbose_name_plural = 'Skill history entries'

    def __str__(self):
        return f"{self.student_id} {self.sport}: {self.level_before} -> {self.level_after}"

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before
