# services/progress-service/src/apps/progress/models/feedback.py
"""
Lesson Feedback Model

Instructor assessment of a student after a lesson.
"""

import uuid

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator

from .levels import SkillLevel, Sport
from .lesson import Lesson


RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class LessonFeedback(models.Model):
    """
    Feedback record with five 1-5 ratings, a level assessment and
    the skills covered in the lesson.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student_id = models.UUIDField(db_index=True)
    instructor_id = models.UUIDField(db_index=True)
    lesson = models.ForeignKey(
        Lesson,
        on_delete=models.CASCADE,
        related_name='feedback'
    )

    date = models.DateField()
    sport = models.CharField(max_length=20, choices=Sport.choices, default=Sport.SKIING)

    # Performance
    technique = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    control = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    confidence = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    safety = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    overall = models.PositiveSmallIntegerField(null=True, validators=RATING_VALIDATORS)

    # Skill assessment
    current_level = models.CharField(max_length=30, choices=SkillLevel.choices)
    areas_of_focus = models.JSONField(default=list, blank=True)
    next_steps = models.JSONField(default=list, blank=True)

    strengths = models.JSONField(default=list, blank=True)
    areas_for_improvement = models.JSONField(default=list, blank=True)
    instructor_notes = models.TextField(blank=True, default='')

    # Progress update
    skills_improved = models.JSONField(default=list, blank=True)
    new_skills_learned = models.JSONField(default=list, blank=True)
    level_up = models.BooleanField(default=False)
    new_level = models.CharField(
        max_length=30,
        choices=SkillLevel.choices,
        blank=True,
        null=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lesson_feedback'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['student_id', 'date']),
        ]
        verbose_name_plural = 'Lesson feedback'

    def __str__(self):
        return f"Feedback {self.student_id} ({self.date})"
