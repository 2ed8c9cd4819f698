# services/progress-service/src/apps/progress/models/lesson.py
"""
Lesson Models

Lessons and their attendees. Written by the booking workflow; the
progress engine only reads completed attendances.
"""

import uuid

from django.db import models

from .levels import SkillLevel


class Lesson(models.Model):
    """
    A scheduled lesson, private or group.
    """

    class Status(models.TextChoices):
        AVAILABLE = 'available', 'Available'
        SCHEDULED = 'scheduled', 'Scheduled'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    instructor_id = models.UUIDField(db_index=True)

    title = models.CharField(max_length=255)
    date = models.DateField(db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED
    )
    skill_level = models.CharField(
        max_length=30,
        choices=SkillLevel.choices,
        default=SkillLevel.FIRST_TIME
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lessons'
        ordering = ['-date']
        indexes = [
            models.Index(fields=['status', 'date']),
        ]

    def __str__(self):
        return f"{self.title} ({self.date})"

    @property
    def is_completed(self) -> bool:
        return self.status == self.Status.COMPLETED

    @property
    def student_ids(self) -> list:
        return [str(s) for s in self.attendees.values_list('student_id', flat=True)]


class LessonStudent(models.Model):
    """
    Attendance of one student in one lesson.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lesson = models.ForeignKey(
        Lesson,
        on_delete=models.CASCADE,
        related_name='attendees'
    )
    student_id = models.UUIDField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lesson_students'
        constraints = [
            models.UniqueConstraint(
                fields=['lesson', 'student_id'],
                name='unique_lesson_student'
            ),
        ]

    def __str__(self):
        return f"{self.student_id} @ {self.lesson_id}"
