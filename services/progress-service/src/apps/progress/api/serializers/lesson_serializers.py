# services/progress-service/src/apps/progress/api/serializers/lesson_serializers.py
"""
Lesson and Feedback Serializers

Serializers for the lesson completion and feedback submission triggers.
"""

from rest_framework import serializers

from ...models import Lesson, LessonFeedback, SkillLevel, Sport


class LessonSerializer(serializers.ModelSerializer):
    """Serializer for lessons."""

    student_ids = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = Lesson
        fields = [
            'id', 'instructor_id', 'title', 'date', 'status',
            'skill_level', 'student_ids', 'completed_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class LessonFeedbackSerializer(serializers.ModelSerializer):
    """Serializer for stored feedback."""

    lesson_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = LessonFeedback
        fields = [
            'id', 'lesson_id', 'student_id', 'instructor_id', 'date', 'sport',
            'technique', 'control', 'confidence', 'safety', 'overall',
            'current_level', 'areas_of_focus', 'next_steps',
            'strengths', 'areas_for_improvement', 'instructor_notes',
            'skills_improved', 'new_skills_learned', 'level_up', 'new_level',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class FeedbackSubmitSerializer(serializers.Serializer):
    """Serializer for submitting instructor feedback."""

    lesson_id = serializers.UUIDField()
    student_id = serializers.UUIDField()
    instructor_id = serializers.UUIDField()
    date = serializers.DateField(required=False)
    sport = serializers.ChoiceField(choices=Sport.choices, default=Sport.SKIING)

    technique = serializers.IntegerField(min_value=1, max_value=5)
    control = serializers.IntegerField(min_value=1, max_value=5)
    confidence = serializers.IntegerField(min_value=1, max_value=5)
    safety = serializers.IntegerField(min_value=1, max_value=5)
    overall = serializers.IntegerField(min_value=1, max_value=5)

    current_level = serializers.ChoiceField(choices=SkillLevel.choices)
    areas_of_focus = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    next_steps = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    strengths = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    areas_for_improvement = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    instructor_notes = serializers.CharField(required=False, allow_blank=True, default='')

    skills_improved = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    new_skills_learned = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    level_up = serializers.BooleanField(required=False, default=False)
    new_level = serializers.ChoiceField(
        choices=SkillLevel.choices, required=False, allow_null=True, default=None
    )

    def validate(self, attrs):
        if attrs.get('level_up') and not attrs.get('new_level'):
            raise serializers.ValidationError({'new_level': 'Required when level_up is set.'})
        return attrs
