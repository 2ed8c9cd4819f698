# services/progress-service/src/apps/progress/api/serializers/progress_serializers.py
"""
Progress Serializers

Serializers for student progress and skill history endpoints.
"""

from rest_framework import serializers

from ...models import StudentProgress, SkillHistoryEntry, SkillLevel


class StudentProgressSerializer(serializers.ModelSerializer):
    """Serializer for the progress aggregate."""

    overall_level_display = serializers.CharField(
        source='get_overall_level_display', read_only=True
    )
    overall_level_ordinal = serializers.IntegerField(read_only=True)

    class Meta:
        model = StudentProgress
        fields = [
            'student_id', 'overall_level', 'overall_level_display',
            'overall_level_ordinal', 'total_lessons', 'completed_lessons',
            'skill_state', 'streak_days', 'total_points',
            'last_activity', 'last_updated', 'version', 'created_at',
        ]
        read_only_fields = fields


class SkillHistoryEntrySerializer(serializers.ModelSerializer):
    """Serializer for skill history entries."""

    level_before_label = serializers.SerializerMethodField()
    level_after_label = serializers.SerializerMethodField()
    leveled_up = serializers.BooleanField(read_only=True)

    class Meta:
        model = SkillHistoryEntry
        fields = [
            'id', 'student_id', 'sport',
            'level_before', 'level_before_label',
            'level_after', 'level_after_label', 'leveled_up',
            'progress_percent', 'skills_learned', 'recorded_at',
        ]
        read_only_fields = fields

    def get_level_before_label(self, obj):
        return SkillLevel.from_ordinal(obj.level_before).value

    def get_level_after_label(self, obj):
        return SkillLevel.from_ordinal(obj.level_after).value
