# services/progress-service/src/apps/progress/api/serializers/achievement_serializers.py
"""
Achievement Serializers
"""

from rest_framework import serializers

from ...models import AchievementUnlock


class AchievementUnlockSerializer(serializers.ModelSerializer):
    """Serializer for unlocked achievements."""

    class Meta:
        model = AchievementUnlock
        fields = [
            'id', 'student_id', 'definition_id', 'definition_name',
            'description', 'icon', 'category', 'rarity', 'points',
            'unlocked_at',
        ]
        read_only_fields = fields


class AchievementDefinitionSerializer(serializers.Serializer):
    """Serializer for catalog entries."""

    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    icon = serializers.CharField()
    category = serializers.CharField()
    rarity = serializers.CharField()
    points = serializers.IntegerField()
    criteria = serializers.SerializerMethodField()

    def get_criteria(self, obj):
        return {
            'type': obj.criteria.type,
            'comparator': obj.criteria.comparator,
            'threshold': obj.criteria.threshold,
        }


class AchievementStatsSerializer(serializers.Serializer):
    """Serializer for per-student achievement statistics."""

    total_achievements = serializers.IntegerField()
    total_points = serializers.IntegerField()
    by_category = serializers.DictField(child=serializers.IntegerField())
    by_rarity = serializers.DictField(child=serializers.IntegerField())
    recent_achievements = AchievementUnlockSerializer(many=True)


class AchievementCatalogSerializer(serializers.Serializer):
    unlocked = AchievementUnlockSerializer(many=True)
    locked = AchievementDefinitionSerializer(many=True)
