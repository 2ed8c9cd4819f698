# services/progress-service/src/apps/progress/api/views/progress_views.py
"""
Progress Views

API ViewSet for student progress, skill history and achievements.
"""

import uuid
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters import rest_framework as filters

from shared.common.exceptions import NotFoundException, StudentNotFoundException
from shared.common.pagination import AuditTrailPagination, StandardPagination

from ...models import AchievementCategory, AchievementRarity, AchievementUnlock, SkillHistoryEntry, StudentProgress
from ...services import AchievementService, EvaluationService, ProgressServiceError
from ..serializers import (
    AchievementCatalogSerializer,
    AchievementStatsSerializer,
    AchievementUnlockSerializer,
    SkillHistoryEntrySerializer,
    StudentProgressSerializer,
)
from .errors import to_api_exception

logger = logging.getLogger(__name__)


class AchievementUnlockFilter(filters.FilterSet):
    """Filter for unlocked achievements."""

    category = filters.ChoiceFilter(choices=AchievementCategory.choices)
    rarity = filters.ChoiceFilter(choices=AchievementRarity.choices)

    class Meta:
        model = AchievementUnlock
        fields = ['category', 'rarity']


class StudentProgressViewSet(viewsets.ViewSet):
    """
    ViewSet for student progress.

    Endpoints:
    - GET /students/{student_id}/ - Progress state
    - GET /students/{student_id}/history/ - Skill history, newest first
    - GET /students/{student_id}/achievements/ - Unlocked achievements
    - GET /students/{student_id}/achievements/stats/ - Achievement statistics
    - GET /students/{student_id}/achievements/catalog/ - Unlocked and locked achievements
    - POST /students/{student_id}/evaluate/ - Evaluate now
    """

    permission_classes = [IsAuthenticated]
    lookup_field = 'student_id'
    lookup_value_regex = '[^/]+'

    def retrieve(self, request, student_id=None):
        """Get progress state."""
        student_uuid = self._parse_student_id(student_id)

        progress = StudentProgress.objects.filter(student_id=student_uuid).first()
        if progress is None:
            raise NotFoundException(
                detail=f"No progress recorded for student {student_uuid}",
                error_code='PROGRESS_NOT_FOUND'
            )

        return Response(StudentProgressSerializer(progress).data)

    @action(detail=True, methods=['get'])
    def history(self, request, student_id=None):
        """Get skill history, newest first."""
        student_uuid = self._parse_student_id(student_id)
        queryset = SkillHistoryEntry.objects.filter(student_id=student_uuid)

        paginator = AuditTrailPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = SkillHistoryEntrySerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @action(detail=True, methods=['get'])
    def achievements(self, request, student_id=None):
        """Get unlocked achievements, optionally filtered by category or rarity."""
        student_uuid = self._parse_student_id(student_id)
        queryset = AchievementService.get_student_achievements(student_uuid)
        queryset = AchievementUnlockFilter(request.query_params, queryset=queryset).qs

        paginator = StandardPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = AchievementUnlockSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @action(detail=True, methods=['get'], url_path='achievements/stats')
    def achievement_stats(self, request, student_id=None):
        """Get achievement statistics."""
        student_uuid = self._parse_student_id(student_id)
        stats = AchievementService.get_achievement_stats(student_uuid)
        return Response(AchievementStatsSerializer(stats).data)

    @action(detail=True, methods=['get'], url_path='achievements/catalog')
    def achievement_catalog(self, request, student_id=None):
        """Get the catalog split into unlocked and locked achievements."""
        student_uuid = self._parse_student_id(student_id)
        catalog = AchievementService.get_all_achievements(student_uuid)
        return Response(AchievementCatalogSerializer(catalog).data)

    @action(detail=True, methods=['post'])
    def evaluate(self, request, student_id=None):
        """Re-evaluate progress and achievements synchronously."""
        student_uuid = self._parse_student_id(student_id)

        try:
            unlocks = EvaluationService().on_student_activity(student_uuid)
        except ProgressServiceError as e:
            raise to_api_exception(e)

        progress = StudentProgress.objects.get(student_id=student_uuid)
        return Response(
            {
                'progress': StudentProgressSerializer(progress).data,
                'new_achievements': AchievementUnlockSerializer(unlocks, many=True).data,
            },
            status=status.HTTP_200_OK
        )

    @staticmethod
    def _parse_student_id(student_id) -> uuid.UUID:
        try:
            return uuid.UUID(str(student_id))
        except ValueError:
            raise StudentNotFoundException(detail=f"Invalid student id: {student_id}")
