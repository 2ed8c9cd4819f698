# services/progress-service/src/apps/progress/api/views/lesson_views.py
"""
Lesson and Feedback Views

Trigger endpoints used by the booking workflow. Progress evaluation
runs asynchronously after these writes commit.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from ...services import FeedbackService, LessonService, ProgressServiceError
from ..serializers import FeedbackSubmitSerializer, LessonFeedbackSerializer, LessonSerializer
from .errors import to_api_exception

logger = logging.getLogger(__name__)


class LessonViewSet(viewsets.ViewSet):
    """
    ViewSet for lesson status transitions.

    Endpoints:
    - POST /lessons/{lesson_id}/complete/ - Mark lesson completed
    """

    permission_classes = [IsAuthenticated]

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Mark a lesson completed and queue evaluations for its students."""
        try:
            lesson = LessonService.complete_lesson(pk)
        except ProgressServiceError as e:
            raise to_api_exception(e)

        return Response(LessonSerializer(lesson).data)


class FeedbackViewSet(viewsets.ViewSet):
    """
    ViewSet for instructor feedback.

    Endpoints:
    - POST /feedback/ - Submit feedback
    """

    permission_classes = [IsAuthenticated]

    def create(self, request):
        """Submit feedback for a student."""
        serializer = FeedbackSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            feedback = FeedbackService.submit_feedback(serializer.validated_data)
        except ProgressServiceError as e:
            raise to_api_exception(e)

        return Response(
            LessonFeedbackSerializer(feedback).data,
            status=status.HTTP_201_CREATED
        )
