# services/progress-service/src/apps/progress/events/publishers.py
"""
Event Publishers

Progress events are emitted as structured log records; downstream
consumers tail the service log stream.
"""

import json
import logging
from typing import Dict, Any
from uuid import UUID

from django.utils import timezone

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Event publisher for progress service.
    """

    def __init__(self):
        self.service = 'progress-service'

    def publish(self, event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Publish an event.

        Args:
            event_type: Dotted event name
            data: Event payload

        Returns:
            The published event envelope
        """
        event = json.loads(json.dumps({
            'event_type': event_type,
            'timestamp': timezone.now().isoformat(),
            'service': self.service,
            'data': data,
        }, default=str))

        logger.info(f"Publishing event: {event_type}", extra={'event': event})
        return event


_publisher = EventPublisher()


def get_publisher() -> EventPublisher:
    """Get the global event publisher instance."""
    return _publisher


# =============================================================================
# Progress Events
# =============================================================================

def publish_achievement_unlocked(
    student_id: UUID,
    definition_id: str,
    definition_name: str,
    category: str,
    points: int
) -> Dict[str, Any]:
    return get_publisher().publish(
        event_type='progress.achievement.unlocked',
        data={
            'student_id': student_id,
            'definition_id': definition_id,
            'definition_name': definition_name,
            'category': category,
            'points': points,
        }
    )


def publish_progress_updated(
    student_id: UUID,
    overall_level: str,
    completed_lessons: int,
    streak_days: int,
    total_points: int,
    version: int
) -> Dict[str, Any]:
    """
    Publish progress updated event.

    Args:
        student_id: Student UUID
        overall_level: Overall skill level label
        completed_lessons: Completed lesson count
        streak_days: Current streak
        total_points: Achievement points
        version: Committed progress version

    Returns:
        The published event envelope
    """
    return get_publisher().publish(
        event_type='progress.updated',
        data={
            'student_id': student_id,
            'overall_level': overall_level,
            'completed_lessons': completed_lessons,
            'streak_days': streak_days,
            'total_points': total_points,
            'version': version,
        }
    )
