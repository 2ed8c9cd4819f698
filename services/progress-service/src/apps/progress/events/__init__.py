# services/progress-service/src/apps/progress/events/__init__.py
"""
Progress Service Events

Domain events emitted after progress commits.
"""

from .publishers import (
    get_publisher,
    publish_achievement_unlocked,
    publish_progress_updated,
)

__all__ = [
    'get_publisher',
    'publish_achievement_unlocked',
    'publish_progress_updated',
]
