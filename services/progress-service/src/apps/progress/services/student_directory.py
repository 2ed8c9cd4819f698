# services/progress-service/src/apps/progress/services/student_directory.py
"""
Student Directory

Student lookups against the user service.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from django.conf import settings

from shared.common.clients import (
    CircuitBreakerError,
    ServiceNotFoundError,
    get_user_service_client,
)
from .exceptions import StudentNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class StudentProfile:
    """What the engine needs to know about a student."""
    student_id: str
    avatar_url: Optional[str] = None
    lookup_failed: bool = False

    @property
    def has_custom_avatar(self) -> bool:
        default_avatar = settings.PROGRESS_DEFAULT_AVATAR_URL
        return bool(self.avatar_url) and self.avatar_url != default_avatar


class StudentDirectory:
    """
    Resolves students through the user service.

    A student the user service does not know is an input error. Any
    other failure leaves the profile unknown so evaluation can go on
    without the profile-dependent criteria.
    """

    def __init__(self, client=None):
        self.client = client or get_user_service_client()

    def get_profile(self, student_id: str) -> StudentProfile:
        """
        Fetch the student profile.

        Raises:
            StudentNotFoundError: If the user service has no such student
        """
        try:
            payload = self.client.get_user(str(student_id))
        except ServiceNotFoundError:
            raise StudentNotFoundError(student_id)
        except (CircuitBreakerError, httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"User lookup failed for student {student_id}: {e}",
                extra={'student_id': str(student_id)}
            )
            return StudentProfile(student_id=str(student_id), lookup_failed=True)

        user = payload.get('data', payload) if isinstance(payload, dict) else {}
        return StudentProfile(
            student_id=str(student_id),
            avatar_url=user.get('avatar_url'),
        )
