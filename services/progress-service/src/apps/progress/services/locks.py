# services/progress-service/src/apps/progress/services/locks.py
"""
Per-student evaluation lock.

On django-redis the lock is a redis-py Lock: acquired with SET NX and
released by a token-checked script. Local caches fall back to the
atomic cache add. Keys expire so a crashed worker cannot hold a
student forever.
"""

import time
import uuid
import logging
from contextlib import contextmanager

from django.conf import settings
from django.core.cache import cache
from redis.exceptions import LockError

from .exceptions import EvaluationConflictError

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = 'progress:lock'
POLL_INTERVAL_SECONDS = 0.05


def lock_key(student_id) -> str:
    return f"{LOCK_KEY_PREFIX}:{student_id}"


def _lock_timed_out(student_id, wait_seconds: float) -> EvaluationConflictError:
    logger.warning(
        f"Timed out waiting for progress lock of student {student_id}",
        extra={'student_id': str(student_id), 'wait_seconds': wait_seconds}
    )
    return EvaluationConflictError(
        student_id,
        message=f"Progress for student {student_id} is being evaluated elsewhere"
    )


@contextmanager
def student_lock(student_id, wait_seconds: float = None, timeout_seconds: int = None):
    """
    Serialize work for one student.

    Raises:
        EvaluationConflictError: If the lock is not acquired in time
    """
    wait_seconds = settings.PROGRESS_LOCK_WAIT_SECONDS if wait_seconds is None else wait_seconds
    timeout_seconds = timeout_seconds or settings.PROGRESS_LOCK_TIMEOUT_SECONDS
    key = lock_key(student_id)

    if hasattr(cache, 'lock'):
        with _redis_lock(student_id, key, wait_seconds, timeout_seconds):
            yield
    else:
        with _cache_add_lock(student_id, key, wait_seconds, timeout_seconds):
            yield


@contextmanager
def _redis_lock(student_id, key: str, wait_seconds: float, timeout_seconds: int):
    lock = cache.lock(
        key,
        timeout=timeout_seconds,
        sleep=POLL_INTERVAL_SECONDS,
        blocking_timeout=wait_seconds,
    )
    if not lock.acquire():
        raise _lock_timed_out(student_id, wait_seconds)

    try:
        yield
    finally:
        try:
            lock.release()
        except LockError as e:
            logger.warning(
                f"Progress lock of student {student_id} expired before release: {e}",
                extra={'student_id': str(student_id)}
            )


@contextmanager
def _cache_add_lock(student_id, key: str, wait_seconds: float, timeout_seconds: int):
    token = uuid.uuid4().hex
    deadline = time.monotonic() + wait_seconds

    while not cache.add(key, token, timeout=timeout_seconds):
        if time.monotonic() >= deadline:
            raise _lock_timed_out(student_id, wait_seconds)
        time.sleep(POLL_INTERVAL_SECONDS)

    try:
        yield
    finally:
        # An expired lock may already belong to another worker
        if cache.get(key) == token:
            cache.delete(key)
