# services/progress-service/src/apps/progress/services/exceptions.py
"""
Progress Service Exceptions

Input errors reject the triggering call without touching state.
Retryable errors mean the caller may re-run the evaluation later.
"""

from typing import Optional, Dict, Any


class ProgressServiceError(Exception):
    """Base exception for progress service errors."""

    def __init__(
        self,
        message: str,
        code: str = "PROGRESS_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# INPUT ERRORS
# =============================================================================

class StudentNotFoundError(ProgressServiceError):
    """Raised when the student id is invalid or unknown to the user directory."""

    def __init__(self, student_id: str = None, message: str = None):
        super().__init__(
            message=message or f"Student not found: {student_id}",
            code="STUDENT_NOT_FOUND",
            details={"student_id": str(student_id) if student_id is not None else None}
        )


class MalformedFeedbackError(ProgressServiceError):
    """Raised when a feedback record cannot be interpreted."""

    def __init__(
        self,
        message: str,
        feedback_id: str = None,
        field: str = None
    ):
        details = {}
        if feedback_id:
            details["feedback_id"] = str(feedback_id)
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            code="MALFORMED_FEEDBACK",
            details=details
        )


class LessonNotFoundError(ProgressServiceError):
    """Raised when a lesson is not found."""

    def __init__(self, lesson_id: str = None):
        super().__init__(
            message=f"Lesson not found: {lesson_id}",
            code="LESSON_NOT_FOUND",
            details={"lesson_id": str(lesson_id)}
        )


class LessonStateError(ProgressServiceError):
    """Raised when a lesson status transition is invalid."""

    def __init__(self, current_state: str, target_state: str):
        super().__init__(
            message=f"Cannot transition lesson from {current_state} to {target_state}",
            code="INVALID_LESSON_STATE",
            details={"current_state": current_state, "target_state": target_state}
        )


# =============================================================================
# RETRYABLE ERRORS
# =============================================================================

class RetryableEvaluationError(ProgressServiceError):
    """Evaluation did not complete; re-running it later is safe."""


class EvaluationConflictError(RetryableEvaluationError):
    """Raised when concurrent evaluations of one student keep colliding."""

    def __init__(self, student_id: str, message: str = None):
        super().__init__(
            message=message or f"Concurrent progress update for student {student_id}",
            code="EVALUATION_CONFLICT",
            details={"student_id": str(student_id)}
        )


class StorageUnavailableError(RetryableEvaluationError):
    """Raised when progress storage stays unreachable after retries."""

    def __init__(self, student_id: str, message: str = None):
        super().__init__(
            message=message or f"Progress storage unavailable for student {student_id}",
            code="PROGRESS_STORAGE_UNAVAILABLE",
            details={"student_id": str(student_id)}
        )


# =============================================================================
# INTERNAL ERRORS
# =============================================================================

class ProgressConflictError(ProgressServiceError):
    """A conditional write lost against another writer."""

    def __init__(self, student_id: str, expected_version: Optional[int]):
        super().__init__(
            message=f"Progress for student {student_id} changed since version {expected_version}",
            code="PROGRESS_VERSION_CONFLICT",
            details={"student_id": str(student_id), "expected_version": expected_version}
        )


class TransientStorageError(ProgressServiceError):
    """The database refused or dropped a write that may succeed if retried."""

    def __init__(self, student_id: str, message: str = None):
        super().__init__(
            message=message or f"Transient storage failure for student {student_id}",
            code="TRANSIENT_STORAGE_ERROR",
            details={"student_id": str(student_id)}
        )


class CriterionEvaluationError(ProgressServiceError):
    """One achievement criterion could not be evaluated."""

    def __init__(self, definition_id: str, message: str):
        super().__init__(
            message=message,
            code="CRITERION_EVALUATION_ERROR",
            details={"definition_id": definition_id}
        )
