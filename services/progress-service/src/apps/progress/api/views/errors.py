# services/progress-service/src/apps/progress/api/views/errors.py
"""
Translation of service errors into API exceptions.
"""

from shared.common.exceptions import (
    BaseAPIException,
    ConflictException,
    EvaluationConflictException,
    MalformedFeedbackException,
    NotFoundException,
    ProgressStorageUnavailableException,
    StudentNotFoundException,
)

from ...services.exceptions import (
    EvaluationConflictError,
    LessonNotFoundError,
    LessonStateError,
    MalformedFeedbackError,
    ProgressServiceError,
    StorageUnavailableError,
    StudentNotFoundError,
)

ERROR_MAP = (
    (StudentNotFoundError, StudentNotFoundException),
    (MalformedFeedbackError, MalformedFeedbackException),
    (LessonNotFoundError, NotFoundException),
    (LessonStateError, ConflictException),
    (EvaluationConflictError, EvaluationConflictException),
    (StorageUnavailableError, ProgressStorageUnavailableException),
)


def to_api_exception(error: ProgressServiceError) -> BaseAPIException:
    """Wrap a service error in the matching API exception."""
    for error_class, api_exception_class in ERROR_MAP:
        if isinstance(error, error_class):
            return api_exception_class(
                detail=error.message,
                error_code=error.code,
                extra_data={'errors': error.details} if error.details else None,
            )
    return BaseAPIException(detail=error.message, error_code=error.code)
