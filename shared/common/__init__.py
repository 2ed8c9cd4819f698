# Shared Common Library for the Ski School Platform
# Shared exception handling, inter-service clients and pagination
# used by the platform's microservices.

__version__ = "1.0.0"

from .exceptions import (
    BaseAPIException,
    NotFoundException,
    ConflictException,
    UnprocessableEntityException,
    ServiceUnavailableException,
    custom_exception_handler,
)

from .clients import (
    CircuitBreaker,
    CircuitBreakerError,
    ServiceNotFoundError,
    UserServiceClient,
    get_user_service_client,
)

__all__ = [
    '__version__',

    # Exceptions
    'BaseAPIException',
    'NotFoundException',
    'ConflictException',
    'UnprocessableEntityException',
    'ServiceUnavailableException',
    'custom_exception_handler',

    # Clients
    'CircuitBreaker',
    'CircuitBreakerError',
    'ServiceNotFoundError',
    'UserServiceClient',
    'get_user_service_client',
]
