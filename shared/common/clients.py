# shared/common/clients.py
"""
Service Clients for Inter-Service Communication

Synchronous clients, safe to call from Celery workers and request threads.
Every call is bounded by an httpx timeout and guarded by a circuit breaker.
"""

import time
import logging
from typing import Dict, Any, Optional

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# CIRCUIT BREAKER
# =============================================================================

class CircuitBreakerError(Exception):
    """Exception raised when circuit breaker is open"""
    pass


class ServiceNotFoundError(Exception):
    """The remote service answered 404 for the requested resource"""

    def __init__(self, service_name: str, path: str):
        self.service_name = service_name
        self.path = path
        super().__init__(f"{service_name} returned 404 for {path}")


class CircuitBreaker:
    """
    Circuit breaker that stops calling a failing service for `timeout` seconds.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        timeout: int = 30
    ):
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.timeout = timeout
        self.failure_count = 0
        self.success_count = 0
        self.state = 'closed'  # closed, open, half_open
        self.last_failure_time = None

    def _should_try_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.timeout

    def record_success(self):
        if self.state == 'half_open':
            self.success_count += 1
            if self.success_count >= self.success_threshold:
                self._reset()
        elif self.state == 'closed':
            self.failure_count = 0

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == 'half_open' or self.failure_count >= self.failure_threshold:
            self.state = 'open'
            self.success_count = 0
            logger.warning(f"Circuit breaker opened after {self.failure_count} failures")

    def _reset(self):
        self.state = 'closed'
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time = None
        logger.info("Circuit breaker reset to closed state")

    def can_execute(self) -> bool:
        if self.state == 'closed':
            return True
        if self.state == 'open':
            if self._should_try_reset():
                self.state = 'half_open'
                return True
            return False
        return True  # half_open


# =============================================================================
# BASE SERVICE CLIENT
# =============================================================================

class BaseServiceClient:
    """
    Base class for service-to-service HTTP communication.
    """

    def __init__(self, service_name: str, base_url: str = None, timeout: float = None):
        self.service_name = service_name
        self.base_url = base_url or self._get_service_url(service_name)
        request_timeout = timeout or getattr(settings, 'SERVICE_REQUEST_TIMEOUT', 5.0)
        self.timeout = httpx.Timeout(request_timeout, connect=min(request_timeout, 2.0))
        self.auth_token = getattr(settings, 'SERVICE_AUTH_TOKEN', '')
        self.circuit_breaker = CircuitBreaker()

    def _get_service_url(self, service_name: str) -> str:
        """Get service URL from settings"""
        service_urls = getattr(settings, 'SERVICE_URLS', {})
        return service_urls.get(service_name, f'http://{service_name}:8000')

    def _get_headers(self, extra_headers: Dict = None) -> Dict:
        """Build request headers"""
        headers = {
            'Accept': 'application/json',
            'X-Service-Auth': self.auth_token,
            'X-Source-Service': getattr(settings, 'SERVICE_NAME', 'unknown'),
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Dict = None,
        headers: Dict = None
    ) -> Dict[str, Any]:
        """Make HTTP request to service"""
        if not self.circuit_breaker.can_execute():
            raise CircuitBreakerError(f"Circuit breaker open for {self.service_name}")

        url = f"{self.base_url}{path}"

        with httpx.Client(timeout=self.timeout) as client:
            try:
                response = client.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=self._get_headers(headers)
                )
                if response.status_code == 404:
                    # A missing resource is an answer, not a service failure
                    self.circuit_breaker.record_success()
                    raise ServiceNotFoundError(self.service_name, path)
                response.raise_for_status()
                self.circuit_breaker.record_success()
                return response.json()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"HTTP error calling {self.service_name}: {e.response.status_code}",
                    extra={'url': url, 'status_code': e.response.status_code}
                )
                if e.response.status_code >= 500:
                    self.circuit_breaker.record_failure()
                raise
            except httpx.RequestError as e:
                logger.error(f"Request error calling {self.service_name}: {e}")
                self.circuit_breaker.record_failure()
                raise

    def get(self, path: str, params: Dict = None, headers: Dict = None) -> Dict[str, Any]:
        return self._request('GET', path, params=params, headers=headers)


# =============================================================================
# SPECIFIC SERVICE CLIENTS
# =============================================================================

class UserServiceClient(BaseServiceClient):
    """Client for User Service"""

    def __init__(self, base_url: str = None):
        super().__init__('user-service', base_url=base_url)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        return self.get(f'/api/v1/users/{user_id}/')


_user_service_client: Optional[UserServiceClient] = None


def get_user_service_client() -> UserServiceClient:
    """Return the process-wide user service client (one circuit breaker per process)."""
    global _user_service_client
    if _user_service_client is None:
        _user_service_client = UserServiceClient()
    return _user_service_client
