"""Domain errors shared by the services and mapped to HTTP responses in main."""
import math
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for every error this service raises on purpose."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {k: v for k, v in (details or {}).items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


def _cause_details(cause: Optional[BaseException]) -> Dict[str, Any]:
    if cause is None:
        return {}
    return {"original_name": type(cause).__name__, "original_message": str(cause)}


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        # NaN and infinity are not valid JSON
        shown = str(value) if isinstance(value, float) and not math.isfinite(value) else value
        super().__init__(message, {"field": field, "value": shown})
        self.field = field
        self.value = value

    @classmethod
    def invalid_input(cls, field: str, value: Any, reason: str) -> "ValidationError":
        return cls(f"Invalid {field}: {reason}", field=field, value=value)


class ProviderError(AppError):
    """The forecast provider failed or answered with something unusable."""

    status_code = 502
    code = "WEATHER_API_ERROR"

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        field: Optional[str] = None,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        details = {"endpoint": endpoint, "field": field, "status": status, **_cause_details(cause)}
        super().__init__(message, details)
        self.endpoint = endpoint
        self.field = field
        self.status = status
        self.cause = cause

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "ProviderError":
        return cls(f"Open-Meteo request timed out after {timeout_seconds}s", endpoint=endpoint)

    @classmethod
    def network_error(cls, endpoint: str, cause: BaseException) -> "ProviderError":
        return cls("Unable to connect to Open-Meteo", endpoint=endpoint, cause=cause)

    @classmethod
    def api_error(cls, endpoint: str, status: int, reason: str) -> "ProviderError":
        return cls(f"Open-Meteo returned error {status}: {reason}", endpoint=endpoint, status=status)

    @classmethod
    def malformed_response(
        cls, reason: str, *, field: Optional[str] = None, endpoint: Optional[str] = None
    ) -> "ProviderError":
        return cls(f"Open-Meteo returned malformed response: {reason}", endpoint=endpoint, field=field)


class CacheError(AppError):
    status_code = 500
    code = "CACHE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        cache_key: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, {"operation": operation, "cache_key": cache_key, **_cause_details(cause)})
        self.operation = operation
        self.cache_key = cache_key
        self.cause = cause


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Any = None):
        super().__init__(message, {"resource_type": resource_type, "resource_id": resource_id})
        self.resource_type = resource_type
        self.resource_id = resource_id

    @classmethod
    def city(cls, query: str) -> "NotFoundError":
        return cls(f"City not found: {query!r}", resource_type="city", resource_id=query)
