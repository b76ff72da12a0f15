"""Error hierarchy for ERP API failures.

Splits failures into transient (may succeed on retry) and permanent (won't),
so tenacity decorators can classify them, and so callers can tell a missing
period apart from a rejected update.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def login(api, email, password):
        ...
"""


class ErpApiError(Exception):
    """Base exception for all ERP API errors.

    Attributes:
        status_code: HTTP status returned by the backend, if any.
        message: Server-provided message (``{"message": ...}`` body), if any.
    """

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.message = message


class TransientError(ErpApiError):
    """Temporary failure that may succeed on retry.

    Examples: connection refused, timeouts, 502/503 from the backend.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429) - needs longer backoff."""

    pass


class PermanentError(ErpApiError):
    """Failure that won't succeed on retry.

    Examples: malformed response body, unexpected 4xx.
    """

    pass


class AuthenticationError(PermanentError):
    """Missing, expired or rejected bearer token (HTTP 401/403)."""

    pass


class NotFoundError(PermanentError):
    """Requested resource does not exist (HTTP 404)."""

    pass


class ValidationError(PermanentError):
    """Backend rejected the request payload (HTTP 400/422)."""

    pass
