"""Exception hierarchy for Google Cloud API client errors.

Every failure surfaced by the client layer derives from ``APIClientError`` and
carries an ``is_retryable`` flag consulted by
``NetworkErrorHandler.retry_with_backoff``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_retryable: bool = False


class AuthError(APIClientError):
    """Credential could not be obtained or refreshed."""

    pass


class TransportError(APIClientError):
    """Network-level failure before an HTTP status was received."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        self.is_retryable = True


class NetworkConnectionError(TransportError):
    """Connection could not be established or was dropped."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        # A refused connection means nothing is listening; retrying won't help.
        self.is_retryable = "connection refused" not in message.lower()


class DNSResolutionError(TransportError):
    pass


class SSLCertificateError(TransportError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.is_retryable = False


class NetworkTimeoutError(TransportError):
    pass


class RedirectLoopError(TransportError):
    """Redirect chain exceeded the client limit."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.is_retryable = False


class UrlParseError(APIClientError):
    """Target URL is malformed; raised before any token or network work."""

    def __init__(self, url: str, reason: str = "invalid URL"):
        super().__init__(f"Cannot parse URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


@dataclass
class GoogleErrorStatus:
    """The ``error`` object of a Google JSON error envelope."""

    code: Optional[int] = None
    message: str = ""
    status: str = ""
    details: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: str) -> Optional["GoogleErrorStatus"]:
        """Parse ``{"error": {...}}``; returns None for any other body."""
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, TypeError):
            return None
        if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
            return None
        error = data["error"]
        code = error.get("code")
        details = error.get("details")
        return cls(
            code=code if isinstance(code, int) else None,
            message=str(error.get("message", "")),
            status=str(error.get("status", "")),
            details=details if isinstance(details, list) else [],
        )


class HttpStatusError(APIClientError):
    """Remote returned a non-2xx status. ``body`` is the response text verbatim."""

    def __init__(
        self,
        status_code: int,
        body: str,
        reason: str = "",
        method: str = "",
        url: str = "",
        error_status: Optional[GoogleErrorStatus] = None,
    ):
        detail = error_status.message if error_status and error_status.message else ""
        message = f"{method} {url} returned HTTP {status_code}"
        if reason:
            message += f" {reason}"
        if detail:
            message += f": {detail}"
        super().__init__(message.strip(), status_code)
        self.body = body
        self.reason = reason
        self.method = method
        self.url = url
        self.error_status = error_status
        self.is_retryable = status_code == 429 or 500 <= status_code < 600

    @classmethod
    def from_response(cls, response) -> "HttpStatusError":
        """Build from an ``httpx.Response`` without consuming more than its text."""
        body = response.text
        try:
            request = response.request
            method, url = request.method, str(request.url)
        except RuntimeError:
            # Response built without a request (tests, replayed fixtures).
            method, url = "", ""
        return cls(
            status_code=response.status_code,
            body=body,
            reason=response.reason_phrase or "",
            method=method,
            url=url,
            error_status=GoogleErrorStatus.from_body(body),
        )


class ResponseDecodeError(APIClientError):
    """2xx body did not match the expected schema."""

    def __init__(self, cause: BaseException, body: str, target: str = ""):
        what = f" as {target}" if target else ""
        super().__init__(f"Failed to decode response{what}: {cause}")
        self.cause = cause
        self.body = body
        self.target = target


class OperationTimeout(APIClientError):
    """Operation was still running when the poll budget ran out."""

    def __init__(self, operation_name: str, attempts: int):
        super().__init__(
            f"Operation {operation_name} not done after {attempts} attempts"
        )
        self.operation_name = operation_name
        self.attempts = attempts


class OperationCancelled(APIClientError):
    def __init__(self, operation_name: str, attempts: int):
        super().__init__(
            f"Polling of operation {operation_name} cancelled after {attempts} attempts"
        )
        self.operation_name = operation_name
        self.attempts = attempts
