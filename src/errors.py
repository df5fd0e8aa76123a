"""
Typed failures for the webhook pipeline.

Each failure knows the HTTP status it maps to, so the handler can turn any
of them into a response without a lookup table.
"""

from typing import Any, Optional


class WebhookError(Exception):
    """Base class for every predictable pipeline failure."""

    status_code = 500
    error_code = "webhook_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ClientProtocolError(WebhookError):
    status_code = 400
    error_code = "client_protocol"


class MethodNotAllowedError(ClientProtocolError):
    status_code = 405
    error_code = "method_not_allowed"


class MissingHeadersError(ClientProtocolError):
    status_code = 401
    error_code = "missing_headers"


class AuthenticationError(WebhookError):
    status_code = 401
    error_code = "invalid_signature"


class UnreadableBodyError(AuthenticationError):
    """Body could not be recovered as bytes, so it cannot be verified."""

    error_code = "unreadable_body"


class ValidationError(WebhookError):
    status_code = 400
    error_code = "validation"


class PhoneNotFoundError(ValidationError):
    error_code = "phone_not_found"


class UnsupportedEventError(ValidationError):
    error_code = "unsupported_event"


class QuotaExhaustedError(WebhookError):
    status_code = 402
    error_code = "quota_exhausted"


class UpstreamError(WebhookError):
    """Credit service, SMS gateway or payload inconsistency failure."""

    status_code = 500
    error_code = "upstream_failure"
    retryable = False


class UpstreamTimeoutError(UpstreamError):
    error_code = "upstream_timeout"
    retryable = True


class DispatchError(UpstreamError):
    error_code = "dispatch_failed"

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result

    @property
    def response(self) -> Any:
        return getattr(self.result, "raw", None)


class PayloadDecodeError(UpstreamError):
    error_code = "payload_decode"
