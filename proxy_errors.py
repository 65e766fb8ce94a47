"""
Error taxonomy shared by the proxy core and the Flask dispatcher.
Every failure is reported to the client as the same JSON envelope.
"""
from datetime import datetime, timezone


class ProxyServiceError(Exception):
    """Base class; carries the HTTP status and the envelope `error` string."""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, details=None):
        super().__init__(details or self.message)
        self.details = details

    def to_envelope(self):
        return error_envelope(self.message, self.status_code, self.details)


class BadRequest(ProxyServiceError):
    status_code = 400
    message = "Bad Request"


class ProxyError(ProxyServiceError):
    status_code = 502
    message = "Proxy Error"


class NotFound(ProxyServiceError):
    status_code = 404
    message = "Not Found"


class InternalError(ProxyServiceError):
    status_code = 500
    message = "Internal Server Error"


def utc_timestamp():
    """ISO8601 timestamp in UTC with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


def error_envelope(message, code, details=None):
    """Build the {error, code, timestamp, details?} body used by every error response."""
    envelope = {
        "error": message,
        "code": code,
        "timestamp": utc_timestamp(),
    }
    if details:
        envelope["details"] = details
    return envelope
