"""
Error taxonomy for the analysis relay.

Every error knows the HTTP status it maps to and how to render itself as the
JSON body the client expects, so the route only has to catch ``RelayError``.
"""
from typing import Any, Dict, Optional

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment before trying again."
RATE_LIMIT_DETAILS = "Free tier limit: 20 requests per day. Try again later or upgrade your plan."


class RelayError(Exception):
    """Base class for failures that are reported to the client as JSON."""
    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(RelayError):
    status_code = 400
    message = "Invalid request"


class ServerMisconfigured(RelayError):
    status_code = 500

    def __init__(self, setting: str = "GEMINI_API_KEY"):
        super().__init__(f"Server missing {setting}")


class UpstreamError(RelayError):
    status_code = 502
    message = "Gemini request failed"


class RateLimited(UpstreamError):
    status_code = 429
    message = RATE_LIMIT_MESSAGE

    def __init__(self, message: Optional[str] = None, details: Optional[str] = RATE_LIMIT_DETAILS):
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["isRateLimit"] = True
        return body


class UpstreamEmptyResponse(UpstreamError):
    message = "Gemini returned empty response"


class UpstreamMalformedResponse(UpstreamError):
    message = "Gemini returned non-JSON"

    def __init__(self, raw_text: str):
        super().__init__(details=raw_text)
        self.raw_text = raw_text


class UnexpectedServerError(RelayError):
    status_code = 500
    message = "Server error"


class RelayConnectionError(Exception):
    """The client could not reach the relay at all (network failure, timeout)."""
