"""Exception hierarchy for the SimpleBot Telegram SDK."""

from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError


class APIException(Exception):
    """Raised when the Telegram Bot API rejects a request.

    Covers non-2xx responses as well as 2xx responses whose body carries
    ``"ok": false``.

    Attributes:
        status_code: HTTP status code returned by the API.
        response_body: Raw response body as a dict, when available.
        description: Human-readable reason reported by Telegram.
        error_code: Telegram ``error_code``, falling back to *status_code*.
        retry_after: Seconds to wait before retrying (flood control), if given.
    """

    def __init__(self, status_code: int, response_body: Optional[Dict[str, Any]] = None) -> None:
        self.status_code = status_code
        self.response_body = response_body or {}
        self.description: str = self.response_body.get("description", "Unknown error")
        self.error_code: int = self.response_body.get("error_code", status_code)
        parameters = self.response_body.get("parameters") or {}
        self.retry_after: Optional[int] = parameters.get("retry_after")
        super().__init__(f"API error {self.error_code}: {self.description}")


def classify_error(exc: BaseException) -> str:
    """Return the error kind logged with every failed API call.

    ``platform`` — Telegram rejected the request; ``transport`` — the
    request never completed; ``malformed_response`` — Telegram answered with
    something the models cannot validate; ``internal`` — anything else.
    """
    if isinstance(exc, APIException):
        return "platform"
    if isinstance(exc, requests.RequestException):
        return "transport"
    if isinstance(exc, ValidationError):
        return "malformed_response"
    return "internal"
