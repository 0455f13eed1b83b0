"""
Error types and error-document normalization shared by the REST clients.
"""

import json
from typing import Any, Dict, Optional

import httpx


class ArgumentValidationError(ValueError):
    """Caller supplied an argument that cannot be sent downstream"""

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class RemoteRequestError(Exception):
    """A downstream REST call returned a non-success status"""

    def __init__(self, operation: str, status_code: int, reason: str, body: str):
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(
            f"{operation} failed with status {status_code}: {reason}. Body: {body}"
        )


def build_error_envelope(status_code: int, reason: str, details: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": status_code,
            "message": reason,
            "details": details,
        }
    }


def _has_error_shape(document: Any) -> bool:
    if not isinstance(document, dict):
        return False
    error = document.get("error")
    return isinstance(error, dict) and "code" in error and "message" in error


def normalize_error_response(response: httpx.Response) -> Dict[str, Any]:
    """
    Turn a non-success response into an error document.

    A body that already carries ``{"error": {"code", "message"}}`` is passed
    through unchanged. Anything else (empty, non-JSON, or JSON of another
    shape) is wrapped so callers can always rely on ``error.code`` and
    ``error.message``.
    """
    body = response.text
    if body and body.strip():
        try:
            document = json.loads(body)
        except ValueError:
            document = None
        if _has_error_shape(document):
            return document

    return build_error_envelope(response.status_code, response.reason_phrase, body)
