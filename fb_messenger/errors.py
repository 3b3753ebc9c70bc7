"""
Messenger client error types.

The client raises only for failures on its own side (encoding, transport).
Graph API error bodies are never turned into exceptions by the client; callers
opt in with GraphAPIError.from_response() or raise_for_api_error().
"""

from typing import Any, Optional

import httpx


class MessengerError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class PayloadEncodingError(MessengerError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("encoding_error", message, details)


class TransportError(MessengerError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("transport_error", message, details)


class GraphAPIError(MessengerError):
    """Decoded `{"error": {...}}` body of a failed Graph API call."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: Optional[str] = None,
        error_code: Optional[int] = None,
        error_subcode: Optional[int] = None,
        fbtrace_id: Optional[str] = None,
    ):
        super().__init__(
            "graph_api_error",
            message,
            {
                "status_code": status_code,
                "type": error_type,
                "code": error_code,
                "error_subcode": error_subcode,
                "fbtrace_id": fbtrace_id,
            },
        )
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code
        self.error_subcode = error_subcode
        self.fbtrace_id = fbtrace_id

    @classmethod
    def from_response(cls, response: httpx.Response) -> Optional["GraphAPIError"]:
        """Build from a non-2xx response, or None if it succeeded or has no error body."""
        if response.is_success:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return None
        return cls(
            message=str(error.get("message", f"HTTP {response.status_code}")),
            status_code=response.status_code,
            error_type=error.get("type"),
            error_code=error.get("code"),
            error_subcode=error.get("error_subcode"),
            fbtrace_id=error.get("fbtrace_id"),
        )


def raise_for_api_error(response: httpx.Response) -> httpx.Response:
    """Raise GraphAPIError for a failed response carrying an error body."""
    error = GraphAPIError.from_response(response)
    if error is not None:
        raise error
    return response
