"""Mapping of raw provider failures onto the adapter error taxonomy.

A failure is first described as one of two variants:

- ``HttpFailure``: the provider answered with a non-success status.
- ``TransportFailure``: no status is available (connection refused, timeout, ...).

``classify_error`` and ``classify_playback_error`` then pick exactly one error type
for the variant. Neither function raises; callers raise what they return.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .errors import (
    AuthenticationError,
    MusixError,
    NetworkError,
    NoActiveDeviceError,
    NotFoundError,
    PremiumRequiredError,
    RateLimitError,
    SpotifyApiError,
)

DEFAULT_RETRY_AFTER_SECONDS = 60

_LEADING_INT = re.compile(r"\s*(\d+)")

# OAuth token endpoint errors meaning the credentials themselves were refused
REJECTED_CREDENTIAL_ERRORS = frozenset({"invalid_client", "invalid_grant", "unauthorized_client"})


@dataclass(frozen=True)
class HttpFailure:
    status: int
    message: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransportFailure:
    message: str
    cause: Optional[BaseException] = None


Failure = Union[HttpFailure, TransportFailure]


def _status_of(error: Any) -> Optional[int]:
    # spotipy.SpotifyException exposes http_status; requests errors carry a response
    for attr in ("http_status", "status", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def _headers_of(error: Any) -> Dict[str, str]:
    headers = getattr(error, "headers", None)
    if not isinstance(headers, Mapping):
        headers = getattr(getattr(error, "response", None), "headers", None)
    if not isinstance(headers, Mapping):
        return {}
    return {str(key).lower(): value for key, value in headers.items()}


def _message_of(error: BaseException) -> str:
    msg = getattr(error, "msg", None)
    if isinstance(msg, str) and msg:
        return msg
    return str(error)


def describe_failure(error: object) -> Failure:
    """Describe a caught failure as an HTTP or transport failure."""
    if not isinstance(error, BaseException):
        return TransportFailure(message=str(error))

    # spotipy.oauth2.SpotifyOauthError carries the token endpoint error code, not a status
    oauth_error = getattr(error, "error", None)
    if isinstance(oauth_error, str) and oauth_error in REJECTED_CREDENTIAL_ERRORS:
        return HttpFailure(status=401, message=_message_of(error))

    status = _status_of(error)
    if status is None:
        return TransportFailure(message=_message_of(error), cause=error)
    return HttpFailure(status=status, message=_message_of(error), headers=_headers_of(error))


def status_of(error: object) -> Optional[int]:
    """HTTP status carried by a failure, or None."""
    failure = describe_failure(error)
    return failure.status if isinstance(failure, HttpFailure) else None


def parse_retry_after(headers: Mapping[str, str]) -> int:
    """Seconds to wait from a ``retry-after`` header, defaulting to 60."""
    value = headers.get("retry-after")
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    match = _LEADING_INT.match(str(value))
    if not match:
        return DEFAULT_RETRY_AFTER_SECONDS
    return int(match.group(1))


def classify_error(error: object, resource_type: str, resource_id: str) -> MusixError:
    """Pick the adapter error for a failure raised while operating on a resource."""
    failure = error if isinstance(error, (HttpFailure, TransportFailure)) else describe_failure(error)

    if isinstance(failure, HttpFailure):
        if failure.status == 401:
            return AuthenticationError("Invalid client credentials")
        if failure.status == 404:
            return NotFoundError(resource_type, resource_id)
        if failure.status == 429:
            return RateLimitError(parse_retry_after(failure.headers))
        return SpotifyApiError(failure.status, failure.message or "Unknown error")

    return NetworkError(failure.message, cause=failure.cause)


def classify_playback_error(error: object, resource_type: str, resource_id: str) -> MusixError:
    """Like ``classify_error``, but 403 and 404 mean tier and device problems."""
    failure = error if isinstance(error, (HttpFailure, TransportFailure)) else describe_failure(error)

    if isinstance(failure, HttpFailure):
        if failure.status == 403:
            return PremiumRequiredError()
        if failure.status == 404:
            return NoActiveDeviceError()
    return classify_error(failure, resource_type, resource_id)
