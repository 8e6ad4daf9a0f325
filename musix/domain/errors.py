from typing import Optional


class MusixError(Exception):
    """Base class for every error surfaced by the adapters."""


class AuthenticationError(MusixError):
    """Credentials were rejected, even after clearing the cached token and retrying."""


class NotFoundError(MusixError):
    """Requested resource was not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(f"{resource_type} not found: {resource_id}")
        self.resource_type = resource_type
        self.resource_id = resource_id


class RateLimitError(MusixError):
    """Operation was rate limited by the provider. ``retry_after`` is in seconds."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds")
        self.retry_after = retry_after


class NetworkError(MusixError):
    """Failure without an HTTP status: connection refused, timeout, DNS."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Network error: {message}")
        self.cause = cause


class SpotifyApiError(MusixError):
    """Any other non-success HTTP status from the provider."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Spotify API error: {status_code} {message}")
        self.status_code = status_code


class ValidationError(MusixError):
    """Caller input violates an operation contract. Raised before any network call."""


class PremiumRequiredError(MusixError):
    """Playback control was refused because the account is not Premium."""

    def __init__(self, message: str = "Spotify Premium is required for playback control") -> None:
        super().__init__(message)


class NoActiveDeviceError(MusixError):
    """Playback control has no device to act on."""

    def __init__(self, message: str = "No active device found. Start playback on a device first") -> None:
        super().__init__(message)
