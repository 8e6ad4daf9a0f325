from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from musix.crosscutting.logging import CorrelationContext, log_classified_error, log_error, log_token_refresh
from musix.domain.classification import classify_error, status_of
from musix.domain.errors import MusixError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Classifier = Callable[[object, str, str], MusixError]


async def execute_with_token_refresh(
    operation: Callable[[], Awaitable[T]],
    invalidate: Callable[[], None],
    resource_type: str,
    resource_id: str,
    classify: Classifier = classify_error,
    operation_name: Optional[str] = None,
) -> T:
    """Run a provider call, recovering once from rejected credentials.

    A 401 on the first attempt clears the cached token via ``invalidate`` and runs the
    call again. Any other failure, and any failure of the retry, is classified and
    raised with the provider failure chained. There is never a second retry.
    """
    name = operation_name or getattr(operation, "__name__", "operation")

    with CorrelationContext(operation=name, resource_type=resource_type, resource_id=resource_id):
        try:
            return await operation()
        except Exception as error:
            status = status_of(error)
            if status != 401:
                raise _classified(error, status, classify, resource_type, resource_id, name, 1) from error

        log_token_refresh(logger, name, resource_type, resource_id)
        invalidate()

        try:
            return await operation()
        except Exception as error:
            status = status_of(error)
            if status == 401:
                log_error(logger, "Credentials still rejected after token refresh", error,
                          operation=name, resource_type=resource_type)
            raise _classified(
                error, status, classify, resource_type, resource_id, name, 2
            ) from error


def _classified(
    error: Exception,
    status: Optional[int],
    classify: Classifier,
    resource_type: str,
    resource_id: str,
    name: str,
    attempt: int,
) -> MusixError:
    classified = classify(error, resource_type, resource_id)
    log_classified_error(logger, name, classified, status=status, attempt=attempt)
    return classified


def spotipy_token_invalidator(client: Any) -> Callable[[], None]:
    """Build an invalidation callback that expires the token cached by a spotipy client.

    The cached token is kept but marked expired, so the next request makes the auth
    manager fetch a new one (client credentials) or use the refresh token (PKCE).
    Clients without an auth manager get a no-op.
    """
    auth_manager = getattr(client, "auth_manager", None)
    cache_handler = getattr(auth_manager, "cache_handler", None)

    def invalidate() -> None:
        if cache_handler is None:
            return
        token_info = cache_handler.get_cached_token()
        if token_info:
            cache_handler.save_token_to_cache({**token_info, "expires_at": 0})

    return invalidate
