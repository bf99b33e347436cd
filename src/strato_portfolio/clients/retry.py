"""Retry policy shared by the HTTP clients."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

import backoff
import requests

from ..constants import RETRYABLE_STATUS_CODES

F = TypeVar("F", bound=Callable[..., Any])


def is_permanent_error(exc: Exception) -> bool:
    """HTTP errors other than rate limits and 5xx are not worth retrying."""
    return (
        isinstance(exc, requests.exceptions.HTTPError)
        and exc.response is not None
        and exc.response.status_code not in RETRYABLE_STATUS_CODES
    )


def with_retries(max_tries: int) -> Callable[[F], F]:
    """Decorate a blocking request function with exponential backoff."""
    return backoff.on_exception(
        backoff.expo,
        requests.exceptions.RequestException,
        max_tries=max_tries,
        giveup=is_permanent_error,
        jitter=backoff.full_jitter,
    )
