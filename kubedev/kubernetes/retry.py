"""
Version Conflict Retry

Writes carry the resource version they were read at; the API server rejects
them with 409 when someone else wrote in between. Those writes are retried
from a fresh read, a bounded number of times with exponential backoff.
"""

import logging

from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from ..config import get_settings
from ..errors import VersionConflictError

logger = logging.getLogger(__name__)


def conflict_retrying(
    max_attempts: int = None,
    min_wait: float = None,
    max_wait: float = None
) -> AsyncRetrying:
    """
    Build a retry controller for read-mutate-write cycles.

    Defaults come from settings (k8s_conflict_retries, k8s_conflict_min_wait,
    k8s_conflict_max_wait). Only VersionConflictError is retried; the last
    one is re-raised once attempts run out.

    Example:
        >>> async for attempt in conflict_retrying():
        ...     with attempt:
        ...         app = await client.get(kind, name, namespace)
        ...         mutate(app)
        ...         await client.update(app)
    """
    settings = get_settings()
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts or settings.k8s_conflict_retries),
        wait=wait_exponential(
            multiplier=min_wait if min_wait is not None else settings.k8s_conflict_min_wait,
            max=max_wait if max_wait is not None else settings.k8s_conflict_max_wait,
        ),
        retry=retry_if_exception_type(VersionConflictError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
