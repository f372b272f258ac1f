"""Readiness polling for files registered into a vector store.

After a file is registered into a store the platform indexes it
asynchronously. :func:`wait_for_index` polls the file's status until it
reaches a terminal state:

- ``completed``: return.
- ``failed``: raise :class:`IndexingFailed` at once, without polling again.
- ``cancelled``: raise :class:`IndexingCancelled` at once.
- anything else: sleep and poll again.

Delays follow :func:`backoff_delays`. After ``max_wait_attempts`` polls
without a terminal status, or once the optional ``total_timeout_ms`` budget
is spent, :class:`IndexingTimeout` is raised.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Iterator, Optional

from docflow_agents.core.cancellation import cancellable_sleep, raise_if_cancelled
from docflow_agents.core.errors import IndexingCancelled, IndexingFailed, IndexingTimeout
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import IndexingPolicy
from docflow_agents.platform_client.models import IndexingStatus

logger = get_logger(__name__)

StatusFetcher = Callable[[], Awaitable[IndexingStatus]]


def backoff_delays(policy: IndexingPolicy) -> Iterator[int]:
    """Yield the delay in milliseconds to wait after each pending poll.

    With backoff enabled the delay doubles after every poll, capped at
    ``max_wait_delay_ms``; otherwise it stays at ``initial_wait_delay_ms``.

    Examples:
        >>> from itertools import islice
        >>> list(islice(backoff_delays(IndexingPolicy()), 7))
        [2000, 4000, 8000, 16000, 30000, 30000, 30000]
    """
    delay = policy.initial_wait_delay_ms
    while True:
        yield delay
        if policy.use_exponential_backoff:
            delay = min(delay * 2, policy.max_wait_delay_ms)


async def wait_for_index(
    fetch_status: StatusFetcher,
    *,
    file_id: str,
    store_id: str,
    policy: Optional[IndexingPolicy] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> int:
    """Poll ``fetch_status`` until the file is indexed.

    Args:
        fetch_status: Coroutine function returning the file's current status.
        file_id: Id of the file being indexed (for errors and logs).
        store_id: Id of the vector store (for errors and logs).
        policy: Polling policy; defaults to :class:`IndexingPolicy`.
        cancel_event: Optional cancellation signal, checked before every poll
            and during every sleep.

    Returns:
        int: Number of polls it took to observe ``completed``.

    Raises:
        IndexingFailed: The platform reported ``failed``.
        IndexingCancelled: The platform reported ``cancelled``.
        IndexingTimeout: The attempt or total-time budget ran out.
        CancellationRequested: ``cancel_event`` was set.
    """
    policy = policy or IndexingPolicy()
    max_attempts = policy.max_wait_attempts
    deadline = time.monotonic() + policy.total_timeout_ms / 1000 if policy.total_timeout_ms > 0 else None
    delays = backoff_delays(policy)

    logger.info(
        "Waiting for file %s to be indexed in vector store %s (max_attempts=%d, initial_delay=%dms, backoff=%s)",
        file_id,
        store_id,
        max_attempts,
        policy.initial_wait_delay_ms,
        policy.use_exponential_backoff,
    )

    for attempt in range(1, max_attempts + 1):
        raise_if_cancelled(cancel_event, f"indexing of file {file_id}")
        status = await fetch_status()
        logger.debug("File %s indexing status: %s (attempt %d/%d)", file_id, status.value, attempt, max_attempts)

        if status is IndexingStatus.COMPLETED:
            logger.info("File %s indexing completed after %d attempts", file_id, attempt)
            return attempt

        if status is IndexingStatus.FAILED:
            message = f"File indexing failed for {file_id} in vector store {store_id}"
            logger.error(message)
            raise IndexingFailed(message, file_id=file_id, store_id=store_id)

        if status is IndexingStatus.CANCELLED:
            message = f"File indexing was cancelled for {file_id} in vector store {store_id}"
            logger.error(message)
            raise IndexingCancelled(message, file_id=file_id, store_id=store_id)

        if attempt == max_attempts:
            break

        delay_seconds = next(delays) / 1000
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                message = (
                    f"File indexing timed out for {file_id} after {policy.total_timeout_ms}ms "
                    f"({attempt} attempts). File may still be processing in the background."
                )
                logger.error(message)
                raise IndexingTimeout(message, file_id=file_id, store_id=store_id)
            delay_seconds = min(delay_seconds, remaining)

        await cancellable_sleep(delay_seconds, cancel_event, f"indexing of file {file_id}")

    message = (
        f"File indexing timed out for {file_id} after {max_attempts} attempts. "
        "File may still be processing in the background."
    )
    logger.error(message)
    raise IndexingTimeout(message, file_id=file_id, store_id=store_id)
