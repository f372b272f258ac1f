"""Best-effort fan-out deletion.

One combinator drives every bulk deletion: enumerate a category completely,
then delete item by item, sequentially. Failures never abort the loop:

- enumeration failure: logged as an error, zero counts returned;
- protected item (``skip`` predicate): logged, not deleted, not counted;
- deletion failure: logged as a warning and counted as failed.

``CancellationRequested`` and ``asyncio.CancelledError`` are never absorbed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import AsyncIterable, Awaitable, Callable, Iterable, List, Optional, TypeVar, Union

from docflow_agents.core.cancellation import raise_if_cancelled
from docflow_agents.core.errors import CancellationRequested
from docflow_agents.core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ItemSource = Union[AsyncIterable[T], Iterable[T]]


@dataclass(frozen=True)
class FanoutResult:
    deleted: int = 0
    failed: int = 0
    skipped: int = 0


def _default_item_id(item: object) -> str:
    return str(getattr(item, "id", item))


async def _collect(source: ItemSource[T]) -> List[T]:
    if hasattr(source, "__aiter__"):
        return [item async for item in source]  # type: ignore[union-attr]
    return list(source)  # type: ignore[arg-type]


async def best_effort_delete(
    category: str,
    enumerate_items: Callable[[], ItemSource[T]],
    delete_item: Callable[[T], Awaitable[None]],
    *,
    skip: Optional[Callable[[T], bool]] = None,
    item_id: Callable[[T], str] = _default_item_id,
    cancel_event: Optional[asyncio.Event] = None,
) -> FanoutResult:
    """Delete every item of one resource category, counting outcomes.

    Args:
        category: Human-readable category name used in logs (``"file"``, ``"agent"``...).
        enumerate_items: Returns the items to delete (sync or async iterable).
        delete_item: Coroutine function deleting one item.
        skip: Optional predicate marking protected items.
        item_id: Extracts a loggable id from an item.
        cancel_event: Optional cancellation signal checked before every item.

    Returns:
        FanoutResult: Deleted, failed and skipped counts.

    Raises:
        CancellationRequested: If ``cancel_event`` is set.
    """
    raise_if_cancelled(cancel_event, f"{category} cleanup")
    try:
        items = await _collect(enumerate_items())
    except CancellationRequested:
        raise
    except Exception as exc:
        logger.error("Failed to enumerate %ss: %s", category, exc)
        return FanoutResult()

    logger.debug("Enumerated %d %s(s) for deletion", len(items), category)
    deleted = failed = skipped = 0
    for item in items:
        raise_if_cancelled(cancel_event, f"{category} cleanup")
        identifier = item_id(item)
        if skip is not None and skip(item):
            logger.debug("Skipping protected %s: %s", category, identifier)
            skipped += 1
            continue
        try:
            logger.debug("Deleting %s: %s", category, identifier)
            await delete_item(item)
            deleted += 1
        except CancellationRequested:
            raise
        except Exception as exc:
            logger.warning("Failed to delete %s %s: %s", category, identifier, exc)
            failed += 1

    return FanoutResult(deleted=deleted, failed=failed, skipped=skipped)
