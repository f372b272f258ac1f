from __future__ import annotations

import asyncio
from typing import List

import pytest

from docflow_agents.cleanup import FanoutResult, best_effort_delete
from docflow_agents.core.errors import CancellationRequested, RemoteOperationError


async def _agen(items):
    for item in items:
        yield item


class TestBestEffortDelete:
    @pytest.mark.asyncio
    async def test_counts_deleted_failed_and_skipped(self):
        deleted: List[str] = []

        async def delete(item: str) -> None:
            if item == "bad":
                raise RemoteOperationError("boom", status_code=500)
            deleted.append(item)

        result = await best_effort_delete(
            "file",
            lambda: ["a", "bad", "keep", "b"],
            delete,
            skip=lambda item: item == "keep",
            item_id=str,
        )

        assert result == FanoutResult(deleted=2, failed=1, skipped=1)
        assert deleted == ["a", "b"]

    @pytest.mark.asyncio
    async def test_async_enumeration_is_collected_before_deleting(self):
        order: List[str] = []

        async def enumerate_items():
            for item in ("x", "y"):
                order.append(f"list:{item}")
                yield item

        async def delete(item: str) -> None:
            order.append(f"delete:{item}")

        result = await best_effort_delete("thread", enumerate_items, delete, item_id=str)

        assert result.deleted == 2
        assert order == ["list:x", "list:y", "delete:x", "delete:y"]

    @pytest.mark.asyncio
    async def test_enumeration_failure_returns_zero_counts(self, caplog):
        async def failing():
            raise RemoteOperationError("list failed", status_code=500)
            yield  # pragma: no cover

        async def delete(item) -> None:
            raise AssertionError("must not be called")

        result = await best_effort_delete("agent", failing, delete)

        assert result == FanoutResult()
        assert "Failed to enumerate agents" in caplog.text

    @pytest.mark.asyncio
    async def test_cancellation_between_items(self):
        event = asyncio.Event()
        deleted: List[str] = []

        async def delete(item: str) -> None:
            deleted.append(item)
            event.set()

        with pytest.raises(CancellationRequested):
            await best_effort_delete("file", lambda: _agen(["a", "b", "c"]), delete, item_id=str, cancel_event=event)

        assert deleted == ["a"]

    @pytest.mark.asyncio
    async def test_cancellation_raised_by_delete_is_not_counted(self):
        async def delete(item: str) -> None:
            raise CancellationRequested("stop")

        with pytest.raises(CancellationRequested):
            await best_effort_delete("file", lambda: ["a"], delete, item_id=str)
