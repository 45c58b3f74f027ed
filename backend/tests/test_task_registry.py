import asyncio

import pytest

from ai_enhance.services.task_registry import cancel_all, is_running, start_task


@pytest.mark.asyncio
async def test_task_is_tracked_until_done():
    gate = asyncio.Event()
    task = start_task("gemma2:2b", gate.wait())
    assert is_running("gemma2:2b")

    gate.set()
    await task
    await asyncio.sleep(0)

    assert not is_running("gemma2:2b")


@pytest.mark.asyncio
async def test_unknown_model_is_not_running():
    assert not is_running("never:1b")


@pytest.mark.asyncio
async def test_cancel_all_stops_in_flight_pulls():
    task = start_task("qwen2.5:0.5b", asyncio.Event().wait())
    await asyncio.sleep(0)

    await cancel_all()

    assert task.cancelled()
    assert not is_running("qwen2.5:0.5b")
