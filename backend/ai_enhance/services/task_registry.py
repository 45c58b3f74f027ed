from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# model id -> in-flight pull task, dropped once the task finishes
_running_tasks: dict[str, asyncio.Task[Any]] = {}


def start_task(model_id: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
    """Run a pull in the background; at most one live task per model id."""
    task = asyncio.create_task(coro, name=f"pull-{model_id}")
    _running_tasks[model_id] = task
    task.add_done_callback(lambda _: _running_tasks.pop(model_id, None))
    return task


def is_running(model_id: str) -> bool:
    task = _running_tasks.get(model_id)
    return task is not None and not task.done()


async def cancel_all() -> None:
    """Cancel in-flight pulls on shutdown; Ollama keeps any partial download."""
    tasks = [t for t in _running_tasks.values() if not t.done()]
    for task in tasks:
        logger.info("Cancelling %s", task.get_name())
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
