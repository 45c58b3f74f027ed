"""
Shared fixtures: an in-memory Ollama stand-in for the orchestrator and
router tests, and an httpx.MockTransport helper for the client tests.
"""
from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable

import httpx
import pytest

from ai_enhance.models.ai import ModelDescriptor, PullProgressTick
from ai_enhance.services.ollama_client import OllamaClient


class FakeOllamaClient:
    """Records calls instead of talking to a server."""

    def __init__(
        self,
        *,
        available: bool = True,
        reply: str = "",
        models: list[ModelDescriptor] | None = None,
        ticks: list[PullProgressTick] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.available = available
        self.reply = reply
        self.models = models or []
        self.ticks = ticks or []
        self.error = error
        self.calls: list[tuple] = []
        # model id -> event that must be set before generate returns
        self.gates: dict[str, asyncio.Event] = {}
        self.block_pull = False
        self.pull_started = threading.Event()

    async def is_available(self) -> bool:
        self.calls.append(("is_available",))
        return self.available

    async def list_models(self) -> list[ModelDescriptor]:
        self.calls.append(("list_models",))
        if self.error:
            raise self.error
        return self.models

    async def generate(self, model_id: str, prompt: str) -> str:
        self.calls.append(("generate", model_id, prompt))
        gate = self.gates.get(model_id)
        if gate is not None:
            await gate.wait()
        if self.error:
            raise self.error
        return self.reply

    async def pull_model(
        self, model_id: str, on_progress: Callable[[PullProgressTick], None]
    ) -> None:
        self.calls.append(("pull_model", model_id))
        for tick in self.ticks:
            on_progress(tick)
        self.pull_started.set()
        if self.block_pull:
            await asyncio.Event().wait()
        if self.error:
            raise self.error

    async def delete_model(self, model_id: str) -> None:
        self.calls.append(("delete_model", model_id))
        if self.error:
            raise self.error

    async def aclose(self) -> None:
        pass


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_progress(self, event) -> None:
        self.events.append(("progress", event))

    def on_complete(self, model_id: str) -> None:
        self.events.append(("complete", model_id))


@pytest.fixture
def fake_client() -> FakeOllamaClient:
    return FakeOllamaClient()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def mock_ollama():
    """Build an OllamaClient whose requests go to the given handler."""

    def _make(handler, **kwargs) -> OllamaClient:
        kwargs.setdefault("pull_grace_period", 0.0)
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OllamaClient("http://ollama.test", http_client=http, **kwargs)

    return _make
