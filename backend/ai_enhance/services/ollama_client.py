"""
Async client for the local Ollama HTTP API.

Endpoints used:
  GET    /api/tags      availability check and model listing
  POST   /api/generate  non-streaming completion
  POST   /api/pull      NDJSON progress stream
  DELETE /api/delete    model removal

The client keeps no state between calls besides its configuration and the
shared httpx.AsyncClient, so every call can be retried independently.
"""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from ai_enhance.models.ai import ModelDescriptor, PullProgressTick
from ai_enhance.services.errors import (
    GenerationTimeoutError,
    ProtocolError,
    ServerError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class _TagsResponse(BaseModel):
    models: list[ModelDescriptor]


class _GenerateResponse(BaseModel):
    response: str


class OllamaClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        generate_timeout: float = 30.0,
        availability_timeout: float = 2.0,
        pull_grace_period: float = 0.5,
        temperature: float = 0.1,
        num_predict: int = 512,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.generate_timeout = generate_timeout
        self.availability_timeout = availability_timeout
        self.pull_grace_period = pull_grace_period
        self.temperature = temperature
        self.num_predict = num_predict
        # Pull and list have no intrinsic deadline; callers cancel externally
        self._http = http_client or httpx.AsyncClient(timeout=None)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> OllamaClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def is_available(self) -> bool:
        """
        Best-effort check: any HTTP answer counts as reachable.

        Unlike the other operations this one is bounded by
        availability_timeout, so a hung server reads as unavailable
        instead of stalling the caller.
        """
        try:
            await self._http.get(
                self._url("/api/tags"), timeout=self.availability_timeout
            )
        except httpx.HTTPError as e:
            logger.debug("Ollama not reachable at %s: %s", self.base_url, e)
            return False
        return True

    async def list_models(self) -> list[ModelDescriptor]:
        try:
            res = await self._http.get(self._url("/api/tags"))
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to list models: {e}") from e

        if not res.is_success:
            raise ServerError(res.status_code)
        try:
            return _TagsResponse.model_validate_json(res.content).models
        except ValidationError as e:
            raise ProtocolError(f"Unexpected /api/tags response: {e}") from e

    async def generate(self, model_id: str, prompt: str) -> str:
        payload = {
            "model": model_id,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.num_predict,
            },
        }
        try:
            res = await asyncio.wait_for(
                self._http.post(self._url("/api/generate"), json=payload),
                timeout=self.generate_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise GenerationTimeoutError(
                f"Generation with {model_id} exceeded {self.generate_timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to generate: {e}") from e

        if not res.is_success:
            raise ServerError(res.status_code)
        try:
            result = _GenerateResponse.model_validate_json(res.content)
        except ValidationError as e:
            raise ProtocolError(f"Failed to parse generate response: {e}") from e
        return result.response.strip()

    async def pull_model(
        self,
        model_id: str,
        on_progress: Callable[[PullProgressTick], None],
    ) -> None:
        """
        Stream a model download, calling on_progress once per parsed line.

        Lines that are not a valid progress object are logged and skipped.
        Returns after the stream closes plus a short grace period; it does
        not verify that Ollama finished writing the model.
        """
        try:
            async with self._http.stream(
                "POST", self._url("/api/pull"), json={"name": model_id}
            ) as res:
                if not res.is_success:
                    raise ServerError(res.status_code)
                async for line in res.aiter_lines():
                    tick = _parse_tick(line)
                    if tick is not None:
                        on_progress(tick)
        except httpx.HTTPError as e:
            raise TransportError(f"Pull of {model_id} failed: {e}") from e

        await asyncio.sleep(self.pull_grace_period)

    async def delete_model(self, model_id: str) -> None:
        try:
            res = await self._http.request(
                "DELETE", self._url("/api/delete"), json={"name": model_id}
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to delete model: {e}") from e

        if not res.is_success:
            raise ServerError(res.status_code)


def _parse_tick(line: str) -> PullProgressTick | None:
    line = line.strip()
    if not line:
        return None
    try:
        return PullProgressTick.model_validate_json(line)
    except ValidationError:
        # Ollama reports mid-pull failures as {"error": ...} lines
        try:
            error = json.loads(line).get("error")
        except (ValueError, AttributeError):
            error = None
        if error:
            logger.warning("Skipping pull error line: %s", error)
        else:
            logger.warning("Skipping unparsable pull line: %.200s", line)
        return None
