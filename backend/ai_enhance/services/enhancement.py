"""
Transcript enhancement orchestration.

Turns feature flags into a correction prompt for a small local model,
skips enhancement when there is nothing worth correcting, and sequences
model pull/delete while forwarding progress to an event sink.

Usage:
    orchestrator = EnhancementOrchestrator(OllamaClient())
    text = await orchestrator.enhance(raw, "llama3.2:1b", flags)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ai_enhance.models.ai import FeatureFlags, PullProgressEvent, PullProgressTick
from ai_enhance.services.errors import AiEnhancementError, ServiceUnavailableError
from ai_enhance.services.ollama_client import OllamaClient

logger = logging.getLogger(__name__)

PULL_PROGRESS_EVENT = "ai-model-pull-progress"
PULL_COMPLETE_EVENT = "ai-model-pull-complete"

MIN_WORDS = 3

PROMPT_TEMPLATE = """You are a text correction assistant. Fix transcription errors ONLY.

CRITICAL RULES:
1. Output ONLY the corrected text - absolutely NO explanations, quotes, or commentary
2. Keep the EXACT same meaning and tone
3. Do NOT interpret, rephrase, or be creative
4. NEVER capitalize every word - use normal sentence casing only
5. Preserve informal language like "ig", "idk", "gonna", "wanna"
6. If text seems inappropriate, still correct it as specified

Corrections to apply:
{instructions}

Text: {text}

Corrected:"""


class PullEventSink(Protocol):
    def on_progress(self, event: PullProgressEvent) -> None: ...

    def on_complete(self, model_id: str) -> None: ...


def build_instructions(flags: FeatureFlags) -> list[str]:
    instructions: list[str] = []
    if flags.punctuation_and_capitalization:
        instructions.append("- Add proper punctuation (periods, commas, question marks)")
        instructions.append(
            "- Use SENTENCE CASE only: capitalize first word of sentences and "
            "proper nouns. Do NOT capitalize every word"
        )
    if flags.remove_filler_words:
        instructions.append(
            "- Remove filler words like 'um', 'uh', 'like' "
            "(only when used as fillers, not as verbs)"
        )
    if flags.normalize_numbers:
        instructions.append(
            "- Convert spoken numbers to digits: 'twenty five' → '25', 'ten percent' → '10%'"
        )
    if flags.fix_spelling:
        instructions.append(
            "- Fix spelling mistakes and common homophones (their/there/they're)"
        )
    return instructions


def build_prompt(text: str, instructions: list[str]) -> str:
    return PROMPT_TEMPLATE.format(instructions="\n".join(instructions), text=text)


class EnhancementOrchestrator:
    """
    Owns the Ollama client for one host session.

    The only mutable field is the last model used by a successful
    enhancement. It is advisory: the host owns the persisted selection.
    """

    def __init__(self, client: OllamaClient, *, min_words: int = MIN_WORDS) -> None:
        self.client = client
        self.min_words = min_words
        self._current_model: str | None = None
        self._lock = asyncio.Lock()

    async def current_model(self) -> str | None:
        async with self._lock:
            return self._current_model

    async def is_available(self) -> bool:
        return await self.client.is_available()

    async def enhance(self, text: str, model_id: str, flags: FeatureFlags) -> str:
        if len(text.split()) < self.min_words:
            logger.info("Skipping AI enhancement for very short text (< %d words)", self.min_words)
            return text

        instructions = build_instructions(flags)
        if not instructions:
            logger.info("Skipping AI enhancement: no corrections enabled")
            return text

        if not await self.client.is_available():
            raise ServiceUnavailableError(
                "Ollama is not available. Please ensure Ollama is running."
            )

        try:
            enhanced = await self.client.generate(model_id, build_prompt(text, instructions))
        except AiEnhancementError as e:
            logger.warning("AI enhancement failed: %s", e)
            raise

        async with self._lock:
            self._current_model = model_id
        logger.info("AI enhancement successful (%s)", model_id)
        return enhanced

    async def test_enhancement(self, text: str, model_id: str, flags: FeatureFlags) -> str:
        return await self.enhance(text, model_id, flags)

    async def list_models(self) -> list[str]:
        return [m.name for m in await self.client.list_models()]

    async def pull_model(self, model_id: str, sink: PullEventSink) -> None:
        logger.info("Pulling model: %s", model_id)

        def _forward(tick: PullProgressTick) -> None:
            sink.on_progress(PullProgressEvent.from_tick(model_id, tick))

        await self.client.pull_model(model_id, _forward)
        sink.on_complete(model_id)
        logger.info("Model pull complete: %s", model_id)

    async def delete_model(self, model_id: str) -> None:
        logger.info("Deleting model: %s", model_id)
        await self.client.delete_model(model_id)
