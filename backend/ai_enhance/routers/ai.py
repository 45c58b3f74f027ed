import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from ai_enhance.dependencies import get_orchestrator, get_pull_states
from ai_enhance.models.ai import (
    AiModelInfo,
    EnhanceRequest,
    EnhanceResponse,
    PullRequest,
    PullStatus,
    SystemInfo,
)
from ai_enhance.services import task_registry
from ai_enhance.services.enhancement import EnhancementOrchestrator
from ai_enhance.services.errors import (
    AiEnhancementError,
    GenerationTimeoutError,
    ServerError,
    ServiceUnavailableError,
)
from ai_enhance.services.pull_state import PullState, PullStateRegistry
from ai_enhance.services.system_info import (
    get_available_models,
    get_system_info,
    recommend_ai_model,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: AiEnhancementError) -> HTTPException:
    if isinstance(e, ServiceUnavailableError):
        return HTTPException(503, str(e))
    if isinstance(e, GenerationTimeoutError):
        return HTTPException(504, str(e))
    if isinstance(e, ServerError) and e.status == 404:
        return HTTPException(404, str(e))
    return HTTPException(502, str(e))


# --- Capability ---


@router.get("/available")
async def check_available(orchestrator: EnhancementOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.is_available()


@router.get("/system-info", response_model=SystemInfo)
async def system_info():
    return await asyncio.to_thread(get_system_info)


@router.get("/recommended-model")
async def recommended_model():
    info = await asyncio.to_thread(get_system_info)
    return {"model_id": recommend_ai_model(info)}


@router.get("/catalog", response_model=list[AiModelInfo])
async def catalog():
    return get_available_models()


# --- Installed models ---


@router.get("/models", response_model=list[str])
async def list_models(orchestrator: EnhancementOrchestrator = Depends(get_orchestrator)):
    try:
        return await orchestrator.list_models()
    except AiEnhancementError as e:
        raise _http_error(e) from e


@router.get("/current-model")
async def current_model(orchestrator: EnhancementOrchestrator = Depends(get_orchestrator)):
    return {"model_id": await orchestrator.current_model()}


@router.delete("/models", status_code=204)
async def delete_model(
    model_id: str = Query(...),
    orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
):
    try:
        await orchestrator.delete_model(model_id)
    except AiEnhancementError as e:
        raise _http_error(e) from e


# --- Model pull ---


async def _run_pull(orchestrator: EnhancementOrchestrator, state: PullState) -> None:
    try:
        await orchestrator.pull_model(state.model_id, state)
    except asyncio.CancelledError:
        state.on_error("Pull cancelled")
        raise
    except Exception as e:
        state.on_error(str(e))
        logger.error("Model pull failed for %s: %s", state.model_id, e)


@router.post("/models/pull", status_code=202)
async def pull_model(
    body: PullRequest,
    orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
    pull_states: PullStateRegistry = Depends(get_pull_states),
):
    if task_registry.is_running(body.model_id):
        raise HTTPException(409, f"Pull already in progress: {body.model_id}")

    state = pull_states.begin(body.model_id)
    task_registry.start_task(body.model_id, _run_pull(orchestrator, state))
    return {"status": "started", "model_id": body.model_id}


@router.get("/models/pull/progress")
async def pull_progress_sse(
    model_id: str = Query(...),
    pull_states: PullStateRegistry = Depends(get_pull_states),
):
    """SSE stream of pull events, named as the host expects them."""
    state = pull_states.get(model_id)
    if state is None:
        raise HTTPException(404, f"No pull started for {model_id}")

    async def event_generator():
        last_seq = 0
        while True:
            for seq, name, payload in state.events_after(last_seq):
                yield f"event: {name}\ndata: {json.dumps(payload)}\n\n"
                last_seq = seq

            if state.finished and not state.events_after(last_seq):
                break
            await asyncio.sleep(0.3)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/models/pull/status", response_model=PullStatus)
async def pull_status(
    model_id: str = Query(...),
    pull_states: PullStateRegistry = Depends(get_pull_states),
):
    """Single poll endpoint (fallback if SSE is problematic)."""
    return pull_states.status(model_id)


# --- Enhancement ---


@router.post("/enhance", response_model=EnhanceResponse)
async def enhance(
    body: EnhanceRequest,
    orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
):
    try:
        text = await orchestrator.test_enhancement(
            body.text, body.model_id, body.features.to_flags()
        )
    except AiEnhancementError as e:
        raise _http_error(e) from e
    return EnhanceResponse(text=text)
