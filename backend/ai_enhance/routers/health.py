from fastapi import APIRouter, Depends

from ai_enhance.dependencies import get_orchestrator
from ai_enhance.services.enhancement import EnhancementOrchestrator

router = APIRouter()


@router.get("/health")
async def health(orchestrator: EnhancementOrchestrator = Depends(get_orchestrator)):
    return {
        "status": "ok",
        "ollama_available": await orchestrator.is_available(),
    }
