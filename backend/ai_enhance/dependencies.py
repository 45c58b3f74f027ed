from fastapi import Request

from ai_enhance.services.enhancement import EnhancementOrchestrator
from ai_enhance.services.pull_state import PullStateRegistry


def get_orchestrator(request: Request) -> EnhancementOrchestrator:
    return request.app.state.orchestrator


def get_pull_states(request: Request) -> PullStateRegistry:
    return request.app.state.pull_states
