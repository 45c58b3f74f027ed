from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_enhance.config import settings
from ai_enhance.services.enhancement import EnhancementOrchestrator
from ai_enhance.services.ollama_client import OllamaClient
from ai_enhance.services.pull_state import PullStateRegistry


def build_orchestrator() -> EnhancementOrchestrator:
    client = OllamaClient(
        settings.ollama_base_url,
        generate_timeout=settings.generate_timeout_s,
        availability_timeout=settings.availability_timeout_s,
        pull_grace_period=settings.pull_grace_period_s,
        temperature=settings.temperature,
        num_predict=settings.num_predict,
    )
    return EnhancementOrchestrator(client, min_words=settings.min_words)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from ai_enhance.services import task_registry

    orchestrator = build_orchestrator()
    app.state.orchestrator = orchestrator
    app.state.pull_states = PullStateRegistry()
    yield
    await task_registry.cancel_all()
    await orchestrator.client.aclose()


def create_app() -> FastAPI:
    application = FastAPI(
        title="AI Enhance Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from ai_enhance.routers import ai, health

    application.include_router(health.router)
    application.include_router(ai.router, prefix="/ai", tags=["ai"])

    return application


app = create_app()
