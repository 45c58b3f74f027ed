from ai_enhance.models.ai import (
    AiModelInfo,
    EnhanceRequest,
    EnhanceResponse,
    FeatureFlags,
    FeatureToggles,
    ModelDescriptor,
    PullProgressEvent,
    PullProgressTick,
    PullRequest,
    PullStatus,
    SystemInfo,
)

__all__ = [
    "AiModelInfo",
    "EnhanceRequest",
    "EnhanceResponse",
    "FeatureFlags",
    "FeatureToggles",
    "ModelDescriptor",
    "PullProgressEvent",
    "PullProgressTick",
    "PullRequest",
    "PullStatus",
    "SystemInfo",
]
