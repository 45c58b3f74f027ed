from __future__ import annotations

import os
import platform

import psutil

from ai_enhance.models.ai import AiModelInfo, SystemInfo

_GB = 1024**3

_OS_NAMES = {"darwin": "macos", "windows": "windows", "linux": "linux"}

MODEL_CATALOG: list[AiModelInfo] = [
    AiModelInfo(
        id="gemma2:2b",
        size_mb=270,
        speed="Fastest",
        quality="Good",
        notes="Best for low RAM systems (< 8GB)",
    ),
    AiModelInfo(
        id="qwen2.5:0.5b",
        size_mb=500,
        speed="Very Fast",
        quality="Good",
        notes="Ultra lightweight option",
    ),
    AiModelInfo(
        id="llama3.2:1b",
        size_mb=1000,
        speed="Fast",
        quality="Excellent",
        notes="Recommended default - best balance",
    ),
    AiModelInfo(
        id="gemma2:1b",
        size_mb=1000,
        speed="Fast",
        quality="Very Good",
        notes="Alternative 1B model",
    ),
    AiModelInfo(
        id="qwen2.5:1.5b",
        size_mb=1500,
        speed="Moderate",
        quality="Best",
        notes="Highest quality (16GB+ RAM recommended)",
    ),
]


def get_system_info() -> SystemInfo:
    memory = psutil.virtual_memory()
    system = platform.system().lower()
    return SystemInfo(
        total_ram_gb=round(memory.total / _GB, 1),
        available_ram_gb=round(memory.available / _GB, 1),
        cpu_cores=os.cpu_count() or 1,
        os=_OS_NAMES.get(system, system),
    )


def recommend_ai_model(info: SystemInfo) -> str:
    """Pick a model id from total RAM, falling back on available RAM below 8GB."""
    if info.total_ram_gb < 8.0:
        return "gemma2:2b" if info.available_ram_gb > 2.0 else "qwen2.5:0.5b"
    if info.total_ram_gb < 16.0:
        return "llama3.2:1b"
    return "qwen2.5:1.5b"


def get_available_models() -> list[AiModelInfo]:
    return [m.model_copy() for m in MODEL_CATALOG]
