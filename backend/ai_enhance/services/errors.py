"""
Error taxonomy shared by the Ollama client and the enhancement orchestrator.

Neither layer retries; errors surface to the caller as raised here.
"""
from __future__ import annotations


class AiEnhancementError(Exception):
    """Base class for every failure raised by the enhancement stack."""


class TransportError(AiEnhancementError):
    """The inference server could not be reached or the connection dropped."""


class GenerationTimeoutError(AiEnhancementError):
    """Generation exceeded the client-side deadline."""


class ServerError(AiEnhancementError):
    """The inference server answered with a non-success HTTP status."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Ollama returned HTTP {status}")


class ProtocolError(AiEnhancementError):
    """The response body did not have the expected shape."""


class ServiceUnavailableError(AiEnhancementError):
    """Raised when Ollama is not reachable before an operation that needs it."""
