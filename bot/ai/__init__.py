"""AI generation backends."""

from .gemini import GeminiClient, GenerationBackend, GenerationError

__all__ = [
    "GeminiClient",
    "GenerationBackend",
    "GenerationError",
]
