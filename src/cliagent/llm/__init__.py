from .base import ModelClient
from .catalog import AVAILABLE_MODELS, DEFAULT_MODEL, model_hint, supports_thinking
from .factory import create_model_client
from .models import (
    Candidate,
    Content,
    FinishReason,
    FunctionCall,
    FunctionResponse,
    GenerationOptions,
    Part,
    ResponseFragment,
    ToolDeclaration,
)
from .providers import GeminiClient

__all__ = [
    "ModelClient",
    "create_model_client",
    "GeminiClient",
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "model_hint",
    "supports_thinking",
    "Candidate",
    "Content",
    "FinishReason",
    "FunctionCall",
    "FunctionResponse",
    "GenerationOptions",
    "Part",
    "ResponseFragment",
    "ToolDeclaration",
]
