"""Catalog of selectable Gemini models."""

from pydantic import BaseModel, ConfigDict

DEFAULT_MODEL = "gemini-2.5-flash"

# Substrings of model ids that accept a thinking configuration
THINKING_MODELS = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
)


class ModelInfo(BaseModel):
    """A selectable model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


AVAILABLE_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(id="gemini-2.5-pro", name="Gemini 2.5 Pro",
              description="High-capability model for complex reasoning"),
    ModelInfo(id="gemini-2.5-flash", name="Gemini 2.5 Flash",
              description="Fast model with thinking support"),
    ModelInfo(id="gemini-2.5-flash-lite", name="Gemini 2.5 Flash Lite",
              description="Lowest latency 2.5 model"),
    ModelInfo(id="gemini-2.0-flash", name="Gemini 2.0 Flash",
              description="Previous generation fast model"),
    ModelInfo(id="gemini-2.0-flash-lite", name="Gemini 2.0 Flash Lite",
              description="Previous generation lightweight model"),
    ModelInfo(id="gemini-1.5-pro", name="Gemini 1.5 Pro",
              description="Long-context model"),
    ModelInfo(id="gemini-1.5-flash", name="Gemini 1.5 Flash",
              description="Long-context fast model"),
)


def model_ids() -> list[str]:
    return [m.id for m in AVAILABLE_MODELS]


def get_model(model_id: str) -> ModelInfo | None:
    """Look up a catalog entry by id."""
    for model in AVAILABLE_MODELS:
        if model.id == model_id:
            return model
    return None


def supports_thinking(model_id: str) -> bool:
    """Check whether thinking mode can be requested for a model."""
    if not model_id:
        return False
    return any(name in model_id for name in THINKING_MODELS)


def model_hint(model_id: str) -> str:
    """Short capability hint shown next to a model id in the selector."""
    if "pro" in model_id:
        return "Advanced"
    if "flash-lite" in model_id:
        return "Fast & Light"
    if "flash" in model_id:
        return "Fast"
    return ""
