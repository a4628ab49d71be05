from typing import Any

from .base import ModelClient
from .providers import GeminiClient

# Accepted provider names; "google" is an alias for the Gemini API
PROVIDERS: dict[str, type[ModelClient]] = {
    "gemini": GeminiClient,
    "google": GeminiClient,
}


def create_model_client(provider: str, **config: Any) -> ModelClient:
    """Create a model client for a provider name.

    Args:
        provider: 'gemini' (or its alias 'google')
        **config: Client keyword arguments; ``api_key`` is required,
            ``model`` selects the default model

    Raises:
        ValueError: If the provider is unknown
        TypeError: If ``api_key`` is missing

    Examples:
        >>> client = create_model_client("gemini", api_key="...", model="gemini-2.5-pro")
    """
    client_class = PROVIDERS.get(provider.lower())
    if client_class is None:
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(sorted(set(PROVIDERS)))}"
        )
    if not config.get("api_key"):
        raise TypeError(f"{provider} provider requires 'api_key' in config")
    return client_class(**config)
