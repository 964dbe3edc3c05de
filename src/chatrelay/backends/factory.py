# src/chatrelay/backends/factory.py
from ..config.manager import Settings
from ..config.providers import ProviderType
from .base import Backend
from .groq import GroqBackend
from .ollama import OllamaBackend, OllamaCLIBackend

SERVER_TIMEOUT = 120.0
SERVER_TEMPERATURE = 0.6
SERVER_MISSING_KEY_MESSAGE = "GROQ_API_KEY missing in server env"


def create_backend(
    provider: ProviderType, settings: Settings, console: bool = False
) -> Backend:
    """Build the backend for a provider

    Args:
        provider: Which provider to talk to
        settings: Models, endpoints and credentials
        console: Build the console variant (no timeout, no temperature,
            `ollama run` instead of the HTTP daemon)

    Returns:
        Backend: Ready to call
    """
    if provider == ProviderType.GROQ:
        if console:
            return GroqBackend(settings.groq_model, settings.groq_api_key)
        return GroqBackend(
            settings.groq_model,
            settings.groq_api_key,
            temperature=SERVER_TEMPERATURE,
            timeout=SERVER_TIMEOUT,
            missing_key_message=SERVER_MISSING_KEY_MESSAGE,
        )

    if console:
        return OllamaCLIBackend(settings.ollama_model)
    return OllamaBackend(
        settings.ollama_model, settings.ollama_host, timeout=SERVER_TIMEOUT
    )
