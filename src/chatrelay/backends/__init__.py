from .base import Backend, BackendError
from .factory import SERVER_TEMPERATURE, SERVER_TIMEOUT, create_backend
from .groq import GroqBackend
from .ollama import OllamaBackend, OllamaCLIBackend

__all__ = [
    "Backend",
    "BackendError",
    "GroqBackend",
    "OllamaBackend",
    "OllamaCLIBackend",
    "create_backend",
    "SERVER_TEMPERATURE",
    "SERVER_TIMEOUT",
]
