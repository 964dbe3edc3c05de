# src/chatrelay/backends/groq.py
import logging
from typing import Any, Dict, List, Optional

from litellm import acompletion

from .base import Backend, BackendError

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "GROQ_API_KEY is not set"


def extract_reply(response: Any) -> str:
    """Get the trimmed text of the first choice, or "" if there is none"""
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, KeyError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""


def error_message(error: Exception) -> str:
    """Best human-readable message for a provider error"""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


class GroqBackend(Backend):
    """Chat completions from the Groq cloud API, called through LiteLLM"""

    name = "groq"
    label = "Groq API"

    def __init__(
        self,
        model: str,
        api_key: str,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        missing_key_message: str = MISSING_KEY_MESSAGE,
    ):
        super().__init__(model)
        self.api_key = api_key
        self.temperature = temperature
        self.timeout = timeout
        self.missing_key_message = missing_key_message

    @property
    def litellm_model(self) -> str:
        """Model name with the provider prefix LiteLLM routes on"""
        if self.model.startswith("groq/"):
            return self.model
        return f"groq/{self.model}"

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        if not self.api_key:
            raise BackendError(self.missing_key_message)

        call_kwargs = {
            "model": self.litellm_model,
            "messages": messages,
            "api_key": self.api_key,
            "max_retries": 0,
        }
        if self.temperature is not None:
            call_kwargs["temperature"] = self.temperature
        if self.timeout is not None:
            call_kwargs["timeout"] = self.timeout

        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            logger.warning("Groq completion failed: %s", e)
            raise BackendError(error_message(e)) from e

        return extract_reply(response)
