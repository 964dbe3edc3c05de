# src/chatrelay/backends/base.py
from abc import ABC, abstractmethod
from typing import Dict, List


class BackendError(Exception):
    """Raised when a backend fails to produce a reply"""


class Backend(ABC):
    """Base class for text-generation backends"""

    name: str = "backend"
    label: str = "Backend"

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def generate(self, messages: List[Dict[str, str]]) -> str:
        """Generate a reply for a conversation

        Args:
            messages: Message history as {"role", "content"} dicts, oldest first

        Returns:
            str: The reply text

        Raises:
            BackendError: If the backend call fails
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"
