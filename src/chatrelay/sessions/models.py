# src/chatrelay/sessions/models.py
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import uuid4

from ..config.providers import ProviderType

ROLES = ("user", "assistant")


def now_ms() -> int:
    """Current time as integer epoch milliseconds"""
    return int(time.time() * 1000)


@dataclass
class Message:
    """Represents a chat message"""

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid message role: {self.role}")

    def to_dict(self) -> Dict:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict) -> "Message":
        return cls(role=data["role"], content=data["content"])


@dataclass
class ChatSession:
    """A named conversation with its selected provider and message history"""

    id: str = field(default_factory=lambda: str(uuid4()))
    title: str = "New Chat"
    provider: Optional[ProviderType] = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = 0
    messages: List[Message] = field(default_factory=list)

    def __post_init__(self):
        if not self.updated_at:
            self.updated_at = self.created_at

    def touch(self) -> None:
        """Bump updated_at; it strictly increases even within one millisecond"""
        self.updated_at = max(now_ms(), self.updated_at + 1)

    def history(self) -> List[Dict[str, str]]:
        """Messages in the format backends take, oldest first"""
        return [msg.to_dict() for msg in self.messages]

    def to_dict(self) -> Dict:
        """Convert session to its wire and index representation"""
        return {
            "id": self.id,
            "title": self.title,
            "provider": self.provider.value if self.provider else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "messages": self.history(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ChatSession":
        """Create session from its index representation

        Raises:
            AttributeError, KeyError, TypeError, ValueError: If the entry is malformed
        """
        provider = ProviderType(data["provider"]) if data.get("provider") else None
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "New Chat",
            provider=provider,
            created_at=int(data["createdAt"]),
            updated_at=int(data.get("updatedAt") or data["createdAt"]),
            messages=[Message.from_dict(msg) for msg in data.get("messages", [])],
        )
