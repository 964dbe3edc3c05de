# src/chatrelay/server/schemas.py
from typing import Optional

from pydantic import BaseModel


class SessionRequest(BaseModel):
    """Body of POST /api/session and PUT /api/session/{id}"""

    title: Optional[str] = None
    provider: Optional[str] = None


class ChatRequest(BaseModel):
    """Body of POST /api/chat"""

    sessionId: Optional[str] = None
    message: Optional[str] = None
    provider: Optional[str] = None
