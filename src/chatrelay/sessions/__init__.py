from .models import ChatSession, Message
from .store import SessionNotFoundError, SessionStore

__all__ = ["ChatSession", "Message", "SessionStore", "SessionNotFoundError"]
