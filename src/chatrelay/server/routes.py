# src/chatrelay/server/routes.py
"""
Session and chat endpoints.

Routes: POST /api/session, GET /api/sessions, GET /api/messages/{id},
PUT /api/session/{id}, DELETE /api/session/{id}, POST /api/chat,
GET /api/health
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..config.providers import ProviderType, parse_provider
from ..relay import ChatRelay, ChatValidationError
from ..sessions import SessionStore
from .schemas import ChatRequest, SessionRequest

router = APIRouter(prefix="/api", tags=["sessions"])


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_relay(request: Request) -> ChatRelay:
    return request.app.state.relay


def _parse_provider(value: Optional[str]) -> Optional[ProviderType]:
    try:
        return parse_provider(value)
    except ValueError as e:
        raise ChatValidationError(str(e)) from e


@router.post("/session")
async def create_session(
    body: Optional[SessionRequest] = None,
    store: SessionStore = Depends(get_store),
):
    """Create a new chat session."""
    body = body or SessionRequest()
    session = await store.create(
        title=body.title, provider=_parse_provider(body.provider)
    )
    return session.to_dict()


@router.get("/sessions")
async def list_sessions(store: SessionStore = Depends(get_store)):
    """List sessions, most recently updated first."""
    return {"sessions": [session.to_dict() for session in store.list()]}


@router.get("/messages/{session_id}")
async def get_messages(session_id: str, store: SessionStore = Depends(get_store)):
    """Get the message history of a session."""
    return {"messages": [msg.to_dict() for msg in store.get_messages(session_id)]}


@router.put("/session/{session_id}")
async def update_session(
    session_id: str,
    body: Optional[SessionRequest] = None,
    store: SessionStore = Depends(get_store),
):
    """Rename a session or change its provider."""
    store.get(session_id)
    body = body or SessionRequest()
    session = await store.update(
        session_id, title=body.title, provider=_parse_provider(body.provider)
    )
    return session.to_dict()


@router.delete("/session/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)):
    """Delete a session and its log."""
    await store.delete(session_id)
    return {"ok": True}


@router.post("/chat")
async def chat(
    body: Optional[ChatRequest] = None,
    relay: ChatRelay = Depends(get_relay),
):
    """Send a message in a session and return the reply."""
    body = body or ChatRequest()
    answer = await relay.chat(body.sessionId, body.message, provider=body.provider)
    return {"answer": answer}


@router.get("/health")
async def health(
    store: SessionStore = Depends(get_store),
    relay: ChatRelay = Depends(get_relay),
):
    """Report liveness and the default provider."""
    return {
        "status": "ok",
        "defaultProvider": relay.default_provider.value,
        "sessions": len(store),
    }
