# src/chatrelay/relay.py
import logging
from typing import Callable, Dict, Optional

from .backends import Backend, BackendError
from .config.providers import ProviderType, parse_provider, resolve_provider
from .sessions import ChatSession, SessionStore

logger = logging.getLogger(__name__)

BackendFactory = Callable[[ProviderType], Backend]


class ChatValidationError(ValueError):
    """Raised when a chat request is missing required fields"""


class ChatRelay:
    """Runs one chat turn: record the user message, ask a backend, record the reply"""

    def __init__(
        self,
        store: SessionStore,
        backend_factory: BackendFactory,
        default_provider: Optional[ProviderType] = None,
    ):
        self.store = store
        self.backend_factory = backend_factory
        self.default_provider = default_provider or store.default_provider
        self._backends: Dict[ProviderType, Backend] = {}

    def backend_for(self, provider: ProviderType) -> Backend:
        """Get the backend for a provider, building it on first use"""
        if provider not in self._backends:
            self._backends[provider] = self.backend_factory(provider)
        return self._backends[provider]

    def select_provider(
        self, session: ChatSession, override: Optional[ProviderType] = None
    ) -> ProviderType:
        return resolve_provider(override, session.provider, self.default_provider)

    async def chat(
        self, session_id: Optional[str], message: Optional[str], provider=None
    ) -> str:
        """Send a message in a session and return the assistant's reply

        Args:
            session_id: Session to chat in
            message: User message text
            provider: Optional provider tag overriding the session's provider

        Returns:
            str: The assistant's reply

        Raises:
            ChatValidationError: If session_id or message is missing, or the
                provider tag is unknown
            SessionNotFoundError: If the session does not exist
            BackendError: If the backend call fails; no reply is recorded
        """
        if not session_id:
            raise ChatValidationError("sessionId required")
        if not message:
            raise ChatValidationError("message required")

        session = self.store.get(session_id)

        try:
            override = parse_provider(provider)
        except ValueError as e:
            raise ChatValidationError(str(e)) from e
        if override:
            session.provider = override

        await self.store.append_message(session, "user", message)

        selected = self.select_provider(session, override)
        backend = self.backend_for(selected)
        logger.debug(
            "Session %s: asking %s with %d message(s)",
            session.id,
            backend,
            len(session.messages),
        )

        try:
            answer = await backend.generate(session.history())
        except BackendError as e:
            logger.warning("Session %s: %s backend failed: %s", session.id, selected.value, e)
            raise

        await self.store.append_message(session, "assistant", answer)
        return answer
