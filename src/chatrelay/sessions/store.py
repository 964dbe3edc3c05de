# src/chatrelay/sessions/store.py
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import aiofiles
import aiofiles.os

from ..config.providers import ProviderType
from .models import ChatSession, Message, now_ms

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
INDEX_FILENAME = "index.json"


class SessionNotFoundError(Exception):
    """Raised when a session id is not in the registry"""

    def __init__(self, session_id: str):
        super().__init__("Session not found")
        self.session_id = session_id


class SessionStore:
    """In-memory session registry mirrored to a data directory

    Every mutation rewrites `index.json` with the full registry. Each session
    also gets an append-only `<id>.jsonl` log with one `{ts, role, content}`
    record per message; the logs are never read back.
    """

    def __init__(
        self,
        data_dir: Path,
        default_provider: ProviderType = ProviderType.OLLAMA,
    ):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.default_provider = default_provider
        self._sessions: Dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @property
    def index_file(self) -> Path:
        return self.data_dir / INDEX_FILENAME

    def session_file(self, session_id: str) -> Path:
        return self.data_dir / f"{session_id}.jsonl"

    async def create(
        self, title: Optional[str] = None, provider: Optional[ProviderType] = None
    ) -> ChatSession:
        """Create a new empty session and persist the index"""
        session = ChatSession(
            title=title or DEFAULT_TITLE,
            provider=provider or self.default_provider,
        )
        self._sessions[session.id] = session
        logger.info("Created session %s (%s)", session.id, session.provider.value)
        await self.save_index()
        return session

    def list(self) -> List[ChatSession]:
        """All sessions, most recently updated first"""
        return sorted(
            self._sessions.values(), key=lambda s: s.updated_at, reverse=True
        )

    def get(self, session_id: str) -> ChatSession:
        """Look up a session

        Raises:
            SessionNotFoundError: If the id is unknown
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_messages(self, session_id: str) -> List[Message]:
        return list(self.get(session_id).messages)

    async def update(
        self,
        session_id: str,
        title: Optional[str] = None,
        provider: Optional[ProviderType] = None,
    ) -> ChatSession:
        """Rename a session and/or change its provider

        Only supplied fields change; updated_at is always bumped.
        """
        session = self.get(session_id)
        if title:
            session.title = title
        if provider:
            session.provider = provider
        session.touch()
        await self.save_index()
        return session

    async def delete(self, session_id: str) -> None:
        """Remove a session from the registry and discard its log"""
        self.get(session_id)
        del self._sessions[session_id]
        await self.save_index()

        try:
            await aiofiles.os.remove(self.session_file(session_id))
        except OSError as e:
            logger.debug("Could not remove log for session %s: %s", session_id, e)

        logger.info("Deleted session %s", session_id)

    async def append_message(
        self, session: ChatSession, role: str, content: str
    ) -> Message:
        """Append a message in memory, to the session log and to the index"""
        message = Message(role=role, content=content)
        session.messages.append(message)
        session.touch()

        record = {"ts": now_ms(), "role": role, "content": content}
        async with aiofiles.open(
            self.session_file(session.id), "a", encoding="utf-8"
        ) as f:
            await f.write(json.dumps(record) + "\n")

        await self.save_index()
        return message

    async def save_index(self) -> None:
        """Write the full registry to index.json"""
        data = {"sessions": [s.to_dict() for s in self._sessions.values()]}
        tmp_file = self.index_file.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_file, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2))
        await aiofiles.os.replace(tmp_file, self.index_file)

    async def load(self) -> int:
        """Restore sessions from index.json

        A missing or unreadable index restores nothing. Malformed entries are
        skipped, and sessions already in memory are kept as they are.

        Returns:
            int: Number of sessions restored
        """
        if not self.index_file.exists():
            return 0

        try:
            async with aiofiles.open(self.index_file, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.warning("Could not read session index %s: %s", self.index_file, e)
            return 0

        entries = data.get("sessions") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Session index %s has no session list", self.index_file)
            return 0

        restored = 0
        for entry in entries:
            try:
                session = ChatSession.from_dict(entry)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed session entry: %s", e)
                continue
            if session.id in self._sessions:
                continue
            self._sessions[session.id] = session
            restored += 1

        logger.info("Restored %d session(s) from %s", restored, self.index_file)
        return restored
