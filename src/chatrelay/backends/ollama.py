# src/chatrelay/backends/ollama.py
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .base import Backend, BackendError

logger = logging.getLogger(__name__)


def extract_reply(data: Any) -> str:
    """Pull the reply text out of an Ollama response body

    Falls back from `message.content` to `response`, and to "" when the body
    has neither.
    """
    if not isinstance(data, dict):
        return ""
    message = data.get("message")
    if isinstance(message, dict) and message.get("content"):
        return message["content"]
    response = data.get("response")
    if isinstance(response, str) and response:
        return response
    return ""


class OllamaBackend(Backend):
    """Chat with a local Ollama daemon over its HTTP chat endpoint"""

    name = "ollama"
    label = "Ollama"

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        timeout: Optional[float] = 120.0,
    ):
        super().__init__(model)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/chat"

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        payload = {"model": self.model, "messages": messages, "stream": False}
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.post(self.url, json=payload) as response:
                    body = await response.text()
                    if response.status != 200:
                        raise BackendError(
                            f"Ollama returned HTTP {response.status}: {body.strip()}"
                        )
        except asyncio.TimeoutError as e:
            logger.warning("Request to Ollama timed out after %ss", self.timeout)
            raise BackendError(
                f"Request to Ollama timed out after {self.timeout:g}s"
            ) from e
        except aiohttp.ClientError as e:
            logger.warning("Cannot connect to Ollama at %s: %s", self.base_url, e)
            raise BackendError(
                f"Cannot connect to Ollama at {self.base_url}. Is Ollama running?"
            ) from e

        try:
            data = json.loads(body)
        except ValueError:
            logger.debug("Ollama returned a non-JSON body")
            return ""
        return extract_reply(data)


class OllamaCLIBackend(Backend):
    """Run a prompt through the `ollama run` command line tool

    Only the latest message is sent; the tool keeps no conversation state.
    The prompt is written to the tool's stdin, never interpolated into a
    command string.
    """

    name = "ollama"
    label = "Ollama"

    def __init__(self, model: str, executable: str = "ollama"):
        super().__init__(model)
        self.executable = executable

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        prompt = messages[-1]["content"] if messages else ""

        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "run",
                self.model,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BackendError(f"Could not start {self.executable}: {e}") from e

        stdout, stderr = await process.communicate(prompt.encode("utf-8"))

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise BackendError(
                detail or f"{self.executable} exited with code {process.returncode}"
            )

        return stdout.decode("utf-8", errors="replace").strip()
