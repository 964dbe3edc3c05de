# src/chatrelay/chat/console.py

import asyncio
import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..backends import Backend, BackendError

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"


def _close_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel whatever a Ctrl-C left running, then close the loop"""
    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
    loop.run_until_complete(loop.shutdown_asyncgens())
    loop.close()


class ConsoleChat:
    """Interactive read-reply loop against a single backend

    Each line is sent on its own, without earlier turns. Backend failures
    are shown as the reply and never end the loop.
    """

    def __init__(self, backend: Backend, console: Optional[Console] = None):
        self.backend = backend
        self.console = console or Console()

    def display_welcome(self):
        """Show which backend answers"""
        if self.backend.name == "groq":
            self.console.print(
                f"☁️ Using Groq AI (Cloud) with {self.backend.model}...", style="bold blue"
            )
        else:
            self.console.print(
                f"💻 Using Ollama (Local) with {self.backend.model}...", style="bold blue"
            )
        self.console.print(f"Type '{EXIT_COMMAND}' to quit.", style="dim")

    async def ask(self, prompt: str) -> str:
        """Get a reply for one prompt; errors come back as the reply text"""
        try:
            return await self.backend.generate([{"role": "user", "content": prompt}])
        except BackendError as e:
            logger.debug("Backend error in console chat: %s", e)
            return f"❌ {self.backend.label} Error: {e}"

    def read_line(self) -> Optional[str]:
        """Read one line from the user, or None at end of input"""
        try:
            return self.console.input("\n[bold green]You:[/] ")
        except EOFError:
            return None

    def run(self) -> None:
        """Loop until the user types exit, input ends or Ctrl-C is pressed

        Lines are read on the calling thread so Ctrl-C reaches the prompt;
        one event loop serves every backend call.
        """
        self.display_welcome()
        loop = asyncio.new_event_loop()

        try:
            while True:
                line = self.read_line()
                if line is None or line.strip().lower() == EXIT_COMMAND:
                    break
                if not line.strip():
                    continue

                reply = loop.run_until_complete(self.ask(line))
                self.console.print(f"\n[bold cyan]AI:[/] {escape(reply)}\n")
        except KeyboardInterrupt:
            self.console.print()
        finally:
            _close_loop(loop)

        self.console.print("👋 Goodbye!", style="bold yellow")
