# tests/chat/test_console.py
import io
import os
import select
import signal
import subprocess
import sys
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from chatrelay.chat import ConsoleChat

from conftest import FakeBackend


def make_chat(lines, backend=None):
    console = Console(file=io.StringIO(), width=200)
    console.input = MagicMock(side_effect=lines)
    return ConsoleChat(backend or FakeBackend(), console), console


def output(console):
    return console.file.getvalue()


def test_replies_until_exit():
    backend = FakeBackend(reply="hello")
    chat, console = make_chat(["hi", "how are you?", "exit"], backend)

    chat.run()

    out = output(console)
    assert out.count("AI: hello") == 2
    assert "👋 Goodbye!" in out
    assert backend.calls == [
        [{"role": "user", "content": "hi"}],
        [{"role": "user", "content": "how are you?"}],
    ]


@pytest.mark.parametrize("command", ["EXIT", "Exit", "  exit  "])
def test_exit_is_case_insensitive(command):
    backend = FakeBackend()
    chat, console = make_chat([command, "never read"], backend)

    chat.run()

    assert backend.calls == []
    assert console.input.call_count == 1


def test_end_of_input_stops_the_loop():
    chat, console = make_chat(["hi", EOFError()])
    chat.run()
    assert "👋 Goodbye!" in output(console)


def test_blank_lines_are_skipped():
    backend = FakeBackend()
    chat, _ = make_chat(["", "   ", "exit"], backend)
    chat.run()
    assert backend.calls == []


def test_backend_error_is_shown_inline():
    backend = FakeBackend(error="Cannot connect to Ollama")
    chat, console = make_chat(["hi", "hi again", "exit"], backend)

    chat.run()

    out = output(console)
    assert out.count("AI: ❌ Ollama Error: Cannot connect to Ollama") == 2
    assert len(backend.calls) == 2


def test_reply_markup_is_not_interpreted():
    chat, console = make_chat(["hi", "exit"], FakeBackend(reply="[bold]literal[/bold]"))
    chat.run()
    assert "AI: [bold]literal[/bold]" in output(console)


@pytest.mark.parametrize(
    "name,banner",
    [
        ("groq", "☁️ Using Groq AI (Cloud) with groq-test..."),
        ("ollama", "💻 Using Ollama (Local) with ollama-test..."),
    ],
)
def test_welcome_names_the_backend(name, banner):
    chat, console = make_chat(["exit"], FakeBackend(name))
    chat.run()
    assert banner in output(console)
    assert "Type 'exit' to quit." in output(console)


def test_ctrl_c_at_prompt_says_goodbye():
    backend = FakeBackend()
    chat, console = make_chat(["hi", KeyboardInterrupt()], backend)

    chat.run()

    assert len(backend.calls) == 1
    assert "👋 Goodbye!" in output(console)


SRC_DIR = Path(__file__).resolve().parents[2] / "src"

INTERACTIVE_SCRIPT = """
from chatrelay.backends import Backend
from chatrelay.chat import ConsoleChat


class Echo(Backend):
    name = "ollama"
    label = "Ollama"

    async def generate(self, messages):
        return messages[-1]["content"]


ConsoleChat(Echo("echo")).run()
"""


def _read_until(process, marker, timeout):
    output = b""
    deadline = time.monotonic() + timeout
    while marker not in output and time.monotonic() < deadline:
        ready, _, _ = select.select([process.stdout], [], [], 0.1)
        if ready:
            chunk = os.read(process.stdout.fileno(), 4096)
            if not chunk:
                break
            output += chunk
    return output


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
def test_sigint_while_waiting_for_input_exits():
    env = dict(
        os.environ,
        PYTHONPATH=str(SRC_DIR),
        PYTHONUNBUFFERED="1",
        PYTHONIOENCODING="utf-8",
    )
    process = subprocess.Popen(
        [sys.executable, "-c", INTERACTIVE_SCRIPT],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        env=env,
    )
    try:
        output = _read_until(process, b"You:", timeout=30)
        assert b"You:" in output

        process.send_signal(signal.SIGINT)
        process.wait(timeout=5)
        rest = process.stdout.read()
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()
        process.stdin.close()
        process.stdout.close()

    assert process.returncode == 0
    assert "Goodbye!" in (output + rest).decode("utf-8")
