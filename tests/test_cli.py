"""Tests for the terminal chat client."""

import httpx
import pytest

from ragchat.client.cli import SUGGESTED_QUESTIONS, build_parser, chat_loop, resolve_input, run_debug
from ragchat.client.session import ChatSession
from ragchat.client.transcript import ChatTranscript
from ragchat.core.schemas_chat import ChatMessage


class _FakeSession:
    def __init__(self):
        self.transcript = ChatTranscript()
        self.sent: list[str] = []

    async def send(self, text: str) -> ChatMessage:
        self.sent.append(text)
        _, placeholder = self.transcript.begin_turn(text)
        self.transcript.resolve(placeholder.id, f"echo: {text}")
        return self.transcript.messages[-1]


def _lines(*lines):
    it = iter(lines)

    def read_line(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return read_line


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.url == "http://localhost:8000"
    assert args.command is None


def test_parser_debug_command():
    args = build_parser().parse_args(["--url", "http://api:9000", "debug", "test query"])

    assert args.command == "debug"
    assert args.query == "test query"
    assert args.url == "http://api:9000"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("1", SUGGESTED_QUESTIONS[0]),
        (" 5 ", SUGGESTED_QUESTIONS[4]),
        ("6", "6"),
        ("  What is ASO?  ", "What is ASO?"),
    ],
)
def test_resolve_input(line, expected):
    assert resolve_input(line) == expected


@pytest.mark.asyncio
async def test_chat_loop_sends_and_resets(capsys):
    session = _FakeSession()

    await chat_loop(session, _lines("Hello", "", "2", "/reset", "/quit", "never sent"))

    assert session.sent == ["Hello", SUGGESTED_QUESTIONS[1]]
    assert session.transcript.messages == []
    out = capsys.readouterr().out
    assert "Assistant: echo: Hello" in out
    assert "Started a new conversation." in out


@pytest.mark.asyncio
async def test_chat_loop_ends_on_eof():
    session = _FakeSession()

    await chat_loop(session, _lines("Hi"))

    assert session.sent == ["Hi"]


def _http_session(handler) -> ChatSession:
    return ChatSession(
        httpx.AsyncClient(base_url="http://ragchat.test", transport=httpx.MockTransport(handler))
    )


@pytest.mark.asyncio
async def test_run_debug_success_exit_code(capsys):
    def handler(request):
        return httpx.Response(
            200,
            json={"success": True, "embedding": {"length": 3}, "documents": []},
        )

    assert await run_debug(_http_session(handler), "test") == 0
    assert '"success": true' in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_debug_server_down_exits_nonzero(capsys):
    def handler(request):
        raise httpx.ConnectError("All connection attempts failed", request=request)

    assert await run_debug(_http_session(handler), "test") == 1
    out = capsys.readouterr().out
    assert '"success": false' in out
    assert '"error": "All connection attempts failed"' in out


@pytest.mark.asyncio
async def test_run_debug_html_error_page_exits_nonzero(capsys):
    def handler(request):
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    assert await run_debug(_http_session(handler), "test") == 1
    assert '"success": false' in capsys.readouterr().out
