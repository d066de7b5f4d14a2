"""Terminal chat client for the RAG chat API.

Usage:
    ragchat-chat                         # interactive chat
    ragchat-chat debug "What is ADPAC?"  # check embedding + vector search
"""

import argparse
import asyncio
import json
from collections.abc import Callable, Sequence

import httpx

from ragchat.client.session import ChatSession

DEFAULT_BASE_URL = "http://localhost:8000"

SUGGESTED_QUESTIONS = [
    "What is the ADA CERP program?",
    'What is the difference between "administrative services only (ASO)" and a fully insured dental benefit program?',
    'Can you explain the "birthday rule" in the context of dental insurance for dependent children?',
    'According to this glossary, what are some examples of "cost containment" measures in a dental benefit program?',
    "How does the American Dental Political Action Committee (ADPAC) give dentists a voice in Washington, D.C.?",
]

HELP_TEXT = "Type a question, a suggestion number, /reset for a new conversation or /quit to exit."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat with the RAG chat API from the terminal.")
    parser.add_argument(
        "--url",
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the API (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=180.0,
        help="Seconds to wait for each answer (default: 180)",
    )
    subparsers = parser.add_subparsers(dest="command")
    debug = subparsers.add_parser("debug", help="Run the diagnostic endpoint for a query")
    debug.add_argument("query", help="Text to embed and search for")
    return parser


def resolve_input(line: str) -> str:
    """Map a suggestion number to its question; anything else is taken verbatim."""
    stripped = line.strip()
    if stripped.isdigit() and 1 <= int(stripped) <= len(SUGGESTED_QUESTIONS):
        return SUGGESTED_QUESTIONS[int(stripped) - 1]
    return stripped


async def chat_loop(session: ChatSession, read_line: Callable[[str], str] = input) -> None:
    print(HELP_TEXT)
    for i, question in enumerate(SUGGESTED_QUESTIONS, start=1):
        print(f"  {i}. {question}")

    while True:
        try:
            line = read_line("\nYou: ")
        except EOFError:
            break

        text = resolve_input(line)
        if not text:
            continue
        if text == "/quit":
            break
        if text == "/reset":
            session.transcript.reset()
            print("Started a new conversation.")
            continue

        if text != line.strip():
            print(f"You: {text}")
        print("Assistant: ...", flush=True)
        message = await session.send(text)
        if message is not None:
            print(f"Assistant: {message.content}")


async def run_debug(session: ChatSession, query: str) -> int:
    result = await session.debug(query)
    print(json.dumps(result, indent=2))
    return 0 if result.get("success") else 1


async def _main(args: argparse.Namespace) -> int:
    async with httpx.AsyncClient(base_url=args.url, timeout=args.timeout) as http_client:
        session = ChatSession(http_client)
        if args.command == "debug":
            return await run_debug(session, args.query)
        await chat_loop(session)
        return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
