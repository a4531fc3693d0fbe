"""
Smoke test of the full chat pipeline against the configured backends.

Example:
    python -m scripts.rag_smoke --question "Chi sei?" --first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from silicon_oracle.config import setup_logging
from silicon_oracle.exceptions import GenerationServiceError
from silicon_oracle.main import build_services
from silicon_oracle.rag.prompt import ConversationTurnContext


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test of the chat pipeline.")
    parser.add_argument("--question", "-q", required=True, help="Question for the oracle")
    parser.add_argument("--first", action="store_true", help="Treat the question as the first message")
    parser.add_argument("--show-prompt", action="store_true", help="Print the composed system prompt")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> None:
    logger = logging.getLogger(__name__)
    services = build_services()
    summary = await services.index_service.build_once()
    print(f"Index state: {summary.state.value} ({summary.indexed_chunks} chunks)")

    turn = ConversationTurnContext(query=args.question, is_first_message=args.first)
    if args.show_prompt:
        payload = await services.chat_service.prepare(turn)
        print("\n=== System prompt ===")
        print(payload.system_prompt)

    try:
        reply = await services.chat_service.reply(turn)
    except GenerationServiceError as exc:
        logger.error("Chat smoke failed: %s (status %s)", exc.message, exc.status_code)
        sys.exit(1)

    print("\n=== Reply ===")
    print(reply)


def main() -> None:
    setup_logging()
    asyncio.run(run(parse_args()))


if __name__ == "__main__":
    main()
