"""
Operator CLI for the knowledge-base bot.

Usage:
    python -m app.cli ask "Kapan pendaftaran mitra dibuka?"
    python -m app.cli chat
    python -m app.cli chunks
    python -m app.cli history 628111 --limit 20

Runs the same answer pipeline as the webhook, without any transport.
"""

import argparse
import asyncio
import logging
import sys

from app import config, conversation_log
from app.answer_service import AnswerService, build_answer_service
from app.log_setup import configure_logging
from app.rag.chunker import KnowledgeSourceError, load_chunks

logger = logging.getLogger(__name__)


async def _load(service: AnswerService) -> bool:
    try:
        await service.knowledge_base.load()
    except Exception as e:
        logger.critical(f"[CLI] Failed to load knowledge base: {e}")
        return False
    return True


async def ask(question: str, service: AnswerService = None) -> int:
    service = service or build_answer_service()
    if not await _load(service):
        return 1
    print(await service.answer(question))
    return 0


async def chat(service: AnswerService = None) -> int:
    service = service or build_answer_service()
    if not await _load(service):
        return 1

    print("Ketik pertanyaan, atau 'exit' untuk keluar.")
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        question = line.strip()
        if question.lower() in ("exit", "quit"):
            break
        if question:
            print(await service.answer(question))
    return 0


def show_chunks(path: str) -> int:
    try:
        chunks = load_chunks(path)
    except KnowledgeSourceError as e:
        logger.critical(f"[CLI] {e}")
        return 1

    print(f"{len(chunks)} chunks in {path}")
    for i, chunk in enumerate(chunks, 1):
        preview = chunk.text.replace("\n", " ")
        print(f"[{i}] {preview[:100]}{'...' if len(preview) > 100 else ''}")
    return 0


def show_history(sender: str, limit: int) -> int:
    conversation_log.init_conversation_log_db()
    messages = conversation_log.get_recent_messages(sender, limit=limit)
    if not messages:
        print(f"No logged messages for {sender}")
        return 0

    for m in messages:
        print(f"{m['timestamp']} [{m['channel']}] {m['role']}: {m['content']}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Ask the knowledge-base bot from the terminal")
    parser.add_argument('--log-level', default=None, help='Override LOG_LEVEL')
    subparsers = parser.add_subparsers(dest='command', required=True)

    ask_parser = subparsers.add_parser('ask', help='Answer a single question')
    ask_parser.add_argument('question')

    subparsers.add_parser('chat', help='Interactive question loop on stdin')

    chunks_parser = subparsers.add_parser('chunks', help='Show how the knowledge file is chunked')
    chunks_parser.add_argument('--file', default=config.KNOWLEDGE_PATH, help='Path to the knowledge file')

    history_parser = subparsers.add_parser('history', help='Show logged exchanges for one sender')
    history_parser.add_argument('sender')
    history_parser.add_argument('--limit', type=int, default=20)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == 'ask':
        return asyncio.run(ask(args.question))
    if args.command == 'chat':
        return asyncio.run(chat())
    if args.command == 'history':
        return show_history(args.sender, args.limit)
    return show_chunks(args.file)


if __name__ == "__main__":
    sys.exit(main())
