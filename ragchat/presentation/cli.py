
import argparse
import asyncio
import logging
import sys

from ragchat.config.settings import Settings, settings
from ragchat.container import Container, configure_container
from ragchat.core.errors import RagChatError
from ragchat.core.models.chat import ChatRequest
from ragchat.core.services.ingest_service import IngestService
from ragchat.core.services.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def cmd_ingest(container: Container, args: argparse.Namespace) -> None:
    """Ingest command - index local files."""
    ingest_service = container.resolve(IngestService)
    for path in args.paths:
        result = ingest_service.ingest_file(path)
        logger.info(f"Indexed {result.filename}: {result.chunk_count} chunks ({result.document_id})")


def cmd_ask(container: Container, args: argparse.Namespace) -> None:
    """Ask command - answer one question."""
    orchestrator = container.resolve(Orchestrator)
    response = asyncio.run(
        orchestrator.submit(
            ChatRequest(
                message=args.question,
                thread_id=args.thread,
                document_id=args.document,
                enable_web_search=not args.no_web,
            )
        )
    )
    print(response.message)
    print()
    print(f"thread: {response.thread_id}")
    print(f"chunks: {response.chunk_count}, web search: {response.web_search_used}")
    for source in response.sources:
        print(f"  - {source}")


def cmd_threads(container: Container, args: argparse.Namespace) -> None:
    page = container.resolve(Orchestrator).list_threads(skip=args.skip, limit=args.limit)
    for thread in page.items:
        print(f"{thread.id}  {thread.message_count:>3}  {thread.title}")
    if page.has_more:
        print(f"... {page.total - page.skip - len(page.items)} more")


def cmd_messages(container: Container, args: argparse.Namespace) -> None:
    detail = container.resolve(Orchestrator).get_thread(
        args.thread, skip=args.skip, limit=args.limit
    )
    print(f"# {detail.thread.title}")
    for message in detail.messages.items:
        print(f"[{message.role}] {message.content}")
        documents = detail.source_documents.get(message.id) or []
        if documents:
            print(f"  sources: {', '.join(documents)}")
    if detail.messages.has_more:
        print("...")


def cmd_delete_thread(container: Container, args: argparse.Namespace) -> None:
    deleted = container.resolve(Orchestrator).delete_thread(args.thread)
    print(f"Deleted thread {args.thread} ({deleted} messages)")


def cmd_documents(container: Container, args: argparse.Namespace) -> None:
    orchestrator = container.resolve(Orchestrator)
    documents = orchestrator.list_documents()
    for document in documents:
        print(
            f"{document.id}  {document.file_type.value:<4} "
            f"{document.chunk_count:>4}  {document.filename}"
        )
    print(f"{len(documents)} documents, {orchestrator.indexed_chunk_count()} chunks indexed")


def cmd_delete_document(container: Container, args: argparse.Namespace) -> None:
    document = container.resolve(Orchestrator).delete_document(args.document)
    print(f"Deleted {document.filename}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ragchat")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ingest", help="index local files")
    p.add_argument("paths", nargs="+")
    p.set_defaults(func=cmd_ingest)

    p = sub.add_parser("ask", help="ask a question")
    p.add_argument("question")
    p.add_argument("--thread")
    p.add_argument("--document")
    p.add_argument("--no-web", action="store_true")
    p.set_defaults(func=cmd_ask)

    for name, func in (("threads", cmd_threads), ("messages", cmd_messages)):
        p = sub.add_parser(name)
        if name == "messages":
            p.add_argument("thread")
        p.add_argument("--skip", type=int, default=0)
        p.add_argument("--limit", type=int, default=10)
        p.set_defaults(func=func)

    p = sub.add_parser("delete-thread")
    p.add_argument("thread")
    p.set_defaults(func=cmd_delete_thread)

    p = sub.add_parser("documents")
    p.set_defaults(func=cmd_documents)

    p = sub.add_parser("delete-document")
    p.add_argument("document")
    p.set_defaults(func=cmd_delete_document)

    return parser


def main(argv: list[str] | None = None, app_settings: Settings = settings) -> int:
    """CLI entry point."""
    logging.basicConfig(level=app_settings.log_level, format="%(message)s")
    args = build_parser().parse_args(argv)
    container = configure_container(app_settings)

    try:
        args.func(container, args)
    except RagChatError as e:
        logger.error(f"Error: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
