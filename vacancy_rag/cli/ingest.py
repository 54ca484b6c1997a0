# =============================================================================
# vacancy_rag/cli/ingest.py -- Operator CLI for position documents
# =============================================================================
#
# Subcommands:
#
#   position  -- Create a position row or rename it
#   ingest    -- Ingest a document file for a position (extract, chunk,
#               embed, store, then summary + interview questions)
#   search    -- Nearest-chunk search within one position
#   show      -- Document status plus its stored chunks, in order
#   questions -- Print a position's description and interview questions
#
# Provider selection mirrors main.py so the CLI and any embedding
# application agree on the embedding model.
#
# Usage examples:
#   python -m vacancy_rag.cli position --id pos-42 --title "Backend Engineer"
#   python -m vacancy_rag.cli ingest --position pos-42 --file role.pdf
#   python -m vacancy_rag.cli search --position pos-42 --query "on-call rota"
#   python -m vacancy_rag.cli show --document 3f1c...
#   python -m vacancy_rag.cli questions --position pos-42
# =============================================================================

"""Standalone CLI for ingesting and querying position documents."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

from vacancy_rag.config.loader import settings_from_config
from vacancy_rag.config.settings import Settings
from vacancy_rag.utils.errors import VacancyRAGError
from vacancy_rag.utils.logging import configure_logging

_DEFAULT_MIME = "application/octet-stream"


def _guess_mime_type(path: Path) -> str:
    # mimetypes doesn't know Markdown on every platform.
    if path.suffix.lower() in (".md", ".markdown"):
        return "text/markdown"
    mime, _ = mimetypes.guess_type(path.name)
    return mime or _DEFAULT_MIME


def _parse_params(raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    params = json.loads(raw)
    if not isinstance(params, dict):
        raise ValueError("--params must be a JSON object")
    return params


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_position(args: argparse.Namespace, app_settings: Settings) -> int:
    from vacancy_rag.providers.repository.sqlite_position_repository import (
        SQLitePositionRepository,
    )

    positions = SQLitePositionRepository(db_path=app_settings.sqlite_db_path)
    await positions.initialize()
    position = await positions.upsert_position(args.id, title=args.title)
    print(f"Position saved: {position.position_id}  {position.title}")
    return 0


async def _handle_ingest(args: argparse.Namespace, app_settings: Settings) -> int:
    from vacancy_rag.main import build_services, initialize_storage

    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    try:
        params = _parse_params(args.params)
    except ValueError as exc:
        print(f"Error: invalid --params: {exc}", file=sys.stderr)
        return 1

    components = build_services(app_settings)
    await initialize_storage(components)

    positions = components["position_repository"]
    if await positions.get_position(args.position) is None:
        print(f"Error: unknown position '{args.position}' (create it with 'position')",
              file=sys.stderr)
        return 1

    mime_type = args.mime_type or _guess_mime_type(path)
    print(f"Ingesting {path.name} ({mime_type}) for position {args.position}")

    result = await components["ingestion_service"].ingest(
        buffer=path.read_bytes(),
        file_name=path.name,
        mime_type=mime_type,
        position_id=args.position,
        params=params,
        run_synthesis=not args.no_synthesis,
    )

    print("\nIngestion complete:")
    print(f"  Document ID:    {result.document_id}")
    print(f"  Chunks stored:  {result.chunk_count}")
    print(f"  Time:           {result.elapsed_seconds:.2f}s")
    if result.synthesis is None:
        print("  Synthesis:      skipped")
    else:
        print(f"  Summary:        {result.synthesis.summary_status.value}")
        print(f"  Questions:      {result.synthesis.questions_status.value}")
    return 0


async def _handle_search(args: argparse.Namespace, app_settings: Settings) -> int:
    from vacancy_rag.main import build_embedding_provider, build_vector_store
    from vacancy_rag.services.search_service import SimilaritySearchService

    embedding_provider = build_embedding_provider(app_settings)
    service = SimilaritySearchService(
        embedding_provider=embedding_provider,
        vector_store=build_vector_store(app_settings, embedding_provider),
    )
    matches = await service.search(args.position, args.query, top_k=args.top_k)

    if not matches:
        print("No matching chunks.")
        return 0

    for rank, match in enumerate(matches, start=1):
        preview = " ".join(match.content.split())[:160]
        print(f"{rank:>2}. distance={match.distance:.4f}  "
              f"document={match.document_id}  chunk={match.sequence}")
        print(f"    {preview}")
    return 0


async def _handle_show(args: argparse.Namespace, app_settings: Settings) -> int:
    from vacancy_rag.main import build_vector_store
    from vacancy_rag.providers.repository.sqlite_document_repository import (
        SQLiteDocumentRepository,
    )

    documents = SQLiteDocumentRepository(db_path=app_settings.sqlite_db_path)
    await documents.initialize()
    document = await documents.get_document(args.document)
    if document is None:
        print(f"Error: unknown document '{args.document}'", file=sys.stderr)
        return 1

    chunks = await build_vector_store(app_settings).list_chunks(document.document_id)

    print(f"Document {document.document_id}")
    print("=" * 40)
    print(f"  Position:     {document.position_id}")
    print(f"  File:         {document.file_name} ({document.file_type})")
    print(f"  Status:       {document.status.value}")
    print(f"  Chunk count:  {document.chunk_count if document.chunk_count is not None else '-'}")
    print(f"  Stored:       {len(chunks)} chunks")
    if document.training_params:
        print(f"  Params:       {json.dumps(document.training_params)}")
    for chunk in chunks:
        preview = " ".join(chunk.content.split())[:100]
        print(f"    [{chunk.sequence:>3}] {chunk.embedding_model:<24} {preview}")
    return 0


async def _handle_questions(args: argparse.Namespace, app_settings: Settings) -> int:
    from vacancy_rag.providers.repository.sqlite_position_repository import (
        SQLitePositionRepository,
    )

    positions = SQLitePositionRepository(db_path=app_settings.sqlite_db_path)
    await positions.initialize()
    position = await positions.get_position(args.position)
    if position is None:
        print(f"Error: unknown position '{args.position}'", file=sys.stderr)
        return 1

    print(f"{position.title or position.position_id}")
    print("=" * 40)
    print(position.description or "(no description)")
    print()
    if not position.phase2_questions:
        print("No interview questions yet.")
        return 0
    for q in position.phase2_questions:
        print(f"  {q.id:<4} [{q.type.value:<10}] ({q.skill}) {q.question}")
    return 0


_HANDLERS = {
    "position": _handle_position,
    "ingest": _handle_ingest,
    "search": _handle_search,
    "show": _handle_show,
    "questions": _handle_questions,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the position document CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m vacancy_rag.cli",
        description="Ingest and query documents attached to job positions.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML config file (default: config/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- position --
    position_parser = subparsers.add_parser("position", help="Create or rename a position")
    position_parser.add_argument("--id", required=True, help="Position id")
    position_parser.add_argument("--title", default="", help="Position title")

    # -- ingest --
    ingest_parser = subparsers.add_parser("ingest", help="Ingest a document for a position")
    ingest_parser.add_argument("--position", required=True, help="Owning position id")
    ingest_parser.add_argument("--file", required=True, help="Path to the document")
    ingest_parser.add_argument(
        "--mime-type",
        dest="mime_type",
        default=None,
        help="Override the MIME type guessed from the file name",
    )
    ingest_parser.add_argument(
        "--params",
        default=None,
        help="Training params as a JSON object, stored on the document",
    )
    ingest_parser.add_argument(
        "--no-synthesis",
        action="store_true",
        dest="no_synthesis",
        help="Skip summary and interview question generation",
    )

    # -- search --
    search_parser = subparsers.add_parser("search", help="Search a position's documents")
    search_parser.add_argument("--position", required=True, help="Position id")
    search_parser.add_argument("--query", required=True, help="Query text")
    search_parser.add_argument("--top-k", dest="top_k", type=int, default=10,
                               help="Maximum results (default: 10)")

    # -- show --
    show_parser = subparsers.add_parser("show", help="Show a document and its chunks")
    show_parser.add_argument("--document", required=True, help="Document id")

    # -- questions --
    questions_parser = subparsers.add_parser(
        "questions", help="Print a position's interview questions"
    )
    questions_parser.add_argument("--position", required=True, help="Position id")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, load settings, dispatch."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = settings_from_config(args.config)
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    try:
        exit_code = asyncio.run(_HANDLERS[args.command](args, app_settings))
    except VacancyRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 2

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
