# =============================================================================
# notemaster/cli/ingest.py -- document management from the command line
# =============================================================================
#
# Runs the same services as the web app (assembled by main.build_services)
# against the configured stores, so documents ingested here are searchable
# through the API and vice versa.
#
# Supported subcommands:
#
#   ingest  -- upload a local file for an owner (extract -> chunk -> index)
#   search  -- owner-scoped semantic search, prints the top passages
#   delete  -- delete a document by id from blob, vector and SQL stores
#   list    -- list an owner's documents, newest first
#
# Usage examples:
#   python -m notemaster.cli.ingest ingest --file notes.pdf --owner alice@example.com
#   python -m notemaster.cli.ingest search --owner alice@example.com --query "mitosis"
#   python -m notemaster.cli.ingest list --owner alice@example.com
#   python -m notemaster.cli.ingest delete --owner alice@example.com --id 3f2a...
# =============================================================================

"""Standalone CLI for ingesting, searching and deleting NoteMaster documents."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from notemaster.config.settings import Settings
from notemaster.models.documents import guess_mime_type


def _build_services(app_settings: Settings) -> dict:
    """Assemble providers and services, deferring heavy imports until needed."""
    from notemaster.main import build_services

    return build_services(app_settings)


async def _handle_ingest(args: argparse.Namespace, services: dict) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    mime_type = args.mime or guess_mime_type(path.name)
    print(f"Ingesting {path.name} ({mime_type or 'unknown type'}) for {args.owner}")

    result = await services["document_service"].upload(
        data=path.read_bytes(),
        file_name=path.name,
        mime_type=mime_type,
        owner_id=args.owner,
    )
    if not result.success:
        print(f"Ingestion failed ({result.error_type}): {result.error}", file=sys.stderr)
        return 1

    print("\nIngestion complete:")
    print(f"  Document ID:    {result.document_id}")
    print(f"  Chunks indexed: {result.chunk_count}")
    return 0


async def _handle_search(args: argparse.Namespace, services: dict) -> int:
    result = await services["retrieval_service"].retrieve(
        args.query, args.owner, top_k=args.top_k
    )
    if not result.success:
        print(f"Search failed: {result.error}", file=sys.stderr)
        return 1

    if not result.results:
        print("No relevant documents found.")
        return 0

    for rank, passage in enumerate(result.results, start=1):
        meta = passage.metadata
        print(f"[{rank}] {meta.file_name} #{meta.chunk_index}  (score {passage.score:.3f})")
        print(f"    {passage.text[:300].replace(chr(10), ' ')}")
        print()
    return 0


async def _handle_delete(args: argparse.Namespace, services: dict) -> int:
    result = await services["document_service"].delete(args.owner, args.id)
    if not result.success:
        print(f"Delete failed: {result.error}", file=sys.stderr)
        return 1

    print(f"Deleted document {args.id}")
    for failure in result.partial_failures:
        print(f"  warning: {failure}")
    return 0


async def _handle_list(args: argparse.Namespace, services: dict) -> int:
    documents = await services["document_service"].list_documents(args.owner)
    if not documents:
        print(f"No documents for {args.owner}.")
        return 0

    print(f"{'ID':<34} {'CHUNKS':>6}  {'UPLOADED':<20} NAME")
    for doc in documents:
        uploaded = doc.created_at.strftime("%Y-%m-%d %H:%M:%S")
        print(f"{doc.document_id:<34} {doc.chunk_count:>6}  {uploaded:<20} {doc.file_name}")
    return 0


_HANDLERS = {
    "ingest": _handle_ingest,
    "search": _handle_search,
    "delete": _handle_delete,
    "list": _handle_list,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    services = _build_services(app_settings)
    await services["document_repository"].initialize()
    return await _HANDLERS[args.command](args, services)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m notemaster.cli.ingest",
        description="Ingest, search and delete NoteMaster documents.",
    )
    subparsers = parser.add_subparsers(dest="command")

    ingest_p = subparsers.add_parser("ingest", help="Upload and index a local file")
    ingest_p.add_argument("--file", required=True, help="Path to the document")
    ingest_p.add_argument("--owner", required=True, help="Owner id the document belongs to")
    ingest_p.add_argument("--mime", default=None, help="Mime type (guessed from suffix if omitted)")

    search_p = subparsers.add_parser("search", help="Semantic search over an owner's documents")
    search_p.add_argument("--owner", required=True)
    search_p.add_argument("--query", required=True)
    search_p.add_argument("--top-k", type=int, default=None, dest="top_k")

    delete_p = subparsers.add_parser("delete", help="Delete a document by id")
    delete_p.add_argument("--owner", required=True)
    delete_p.add_argument("--id", required=True, help="Document id (see 'list')")

    list_p = subparsers.add_parser("list", help="List an owner's documents")
    list_p.add_argument("--owner", required=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse the subcommand, run it, exit with its status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()
