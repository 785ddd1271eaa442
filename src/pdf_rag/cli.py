"""Command-line interface.

Commands
--------
- ``process`` — summarise and index up to ``MAX_BATCH_SIZE`` PDFs (files or URLs).
- ``ingest``  — extract text through the cache only, no LLM or index.
- ``query``   — embed a question and list the most similar stored summaries.
- ``delete``  — remove one stored point.
"""

import asyncio
import logging
from datetime import timedelta
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pdf_rag.config import Settings, public_settings
from pdf_rag.errors import PdfRagError
from pdf_rag.ingestion.loader import PdfExtractor
from pdf_rag.ingestion.pipeline import FailurePolicy, IngestionPipeline
from pdf_rag.processor import DocumentProcessor
from pdf_rag.retrieval.base import VectorStoreBase

app = typer.Typer(help="Summarise PDFs and search them by meaning.")
console = Console()
logger = logging.getLogger("pdf_rag.cli")


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_filters(pairs: List[str]) -> dict:
    conditions = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}", param_hint="--filter")
        conditions[key.strip()] = value.strip()
    return conditions


def _build_vector_store(settings: Settings) -> VectorStoreBase:
    from pdf_rag.retrieval.chroma_store import ChromaVectorStore

    return ChromaVectorStore.from_settings(settings)


def _build_embeddings(settings: Settings):
    from pdf_rag.ingestion.embedder import get_embedding_function

    return get_embedding_function(settings.embedding_model)


def _build_processor(settings: Settings) -> DocumentProcessor:
    from pdf_rag.summarization.llm import get_llm

    return DocumentProcessor(
        vector_store=_build_vector_store(settings),
        embeddings=_build_embeddings(settings),
        llm=get_llm(settings),
        cache_path=settings.cache_path,
        max_age=timedelta(hours=settings.cache_max_age_hours),
        max_batch_size=settings.max_batch_size,
        request_timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level"),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )


@app.command()
def process(
    files: Optional[str] = typer.Option(None, "--files", "-f", help="Comma-separated PDF paths"),
    urls: Optional[str] = typer.Option(None, "--urls", "-u", help="Comma-separated PDF URLs"),
) -> None:
    """Summarise PDFs and store one summary vector per source."""
    sources = _split(files) + _split(urls)
    if not sources:
        console.print("[red]Error:[/] pass --files and/or --urls")
        console.print('  pdf-rag process -f "a.pdf,b.pdf"')
        console.print('  pdf-rag process -u "https://host/a.pdf,https://host/b.pdf"')
        raise typer.Exit(1)

    settings = Settings()
    logger.info("Settings: %s", public_settings(settings))
    if len(sources) > settings.max_batch_size:
        console.print(f"[yellow]Only the first {settings.max_batch_size} sources will be processed.[/]")
    console.print(f"[bold]Processing {min(len(sources), settings.max_batch_size)} sources...[/]")

    try:
        processor = _build_processor(settings)
        results = asyncio.run(processor.process(sources))
    except (PdfRagError, OSError) as exc:
        console.print(f"[red]Processing failed:[/] {exc}")
        raise typer.Exit(1) from exc

    for result in results:
        if result.ok:
            tag = " (cached text)" if result.cached else ""
            body = f"{result.summary}\n\n[dim]id: {result.point_id}{tag}[/]"
            console.print(Panel(body, title=result.source, border_style="green"))
        else:
            console.print(Panel(f"[red]Error:[/] {result.error}", title=result.source, border_style="red"))


@app.command()
def ingest(
    paths: List[str] = typer.Argument(..., help="PDF files to extract"),
    policy: Optional[FailurePolicy] = typer.Option(None, "--policy", help="abort | isolate (default from settings)"),
) -> None:
    """Extract text from PDFs, refreshing the cache."""
    settings = Settings()
    pipeline = IngestionPipeline(
        settings.cache_path,
        extractor=PdfExtractor(),
        max_age=timedelta(hours=settings.cache_max_age_hours),
        policy=policy or FailurePolicy(settings.failure_policy),
    )
    try:
        outcomes = pipeline.ingest(paths)
    except (PdfRagError, OSError) as exc:
        console.print(f"[red]Ingestion failed:[/] {exc}")
        raise typer.Exit(1) from exc

    table = Table("Source", "Status", "Chars")
    for outcome in outcomes:
        if outcome.ok:
            status = "[cyan]cached[/]" if outcome.cached else "[green]extracted[/]"
        else:
            status = f"[red]{outcome.error}[/]"
        table.add_row(outcome.source, status, str(len(outcome.text)))
    console.print(table)
    if not all(o.ok for o in outcomes):
        raise typer.Exit(1)


@app.command()
def query(
    text: str = typer.Argument(..., help="Question or phrase to search for"),
    limit: int = typer.Option(5, "--limit", "-k", min=1, help="Number of results"),
    filters: Optional[List[str]] = typer.Option(None, "--filter", help="Payload key=value (repeatable)"),
) -> None:
    """Search stored summaries by similarity."""
    settings = Settings()
    conditions = _parse_filters(filters or [])
    try:
        store = _build_vector_store(settings)
        store.init_collection()
        vector = _build_embeddings(settings).embed_query(text)
        if conditions:
            hits = store.search_filtered(vector, conditions, limit=limit)
        else:
            hits = store.search(vector, limit=limit)
    except PdfRagError as exc:
        console.print(f"[red]Query failed:[/] {exc}")
        raise typer.Exit(1) from exc

    if not hits:
        console.print("[yellow]No matches.[/]")
        return
    table = Table("Score", "File", "Summary", "Id")
    for hit in hits:
        table.add_row(
            f"{hit.score:.3f}",
            str(hit.metadata.get("file_name", "")),
            str(hit.metadata.get("summary", ""))[:120],
            hit.id,
        )
    console.print(table)


@app.command()
def delete(point_id: str = typer.Argument(..., help="Id returned by 'process'")) -> None:
    """Remove one stored point."""
    settings = Settings()
    try:
        store = _build_vector_store(settings)
        store.init_collection()
        store.delete(point_id)
    except PdfRagError as exc:
        console.print(f"[red]Delete failed:[/] {exc}")
        raise typer.Exit(1) from exc
    console.print(f"Deleted {point_id}")


if __name__ == "__main__":
    app()
