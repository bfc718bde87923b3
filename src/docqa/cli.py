from __future__ import annotations

import logging
import typer

from pathlib import Path
from typing import List, Optional

from docqa import __version__
from docqa.config import get_settings
from docqa.index import index_sources
from docqa.loaders import read_sources_file
from docqa.logging_utils import setup_logging
from docqa.rag import answer_question
from docqa.search import semantic_search
from docqa.secret_fetcher import SecretsExtensionClient
from docqa.secrets_config import (
    SecretsPreloadConfig,
    dump_preload_config,
    extension_environment,
    load_preload_config,
    warm_cache,
)


app = typer.Typer(add_completion=False, help="Retrieval-augmented Q&A over private documents")


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "****"
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


@app.command()
def health() -> None:
    """Health check to verify config + logging works."""
    settings = get_settings()
    setup_logging(settings.log_level)
    log = logging.getLogger("docqa.health")

    log.info("Health check OK.")
    log.info("Model: %s", settings.openai_model)
    log.info("Embedding model: %s (%d dims)", settings.openai_embedding_model, settings.embedding_dimensions)
    if settings.chroma_host:
        log.info("Chroma server: %s:%d", settings.chroma_host, settings.chroma_port)
    else:
        log.info("Chroma dir: %s", settings.chroma_dir)
    log.info("Collection: %s", settings.chroma_collection)
    log.info("OpenAI key configured: %s", bool(settings.openai_api_key))

    typer.echo("OK")


@app.command()
def version() -> None:
    """Print version and exit."""
    typer.echo(f"docqa {__version__}")


@app.command()
def index(
    sources: Optional[List[str]] = typer.Argument(None, help="Files, directories or URLs to index"),
    sources_file: Optional[Path] = typer.Option(
        None,
        "--sources-file",
        help="File with one source per line",
    ),
    chunk_size: Optional[int] = typer.Option(None, help="Max characters per chunk"),
    chunk_overlap: Optional[int] = typer.Option(None, help="Characters repeated between chunks"),
) -> None:
    """
    Load documents, chunk and embed them, and store them in the vector database.
    """
    all_sources = list(sources or [])
    try:
        setup_logging(get_settings().log_level)
        if sources_file is not None:
            all_sources.extend(read_sources_file(sources_file))
    except (ValueError, RuntimeError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not all_sources:
        typer.secho("No sources given.", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        summary = index_sources(all_sources, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    except (ValueError, RuntimeError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(summary)
    if summary["failed"]:
        raise typer.Exit(code=1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query (natural language)"),
    top_k: Optional[int] = typer.Option(None, help="Number of results to return"),
) -> None:
    """
    Semantic search over indexed chunks.
    """
    try:
        setup_logging(get_settings().log_level)
        results = semantic_search(query=query, top_k=top_k)
    except (ValueError, RuntimeError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not results:
        typer.echo("No results found.")
        return

    for r in results:
        typer.echo("=" * 80)
        typer.echo(f"Rank: {r.rank} | Score: {r.score:.4f}")
        typer.echo(f"Source: {r.source} (chunk {r.chunk_index})")
        if r.title:
            typer.echo(f"Title:  {r.title}")
        typer.echo()
        typer.echo(r.text[:500] + ("..." if len(r.text) > 500 else ""))


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to answer from the indexed documents"),
    top_k: Optional[int] = typer.Option(None, help="Number of chunks to retrieve"),
    show_sources: bool = typer.Option(False, "--show-sources", help="Print the retrieved sources"),
) -> None:
    """
    Answer a question with retrieval-augmented generation.
    """
    try:
        setup_logging(get_settings().log_level)
        answer = answer_question(question, top_k)
    except (ValueError, RuntimeError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(answer.answer)

    if show_sources:
        typer.echo()
        typer.echo("Sources:")
        for s in answer.sources:
            typer.echo(f"  [{s.rank}] {s.source} (chunk {s.chunk_index}, score {s.score:.4f})")


@app.command()
def secret(
    secret_id: str = typer.Argument(..., help="Secret name or ARN"),
    port: Optional[int] = typer.Option(None, help="Extension port (default: env or 2773)"),
    reveal: bool = typer.Option(False, "--reveal", help="Print values unmasked"),
) -> None:
    """
    Read a secret through the local Parameters and Secrets extension.
    """
    try:
        setup_logging(get_settings().log_level)
        with SecretsExtensionClient(port=port) as client:
            bundle = client.get_secret(secret_id)
    except (ValueError, RuntimeError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"OK {bundle.secret_id}", fg=typer.colors.GREEN)
    for key in sorted(bundle.values):
        value = bundle.values[key]
        typer.echo(f"{key}: {value if reveal else _mask(value)}")


@app.command("secrets-config")
def secrets_config(
    out_file: Path = typer.Argument(..., help="YAML file to write"),
    secret_ids: List[str] = typer.Option(..., "--secret", help="Secret id to preload (repeatable)"),
    ttl_minutes: int = typer.Option(10, "--ttl-minutes", help="Extension cache TTL in minutes"),
    max_items: int = typer.Option(1000, "--max-items", help="Extension cache size"),
) -> None:
    """
    Write the secrets preload config and print the matching function environment.
    """
    try:
        config = SecretsPreloadConfig(secrets=secret_ids, cache_ttl_minutes=ttl_minutes, max_items=max_items)
        dump_preload_config(config, out_file)
    except (ValueError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Wrote {out_file}")
    for key, value in extension_environment(config).items():
        typer.echo(f"{key}={value}")


@app.command("secrets-warm")
def secrets_warm(
    config_file: Path = typer.Argument(..., help="Secrets preload YAML"),
) -> None:
    """
    Fetch every secret listed in the preload config once, filling the extension cache.
    """
    try:
        setup_logging(get_settings().log_level)
        config = load_preload_config(config_file)
        with SecretsExtensionClient(port=config.port) as client:
            status = warm_cache(config, client)
    except (ValueError, RuntimeError, OSError) as e:
        typer.secho(f"FAILED {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    for secret_id, result in status.items():
        typer.echo(f"{secret_id}: {result}")
    if any(result != "ok" for result in status.values()):
        raise typer.Exit(code=1)
