"""Command-line entry points.

``multiquery-rag chat``   interactive question answering over an indexed PDF
``multiquery-rag index``  build the vector collection without starting a chat
``model-router``          interactive AI model recommender

Both loops read one line at a time; ``exit`` (any case) or end of input stops
them. Errors during startup exit with status 1; errors while answering one
question are reported and the loop keeps going.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, NoReturn

import click

from .errors import RagError
from .llm import OpenAIGenerator
from .model_catalog import load_model_catalog
from .model_router import recommend_model
from .pipeline import (
    MODE_PARALLEL,
    MODE_SIMPLE,
    QueryOutcome,
    build_answer_fn,
    build_query_handler,
    build_search_fn,
    build_services,
    ensure_pdf_indexed,
)
from .query_expansion import DEFAULT_TOPIC
from .settings import load_settings, require_api_key
from .tracing import configure_tracing, get_tracer

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
PREVIEW_CHARS = 150


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    raise SystemExit(1)


def _read_line(prompt: str) -> str:
    return click.prompt(prompt, default="", show_default=False, prompt_suffix=" ")


def format_outcome(outcome: QueryOutcome) -> str:
    """Render an answer and the contexts used for it."""
    lines = ["", "=== ANSWER ===", outcome.answer, "=============="]
    if outcome.hits:
        lines += ["", "=== RELEVANT CONTEXTS USED ==="]
        for position, hit in enumerate(outcome.hits, start=1):
            retrieved_by = hit.query or "Original query"
            lines.append(
                f'\n[{position}] Relevance: {hit.score * 100:.2f}% (Retrieved by: "{retrieved_by}")'
            )
            lines.append(hit.text[:PREVIEW_CHARS] + "...")
    return "\n".join(lines)


def run_interactive_loop(
    handle: Callable[[str], str],
    prompt: str,
    read_line: Callable[[str], str] = _read_line,
    echo: Callable[[str], None] = click.echo,
) -> int:
    """Read requests until ``exit`` or end of input and print each response.

    Args:
        handle: Turns one request into the text to print.
        prompt: Prompt shown before each read.
        read_line: Input source; raising EOFError or click.Abort ends the loop.
        echo: Output sink.

    Returns:
        Number of requests handled, including failed ones.
    """
    handled = 0
    while True:
        try:
            request = read_line(prompt).strip()
        except (EOFError, click.Abort):
            break
        if request.lower() == EXIT_COMMAND:
            break
        if not request:
            continue

        handled += 1
        try:
            echo(handle(request))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error processing request")
            echo(f"Error processing query: {exc}")
    echo("Goodbye!")
    return handled


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level.")
def main(verbose: bool) -> None:
    """Question answering over a PDF with multi-query retrieval."""
    _configure_logging(verbose)


@main.command()
@click.option("--pdf", "pdf_path", type=click.Path(dir_okay=False), default=None, help="PDF to index.")
def index(pdf_path: str | None) -> None:
    """Index the PDF if the collection is missing or empty."""
    try:
        settings = load_settings()
        require_api_key()
        services = build_services(settings)
        point_count = ensure_pdf_indexed(services, settings, pdf_path=pdf_path)
    except RagError as exc:
        _fail(f"Error: {exc}")
    except Exception as exc:  # noqa: BLE001
        logger.exception("Indexing failed")
        _fail(f"Error during indexing: {exc}")
    click.echo(f"Vector store ready with {point_count} indexed chunks.")


@main.command()
@click.option("--pdf", "pdf_path", type=click.Path(dir_okay=False), default=None, help="PDF to index.")
@click.option(
    "--mode",
    type=click.Choice([MODE_PARALLEL, MODE_SIMPLE]),
    default=MODE_PARALLEL,
    show_default=True,
    help="Multi-query retrieval or a single search per question.",
)
@click.option("--k", "top_k", type=click.IntRange(min=1), default=None, help="Number of contexts to use.")
@click.option("--topic", default=DEFAULT_TOPIC, show_default=True, help="Subject of the document.")
@click.option(
    "--trace-endpoint",
    default=lambda: os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"),
    help="OTLP HTTP endpoint for OpenTelemetry traces.",
)
def chat(pdf_path: str | None, mode: str, top_k: int | None, topic: str, trace_endpoint: str | None) -> None:
    """Answer questions about the indexed PDF until 'exit'."""
    try:
        settings = load_settings()
        require_api_key()
        services = build_services(settings)
        click.echo("Loading vector store...")
        point_count = ensure_pdf_indexed(services, settings, pdf_path=pdf_path)
    except RagError as exc:
        _fail(f"Error: {exc}")
    except Exception as exc:  # noqa: BLE001
        logger.exception("Startup failed")
        _fail(f"Error during startup: {exc}")

    click.echo(f"Vector store ready with {point_count} indexed chunks.")

    tracer = None
    if trace_endpoint:
        configure_tracing(endpoint=trace_endpoint)
        tracer = get_tracer("multiquery_rag.chat")

    k = top_k or settings.retrieval.top_k
    handle_query = build_query_handler(
        build_search_fn(services, mode=mode, k=k, topic=topic),
        build_answer_fn(services, topic=topic),
        tracer=tracer,
        model_name=settings.openai.chat_model,
    )

    run_interactive_loop(
        lambda question: format_outcome(handle_query(question)),
        prompt=f'\nEnter your question about {topic} (or type "exit" to quit):',
    )


@click.command()
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON file replacing the built-in model catalog.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level.")
def router_main(catalog_path: str | None, verbose: bool) -> None:
    """Recommend an AI model for what you want to build."""
    _configure_logging(verbose)
    try:
        settings = load_settings()
        require_api_key()
        models = load_model_catalog(catalog_path or settings.paths.model_catalog_path)
    except RagError as exc:
        _fail(f"Error: {exc}")

    generator = OpenAIGenerator(model=settings.openai.router_model)

    click.echo("\n===== AI Model Recommender =====")
    click.echo("Describe what you want to build or the problem you're trying to solve,")
    click.echo("and I'll recommend the best AI model for your needs.")
    click.echo("Type 'exit' to quit.\n")

    def handle(query: str) -> str:
        click.echo("\nAnalyzing your needs...")
        recommendation = recommend_model(query, models, generator)
        return f"\n=== RECOMMENDATION ===\n\n{recommendation}\n\n========================\n"

    run_interactive_loop(handle, prompt="\nYour query:")
