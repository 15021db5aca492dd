"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from writing_annotator.analyzers.registry import ANALYZER_NAMES, build_analyzers
from writing_annotator.analyzers.rule_based import SpellChecker
from writing_annotator.cache.analysis_cache import AnalysisCache
from writing_annotator.clients.llm_client import LLMClient
from writing_annotator.config import AppConfig, load_config
from writing_annotator.logging.usage_store import UsageStore
from writing_annotator.models.document import ApplyResult
from writing_annotator.models.stats import compute_text_stats
from writing_annotator.models.suggestion import Severity, SuggestionType
from writing_annotator.models.tone import analyze_tone
from writing_annotator.parsers.document_parser import parse_document, write_document
from writing_annotator.pipeline.orchestrator import (
    AnalysisBatch,
    AnalysisFailedError,
    AnnotationSession,
)
from writing_annotator.stores.document_store import (
    DocumentStore,
    FileDocumentStore,
    InMemoryDocumentStore,
)

app = typer.Typer(
    name="writing-annotator",
    help="Writing feedback: locate, merge and apply analyzer suggestions",
    no_args_is_help=True,
)
console = Console()

SEVERITY_STYLE = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.SUGGESTION: "cyan",
    Severity.UNKNOWN: "dim",
}


def _check_file(file: Path) -> None:
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)


def _make_llm(config: AppConfig, no_ai: bool) -> LLMClient | None:
    if no_ai:
        return None
    if not os.environ.get("ANTHROPIC_API_KEY"):
        console.print("[dim]ANTHROPIC_API_KEY not set; running rule-based analyzers only[/dim]")
        return None
    return LLMClient(
        timeout=config.llm.timeout,
        max_retries=config.llm.max_retries,
        max_concurrency=config.llm.max_concurrency,
    )


async def _run_session(
    store: DocumentStore,
    config: AppConfig,
    *,
    goal: str | None,
    only: list[str] | None,
    no_ai: bool,
    apply_mode: str | None = None,
    apply_type: str | None = None,
) -> tuple[AnalysisBatch, ApplyResult | None]:
    llm = _make_llm(config, no_ai)
    dictionary = config.analysis.spelling_dictionary
    spell_checker = SpellChecker(
        dictionary_path=Path(dictionary).expanduser() if dictionary else None
    )
    try:
        analyzers = build_analyzers(
            only or config.analysis.analyzers,
            llm=llm,
            spell_checker=spell_checker,
            model=config.llm.model,
        )
        session = AnnotationSession(
            store,
            analyzers,
            llm=llm,
            cache=AnalysisCache(
                db_path=config.cache.resolved_db_path,
                ttl_days=config.cache.ttl_days,
            ) if config.cache.enabled else None,
            usage_store=UsageStore(config.usage.resolved_db_path) if config.usage.enabled else None,
            analyzer_timeout=config.analysis.analyzer_timeout,
        )
        batch = await session.analyze(goal)

        result = None
        if apply_mode == "all":
            result = await session.apply_all()
        elif apply_mode == "errors":
            result = await session.apply_errors()
        elif apply_mode == "type":
            result = await session.apply_type(apply_type)
        return batch, result
    finally:
        spell_checker.close()
        if llm is not None:
            await llm.close()


def _analyze_with_spinner(store: DocumentStore, config: AppConfig, **kwargs):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Analyzing...", total=None)
        try:
            return asyncio.run(_run_session(store, config, **kwargs))
        except AnalysisFailedError as e:
            progress.stop()
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)


def _print_batch(batch: AnalysisBatch, verbose: bool) -> None:
    if batch.failed:
        console.print(f"[yellow]Failed analyzers: {', '.join(batch.failed)}[/yellow]")
    suggestion_set = batch.suggestion_set
    if suggestion_set is None or (not suggestion_set.suggestions and not suggestion_set.unresolved):
        console.print("[green]No suggestions.[/green]")
        return

    table = Table(title=f"Suggestions ({len(suggestion_set)})")
    table.add_column("Span", justify="right", style="dim")
    table.add_column("Type")
    table.add_column("Original")
    table.add_column("Suggested", style="green")
    table.add_column("Message")
    for s in suggestion_set.suggestions:
        style = SEVERITY_STYLE[s.severity]
        table.add_row(
            f"{s.start_index}-{s.end_index}",
            f"[{style}]{s.type.value}[/{style}]",
            s.original_text,
            s.suggested_text or "[dim](remove)[/dim]",
            s.message + (f"\n[dim]{s.explanation}[/dim]" if verbose and s.explanation else ""),
        )
    console.print(table)

    if suggestion_set.unresolved:
        console.print("\n[yellow]Could not locate in text:[/yellow]")
        for s in suggestion_set.unresolved:
            console.print(f"  - [{s.type.value}] {s.message} ({s.original_text!r})")

    if verbose:
        console.print(f"[dim]Analyzers: {', '.join(batch.succeeded)} | {batch.elapsed_seconds:.1f}s[/dim]")


def _batch_to_json(batch: AnalysisBatch) -> str:
    suggestion_set = batch.suggestion_set
    data = {
        "version": batch.version,
        "failed": batch.failed,
        "suggestions": [s.model_dump(mode="json") for s in suggestion_set.suggestions] if suggestion_set else [],
        "unresolved": [s.model_dump(mode="json") for s in suggestion_set.unresolved] if suggestion_set else [],
    }
    return json.dumps(data, ensure_ascii=False, indent=2)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def analyze(
    file: Path = typer.Argument(help="Document to analyze (.txt, .md, .docx)"),
    goal: str = typer.Option(None, "--goal", "-g", help="Writing goal, e.g. 'college application essay'"),
    only: list[str] = typer.Option(None, "--only", help=f"Analyzers to run ({', '.join(ANALYZER_NAMES)})"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Rule-based analyzers only"),
    as_json: bool = typer.Option(False, "--json", help="Print suggestions as JSON"),
    details: bool = typer.Option(False, "--details", "-d", help="Show explanations"),
) -> None:
    """Analyze a document and list conflict-free suggestions."""
    _check_file(file)
    config = load_config()
    store = InMemoryDocumentStore(parse_document(file))

    try:
        batch, _ = _analyze_with_spinner(store, config, goal=goal, only=only, no_ai=no_ai)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(_batch_to_json(batch))
    else:
        _print_batch(batch, details)


@app.command()
def apply(
    file: Path = typer.Argument(help="Document to correct (.txt, .md, .docx)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write here instead of editing in place"),
    goal: str = typer.Option(None, "--goal", "-g", help="Writing goal"),
    only: list[str] = typer.Option(None, "--only", help="Analyzers to run"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Rule-based analyzers only"),
    errors_only: bool = typer.Option(False, "--errors", help="Apply error-severity suggestions only"),
    kind: str = typer.Option(None, "--type", "-t", help="Apply one suggestion type only"),
) -> None:
    """Analyze a document and apply its suggestions in one edit."""
    _check_file(file)
    if errors_only and kind:
        console.print("[red]--errors and --type cannot be combined[/red]")
        raise typer.Exit(1)
    if kind:
        try:
            SuggestionType(kind)
        except ValueError:
            console.print(f"[red]Unknown type: {kind}[/red]")
            raise typer.Exit(1)

    config = load_config()
    if output is None:
        store = FileDocumentStore(file)
    else:
        store = InMemoryDocumentStore(parse_document(file))

    mode = "errors" if errors_only else "type" if kind else "all"
    try:
        batch, result = _analyze_with_spinner(
            store, config, goal=goal, only=only, no_ai=no_ai, apply_mode=mode, apply_type=kind,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if batch.failed:
        console.print(f"[yellow]Failed analyzers: {', '.join(batch.failed)}[/yellow]")
    if result is None or not result.changed:
        console.print("[green]Nothing to apply.[/green]")
        return

    target = file
    if output is not None:
        try:
            target = write_document(output, result.new_text, template=file)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    console.print(Panel(
        f"{result.summary}"
        + (f"\n[yellow]stale: {len(result.stale_ids)}[/yellow]" if result.stale_ids else ""),
        title="Applied",
    ))
    console.print(f"[green]Saved: {target}[/green]")


@app.command()
def stats(
    file: Path = typer.Argument(help="Document (.txt, .md, .docx)"),
) -> None:
    """Show word counts, readability and tone."""
    _check_file(file)
    text = parse_document(file)
    text_stats = compute_text_stats(text)

    table = Table(title=str(file), show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Words", str(text_stats.word_count))
    table.add_row("Sentences", str(text_stats.sentence_count))
    table.add_row("Characters", str(text_stats.character_count))
    table.add_row("Words / sentence", f"{text_stats.average_words_per_sentence}")
    table.add_row("Complex words", str(text_stats.complex_words))
    table.add_row("Reading ease", f"{text_stats.reading_ease}")
    table.add_row("Grade", f"{text_stats.grade} ({text_stats.grade_level})")
    console.print(table)

    tone = analyze_tone(text)
    if tone is None:
        console.print("[dim]Text too short for a tone estimate.[/dim]")
        return
    lines = [tone.summary]
    for label, found in (
        ("Confident", tone.confident),
        ("Uncertain", tone.uncertain),
        ("Formal", tone.formal),
    ):
        if found:
            lines.append(f"[dim]{label}: {', '.join(found)}[/dim]")
    for rec in tone.recommendations:
        lines.append(f"[cyan]- {rec}[/cyan]")
    console.print(Panel("\n".join(lines), title=f"Tone: {tone.overall}"))


@app.command()
def usage(
    limit: int = typer.Option(10, "--limit", "-n", help="Recent runs to list"),
) -> None:
    """Show this month's usage and recent runs."""
    config = load_config()
    store = UsageStore(config.usage.resolved_db_path)
    monthly = store.get_monthly_stats()

    console.print(Panel(
        f"Runs: {monthly['total_runs']} (analyses: {monthly['analyses']}) | "
        f"Suggestions: {monthly['suggestions']} | Applied: {monthly['applied']} | "
        f"Stale: {monthly['stale']}\n"
        f"Tokens: {monthly['total_input_tokens']:,} in / {monthly['total_output_tokens']:,} out | "
        f"Cost: ${monthly['total_cost_usd']:.4f} | Success: {monthly['success_rate']:.0f}%",
        title=f"Usage {monthly['month']}",
    ))

    logs = store.get_logs(limit=limit)
    if not logs:
        console.print("[dim]No runs recorded.[/dim]")
        return
    table = Table()
    table.add_column("Time", style="dim")
    table.add_column("Action")
    table.add_column("Suggestions", justify="right")
    table.add_column("Applied", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("OK")
    for log in logs:
        table.add_row(
            log.timestamp.strftime("%Y-%m-%d %H:%M"),
            log.action,
            str(log.suggestion_count),
            str(log.applied_count),
            f"${log.estimated_cost_usd:.4f}",
            "[green]yes[/green]" if log.success else f"[red]{log.error_message or 'no'}[/red]",
        )
    console.print(table)


@app.command("cache-clear")
def cache_clear() -> None:
    """Remove all cached analyzer results."""
    config = load_config()
    cache = AnalysisCache(db_path=config.cache.resolved_db_path, ttl_days=config.cache.ttl_days)
    removed = cache.clear()
    console.print(f"[green]Removed {removed} cached entries.[/green]")


if __name__ == "__main__":
    app()
