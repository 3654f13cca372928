"""
LessonLens CLI using Typer.

Command-line interface for extraction, compression and analysis.
"""

import json
import sys
import uuid
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import LessonLensSettings
from .errors import LessonLensError
from .log import setup_logging

app = typer.Typer(
    name="lessonlens",
    help="LessonLens: extract and compress curriculum documents for standards gap analysis",
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"LessonLens version {__version__}")
        raise typer.Exit()


def _load_config(config_file: Optional[Path]) -> LessonLensSettings:
    if config_file:
        config = LessonLensSettings.load_from_yaml(config_file)
    else:
        config = LessonLensSettings.load()
    setup_logging(config.log_level, config.log_file)
    return config


def _exit_with_error(error: Exception) -> None:
    """Print an error and exit: 2 for bad input, 1 for everything else."""
    console.print(f"[bold red]Error:[/] {error}")
    if isinstance(error, LessonLensError):
        if error.kind.retryable:
            console.print("[yellow]This is a temporary failure; try again later.[/]")
        sys.exit(2 if error.kind.is_client_error else 1)
    sys.exit(1)


def _read_documents(files: List[Path]):
    from .models import SourceDocument

    return [SourceDocument(data=path.read_bytes(), filename=path.name) for path in files]


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """LessonLens: Curriculum Document Ingestion"""
    pass


@app.command()
def init_config(
    output: Path = typer.Option(
        Path.cwd() / "lessonlens.yaml",
        "--output",
        "-o",
        help="Output config file path",
    ),
    user: bool = typer.Option(
        False,
        "--user",
        help="Create user config at ~/.config/lessonlens/config.yaml",
    ),
):
    """
    Initialize a configuration file with defaults.
    """
    try:
        config = LessonLensSettings()

        if user:
            output = Path.home() / ".config/lessonlens/config.yaml"

        if output.exists():
            overwrite = typer.confirm(f"Config file exists at {output}. Overwrite?")
            if not overwrite:
                console.print("[yellow]Cancelled[/]")
                raise typer.Exit()

        config.save_to_yaml(output)
        console.print(f"[bold green]✓ Config file created:[/] {output}")

    except typer.Exit:
        raise
    except Exception as e:
        _exit_with_error(e)


@app.command()
def extract(
    files: List[Path] = typer.Argument(
        ...,
        help="Documents to extract",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file path",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write <name>.txt for each extracted document into this directory",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-j",
        help="Documents extracted concurrently (default: from config)",
    ),
    no_compress: bool = typer.Option(
        False,
        "--no-compress",
        help="Skip text compression",
    ),
):
    """
    Extract text from curriculum documents.

    Handles text, PDF, Word, Excel and PowerPoint files; every format falls
    back to a raw string scan if its parser fails.
    """
    try:
        from .batch import BatchExtractor, check_upload_limits
        from .orchestrator import ExtractionOrchestrator

        config = _load_config(config_file)
        if no_compress:
            config.compression.enabled = False
        config.ensure_directories()

        documents = _read_documents(files)
        check_upload_limits(documents, config.upload)

        batch = BatchExtractor(ExtractionOrchestrator(config), max_workers=workers)
        items = batch.extract_all(documents)

        table = Table(title="Extraction Results", show_header=True, header_style="bold cyan")
        table.add_column("File", style="white")
        table.add_column("Status")
        table.add_column("Method", style="dim")
        table.add_column("Chars / Reason", justify="right")

        succeeded = 0
        for name, outcome in items:
            if outcome.ok:
                succeeded += 1
                table.add_row(name, "[green]success[/]", outcome.method, f"{len(outcome.text):,}")
                if output_dir:
                    output_dir.mkdir(parents=True, exist_ok=True)
                    (output_dir / f"{Path(name).stem}.txt").write_text(outcome.text, encoding="utf-8")
            else:
                status = "[yellow]rejected[/]" if outcome.kind.is_client_error else "[red]failed[/]"
                table.add_row(name, status, outcome.kind.value, outcome.reason)

        console.print()
        console.print(table)
        console.print(f"\n[bold]{succeeded}/{len(items)} documents extracted[/]")

        if succeeded == 0:
            sys.exit(1)

    except Exception as e:
        _exit_with_error(e)


@app.command()
def compress(
    file: Path = typer.Argument(
        ...,
        help="Text file to compress",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file path",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Print the compressed text",
    ),
):
    """
    Show how much the compressor removes from a text file.
    """
    try:
        from .compressor import TextCompressor

        config = _load_config(config_file)
        text = file.read_text(encoding="utf-8", errors="replace")
        compressed, stats = TextCompressor(config.compression).compress_with_stats(text)

        table = Table(title="Compression", show_header=True, header_style="bold cyan")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="green")
        table.add_row("Characters", f"{stats.original_length:,} → {stats.compressed_length:,}")
        table.add_row("Paragraphs", f"{stats.paragraphs_in:,} → {stats.paragraphs_out:,}")
        table.add_row("Ratio", f"{stats.ratio:.1%}")
        table.add_row("Relevance filter", "applied" if stats.relevance_filter_applied else "skipped")

        console.print()
        console.print(table)
        if show:
            console.print()
            console.print(compressed, markup=False, highlight=False)

    except Exception as e:
        _exit_with_error(e)


@app.command()
def analyze(
    files: List[Path] = typer.Argument(
        ...,
        help="Lesson, assessment and student response documents",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    grade: str = typer.Option(..., "--grade", help="Grade level, e.g. '5th'"),
    subject: str = typer.Option(..., "--subject", help="Subject area"),
    unit: str = typer.Option(..., "--unit", help="Unit of study"),
    chat: bool = typer.Option(
        False,
        "--chat",
        help="Ask follow-up questions about the result (empty line to quit)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file path",
    ),
):
    """
    Extract documents and run a standards gap analysis.

    Filenames decide each document's role: names containing "lesson",
    "assessment"/"test"/"exam", and "response"/"result"/"answer".
    """
    try:
        from .batch import BatchExtractor, check_upload_limits, to_records
        from .llm import AnalysisPipeline, ChatMessage
        from .orchestrator import ExtractionOrchestrator

        config = _load_config(config_file)
        config.ensure_directories()

        documents = _read_documents(files)
        check_upload_limits(documents, config.upload)

        items = BatchExtractor(ExtractionOrchestrator(config)).extract_all(documents)
        for name, outcome in items:
            if not outcome.ok:
                console.print(f"[yellow]Skipping {name}:[/] {outcome.reason}")

        pipeline = AnalysisPipeline(config)
        request = pipeline.build_request(to_records(items, documents), grade, subject, unit)
        analysis_id = uuid.uuid4().hex
        with console.status("[cyan]Analyzing curriculum...[/]"):
            result = pipeline.analyze(analysis_id, request)

        console.print_json(json.dumps(result.model_dump(by_alias=True)))

        history: List[ChatMessage] = []
        while chat:
            question = typer.prompt("\nQuestion", default="", show_default=False).strip()
            if not question:
                break
            with console.status("[cyan]Thinking...[/]"):
                reply = pipeline.chat(analysis_id, question, history)
            console.print(reply, markup=False, highlight=False)
            history.append(ChatMessage(content=question, is_user=True))
            history.append(ChatMessage(content=reply, is_user=False))

    except Exception as e:
        _exit_with_error(e)


if __name__ == "__main__":
    app()
