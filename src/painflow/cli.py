"""painflow CLI - typer application entry point."""

from __future__ import annotations

import asyncio
import atexit
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from painflow.observability import close_file_logging, configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

if TYPE_CHECKING:
    from collections.abc import Sequence

    from painflow.collaborators import ChatMode, HttpCollaborators, LLMCollaborators
    from painflow.live import LiveSnapshot
    from painflow.pipeline import RunOutcome, Stage, WorkflowConfig, WorkflowContext

app = typer.Typer(
    name="painflow",
    help="painflow: from business problem to deployable AI agents.",
    no_args_is_help=True,
)
console = Console()

NO_REPLY_MESSAGE = (
    "No reply received. Check that the chat backend is running and that "
    "OPENAI_API_KEY is configured."
)

_STATUS_DISPLAY = {
    "pending": "[dim]○[/dim] pending",
    "running": "[yellow]●[/yellow] running",
    "completed": "[green]✓[/green] completed",
    "error": "[red]✗[/red] error",
}

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to {output}/logs/debug.jsonl.",
        ),
    ] = False,
) -> None:
    """painflow: from business problem to deployable AI agents."""
    global _verbose, _log_enabled
    _verbose = verbose
    _log_enabled = log
    configure_logging(verbosity=verbose)


def _configure_file_logging(log_dir: Path) -> None:
    if _log_enabled:
        configure_logging(verbosity=_verbose, log_to_file=True, log_dir=log_dir)
        atexit.register(close_file_logging)


def _load_config(
    config_path: Path | None,
    backend: str | None,
    backend_url: str | None,
    provider: str | None,
) -> WorkflowConfig:
    """Load configuration and apply command-line overrides."""
    from painflow.pipeline import ConfigError, resolve_config

    try:
        config = resolve_config(config_path)
    except (ConfigError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if backend is not None:
        if backend not in ("http", "llm"):
            console.print(f"[red]Error:[/red] Unknown backend '{backend}' (use http or llm)")
            raise typer.Exit(1)
        config.backend.mode = backend  # type: ignore[assignment]
    if backend_url:
        config.backend.base_url = backend_url
    if provider:
        config.provider.default = provider
    return config


def _build_backend(config: WorkflowConfig) -> HttpCollaborators | LLMCollaborators:
    from painflow.collaborators import build_backend
    from painflow.providers import ProviderError

    try:
        return build_backend(config)
    except ProviderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _render_stages(stages: Sequence[Stage], phase: str) -> Table:
    title = f"Workflow ({phase})" if phase else "Workflow"
    table = Table(title=title)
    table.add_column("Stage", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Detail", style="dim")

    for stage in stages:
        detail = stage.error or ""
        table.add_row(stage.name, _STATUS_DISPLAY.get(stage.status, stage.status), detail)
    return table


def _print_summaries(stages: Sequence[Stage]) -> None:
    from painflow.pipeline import StageStatus, build_stage_summary

    for stage in stages:
        if stage.status != StageStatus.COMPLETED:
            continue
        lines = build_stage_summary(stage.id, stage.result)
        if lines:
            console.print(Panel("\n".join(lines), title=stage.name, expand=False))


async def _run_workflow(
    problem: str,
    config: WorkflowConfig,
) -> tuple[RunOutcome, tuple[Stage, ...], WorkflowContext]:
    from painflow.pipeline import WorkflowEngine, describe_progress

    log = get_logger(__name__)
    backend = _build_backend(config)
    try:
        engine = WorkflowEngine(backend.collaborators())
        initial = _render_stages(engine.get_stages(), "")
        with Live(initial, console=console, refresh_per_second=8) as live:

            def on_change(stages: tuple[Stage, ...], _context: WorkflowContext) -> None:
                progress = describe_progress(stages, engine.definitions)
                live.update(_render_stages(stages, progress.current_phase))

            unsubscribe = engine.subscribe(on_change)
            try:
                outcome = await engine.start_workflow(problem)
            finally:
                unsubscribe()
        log.debug("workflow_outcome", outcome=type(outcome).__name__)
        return outcome, engine.get_stages(), engine.get_context()
    finally:
        await backend.aclose()


@app.command()
def version() -> None:
    """Show version information."""
    from painflow import __version__

    console.print(f"painflow v{__version__}")


@app.command()
def stages() -> None:
    """List the pipeline stages in execution order."""
    from painflow.pipeline import DEFAULT_STAGES

    table = Table(title="Pipeline Stages")
    table.add_column("#", style="dim")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Consumes", style="dim")

    for index, definition in enumerate(DEFAULT_STAGES, start=1):
        table.add_row(str(index), definition.id, definition.name, ", ".join(definition.consumes))
    console.print(table)


@app.command()
def run(
    problem: Annotated[str, typer.Argument(help="Business problem to analyse.")],
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="painflow.yaml file or directory holding one."),
    ] = None,
    backend: Annotated[
        str | None,
        typer.Option("--backend", help="Collaborator backend: http or llm."),
    ] = None,
    backend_url: Annotated[
        str | None,
        typer.Option("--backend-url", help="Web backend root URL (http backend)."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Chat model as provider/model (llm backend)."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory to write stage results to."),
    ] = None,
) -> None:
    """Run the full workflow for PROBLEM."""
    from painflow.artifacts import RunWriteError, RunWriter
    from painflow.pipeline import Completed, Failed, HaltedEmpty, Superseded

    if not problem.strip():
        console.print("[red]Error:[/red] Problem description must not be empty")
        raise typer.Exit(1)

    _configure_file_logging(output or Path())
    config = _load_config(config_path, backend, backend_url, provider)

    outcome, final_stages, context = asyncio.run(_run_workflow(problem, config))

    console.print()
    _print_summaries(final_stages)

    if output is not None:
        try:
            written = RunWriter(output).write(final_stages, context)
        except RunWriteError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from e
        console.print(f"[dim]Wrote {len(written)} files to {output}[/dim]")

    match outcome:
        case Completed():
            console.print("[green]Workflow completed.[/green]")
        case HaltedEmpty(stage_id=stage_id):
            console.print(
                f"[yellow]Workflow stopped after {stage_id}:[/yellow] nothing to pass on."
            )
        case Failed(stage_id=stage_id, message=message):
            console.print(f"[red]Workflow failed at {stage_id}:[/red] {message}")
            raise typer.Exit(1)
        case Superseded(stage_id=stage_id):
            console.print(f"[yellow]Workflow superseded during {stage_id}.[/yellow]")


async def _stream_chat(message: str, mode: ChatMode, config: WorkflowConfig) -> str:
    from painflow.live import LiveDeltaStore, LoopScheduler, pump_stream

    backend = _build_backend(config)
    store = LiveDeltaStore(LoopScheduler(interval=config.live.frame_interval))
    printed = 0

    def on_snapshot(snapshot: LiveSnapshot) -> None:
        nonlocal printed
        delta = snapshot.assistant_text[printed:]
        if delta:
            console.print(delta, end="", markup=False, highlight=False, soft_wrap=True)
            printed = len(snapshot.assistant_text)

    store.subscribe(on_snapshot)
    try:
        fragments = backend.stream_chat([{"role": "user", "content": message}], mode)
        return await pump_stream(fragments, store, assistant_id=uuid.uuid4().hex)
    finally:
        store.dispose()
        await backend.aclose()


@app.command()
def chat(
    message: Annotated[str, typer.Argument(help="Message to send.")],
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Assistant mode: general, pain-analysis, solution-design, agent-generation.",
        ),
    ] = "general",
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="painflow.yaml file or directory holding one."),
    ] = None,
    backend: Annotated[
        str | None,
        typer.Option("--backend", help="Chat backend: http or llm."),
    ] = None,
    backend_url: Annotated[
        str | None,
        typer.Option("--backend-url", help="Web backend root URL (http backend)."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Chat model as provider/model (llm backend)."),
    ] = None,
) -> None:
    """Send MESSAGE and stream the assistant's reply."""
    import httpx

    from painflow.collaborators import CHAT_MODES, ChatStreamError

    if mode not in CHAT_MODES:
        console.print(f"[red]Error:[/red] Unknown mode '{mode}' (use {', '.join(CHAT_MODES)})")
        raise typer.Exit(1)

    _configure_file_logging(Path())
    config = _load_config(config_path, backend, backend_url, provider)

    try:
        reply = asyncio.run(_stream_chat(message, mode, config))  # type: ignore[arg-type]
    except (ChatStreamError, httpx.HTTPError) as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print()
    if not reply:
        console.print(f"[yellow]{NO_REPLY_MESSAGE}[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
