"""
audioscribe.cli - Typer CLI entry point.

Provides all subcommands: loading and transcribing audio, searching and
exporting transcripts, format conversion, playback, and the proxy server.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from audioscribe import __version__
from audioscribe.config import (
    CONFIG_FILENAME,
    AudioscribeConfig,
    create_default_config,
    load_config,
    write_config,
)
from audioscribe.exceptions import AudioscribeError, DependencyError
from audioscribe.logging import configure_logging, get_logger
from audioscribe.utils import format_duration, format_size

app = typer.Typer(
    name="audioscribe",
    help="Audio transcription toolkit.\n\n"
    "Transcribes audio files or URLs with a generative model, then searches, "
    "exports, plays back, or converts the result.",
    add_completion=False,
)
console = Console()
log = get_logger("cli")

state: dict[str, object] = {"config_path": None}


def get_config() -> AudioscribeConfig:
    """Load the active configuration, exiting with a message if it is invalid."""
    try:
        return load_config(state["config_path"])
    except AudioscribeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def fail(message: str, error: Exception | None = None) -> None:
    """Log, print a red error line and exit with status 1."""
    if error is not None:
        log.debug("%s", message, exc_info=error)
    console.print(f"[red]Error: {message}[/red]")
    if isinstance(error, DependencyError) and error.install_hint:
        console.print(f"[dim]{error.install_hint}[/dim]")
    raise typer.Exit(1)


def make_progress() -> Progress:
    return Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    )


def load_transcript_or_exit(path: Path):
    from audioscribe.io import load_transcript

    if not path.exists():
        fail(f"Transcript not found: {path}")
    try:
        return load_transcript(path)
    except (ValueError, OSError) as e:
        fail(f"Could not read transcript {path}: {e}", e)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"audioscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help=f"Config file (default: nearest {CONFIG_FILENAME})"
    ),
) -> None:
    """audioscribe - audio transcription toolkit."""
    configure_logging(verbose)
    state["config_path"] = config


@app.command("init")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write the config into"),
) -> None:
    """Write a default audioscribe.yaml."""
    config_path = Path(path) / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_path)
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("[dim]  Set GEMINI_API_KEY in your environment before transcribing[/dim]")


@app.command("transcribe")
def transcribe(
    source: str = typer.Argument(..., help="Audio file path or http(s) URL"),
    output: Path = typer.Option(
        Path("transcript.json"), "--output", "-o", help="Where to save the transcript JSON"
    ),
    export: Path | None = typer.Option(
        None, "--export", "-e", help="Also export to .docx, .html or .txt"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model override"),
    proxy: str | None = typer.Option(
        None, "--proxy", help="Fetch URLs through this audioscribe server"
    ),
) -> None:
    """Transcribe audio into timestamped chunks."""
    from audioscribe.export import export_transcript
    from audioscribe.io import save_transcript
    from audioscribe.session import Session
    from audioscribe.transcribe.client import create_client_from_config

    config = get_config()
    if model:
        config.llm_model = model

    session = Session(
        client=create_client_from_config(config),
        proxy_base=proxy or config.proxy_url,
        progress_interval=config.progress_interval,
    )
    with session:
        try:
            if source.startswith(("http://", "https://")):
                audio = session.load_url(source)
            else:
                audio = session.load_file(Path(source).expanduser())
        except AudioscribeError as e:
            fail(f"Failed to load audio: {e}", e)

        size = format_size(audio.size)
        console.print(f"[dim]Loaded {audio.name} ({size}, {audio.mime_type})[/dim]")

        with make_progress() as progress:
            task = progress.add_task(f"Transcribing with {config.llm_model}", total=100)
            try:
                transcript = session.transcribe(
                    on_progress=lambda value: progress.update(task, completed=value)
                )
            except AudioscribeError as e:
                fail(f"Transcription failed: {e}", e)

    save_transcript(output, transcript)
    console.print(f"[green]✓[/green] Transcribed {len(transcript.chunks)} chunks → {output}")

    if export is not None:
        try:
            export_transcript(transcript, export)
        except AudioscribeError as e:
            fail(f"Export failed: {e}", e)
        console.print(f"[green]✓[/green] Exported {export}")


@app.command("search")
def search(
    transcript_path: Path = typer.Argument(..., help="Transcript JSON file"),
    query: str = typer.Argument("", help="Text to search for (case-insensitive)"),
) -> None:
    """Show transcript chunks containing a query."""
    from audioscribe.search import filter_chunks

    transcript = load_transcript_or_exit(transcript_path)
    matches = filter_chunks(transcript.chunks, query)

    table = Table(title=f"Matches for '{query}'" if query else "Transcript")
    table.add_column("Time", style="green", no_wrap=True)
    table.add_column("Text")
    for chunk in matches:
        table.add_row(chunk.time, chunk.text)
    console.print(table)
    console.print(f"[dim]{len(matches)} of {len(transcript.chunks)} chunks[/dim]")


@app.command("export")
def export(
    transcript_path: Path = typer.Argument(..., help="Transcript JSON file"),
    output: Path = typer.Option(
        Path("transcription.docx"), "--output", "-o", help="Output file (.docx, .html, .txt, .json)"
    ),
    query: str = typer.Option("", "--query", "-q", help="Only export chunks matching this text"),
) -> None:
    """Export a transcript to a document."""
    from audioscribe.export import export_transcript
    from audioscribe.search import filter_chunks

    transcript = load_transcript_or_exit(transcript_path)
    if query:
        transcript = transcript.model_copy(
            update={"chunks": filter_chunks(transcript.chunks, query)}
        )

    try:
        export_transcript(transcript, output)
    except AudioscribeError as e:
        fail(f"Export failed: {e}", e)
    console.print(f"[green]✓[/green] Exported {len(transcript.chunks)} chunks → {output}")


@app.command("convert")
def convert(
    source: str = typer.Argument(..., help="Audio file path or http(s) URL"),
    target_format: str | None = typer.Option(
        None, "--format", "-f", help="Target format: mp3, m4a or aac"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file"),
    proxy: str | None = typer.Option(
        None, "--proxy", help="Fetch URLs through this audioscribe server"
    ),
) -> None:
    """Convert audio to another format with FFmpeg."""
    from audioscribe.convert.engine import ConverterEngine
    from audioscribe.io import write_bytes
    from audioscribe.session import Session

    config = get_config()
    fmt = target_format or config.default_format

    session = Session(
        engine=ConverterEngine(config.ffmpeg_path),
        proxy_base=proxy or config.proxy_url,
    )
    with session:
        try:
            if source.startswith(("http://", "https://")):
                session.load_url(source)
            else:
                session.load_file(Path(source).expanduser())
        except AudioscribeError as e:
            fail(f"Failed to load audio: {e}", e)

        with make_progress() as progress:
            task = progress.add_task(f"Converting to {fmt}", total=100)
            try:
                converted = session.convert(
                    fmt, on_progress=lambda value: progress.update(task, completed=value)
                )
            except AudioscribeError as e:
                fail(f"Conversion failed: {e}", e)

    destination = output or Path(f"converted.{fmt}")
    write_bytes(destination, converted.data)
    console.print(
        f"[green]✓[/green] Converted to {converted.mime_type} "
        f"({format_size(converted.size)}) → {destination}"
    )


@app.command("play")
def play(
    audio: Path = typer.Argument(..., help="Audio file"),
    transcript_path: Path = typer.Argument(..., help="Transcript JSON file"),
    index: int | None = typer.Option(None, "--index", "-i", help="Chunk number (1-based)"),
    query: str | None = typer.Option(
        None, "--query", "-q", help="Play from the first chunk matching this text"
    ),
    at: str | None = typer.Option(None, "--at", help="Play from a raw MM:SS or HH:MM:SS time"),
) -> None:
    """Play audio starting at a transcript chunk."""
    from audioscribe.playback import FFplayPlayer, PlaybackController
    from audioscribe.search import filter_chunks

    if not audio.exists():
        fail(f"Audio file not found: {audio}")
    transcript = load_transcript_or_exit(transcript_path)

    if at is not None:
        target = at
    elif query is not None:
        matches = filter_chunks(transcript.chunks, query)
        if not matches:
            fail(f"No chunk matches '{query}'")
        target = matches[0]
    else:
        position = 1 if index is None else index
        if not 1 <= position <= len(transcript.chunks):
            fail(f"Chunk {position} out of range (1-{len(transcript.chunks)})")
        target = transcript.chunks[position - 1]

    player = FFplayPlayer(audio)
    controller = PlaybackController(player)
    try:
        offset = controller.seek_to(target)
    except DependencyError as e:
        fail(str(e), e)

    label = target if isinstance(target, str) else f"[{target.time}] {target.text}"
    start = format_duration(offset)
    console.print(f"[cyan]▶ {label}[/cyan] [dim](from {start}, Ctrl+C to stop)[/dim]")
    try:
        player.wait()
    except KeyboardInterrupt:
        player.stop()


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the audio proxy server."""
    import uvicorn

    from audioscribe.server import create_app

    config = get_config()
    bind_host = host or config.server_host
    bind_port = port or config.server_port
    console.print(f"[green]Server running on http://localhost:{bind_port}[/green]")
    uvicorn.run(create_app(), host=bind_host, port=bind_port)


@app.command("doctor")
def run_doctor() -> None:
    """Check dependencies and environment setup."""
    import shutil

    from audioscribe.convert.engine import locate_ffmpeg

    console.print("[cyan]Running preflight checks...[/cyan]\n")

    table = Table(title="Dependency Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Version/Details")

    all_passed = True
    config = get_config()

    try:
        binaries = locate_ffmpeg(config.ffmpeg_path)
        table.add_row("FFmpeg", "✓ Installed", binaries.version)
        if binaries.ffprobe:
            table.add_row("FFprobe", "✓ Installed", binaries.ffprobe)
        else:
            table.add_row("FFprobe", "— Missing", "Conversion progress unavailable")
    except DependencyError as e:
        table.add_row("FFmpeg", "✗ Missing", e.install_hint or "")
        all_passed = False

    ffplay = shutil.which("ffplay")
    table.add_row(
        "FFplay", "✓ Installed" if ffplay else "— Missing", ffplay or "Playback unavailable"
    )

    try:
        import litellm  # noqa: F401

        table.add_row("litellm", "✓ Installed", config.llm_model)
    except ImportError:
        table.add_row("litellm", "✗ Missing", "pip install litellm")
        all_passed = False

    if config.api_key:
        table.add_row("API key", "✓ Set", "")
    else:
        table.add_row("API key", "✗ Missing", "Set GEMINI_API_KEY")
        all_passed = False

    console.print(table)

    if all_passed:
        console.print("\n[green]✓ All checks passed[/green]")
    else:
        console.print("\n[yellow]⚠ Some checks failed[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
