"""REMic CLI for keeping a dream journal from the terminal.

This CLI provides utilities for:
- Recording dreams
- Listing and inspecting the journal
- Requesting toned rewrites from the configured provider
- Deleting dreams
"""

import asyncio
from pathlib import Path
from uuid import UUID

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config.settings import RemicConfig
from ..exceptions import DreamStoreError, ValidationError
from ..logging import setup_logging
from ..models.dream import Dream, Tone
from ..models.events import StoreEvent, StoreEventType
from ..repositories.json_repository import JsonFileRepository
from ..services.rewrite import build_rewrite_service
from ..services.store import DreamStore
from ..utils.env import load_environment

console = Console()

TONE_NAMES = [tone.value for tone in Tone]


class CliState:
    """Settings and storage location shared by all commands."""

    def __init__(self, settings: RemicConfig, data_file: Path):
        self.settings = settings
        self.data_file = data_file

    def open_store(self, with_rewrites: bool = False) -> DreamStore:
        rewrite_service = build_rewrite_service(self.settings) if with_rewrites else None
        return DreamStore(
            JsonFileRepository(self.data_file),
            rewrite_service,
            rewrite_timeout=self.settings.rewrite_timeout,
        )


def resolve_id(store: DreamStore, value: str) -> UUID:
    """Accept a full dream id or a unique prefix of one."""
    try:
        return UUID(value)
    except ValueError:
        pass

    prefix = value.strip().lower()
    matches = [dream.id for dream in store.list_dreams() if str(dream.id).startswith(prefix)]
    if not prefix or not matches:
        raise click.ClickException(f"No dream matches id {value!r}")
    if len(matches) > 1:
        raise click.ClickException(f"Id prefix {value!r} is ambiguous ({len(matches)} dreams)")
    return matches[0]


def _short_id(dream: Dream) -> str:
    return str(dream.id)[:8]


def _print_dream(dream: Dream) -> None:
    console.print(f"\n[bold]Dream[/bold] {dream.id}")
    console.print(f"[dim]{dream.date.astimezone().strftime('%Y-%m-%d %H:%M')}[/dim]")
    console.print(f"\n[bold cyan]Original:[/bold cyan]\n{escape(dream.original_text)}")
    if dream.is_rewritten:
        console.print(f"\n[bold green]Rewritten ({dream.tone.value.capitalize()}):[/bold green]")
        console.print(escape(dream.rewritten_text))
    else:
        console.print("\n[dim]Not rewritten yet.[/dim]")


@click.group()
@click.version_option(version=__version__, prog_name="remic")
@click.option('--data-file', '-f', type=click.Path(dir_okay=False, path_type=Path),
              help='Dream journal file (default: ~/.remic/dreams.json)')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Load settings from this .env file')
@click.option('--log-level', '-l', help='Override the configured log level')
@click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path),
              help='Also write logs to this file (rotated)')
@click.pass_context
def cli(ctx, data_file: Path | None, env_file: Path | None, log_level: str | None, log_file: Path | None):
    """REMic dream journal.

    Record dreams and rewrite them in a gentler tone.
    """
    load_environment(env_file)
    settings = RemicConfig()
    data_file = data_file or settings.store_path
    setup_logging(settings, level=log_level, log_file=log_file, journal=data_file)
    ctx.obj = CliState(settings, data_file)


@cli.command()
@click.argument('text', nargs=-1, required=True)
@click.pass_obj
def add(state: CliState, text: tuple[str, ...]):
    """Record a new dream.

    Examples:

        remic add "I was flying over a city"
    """
    store = state.open_store()
    try:
        dream = store.create(" ".join(text))
    except ValidationError as e:
        raise click.ClickException(str(e))

    console.print(f"[bold green]Recorded dream[/bold green] {dream.id}")


@cli.command(name='list')
@click.pass_obj
def list_command(state: CliState):
    """List dreams, most recent first."""
    store = state.open_store()
    dreams = store.list_dreams()
    if not dreams:
        console.print("No dreams recorded yet.")
        return

    table = Table(show_header=True)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Date", style="dim", no_wrap=True)
    table.add_column("Tone", style="green")
    table.add_column("Dream")

    for dream in dreams:
        preview = dream.original_text if len(dream.original_text) <= 60 else dream.original_text[:57] + "..."
        table.add_row(
            _short_id(dream),
            dream.date.astimezone().strftime("%Y-%m-%d %H:%M"),
            dream.tone.value if dream.tone else "-",
            escape(preview),
        )

    console.print(table)


@cli.command()
@click.argument('dream_id')
@click.pass_obj
def show(state: CliState, dream_id: str):
    """Show a dream and its rewrite."""
    store = state.open_store()
    try:
        dream = store.get(resolve_id(store, dream_id))
    except DreamStoreError as e:
        raise click.ClickException(str(e))
    _print_dream(dream)


@cli.command()
@click.argument('dream_id')
@click.option('--tone', '-t', type=click.Choice(TONE_NAMES, case_sensitive=False),
              required=True, help='How the rewritten dream should feel')
@click.pass_obj
def rewrite(state: CliState, dream_id: str, tone: str):
    """Rewrite a dream in the chosen tone.

    Examples:

        remic rewrite 3f2a9c1e --tone calm
    """
    failures: list[DreamStoreError] = []

    def on_event(event: StoreEvent):
        if event.type == StoreEventType.REWRITE_FAILED and event.error:
            failures.append(event.error)

    async def run() -> Dream | None:
        store = state.open_store(with_rewrites=True)
        store.subscribe(on_event)
        task = store.request_rewrite(resolve_id(store, dream_id), tone)
        with console.status(f"Rewriting in a {tone} tone..."):
            return await task

    try:
        dream = asyncio.run(run())
    except DreamStoreError as e:
        raise click.ClickException(str(e))

    if dream is None:
        reason = failures[0] if failures else "dream no longer exists"
        raise click.ClickException(f"Rewrite failed: {reason}")
    _print_dream(dream)


@cli.command()
@click.argument('dream_id')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def delete(state: CliState, dream_id: str, yes: bool):
    """Delete a dream."""
    store = state.open_store()
    key = resolve_id(store, dream_id)
    if not yes:
        click.confirm(f"Delete dream {key}?", abort=True)
    try:
        store.delete(key)
    except DreamStoreError as e:
        raise click.ClickException(str(e))
    console.print(f"[bold]Deleted[/bold] {key}")


@cli.command()
def tones():
    """List the available rewrite tones."""
    table = Table(show_header=True)
    table.add_column("Tone", style="cyan")
    table.add_column("Backend mood", style="yellow")
    table.add_column("Feel")
    for tone in Tone:
        table.add_row(tone.value, tone.mood_type, tone.guidance)
    console.print(table)


@cli.command(name='suggest-tone')
@click.argument('mood')
def suggest_tone(mood: str):
    """Suggest a rewrite tone for a mood from dream analysis."""
    click.echo(Tone.from_mood(mood).value)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
