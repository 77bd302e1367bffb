"""CLI entry point for the legacy chat importer.

Allows running the importer as a module:
    python -m chatlog_import.importer character "Character Name"
"""

import signal
import sys
from datetime import datetime
from pathlib import Path
from types import FrameType

import click

from chatlog_import.config import Config, load_config
from chatlog_import.importer.orchestrator import import_character, request_shutdown
from chatlog_import.importer.settings import can_import_character, import_general
from chatlog_import.logging import get_logger, setup_logging
from chatlog_import.logstore.index import day_from_date, offset_for_day, read_index
from chatlog_import.logstore.paths import LogPaths
from chatlog_import.logstore.reader import read_messages
from chatlog_import.models import MessageRecord, MessageType

logger = get_logger("importer")


def signal_handler(signum: int, frame: FrameType | None) -> None:
    """Stop the import after the conversation in progress."""
    sig_name = signal.Signals(signum).name
    logger.info("Received signal %s, stopping after current conversation", sig_name)
    request_shutdown()


def format_message(message: MessageRecord) -> str:
    """Render a record the way the chat window shows it."""
    stamp = message.time.strftime("%Y-%m-%d %H:%M")
    if message.type is MessageType.MESSAGE:
        return f"[{stamp}] {message.sender.name}: {message.text}"
    return f"[{stamp}] {message.sender.name}{message.text}"


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Path to config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Import chat logs and settings from the legacy client."""
    config = load_config(config_path)
    setup_logging("importer", config.log_dir, console=False)
    ctx.obj = config


@cli.command()
@click.argument("name")
@click.pass_obj
def character(config: Config, name: str) -> None:
    """Import settings and transcripts for a character."""
    if not can_import_character(config, name):
        click.echo(f"No legacy data found for {name}", err=True)
        return

    def report(fraction: float) -> None:
        click.echo(f"\rImporting... {fraction:.0%}", nl=False)

    try:
        totals = import_character(name, config, progress=report)
    except OSError as e:
        click.echo(f"\nImport failed: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"\rImported {totals['messages']} messages from {totals['files']} files "
        f"in {totals['conversations']} conversations"
    )


@cli.command()
@click.pass_obj
def general(config: Config) -> None:
    """Show the account settings found in the legacy client."""
    settings = import_general(config)
    click.echo(f"Account: {settings.account or '(none)'}")
    click.echo(f"Host: {settings.host}")


@cli.command()
@click.argument("name")
@click.argument("key")
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), help="Start at this day")
@click.option("--limit", "-n", default=50, help="Number of messages")
@click.pass_obj
def show(config: Config, name: str, key: str, day: datetime | None, limit: int) -> None:
    """Print messages from an imported conversation log."""
    paths = LogPaths(config.storage.data_dir)
    log_path = paths.log_path(name, key)
    if not log_path.exists():
        click.echo(f"No log for {key}", err=True)
        sys.exit(1)

    offset = 0
    if day is not None:
        index = read_index(paths.index_path(name, key))
        found = None if index is None else offset_for_day(index, day_from_date(day.date()))
        if found is None:
            click.echo(f"No messages on or after {day:%Y-%m-%d}")
            return
        offset = found

    for message in read_messages(log_path, from_offset=offset, limit=limit):
        click.echo(format_message(message))


def main() -> None:
    """Main entry point for the importer CLI."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)
    cli()


if __name__ == "__main__":
    main()
