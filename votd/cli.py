"""
votd command-line entry point.

Prints the NET Bible verse of the day, reusing a cached copy for up to six
hours unless --no-cache is given.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from votd.config import ensure_cache_dir, load_dev_env, load_settings
from votd.models import VerseOfDay
from votd.provider import FetchFailedError, VerseProvider
from votd.verse_cache import CacheWriteError, VerseCache
from votd.verse_client import ConnectionFailedError, RequestTimeoutError, VerseClient

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Retrieve the verse of the day from the NET Bible.",
)


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("votd").setLevel(level)


def describe_fetch_error(error: FetchFailedError) -> str:
    """Turn a fetch failure into a message for the terminal."""
    cause = error.__cause__
    if isinstance(cause, RequestTimeoutError):
        return "Error: timeout exceeded"
    if isinstance(cause, ConnectionFailedError):
        return "Couldn't connect to server; are you connected to the Internet?"
    if getattr(cause, "status_code", None) is not None:
        return "Server returned an error; try again later."
    return f"Error: {error}"


def render_verse(
    console: Console,
    verse: VerseOfDay,
    only_verse: bool = False,
    show_translation: bool = False,
) -> None:
    if not only_verse:
        label = "Verse of the Day - NET" if show_translation else "Verse of the Day"
        console.print(f"{verse.reference} ({label})", markup=False, emoji=False)
    # rich wraps to the terminal width
    console.print(verse.text, markup=False, emoji=False)


@app.command()
def main(
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", "-n", help="Fetch from the web even if a fresh verse is cached."),
    ] = False,
    only_verse: Annotated[
        bool,
        typer.Option("--only-verse", "-o", help="Only display the verse text, with no title before."),
    ] = False,
    show_translation: Annotated[
        bool,
        typer.Option("--show-translation", help="Print the translation (NET) after the verse name."),
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", "-t", min=0.1, help="Seconds to wait for the server. Default: 2."),
    ] = None,
    cache_path: Annotated[
        Optional[Path],
        typer.Option("--cache-path", dir_okay=False, help="Cache file location."),
    ] = None,
    clear_cache: Annotated[
        bool,
        typer.Option("--clear-cache", help="Remove the cached verse and exit."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log output (-vv for debug)."),
    ] = 0,
) -> None:
    """Print the verse of the day."""
    _configure_logging(verbose)
    err_console = Console(stderr=True, highlight=False, emoji=False)

    load_dev_env()
    try:
        settings = load_settings(cache_path=cache_path)
    except ValueError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(code=2)

    if timeout is not None:
        settings.timeout = timeout

    cache = VerseCache(settings.cache_path) if settings.cache_path is not None else None

    if clear_cache:
        if cache is None:
            err_console.print("No cache location; nothing to clear.", markup=False)
            return
        try:
            cache.invalidate()
        except CacheWriteError as e:
            err_console.print(f"Error: {e}", markup=False)
            raise typer.Exit(code=1)
        logger.info("Cleared cache at %s", settings.cache_path)
        return

    ensure_cache_dir(settings)

    with VerseClient(settings.api_url, timeout=settings.timeout) as client:
        provider = VerseProvider(cache, client)
        try:
            verse = provider.get_verse(bypass_cache=no_cache)
        except FetchFailedError as e:
            logger.debug("Fetch failed", exc_info=True)
            err_console.print(describe_fetch_error(e), markup=False)
            raise typer.Exit(code=1)

    render_verse(Console(highlight=False, emoji=False), verse, only_verse, show_translation)
