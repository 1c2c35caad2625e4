"""Main CLI application entry point.

Parses the command line into a search configuration and hands it to the
dispatcher. Matching paths are the only thing written to stdout.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated, Dict, Any, List, Optional

import typer

from sfind import __version__
from sfind.config import ConfigurationError, load_config
from sfind.tools.dispatcher import SearchDispatcher
from sfind.tools.output import PathSink

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sfind",
    help="Searches for matching files.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sfind version {__version__}")
        raise typer.Exit()


def split_values(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated, comma-separated option values.

    Args:
        values: Raw option values, e.g. ``["*.py,*.pyw", "*.txt"]``.

    Returns:
        Individual, stripped, non-empty items.
    """
    items = []
    for value in values or []:
        items.extend(item.strip() for item in value.split(","))
    return [item for item in items if item]


def build_globs(
    globs: Optional[List[str]],
    suffixes: Optional[List[str]],
    contains: Optional[List[str]],
) -> Optional[List[str]]:
    """Merge --glob, --suffixes and --contains into one glob list.

    Returns:
        The merged globs, or None if none of the options was given.
    """
    merged = split_values(globs)
    merged.extend(f"*.{suffix.lstrip('.')}" for suffix in split_values(suffixes))
    merged.extend(f"*{text}*" for text in split_values(contains))
    return merged or None


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; stdout carries only results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command()
def main(
    paths: Annotated[
        Optional[List[str]],
        typer.Argument(
            metavar="PATH",
            help="Paths to search [default: .]",
            show_default=False,
        ),
    ] = None,
    from_: Annotated[
        Optional[str],
        typer.Option(
            "--from",
            help="The earliest date to search from. Can use 'today' or 'yesterday' "
            "or an int (up to that many days ago), or an ISO8601 format date "
            "(e.g., 2023-05-22) [default: any date]",
            show_default=False,
        ),
    ] = None,
    glob: Annotated[
        Optional[List[str]],
        typer.Option(
            "--glob",
            "-g",
            help="Comma-separated file globs to match (e.g., '*.py,*.pyw') [default: any file]",
            show_default=False,
        ),
    ] = None,
    suffixes: Annotated[
        Optional[List[str]],
        typer.Option(
            "--suffixes",
            "--extension",
            "-e",
            help="Comma-separated suffixes to match (e.g., 'py,txt'); same as --glob '*.py,*.txt'.",
            show_default=False,
        ),
    ] = None,
    contains: Annotated[
        Optional[List[str]],
        typer.Option(
            "--contains",
            "-c",
            help="Comma-separated substrings the filename must contain; same as --glob '*text*'.",
            show_default=False,
        ),
    ] = None,
    exclude: Annotated[
        Optional[List[str]],
        typer.Option(
            "--exclude",
            "-x",
            help="Comma-separated path component names to exclude [default: none]",
            show_default=False,
        ),
    ] = None,
    ignorecase: Annotated[
        Optional[bool],
        typer.Option(
            "--ignorecase/--no-ignorecase",
            "-i",
            help="Compare globs and excludes case-insensitively [default: case-sensitive]",
            show_default=False,
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Print the resolved configuration and exit without searching.",
        ),
    ] = False,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            help="YAML file with default settings [default: .sfind.yaml if found]",
            show_default=False,
        ),
    ] = None,
    no_config: Annotated[
        bool,
        typer.Option(
            "--no-config",
            help="Do not look for a .sfind.yaml file.",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Treat configuration warnings as errors.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output on stderr.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Searches for matching files.

    Examples:
        sfind                                # Every file below .
        sfind --glob '*.py,*.pyw' src tests  # Python files in two trees
        sfind -e md --from yesterday         # Markdown changed since yesterday
        sfind -x node_modules,build -i -c readme
    """
    configure_logging(verbose)

    overrides: Dict[str, Any] = {
        "from": from_,
        "globs": build_globs(glob, suffixes, contains),
        "excludes": split_values(exclude) or None,
        "paths": paths or None,
        "casefold": ignorecase,
    }

    try:
        result = load_config(config_file, overrides, strict_mode=strict, discover=not no_config)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from None

    for warning in result.warnings:
        logger.warning(warning)

    if debug:
        typer.echo(str(result.config))
        raise typer.Exit()

    stats = SearchDispatcher(result.config, PathSink(sys.stdout)).run()
    logger.debug(f"Search finished: {stats}")


if __name__ == "__main__":
    app()
