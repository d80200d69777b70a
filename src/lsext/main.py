import sys
import typer
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from typing import List, Optional

from . import __version__
from .config_loader import load_settings
from .counter import DEFAULT_AGGREGATE, build_report, count_extensions
from .logger import setup_logger, set_debug_mode, set_level, add_file_handler
from .report import render_report
from .walker import FileWalker, RootPathError

app = typer.Typer(
    help="Summary of files by extension. Recurse files from a directory, and list them by extension frequency.",
    add_completion=False,
)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

AGGREGATE_FLAGS = ("-A", "--aggr")
SHORT_FLAGS = set("aA")


def _takes_default_aggregate(arg: str) -> bool:
    if arg in AGGREGATE_FLAGS:
        return True
    # Clustered short flags such as -aA
    return (len(arg) > 2 and arg[0] == "-" and arg[1] != "-"
            and arg.endswith("A") and set(arg[1:]) <= SHORT_FLAGS)


def expand_aggregate_flag(args: List[str]) -> List[str]:
    """Give a bare -A/--aggr its default threshold so the option value stays optional"""
    expanded = []
    for i, arg in enumerate(args):
        if arg == "--":
            expanded.extend(args[i:])
            break
        expanded.append(arg)
        if _takes_default_aggregate(arg):
            following = args[i + 1] if i + 1 < len(args) else None
            if following is None or not (following.isascii() and following.isdigit()):
                expanded.append(str(DEFAULT_AGGREGATE))
    return expanded


def _version_callback(value: bool):
    if value:
        console.print(f"lsext {__version__}")
        raise typer.Exit()


@app.command()
def main(
    directory: Path = typer.Argument(
        Path("."), metavar="DIR", show_default=False,
        help="Directory from which you wish to start counting (defaults to the current directory)"
    ),
    include_all: Optional[bool] = typer.Option(
        None, "-a", "--all/--no-all", show_default=False,
        help="Count all files, including hidden ones and those excluded by .gitignore/.ignore files"
    ),
    aggregate: Optional[int] = typer.Option(
        None, "-A", "--aggr", metavar="[N]", min=0,
        help=f"Aggregate extensions appearing fewer than N times (N defaults to {DEFAULT_AGGREGATE})"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", exists=True, dir_okay=False, readable=True,
        help="YAML file with default options"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging on stderr"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit"
    ),
):
    """Summary of files by extension.

    Recurse files from a directory, and list them by extension frequency.
    """
    logger = setup_logger()
    if debug:
        set_debug_mode()

    settings = load_settings(config)
    if not debug:
        set_level(settings.log_level)
    if settings.log_file:
        add_file_handler(logger, settings.log_file)

    if include_all is None:
        include_all = settings.include_all
    threshold = aggregate if aggregate is not None else settings.aggregate
    logger.debug(f"Options: dir={directory} all={include_all} aggregate={threshold}")

    walker = FileWalker(directory, include_all=include_all)
    try:
        frequencies = count_extensions(walker.walk())
    except RootPathError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)

    render_report(build_report(frequencies, threshold), console)


def run():
    """Console script entry point"""
    app(args=expand_aggregate_flag(sys.argv[1:]), prog_name="lsext")


if __name__ == "__main__":
    run()
