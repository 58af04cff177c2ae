import sys
import os
import argparse

from rich.console import Console
from rich.table import Table

from .engine import CheckEngine
from .errors import UnsupportedSource
from .ui.app import run_tui
from .utils.config import ConfigManager
from .utils.lang import is_supported
from .utils.logging import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(description="gamscheck: on-the-fly GAMS compiler diagnostics")
    parser.add_argument("file", nargs="?", help="GAMS source file to check")
    parser.add_argument("--once", action="store_true", help="Check the file once and print the diagnostics")
    parser.add_argument("--compiler", help="Compiler command (overrides the configured one)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def print_diagnostics(console: Console, source_path: str, diagnostics) -> None:
    if not diagnostics:
        console.print(f"[bold green]✔[/] {source_path}: no errors")
        return

    table = Table(title=source_path, title_justify="left")
    table.add_column("Line", justify="right", style="bold yellow")
    table.add_column("Col", justify="right")
    table.add_column("Code", style="bold red")
    table.add_column("Message")
    for diag in diagnostics:
        table.add_row(str(diag.line_number), str(diag.column + 1), diag.error_code, diag.message)
    console.print(table)


def run_once(engine: CheckEngine, abs_path: str, console: Console) -> int:
    diagnostics = engine.check_file(abs_path)
    print_diagnostics(console, abs_path, diagnostics)
    return 1 if diagnostics else 0


def run():
    parser = _build_parser()
    args = parser.parse_args()
    console = Console()

    if not args.file:
        console.print("Error: No source file specified.")
        console.print("Usage: gamscheck <model.gms> [--once]")
        sys.exit(1)

    # Resolve to absolute path immediately
    abs_path = os.path.abspath(args.file)

    if not os.path.exists(abs_path):
        console.print(f"Error: File not found: {abs_path}")
        sys.exit(1)

    config = ConfigManager()
    if args.compiler:
        config.config["compiler"] = args.compiler

    if not is_supported(abs_path, config.get("extensions")):
        console.print(f"Error: Unsupported file type. Enabled: {', '.join(config.get('extensions', []))}")
        sys.exit(1)

    level = "DEBUG" if args.verbose else "INFO"
    # The TUI owns the terminal; log to file only.
    setup_logging(level, log_file=config.get("log_file"), console=args.once)

    try:
        if args.once:
            sys.exit(run_once(CheckEngine(config), abs_path, console))
        run_tui(abs_path, config)
    except UnsupportedSource as e:
        console.print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"Fatal Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    run()
