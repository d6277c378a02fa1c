from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import typer

from . import __version__
from .config import VALID_LOG_LEVELS, TreeConfig, load_config
from .progress import NullProgress, RichScanProgress, ScanProgress
from .reporter import Reporter
from .scanner import display

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)

def _setup_logging(log_file: str | None, log_level: str, verbose: bool) -> None:
    """Configure logging for a report run."""
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.INFO)

    # Format with timestamp for auditability
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(fmt, datefmt))
    handlers.append(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(fmt, datefmt))
        handlers.append(file_handler)

    # Configure the package logger only; repeated runs in one process replace handlers.
    pkg_logger = logging.getLogger("codetree")
    pkg_logger.setLevel(level)
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
        h.close()
    for h in handlers:
        pkg_logger.addHandler(h)

def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"codetree {__version__}")
        raise typer.Exit()

def _build_config(
    config: str | None,
    root_path: str | None,
    output: str | None,
    ignored_dirs: str | None,
    extensions: str | None,
    verbose: bool,
    log_file: str | None,
    log_level: str | None,
) -> TreeConfig:
    """Layer CLI flags over the config file (or the built-in defaults)."""
    cfg = load_config(config)
    return cfg.with_overrides(
        root_path=Path(root_path) if root_path is not None else None,
        output_file=Path(output) if output is not None else None,
        ignored_dirs=ignored_dirs,
        allowed_extensions=extensions,
        verbose=True if verbose else None,
        log_file=log_file,
        log_level=log_level,
    )

@app.command()
def main(
    root_path: str = typer.Argument(None, help="Root directory to analyze [default: .]"),
    output: str = typer.Option(None, "--output", "-o", help="Output file path [default: code_output.txt]"),
    ignored_dirs: str = typer.Option(None, "--ignored-dirs", "-i", help="Comma-separated names to skip during scanning"),
    extensions: str = typer.Option(None, "--extensions", "-e", help="Comma-separated file extensions to include (no dots)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print configuration and counts"),
    config: str = typer.Option(None, "--config", "-c", help="TOML config file; flags override its values"),
    log_file: str = typer.Option(None, "--log-file", "-l", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help=f"Log level: {', '.join(VALID_LOG_LEVELS)}"),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable the progress bar"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """Write a directory tree and the contents of matching source files to one text report."""
    try:
        cfg = _build_config(config, root_path, output, ignored_dirs, extensions, verbose, log_file, log_level)
    except (ValueError, OSError) as e:
        typer.echo(f"Error: {display(str(e))}", err=True)
        raise typer.Exit(code=1)

    if cfg.log_file or cfg.log_level != "INFO" or log_level is not None:
        _setup_logging(cfg.log_file, cfg.log_level, False)

    if cfg.verbose:
        typer.echo(f"Analyzing directory: {display(cfg.root_path)}")
        typer.echo(f"Output will be written to: {display(cfg.output_file)}")
        typer.echo(f"Ignored directories: {json.dumps(list(cfg.ignored_dirs), ensure_ascii=False)}")
        typer.echo(f"Allowed extensions: {json.dumps(list(cfg.allowed_extensions), ensure_ascii=False)}")

    progress: ScanProgress = NullProgress() if no_progress else RichScanProgress()
    try:
        Reporter(cfg, progress).generate()
    except OSError as e:
        logger.error(f"Report generation failed: {display(str(e))}")
        typer.echo(f"Error: {display(str(e))}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Successfully generated code output at: {display(cfg.output_file)}")

if __name__ == "__main__":
    app()
