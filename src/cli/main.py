"""Main CLI entry point for the md-confluence-sync command.

This module provides the Typer application that serves as the entry point
for the md-confluence-sync command-line tool.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.publish_command import PublishCommand

VERSION = "0.1.0"

app = typer.Typer(
    name="md-confluence-sync",
    help="""Publish a tree of interlinked markdown files to Confluence.

Local links between documents are rewritten to Confluence page URLs. New
pages are published twice so that links to them resolve in the same run.

QUICK START:
  md-confluence-sync publish                  # Publish the current folder
  md-confluence-sync publish -d ./docs        # Publish another folder
  md-confluence-sync fix-references -d ./docs # Only rewrite links (no upload)""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    # Replace handlers from an earlier call in the same process
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"md-confluence-sync_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"md-confluence-sync version {VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Publish a tree of interlinked markdown files to Confluence."""


@app.command("publish")
def publish_command(
    docs_dir: str = typer.Option(
        ".",
        "--docs-dir",
        "--docsDir",
        "-d",
        help="Path to the folder containing markdown files (defaults to current folder)",
        metavar="FOLDER",
    ),
    prompt: bool = typer.Option(
        False,
        "--prompt/--no-prompt",
        help="Ask for missing configuration values instead of failing",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Fix references and publish the folder to Confluence (two passes if needed)."""
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    exit_code = PublishCommand(docs_dir, output_handler=output, prompt=prompt).run()
    raise typer.Exit(exit_code)


@app.command("fix-references")
def fix_references_command(
    docs_dir: str = typer.Option(
        ".",
        "--docs-dir",
        "--docsDir",
        "-d",
        help="Path to the folder containing markdown files (defaults to current folder)",
        metavar="FOLDER",
    ),
    keep_mirror: bool = typer.Option(
        True,
        "--keep-mirror/--no-keep-mirror",
        help="Keep the rewritten copy of the folder for inspection",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Rewrite local links in a copy of the folder without publishing."""
    _configure_logging(verbosity)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    exit_code = PublishCommand(docs_dir, output_handler=output).fix_references(keep_mirror=keep_mirror)
    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
