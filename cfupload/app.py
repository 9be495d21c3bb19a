"""Main Typer application for the cfupload CLI.

This module contains the Typer app and its single upload command. It
merges flags with the optional config file, runs the upload pipeline and
turns every error into a red message and exit code 1.
"""

import sys
from functools import wraps
from typing import List, Optional

import typer
from rich.console import Console
from rich.traceback import install

from . import __version__
from .config import DEFAULT_API_URL, DEFAULT_LANG, build_settings
from .exceptions import CfUploadError, ConfigError
from .pipeline import run_upload
from .render import OUTPUT_FORMATS, OutputFormatter, Reporter
from .utils.exceptions import format_error_for_user

# Install rich traceback handler for better error display
install(show_locals=False)

app = typer.Typer(
    name="cfupload",
    help="Upload front-matter content files as Contentful entries",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"cfupload {__version__}")
        raise typer.Exit()


def handle_exceptions(func):
    """Decorator to handle common exceptions in commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        debug = bool(kwargs.get("debug", False))
        try:
            return func(*args, **kwargs)
        except CfUploadError as e:
            error_console.print(format_error_for_user(e, debug), style="red", markup=False, highlight=False)
            if debug:
                error_console.print_exception()
            raise typer.Exit(1)
        except KeyboardInterrupt:
            error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(130)
        except typer.Exit:
            raise
        except Exception as e:
            if debug:
                error_console.print_exception()
            else:
                error_console.print(f"Unexpected error: {e}", style="red", markup=False)
                error_console.print("[dim]Use --debug for more details[/dim]")
            raise typer.Exit(1)
    return wrapper


@app.command()
@handle_exceptions
def upload(
    patterns: Optional[List[str]] = typer.Argument(
        None,
        help="Files, glob patterns or folders to upload",
        show_default=False,
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-C",
        help="Your settings file (.json), will override any other settings you pass in",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        envvar="CONTENTFUL_MANAGEMENT_TOKEN",
        help="Your contentful api token",
        show_default=False,
    ),
    lang: Optional[str] = typer.Option(
        None,
        "--lang",
        "-l",
        help=f"The language setting for this content, defaults to {DEFAULT_LANG}",
    ),
    mapper: Optional[str] = typer.Option(
        None,
        "--mapper",
        "-m",
        help="A mapper file (.py) or module:function used to transform every entry",
    ),
    content_type: Optional[str] = typer.Option(
        None,
        "--content-type",
        "-c",
        help="Id of the contentful content type the entries belong to",
    ),
    space_id: Optional[str] = typer.Option(
        None,
        "--space-id",
        "-s",
        envvar="CONTENTFUL_SPACE_ID",
        help="Id of the contentful space that you want to upload the entries to",
    ),
    publish: bool = typer.Option(
        False,
        "--publish",
        "-p",
        help="Whether or not to publish your uploaded entries immediately",
        show_default=False,
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        help="Maximum number of entries uploaded at the same time [default: 4]",
    ),
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help=f"Content Management API base URL [default: {DEFAULT_API_URL}]",
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds [default: 30]",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Fetch the content type and validate the files without uploading",
        show_default=False,
    ),
    output_format: str = typer.Option(
        "table",
        "--output",
        "-o",
        help="Summary format (table, json, yaml)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Upload content files to Contentful, optionally publishing them.

    Every file needs a front-matter block whose keys match the fields of
    the content type; the text after it becomes the [bold]body[/bold] field.

    Examples:
        # Upload all markdown files of a folder
        cfupload -t <token> -s <space-id> -c page content/

        # Upload and publish, reading settings from a file
        cfupload --config contentful.json --publish "content/**/*.md"
    """
    if output_format.lower() not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Unknown output format: {output_format}. Choose from {', '.join(OUTPUT_FORMATS)}"
        )

    settings = build_settings(
        {
            "token": token,
            "lang": lang,
            "mapper": mapper,
            "content_type": content_type,
            "space_id": space_id,
            "publish": publish,
            "concurrency": concurrency,
            "api_url": api_url,
            "timeout": timeout,
            "dry_run": dry_run,
        },
        config_path=config,
    )

    # Keep stdout clean for machine-readable summaries
    machine_output = output_format.lower() != "table"
    reporter = Reporter(error_console if machine_output else console, debug=debug)

    results = run_upload(settings, patterns or [], reporter=reporter)

    if results:
        OutputFormatter(console).render(
            [result.model_dump() for result in results],
            format=output_format,
            title=f"Uploaded entries ({len(results)})",
        )


def cli():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    cli()
