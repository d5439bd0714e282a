"""Main entry point for the backlogmd application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from backlogmd.core.backlog_client import BacklogClient
from backlogmd.core.command_handler import CommandHandler

# --- Domain Layer ---
from backlogmd.domain.errors import ConfigurationError

# --- Infrastructure Layer ---
from backlogmd.infrastructure.backlog.http_client import HttpBacklogApi
from backlogmd.infrastructure.cli.display import ConsoleDisplay
from backlogmd.infrastructure.config.settings import (
    get_backlog_config, get_config, get_retry_policy, load_configuration,
)
from backlogmd.infrastructure.monitoring.logger_setup import setup_logging
from backlogmd.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

# --- Dependency Injection (Manual) ---

def create_dependencies(
    ui: ConsoleDisplay,
    host: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Creates and wires up the client and command handler.

    This acts as the Composition Root.

    Raises:
        ConfigurationError: If the Backlog host or API key is missing.
    """
    backlog_config = get_backlog_config(host=host, api_key=api_key)
    logger.debug(f"Using {backlog_config}")

    dependencies: Dict[str, Any] = {'ui': ui}
    dependencies['api'] = HttpBacklogApi(
        host=backlog_config.host,
        api_key=backlog_config.api_key,
        timeout_seconds=backlog_config.timeout_seconds,
    )
    dependencies['api_retry_service'] = ApiRetryService(policy=get_retry_policy())
    dependencies['client'] = BacklogClient(
        api=dependencies['api'],
        api_retry_service=dependencies['api_retry_service'],
        owns_api=True,
    )
    dependencies['command_handler'] = CommandHandler(client=dependencies['client'], ui=ui)
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="backlogmd",
    help="Read and update Markdown issues and wikis in Backlog projects.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---
def run_command(ctx: typer.Context, command: Callable[[CommandHandler], Coroutine[Any, Any, bool]]) -> None:
    """Builds dependencies, runs an async handler and maps failure to exit code 1."""
    options = ctx.obj or {}
    ui = ConsoleDisplay()
    try:
        dependencies = create_dependencies(ui, host=options.get('host'), api_key=options.get('api_key'))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        ui.display_error(str(e))
        raise typer.Exit(code=1)

    async def execute() -> bool:
        async with dependencies['client']:
            return await command(dependencies['command_handler'])

    if not asyncio.run(execute()):
        raise typer.Exit(code=1)

def read_document(path: Path) -> str:
    """Reads a UTF-8 Markdown file, exiting with code 1 if it cannot be decoded."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode {path} as UTF-8: {e}")
        ConsoleDisplay().display_error(f"File {path} is not valid UTF-8: {e.reason}")
        raise typer.Exit(code=1)

# --- CLI Options ---

ProjectKeyArgument = Annotated[str, typer.Argument(help="Backlog project key, e.g. 'DOCS'.")]
DocumentOption = Annotated[
    Path,
    typer.Option("--file", "-f", exists=True, file_okay=True, dir_okay=False,
                 readable=True, resolve_path=True,
                 help="Markdown file holding the new text.")
]

# --- CLI Commands ---

@app.command()
def project(ctx: typer.Context, project_key: ProjectKeyArgument):
    """Show a project and check that it uses Markdown."""
    run_command(ctx, lambda handler: handler.handle_project(project_key))

@app.command()
def issues(ctx: typer.Context, project_key: ProjectKeyArgument):
    """List every issue of a Markdown project."""
    run_command(ctx, lambda handler: handler.handle_issues(project_key))

@app.command()
def issue(ctx: typer.Context, issue_id: Annotated[int, typer.Argument(help="Numeric issue ID.")]):
    """Show an issue's description."""
    run_command(ctx, lambda handler: handler.handle_issue(issue_id))

@app.command(name="update-issue")
def update_issue_command(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(help="Numeric issue ID.")],
    file: DocumentOption,
):
    """Replace an issue's description with the contents of a file."""
    description = read_document(file)
    run_command(ctx, lambda handler: handler.handle_update_issue(issue_id, description))

@app.command()
def wikis(ctx: typer.Context, project_key: ProjectKeyArgument):
    """List the wiki pages of a Markdown project."""
    run_command(ctx, lambda handler: handler.handle_wikis(project_key))

@app.command()
def wiki(ctx: typer.Context, wiki_id: Annotated[int, typer.Argument(help="Numeric wiki page ID.")]):
    """Show a wiki page's content."""
    run_command(ctx, lambda handler: handler.handle_wiki(wiki_id))

@app.command(name="update-wiki")
def update_wiki_command(
    ctx: typer.Context,
    wiki_id: Annotated[int, typer.Argument(help="Numeric wiki page ID.")],
    file: DocumentOption,
):
    """Replace a wiki page's content with the contents of a file."""
    content = read_document(file)
    run_command(ctx, lambda handler: handler.handle_update_wiki(wiki_id, content))

@app.callback()
def main_callback(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host", help="Backlog space host (overrides BACKLOG_HOST).")] = None,
    api_key: Annotated[Optional[str], typer.Option("--api-key", help="Backlog API key (overrides BACKLOG_API_KEY).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Loads configuration and logging before any command runs."""
    load_configuration()
    log_level = "DEBUG" if verbose else get_config('logging.level', 'INFO')
    setup_logging(log_level=log_level, log_file=get_config('logging.file'))
    ctx.obj = {'host': host, 'api_key': api_key}

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
