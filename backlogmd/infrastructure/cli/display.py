import logging
from typing import Any, Optional, Sequence

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from backlogmd.domain.interfaces.user_interface import UserInterface
from backlogmd.domain.models.backlog import Issue, Project, Wiki

logger = logging.getLogger(__name__)

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_project(self, project: Project) -> None:
        table = Table(box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")
        table.add_row("ID", str(project.id))
        table.add_row("Key", project.project_key)
        table.add_row("Name", project.name)
        table.add_row("Formatting", project.text_formatting_rule)
        self.console.print(table)

    def display_issues(self, issues: Sequence[Issue], title: str = "Issues") -> None:
        table = Table(title=f"{title} ({len(issues)})", box=ROUNDED)
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Key", style="bold cyan", no_wrap=True)
        table.add_column("Summary")
        for issue in issues:
            table.add_row(str(issue.id), issue.issue_key, issue.summary)
        self.console.print(table)

    def display_wikis(self, wikis: Sequence[Wiki], title: str = "Wikis") -> None:
        table = Table(title=f"{title} ({len(wikis)})", box=ROUNDED)
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Name", style="bold cyan")
        for wiki in wikis:
            table.add_row(str(wiki.id), wiki.name)
        self.console.print(table)

    def display_markdown(self, markdown_text: str, title: str = "") -> None:
        """Renders Markdown inside a panel; empty documents show a placeholder."""
        body = Markdown(markdown_text) if markdown_text.strip() else Text("(empty)", style="dim")
        panel = Panel(
            body,
            title=f"[bold white]{title}[/bold white]" if title else None,
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(Text(info_message, style="blue"))
