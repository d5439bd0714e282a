"""Interface for presenting results to the user.

Defines the contract for displaying Backlog records, Markdown documents,
information and errors, allowing different UI implementations.
"""

import abc
from typing import Any, Sequence

from backlogmd.domain.models.backlog import Issue, Project, Wiki


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_project(self, project: Project) -> None:
        """Displays a project's details."""
        pass

    @abc.abstractmethod
    def display_issues(self, issues: Sequence[Issue], title: str = "Issues") -> None:
        """Displays a list of issues (key and summary)."""
        pass

    @abc.abstractmethod
    def display_wikis(self, wikis: Sequence[Wiki], title: str = "Wikis") -> None:
        """Displays a list of wiki pages."""
        pass

    @abc.abstractmethod
    def display_markdown(self, markdown_text: str, title: str = "") -> None:
        """Renders a Markdown document (issue description, wiki content).

        Args:
            markdown_text: The Markdown source.
            title: Optional heading shown above the document.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass
