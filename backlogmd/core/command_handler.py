"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to the BacklogClient and shows results through the UserInterface. Each
handler returns True on success and False when a Backlog error was shown
to the user.
"""

import logging

from backlogmd.core.backlog_client import BacklogClient
from backlogmd.domain.errors import BacklogError
from backlogmd.domain.interfaces.user_interface import UserInterface
from backlogmd.domain.models.common import IssueId, ProjectKey, WikiId

logger = logging.getLogger(__name__)

class CommandHandler:
    """Handles incoming commands and delegates to the Backlog client."""

    def __init__(self, client: BacklogClient, ui: UserInterface):
        self.client = client
        self.ui = ui

    def _fail(self, action: str, error: BacklogError) -> bool:
        logger.debug(f"{action} failed: {type(error).__name__}")
        self.ui.display_error(f"{action} failed: {error}")
        return False

    async def handle_project(self, project_key: str) -> bool:
        """Handles the 'project' command."""
        try:
            project = await self.client.get_project(ProjectKey(project_key))
        except BacklogError as e:
            return self._fail("Project lookup", e)
        self.ui.display_project(project)
        return True

    async def handle_issues(self, project_key: str) -> bool:
        """Handles the 'issues' command: validates the project, then lists every issue."""
        try:
            project = await self.client.get_project(ProjectKey(project_key))
            issues = await self.client.get_issues(project.id)
        except BacklogError as e:
            return self._fail("Issue listing", e)
        self.ui.display_issues(issues, title=f"{project.project_key} issues")
        return True

    async def handle_issue(self, issue_id: int) -> bool:
        """Handles the 'issue' command: renders one issue's description."""
        try:
            issue = await self.client.get_issue(IssueId(issue_id))
        except BacklogError as e:
            return self._fail("Issue lookup", e)
        self.ui.display_markdown(issue.description, title=f"{issue.issue_key} {issue.summary}")
        return True

    async def handle_update_issue(self, issue_id: int, description: str) -> bool:
        """Handles the 'update-issue' command: replaces an issue's description."""
        try:
            await self.client.update_issue(IssueId(issue_id), description)
        except BacklogError as e:
            return self._fail("Issue update", e)
        self.ui.display_info(f"Updated issue {issue_id}.")
        return True

    async def handle_wikis(self, project_key: str) -> bool:
        """Handles the 'wikis' command: validates the project, then lists its wiki pages."""
        try:
            project = await self.client.get_project(ProjectKey(project_key))
            wikis = await self.client.get_wikis(project.id)
        except BacklogError as e:
            return self._fail("Wiki listing", e)
        self.ui.display_wikis(wikis, title=f"{project.project_key} wikis")
        return True

    async def handle_wiki(self, wiki_id: int) -> bool:
        """Handles the 'wiki' command: renders one wiki page's content."""
        try:
            wiki = await self.client.get_wiki(WikiId(wiki_id))
        except BacklogError as e:
            return self._fail("Wiki lookup", e)
        self.ui.display_markdown(wiki.content, title=wiki.name)
        return True

    async def handle_update_wiki(self, wiki_id: int, content: str) -> bool:
        """Handles the 'update-wiki' command: replaces a wiki page's content."""
        try:
            await self.client.update_wiki(WikiId(wiki_id), content)
        except BacklogError as e:
            return self._fail("Wiki update", e)
        self.ui.display_info(f"Updated wiki {wiki_id}.")
        return True
