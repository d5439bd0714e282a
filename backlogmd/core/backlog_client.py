"""Backlog client facade.

Validates projects, pages through issues and fetches/updates single issues
and wiki pages over an injected BacklogApi. Single-item calls run under the
retry service so rate-limited requests are retried after a fixed delay.
"""

import logging
from typing import Any, List, Optional

from backlogmd.domain.errors import ValidationError
from backlogmd.domain.interfaces.backlog_api import BacklogApi
from backlogmd.domain.models.backlog import Issue, Project, Wiki
from backlogmd.domain.models.common import (
    IssueFilter, IssueId, ProjectId, ProjectKey, WikiId,
)
from backlogmd.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

# Maximum count Backlog accepts per issue list request
ISSUE_PAGE_SIZE = 100


class BacklogClient:
    """Facade over the Backlog API for projects, issues and wikis."""

    def __init__(
        self,
        api: BacklogApi,
        api_retry_service: Optional[ApiRetryService] = None,
        owns_api: bool = False,
    ):
        """Initializes the client.

        Args:
            api: The Backlog API implementation to delegate to.
            api_retry_service: Retry service for single-item calls.
            owns_api: Close ``api`` when this client is closed.
        """
        self.api = api
        self.api_retry_service = api_retry_service or ApiRetryService()
        self._owns_api = owns_api

    async def __aenter__(self) -> "BacklogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_api:
            await self.api.aclose()

    async def get_project(self, project_key: ProjectKey) -> Project:
        """Gets project information and validates it uses markdown.

        Raises:
            ValidationError: If the project's text formatting rule is not markdown.
        """
        try:
            logger.debug(f"Fetching project: {project_key}")
            project = Project.from_api(await self.api.get_project(project_key))

            if not project.uses_markdown:
                raise ValidationError(project_key, project.text_formatting_rule)

            logger.info(f"Project validated: {project.name} (ID: {project.id}) uses markdown")
            return project
        except Exception as e:
            logger.error(f"Failed to get project {project_key}: {e}")
            raise

    async def get_issues(self, project_id: ProjectId) -> List[Issue]:
        """Gets all issues for a project, one page at a time.

        Stops on an empty page, or after a page shorter than ISSUE_PAGE_SIZE.
        """
        try:
            logger.debug(f"Fetching all issues for project ID: {project_id}")
            all_issues: List[Issue] = []
            offset = 0

            while True:
                logger.debug(f"Fetching issues with offset: {offset}, count: {ISSUE_PAGE_SIZE}")
                issue_filter = IssueFilter(projectId=[project_id], offset=offset, count=ISSUE_PAGE_SIZE)
                page = await self.api.get_issues(issue_filter)
                if not page:
                    break

                all_issues.extend(Issue.from_api(item) for item in page)
                logger.debug(f"Fetched {len(page)} issues (total so far: {len(all_issues)})")

                if len(page) < ISSUE_PAGE_SIZE:
                    break
                offset += ISSUE_PAGE_SIZE

            logger.info(f"Found total {len(all_issues)} issues for project {project_id}")
            return all_issues
        except Exception as e:
            logger.error(f"Failed to get issues for project {project_id}: {e}")
            raise

    async def get_issue(self, issue_id: IssueId) -> Issue:
        """Gets detailed issue information."""
        async def fetch() -> Issue:
            logger.debug(f"Fetching issue details: {issue_id}")
            return Issue.from_api(await self.api.get_issue(issue_id))

        return await self.api_retry_service.execute_with_retry(
            fetch, operation_name=f"get_issue({issue_id})"
        )

    async def update_issue(self, issue_id: IssueId, description: str) -> None:
        """Updates an issue's description."""
        async def patch() -> None:
            logger.debug(f"Updating issue {issue_id}")
            await self.api.patch_issue(issue_id, {"description": description})
            logger.info(f"Successfully updated issue {issue_id}")

        await self.api_retry_service.execute_with_retry(
            patch, operation_name=f"update_issue({issue_id})"
        )

    async def get_wikis(self, project_id: ProjectId) -> List[Wiki]:
        """Gets all wiki pages for a project (single request)."""
        try:
            logger.debug(f"Fetching wikis for project ID: {project_id}")
            wikis = await self.api.get_wikis({"projectIdOrKey": project_id})
            logger.info(f"Found {len(wikis)} wikis")
            return [Wiki.from_api(item) for item in wikis]
        except Exception as e:
            logger.error(f"Failed to get wikis for project {project_id}: {e}")
            raise

    async def get_wiki(self, wiki_id: WikiId) -> Wiki:
        """Gets detailed wiki information."""
        async def fetch() -> Wiki:
            logger.debug(f"Fetching wiki details: {wiki_id}")
            return Wiki.from_api(await self.api.get_wiki(wiki_id))

        return await self.api_retry_service.execute_with_retry(
            fetch, operation_name=f"get_wiki({wiki_id})"
        )

    async def update_wiki(self, wiki_id: WikiId, content: str) -> None:
        """Updates a wiki's content."""
        async def patch() -> None:
            logger.debug(f"Updating wiki {wiki_id}")
            await self.api.patch_wiki(wiki_id, {"content": content})
            logger.info(f"Successfully updated wiki {wiki_id}")

        await self.api_retry_service.execute_with_retry(
            patch, operation_name=f"update_wiki({wiki_id})"
        )
