"""Interface for the remote Backlog API.

Defines the contract the client facade relies on. Implementations own
authentication, transport and JSON decoding and return raw payloads
(mappings or lists of mappings) exactly as the service sent them.
"""

import abc
from typing import Any, Dict, List

from backlogmd.domain.models.common import (
    IssueFields, IssueFilter, IssueId, ProjectKey, WikiFields, WikiFilter, WikiId,
)


class BacklogApi(abc.ABC):
    """Abstract Base Class for Backlog API access."""

    @abc.abstractmethod
    async def get_project(self, project_key: ProjectKey) -> Dict[str, Any]:
        """Fetches a project by key.

        Raises:
            BacklogApiError: If the request fails.
        """
        pass

    @abc.abstractmethod
    async def get_issues(self, issue_filter: IssueFilter) -> List[Dict[str, Any]]:
        """Fetches one page of issues matching the filter."""
        pass

    @abc.abstractmethod
    async def get_issue(self, issue_id: IssueId) -> Dict[str, Any]:
        """Fetches a single issue."""
        pass

    @abc.abstractmethod
    async def patch_issue(self, issue_id: IssueId, fields: IssueFields) -> Dict[str, Any]:
        """Applies a partial update to an issue and returns the updated issue."""
        pass

    @abc.abstractmethod
    async def get_wikis(self, wiki_filter: WikiFilter) -> List[Dict[str, Any]]:
        """Fetches all wiki pages of a project."""
        pass

    @abc.abstractmethod
    async def get_wiki(self, wiki_id: WikiId) -> Dict[str, Any]:
        """Fetches a single wiki page."""
        pass

    @abc.abstractmethod
    async def patch_wiki(self, wiki_id: WikiId, fields: WikiFields) -> Dict[str, Any]:
        """Applies a partial update to a wiki page and returns the updated page."""
        pass

    async def aclose(self) -> None:
        """Releases transport resources. No-op by default."""
        return None
