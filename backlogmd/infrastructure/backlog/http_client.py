"""Concrete implementation of the BacklogApi interface using httpx.

Talks to Backlog REST API v2 (``https://{host}/api/v2``). Authenticates with
the ``apiKey`` query parameter and translates non-2xx responses and
transport failures into BacklogApiError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from backlogmd.domain.errors import BacklogApiError, ConfigurationError
from backlogmd.domain.interfaces.backlog_api import BacklogApi
from backlogmd.domain.models.common import (
    IssueFields, IssueFilter, IssueId, ProjectKey, WikiFields, WikiFilter, WikiId,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def build_base_url(host: str) -> str:
    """Returns the API root for a Backlog space host (e.g. 'example.backlog.com')."""
    host = host.strip().rstrip("/")
    if not host.startswith(("http://", "https://")):
        host = f"https://{host}"
    return f"{host}/api/v2"


class HttpBacklogApi(BacklogApi):
    """Backlog API client over an ``httpx.AsyncClient``."""

    def __init__(
        self,
        host: str,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the HTTP client.

        Args:
            host: Backlog space host, with or without scheme.
            api_key: Backlog API key.
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport (used by tests).
        """
        if not host:
            raise ConfigurationError("Backlog host not provided.")
        if not api_key:
            raise ConfigurationError("Backlog API key not provided.")

        self.base_url = build_base_url(host)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            params={"apiKey": api_key},
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        logger.info(f"HttpBacklogApi initialized for {self.base_url}")

    async def __aenter__(self) -> "HttpBacklogApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        logger.debug(f"{method} {path} params={params}")
        try:
            response = await self._client.request(method, path, params=params, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Transport error on {method} {path}: {type(e).__name__} - {e}")
            raise BacklogApiError(0, type(e).__name__, str(e)) from e

        if response.is_error:
            raise BacklogApiError(response.status_code, response.reason_phrase, response.text)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {method} {path} (status {response.status_code}): {e}")
            raise BacklogApiError(response.status_code, "Invalid JSON", response.text) from e

    async def get_project(self, project_key: ProjectKey) -> Dict[str, Any]:
        return await self._request("GET", f"/projects/{project_key}")

    async def get_issues(self, issue_filter: IssueFilter) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "projectId[]": list(issue_filter["projectId"]),
            "offset": issue_filter["offset"],
            "count": issue_filter["count"],
        }
        return await self._request("GET", "/issues", params=params)

    async def get_issue(self, issue_id: IssueId) -> Dict[str, Any]:
        return await self._request("GET", f"/issues/{issue_id}")

    async def patch_issue(self, issue_id: IssueId, fields: IssueFields) -> Dict[str, Any]:
        return await self._request("PATCH", f"/issues/{issue_id}", data=dict(fields))

    async def get_wikis(self, wiki_filter: WikiFilter) -> List[Dict[str, Any]]:
        return await self._request("GET", "/wikis", params={"projectIdOrKey": wiki_filter["projectIdOrKey"]})

    async def get_wiki(self, wiki_id: WikiId) -> Dict[str, Any]:
        return await self._request("GET", f"/wikis/{wiki_id}")

    async def patch_wiki(self, wiki_id: WikiId, fields: WikiFields) -> Dict[str, Any]:
        return await self._request("PATCH", f"/wikis/{wiki_id}", data=dict(fields))
