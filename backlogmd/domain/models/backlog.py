"""Domain models for Backlog projects, issues and wikis.

Each model is an immutable projection of remote state. The ``from_api``
constructors are the response schema: required fields must be present,
optional text fields are normalized to an empty string.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from backlogmd.domain.errors import BacklogResponseError
from backlogmd.domain.models.common import (
    IssueId, IssueKey, MARKDOWN_FORMATTING_RULE, ProjectId, ProjectKey, WikiId,
)


def _require(payload: Mapping[str, Any], entity: str, field_name: str) -> Any:
    if field_name not in payload or payload[field_name] is None:
        raise BacklogResponseError(entity, field_name)
    return payload[field_name]


def _text(payload: Mapping[str, Any], field_name: str) -> str:
    """Returns an optional text field, with missing or null mapped to ''."""
    value = payload.get(field_name)
    return value if value else ""


@dataclass(frozen=True)
class Project:
    """A Backlog project snapshot."""
    id: ProjectId
    project_key: ProjectKey
    name: str
    text_formatting_rule: Optional[str]

    @property
    def uses_markdown(self) -> bool:
        return self.text_formatting_rule == MARKDOWN_FORMATTING_RULE

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Project":
        return cls(
            id=ProjectId(_require(payload, "project", "id")),
            project_key=ProjectKey(_require(payload, "project", "projectKey")),
            name=_require(payload, "project", "name"),
            text_formatting_rule=payload.get("textFormattingRule"),
        )


@dataclass(frozen=True)
class Issue:
    """A Backlog issue with its description."""
    id: IssueId
    issue_key: IssueKey
    summary: str
    description: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Issue":
        if "summary" not in payload:
            raise BacklogResponseError("issue", "summary")
        return cls(
            id=IssueId(_require(payload, "issue", "id")),
            issue_key=IssueKey(_require(payload, "issue", "issueKey")),
            summary=_text(payload, "summary"),
            description=_text(payload, "description"),
        )


@dataclass(frozen=True)
class Wiki:
    """A Backlog wiki page."""
    id: WikiId
    name: str
    content: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Wiki":
        return cls(
            id=WikiId(_require(payload, "wiki", "id")),
            name=_require(payload, "wiki", "name"),
            content=_text(payload, "content"),
        )
