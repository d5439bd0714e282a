"""Defines common Value Objects used across the Backlog context.

These objects represent simple values like identifiers and keys, ensuring
consistency and type safety.
"""

from typing import NewType, TypedDict, List, Union

# === Identifiers ===

# Using NewType for semantic clarity, although they are ints/strs at runtime.
ProjectId = NewType("ProjectId", int)
ProjectKey = NewType("ProjectKey", str)       # e.g. "DOCS"
IssueId = NewType("IssueId", int)
IssueKey = NewType("IssueKey", str)           # e.g. "DOCS-12"
WikiId = NewType("WikiId", int)

# Text formatting rule a project must use to be accepted
MARKDOWN_FORMATTING_RULE = "markdown"

# --- Request Structures ---

class IssueFilter(TypedDict):
    """Query sent when listing issues."""
    projectId: List[int]
    offset: int
    count: int

class WikiFilter(TypedDict):
    """Query sent when listing wikis."""
    projectIdOrKey: Union[int, str]

class IssueFields(TypedDict, total=False):
    """Fields accepted by a partial issue update."""
    description: str

class WikiFields(TypedDict, total=False):
    """Fields accepted by a partial wiki update."""
    content: str
