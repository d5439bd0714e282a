"""Domain errors raised by the Backlog client and its adapters."""

from typing import Optional


class BacklogError(Exception):
    """Base class for all backlogmd errors."""


class ValidationError(BacklogError):
    """Raised when a project does not use Markdown text formatting."""

    def __init__(self, project_key: str, text_formatting_rule: Optional[str]):
        self.project_key = project_key
        self.text_formatting_rule = text_formatting_rule
        super().__init__(
            f"Project {project_key} does not use markdown formatting "
            f"(uses: {text_formatting_rule})"
        )


class BacklogApiError(BacklogError):
    """Raised when the Backlog API answers with a non-2xx status or cannot be reached.

    The message starts with the status and reason phrase, so a rate-limited
    response reads "429 Too Many Requests: ...". Transport failures use
    status 0.
    """

    BODY_EXCERPT_LENGTH = 200

    def __init__(self, status_code: int, reason: str, body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"{status_code} {reason}"
        if body:
            message = f"{message}: {body[:self.BODY_EXCERPT_LENGTH]}"
        super().__init__(message)


class BacklogResponseError(BacklogError):
    """Raised when a response payload is missing a required field."""

    def __init__(self, entity: str, field_name: str):
        self.entity = entity
        self.field_name = field_name
        super().__init__(f"Invalid {entity} response: missing required field '{field_name}'")


class ConfigurationError(BacklogError):
    """Raised when required configuration (host, API key) is missing."""
