import pytest
from typer.testing import CliRunner
from unittest.mock import AsyncMock

from backlogmd.domain.interfaces.backlog_api import BacklogApi
from backlogmd.infrastructure.config import settings
from backlogmd.infrastructure.config.settings import ENV_VARS, clear_test_config


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def issue_payload(issue_id, description="Body", **overrides):
    payload = {
        "id": issue_id,
        "issueKey": f"DOCS-{issue_id}",
        "summary": f"Issue {issue_id}",
        "description": description,
    }
    payload.update(overrides)
    return payload


def wiki_payload(wiki_id, content="# Page", **overrides):
    payload = {"id": wiki_id, "name": f"Page {wiki_id}", "content": content}
    payload.update(overrides)
    return payload


def project_payload(text_formatting_rule="markdown", **overrides):
    payload = {
        "id": 7,
        "projectKey": "DOCS",
        "name": "Documentation",
        "textFormattingRule": text_formatting_rule,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_api():
    """Backlog API double whose methods are AsyncMocks."""
    return AsyncMock(spec=BacklogApi)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep real BACKLOG_* variables and test overrides out of every test."""
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr(settings, "_config", {})
    clear_test_config()
    yield
    clear_test_config()


@pytest.fixture
def make_issue():
    return issue_payload


@pytest.fixture
def make_wiki():
    return wiki_payload


@pytest.fixture
def make_project():
    return project_payload
