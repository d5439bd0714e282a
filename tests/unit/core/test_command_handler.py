import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from backlogmd.core.backlog_client import BacklogClient
from backlogmd.core.command_handler import CommandHandler
from backlogmd.domain.errors import BacklogApiError, ValidationError
from backlogmd.domain.interfaces.user_interface import UserInterface
from backlogmd.domain.models.backlog import Issue, Project, Wiki

PROJECT = Project(id=7, project_key="DOCS", name="Documentation", text_formatting_rule="markdown")

@pytest.fixture
def mock_client():
    return AsyncMock(spec=BacklogClient)

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def command_handler(mock_client, mock_ui):
    """Fixture to create CommandHandler with mocked client and UI."""
    return CommandHandler(client=mock_client, ui=mock_ui)

def test_handle_project(command_handler, mock_client, mock_ui):
    mock_client.get_project.return_value = PROJECT

    assert asyncio.run(command_handler.handle_project("DOCS")) is True

    mock_client.get_project.assert_awaited_once_with("DOCS")
    mock_ui.display_project.assert_called_once_with(PROJECT)

def test_handle_project_validation_failure(command_handler, mock_client, mock_ui):
    mock_client.get_project.side_effect = ValidationError("DOCS", "backlog")

    assert asyncio.run(command_handler.handle_project("DOCS")) is False

    mock_ui.display_error.assert_called_once_with(
        "Project lookup failed: Project DOCS does not use markdown formatting (uses: backlog)"
    )
    mock_ui.display_project.assert_not_called()

def test_handle_issues_uses_project_id(command_handler, mock_client, mock_ui):
    issues = [Issue(id=1, issue_key="DOCS-1", summary="First")]
    mock_client.get_project.return_value = PROJECT
    mock_client.get_issues.return_value = issues

    assert asyncio.run(command_handler.handle_issues("DOCS")) is True

    mock_client.get_issues.assert_awaited_once_with(7)
    mock_ui.display_issues.assert_called_once_with(issues, title="DOCS issues")

def test_handle_issues_skips_listing_for_invalid_project(command_handler, mock_client, mock_ui):
    mock_client.get_project.side_effect = ValidationError("DOCS", "backlog")

    assert asyncio.run(command_handler.handle_issues("DOCS")) is False
    mock_client.get_issues.assert_not_awaited()

def test_handle_issue_renders_description(command_handler, mock_client, mock_ui):
    mock_client.get_issue.return_value = Issue(id=12, issue_key="DOCS-12", summary="Fix docs", description="# Body")

    assert asyncio.run(command_handler.handle_issue(12)) is True
    mock_ui.display_markdown.assert_called_once_with("# Body", title="DOCS-12 Fix docs")

def test_handle_update_issue(command_handler, mock_client, mock_ui):
    assert asyncio.run(command_handler.handle_update_issue(12, "new")) is True

    mock_client.update_issue.assert_awaited_once_with(12, "new")
    mock_ui.display_info.assert_called_once_with("Updated issue 12.")

def test_handle_update_issue_rate_limited(command_handler, mock_client, mock_ui):
    mock_client.update_issue.side_effect = BacklogApiError(429, "Too Many Requests")

    assert asyncio.run(command_handler.handle_update_issue(12, "new")) is False
    mock_ui.display_error.assert_called_once_with("Issue update failed: 429 Too Many Requests")

def test_handle_wikis(command_handler, mock_client, mock_ui):
    wikis = [Wiki(id=1, name="Home")]
    mock_client.get_project.return_value = PROJECT
    mock_client.get_wikis.return_value = wikis

    assert asyncio.run(command_handler.handle_wikis("DOCS")) is True

    mock_client.get_wikis.assert_awaited_once_with(7)
    mock_ui.display_wikis.assert_called_once_with(wikis, title="DOCS wikis")

def test_handle_wiki(command_handler, mock_client, mock_ui):
    mock_client.get_wiki.return_value = Wiki(id=3, name="Home", content="Hello")

    assert asyncio.run(command_handler.handle_wiki(3)) is True
    mock_ui.display_markdown.assert_called_once_with("Hello", title="Home")

def test_handle_update_wiki(command_handler, mock_client, mock_ui):
    assert asyncio.run(command_handler.handle_update_wiki(3, "# New")) is True

    mock_client.update_wiki.assert_awaited_once_with(3, "# New")
    mock_ui.display_info.assert_called_once_with("Updated wiki 3.")

def test_unexpected_errors_propagate(command_handler, mock_client):
    mock_client.get_wiki.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError):
        asyncio.run(command_handler.handle_wiki(3))
