"""Shared fixtures: a recording fake of the remote client and a no-wait executor."""

import random
from typing import Any

import pytest

from kiket_mcp.domain.model import Comment, Issue, Project, User
from kiket_mcp.domain.value_objects import RetryConfig
from kiket_mcp.infrastructure.event_bus import EventBus
from kiket_mcp.infrastructure.resilience import ResilienceExecutor

ISSUE_DATA = {
    "id": 1,
    "key": "KIKET-1",
    "title": "Login button does nothing",
    "description": None,
    "status": "open",
    "workflow_state": "todo",
    "assignee": {"id": 7, "name": "Sam", "email": "sam@example.com"},
    "priority": "high",
    "labels": ["bug"],
    "issue_type": "bug",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-02T00:00:00Z",
}

COMMENT_DATA = {
    "id": 3,
    "body": "Reproduced on staging",
    "author": {"id": 7, "name": "Sam"},
    "created_at": "2024-01-03T00:00:00Z",
    "updated_at": "2024-01-03T00:00:00Z",
}

PROJECT_DATA = {
    "id": 5,
    "key": "KIKET",
    "name": "Kiket",
    "description": "Tracker",
    "status": "active",
    "repository_url": "https://example.com/kiket.git",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}

USER_DATA = {
    "id": 7,
    "name": "Sam",
    "email": "sam@example.com",
    "username": "sam",
    "role": "admin",
    "avatar_url": None,
}


class FakeIssueTracker:
    """In-memory stand-in for KiketClient that records every call.

    ``failures`` maps a method name to a list of exceptions raised by the
    first calls of that method, in order.
    """

    def __init__(self, failures: dict[str, list[BaseException]] | None = None):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures = {name: list(errors) for name, errors in (failures or {}).items()}
        self.closed = False

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        pending = self.failures.get(name)
        if pending:
            raise pending.pop(0)

    async def list_issues(self, filters=None):
        self._record("list_issues", filters)
        return [Issue.model_validate(ISSUE_DATA)]

    async def get_issue(self, issue_id):
        self._record("get_issue", issue_id)
        return Issue.model_validate({**ISSUE_DATA, "key": str(issue_id)})

    async def create_issue(self, payload):
        self._record("create_issue", payload)
        return Issue.model_validate({**ISSUE_DATA, "title": payload["title"]})

    async def update_issue(self, issue_id, payload):
        self._record("update_issue", issue_id, payload)
        return Issue.model_validate({**ISSUE_DATA, **payload})

    async def transition_issue(self, issue_id, transition):
        self._record("transition_issue", issue_id, transition)
        return Issue.model_validate({**ISSUE_DATA, "status": transition})

    async def list_comments(self, issue_id):
        self._record("list_comments", issue_id)
        return [Comment.model_validate(COMMENT_DATA)]

    async def create_comment(self, issue_id, body):
        self._record("create_comment", issue_id, body)
        return Comment.model_validate({**COMMENT_DATA, "body": body})

    async def update_comment(self, issue_id, comment_id, body):
        self._record("update_comment", issue_id, comment_id, body)
        return Comment.model_validate({**COMMENT_DATA, "id": comment_id, "body": body})

    async def delete_comment(self, issue_id, comment_id):
        self._record("delete_comment", issue_id, comment_id)

    async def list_projects(self, filters=None):
        self._record("list_projects", filters)
        return [Project.model_validate(PROJECT_DATA)]

    async def get_project(self, project_id):
        self._record("get_project", project_id)
        return Project.model_validate({**PROJECT_DATA, "id": project_id})

    async def create_project(self, payload):
        self._record("create_project", payload)
        return Project.model_validate({**PROJECT_DATA, **payload})

    async def update_project(self, project_id, payload):
        self._record("update_project", project_id, payload)
        return Project.model_validate({**PROJECT_DATA, "id": project_id, **payload})

    async def delete_project(self, project_id):
        self._record("delete_project", project_id)

    async def list_users(self, filters=None):
        self._record("list_users", filters)
        return [User.model_validate(USER_DATA)]

    async def get_user(self, user_id):
        self._record("get_user", user_id)
        return User.model_validate({**USER_DATA, "id": user_id})

    async def get_current_user(self):
        self._record("get_current_user")
        return User.model_validate(USER_DATA)

    async def aclose(self):
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays (seconds)."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_client() -> FakeIssueTracker:
    return FakeIssueTracker()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def executor(recording_sleep, event_bus) -> ResilienceExecutor:
    return ResilienceExecutor(
        RetryConfig(max_retries=3, base_delay_ms=10, max_delay_ms=100),
        event_bus=event_bus,
        sleep=recording_sleep,
        rng=random.Random(0),
    )


@pytest.fixture
def make_client():
    """Factory for a FakeIssueTracker with scripted failures."""

    def _make(**failures: list[BaseException]) -> FakeIssueTracker:
        return FakeIssueTracker(failures)

    return _make
