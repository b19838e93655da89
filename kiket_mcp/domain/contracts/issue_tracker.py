"""Contract for the remote issue tracker client.

The operation registries depend on this protocol only, so tests can pass any
object with matching coroutine methods.
"""

from typing import Any, Protocol

from ..model import Comment, Identifier, Issue, IssueListFilters, Project, ProjectListFilters, User, UserListFilters


class IssueTrackerClient(Protocol):
    """One coroutine per remote operation.

    Each method returns a validated domain object (or list of them) and raises
    a classified ``KiketError`` on failure.
    """

    # Issues
    async def list_issues(self, filters: IssueListFilters | None = None) -> list[Issue]: ...

    async def get_issue(self, issue_id: Identifier) -> Issue: ...

    async def create_issue(self, payload: dict[str, Any]) -> Issue: ...

    async def update_issue(self, issue_id: Identifier, payload: dict[str, Any]) -> Issue: ...

    async def transition_issue(self, issue_id: Identifier, transition: str) -> Issue: ...

    # Comments
    async def list_comments(self, issue_id: Identifier) -> list[Comment]: ...

    async def create_comment(self, issue_id: Identifier, body: str) -> Comment: ...

    async def update_comment(self, issue_id: Identifier, comment_id: int, body: str) -> Comment: ...

    async def delete_comment(self, issue_id: Identifier, comment_id: int) -> None: ...

    # Projects
    async def list_projects(self, filters: ProjectListFilters | None = None) -> list[Project]: ...

    async def get_project(self, project_id: int) -> Project: ...

    async def create_project(self, payload: dict[str, Any]) -> Project: ...

    async def update_project(self, project_id: int, payload: dict[str, Any]) -> Project: ...

    async def delete_project(self, project_id: int) -> None: ...

    # Users
    async def list_users(self, filters: UserListFilters | None = None) -> list[User]: ...

    async def get_user(self, user_id: int) -> User: ...

    async def get_current_user(self) -> User: ...
