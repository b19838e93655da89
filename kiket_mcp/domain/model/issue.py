"""Issue and comment models."""

from pydantic import Field

from .base import Identifier, RemoteModel, ToolInput

# =============================================================================
# Remote entities
# =============================================================================


class Assignee(RemoteModel):
    id: int
    name: str | None = None
    email: str | None = None


class Issue(RemoteModel):
    id: int
    key: str
    title: str
    description: str | None = None
    status: str
    workflow_state: str | None = None
    assignee: Assignee | None = None
    priority: str | None = None
    labels: list[str] = Field(default_factory=list)
    issue_type: str | None = None
    created_at: str
    updated_at: str


class Pagination(RemoteModel):
    page: int
    per_page: int
    total_pages: int
    total_count: int


class IssueList(RemoteModel):
    issues: list[Issue]
    pagination: Pagination | None = None


class CommentAuthor(RemoteModel):
    id: int
    name: str | None = None
    email: str | None = None


class Comment(RemoteModel):
    id: int
    body: str
    author: CommentAuthor | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CommentList(RemoteModel):
    comments: list[Comment]


# =============================================================================
# Tool inputs
# =============================================================================


class IssueListFilters(ToolInput):
    project_key: str | None = None
    status: str | None = None
    assignee_id: int | None = None
    label: str | None = None
    search: str | None = None
    page: int | None = None
    per_page: int | None = None


class IssueIdentifierInput(ToolInput):
    id: Identifier


class IssueInput(ToolInput):
    project_key: str | None = None
    title: str
    description: str | None = None
    issue_type: str | None = None
    priority: str | None = None
    assignee_id: int | None = None
    labels: list[str] | None = None


class IssueUpdateInput(ToolInput):
    id: Identifier
    project_key: str | None = None
    title: str | None = None
    description: str | None = None
    issue_type: str | None = None
    priority: str | None = None
    assignee_id: int | None = None
    labels: list[str] | None = None


class TransitionIssueInput(ToolInput):
    id: Identifier
    transition: str = Field(min_length=1)


class CommentListInput(ToolInput):
    issue_id: Identifier


class CommentCreateInput(ToolInput):
    issue_id: Identifier
    body: str = Field(min_length=1)


class CommentUpdateInput(ToolInput):
    issue_id: Identifier
    comment_id: int
    body: str = Field(min_length=1)


class CommentDeleteInput(ToolInput):
    issue_id: Identifier
    comment_id: int
