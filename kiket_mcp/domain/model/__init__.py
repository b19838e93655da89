"""Remote entities and tool input contracts."""

from .base import Identifier, RemoteModel, ToolInput
from .issue import (
    Assignee,
    Comment,
    CommentAuthor,
    CommentCreateInput,
    CommentDeleteInput,
    CommentList,
    CommentListInput,
    CommentUpdateInput,
    Issue,
    IssueIdentifierInput,
    IssueInput,
    IssueList,
    IssueListFilters,
    IssueUpdateInput,
    Pagination,
    TransitionIssueInput,
)
from .project import (
    Project,
    ProjectIdentifierInput,
    ProjectInput,
    ProjectList,
    ProjectListFilters,
    ProjectUpdateInput,
)
from .user import CurrentUserInput, User, UserIdentifierInput, UserList, UserListFilters

__all__ = [
    "Identifier",
    "RemoteModel",
    "ToolInput",
    # Issues
    "Assignee",
    "Issue",
    "IssueList",
    "Pagination",
    "IssueListFilters",
    "IssueIdentifierInput",
    "IssueInput",
    "IssueUpdateInput",
    "TransitionIssueInput",
    # Comments
    "Comment",
    "CommentAuthor",
    "CommentList",
    "CommentListInput",
    "CommentCreateInput",
    "CommentUpdateInput",
    "CommentDeleteInput",
    # Projects
    "Project",
    "ProjectList",
    "ProjectListFilters",
    "ProjectIdentifierInput",
    "ProjectInput",
    "ProjectUpdateInput",
    # Users
    "User",
    "UserList",
    "UserListFilters",
    "UserIdentifierInput",
    "CurrentUserInput",
]
