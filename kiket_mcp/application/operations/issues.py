"""Issue and comment tools."""

from ...domain.contracts import IssueTrackerClient
from ...domain.model import (
    CommentCreateInput,
    CommentDeleteInput,
    CommentListInput,
    CommentUpdateInput,
    IssueIdentifierInput,
    IssueInput,
    IssueListFilters,
    IssueUpdateInput,
    TransitionIssueInput,
)
from ...infrastructure.resilience import ResilienceExecutor
from .registry import Operation, OperationRegistry

ISSUES_DOMAIN = "issues"


def create_issue_registry(
    client: IssueTrackerClient,
    executor: ResilienceExecutor,
    *,
    default_project_key: str | None = None,
) -> OperationRegistry:
    """Build the issues registry.

    Args:
        client: Remote issue tracker client.
        executor: Wraps every remote call in retry with backoff.
        default_project_key: Project used by listIssues/createIssue when the caller omits one.
    """

    async def list_issues(filters: IssueListFilters) -> dict:
        issues = await executor.execute_with_backoff(lambda: client.list_issues(filters), "listIssues")
        return {"issues": [issue.model_dump() for issue in issues]}

    async def get_issue(args: IssueIdentifierInput) -> dict:
        issue = await executor.execute_with_backoff(lambda: client.get_issue(args.id), "getIssue")
        return {"issue": issue.model_dump()}

    async def create_issue(args: IssueInput) -> dict:
        payload = args.to_payload()
        issue = await executor.execute_with_backoff(lambda: client.create_issue(payload), "createIssue")
        return {"issue": issue.model_dump()}

    async def update_issue(args: IssueUpdateInput) -> dict:
        payload = args.to_payload(exclude={"id"})
        issue = await executor.execute_with_backoff(lambda: client.update_issue(args.id, payload), "updateIssue")
        return {"issue": issue.model_dump()}

    async def transition_issue(args: TransitionIssueInput) -> dict:
        issue = await executor.execute_with_backoff(
            lambda: client.transition_issue(args.id, args.transition), "transitionIssue"
        )
        return {"issue": issue.model_dump()}

    async def list_comments(args: CommentListInput) -> dict:
        comments = await executor.execute_with_backoff(lambda: client.list_comments(args.issue_id), "listComments")
        return {"comments": [comment.model_dump() for comment in comments]}

    async def create_comment(args: CommentCreateInput) -> dict:
        comment = await executor.execute_with_backoff(
            lambda: client.create_comment(args.issue_id, args.body), "createComment"
        )
        return {"comment": comment.model_dump()}

    async def update_comment(args: CommentUpdateInput) -> dict:
        comment = await executor.execute_with_backoff(
            lambda: client.update_comment(args.issue_id, args.comment_id, args.body), "updateComment"
        )
        return {"comment": comment.model_dump()}

    async def delete_comment(args: CommentDeleteInput) -> dict:
        await executor.execute_with_backoff(
            lambda: client.delete_comment(args.issue_id, args.comment_id), "deleteComment"
        )
        return {"success": True}

    return OperationRegistry(
        ISSUES_DOMAIN,
        [
            Operation(
                "listIssues",
                "List issues filtered by status, assignee, label, or project.",
                IssueListFilters,
                list_issues,
                apply_defaults=True,
            ),
            Operation("getIssue", "Fetch a single issue by numeric ID or issue key.", IssueIdentifierInput, get_issue),
            Operation(
                "createIssue",
                "Create a new issue in the selected project.",
                IssueInput,
                create_issue,
                apply_defaults=True,
            ),
            Operation("updateIssue", "Update fields on an existing issue.", IssueUpdateInput, update_issue),
            Operation(
                "transitionIssue",
                "Move an issue to a different workflow state using a transition key.",
                TransitionIssueInput,
                transition_issue,
            ),
            Operation("listComments", "List all comments on an issue.", CommentListInput, list_comments),
            Operation("createComment", "Add a comment to an issue.", CommentCreateInput, create_comment),
            Operation("updateComment", "Update an existing comment on an issue.", CommentUpdateInput, update_comment),
            Operation("deleteComment", "Delete a comment from an issue.", CommentDeleteInput, delete_comment),
        ],
        defaults={"project_key": default_project_key},
    )
