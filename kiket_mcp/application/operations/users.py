"""User tools."""

from ...domain.contracts import IssueTrackerClient
from ...domain.model import CurrentUserInput, UserIdentifierInput, UserListFilters
from ...infrastructure.resilience import ResilienceExecutor
from .registry import Operation, OperationRegistry

USERS_DOMAIN = "users"


def create_user_registry(client: IssueTrackerClient, executor: ResilienceExecutor) -> OperationRegistry:
    """Build the users registry."""

    async def list_users(filters: UserListFilters) -> dict:
        users = await executor.execute_with_backoff(lambda: client.list_users(filters), "listUsers")
        return {"users": [user.model_dump() for user in users]}

    async def get_user(args: UserIdentifierInput) -> dict:
        user = await executor.execute_with_backoff(lambda: client.get_user(args.id), "getUser")
        return {"user": user.model_dump()}

    async def get_current_user(_: CurrentUserInput) -> dict:
        user = await executor.execute_with_backoff(client.get_current_user, "getCurrentUser")
        return {"user": user.model_dump()}

    return OperationRegistry(
        USERS_DOMAIN,
        [
            Operation(
                "listUsers",
                "List all users/members in the current project or organization.",
                UserListFilters,
                list_users,
            ),
            Operation("getUser", "Fetch a single user by ID.", UserIdentifierInput, get_user),
            Operation(
                "getCurrentUser", "Get the currently authenticated user profile.", CurrentUserInput, get_current_user
            ),
        ],
    )
