"""HTTP client for the Kiket external API.

Thin wrapper around httpx.AsyncClient: builds requests, classifies failed
responses and validates successful payloads into domain models. Retrying is
not done here; the operation registries wrap each call in the resilience
executor.
"""

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..domain.error_mapping import classify, network_error
from ..domain.exceptions import ErrorKind, KiketError
from ..domain.model import (
    Comment,
    CommentList,
    Identifier,
    Issue,
    IssueList,
    IssueListFilters,
    Project,
    ProjectList,
    ProjectListFilters,
    User,
    UserList,
    UserListFilters,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

# =============================================================================
# Constants
# =============================================================================

API_PREFIX = "/api/v1/ext"
"""Path prefix of the external API."""

DEFAULT_TIMEOUT_SECONDS = 30.0
"""Default per-request timeout."""


class KiketClient:
    """Async client for issues, comments, projects and users.

    Every method returns a validated domain object and raises ``KiketError``
    on any failure.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the Kiket instance.
            api_key: API token sent as a bearer credential.
            verify_ssl: Verify TLS certificates.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            verify=verify_ssl,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Release the connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> "KiketClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Issues
    # -------------------------------------------------------------------------

    async def list_issues(self, filters: IssueListFilters | None = None) -> list[Issue]:
        data = await self._request("GET", "/issues", params=_query(filters))
        return self._parse(IssueList, data).issues

    async def get_issue(self, issue_id: Identifier) -> Issue:
        data = await self._request("GET", f"/issues/{issue_id}")
        return self._parse(Issue, _unwrap(data, "issue"))

    async def create_issue(self, payload: dict[str, Any]) -> Issue:
        data = await self._request("POST", "/issues", json={"issue": payload})
        return self._parse(Issue, _unwrap(data, "issue"))

    async def update_issue(self, issue_id: Identifier, payload: dict[str, Any]) -> Issue:
        data = await self._request("PATCH", f"/issues/{issue_id}", json={"issue": payload})
        return self._parse(Issue, _unwrap(data, "issue"))

    async def transition_issue(self, issue_id: Identifier, transition: str) -> Issue:
        data = await self._request("POST", f"/issues/{issue_id}/transitions", json={"transition": transition})
        return self._parse(Issue, _unwrap(data, "issue"))

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def list_comments(self, issue_id: Identifier) -> list[Comment]:
        data = await self._request("GET", f"/issues/{issue_id}/comments")
        return self._parse(CommentList, data).comments

    async def create_comment(self, issue_id: Identifier, body: str) -> Comment:
        data = await self._request("POST", f"/issues/{issue_id}/comments", json={"comment": {"body": body}})
        return self._parse(Comment, _unwrap(data, "comment"))

    async def update_comment(self, issue_id: Identifier, comment_id: int, body: str) -> Comment:
        data = await self._request(
            "PATCH",
            f"/issues/{issue_id}/comments/{comment_id}",
            json={"comment": {"body": body}},
        )
        return self._parse(Comment, _unwrap(data, "comment"))

    async def delete_comment(self, issue_id: Identifier, comment_id: int) -> None:
        await self._request("DELETE", f"/issues/{issue_id}/comments/{comment_id}")

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def list_projects(self, filters: ProjectListFilters | None = None) -> list[Project]:
        data = await self._request("GET", "/projects", params=_query(filters))
        return self._parse(ProjectList, data).projects

    async def get_project(self, project_id: int) -> Project:
        data = await self._request("GET", f"/projects/{project_id}")
        return self._parse(Project, _unwrap(data, "project"))

    async def create_project(self, payload: dict[str, Any]) -> Project:
        data = await self._request("POST", "/projects", json={"project": payload})
        return self._parse(Project, _unwrap(data, "project"))

    async def update_project(self, project_id: int, payload: dict[str, Any]) -> Project:
        data = await self._request("PATCH", f"/projects/{project_id}", json={"project": payload})
        return self._parse(Project, _unwrap(data, "project"))

    async def delete_project(self, project_id: int) -> None:
        await self._request("DELETE", f"/projects/{project_id}")

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def list_users(self, filters: UserListFilters | None = None) -> list[User]:
        data = await self._request("GET", "/users", params=_query(filters))
        return self._parse(UserList, data).users

    async def get_user(self, user_id: int) -> User:
        data = await self._request("GET", f"/users/{user_id}")
        return self._parse(User, _unwrap(data, "user"))

    async def get_current_user(self) -> User:
        data = await self._request("GET", "/users/me")
        return self._parse(User, _unwrap(data, "user"))

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send one request and return the decoded body.

        Raises:
            KiketError: NETWORK when no response arrived, otherwise the kind
                matching the response status.
        """
        url = f"{API_PREFIX}{path}"
        try:
            response = await self._http.request(method, url, params=params, json=json)
        except httpx.TransportError as e:
            logger.debug("kiket_request_transport_error", method=method, path=url, error=str(e))
            raise network_error(f"{type(e).__name__}: {e}") from e

        body = _decode(response)

        if response.is_error:
            logger.debug("kiket_request_failed", method=method, path=url, status=response.status_code)
            if response.status_code == 429:
                body = _with_retry_after_header(body, response.headers.get("Retry-After"))
            raise classify(response.status_code, _error_message(body, response), body)

        return body

    @staticmethod
    def _parse(model: type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise KiketError(
                ErrorKind.INTERNAL,
                f"Unexpected {model.__name__} payload from Kiket API",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e


def _query(filters: BaseModel | None) -> dict[str, Any] | None:
    if filters is None:
        return None
    params = filters.model_dump(exclude_none=True)
    return params or None


def _unwrap(data: Any, key: str) -> Any:
    if isinstance(data, dict) and isinstance(data.get(key), dict):
        return data[key]
    return data


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(body: Any, response: httpx.Response) -> str:
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or ""


def _with_retry_after_header(body: Any, header: str | None) -> Any:
    if header is None:
        return body
    if isinstance(body, dict):
        if body.get("retry_after") is None:
            return {**body, "retry_after": header}
        return body
    return {"retry_after": header}


__all__ = [
    "API_PREFIX",
    "DEFAULT_TIMEOUT_SECONDS",
    "KiketClient",
]
