"""User models."""

from .base import RemoteModel, ToolInput


class User(RemoteModel):
    id: int
    name: str | None = None
    email: str | None = None
    username: str | None = None
    role: str | None = None
    avatar_url: str | None = None


class UserList(RemoteModel):
    users: list[User]


class UserListFilters(ToolInput):
    project_key: str | None = None
    search: str | None = None
    role: str | None = None
    page: int | None = None
    per_page: int | None = None


class UserIdentifierInput(ToolInput):
    id: int


class CurrentUserInput(ToolInput):
    pass
