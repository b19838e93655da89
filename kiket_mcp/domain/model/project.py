"""Project models."""

from .base import RemoteModel, ToolInput


class Project(RemoteModel):
    id: int
    key: str | None = None
    name: str
    description: str | None = None
    status: str | None = None
    repository_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ProjectList(RemoteModel):
    projects: list[Project]


class ProjectListFilters(ToolInput):
    search: str | None = None
    status: str | None = None
    page: int | None = None
    per_page: int | None = None


class ProjectIdentifierInput(ToolInput):
    id: int


class ProjectInput(ToolInput):
    name: str
    key: str | None = None
    description: str | None = None
    repository_url: str | None = None


class ProjectUpdateInput(ToolInput):
    id: int
    name: str | None = None
    key: str | None = None
    description: str | None = None
    repository_url: str | None = None
