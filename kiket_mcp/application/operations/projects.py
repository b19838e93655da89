"""Project tools."""

from ...domain.contracts import IssueTrackerClient
from ...domain.model import (
    ProjectIdentifierInput,
    ProjectInput,
    ProjectListFilters,
    ProjectUpdateInput,
)
from ...infrastructure.resilience import ResilienceExecutor
from .registry import Operation, OperationRegistry

PROJECTS_DOMAIN = "projects"


def create_project_registry(client: IssueTrackerClient, executor: ResilienceExecutor) -> OperationRegistry:
    """Build the projects registry."""

    async def list_projects(filters: ProjectListFilters) -> dict:
        projects = await executor.execute_with_backoff(lambda: client.list_projects(filters), "listProjects")
        return {"projects": [project.model_dump() for project in projects]}

    async def get_project(args: ProjectIdentifierInput) -> dict:
        project = await executor.execute_with_backoff(lambda: client.get_project(args.id), "getProject")
        return {"project": project.model_dump()}

    async def create_project(args: ProjectInput) -> dict:
        payload = args.to_payload()
        project = await executor.execute_with_backoff(lambda: client.create_project(payload), "createProject")
        return {"project": project.model_dump()}

    async def update_project(args: ProjectUpdateInput) -> dict:
        payload = args.to_payload(exclude={"id"})
        project = await executor.execute_with_backoff(
            lambda: client.update_project(args.id, payload), "updateProject"
        )
        return {"project": project.model_dump()}

    async def delete_project(args: ProjectIdentifierInput) -> dict:
        await executor.execute_with_backoff(lambda: client.delete_project(args.id), "deleteProject")
        return {"success": True}

    return OperationRegistry(
        PROJECTS_DOMAIN,
        [
            Operation(
                "listProjects",
                "List all projects visible to the authenticated user.",
                ProjectListFilters,
                list_projects,
            ),
            Operation("getProject", "Fetch a single project by ID.", ProjectIdentifierInput, get_project),
            Operation(
                "createProject",
                "Create a new project (requires organization admin permissions).",
                ProjectInput,
                create_project,
            ),
            Operation(
                "updateProject",
                "Update project settings, description, or repository links.",
                ProjectUpdateInput,
                update_project,
            ),
            Operation(
                "deleteProject",
                "Archive/delete a project (requires admin permissions).",
                ProjectIdentifierInput,
                delete_project,
            ),
        ],
    )
