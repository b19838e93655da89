"""Operation registries for the issues, projects and users domains."""

from .issues import create_issue_registry, ISSUES_DOMAIN
from .projects import create_project_registry, PROJECTS_DOMAIN
from .registry import Operation, OperationRegistry
from .users import create_user_registry, USERS_DOMAIN

__all__ = [
    "ISSUES_DOMAIN",
    "PROJECTS_DOMAIN",
    "USERS_DOMAIN",
    "Operation",
    "OperationRegistry",
    "create_issue_registry",
    "create_project_registry",
    "create_user_registry",
]
