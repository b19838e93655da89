"""Domain contracts - interfaces for external collaborators."""

from .issue_tracker import IssueTrackerClient

__all__ = [
    "IssueTrackerClient",
]
