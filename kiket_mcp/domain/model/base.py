"""Shared pydantic bases for remote payloads and tool inputs."""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict

Identifier = Union[int, str]
"""Numeric ID or human readable key (e.g. ``KIKET-1``)."""


class RemoteModel(BaseModel):
    """Entity returned by the remote API; unknown fields are dropped."""

    model_config = ConfigDict(extra="ignore")


class ToolInput(BaseModel):
    """Input contract of a tool.

    Validation is strict so that a string is never silently coerced into a
    numeric ID and vice versa.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    def to_payload(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        """Dump the fields that were provided, dropping unset optionals."""
        return self.model_dump(exclude=exclude, exclude_none=True)
