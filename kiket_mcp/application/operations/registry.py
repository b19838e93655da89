"""Operation registry: typed, named operations for one domain.

A registry is built once at startup and never mutated. It validates raw tool
arguments against the operation's pydantic input model before anything
touches the network, and reports names it does not own with
``OperationNotFoundError`` so the router can try the next registry.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from ...domain.exceptions import ErrorKind, KiketError, OperationNotFoundError
from ...domain.value_objects import DispatchOutcome
from ...logging_config import get_logger

logger = get_logger(__name__)

Invoke = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    """A single tool.

    Attributes:
        name: Tool name, unique within its registry.
        description: Human readable summary shown by tools/list.
        input_model: pydantic model validating the call arguments.
        invoke: Coroutine receiving the validated input.
        apply_defaults: Merge registry defaults into unset input fields.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    invoke: Invoke
    apply_defaults: bool = False

    def definition(self) -> dict[str, Any]:
        """Tool definition as published by tools/list."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_model.model_json_schema(),
        }


class OperationRegistry:
    """Ordered, immutable collection of operations for one domain."""

    def __init__(
        self,
        domain: str,
        operations: Iterable[Operation],
        defaults: Mapping[str, Any] | None = None,
    ):
        """
        Args:
            domain: Registry name (issues, projects, users).
            operations: Operations in discovery order.
            defaults: Values merged into inputs of operations with ``apply_defaults``.

        Raises:
            ValueError: If two operations share a name.
        """
        self._domain = domain
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            if operation.name in self._operations:
                raise ValueError(f"Duplicate operation '{operation.name}' in {domain} registry")
            self._operations[operation.name] = operation
        self._defaults = {k: v for k, v in (defaults or {}).items() if v is not None}

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def names(self) -> list[str]:
        return list(self._operations)

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def list(self) -> list[dict[str, Any]]:
        """Tool definitions in registration order."""
        return [operation.definition() for operation in self._operations.values()]

    async def dispatch(self, name: str, raw_args: Mapping[str, Any] | None) -> Any:
        """Validate and run the named operation.

        Raises:
            OperationNotFoundError: If this registry has no such operation.
            KiketError: VALIDATION for bad arguments, or whatever the remote call raised.
        """
        operation = self._operations.get(name)
        if operation is None:
            raise OperationNotFoundError(name, self._domain)

        validated = self._validate(operation, raw_args or {})
        if operation.apply_defaults:
            validated = self._merge_defaults(validated)

        logger.debug("operation_dispatch", registry=self._domain, operation=name)
        return await operation.invoke(validated)

    async def try_dispatch(self, name: str, raw_args: Mapping[str, Any] | None) -> DispatchOutcome:
        """Like ``dispatch`` but returns a DispatchOutcome instead of raising."""
        try:
            return DispatchOutcome.found(await self.dispatch(name, raw_args))
        except OperationNotFoundError:
            return DispatchOutcome.not_in_registry()
        except Exception as e:
            return DispatchOutcome.failed(e)

    def _validate(self, operation: Operation, raw_args: Mapping[str, Any]) -> BaseModel:
        try:
            return operation.input_model.model_validate(raw_args)
        except ValidationError as e:
            raise KiketError(
                ErrorKind.VALIDATION,
                f"Invalid arguments for {operation.name}",
                details={"errors": _field_errors(e)},
            ) from e

    def _merge_defaults(self, validated: BaseModel) -> BaseModel:
        fields = type(validated).model_fields
        update = {
            key: value
            for key, value in self._defaults.items()
            if key in fields and getattr(validated, key) is None
        }
        return validated.model_copy(update=update) if update else validated


def _field_errors(error: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for item in error.errors(include_url=False):
        path = ".".join(str(part) for part in item["loc"]) or "_root"
        errors.setdefault(path, []).append(item["msg"])
    return errors


__all__ = [
    "Operation",
    "OperationRegistry",
]
