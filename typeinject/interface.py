from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Protocol, runtime_checkable


class TypeMapper(ABC):
    """Maps values by type."""

    @abstractmethod
    def map(self, *values: Any) -> TypeMapper:
        """Register each value under its own runtime type."""

    @abstractmethod
    def map_to(self, value: Any, marker: Any) -> TypeMapper:
        """Register *value* under the interface *marker* resolves to (see interface_of).

        Mostly useful to register an implementation under its abstract type.
        """

    @abstractmethod
    def set(self, type_key: Any, value: Any) -> TypeMapper:
        """Insert a (type key, value) pair directly.

        Covers type forms that cannot be inferred from a value, such as
        ``queue.Queue[str]`` or ``Callable[[str], None]``.
        """

    @abstractmethod
    def value(self, type_key: Any) -> Any:
        """Return the value mapped to *type_key*, or MISSING if nothing resolves."""

    @abstractmethod
    def load(self, target: Any) -> None:
        """Load the value for the target's type into *target*, a Ref.

        Raises ValueNotFoundError if the type does not resolve and
        ValueCanNotSetError if the target cannot be written.
        """

    @abstractmethod
    def has(self, type_key: Any) -> bool:
        """Check whether *type_key* resolves."""


class Applicator(ABC):
    """Populates the injectable fields of an object."""

    @abstractmethod
    def apply(self, obj: Any) -> None:
        """Set every field marked for injection from the type map.

        Raises ValueNotFoundError at the first field whose type does not resolve.
        """


class Invoker(ABC):
    """Calls functions with their arguments resolved by type."""

    @abstractmethod
    def invoke(self, fn: Callable[..., Any]) -> list[Any]:
        """Call *fn* with a value for each parameter, resolved by its annotation.

        Returns the results as a list. Raises ValueNotFoundError, without
        calling *fn*, if any parameter does not resolve.
        """

    @abstractmethod
    async def invoke_async(self, fn: Callable[..., Any]) -> list[Any]:
        """Like invoke, but awaits the result when *fn* returns an awaitable."""


class Injector(Applicator, Invoker, TypeMapper):
    """Maps dependencies and injects them into objects and function arguments."""

    @abstractmethod
    def reset(self) -> None:
        """Drop every mapped value and the parent."""

    @abstractmethod
    def set_parent(self, parent: Injector | None) -> Injector:
        """Set the injector consulted when a type does not resolve locally."""


@runtime_checkable
class FastInvoker(Protocol):
    """A callable that also takes its arguments as one ordered list.

    The registry reads parameter types from ``__call__`` and then hands the
    resolved values to ``fast_invoke`` instead of calling the object.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...

    def fast_invoke(self, args: list[Any]) -> list[Any] | None: ...


def is_fast_invoker(handler: Any) -> bool:
    return isinstance(handler, FastInvoker)
