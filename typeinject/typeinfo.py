"""Type keys, interface detection and the small value types the registry trades in.

A *type key* is any hashable runtime type form: a class, a ``typing`` alias such
as ``list[int]``, or whatever the caller passes to ``Registry.set``.

An *interface* is a ``typing.Protocol`` class, or an abstract base class (one
with abstract methods, or one listing ``abc.ABC`` among its direct bases).
Protocols are satisfied structurally; ABCs nominally, including classes
attached with ``ABC.register``.
"""

from __future__ import annotations

import dataclasses
import inspect
from abc import ABC
from typing import Annotated, Any, Final, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")

# Attributes typing/abc put on every Protocol class; never protocol members.
_PROTOCOL_INTERNALS = frozenset({
    "__abstractmethods__", "__annotations__", "__annotate__", "__annotate_func__",
    "__annotations_cache__", "__callable_proto_members_only__", "__class_getitem__",
    "__dict__", "__doc__", "__firstlineno__", "__init__", "__init_subclass__",
    "__match_args__", "__module__", "__new__", "__non_callable_proto_members__",
    "__orig_bases__", "__parameters__", "__protocol_attrs__", "__qualname__",
    "__slots__", "__static_attributes__", "__subclasshook__", "__type_params__",
    "__weakref__", "_is_protocol", "_is_runtime_protocol",
})


class _Missing:
    """Falsy singleton marking "no value", so a registered None stays a real value."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class _InjectMarker:
    def __repr__(self) -> str:
        return "INJECT"


# Field marker for Registry.apply: ``logger: Annotated[Logger, INJECT]``.
INJECT: Final = _InjectMarker()


def inject_field(**kwargs: Any) -> Any:
    """``dataclasses.field`` flagged for injection. Defaults to None until applied."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata["inject"] = True
    if "default_factory" not in kwargs:
        kwargs.setdefault("default", None)
    return dataclasses.field(metadata=metadata, **kwargs)


class Ref(Generic[T]):
    """A settable reference to a value of ``type_key``.

    ``Registry.load`` fills it in, ``Registry.apply`` follows it to the object it
    holds, and ``Ref[SomeInterface]`` works as an interface marker.
    """

    def __init__(self, type_key: Any, value: Any = MISSING, readonly: bool = False) -> None:
        self.type_key = type_key
        self.value = value
        self.readonly = readonly

    def __repr__(self) -> str:
        return f"Ref({describe_type(self.type_key)}, value={self.value!r})"


def _is_class(t: Any) -> bool:
    # list[int] passes isinstance(..., type) on 3.10
    return isinstance(t, type) and get_origin(t) is None


def describe_type(type_key: Any) -> str:
    if _is_class(type_key):
        return type_key.__qualname__
    return repr(type_key)


def _is_protocol(t: Any) -> bool:
    return _is_class(t) and bool(getattr(t, "_is_protocol", False))


def is_interface(t: Any) -> bool:
    if not _is_class(t):
        return False
    if _is_protocol(t):
        return True
    return inspect.isabstract(t) or ABC in t.__bases__


def _protocol_members(proto: type) -> set[str]:
    members: set[str] = set()
    for base in proto.__mro__[:-1]:
        if base.__name__ in ("Protocol", "Generic"):
            continue
        names = set(base.__dict__) | set(inspect.get_annotations(base))
        members.update(
            name for name in names
            if name not in _PROTOCOL_INTERNALS and not name.startswith("_abc_")
        )
    return members


def implements(candidate: Any, iface: type) -> bool:
    """Whether the type key *candidate* satisfies the interface *iface*."""
    if not _is_class(candidate):
        return False
    if iface in candidate.__mro__:
        return True
    if _is_protocol(iface):
        available = set(dir(candidate))
        for base in candidate.__mro__:
            available.update(inspect.get_annotations(base))
        return _protocol_members(iface) <= available
    try:
        return issubclass(candidate, iface)
    except TypeError:
        return False


def interface_of(marker: Any) -> type:
    """Strip ``Ref[...]``, ``type[...]`` and ``Annotated[...]`` layers off *marker*
    and return the interface underneath.

    Raises TypeError when what remains is not an interface; that is a
    programming error, not an injection failure.
    """
    t = marker
    while True:
        if isinstance(t, Ref):
            t = t.type_key
            continue
        origin = get_origin(t)
        if origin in (Annotated, Ref, type):
            t = get_args(t)[0]
            continue
        break

    if not is_interface(t):
        raise TypeError(
            f"called interface_of with {marker!r}, which does not resolve to an "
            "interface. Pass a Protocol or ABC, e.g. Ref[MyInterface]"
        )
    return t
