"""Type-keyed value registry that injects into object fields and function arguments.

Resolution order for ``Registry.value``:

1. the exact type key in this registry;
2. if the key is an interface, the first local entry (in registration order)
   whose key implements it;
3. the parent registry, if one is set.

Every registry is built explicitly with ``new`` or ``Registry``; there is no
process-wide instance.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import sys
import threading
import types
from typing import Annotated, Any, Callable, ClassVar, get_args, get_origin, get_type_hints

from typeinject.config.settings import InjectConfig
from typeinject.errors import ValueCanNotSetError, ValueNotFoundError
from typeinject.interface import FastInvoker, Injector, is_fast_invoker
from typeinject.logger.factory import LoggerFactory
from typeinject.logger.interface import LoggingInterface
from typeinject.logger.noop_logger import NoopLogger
from typeinject.typeinfo import (
    INJECT,
    MISSING,
    Ref,
    describe_type,
    implements,
    interface_of,
    is_interface,
)


def new(config: InjectConfig | None = None, logger: LoggingInterface | None = None) -> Registry:
    """Return an empty registry with no parent.

    Without an explicit *logger*, one is built from ``config.log_impl``.
    """
    if logger is None:
        logger = LoggerFactory().create((config or InjectConfig()).log_impl)
    return Registry(logger=logger)


class Registry(Injector):
    """Thread-safe type→value map with optional parent fallback."""

    def __init__(self, logger: LoggingInterface | None = None) -> None:
        self._values: dict[Any, Any] = {}
        self._parent: Injector | None = None
        # Guards both _values and _parent.
        self._lock = threading.RLock()
        self._logger = logger or NoopLogger()

    @property
    def parent(self) -> Injector | None:
        with self._lock:
            return self._parent

    # -- TypeMapper --------------------------------------------------------

    def map(self, *values: Any) -> Registry:
        for val in values:
            if val is None:
                raise TypeError("cannot map None: its type says nothing about what it provides")
        with self._lock:
            for val in values:
                self._values[type(val)] = val
        self._logger.debug("mapped values", types=[describe_type(type(v)) for v in values])
        return self

    def map_to(self, value: Any, marker: Any) -> Registry:
        iface = interface_of(marker)
        with self._lock:
            self._values[iface] = value
        self._logger.debug("mapped value to interface", interface=describe_type(iface))
        return self

    def set(self, type_key: Any, value: Any) -> Registry:
        with self._lock:
            self._values[type_key] = value
        self._logger.debug("set value", type=describe_type(type_key))
        return self

    def value(self, type_key: Any) -> Any:
        with self._lock:
            val = self._values.get(type_key, MISSING)
            if val is MISSING and is_interface(type_key):
                for key, candidate in self._values.items():
                    if implements(key, type_key):
                        val = candidate
                        break
            parent = self._parent

        if val is MISSING and parent is not None:
            self._logger.debug("resolving from parent", type=describe_type(type_key))
            val = parent.value(type_key)
        return val

    def has(self, type_key: Any) -> bool:
        return self.value(type_key) is not MISSING

    def load(self, target: Any) -> None:
        type_key = target.type_key if isinstance(target, Ref) else type(target)
        val = self.value(type_key)
        if val is MISSING:
            self._logger.warn("value not found", type=describe_type(type_key), op="load")
            raise ValueNotFoundError(type_key)
        if not isinstance(target, Ref) or target.readonly:
            raise ValueCanNotSetError(type_key)
        target.value = val

    # -- Applicator --------------------------------------------------------

    def apply(self, obj: Any) -> None:
        while isinstance(obj, Ref):
            obj = obj.value

        # Fields set before a failure stay set.
        for name, field_type in _injectable_fields(obj):
            val = self.value(field_type)
            if val is MISSING:
                self._logger.warn(
                    "value not found", type=describe_type(field_type), field=name, op="apply"
                )
                raise ValueNotFoundError(field_type)
            setattr(obj, name, val)

    # -- Invoker -----------------------------------------------------------

    def invoke(self, fn: Callable[..., Any]) -> list[Any]:
        args, kwargs = self._resolve_arguments(fn)
        if is_fast_invoker(fn):
            return self._fast_invoke(fn, args, kwargs)
        return _as_results(fn(*args, **kwargs))

    async def invoke_async(self, fn: Callable[..., Any]) -> list[Any]:
        args, kwargs = self._resolve_arguments(fn)
        if is_fast_invoker(fn):
            results = fn.fast_invoke(_fast_arguments(args, kwargs))
            if inspect.isawaitable(results):
                results = await results
            return list(results or [])

        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return _as_results(result)

    def _fast_invoke(self, fn: FastInvoker, args: list[Any], kwargs: dict[str, Any]) -> list[Any]:
        return list(fn.fast_invoke(_fast_arguments(args, kwargs)) or [])

    def _resolve_arguments(self, fn: Callable[..., Any]) -> tuple[list[Any], dict[str, Any]]:
        """Resolve every parameter of *fn* before anything is called."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param, param_type in _parameters(fn):
            val = self.value(param_type)
            if val is MISSING:
                self._logger.warn(
                    "value not found",
                    type=describe_type(param_type),
                    parameter=param.name,
                    op="invoke",
                )
                raise ValueNotFoundError(param_type)
            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[param.name] = val
            else:
                args.append(val)
        return args, kwargs

    # -- Lifecycle ---------------------------------------------------------

    def reset(self) -> None:
        with self._lock:
            self._values.clear()
            self._parent = None
        self._logger.debug("registry reset")

    def set_parent(self, parent: Injector | None) -> Registry:
        with self._lock:
            self._parent = parent
        self._logger.debug("parent set", has_parent=parent is not None)
        return self

    def __repr__(self) -> str:
        with self._lock:
            return f"Registry(values={len(self._values)}, parent={self._parent is not None})"


def _fast_arguments(args: list[Any], kwargs: dict[str, Any]) -> list[Any]:
    """Positional values, then keyword-only ones, in declaration order."""
    return [*args, *kwargs.values()]


def _as_results(result: Any) -> list[Any]:
    if result is None:
        return []
    if isinstance(result, tuple):
        return list(result)
    return [result]


def _hints_target(fn: Callable[..., Any]) -> Any:
    """The object whose annotations describe how *fn* is called."""
    if isinstance(fn, functools.partial):
        return _hints_target(fn.func)
    if isinstance(fn, type):
        # Same precedence as inspect.signature: NamedTuple only defines __new__.
        if fn.__init__ is object.__init__ and fn.__new__ is not object.__new__:
            return fn.__new__
        return fn.__init__
    if inspect.isfunction(fn) or inspect.ismethod(fn) or inspect.isbuiltin(fn):
        return fn
    return type(fn).__call__


def _parameters(fn: Callable[..., Any]) -> list[tuple[inspect.Parameter, Any]]:
    if not callable(fn):
        raise TypeError(f"cannot invoke {fn!r}: not callable")

    name = getattr(fn, "__qualname__", type(fn).__qualname__)
    try:
        hints = get_type_hints(_hints_target(fn))
    except Exception as exc:
        raise TypeError(f"Cannot read type hints for {name}: {exc}") from exc

    params: list[tuple[inspect.Parameter, Any]] = []
    for param in inspect.signature(fn).parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        hint = hints.get(param.name)
        if hint is None:
            raise TypeError(f"Parameter '{param.name}' of {name} has no type hint")
        params.append((param, hint))
    return params


def _is_struct(obj: Any) -> bool:
    if obj is MISSING or isinstance(obj, (type, types.ModuleType)):
        return False
    return type(obj).__module__ != "builtins"


def _raw_annotations(cls: type) -> dict[str, tuple[type, Any]]:
    """name -> (declaring class, unevaluated annotation), base classes first."""
    raw: dict[str, tuple[type, Any]] = {}
    for base in reversed(cls.__mro__[:-1]):
        for name, annotation in inspect.get_annotations(base).items():
            raw[name] = (base, annotation)
    return raw


def _evaluate(base: type, annotation: Any) -> Any:
    if not isinstance(annotation, str):
        return annotation
    module = sys.modules.get(base.__module__)
    globalns = getattr(module, "__dict__", {})
    return eval(annotation, globalns, dict(vars(base)))


def _injectable_fields(obj: Any) -> list[tuple[str, Any]]:
    """(name, declared type) of each settable field marked for injection, base classes first.

    Annotations are evaluated one field at a time; an unmarked field whose
    annotation cannot be evaluated is skipped.
    """
    if not _is_struct(obj):
        return []
    if dataclasses.is_dataclass(obj) and obj.__dataclass_params__.frozen:
        return []

    cls = type(obj)
    dc_fields = {f.name: f for f in dataclasses.fields(obj)} if dataclasses.is_dataclass(obj) else {}

    fields: list[tuple[str, Any]] = []
    for name, (base, annotation) in _raw_annotations(cls).items():
        if name.startswith("_"):
            continue
        by_metadata = name in dc_fields and bool(dc_fields[name].metadata.get("inject"))
        try:
            hint = _evaluate(base, annotation)
        except Exception as exc:
            if by_metadata or (isinstance(annotation, str) and "INJECT" in annotation):
                raise TypeError(
                    f"Cannot read type hint of field '{name}' on {cls.__qualname__}: {exc}"
                ) from exc
            continue

        if get_origin(hint) is ClassVar:
            continue
        declared = hint
        marked = by_metadata
        if get_origin(hint) is Annotated:
            declared = get_args(hint)[0]
            marked = marked or any(meta is INJECT for meta in hint.__metadata__)
        if marked:
            fields.append((name, declared))
    return fields
