from typing import Any

from typeinject.typeinfo import describe_type


class InjectError(Exception):
    """Base class for recoverable injection failures. Carries the offending type key."""

    reason = "injection failed"

    def __init__(self, type_key: Any) -> None:
        self.type_key = type_key
        super().__init__(f"{self.reason}: {describe_type(type_key)}")


class ValueNotFoundError(InjectError, LookupError):
    """No value for the type locally, via an implementor, or in any parent."""

    reason = "value not found"


class ValueCanNotSetError(InjectError):
    """The load target is not a Ref, or is a readonly one."""

    reason = "value can not set"
