from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Annotated, Protocol, Type

import pytest

from typeinject.interface import Injector
from typeinject.registry import Registry
from typeinject.typeinfo import (
    MISSING,
    Ref,
    describe_type,
    implements,
    inject_field,
    interface_of,
    is_interface,
)


class SpecialString(Protocol):
    pass


class Stringer(Protocol):
    def string(self) -> str: ...


class LoudStringer(Stringer, Protocol):
    def shout(self) -> str: ...


class Named(Protocol):
    name: str


class Greeter:
    def string(self) -> str:
        return "hi"


class ExplicitStringer(Stringer):
    def string(self) -> str:
        return "explicit"


@dataclass
class Person:
    name: str


class Marker(ABC):
    pass


class Repository(ABC):
    @abstractmethod
    def get(self) -> str: ...


class MemoryRepository(Repository):
    def get(self) -> str:
        return "memory"


def test_interface_of_bare_interface():
    assert interface_of(SpecialString) is SpecialString
    assert interface_of(Repository) is Repository


def test_interface_of_strips_ref_layers():
    assert interface_of(Ref[SpecialString]) is SpecialString
    assert interface_of(Ref[Ref[SpecialString]]) is SpecialString
    assert interface_of(Ref(Stringer)) is Stringer


def test_interface_of_strips_type_and_annotated():
    assert interface_of(type[Repository]) is Repository
    assert interface_of(Type[Repository]) is Repository
    assert interface_of(Annotated[Ref[Stringer], "tag"]) is Stringer


@pytest.mark.parametrize("marker", [Greeter, Ref[Greeter], Ref[Ref[int]], MemoryRepository, "x"])
def test_interface_of_rejects_non_interfaces(marker: object):
    with pytest.raises(TypeError, match="does not resolve to an interface"):
        interface_of(marker)


def test_is_interface():
    assert is_interface(SpecialString)
    assert is_interface(Named)
    assert is_interface(Repository)
    assert is_interface(Marker)
    assert is_interface(Injector)
    assert not is_interface(MemoryRepository)
    assert not is_interface(ExplicitStringer)
    assert not is_interface(Registry)
    assert not is_interface(str)
    assert not is_interface(list[int])


def test_implements_protocol_structurally():
    assert implements(Greeter, Stringer)
    assert not implements(Person, Stringer)
    assert implements(Person, Named)
    assert implements(str, SpecialString)


def test_implements_nominal_protocol_subclass():
    assert implements(ExplicitStringer, Stringer)
    assert implements(LoudStringer, Stringer)
    assert not implements(Greeter, LoudStringer)


def test_implements_abc():
    assert implements(MemoryRepository, Repository)
    assert not implements(Greeter, Repository)


def test_implements_ignores_non_class_keys():
    assert not implements(list[int], SpecialString)
    assert not implements("str", SpecialString)


def test_missing_is_falsy_singleton():
    assert not MISSING
    assert type(MISSING)() is MISSING
    assert repr(MISSING) == "MISSING"


def test_ref_defaults():
    ref = Ref(Greeter)
    assert ref.type_key is Greeter
    assert ref.value is MISSING
    assert ref.readonly is False
    assert repr(ref) == "Ref(Greeter, value=MISSING)"


def test_inject_field_sets_metadata():
    @dataclass
    class Holder:
        greeter: Greeter = inject_field()
        tags: list = inject_field(default_factory=list, metadata={"doc": "tags"})

    by_name = {f.name: f for f in fields(Holder)}
    assert by_name["greeter"].metadata["inject"] is True
    assert by_name["tags"].metadata == {"doc": "tags", "inject": True}
    holder = Holder()
    assert holder.greeter is None
    assert holder.tags == []


def test_describe_type():
    assert describe_type(str) == "str"
    assert describe_type(Greeter) == "Greeter"
    assert describe_type(list[int]) == "list[int]"
