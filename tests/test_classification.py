import typing as tp
from typing import Self

import pytest

from duo.facade import (
    ConstructorKind,
    FacadeGenerationError,
    TypeDescriptor,
    classify_constructor,
    describe_type,
    parse_operations,
)
from duo.result import Result


class Widget:
    size = 3  # not an operation

    def __init__(self, n=0):
        self.n = n

    @classmethod
    def by_name(cls, n: int) -> "Widget":
        return cls(n)

    @classmethod
    def by_token(cls) -> Self:
        return cls()

    @staticmethod
    def by_class() -> "Widget":
        return Widget()

    @classmethod
    def fallible(cls, n: int) -> Result["Widget", OSError]:
        return cls(n)

    @classmethod
    def fallible_str(cls) -> "Result[Self, str]":
        return cls()

    @classmethod
    def maybe(cls) -> tp.Optional["Widget"]:
        return None

    @classmethod
    def maybe_pipe(cls) -> "Widget | None":
        return None

    @classmethod
    def maybe_union(cls) -> "tp.Union[None, Self]":
        return None

    @staticmethod
    def count() -> int:
        return 0

    @staticmethod
    def many() -> tp.List["Widget"]:
        return []

    @classmethod
    def unannotated(cls):
        return cls()

    def clone(self) -> "Widget":
        return Widget(self.n)

    async def grow(self, by: int = 1) -> None:
        self.n += by

    @property
    def doubled(self) -> int:
        return self.n * 2


def _ops(impl):
    return {op.name: op for op in parse_operations(impl)}


def test_parse_operations():
    ops = _ops(Widget)
    assert "__init__" not in ops
    assert "size" not in ops
    assert list(ops)[:2] == ["by_name", "by_token"]

    assert ops["clone"].has_receiver and ops["clone"].qualifier == "method"
    assert ops["grow"].is_async
    assert [p.name for p in ops["grow"].parameters] == ["by"]
    assert ops["grow"].parameters[0].default == 1

    assert not ops["by_name"].has_receiver
    assert ops["by_name"].qualifier == "classmethod"
    assert [p.name for p in ops["by_name"].parameters] == ["n"]
    assert ops["count"].qualifier == "staticmethod"

    assert ops["doubled"].qualifier == "property"
    assert ops["doubled"].has_receiver and not ops["doubled"].is_async


@pytest.mark.parametrize(
    "name, kind",
    [
        ("by_name", ConstructorKind.PLAIN),
        ("by_token", ConstructorKind.PLAIN),
        ("by_class", ConstructorKind.PLAIN),
        ("fallible", ConstructorKind.RESULT),
        ("fallible_str", ConstructorKind.RESULT),
        ("maybe", ConstructorKind.OPTION),
        ("maybe_pipe", ConstructorKind.OPTION),
        ("maybe_union", ConstructorKind.OPTION),
        ("count", ConstructorKind.NOT_A_CONSTRUCTOR),
        ("many", ConstructorKind.NOT_A_CONSTRUCTOR),
        ("unannotated", ConstructorKind.NOT_A_CONSTRUCTOR),
        ("clone", ConstructorKind.NOT_A_CONSTRUCTOR),
        ("grow", ConstructorKind.NOT_A_CONSTRUCTOR),
        ("doubled", ConstructorKind.NOT_A_CONSTRUCTOR),
    ],
)
def test_classify_constructor(name, kind):
    assert classify_constructor(_ops(Widget)[name], Widget) is kind


def test_describe_type():
    assert describe_type(Widget, Widget) == TypeDescriptor("Self")
    assert describe_type("Widget", Widget) == TypeDescriptor("Self")
    assert describe_type(int, Widget) == TypeDescriptor("int")
    assert str(describe_type(tp.Optional[int], Widget)) == "Union[int, None]"
    assert str(describe_type("dict[str, Widget]", Widget)) == "dict[str, Self]"
    with pytest.raises(ValueError):
        describe_type("Widget[", Widget)


def test_ambiguous_union_is_rejected():
    class Gadget:
        @classmethod
        def odd(cls) -> "Gadget | int":
            return cls()

    op = _ops(Gadget)["odd"]
    with pytest.raises(FacadeGenerationError) as exc_info:
        classify_constructor(op, Gadget)
    assert exc_info.value.debug["operation"] == "odd"
    assert exc_info.value.debug["implementing_type"].endswith("Gadget")


def test_unparsable_annotation_is_rejected():
    class Gadget:
        @staticmethod
        def broken() -> "Gadget[":
            return None

    with pytest.raises(FacadeGenerationError):
        classify_constructor(_ops(Gadget)["broken"], Gadget)


def test_async_generators_are_rejected():
    class Streamer:
        async def stream(self):
            yield 1

    with pytest.raises(FacadeGenerationError) as exc_info:
        parse_operations(Streamer)
    assert exc_info.value.debug["operation"] == "stream"
