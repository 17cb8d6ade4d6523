"""Signature data model: scalar kinds, type signatures and container shapes.

A *type signature* describes one position (a field value, a list element or
a top-level value). A *container signature* describes the canonical shape of
a record, list or sequence. Both are immutable and hashable so the registry
can key on structural equality.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from .values import Clob, Symbol


class ScalarKind(Enum):
    """Closed set of leaf categories; only the category takes part in shapes."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    TIMESTAMP = "timestamp"
    STRING = "string"
    SYMBOL = "symbol"
    BLOB = "blob"
    CLOB = "clob"

    @classmethod
    def of(cls, value: object) -> Optional["ScalarKind"]:
        """Return the kind of a scalar value, or None for anything else."""
        if value is None:
            return cls.NULL
        # bool is an int subclass; Symbol and Clob subclass str and bytes.
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, Decimal):
            return cls.DECIMAL
        if isinstance(value, date):
            return cls.TIMESTAMP
        if isinstance(value, Symbol):
            return cls.SYMBOL
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, Clob):
            return cls.CLOB
        if isinstance(value, (bytes, bytearray)):
            return cls.BLOB
        return None

    def render(self) -> str:
        return self.value


@dataclass(frozen=True)
class ContainerRef:
    """Reference to a registered container signature by id."""

    id: int

    def render(self) -> str:
        return f"(#{self.id})"


@dataclass(frozen=True)
class InlineContainer:
    """Container shape carried by value instead of by registry reference."""

    shape: "ContainerSignature"


TypeSignature = Union[ScalarKind, ContainerRef, InlineContainer]

# Resolves a registered id to the size of its shape.
SizeLookup = Callable[[int], int]


class _Shape:
    """Behaviour shared by the three container signature kinds.

    Shapes nest as deep as the values they describe once single-parent
    signatures are inlined. Equality, sizing and rendering therefore walk
    them with explicit stacks, and each shape hashes its own level once at
    construction.
    """

    def __post_init__(self) -> None:
        object.__setattr__(self, "_hash", hash((type(self).__name__, self._parts())))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Shape):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left is right:
                continue
            if type(left) is not type(right) or hash(left) != hash(right):
                return False
            left_parts, right_parts = left._parts(), right._parts()
            if len(left_parts) != len(right_parts):
                return False
            for (left_name, left_child), (right_name, right_child) in zip(
                left._named_children(), right._named_children()
            ):
                if left_name != right_name:
                    return False
                if isinstance(left_child, InlineContainer) and isinstance(
                    right_child, InlineContainer
                ):
                    pending.append((left_child.shape, right_child.shape))
                elif left_child != right_child:
                    return False
        return True

    def _parts(self) -> tuple:
        raise NotImplementedError

    def _named_children(self) -> Iterator[Tuple[Optional[str], TypeSignature]]:
        for child in self.children():
            yield None, child

    def _tokens(self) -> List[Union[str, TypeSignature]]:
        """Rendered pieces of this level; children are expanded by ``render``."""
        raise NotImplementedError

    def children(self) -> Iterator[TypeSignature]:
        raise NotImplementedError

    def size(self, size_of: SizeLookup) -> int:
        """Direct child count plus the size of every nested container."""
        total = 0
        pending: List[_Shape] = [self]
        while pending:
            for child in pending.pop().children():
                total += 1
                if isinstance(child, ContainerRef):
                    total += size_of(child.id)
                elif isinstance(child, InlineContainer):
                    pending.append(child.shape)
        return total

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        out: List[str] = []
        pending: List[Union[str, TypeSignature, _Shape]] = [self]
        while pending:
            item = pending.pop()
            if isinstance(item, InlineContainer):
                item = item.shape
            if isinstance(item, _Shape):
                pending.extend(reversed(item._tokens()))
            elif isinstance(item, str):
                out.append(item)
            else:
                out.append(item.render())
        return "".join(out)

    def child_refs(self) -> Iterator[int]:
        for child in self.children():
            if isinstance(child, ContainerRef):
                yield child.id

    def replace_ref(
        self, target: int, replacement: "ContainerSignature"
    ) -> "ContainerSignature":
        """Return a copy with direct references to ``target`` inlined.

        Only direct children are rewritten; shapes already carried inline are
        left untouched.
        """
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class RecordSignature(_Shape):
    """Record shape; fields are kept sorted by name.

    Repeated field names are kept, in the order they were read.
    """

    fields: Tuple[Tuple[str, TypeSignature], ...]

    @classmethod
    def from_fields(
        cls, fields: Iterable[Tuple[str, TypeSignature]]
    ) -> "RecordSignature":
        return cls(tuple(sorted(fields, key=lambda item: item[0])))

    def children(self) -> Iterator[TypeSignature]:
        for _, child in self.fields:
            yield child

    def replace_ref(self, target, replacement):
        fields = tuple(
            (name, _swap(child, target, replacement)) for name, child in self.fields
        )
        return replace(self, fields=fields)

    def _parts(self) -> tuple:
        return self.fields

    def _named_children(self):
        return iter(self.fields)

    def _tokens(self):
        tokens: List[Union[str, TypeSignature]] = ["{ "]
        for index, (name, child) in enumerate(self.fields):
            tokens.append(f"{', ' if index else ''}{name}: ")
            tokens.append(child)
        tokens.append(" }")
        return tokens


@dataclass(frozen=True, eq=False)
class ListSignature(_Shape):
    """Ordered list shape; element order is significant."""

    elements: Tuple[TypeSignature, ...]

    def children(self) -> Iterator[TypeSignature]:
        return iter(self.elements)

    def replace_ref(self, target, replacement):
        elements = tuple(_swap(child, target, replacement) for child in self.elements)
        return replace(self, elements=elements)

    def _parts(self) -> tuple:
        return self.elements

    def _tokens(self):
        return ["[ ", *_joined(self.elements, ", "), " ]"]


@dataclass(frozen=True, eq=False)
class SequenceSignature(_Shape):
    """Ordered untyped sequence shape; never equal to a list shape."""

    elements: Tuple[TypeSignature, ...]

    def children(self) -> Iterator[TypeSignature]:
        return iter(self.elements)

    def replace_ref(self, target, replacement):
        elements = tuple(_swap(child, target, replacement) for child in self.elements)
        return replace(self, elements=elements)

    def _parts(self) -> tuple:
        return self.elements

    def _tokens(self):
        return ["( ", *_joined(self.elements, " "), " )"]


ContainerSignature = Union[RecordSignature, ListSignature, SequenceSignature]


def container_size(signature: TypeSignature, size_of: SizeLookup) -> int:
    """Weight a position contributes beyond itself; scalars weigh nothing."""
    if isinstance(signature, ContainerRef):
        return size_of(signature.id)
    if isinstance(signature, InlineContainer):
        return signature.shape.size(size_of)
    return 0


def render_type(signature: TypeSignature) -> str:
    if isinstance(signature, InlineContainer):
        return signature.shape.render()
    return signature.render()


def _joined(
    children: Iterable[TypeSignature], separator: str
) -> Iterator[Union[str, TypeSignature]]:
    for index, child in enumerate(children):
        if index:
            yield separator
        yield child


def _swap(
    child: TypeSignature, target: int, replacement: ContainerSignature
) -> TypeSignature:
    if isinstance(child, ContainerRef) and child.id == target:
        return InlineContainer(replacement)
    return child


__all__ = [
    "ContainerRef",
    "ContainerSignature",
    "InlineContainer",
    "ListSignature",
    "RecordSignature",
    "ScalarKind",
    "SequenceSignature",
    "SizeLookup",
    "TypeSignature",
    "container_size",
    "render_type",
]
