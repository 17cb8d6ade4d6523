"""Reduce values to type signatures, registering repeated container shapes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from .logging import get_logger
from .readers.base import DecodeError, UnsupportedValueError
from .registry import SignatureRegistry
from .signatures import (
    ContainerRef,
    ContainerSignature,
    InlineContainer,
    ListSignature,
    RecordSignature,
    ScalarKind,
    SequenceSignature,
    TypeSignature,
)
from .values import Struct

DEFAULT_MIN_SIGNATURE_SIZE = 2

# A reduced position: its signature and the size of the container behind it.
_Reduced = Tuple[TypeSignature, int]


@dataclass
class _Frame:
    """A container whose children are still being reduced."""

    value: object
    kind: type
    children: Iterator[Tuple[Optional[str], object]]
    name: Optional[str] = None
    reduced: List[Tuple[Optional[str], _Reduced]] = field(default_factory=list)


class SignatureCollector:
    """Walks values depth-first and feeds their container shapes to a registry.

    Children are reduced before their parent, so a parent's shape only ever
    refers to ids that are already registered. Shapes smaller than
    ``min_size`` are returned inline and never registered. The walk keeps its
    own stack, so nesting depth is bounded by memory rather than by the
    interpreter's recursion limit.
    """

    def __init__(
        self,
        registry: SignatureRegistry,
        min_size: int = DEFAULT_MIN_SIGNATURE_SIZE,
    ) -> None:
        if min_size < 0:
            raise ValueError("min_size must not be negative")
        self.registry = registry
        self.min_size = min_size
        self.logger = get_logger("collector")

    def collect(self, values: Iterable[object]) -> int:
        """Reduce every value as a top-level value; return how many were read."""
        count = 0
        for value in values:
            self.reduce(value, top_level=True)
            count += 1
        self.logger.debug("Collected %d top-level values", count)
        return count

    def reduce(self, value: object, top_level: bool = False) -> TypeSignature:
        """Return the type signature of ``value``.

        Raises :class:`DecodeError` when a container holds itself, directly or
        through its descendants.
        """
        frame = _open(value)
        if frame is None:
            return _scalar(value)

        stack = [frame]
        active = {id(value)}
        while True:
            frame = stack[-1]
            step = next(frame.children, None)
            if step is not None:
                name, child = step
                child_frame = _open(child)
                if child_frame is None:
                    frame.reduced.append((name, (_scalar(child), 0)))
                elif id(child) in active:
                    raise DecodeError("value contains a reference cycle")
                else:
                    child_frame.name = name
                    active.add(id(child))
                    stack.append(child_frame)
                continue

            stack.pop()
            active.discard(id(frame.value))
            reduced = self._close(frame, top_level=top_level and not stack)
            if not stack:
                return reduced[0]
            stack[-1].reduced.append((frame.name, reduced))

    def _close(self, frame: _Frame, top_level: bool) -> _Reduced:
        size = sum(1 + weight for _, (_, weight) in frame.reduced)
        if frame.kind is RecordSignature:
            signature: ContainerSignature = RecordSignature.from_fields(
                (name, child) for name, (child, _) in frame.reduced
            )
        else:
            signature = frame.kind(tuple(child for _, (child, _) in frame.reduced))
        return self._register(signature, size, top_level), size

    def _register(
        self, signature: ContainerSignature, size: int, top_level: bool
    ) -> TypeSignature:
        if size < self.min_size:
            return InlineContainer(signature)
        existing, signature_id = self.registry.lookup_or_insert(
            signature, top_level, size=size
        )
        if not existing:
            for child_id in signature.child_refs():
                self.registry.record_parent(child_id)
        return ContainerRef(signature_id)


def _open(value: object) -> Optional[_Frame]:
    if isinstance(value, Struct):
        return _Frame(value, RecordSignature, ((str(k), v) for k, v in value.fields))
    if isinstance(value, Mapping):
        return _Frame(value, RecordSignature, ((str(k), v) for k, v in value.items()))
    if isinstance(value, list):
        return _Frame(value, ListSignature, ((None, child) for child in value))
    if isinstance(value, tuple):
        return _Frame(value, SequenceSignature, ((None, child) for child in value))
    return None


def _scalar(value: object) -> ScalarKind:
    kind = ScalarKind.of(value)
    if kind is None:
        raise UnsupportedValueError(f"Unsupported value of type {type(value).__name__}")
    return kind


__all__ = ["DEFAULT_MIN_SIGNATURE_SIZE", "SignatureCollector"]
