"""Scalar and container types that extend the plain Python value model.

Decoded input is made of ordinary Python values: mappings are records,
lists are lists and tuples are ordered untyped sequences. The types below
mark the few categories plain Python cannot tell apart.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple


class Symbol(str):
    """Symbolic atom; compares like ``str`` but classifies as ``symbol``."""

    __slots__ = ()


class Clob(bytes):
    """Character large object; classifies as ``clob`` rather than ``blob``."""

    __slots__ = ()


class SExp(tuple):
    """Ordered untyped sequence (an s-expression)."""

    __slots__ = ()


class Struct(dict):
    """Record that keeps every field, including repeated names.

    Mapping access behaves like ``dict``: a repeated name resolves to its last
    value. ``fields`` holds all ``(name, value)`` pairs in the order they were
    read and is what signature collection walks. It is not updated when the
    mapping is mutated.
    """

    def __init__(self, pairs: Iterable[Tuple[str, object]] = ()) -> None:
        fields = list(pairs)
        super().__init__(fields)
        self.fields: List[Tuple[str, object]] = fields


__all__ = ["Clob", "SExp", "Struct", "Symbol"]
