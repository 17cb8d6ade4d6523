"""Value reader implementations and discovery utilities."""

from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Sequence, Set

from .base import DecodeError, UnsupportedValueError, ValueReader
from .json_reader import JsonReader
from .yaml_reader import YamlReader

_ENTRY_POINT_GROUP = "sigscan.readers"

STDIN_SOURCE = "-"

_BUILTIN_FACTORIES: dict[str, Callable[[], ValueReader]] = {
    "json": JsonReader,
    "yaml": YamlReader,
}

_FALLBACK_READER = "json"


def discover_readers(enabled: Sequence[str] | None = None) -> List[ValueReader]:
    """Return instantiated readers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    readers: List[ValueReader] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], ValueReader]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, ValueReader):
            raise TypeError(f"Reader factory for '{name}' did not return a ValueReader instance")
        if not instance.name:
            instance.name = key
        readers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load reader entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> ValueReader:
            return _coerce_reader(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown input formats requested: {missing}")

    return readers


def select_reader(
    source: str, readers: Sequence[ValueReader], fmt: str | None = None
) -> ValueReader:
    """Pick the reader for ``source``: explicit format first, then file suffix."""
    by_name = {reader.name: reader for reader in readers}
    if fmt:
        try:
            return by_name[fmt.lower()]
        except KeyError:
            raise ValueError(f"Unknown input format: {fmt}") from None
    if source != STDIN_SOURCE:
        path = Path(source)
        for reader in readers:
            if reader.supports(path):
                return reader
    if _FALLBACK_READER in by_name:
        return by_name[_FALLBACK_READER]
    raise ValueError(f"No reader available for {source}")


def iter_source_values(source: str, reader: ValueReader) -> Iterator[object]:
    """Yield the top-level values of ``source`` (a path, or ``-`` for stdin)."""
    if source == STDIN_SOURCE:
        yield from _read_guarded(reader, sys.stdin, "<stdin>")
        return
    try:
        stream = open(source, encoding="utf-8")
    except OSError as exc:
        raise DecodeError(exc.strerror or str(exc), source=source) from exc
    with stream:
        yield from _read_guarded(reader, stream, source)


def _read_guarded(reader: ValueReader, stream, source: str) -> Iterator[object]:
    try:
        yield from reader.read(stream, source)
    except UnicodeDecodeError as exc:
        raise DecodeError(f"input is not valid UTF-8: {exc.reason}", source=source) from exc
    except RecursionError as exc:
        raise DecodeError("input is nested too deeply to decode", source=source) from exc
    except OSError as exc:
        raise DecodeError(exc.strerror or str(exc), source=source) from exc


def _coerce_reader(obj: object) -> ValueReader:
    if isinstance(obj, ValueReader):
        return obj
    if isinstance(obj, type) and issubclass(obj, ValueReader):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, ValueReader):
            return instance
    raise TypeError("Reader entry point must be a ValueReader subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "DecodeError",
    "STDIN_SOURCE",
    "UnsupportedValueError",
    "ValueReader",
    "discover_readers",
    "iter_source_values",
    "select_reader",
]
