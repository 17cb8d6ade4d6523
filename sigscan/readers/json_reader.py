"""JSON reader for single documents, concatenated values and JSON Lines."""

from __future__ import annotations

import json
import re
from typing import Iterator, TextIO, Tuple

from ..values import Struct
from .base import DecodeError, ValueReader

_WHITESPACE = re.compile(r"\s*")
_CHUNK_SIZE = 64 * 1024


class JsonReader(ValueReader):
    """Decodes any number of whitespace-separated JSON values.

    The stream is read in chunks and each value is yielded as soon as it is
    complete, so large inputs are never held in memory whole. Objects decode
    to :class:`~sigscan.values.Struct` so repeated keys survive.
    """

    name = "json"
    suffixes = (".json", ".jsonl", ".ndjson")

    def __init__(self, chunk_size: int = _CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self._decoder = json.JSONDecoder(object_pairs_hook=Struct)

    def read(self, stream: TextIO, source: str) -> Iterator[object]:
        buffer = ""
        eof = False
        # Line and column of buffer[0] within the source, both zero-based.
        line = column = 0
        while True:
            start = _WHITESPACE.match(buffer).end()  # type: ignore[union-attr]
            if start < len(buffer):
                try:
                    value, end = self._decoder.raw_decode(buffer, start)
                except json.JSONDecodeError as exc:
                    if eof:
                        if exc.lineno == 1:
                            exc_column = column + exc.colno
                        else:
                            exc_column = exc.colno
                        raise DecodeError(
                            f"invalid JSON at line {line + exc.lineno} "
                            f"column {exc_column}: {exc.msg}",
                            source=source,
                        ) from exc
                else:
                    # A number running up to the end of the buffer may continue
                    # in the next chunk.
                    if end < len(buffer) or eof:
                        yield value
                        line, column = _advance(buffer, end, line, column)
                        buffer = buffer[end:]
                        continue
            elif eof:
                return
            else:
                line, column = _advance(buffer, start, line, column)
                buffer = ""

            # Grow reads with the buffer so a large value is re-scanned a
            # bounded number of times.
            chunk = stream.read(max(self.chunk_size, len(buffer)))
            if chunk:
                buffer += chunk
            else:
                eof = True


def _advance(buffer: str, end: int, line: int, column: int) -> Tuple[int, int]:
    newlines = buffer.count("\n", 0, end)
    if newlines:
        return line + newlines, end - buffer.rfind("\n", 0, end) - 1
    return line, column + end
