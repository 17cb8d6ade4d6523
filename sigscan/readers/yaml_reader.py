"""YAML reader yielding one top-level value per document."""

from __future__ import annotations

from typing import Iterator, TextIO

import yaml

from .base import DecodeError, ValueReader


class YamlReader(ValueReader):
    """Decodes YAML streams with PyYAML's safe loader.

    Timestamps load as ``datetime`` and ``!!binary`` nodes as ``bytes``, so
    they classify as timestamp and blob values.
    """

    name = "yaml"
    suffixes = (".yaml", ".yml")

    def read(self, stream: TextIO, source: str) -> Iterator[object]:
        documents = yaml.safe_load_all(stream)
        while True:
            try:
                document = next(documents)
            except StopIteration:
                return
            except yaml.YAMLError as exc:
                raise DecodeError(f"invalid YAML: {exc}", source=source) from exc
            yield document
