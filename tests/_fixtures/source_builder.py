"""Helper utilities for writing scan inputs in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping


class SourceBuilder:
    """Utility for writing input files into a throwaway directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "inputs"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> list[str]:
        """Write `name -> contents` entries and return their paths in order."""
        paths: list[str] = []
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")
            paths.append(str(path))
        return paths

    def write_bytes(self, name: str, content: bytes) -> str:
        path = self.root / name
        path.write_bytes(content)
        return str(path)

    def path(self) -> Path:
        """Return the input directory."""
        return self.root


__all__ = ["SourceBuilder"]
