"""High-level orchestration for signature scans."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .collector import SignatureCollector
from .config import SigScanConfig, load_config
from .logging import get_logger
from .models import ScanResult
from .readers import (
    STDIN_SOURCE,
    DecodeError,
    discover_readers,
    iter_source_values,
    select_reader,
)
from .registry import SignatureRegistry


class Orchestrator:
    """Coordinates readers, the collector and the registry for one run."""

    def __init__(self, config: SigScanConfig | None = None) -> None:
        self.config = config if config is not None else load_config(Path.cwd())
        self.logger = get_logger("orchestrator")

    def run(
        self,
        sources: Sequence[str] | None = None,
        *,
        min_signature_size: Optional[int] = None,
        fmt: Optional[str] = None,
    ) -> ScanResult:
        """Scan every source and return the signatures that remain after inlining.

        Sources are file paths or ``-`` for standard input; an empty list reads
        standard input. Any :class:`~sigscan.readers.DecodeError` aborts the run.
        """
        source_list: List[str] = list(sources) if sources else [STDIN_SOURCE]
        fmt = fmt or self.config.input_format
        readers = discover_readers()
        # Resolve every reader up front so a bad format fails before any input is read.
        plan = [(source, select_reader(source, readers, fmt)) for source in source_list]

        registry, collector = self._start(min_signature_size)
        self.logger.info(
            "Starting signature scan of %d source(s) (min size %d)",
            len(plan),
            collector.min_size,
        )
        value_count = 0
        for source, reader in plan:
            self.logger.debug("Reading %s as %s", source, reader.name)
            try:
                read = collector.collect(iter_source_values(source, reader))
            except DecodeError as exc:
                if exc.source is not None:
                    raise
                # Errors raised while walking a decoded value carry no source yet.
                raise type(exc)(str(exc), source=source) from exc
            self.logger.debug("Read %d value(s) from %s", read, source)
            value_count += read

        return self._finish(registry, collector, value_count, len(plan))

    def run_values(
        self,
        values: Iterable[object],
        *,
        min_signature_size: Optional[int] = None,
    ) -> ScanResult:
        """Scan already-decoded top-level values."""
        registry, collector = self._start(min_signature_size)
        value_count = collector.collect(values)
        return self._finish(registry, collector, value_count, 0)

    # ------------------------------------------------------------------
    # Internal helpers

    def _start(
        self, min_signature_size: Optional[int]
    ) -> tuple[SignatureRegistry, SignatureCollector]:
        if min_signature_size is None:
            min_signature_size = self.config.min_signature_size
        registry = SignatureRegistry()
        return registry, SignatureCollector(registry, min_size=min_signature_size)

    def _finish(
        self,
        registry: SignatureRegistry,
        collector: SignatureCollector,
        value_count: int,
        source_count: int,
    ) -> ScanResult:
        registered = len(registry)
        inlined = registry.inline_single_parent_signatures()
        self.logger.info(
            "Scanned %d value(s): %d signature(s) registered, %d inlined",
            value_count,
            registered,
            len(inlined),
        )
        return ScanResult(
            rows=registry.report_rows(),
            value_count=value_count,
            source_count=source_count,
            min_signature_size=collector.min_size,
            inlined_ids=inlined,
        )


__all__ = ["Orchestrator"]
