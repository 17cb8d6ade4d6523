"""Hash-consing registry for container signatures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .logging import get_logger
from .models import SignatureRow
from .signatures import ContainerSignature

_LOGGER = get_logger("registry")


class RegistryError(RuntimeError):
    """Raised when the registry is used outside its collect-then-inline lifecycle."""


@dataclass
class RegistryEntry:
    """Usage metadata for one registered signature."""

    signature: ContainerSignature
    occurrence_count: int = 1
    distinct_parent_count: int = 0
    seen_at_top_level: bool = False


class SignatureRegistry:
    """Maps canonical container shapes to stable integer ids.

    Equal shapes always resolve to the same id, so two references are the
    same shape exactly when they carry the same id. Ids are allocated from a
    monotonic counter and never reused. The registry is mutated while values
    are collected, mutated once more by :meth:`inline_single_parent_signatures`,
    and read-only afterwards.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, RegistryEntry] = {}
        self._ids: Dict[ContainerSignature, int] = {}
        self._sizes: Dict[int, int] = {}
        self._next_id = 0
        self._inlined = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, signature_id: object) -> bool:
        return signature_id in self._entries

    @property
    def inlined(self) -> bool:
        return self._inlined

    def lookup_or_insert(
        self,
        signature: ContainerSignature,
        top_level: bool,
        size: Optional[int] = None,
    ) -> Tuple[bool, int]:
        """Return ``(was_existing, id)`` for ``signature``, registering it if new.

        A caller that already knows the shape's size may pass it to seed the
        size cache.
        """
        if self._inlined:
            raise RegistryError("registry is read-only once signatures are inlined")
        existing = self._ids.get(signature)
        if existing is not None:
            entry = self._entries[existing]
            entry.occurrence_count += 1
            entry.seen_at_top_level = entry.seen_at_top_level or top_level
            return True, existing

        signature_id = self._next_id
        self._next_id += 1
        self._entries[signature_id] = RegistryEntry(
            signature=signature, seen_at_top_level=top_level
        )
        self._ids[signature] = signature_id
        if size is not None:
            self._sizes[signature_id] = size
        _LOGGER.debug("Registered signature #%d %s", signature_id, signature)
        return False, signature_id

    def record_parent(self, signature_id: int) -> None:
        """Count one more distinct parent shape referencing ``signature_id``."""
        self._entries[signature_id].distinct_parent_count += 1

    def entry(self, signature_id: int) -> RegistryEntry:
        return self._entries[signature_id]

    def entries(self) -> Iterator[Tuple[int, RegistryEntry]]:
        """Yield ``(id, entry)`` pairs in id order."""
        return iter(list(self._entries.items()))

    def size(self, signature: ContainerSignature) -> int:
        return signature.size(self._size_of)

    def render(self, signature_id: int) -> str:
        return self._entries[signature_id].signature.render()

    def inline_single_parent_signatures(self) -> List[int]:
        """Fold signatures used by exactly one parent back into that parent.

        A signature qualifies when exactly one distinct parent shape was created
        around it and it never appeared as a top-level value. Each qualifying
        id is replaced by its literal shape in the direct children of every
        remaining entry and then dropped from the registry. Shapes that are
        already carried inline are not searched.

        Returns the inlined ids in the order they were processed.
        """
        if self._inlined:
            raise RegistryError("signatures have already been inlined")
        self._inlined = True

        candidates = [
            signature_id
            for signature_id, entry in self._entries.items()
            if entry.distinct_parent_count == 1 and not entry.seen_at_top_level
        ]
        for signature_id in candidates:
            replacement = self._entries[signature_id].signature
            for entry_id, entry in self._entries.items():
                if signature_id in entry.signature.child_refs():
                    self._rekey(
                        entry_id, entry.signature.replace_ref(signature_id, replacement)
                    )
            del self._entries[signature_id]
            if self._ids.get(replacement) == signature_id:
                del self._ids[replacement]
            _LOGGER.debug("Inlined signature #%d", signature_id)

        _LOGGER.debug(
            "Inlined %d signatures; %d remain", len(candidates), len(self._entries)
        )
        return candidates

    def report_rows(self) -> List[SignatureRow]:
        """Return one row per entry, most frequent first, ties by ascending id."""
        rows = [
            SignatureRow(
                id=signature_id,
                signature=entry.signature.render(),
                count=entry.occurrence_count,
            )
            for signature_id, entry in self._entries.items()
        ]
        rows.sort(key=lambda row: (-row.count, row.id))
        return rows

    # ------------------------------------------------------------------
    # Internal helpers

    def _size_of(self, signature_id: int) -> int:
        cached = self._sizes.get(signature_id)
        if cached is None:
            cached = self._entries[signature_id].signature.size(self._size_of)
            # Inlining swaps a reference for the same shape, so sizes never change.
            self._sizes[signature_id] = cached
        return cached

    def _rekey(self, signature_id: int, signature: ContainerSignature) -> None:
        entry = self._entries[signature_id]
        if self._ids.get(entry.signature) == signature_id:
            del self._ids[entry.signature]
        entry.signature = signature
        self._ids.setdefault(signature, signature_id)


__all__ = ["RegistryEntry", "RegistryError", "SignatureRegistry"]
