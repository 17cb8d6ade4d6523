"""Core data models shared across sigscan components."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SignatureRow:
    """One reported signature: its id, rendered shape and occurrence count."""

    id: int
    signature: str
    count: int

    def describe(self) -> str:
        return f"{self.count} values appear with signature #{self.id} {self.signature}"


@dataclass
class ScanResult:
    """Outcome of a complete collection run."""

    rows: List[SignatureRow]
    value_count: int
    source_count: int
    min_signature_size: int
    inlined_ids: List[int] = field(default_factory=list)
