"""Render scan results for line-oriented text or JSON consumers."""

from __future__ import annotations

import json
from typing import Dict, List, Optional

from .models import ScanResult, SignatureRow


def format_text(result: ScanResult, limit: Optional[int] = None) -> List[str]:
    """Return one ``<count> values appear with signature #<id> ...`` line per row."""
    return [row.describe() for row in _limited(result.rows, limit)]


def format_json(result: ScanResult, limit: Optional[int] = None) -> str:
    payload = {
        "signatures": [_row_to_dict(row) for row in _limited(result.rows, limit)],
        "values": result.value_count,
        "sources": result.source_count,
        "min_signature_size": result.min_signature_size,
        "inlined": list(result.inlined_ids),
    }
    return json.dumps(payload, indent=2)


def _limited(rows: List[SignatureRow], limit: Optional[int]) -> List[SignatureRow]:
    return rows if limit is None else rows[:limit]


def _row_to_dict(row: SignatureRow) -> Dict[str, object]:
    return {"id": row.id, "signature": row.signature, "count": row.count}


__all__ = ["format_json", "format_text"]
