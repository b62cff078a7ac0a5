"""Record IO adapter returning a re-iterable ``records`` payload.

The two split phases each stream the dataset once, so the source re-opens the
file on every iteration instead of buffering rows in memory.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

Row = dict[str, Any]

_FORMATS: Final[dict[str, str]] = {
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
    ".csv": "csv",
}


def record_format(path: str | Path) -> str:
    """Return ``jsonl`` or ``csv`` for ``path``; reject other suffixes."""
    suffix = Path(path).suffix.lower()
    try:
        return _FORMATS[suffix]
    except KeyError:
        raise ValueError(f"unsupported record file type: {suffix or path!s}") from None


def _jsonl_rows(path: Path) -> Iterator[Row]:
    with path.open(encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            row = json.loads(line)
            if not isinstance(row, dict):
                raise ValueError(f"{path}:{lineno}: expected a JSON object per line")
            yield row


def _csv_rows(path: Path) -> Iterator[Row]:
    with path.open(encoding="utf-8", newline="") as f:
        yield from (dict(r) for r in csv.DictReader(f))


@dataclass(frozen=True)
class RecordSource:
    """Lazy, re-iterable view of the rows stored at ``path``."""

    path: Path
    fmt: str

    def __iter__(self) -> Iterator[Row]:
        reader = _jsonl_rows if self.fmt == "jsonl" else _csv_rows
        return reader(self.path)


def read(path: str | Path) -> dict[str, Any]:
    """Return a ``records`` payload streaming rows from ``path``."""
    p = Path(path)
    source = RecordSource(p.resolve(), record_format(p))
    return {"type": "records", "source_path": str(source.path), "rows": source}


__all__ = ["RecordSource", "read", "record_format"]
