from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from field_splitter.adapters.io_records import record_format
from field_splitter.framework import Artifact

_EMPTY_ROWS: tuple[dict[str, Any], ...] = ()


def rows_of(payload: Any) -> Iterable[dict[str, Any]]:
    """Yield rows when payload is a list or a ``records`` mapping."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        rows = payload.get("rows")
        if isinstance(rows, Iterable) and not isinstance(rows, (str, bytes)):
            return rows
    return _EMPTY_ROWS


def _serialize(rows: Iterable[dict[str, Any]]) -> Iterator[str]:
    """Serialize dictionaries to JSON lines."""
    return (json.dumps(r, ensure_ascii=False) for r in rows)


def _header(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of row keys in first-seen order."""
    return list(dict.fromkeys(k for r in rows for k in r))


def _prepare(path: str) -> Path:
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    return path_obj


def write_jsonl(rows: Iterable[dict[str, Any]], path: str) -> None:
    with _prepare(path).open("w", encoding="utf-8") as f:
        f.writelines(f"{line}\n" for line in _serialize(rows))


def write_csv(rows: Iterable[dict[str, Any]], path: str) -> None:
    materialized = list(rows)
    with _prepare(path).open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_header(materialized), restval="")
        writer.writeheader()
        writer.writerows(materialized)


def write(rows: Iterable[dict[str, Any]], path: str | None) -> None:
    """Write ``rows`` to ``path`` as JSONL or CSV, chosen by suffix."""
    if not path:
        return
    writer = write_csv if record_format(path) == "csv" else write_jsonl
    writer(rows, path)


def maybe_write(artifact: Artifact, options: Mapping[str, Any]) -> int:
    """Write the artifact rows if ``output_path`` is set; return the row count."""
    rows = list(rows_of(artifact.payload))
    write(rows, options.get("output_path"))
    return len(rows)
