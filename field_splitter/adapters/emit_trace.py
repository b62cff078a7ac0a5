from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any
from uuid import uuid4

_RUN_ID = uuid4().hex
_CALLS: list[str] = []
_ROOT = Path("artifacts") / "trace"


def trace_dir() -> Path:
    return _ROOT / _RUN_ID


def _path(step: str) -> Path:
    base = trace_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base / f"{step}.json"


def _dump(step: str, data: Any) -> None:
    _path(step).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def _jsonable(payload: Any) -> Any:
    """Materialize lazy row sources so the snapshot is plain JSON."""
    if isinstance(payload, Mapping):
        rows = payload.get("rows")
        if isinstance(rows, Iterable) and not isinstance(rows, (list, str, bytes)):
            return {**payload, "rows": list(rows)}
        return dict(payload)
    return payload


def write_snapshot(step: str, payload: Any) -> None:
    """Persist the payload seen after ``step`` under a unique run directory."""
    _dump(step, _jsonable(payload))


def write_diagnostics(step: str, meta: Mapping[str, Any] | None) -> None:
    """Persist the diagnostics recorded by ``step``, when there are any."""
    notes = ((meta or {}).get("diagnostics") or {}).get(step)
    if notes:
        _dump(f"{step}_diagnostics", {"total": len(notes), "diagnostics": notes})


def record_call(step: str) -> None:
    _CALLS.append(step)
    data = {"calls": list(_CALLS), "counts": {s: _CALLS.count(s) for s in set(_CALLS)}}
    _dump("calls", data)
