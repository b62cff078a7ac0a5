from __future__ import annotations

import inspect
import json
import platform
import sys
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import fields, is_dataclass, replace
from hashlib import md5
from importlib import metadata
from pathlib import Path
from typing import Any, Final

from field_splitter.adapters import emit_records, emit_trace, io_records
from field_splitter.config import PipelineSpec
from field_splitter.framework import Artifact, Pass, registry

EMIT_STEP: Final = "emit_records"
_WARNING_KINDS: Final = ("delimiter_not_found", "hard_cut", "segment_overflow")


def _pass_steps(spec: PipelineSpec) -> list[str]:
    """Filter pipeline steps to registered passes; error on unknown ones."""
    regs = registry()
    unknown = [s for s in spec.pipeline if s not in regs and s != EMIT_STEP]
    if unknown:
        raise KeyError(f"unknown steps: {unknown}")
    return [s for s in spec.pipeline if s in regs]


def _ensure_plan_precedes_split(steps: Sequence[str]) -> None:
    """Raise when ``split_field`` is not preceded by ``plan_segments``."""
    if "split_field" not in steps:
        return
    split_index = steps.index("split_field")
    if "plan_segments" not in steps[:split_index]:
        raise ValueError("split_field requires plan_segments to run beforehand")


def _enforce_invariants(spec: PipelineSpec) -> list[str]:
    steps = _pass_steps(spec)
    _ensure_plan_precedes_split(steps)
    return steps


def configure_pass(pass_obj: Pass, opts: Mapping[str, Any]) -> Pass:
    """Return a new pass with ``opts`` applied without mutating ``pass_obj``."""

    if not opts or not is_dataclass(pass_obj):
        return pass_obj
    names = {f.name for f in fields(pass_obj) if f.init}
    unknown = sorted(set(opts) - names)
    if unknown:
        raise ValueError(f"unknown options for {pass_obj.name}: {', '.join(unknown)}")
    return replace(pass_obj, **dict(opts))


def _configured_passes(spec: PipelineSpec, steps: Iterable[str]) -> list[Pass]:
    return [configure_pass(registry()[s], spec.step_options(s)) for s in steps]


def _input_artifact(path: str) -> Artifact:
    """Load the record file at ``path`` as a streaming ``records`` payload."""
    payload = io_records.read(path)
    return Artifact(payload=payload, meta={"metrics": {}, "input": payload["source_path"]})


def _timed(p: Pass, a: Artifact, timings: dict[str, float]) -> Artifact:
    """Run ``p`` while recording its execution duration."""
    t0 = time.time()
    try:
        return p(a)
    finally:
        timings[p.name] = time.time() - t0


def _trace_enabled(spec: PipelineSpec, trace: bool) -> bool:
    return trace or bool(spec.step_options("split_field").get("debug"))


def _collect_warnings(meta: Mapping[str, Any]) -> list[str]:
    """Names of the non-fatal conditions any pass reported."""
    split_metrics = (meta.get("metrics") or {}).get("split_field") or {}
    return [k for k in _WARNING_KINDS if split_metrics.get(k)]


# --- run report helpers ----------------------------------------------------


def _dependency_versions() -> dict[str, Any]:
    names = ("pydantic", "PyYAML", "typer")

    def version(n: str) -> Any:
        try:
            return metadata.version(n)
        except metadata.PackageNotFoundError:
            return None

    return {n: version(n) for n in names}


def _pass_hash(p: Pass) -> tuple[str, str]:
    path = inspect.getsourcefile(p.__class__)
    data = Path(path).read_bytes() if path else b""
    return p.name, md5(data).hexdigest() if data else ""


def _env_snapshot(passes: Iterable[Pass]) -> dict[str, Any]:
    return {
        "sys_version": sys.version,
        "platform": platform.platform(),
        "dependencies": _dependency_versions(),
        "passes": {name: h for name, h in (_pass_hash(p) for p in passes) if h},
    }


def assemble_report(
    timings: Mapping[str, float],
    meta: Mapping[str, Any],
    passes: Iterable[Pass],
) -> dict[str, Any]:
    """Purely assemble run report data without performing IO."""
    metrics = dict(meta.get("metrics") or {})
    report = {
        "timings": dict(timings),
        "metrics": {**metrics, "env": _env_snapshot(passes)},
        "warnings": list(meta.get("warnings") or []),
    }
    return {**report, "error": meta["error"]} if "error" in meta else report


def write_run_report(spec: PipelineSpec, report: Mapping[str, Any]) -> Path:
    """Write ``report`` to ``run_report.json`` honoring options path."""
    path = Path(spec.options.get("run_report", {}).get("output_path", "run_report.json"))
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    return path


def _maybe_emit(a: Artifact, spec: PipelineSpec) -> Artifact:
    if EMIT_STEP not in spec.pipeline:
        return a
    count = emit_records.maybe_write(a, spec.options.get(EMIT_STEP, {}))
    return a.with_metrics(EMIT_STEP, a.payload, rows=count)


def run_split(
    a: Artifact, spec: PipelineSpec, *, trace: bool = False
) -> tuple[Artifact, dict[str, float]]:
    """Run declared passes, emit outputs, and persist a run report."""
    steps = _enforce_invariants(spec)
    passes = _configured_passes(spec, steps)
    tracing = _trace_enabled(spec, trace)
    a = Artifact(payload=a.payload, meta={**(a.meta or {}), "options": dict(spec.options)})
    timings: dict[str, float] = {}
    try:
        for p in passes:
            if tracing:
                emit_trace.record_call(p.name)
            a = _timed(p, a, timings)
            if tracing:
                emit_trace.write_snapshot(p.name, a.payload)
                emit_trace.write_diagnostics(p.name, a.meta)
        a = _maybe_emit(a, spec)
    except Exception as exc:
        meta = {**(a.meta or {}), "warnings": _collect_warnings(a.meta or {}), "error": str(exc)}
        write_run_report(spec, assemble_report(timings, meta, passes))
        raise
    meta = {**(a.meta or {}), "warnings": _collect_warnings(a.meta or {})}
    write_run_report(spec, assemble_report(timings, meta, passes))
    return Artifact(payload=a.payload, meta=meta), timings


def split_file(path: str, spec: PipelineSpec, *, trace: bool = False) -> list[dict[str, Any]]:
    """Split the records stored at ``path`` and return the output rows."""
    artifact, _ = run_split(_input_artifact(path), spec, trace=trace)
    return list(emit_records.rows_of(artifact.payload))


def split_rows(rows: Iterable[Mapping[str, Any]], **options: Any) -> list[dict[str, Any]]:
    """Split in-memory ``rows`` with ``split_field`` options; no IO, no report."""
    materialized = [dict(r) for r in rows]
    spec = PipelineSpec(pipeline=["plan_segments", "split_field"], options={"split_field": options})
    a = Artifact(payload={"type": "records", "rows": materialized}, meta={"metrics": {}})
    for p in _configured_passes(spec, _enforce_invariants(spec)):
        a = p(a)
    return list(a.payload["rows"])


def run_inspect() -> dict[str, dict[str, str]]:
    """Return a lightweight view of the registry for CLI/tests."""
    return {
        name: {"input": str(p.input_type), "output": str(p.output_type)}
        for name, p in registry().items()
    }
