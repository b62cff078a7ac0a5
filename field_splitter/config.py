from __future__ import annotations

import os
import pathlib
import warnings
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping

import yaml
from pydantic import BaseModel, Field

DEFAULT_PIPELINE = ["plan_segments", "split_field", "emit_records"]

# plan_segments reads the same options as split_field; both phases must agree.
SHARED_OPTIONS = {"plan_segments": "split_field"}

# Kept verbatim from the environment; YAML would read "|", "#" or " " as null/empty.
TEXT_OPTIONS = frozenset({"field", "prefix", "delimiter", "output_path"})


class PipelineSpec(BaseModel):
    """Declarative pipeline specification."""

    pipeline: List[str] = Field(default_factory=lambda: list(DEFAULT_PIPELINE))
    options: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def step_options(self, name: str) -> Dict[str, Any]:
        """Options for ``name`` including those it shares with another step."""
        shared = SHARED_OPTIONS.get(name)
        base = self.options.get(shared, {}) if shared else {}
        return {**base, **self.options.get(name, {})}


def _read_yaml(path: str | os.PathLike | None) -> Dict[str, Any]:
    """Return a dict from YAML or {} if path is None/missing/empty."""
    if not path:
        return {}
    p = pathlib.Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise TypeError("pipeline.yaml must contain a top-level mapping")
    return data


def _env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, Dict[str, Any]]:
    """
    Map STEP__key=value to options[step][key]=value (step/key lower-cased).
    Values are YAML-coerced (so 'true', '42' etc. become bool/int), except
    TEXT_OPTIONS, which stay raw strings.
    """
    out: Dict[str, Dict[str, Any]] = {}
    for k, v in (os.environ if environ is None else environ).items():
        if "__" not in k:
            continue
        step, key = k.lower().split("__", 1)
        if key in TEXT_OPTIONS:
            out.setdefault(step, {})[key] = v
            continue
        try:
            val = yaml.safe_load(v)
        except yaml.YAMLError:
            val = v
        out.setdefault(step, {})[key] = val
    return out


def _merge_options(
    base: Dict[str, Dict[str, Any]], override: Dict[str, Dict[str, Any]]
) -> Dict[str, Dict[str, Any]]:
    """Shallow-merge per-step options; override wins."""
    sources = set(base) | set(override)
    return {s: {**base.get(s, {}), **override.get(s, {})} for s in sources}


def _warn_unknown_options(pipeline: Iterable[str], opts: Mapping[str, Any]) -> None:
    """Emit a warning when options name steps absent from the pipeline."""

    steps = set(pipeline) | {"run_report"}
    unknown = [step for step in opts if step and step not in steps]
    if unknown:
        warnings.warn(
            f"Unknown pipeline options: {', '.join(sorted(unknown))}",
            stacklevel=2,
        )


def _known_steps(opts: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Drop env-derived sections that do not name a pipeline step."""
    from field_splitter.framework import registry

    names = set(registry()) | {"emit_records", "run_report"}
    return {k: v for k, v in opts.items() if k in names}


def load_spec(
    path: str | os.PathLike | None = "pipeline.yaml",
    overrides: Dict[str, Dict[str, Any]] | None = None,
) -> PipelineSpec:
    """Load YAML + env/CLI overrides into a validated PipelineSpec."""
    data = _read_yaml(path)
    opts = data.get("options", {})
    sources: Iterable[Dict[str, Dict[str, Any]]] = (
        d for d in (opts, _known_steps(_env_overrides()), overrides) if d
    )
    acc: Dict[str, Dict[str, Any]] = {}
    merged = reduce(_merge_options, sources, acc)

    pipeline = data.get("pipeline", DEFAULT_PIPELINE)
    _warn_unknown_options(pipeline, merged)
    data = {**data, "pipeline": pipeline}
    if merged:
        data = {**data, "options": merged}
    return PipelineSpec.model_validate(data)
