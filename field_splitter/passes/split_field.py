"""Phase two: split every record with the planned, fixed field count."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping

from field_splitter.framework import Artifact, Pass, register
from field_splitter.options import SplitSpec
from field_splitter.passes.split_options import SplitPassOptions, is_records, plan_key
from field_splitter.segmenter import SplitResult, split_record

logger = logging.getLogger(__name__)

_DIAGNOSTIC_KINDS = ("delimiter_not_found", "hard_cut", "segment_overflow")


def _planned_count(payload: Mapping[str, Any], spec: SplitSpec) -> int:
    if "enumerated_count" not in payload:
        raise ValueError("split_field requires plan_segments to run beforehand")
    planned = payload.get("plan")
    if planned is not None and planned != plan_key(spec):
        raise ValueError(f"split_field options {plan_key(spec)} differ from the plan {planned}")
    return int(payload["enumerated_count"])


def _diagnostic_rows(index: int, result: SplitResult) -> list[dict[str, Any]]:
    return [
        {"record": index, "kind": d.kind, "field": d.field, "detail": d.detail}
        for d in result.diagnostics
    ]


@dataclass
class _SplitFieldPass(SplitPassOptions):
    name: str = field(default="split_field", init=False)
    input_type: type = field(default=dict, init=False)  # planned {"type": "records"}
    output_type: type = field(default=dict, init=False)  # {"type": "records", "rows": [...]}

    def __call__(self, a: Artifact) -> Artifact:
        payload = a.payload
        if not is_records(payload):
            return a
        spec = self.split_spec()
        count = _planned_count(payload, spec)

        rows: list[dict[str, Any]] = []
        kinds: Counter[str] = Counter()
        notes: list[dict[str, Any]] = []
        for index, record in enumerate(payload.get("rows", ())):
            row, result = split_record(record, spec, count)
            rows.append(row)
            kinds.update(result.counts())
            if spec.debug:
                notes.extend(_diagnostic_rows(index, result))

        if kinds:
            logger.warning(
                "%s: %s",
                spec.field,
                ", ".join(f"{k}={kinds[k]}" for k in _DIAGNOSTIC_KINDS if kinds[k]),
            )
        out = a.with_metrics(
            self.name,
            {**payload, "rows": rows},
            records=len(rows),
            **{k: kinds.get(k, 0) for k in _DIAGNOSTIC_KINDS},
        )
        if not notes:
            return out
        meta = dict(out.meta or {})
        meta["diagnostics"] = {**(meta.get("diagnostics") or {}), self.name: notes}
        return Artifact(payload=out.payload, meta=meta)


split_field: Pass = register(_SplitFieldPass())
