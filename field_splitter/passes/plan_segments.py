"""Phase one: reduce every record to the batch-wide enumerated field count."""

from __future__ import annotations

from dataclasses import dataclass, field

from field_splitter.framework import Artifact, Pass, register
from field_splitter.normalize import normalize
from field_splitter.passes.split_options import SplitPassOptions, is_records, plan_key
from field_splitter.planner import enumerated_field_count, field_names, plan_batch


@dataclass
class _PlanSegmentsPass(SplitPassOptions):
    name: str = field(default="plan_segments", init=False)
    input_type: type = field(default=dict, init=False)  # {"type": "records"}
    output_type: type = field(default=dict, init=False)  # adds "enumerated_count"

    def __call__(self, a: Artifact) -> Artifact:
        payload = a.payload
        if not is_records(payload):
            return a
        spec = self.split_spec()
        lengths = (len(normalize(row.get(spec.field))) for row in payload.get("rows", ()))
        count = plan_batch(lengths, spec.max_length, spec.suffix_start)
        names = field_names(spec.field_prefix, spec.suffix_start, count)
        planned = {
            **payload,
            "enumerated_count": count,
            "field_names": names,
            "plan": plan_key(spec),
        }
        return a.with_metrics(
            self.name,
            planned,
            enumerated_count=count,
            enumerated_fields=enumerated_field_count(count),
            output_fields=len(names),
        )


plan_segments: Pass = register(_PlanSegmentsPass())
