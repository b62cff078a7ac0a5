"""Shared option fields for the two field-splitting passes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from field_splitter.options import (
    DEFAULT_DELIMITER,
    DEFAULT_MAX_LENGTH,
    DEFAULT_SUFFIX_START,
    SplitSpec,
)


@dataclass
class SplitPassOptions:
    """Pass-level option fields; ``core.configure_pass`` replaces them by name."""

    field: str = ""
    prefix: str | None = None
    suffix_start: int = DEFAULT_SUFFIX_START
    delimiter: str = DEFAULT_DELIMITER
    max_length: int = DEFAULT_MAX_LENGTH
    drop_source: bool = False
    debug: bool = False

    def split_spec(self) -> SplitSpec:
        opts = {f.name: getattr(self, f.name) for f in fields(SplitPassOptions)}
        return SplitSpec.from_options(opts)


def is_records(payload: Any) -> bool:
    return isinstance(payload, Mapping) and payload.get("type") == "records"


def plan_key(spec: SplitSpec) -> dict[str, Any]:
    """The options a plan depends on; split must run with the same ones."""
    return {
        "field": spec.field,
        "prefix": spec.field_prefix,
        "suffix_start": spec.suffix_start,
        "max_length": spec.max_length,
    }


__all__ = ["SplitPassOptions", "is_records", "plan_key"]
