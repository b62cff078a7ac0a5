"""Configuration record for one field-splitting invocation."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

DEFAULT_DELIMITER = " "
DEFAULT_MAX_LENGTH = 200
DEFAULT_SUFFIX_START = 1


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _given(opts: Mapping[str, Any], key: str, default: Any) -> Any:
    """``opts[key]``, treating a missing or null value as ``default``."""
    value = opts.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class SplitSpec:
    """Resolved options for splitting ``field`` into bounded segments.

    ``prefix`` defaults to the source field name. When ``suffix_start`` is 1 the
    first segment lands in a base field named exactly ``prefix``; every other
    segment is named ``prefix`` followed by an integer suffix.
    """

    field: str
    prefix: str | None = None
    suffix_start: int = DEFAULT_SUFFIX_START
    delimiter: str = DEFAULT_DELIMITER
    max_length: int = DEFAULT_MAX_LENGTH
    drop_source: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("field to split must be named")
        if self.max_length <= 0:
            raise ValueError(f"max_length must be positive, got {self.max_length}")
        if self.suffix_start < 1:
            raise ValueError(f"suffix_start must be >= 1, got {self.suffix_start}")
        if not self.delimiter:
            raise ValueError("delimiter must be a non-empty string")
        if self.prefix is None:
            object.__setattr__(self, "prefix", self.field)

    @property
    def field_prefix(self) -> str:
        return self.prefix or self.field

    @property
    def has_base_field(self) -> bool:
        return self.suffix_start == 1

    @classmethod
    def from_options(cls, opts: Mapping[str, Any]) -> SplitSpec:
        """Build a spec from loosely-typed pass options (YAML, env, CLI)."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(opts) - known)
        if unknown:
            raise ValueError(f"unknown split options: {', '.join(unknown)}")
        if not opts.get("field"):
            raise ValueError("split options require a 'field' to split")
        return cls(
            field=str(opts["field"]),
            prefix=str(opts["prefix"]) if opts.get("prefix") else None,
            suffix_start=int(_given(opts, "suffix_start", DEFAULT_SUFFIX_START)),
            delimiter=str(_given(opts, "delimiter", DEFAULT_DELIMITER)),
            max_length=int(_given(opts, "max_length", DEFAULT_MAX_LENGTH)),
            drop_source=_as_bool(_given(opts, "drop_source", False)),
            debug=_as_bool(_given(opts, "debug", False)),
        )


__all__ = ["SplitSpec", "DEFAULT_DELIMITER", "DEFAULT_MAX_LENGTH", "DEFAULT_SUFFIX_START"]
