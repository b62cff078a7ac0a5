"""Cut one text value into bounded, delimiter-aligned segments.

Each cut searches a window of at most ``max_length`` characters for the
rightmost delimiter, falls back to a space when a non-space delimiter is absent,
and hard-cuts at the limit when neither occurs. The final field always takes the
remaining text as-is, so overflow is reported rather than truncated. A remainder
that already fits is taken whole by the current field, leaving later fields empty.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Literal

from field_splitter.normalize import normalize
from field_splitter.options import SplitSpec
from field_splitter.planner import field_names, minimum_count

logger = logging.getLogger(__name__)

SPACE = " "

DiagnosticKind = Literal[
    "delimiter_not_found",  # configured delimiter absent, fell back to a space
    "hard_cut",  # no delimiter or space in the window, cut at the limit
    "segment_overflow",  # final field still longer than the limit
]


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal condition raised while splitting one value."""

    kind: DiagnosticKind
    field: str
    detail: str

    def __str__(self) -> str:
        return f"[{self.field}] {self.kind}: {self.detail}"


@dataclass(frozen=True)
class Segment:
    """One output field value.

    ``joiner`` is the delimiter text the cut consumed right after this segment;
    it is empty for hard cuts and for the final segment.
    """

    index: int
    name: str
    value: str
    joiner: str = ""
    overflow: bool = False


@dataclass(frozen=True)
class SplitResult:
    segments: tuple[Segment, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    def as_fields(self) -> dict[str, str]:
        return {s.name: s.value for s in self.segments}

    def counts(self) -> Counter[str]:
        return Counter(d.kind for d in self.diagnostics)

    def rejoin(self) -> str:
        """Re-insert consumed delimiters between the segments.

        This reproduces the normalized source for space-delimited text; spaces
        next to any other delimiter are trimmed away with the segments.
        """
        return "".join(s.value + s.joiner for s in self.segments)


@dataclass(frozen=True)
class _Cut:
    head: str
    rest: str
    joiner: str = ""
    notes: tuple[Diagnostic, ...] = ()


def _find(text: str, delimiter: str, limit: int) -> int | None:
    """Rightmost ``delimiter`` position ``p`` with ``1 <= p <= limit``."""

    pos = text.rfind(delimiter, 1, limit + len(delimiter))
    return pos if pos > 0 else None


def _cut(text: str, spec: SplitSpec, name: str) -> _Cut:
    limit = spec.max_length
    if len(text) <= limit:
        return _Cut(text, "")

    delimiter = spec.delimiter
    notes: tuple[Diagnostic, ...] = ()
    pos = _find(text, delimiter, limit)
    if pos is None and delimiter != SPACE:
        notes = (
            Diagnostic(
                "delimiter_not_found",
                name,
                f"{delimiter!r} absent from the first {limit} characters; cutting on a space",
            ),
        )
        delimiter = SPACE
        pos = _find(text, delimiter, limit)
    if pos is None:
        hard = Diagnostic("hard_cut", name, f"no delimiter or space within {limit} characters")
        return _Cut(text[:limit].strip(), text[limit:].strip(), "", notes + (hard,))
    return _Cut(
        text[:pos].strip(),
        text[pos + len(delimiter) :].strip(),
        delimiter,
        notes,
    )


def _final(text: str, spec: SplitSpec, name: str) -> _Cut:
    if len(text) <= spec.max_length:
        return _Cut(text, "")
    overflow = Diagnostic(
        "segment_overflow",
        name,
        f"{len(text)} characters exceed max_length={spec.max_length}",
    )
    return _Cut(text, "", "", (overflow,))


def _tracer(spec: SplitSpec) -> Callable[..., None]:
    return logger.info if spec.debug else logger.debug


def split(source: Any, spec: SplitSpec, enumerated_count: int) -> SplitResult:
    """Split ``source`` into the fields planned for ``enumerated_count``."""

    trace = _tracer(spec)
    count = max(enumerated_count, minimum_count(spec.suffix_start))
    names = field_names(spec.field_prefix, spec.suffix_start, count)
    last = len(names) - 1
    remainder = normalize(source)
    segments: list[Segment] = []
    diagnostics: list[Diagnostic] = []

    for index, name in enumerate(names):
        cut = _final(remainder, spec, name) if index == last else _cut(remainder, spec, name)
        segments.append(
            Segment(
                index=index,
                name=name,
                value=cut.head,
                joiner=cut.joiner,
                overflow=any(n.kind == "segment_overflow" for n in cut.notes),
            )
        )
        diagnostics.extend(cut.notes)
        trace("%s <- %d chars, %d remaining", name, len(cut.head), len(cut.rest))
        remainder = cut.rest

    for note in diagnostics:
        logger.warning("%s", note)
    return SplitResult(tuple(segments), tuple(diagnostics))


def split_record(
    record: Mapping[str, Any], spec: SplitSpec, enumerated_count: int
) -> tuple[dict[str, Any], SplitResult]:
    """Return ``record`` with the generated segment fields added.

    The source field is dropped first when requested, so a base field that
    shares its name still lands in the output.
    """

    result = split(record.get(spec.field), spec, enumerated_count)
    kept = {k: v for k, v in record.items() if not (spec.drop_source and k == spec.field)}
    return {**kept, **result.as_fields()}, result


__all__ = [
    "Diagnostic",
    "Segment",
    "SplitResult",
    "split",
    "split_record",
]
