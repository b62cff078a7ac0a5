from hypothesis import given, strategies as st

from field_splitter.core import split_rows
from field_splitter.normalize import normalize
from field_splitter.options import SplitSpec
from field_splitter.planner import plan_batch
from field_splitter.segmenter import split

TEXT = st.text(alphabet="ab xyz\n\t", max_size=300)
PIPED = st.text(alphabet="ab|x |\n", max_size=300)
LIMITS = st.integers(min_value=1, max_value=40)


def _planned_split(text: str, spec: SplitSpec):
    count = plan_batch([len(normalize(text))], spec.max_length, spec.suffix_start)
    return split(text, spec, count)


@given(st.text(max_size=200))
def test_normalize_idempotent(sample: str) -> None:
    once = normalize(sample)
    assert normalize(once) == once
    assert "\n" not in once and "  " not in once


@given(TEXT, LIMITS, st.integers(min_value=1, max_value=3))
def test_segments_rejoin_to_the_normalized_text(sample: str, limit: int, start: int) -> None:
    result = _planned_split(sample, SplitSpec(field="t", max_length=limit, suffix_start=start))
    assert result.rejoin() == normalize(sample)


@given(TEXT, LIMITS)
def test_only_the_final_segment_may_exceed_the_limit(sample: str, limit: int) -> None:
    result = _planned_split(sample, SplitSpec(field="t", max_length=limit))
    assert all(len(s.value) <= limit for s in result.segments[:-1])
    assert result.segments[-1].overflow == (len(result.segments[-1].value) > limit)


@given(st.lists(TEXT, min_size=1, max_size=6), LIMITS)
def test_every_row_in_a_batch_has_the_same_fields(samples: list[str], limit: int) -> None:
    rows = split_rows(
        ({"id": i, "t": s} for i, s in enumerate(samples)),
        field="t",
        prefix="t_",
        max_length=limit,
    )
    assert len({tuple(r) for r in rows}) == 1


@given(PIPED, LIMITS)
def test_pipe_delimited_segments_stay_bounded_with_fallback_and_hard_cuts(
    sample: str, limit: int
) -> None:
    result = _planned_split(sample, SplitSpec(field="t", delimiter="|", max_length=limit))
    assert all(len(s.value) <= limit for s in result.segments[:-1])
    assert all(s.joiner in ("|", " ", "") for s in result.segments)
    assert result.segments[-1].overflow == (len(result.segments[-1].value) > limit)


@given(st.text(alphabet="ab|x", max_size=300), LIMITS)
def test_pipe_delimited_text_without_spaces_rejoins(sample: str, limit: int) -> None:
    result = _planned_split(sample, SplitSpec(field="t", delimiter="|", max_length=limit))
    assert result.rejoin() == normalize(sample)
