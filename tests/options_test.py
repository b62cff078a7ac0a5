import pytest

from field_splitter.options import SplitSpec


def test_defaults():
    spec = SplitSpec(field="notes")
    assert (spec.prefix, spec.suffix_start, spec.delimiter, spec.max_length) == (
        "notes",
        1,
        " ",
        200,
    )
    assert not spec.drop_source and not spec.debug
    assert spec.has_base_field


@pytest.mark.parametrize(
    "kwargs",
    [
        {"field": ""},
        {"field": "n", "max_length": 0},
        {"field": "n", "suffix_start": 0},
        {"field": "n", "delimiter": ""},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        SplitSpec(**kwargs)


def test_from_options_coerces_loosely_typed_values():
    spec = SplitSpec.from_options(
        {"field": "notes", "max_length": "50", "suffix_start": "2", "drop_source": "true"}
    )
    assert spec.max_length == 50
    assert spec.suffix_start == 2
    assert spec.drop_source is True
    assert not spec.has_base_field


def test_from_options_rejects_unknown_keys():
    with pytest.raises(ValueError, match="unknown split options: width"):
        SplitSpec.from_options({"field": "notes", "width": 3})


def test_from_options_requires_a_field():
    with pytest.raises(ValueError, match="require a 'field'"):
        SplitSpec.from_options({"max_length": 10})


def test_from_options_treats_null_values_as_defaults():
    spec = SplitSpec.from_options(
        {"field": "notes", "delimiter": None, "suffix_start": None, "max_length": None}
    )
    assert (spec.delimiter, spec.suffix_start, spec.max_length) == (" ", 1, 200)
