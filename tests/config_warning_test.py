import textwrap
import warnings

import pytest

from field_splitter.config import DEFAULT_PIPELINE, PipelineSpec, _env_overrides, load_spec
from field_splitter.core import configure_pass
from field_splitter.passes.split_field import split_field


def test_known_options_do_not_warn(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(textwrap.dedent(
        """
        pipeline: [plan_segments, split_field, emit_records]
        options:
          split_field:
            field: notes
          emit_records:
            output_path: out.jsonl
          run_report:
            output_path: report.json
        """
    ))
    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        load_spec(cfg)
    assert not w


def test_unknown_option_section_emits_warning(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(
        textwrap.dedent(
            """
            pipeline: [plan_segments, split_field]
            options:
              split_field:
                field: notes
              extra_pass:
                foo: 1
            """
        )
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        load_spec(cfg)

    assert [w.message.args[0] for w in caught] == ["Unknown pipeline options: extra_pass"]


def test_load_spec_merges_env_and_cli_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(
        textwrap.dedent(
            """
            pipeline: [plan_segments, split_field]
            options:
              split_field:
                field: notes
                max_length: 200
                delimiter: "|"
            """
        )
    )
    monkeypatch.setenv("SPLIT_FIELD__MAX_LENGTH", "80")
    monkeypatch.setenv("SPLIT_FIELD__DROP_SOURCE", "true")
    overrides = {"split_field": {"delimiter": ";", "prefix": "part"}}

    spec = load_spec(cfg, overrides=overrides)

    assert spec.pipeline == ["plan_segments", "split_field"]
    assert spec.options["split_field"] == {
        "field": "notes",
        "max_length": 80,
        "delimiter": ";",
        "drop_source": True,
        "prefix": "part",
    }


def test_env_sections_for_unrelated_tools_are_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("SOME_TOOL__SETTING", "1")
    spec = load_spec(tmp_path / "absent.yaml")
    assert "some_tool" not in spec.options


def test_missing_file_uses_default_pipeline(tmp_path):
    spec = load_spec(tmp_path / "absent.yaml")
    assert spec.pipeline == DEFAULT_PIPELINE


def test_env_overrides_are_yaml_coerced():
    env = {"SPLIT_FIELD__DEBUG": "yes", "SPLIT_FIELD__MAX_LENGTH": "12", "PATH": "/bin"}
    assert _env_overrides(env) == {"split_field": {"debug": True, "max_length": 12}}


def test_plan_segments_inherits_split_field_options():
    spec = PipelineSpec(
        options={
            "split_field": {"field": "notes", "max_length": 50},
            "plan_segments": {"max_length": 60},
        }
    )
    assert spec.step_options("plan_segments") == {"field": "notes", "max_length": 60}
    assert spec.step_options("split_field") == {"field": "notes", "max_length": 50}


def test_non_mapping_yaml_raises(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text("- not-a-mapping\n- still-not-a-mapping\n")

    with pytest.raises(TypeError, match="top-level mapping"):
        load_spec(cfg)


def _split_spec(spec: PipelineSpec):
    return configure_pass(split_field, spec.step_options("split_field")).split_spec()


@pytest.mark.parametrize("raw", ["|", "#", " ", ";", " | "])
def test_env_delimiter_is_taken_verbatim(tmp_path, monkeypatch, raw):
    monkeypatch.setenv("SPLIT_FIELD__FIELD", "notes")
    monkeypatch.setenv("SPLIT_FIELD__DELIMITER", raw)

    spec = load_spec(tmp_path / "absent.yaml")

    assert spec.options["split_field"]["delimiter"] == raw
    assert _split_spec(spec).delimiter == raw


def test_empty_delimiter_in_yaml_falls_back_to_a_space(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(
        textwrap.dedent(
            """
            pipeline: [plan_segments, split_field]
            options:
              split_field:
                field: notes
                delimiter:
                max_length:
            """
        )
    )

    split_spec = _split_spec(load_spec(cfg))

    assert (split_spec.delimiter, split_spec.max_length) == (" ", 200)


def test_text_options_skip_yaml_coercion():
    env = {"SPLIT_FIELD__PREFIX": "007", "SPLIT_FIELD__SUFFIX_START": "2"}
    assert _env_overrides(env) == {"split_field": {"prefix": "007", "suffix_start": 2}}
