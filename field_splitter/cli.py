from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any

import typer

from field_splitter.config import PipelineSpec, load_spec


def _spec_path_candidates(path: str | Path) -> Iterator[Path]:
    """Yield potential spec locations without hitting the filesystem."""
    candidate = Path(path)
    pkg_dir = Path(__file__).resolve().parent
    yield from (
        candidate,
        pkg_dir.parent / candidate,
        pkg_dir / candidate,
    )


def _resolve_spec_path(path: str | Path) -> Path:
    """Pick the first existing pipeline spec from candidate locations."""
    return next((p for p in _spec_path_candidates(path) if p.exists()), Path(path))


def _format_timings(timings: Mapping[str, float]) -> str:
    """Return ``timings`` as newline-delimited ``name: seconds`` strings."""
    return "\n".join(f"{n}: {t:.2f}s" for n, t in timings.items())


def _exit_with_error(exc: Exception) -> None:
    """Print ``exc`` to stderr and exit with status 1."""
    print(f"error: {exc}", file=sys.stderr)
    raise typer.Exit(1)


def _safe(func: Callable[[], None]) -> None:
    """Invoke ``func`` and exit non-zero on any exception."""
    try:
        func()
    except Exception as exc:  # pragma: no cover - exercised in CLI tests
        _exit_with_error(exc)


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _cli_overrides(
    field: str | None,
    out: Path | None,
    prefix: str | None,
    suffix_start: int | None,
    delimiter: str | None,
    max_length: int | None,
    drop_source: bool,
    debug: bool,
) -> dict[str, dict[str, Any]]:
    split_opts: dict[str, Any] = {
        k: v
        for k, v in {
            "field": field,
            "prefix": prefix,
            "suffix_start": suffix_start,
            "delimiter": delimiter,
            "max_length": max_length,
            "drop_source": True if drop_source else None,
            "debug": True if debug else None,
        }.items()
        if v is not None
    }
    emit_opts: dict[str, Any] = {"output_path": str(out)} if out else {}
    return {
        k: v
        for k, v in {"split_field": split_opts, "emit_records": emit_opts}.items()
        if v
    }


def _run_split(
    input_path: Path,
    field: str | None,
    out: Path | None,
    prefix: str | None,
    suffix_start: int | None,
    delimiter: str | None,
    max_length: int | None,
    drop_source: bool,
    debug: bool,
    spec: str,
    verbose: bool,
) -> None:
    from field_splitter.core import _input_artifact, run_split

    _configure_logging(verbose, debug)
    s: PipelineSpec = load_spec(
        _resolve_spec_path(spec),
        overrides=_cli_overrides(
            field, out, prefix, suffix_start, delimiter, max_length, drop_source, debug
        ),
    )
    artifact, timings = run_split(_input_artifact(str(input_path)), s, trace=debug)
    if verbose:
        print(_format_timings(timings))
    warnings = (artifact.meta or {}).get("warnings") or []
    if warnings:
        print(f"warnings: {', '.join(warnings)}")
    print("split: OK")


def _run_inspect() -> None:
    from field_splitter.core import run_inspect

    print(json.dumps(run_inspect(), indent=2))


app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.command()
def split(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    field: str | None = typer.Option(None, "--field", help="Name of the long-text field"),
    out: Path | None = typer.Option(None, "--out"),
    prefix: str | None = typer.Option(None, "--prefix"),
    suffix_start: int | None = typer.Option(None, "--suffix-start", min=1),
    delimiter: str | None = typer.Option(None, "--delimiter"),
    max_length: int | None = typer.Option(None, "--max-length", min=1),
    drop_source: bool = typer.Option(False, "--drop-source"),
    debug: bool = typer.Option(False, "--debug"),
    spec: str = typer.Option("pipeline.yaml", "--spec"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Split one long-text field of every record into bounded fields."""
    _safe(
        lambda: _run_split(
            input_path,
            field,
            out,
            prefix,
            suffix_start,
            delimiter,
            max_length,
            drop_source,
            debug,
            spec,
            verbose,
        )
    )


@app.command()
def inspect() -> None:
    """List the registered passes."""
    _run_inspect()


if __name__ == "__main__":
    app()
