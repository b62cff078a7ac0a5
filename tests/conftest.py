from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))


def words(count: int, word: str = "abc") -> str:
    """``count`` copies of ``word`` joined by single spaces."""
    return " ".join([word] * count)


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from ``tmp_path`` so run reports and traces land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_jsonl(tmp_path: Path) -> Callable[[Iterable[dict[str, Any]], str], Path]:
    def _write(rows: Iterable[dict[str, Any]], name: str = "records.jsonl") -> Path:
        path = tmp_path / name
        path.write_text(
            "".join(f"{json.dumps(r)}\n" for r in rows),
            encoding="utf-8",
        )
        return path

    return _write


def read_jsonl(path: Path) -> list[dict[str, Any]]:
    return [
        json.loads(line)
        for line in path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
