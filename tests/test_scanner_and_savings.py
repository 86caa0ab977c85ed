"""测试 PNG 扫描与节省比例统计。"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from png_optimise.core.exceptions import DiscoveryError
from png_optimise.core.models import BatchSummary, OptimizationOutcome
from png_optimise.core.savings import SavingsAccumulator, batch_summary_string, ratio_string, savings_string
from png_optimise.core.scanner import collect_file_tasks, discover_png_files


def test_discover_returns_only_png_files(tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"a")
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "b.png").write_bytes(b"b")
    (tmp_path / "c.txt").write_text("c")

    found = discover_png_files(tmp_path)

    assert found == [tmp_path / "a.png", tmp_path / "b" / "b.png"]


def test_discover_is_case_insensitive_and_recursive(tmp_path: Path) -> None:
    deep = tmp_path / "x" / "y" / "z"
    deep.mkdir(parents=True)
    (deep / "Deep.PNG").write_bytes(b"1")
    (tmp_path / "top.Png").write_bytes(b"2")
    (tmp_path / "fake.png.bak").write_bytes(b"3")
    (tmp_path / "folder.png").mkdir()

    found = discover_png_files(tmp_path)

    assert sorted(p.name for p in found) == ["Deep.PNG", "top.Png"]


def test_discover_order_is_stable(tmp_path: Path) -> None:
    for name in ["zeta.png", "Alpha.png", "mid/beta.png", "mid/Gamma.png"]:
        target = tmp_path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"x")

    first = discover_png_files(tmp_path)
    second = discover_png_files(tmp_path)

    assert first == second
    assert first == sorted(first, key=lambda p: str(p).lower())


def test_discover_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        discover_png_files(tmp_path / "missing")


def test_discover_file_root_raises(tmp_path: Path) -> None:
    target = tmp_path / "single.png"
    target.write_bytes(b"x")

    with pytest.raises(DiscoveryError):
        discover_png_files(target)


@pytest.mark.skipif(sys.platform.startswith("win") or os.geteuid() == 0, reason="需要 POSIX 权限且非 root 用户")
def test_discover_unreadable_subdirectory_is_fatal(tmp_path: Path) -> None:
    (tmp_path / "ok.png").write_bytes(b"x")
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "hidden.png").write_bytes(b"x")
    locked.chmod(0)
    try:
        with pytest.raises(DiscoveryError):
            discover_png_files(tmp_path)
    finally:
        locked.chmod(0o755)


def test_collect_file_tasks_wraps_paths(tmp_path: Path) -> None:
    (tmp_path / "one.png").write_bytes(b"x")

    tasks = collect_file_tasks(tmp_path)

    assert [task.path for task in tasks] == [tmp_path / "one.png"]


def test_ratio_string_smaller_and_larger() -> None:
    assert ratio_string(1000, 800) == "20.00% smaller"
    assert ratio_string(800, 1000) == "25.00% larger"
    assert ratio_string(500, 500) == "0.00% smaller"


def test_ratio_string_zero_input_is_neutral() -> None:
    assert ratio_string(0, 0) == "0.00% smaller"
    assert ratio_string(0, 120) == "0.00% smaller"


def test_savings_string_formats() -> None:
    assert savings_string(1000, 800) == "800 bytes (20.00% smaller)"
    assert savings_string(800, 1000) == "1000 bytes (25.00% larger)"
    assert savings_string(0, 0) == "0 bytes (0.00% smaller)"


def test_batch_summary_string() -> None:
    summary = BatchSummary(file_count=3, total_in=1000, total_out=800)

    assert batch_summary_string(summary) == "Optimised 3 PNGs (20.00% smaller)"
    assert batch_summary_string(BatchSummary()) == "Optimised 0 PNGs (0.00% smaller)"


def test_accumulator_has_no_loss() -> None:
    outcomes = [
        OptimizationOutcome(path=Path("a.png"), input_size=333, output_size=300),
        OptimizationOutcome(path=Path("b.png"), input_size=1, output_size=2),
        OptimizationOutcome(path=Path("c.png"), input_size=0, output_size=0),
    ]
    accumulator = SavingsAccumulator()
    for outcome in outcomes:
        accumulator.record(outcome)

    summary = accumulator.summary()
    assert summary.file_count == 3
    assert summary.total_in == sum(o.input_size for o in outcomes)
    assert summary.total_out == sum(o.output_size for o in outcomes)
    assert accumulator.summary_ratio() == ratio_string(334, 302)


def test_empty_accumulator_ratio() -> None:
    assert SavingsAccumulator().summary_ratio() == "0.00% smaller"
