"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from png_optimise.core.models import OptimizationOutcome
from png_optimise.core.savings import ratio_string

HEADER = ["path", "input_size", "output_size", "change"]


def write_csv_report(outcomes: Iterable[OptimizationOutcome], report_path: Path) -> Path:
    """将每个文件的优化结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    str(record.path),
                    record.input_size,
                    record.output_size,
                    ratio_string(record.input_size, record.output_size),
                ]
            )
    return report_path
