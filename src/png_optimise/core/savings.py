"""字节统计与节省比例的格式化。"""

from __future__ import annotations

from png_optimise.core.models import BatchSummary, OptimizationOutcome


def ratio_string(total_in: int, total_out: int) -> str:
    """返回形如 ``20.00% smaller`` / ``25.00% larger`` 的比例描述。

    ``total_in`` 为 0 时没有可比较的基数，统一返回中性的 ``0.00% smaller``。
    """

    if total_in <= 0:
        return "0.00% smaller"
    if total_in >= total_out:
        return f"{(total_in - total_out) / total_in * 100:.2f}% smaller"
    return f"{(total_out - total_in) / total_in * 100:.2f}% larger"


def savings_string(input_size: int, output_size: int) -> str:
    """单文件结果：``<N> bytes (<P>% smaller)``。"""

    return f"{output_size} bytes ({ratio_string(input_size, output_size)})"


def batch_summary_string(summary: BatchSummary) -> str:
    """批处理结果：``Optimised <count> PNGs (<P>% smaller)``。"""

    return f"Optimised {summary.file_count} PNGs ({ratio_string(summary.total_in, summary.total_out)})"


class SavingsAccumulator:
    """累计一次批处理的输入/输出字节数。"""

    def __init__(self) -> None:
        self.file_count = 0
        self.total_in = 0
        self.total_out = 0

    def record(self, outcome: OptimizationOutcome) -> None:
        self.file_count += 1
        self.total_in += outcome.input_size
        self.total_out += outcome.output_size

    def summary_ratio(self) -> str:
        return ratio_string(self.total_in, self.total_out)

    def summary(self) -> BatchSummary:
        return BatchSummary(file_count=self.file_count, total_in=self.total_in, total_out=self.total_out)
