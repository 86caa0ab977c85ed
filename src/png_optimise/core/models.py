"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class FileTask:
    """枚举阶段得到的待优化文件。"""

    path: Path


@dataclass(frozen=True, slots=True)
class OptimizationOutcome:
    """单个文件成功优化后的字节统计。

    ``output_size`` 大于 ``input_size`` 是合法结果，不视为错误。
    """

    path: Path
    input_size: int
    output_size: int


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """批处理累计的统计快照。"""

    file_count: int = 0
    total_in: int = 0
    total_out: int = 0


class BatchState(str, Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    PROCESSING = "processing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(slots=True)
class BatchResult:
    """一次批处理的最终产出。"""

    state: BatchState
    summary: BatchSummary
    outcomes: list[OptimizationOutcome] = field(default_factory=list)

