"""批处理进度通知。

每次批处理共发出 ``1 + 文件数`` 条通知：先是 ``STARTING``（completed=0），
随后每个文件处理前各一条 ``RUNNING``，不合并、不节流。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProgressStatus(str, Enum):
    STARTING = "starting"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    total: int
    completed: int
    message: Optional[str] = None
    status: ProgressStatus = ProgressStatus.RUNNING

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def increment(self) -> float:
        """单个文件对应的百分比步长。"""

        if self.total == 0:
            return 0.0
        return 100 / self.total
