"""项目内使用的自定义异常定义。"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from png_optimise.core.models import BatchSummary


class PngOptimiseError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(PngOptimiseError):
    """配置不合法时抛出。"""


class DiscoveryError(PngOptimiseError):
    """扫描根目录不存在或不可读。"""


class IntegrationUnavailableError(PngOptimiseError):
    """版本控制集成不可用（未安装 git）。"""


class NoRepositoryError(PngOptimiseError):
    """无法解析出任何仓库。"""


class UserCancelledError(PngOptimiseError):
    """用户取消了选择，调用方应静默结束。"""


class VcsCommandError(PngOptimiseError):
    """git 命令执行失败。"""


class FileIOError(PngOptimiseError):
    """读取或写入某个文件失败。"""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class EngineError(PngOptimiseError):
    """压缩引擎处理某个文件失败。"""

    def __init__(self, path: Optional[Path], message: str) -> None:
        super().__init__(message)
        self.path = path


class BatchAbortedError(PngOptimiseError):
    """批处理因单个文件失败而中止。

    已写回的文件不会回滚；``summary`` 仅包含中止前完成的文件。
    """

    def __init__(self, path: Path, completed: int, summary: "BatchSummary") -> None:
        super().__init__(f"Failed to optimise {path} ({completed} completed)")
        self.path = path
        self.completed = completed
        self.summary = summary
