"""优化任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from png_optimise.core.exceptions import InvalidConfigurationError

MIN_LEVEL = 0
MAX_LEVEL = 6


class MetadataPolicy(str, Enum):
    """元数据块的保留策略。"""

    PRESERVE_ALL = "preserve-all"
    STRIP_SAFE = "strip-safe"
    STRIP_ALL = "strip-all"


@dataclass(frozen=True, slots=True)
class OptimizationOptions:
    """原样传递给引擎的参数。"""

    compression_level: int = 1
    metadata_policy: MetadataPolicy = MetadataPolicy.STRIP_SAFE
    verify: bool = False

    def __post_init__(self) -> None:
        if not MIN_LEVEL <= self.compression_level <= MAX_LEVEL:
            raise InvalidConfigurationError(
                f"compression level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {self.compression_level}"
            )
        if not isinstance(self.metadata_policy, MetadataPolicy):
            raise InvalidConfigurationError(f"未知的元数据策略: {self.metadata_policy}")


# 单文件模式追求更高压缩率，批处理模式优先速度。
SINGLE_FILE_OPTIONS = OptimizationOptions(compression_level=2)
BATCH_OPTIONS = OptimizationOptions(compression_level=1)
