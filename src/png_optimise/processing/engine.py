"""压缩引擎边界：生产环境使用 oxipng，测试中可替换为假引擎。"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import oxipng

from png_optimise.core.config import MetadataPolicy
from png_optimise.core.exceptions import EngineError

LOGGER = logging.getLogger(__name__)

LogCallback = Callable[[str], None]


class OptimisationEngine(Protocol):
    def optimise(self, data: bytes, level: int, policy: MetadataPolicy) -> bytes: ...


def _strip_chunks(policy: MetadataPolicy) -> "oxipng.StripChunks":
    if policy is MetadataPolicy.PRESERVE_ALL:
        return oxipng.StripChunks.none()
    if policy is MetadataPolicy.STRIP_ALL:
        return oxipng.StripChunks.all()
    return oxipng.StripChunks.safe()


class OxipngEngine:
    """包装 pyoxipng 的内存优化接口。

    每个进程只创建一次，显式传入 ``BatchOptimizer``。
    """

    def __init__(self, log: Optional[LogCallback] = None) -> None:
        self.log = log or LOGGER.info

    def optimise(self, data: bytes, level: int, policy: MetadataPolicy) -> bytes:
        self.log(f"optimising {len(data)} bytes at level {level} ({policy.value})")
        try:
            result = oxipng.optimize_from_memory(bytes(data), level=level, strip=_strip_chunks(policy))
        except oxipng.PngError as exc:
            raise EngineError(None, f"oxipng failed: {exc}") from exc
        self.log(f"optimised to {len(result)} bytes")
        return bytes(result)


def create_engine() -> OxipngEngine:
    engine = OxipngEngine()
    LOGGER.debug("oxipng 引擎已初始化")
    return engine
