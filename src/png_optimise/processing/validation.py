"""优化前后的像素一致性校验。"""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError


def _decode_rgba(data: bytes) -> np.ndarray:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return np.asarray(img.convert("RGBA"))


def pixels_match(original: bytes, optimised: bytes) -> bool:
    """解码两段 PNG 数据并逐像素比较（统一转换为 RGBA）。

    任意一段无法解码时视为不一致。
    """

    try:
        before = _decode_rgba(original)
        after = _decode_rgba(optimised)
    except (UnidentifiedImageError, OSError):
        return False

    if before.shape != after.shape:
        return False
    return bool(np.array_equal(before, after))
