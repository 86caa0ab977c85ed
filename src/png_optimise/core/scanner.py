"""文件扫描与筛选逻辑。"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from png_optimise.core.exceptions import DiscoveryError
from png_optimise.core.models import FileTask

LOGGER = logging.getLogger(__name__)

PNG_EXTENSION = ".png"


def is_png_path(path: Path) -> bool:
    return path.suffix.lower() == PNG_EXTENSION


def _raise_walk_error(exc: OSError) -> None:
    raise DiscoveryError(f"无法遍历目录: {exc.filename}") from exc


def _iter_candidate_files(root: Path) -> Iterator[Path]:
    """递归遍历目录下的所有普通文件，不跟随符号链接目录。

    遇到第一个无法读取的子目录即中止（fail-fast）。
    """

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        base = Path(dirpath)
        for name in sorted(filenames):
            candidate = base / name
            if candidate.is_file():
                yield candidate


def discover_png_files(root: Path) -> list[Path]:
    """扫描根目录，返回按路径排序的 PNG 文件列表。"""

    if not root.exists():
        raise DiscoveryError(f"Folder does not exist: {root}")
    if not root.is_dir():
        raise DiscoveryError(f"Not a folder: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise DiscoveryError(f"Folder is not readable: {root}")

    collected = [candidate for candidate in _iter_candidate_files(root) if is_png_path(candidate)]
    collected.sort(key=lambda x: str(x).lower())
    LOGGER.debug("在 %s 下发现 %d 个 PNG 文件", root, len(collected))
    return collected


def collect_file_tasks(root: Path) -> list[FileTask]:
    return [FileTask(path=path) for path in discover_png_files(root)]
