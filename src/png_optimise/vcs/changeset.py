"""仓库中已修改 PNG 文件的解析。"""

from __future__ import annotations

import logging
from pathlib import Path

from png_optimise.core.models import FileTask
from png_optimise.core.scanner import is_png_path
from png_optimise.vcs.git import GitIntegration, GitRepository

LOGGER = logging.getLogger(__name__)


def modified_png_files(integration: GitIntegration, repo: GitRepository) -> list[Path]:
    """返回仓库中已暂存、未暂存或未跟踪的 PNG 文件（绝对路径，已排序）。

    已删除的文件没有可优化的内容，直接跳过。
    """

    paths: set[Path] = set()
    for entry in integration.status_entries(repo):
        if entry.is_deleted:
            continue
        candidate = repo.root / entry.path
        if is_png_path(candidate):
            paths.add(candidate)
    LOGGER.debug("仓库 %s 中有 %d 个已修改的 PNG", repo.root, len(paths))
    return sorted(paths, key=lambda x: str(x).lower())


def collect_change_tasks(integration: GitIntegration, repo: GitRepository) -> list[FileTask]:
    return [FileTask(path=path) for path in modified_png_files(integration, repo)]
