"""基于 git 命令行的版本控制集成。"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from png_optimise.core.exceptions import VcsCommandError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GitRepository:
    """一个 git 工作副本的句柄，仅在单次命令调用内借用。"""

    root: Path


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """``git status --porcelain`` 的一条记录。"""

    index_status: str
    worktree_status: str
    path: str
    original_path: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return "D" in (self.index_status, self.worktree_status)


def parse_porcelain_status(output: str) -> list[StatusEntry]:
    """解析 ``git status --porcelain=v1 -z`` 的输出。

    重命名/复制记录后紧跟原路径作为单独的字段。
    """

    entries: list[StatusEntry] = []
    fields = output.split("\0")
    idx = 0
    while idx < len(fields):
        record = fields[idx]
        idx += 1
        if len(record) < 4:
            continue
        x, y, path = record[0], record[1], record[3:]
        original = None
        if x in "RC":
            original = fields[idx] if idx < len(fields) else None
            idx += 1
        entries.append(StatusEntry(index_status=x, worktree_status=y, path=path, original_path=original))
    return entries


class GitIntegration:
    """负责发现仓库、解析路径与查询工作区状态。"""

    def __init__(
        self,
        workspace_roots: Sequence[Path] = (),
        git_executable: str = "git",
        scan_depth: int = 1,
    ) -> None:
        self.workspace_roots = [Path(p) for p in workspace_roots]
        self.git_executable = git_executable
        self.scan_depth = scan_depth

    @property
    def available(self) -> bool:
        return shutil.which(self.git_executable) is not None

    def _run(self, cwd: Path, *args: str) -> str:
        """执行 git 并返回 stdout。

        输出按原始字节读取后用 ``os.fsdecode`` 解码，非 UTF-8 文件名经
        surrogateescape 保留，仍可原样访问文件系统。
        """

        command = [self.git_executable, *args]
        LOGGER.debug("执行 git 命令: %s (cwd=%s)", " ".join(command), cwd)
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                check=True,
            )
        except FileNotFoundError as exc:
            raise VcsCommandError(f"git executable not found: {self.git_executable}") from exc
        except subprocess.CalledProcessError as exc:
            detail = exc.stderr.decode(errors="replace").strip()
            raise VcsCommandError(f"git {' '.join(args)} failed: {detail}") from exc
        return os.fsdecode(completed.stdout)

    def get_repository(self, path: Path) -> Optional[GitRepository]:
        """将任意路径解析为其所在仓库；不在仓库内时返回 None。"""

        path = Path(path)
        cwd = path if path.is_dir() else path.parent
        if not cwd.is_dir():
            return None
        try:
            toplevel = self._run(cwd, "rev-parse", "--show-toplevel").strip()
        except VcsCommandError as exc:
            LOGGER.debug("%s 不在 git 仓库内: %s", path, exc)
            return None
        if not toplevel:
            return None
        return GitRepository(root=Path(toplevel).resolve())

    def repositories(self) -> list[GitRepository]:
        """返回工作区根目录及其 ``scan_depth`` 层子目录中的仓库，去重并保持顺序。"""

        found: list[GitRepository] = []
        seen: set[Path] = set()
        for root in self.workspace_roots:
            for candidate in [root, *self._nested_candidates(root)]:
                repo = self.get_repository(candidate)
                if repo is None or repo.root in seen:
                    continue
                seen.add(repo.root)
                found.append(repo)
        return found

    def _nested_candidates(self, root: Path) -> list[Path]:
        candidates: list[Path] = []
        if not root.is_dir():
            return candidates
        level = [root]
        for _ in range(self.scan_depth):
            next_level: list[Path] = []
            for directory in level:
                try:
                    children = sorted(p for p in directory.iterdir() if p.is_dir() and p.name != ".git")
                except OSError as exc:
                    LOGGER.debug("跳过无法读取的目录 %s: %s", directory, exc)
                    continue
                for child in children:
                    if os.path.exists(child / ".git"):
                        candidates.append(child)
                    next_level.append(child)
            level = next_level
        return candidates

    def status_entries(self, repo: GitRepository) -> list[StatusEntry]:
        output = self._run(repo.root, "status", "--porcelain=v1", "-z", "--untracked-files=all")
        return parse_porcelain_status(output)
