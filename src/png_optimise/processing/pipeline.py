"""处理流水线：枚举文件、逐个调用引擎、写回并累计统计。"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from png_optimise.core.config import BATCH_OPTIONS, SINGLE_FILE_OPTIONS, OptimizationOptions
from png_optimise.core.exceptions import BatchAbortedError, EngineError, FileIOError
from png_optimise.core.models import BatchResult, BatchState, FileTask, OptimizationOutcome
from png_optimise.core.progress import ProgressStatus, ProgressUpdate
from png_optimise.core.savings import SavingsAccumulator
from png_optimise.core.scanner import collect_file_tasks
from png_optimise.processing.engine import OptimisationEngine
from png_optimise.processing.validation import pixels_match
from png_optimise.vcs.changeset import collect_change_tasks
from png_optimise.vcs.git import GitIntegration
from png_optimise.vcs.selector import PickOne, select_repository

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


@dataclass(frozen=True, slots=True)
class SingleFile:
    path: Path


@dataclass(frozen=True, slots=True)
class Folder:
    path: Path


@dataclass(frozen=True, slots=True)
class ChangeSet:
    integration: GitIntegration
    pick_one: PickOne
    explicit_target: Optional[Path] = None


Selection = Union[SingleFile, Folder, ChangeSet]


class BatchOptimizer:
    """按枚举顺序逐个优化文件。

    单个文件失败即中止剩余批次；已写回的文件不回滚，重新执行整个命令即可
    （优化是幂等的）。
    """

    def __init__(
        self,
        engine: OptimisationEngine,
        progress_callback: ProgressCallback = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.engine = engine
        self.progress_callback = progress_callback
        self._sleep = sleep
        self.state = BatchState.IDLE

    def enumerate(self, selection: Selection) -> list[FileTask]:
        """将三种选择模式统一展开为有序的任务列表。"""

        if isinstance(selection, SingleFile):
            return [FileTask(path=selection.path)]
        if isinstance(selection, Folder):
            return collect_file_tasks(selection.path)
        if isinstance(selection, ChangeSet):
            repo = select_repository(selection.explicit_target, selection.integration, selection.pick_one)
            LOGGER.info("使用仓库 %s", repo.root)
            return collect_change_tasks(selection.integration, repo)
        raise TypeError(f"unsupported selection: {selection!r}")

    def run(
        self,
        selection: Selection,
        options: OptimizationOptions = BATCH_OPTIONS,
        *,
        delay: float = 0.0,
    ) -> BatchResult:
        """执行一次完整批处理。

        选择阶段的异常在触碰任何文件前直接抛出；处理阶段的失败包装为
        ``BatchAbortedError``，其中携带部分统计结果。
        进度回调共触发 ``1 + 文件数`` 次，完成时不再额外通知。
        """

        self.state = BatchState.ENUMERATING
        try:
            tasks = self.enumerate(selection)
        except Exception:
            self.state = BatchState.IDLE
            raise
        total = len(tasks)
        LOGGER.info("发现 %d 个待优化的 PNG 文件", total)

        accumulator = SavingsAccumulator()
        outcomes: list[OptimizationOutcome] = []

        _emit_progress(self.progress_callback, 0, total, "Starting...", status=ProgressStatus.STARTING)

        for index, task in enumerate(tasks):
            self.state = BatchState.PROCESSING
            _emit_progress(self.progress_callback, index, total, task.path.name)
            try:
                outcome = self.optimise_task(task, options)
            except (FileIOError, EngineError) as exc:
                self.state = BatchState.ABORTED
                LOGGER.error("优化 %s 失败，已完成 %d 个：%s", task.path, accumulator.file_count, exc)
                raise BatchAbortedError(task.path, accumulator.file_count, accumulator.summary()) from exc

            accumulator.record(outcome)
            outcomes.append(outcome)

            if delay > 0 and index < total - 1:
                self._sleep(delay)

        self.state = BatchState.DONE
        return BatchResult(state=self.state, summary=accumulator.summary(), outcomes=outcomes)

    def optimise_task(self, task: FileTask, options: OptimizationOptions) -> OptimizationOutcome:
        """读取、优化并写回单个文件。

        返回的 ``output_size`` 即引擎输出长度，且等于实际写入的字节数。
        """

        path = task.path
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileIOError(path, f"Failed to read {path}: {exc}") from exc

        try:
            optimised = self.engine.optimise(data, options.compression_level, options.metadata_policy)
        except Exception as exc:  # noqa: BLE001
            raise EngineError(path, f"Engine failed on {path}: {exc}") from exc

        if options.verify and not pixels_match(data, optimised):
            raise EngineError(path, f"Pixel data changed while optimising {path}")

        try:
            written = _replace_contents(path, optimised)
        except OSError as exc:
            raise FileIOError(path, f"Failed to write {path}: {exc}") from exc

        LOGGER.debug("%s: %d -> %d 字节", path, len(data), written)
        return OptimizationOutcome(path=path, input_size=len(data), output_size=written)

    def optimise_file(
        self, path: Path, options: OptimizationOptions = SINGLE_FILE_OPTIONS
    ) -> OptimizationOutcome:
        return self.optimise_task(FileTask(path=path), options)

    def optimise_folder(self, path: Path, options: OptimizationOptions = BATCH_OPTIONS) -> BatchResult:
        return self.run(Folder(path), options)

    def optimise_changes(
        self,
        integration: GitIntegration,
        pick_one: PickOne,
        explicit_target: Optional[Path] = None,
        options: OptimizationOptions = BATCH_OPTIONS,
        delay: float = 0.0,
    ) -> BatchResult:
        return self.run(ChangeSet(integration, pick_one, explicit_target), options, delay=delay)


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
    status: ProgressStatus = ProgressStatus.RUNNING,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, message=message, status=status))


def _replace_contents(path: Path, data: bytes) -> int:
    """先写入同目录临时文件再原子替换，写入失败时原文件保持不变。"""

    handle = tempfile.NamedTemporaryFile(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    tmp_path = Path(handle.name)
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return len(data)
