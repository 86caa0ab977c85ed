"""日志配置：单进程命令行工具，交由 rich 渲染。"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def build_handler() -> RichHandler:
    handler = RichHandler(show_path=False, markup=False)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(verbose: bool = False) -> None:
    """初始化日志；``verbose`` 时输出 DEBUG，否则只保留警告以上。"""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        handlers=[build_handler()],
    )
