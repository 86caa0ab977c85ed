"""测试日志配置。"""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from png_optimise.utils import logging as log_utils


def test_handler_formats_name_and_message_only() -> None:
    handler = log_utils.build_handler()
    record = logging.LogRecord("png_optimise.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)

    assert isinstance(handler, RichHandler)
    assert handler.format(record) == "png_optimise.test: hello world"
    assert "processName" not in log_utils.LOG_FORMAT


@pytest.mark.parametrize(("verbose", "level"), [(False, logging.WARNING), (True, logging.DEBUG)])
def test_setup_logging_levels(monkeypatch: pytest.MonkeyPatch, verbose: bool, level: int) -> None:
    captured: dict = {}
    monkeypatch.setattr(log_utils.logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    log_utils.setup_logging(verbose)

    assert captured["level"] == level
    assert isinstance(captured["handlers"][0], RichHandler)
