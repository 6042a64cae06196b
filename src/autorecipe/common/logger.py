"""日志

所有模块的日志器都挂在 ``autorecipe`` 包日志器下，由包日志器持有 Rich
控制台输出；``--log-file`` 再给包日志器追加一个纯文本文件输出。
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "autorecipe"
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# 交互选择和汇总表也输出到这里
console = Console()


def get_log_level() -> int:
    """``LOG_LEVEL`` 环境变量，无法识别时为 INFO"""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if root.handlers:
        return root

    level = get_log_level()
    handler = RichHandler(
        console=console,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
        tracebacks_show_locals=os.getenv("LOG_SHOW_LOCALS", "false").lower() == "true",
        log_time_format="[%X]",
    )
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """获取日志器

    包外的名称（如 ``__main__``）会被挂到包日志器下。

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("[Generate] 分析页面")
    """
    _package_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_file_logging(log_file: str, level: int = logging.DEBUG) -> logging.Handler:
    """给包日志器追加文件输出

    控制台输出保持原来的级别，文件可以记录更详细的日志。

    Returns:
        新建的文件 handler
    """
    root = _package_logger()
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    if root.level > level:
        root.setLevel(level)
    return handler
