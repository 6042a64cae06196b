"""Common模块 - 公共工具和基础设施

该模块提供：
- 全局配置管理
- 日志系统
- 异常类
- 常量定义
- 输入验证
"""

from .config import config, Config
from .logger import get_logger, console
from .exceptions import (
    AutoRecipeError,
    ValidationError,
    URLValidationError,
    FetchError,
    CacheMissError,
    ExtractionError,
    FieldExtractionError,
    GenerationError,
    FieldNameCollisionError,
)

__all__ = [
    # 配置
    "config",
    "Config",
    # 日志
    "get_logger",
    "console",
    # 异常
    "AutoRecipeError",
    "ValidationError",
    "URLValidationError",
    "FetchError",
    "CacheMissError",
    "ExtractionError",
    "FieldExtractionError",
    "GenerationError",
    "FieldNameCollisionError",
]
