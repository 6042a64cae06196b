"""命令行输入验证

页面 URL、出现次数阈值和各类计数参数在进入流水线之前在这里检查，
错误统一以 ``ValidationError`` 抛出，由 CLI 显示为参数错误。
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .constants import MAX_URL_LENGTH, VALID_URL_SCHEMES
from .exceptions import URLValidationError, ValidationError

# 出现次数为 1 的位置不构成列表
MIN_OCC_FLOOR = 2
MAX_FILE_STEM_LENGTH = 200

_UNSAFE_FILE_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def validate_url(url: str, allow_empty: bool = False) -> str:
    """返回去掉首尾空白的 URL

    接受 http、https 和 file 协议；file 链接只要求有路径。

    Raises:
        URLValidationError: 为空、过长、协议不支持或缺少域名/路径
    """
    url = (url or "").strip()
    if not url:
        if allow_empty:
            return url
        raise URLValidationError(url, "URL 不能为空")
    if len(url) > MAX_URL_LENGTH:
        raise URLValidationError(url, f"URL 长度超过 {MAX_URL_LENGTH} 字符")

    try:
        parts = urlparse(url)
    except ValueError as e:
        raise URLValidationError(url, f"URL 解析失败: {e}") from e

    scheme = parts.scheme.lower()
    if not scheme:
        raise URLValidationError(url, "缺少协议 (http/https/file)")
    if scheme not in VALID_URL_SCHEMES:
        raise URLValidationError(url, f"不支持的协议: {parts.scheme}")
    if scheme == "file":
        if not parts.path:
            raise URLValidationError(url, "缺少文件路径")
    elif not parts.netloc:
        raise URLValidationError(url, "缺少域名")
    return url


def validate_count(
    value: int,
    name: str,
    min_value: int = 1,
    max_value: int | None = None,
) -> int:
    """检查整数参数的范围（布尔值不算整数）"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} 必须是整数")
    if value < min_value:
        raise ValidationError(f"{name} 必须至少为 {min_value}")
    if max_value is not None and value > max_value:
        raise ValidationError(f"{name} 不能超过 {max_value}")
    return value


def validate_min_occs(values: list[int] | tuple[int, ...]) -> list[int]:
    """去重并按从大到小排列阈值，生成时按这个顺序逐层执行"""
    if not values:
        raise ValidationError("出现次数阈值不能为空")
    for value in values:
        validate_count(value, "出现次数阈值", min_value=MIN_OCC_FLOOR)
    return sorted(set(values), reverse=True)


def safe_file_stem(text: str) -> str:
    """把配方 ID 等字符串转成可用的文件名主体

    配方 ID 本身只含字母、数字、``-`` 和 ``_``，通常原样返回。
    """
    stem = _UNSAFE_FILE_CHARS_RE.sub("_", text).strip(". ")
    return stem[:MAX_FILE_STEM_LENGTH] or "unnamed"
