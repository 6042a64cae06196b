"""字段命名

生成的字段名只取决于规范化后的选择器路径、属性名和文本节点序号::

    F<hash>-<attr>-<index>    属性取值，如 Fa1b2c3d4-href-0
    F<hash>--<index>          文本内容，属性为空时是双连字符

``<hash>`` 是路径字符串去掉首尾空白后的 CRC32 校验值（8 位小写十六进制）。
``<index>`` 是元素内文本节点的序号，不是记录在列表中的位置；
同一列表页的所有记录使用相同的字段名。
"""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass

FIELD_NAME_RE = re.compile(r"^F([0-9a-f]{8})-([a-z_-]*)-(\d+)$")


def compute_field_hash(selector_path: str) -> str:
    """返回选择器路径的 8 位十六进制 CRC32"""
    normalized = selector_path.strip()
    return f"{zlib.crc32(normalized.encode('utf-8')) & 0xFFFFFFFF:08x}"


def generate_field_name(selector_path: str, attr: str, text_index: int) -> str:
    field_hash = compute_field_hash(selector_path)
    return f"F{field_hash}-{attr}-{text_index}"


@dataclass(frozen=True)
class FieldNameComponents:
    hash: str
    attribute: str
    text_index: int


def parse_field_name(name: str) -> FieldNameComponents | None:
    """解析生成的字段名，不符合格式时返回 None"""
    m = FIELD_NAME_RE.match(name)
    if not m:
        return None
    return FieldNameComponents(hash=m.group(1), attribute=m.group(2), text_index=int(m.group(3)))
