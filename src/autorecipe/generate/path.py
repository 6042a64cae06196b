"""DOM 路径模型

``Node`` 表示一步 DOM 路径：标签名、类名和伪类（实际只有 ``nth-child(k)``）。
``Path`` 是从 body 开始的不可变节点序列，字符串形式就是可直接交给
cssselect 的子元素组合选择器。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

import Levenshtein

CHILD_COMBINATOR = " > "

_NTH_CHILD_RE = re.compile(r"^nth-child\((\d+)\)$")
_IDENT_CHAR_RE = re.compile(r"[A-Za-z0-9_\-]")


def escape_css_ident(ident: str) -> str:
    """按 CSS 规则转义标识符

    特殊字符前加反斜杠；数字开头改为十六进制转义（``\\3N ``）。
    非 ASCII 字符在 CSS 标识符中合法，保持原样。
    """
    out: list[str] = []
    for i, ch in enumerate(ident):
        leading_digit = ch.isdigit() and ch.isascii() and (
            i == 0 or (i == 1 and ident[0] == "-")
        )
        if leading_digit:
            out.append(f"\\{ord(ch):x} ")
        elif _IDENT_CHAR_RE.match(ch) or not ch.isascii():
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def nth_child_pseudo(k: int) -> str:
    return f"nth-child({k})"


def parse_nth_child(pseudo: str) -> int | None:
    """解析 ``nth-child(k)``，不是该形式时返回 None"""
    m = _NTH_CHILD_RE.match(pseudo)
    return int(m.group(1)) if m else None


@dataclass(frozen=True)
class Node:
    tag: str
    classes: tuple[str, ...] = ()
    pseudo_classes: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = escape_css_ident(self.tag)
        for cls in self.classes:
            text += "." + escape_css_ident(cls)
        if self.pseudo_classes:
            text += ":" + ":".join(self.pseudo_classes)
        return text

    def with_pseudo(self, pseudo_classes: tuple[str, ...] = ()) -> "Node":
        return replace(self, pseudo_classes=tuple(pseudo_classes))

    def with_classes(self, classes: tuple[str, ...]) -> "Node":
        return replace(self, classes=tuple(classes))

    def nth_child(self) -> int | None:
        for pseudo in self.pseudo_classes:
            k = parse_nth_child(pseudo)
            if k is not None:
                return k
        return None

    def same_structure(self, other: "Node") -> bool:
        """标签、类名集合与伪类都相同（类名顺序不影响匹配）"""
        return (
            self.tag == other.tag
            and set(self.classes) == set(other.classes)
            and self.pseudo_classes == other.pseudo_classes
        )


class Path(tuple):
    """不可变的节点序列"""

    __slots__ = ()

    def __new__(cls, nodes=()):
        return super().__new__(cls, tuple(nodes))

    def __getitem__(self, item):
        result = super().__getitem__(item)
        if isinstance(item, slice):
            return Path(result)
        return result

    def __str__(self) -> str:
        return CHILD_COMBINATOR.join(str(node) for node in self)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    def last(self) -> Node | None:
        return self[-1] if self else None

    def with_node(self, node: Node) -> "Path":
        return Path(tuple(self) + (node,))

    def distance(self, other: "Path") -> int:
        """两条路径字符串的编辑距离"""
        return Levenshtein.distance(str(self), str(other))
