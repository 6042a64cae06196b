"""页面分析器

对页面标记做一次前向扫描，维护当前路径栈，为每个文本节点和每个白名单
属性产生一个候选位置。启用 ``find_next`` 时，链接会被缓冲到闭合标签，
再归类为 "下一页" 链接或普通分页链接。

扫描使用 lxml 的事件式 HTML 解析器（``etree.HTMLParser(target=...)``），
不构建文档树。
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field

from lxml import etree

from ..common.constants import (
    ATTR_VOID_TAGS,
    ATTRS_BY_TAG,
    COUNTED_VOID_TAGS,
    NEXT_PAGE_LABEL,
    SKIP_TEXT_TAGS,
    VOID_TAGS,
)
from ..common.logger import get_logger
from .locations import LocationManager, LocationProps
from .path import Node, Path, nth_child_pseudo

logger = get_logger(__name__)

_SPACES_RE = re.compile(r"\s+")


def split_classes(value: str) -> tuple[str, ...]:
    """拆分 class 属性，丢弃包含 "." 的类名"""
    return tuple(c for c in _SPACES_RE.split(value.strip()) if c and "." not in c)


@dataclass
class _OpenAnchor:
    attrs: dict[str, str]
    depth: int  # 入栈后的栈深度
    mark: int  # 进入链接前 locations 的长度
    text: list[str] = field(default_factory=list)


class Analyzer:
    """分析一个页面，产生三组原始候选位置

    Attributes:
        locations: 字段候选
        pagination: 普通分页链接候选
        next_pages: "下一页" 链接候选
    """

    def __init__(self, find_next: bool = True):
        self.find_next = find_next
        self.locations = LocationManager()
        self.pagination = LocationManager()
        self.next_pages = LocationManager()

        self._stack: list[Node] = []
        self._num_children: dict[Path, int] = defaultdict(int)
        self._child_nodes: dict[Path, list[Node]] = defaultdict(list)
        self._in_body = False
        self._done = False
        self._text: list[str] = []
        self._anchor: _OpenAnchor | None = None

    def parse(self, markup: str) -> "Analyzer":
        if not markup or not markup.strip():
            return self
        parser = etree.HTMLParser(target=self, encoding="utf-8")
        try:
            parser.feed(markup.encode("utf-8"))
            parser.close()
        except etree.LxmlError as e:
            # 解析出错时保留已经得到的候选
            logger.warning(f"[Analyzer] 标记解析中断: {e}")
            self.close()
        logger.debug(
            f"[Analyzer] 原始候选: 字段 {len(self.locations)}, "
            f"分页 {len(self.pagination)}, 下一页 {len(self.next_pages)}"
        )
        return self

    # ------------------------------------------------------------------
    # lxml parser target 接口
    # ------------------------------------------------------------------

    def start(self, tag, attrib) -> None:
        self._flush_text()
        if self._done or not isinstance(tag, str):
            return
        tag = tag.lower()
        if not self._in_body:
            if tag == "body":
                self._in_body = True
                self._open(Node("body"), Path())
            return

        parent = Path(self._stack)
        if tag in COUNTED_VOID_TAGS:
            self._num_children[parent] += 1
            self._child_nodes[parent].append(Node(tag))
            return
        if tag in VOID_TAGS and tag not in ATTR_VOID_TAGS:
            # 不计入子节点，但要参与 nth-child 序号
            self._child_nodes[parent].append(Node(tag))
            return

        classes = split_classes(attrib.get("class", ""))
        node = Node(tag, classes, self._pseudo_for(parent, tag, classes))
        self._num_children[parent] += 1
        self._child_nodes[parent].append(Node(tag, classes))

        attrs = self._allowed_attrs(tag, attrib)
        if tag in ATTR_VOID_TAGS:
            self._add_attr_candidates(parent.with_node(node), attrs)
            return

        mark = len(self.locations)
        path = self._open(node, parent)
        self._add_attr_candidates(path, attrs)
        if self.find_next and tag == "a" and attrs.get("href"):
            self._anchor = _OpenAnchor(attrs=attrs, depth=len(self._stack), mark=mark)

    def end(self, tag) -> None:
        self._flush_text()
        if self._done or not self._in_body or not isinstance(tag, str):
            return
        tag = tag.lower()
        if tag in VOID_TAGS:
            return
        if all(node.tag != tag for node in self._stack):
            return
        while self._stack:
            if self._anchor is not None and len(self._stack) == self._anchor.depth:
                self._close_anchor()
            path = Path(self._stack)
            node = self._stack.pop()
            self._num_children.pop(path, None)
            self._child_nodes.pop(path, None)
            if node.tag == tag:
                break
        if tag == "body" or not self._stack:
            self._done = True

    def data(self, data) -> None:
        if self._in_body and not self._done:
            self._text.append(data)

    def comment(self, text) -> None:
        self._flush_text()

    def close(self) -> "Analyzer":
        self._flush_text()
        return self

    # ------------------------------------------------------------------

    def _open(self, node: Node, parent: Path) -> Path:
        self._stack.append(node)
        path = parent.with_node(node)
        self._num_children[path] = 0
        self._child_nodes[path] = []
        return path

    def _pseudo_for(self, parent: Path, tag: str, classes: tuple[str, ...]) -> tuple[str, ...]:
        """同一父路径下已有相同标签和类名的兄弟节点时，给出 nth-child 伪类"""
        siblings = self._child_nodes[parent]
        for sibling in siblings:
            if sibling.tag == tag and sibling.classes == classes:
                return (nth_child_pseudo(len(siblings) + 1),)
        return ()

    @staticmethod
    def _allowed_attrs(tag: str, attrib) -> dict[str, str]:
        allowed = ATTRS_BY_TAG.get(tag, ())
        attrs: dict[str, str] = {}
        for key, value in attrib.items():
            if key in allowed:
                attrs[key] = (value or "").strip()
        return attrs

    def _add_attr_candidates(self, path: Path, attrs: dict[str, str]) -> None:
        for key, value in attrs.items():
            if not value:
                continue
            self.locations.append(LocationProps(path=path, examples=[value], attr=key))

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = "".join(self._text)
        self._text = []
        if self._done or not self._stack:
            return
        if self._stack[-1].tag in SKIP_TEXT_TAGS:
            return

        path = Path(self._stack)
        trimmed = text.strip()
        if trimmed:
            self.locations.append(
                LocationProps(path=path, examples=[trimmed], text_index=self._num_children[path])
            )
        self._num_children[path] += 1
        if self._anchor is not None:
            self._anchor.text.append(text)

    def _close_anchor(self) -> None:
        anchor = self._anchor
        self._anchor = None
        path = Path(self._stack)
        lp = LocationProps(path=path, examples=[anchor.attrs.get("href", "")], attr="href")

        label = anchor.attrs.get("aria-label", "").lower()
        text = "".join(anchor.text).strip().lower()
        if label == NEXT_PAGE_LABEL or text == NEXT_PAGE_LABEL:
            # "下一页" 链接不作为字段候选
            del self.locations[anchor.mark:]
            self.next_pages.append(lp)
            logger.debug(f"[Analyzer] 发现下一页链接: {str(path)!r}")
        else:
            self.pagination.append(lp)


def analyze(markup: str, find_next: bool = True) -> Analyzer:
    return Analyzer(find_next=find_next).parse(markup)
