"""已解析的页面

``Document`` 包装 lxml 文档树和页面 URL，提供基于 CSS 选择器的查询。
选择器通过 cssselect 转为 ``descendant::`` 前缀的 XPath，语义与
"在元素的所有后代中查找" 一致；编译结果按选择器缓存。
"""

from __future__ import annotations

from functools import lru_cache

import lxml.html
from cssselect import HTMLTranslator, SelectorError as CSSSelectorError
from lxml import etree

from ..common.exceptions import SelectorError

_translator = HTMLTranslator()


@lru_cache(maxsize=4096)
def compile_selector(selector: str) -> etree.XPath:
    """把 CSS 选择器编译为相对当前元素的 XPath

    Raises:
        SelectorError: 选择器语法错误
    """
    try:
        expr = _translator.css_to_xpath(selector, prefix="descendant::")
        return etree.XPath(expr)
    except (CSSSelectorError, etree.XPathSyntaxError) as e:
        raise SelectorError(selector, str(e)) from e


def select(element, selector: str) -> list:
    """在元素的后代中查找匹配选择器的元素（文档顺序）

    空选择器返回元素自身。
    """
    if not selector:
        return [element]
    try:
        return compile_selector(selector)(element)
    except etree.XPathEvalError as e:
        raise SelectorError(selector, str(e)) from e


class Document:
    """一个已解析的 HTML 页面"""

    def __init__(self, root, url: str = ""):
        self.root = root
        self.url = url

    @classmethod
    def from_string(cls, markup: str, url: str = "") -> "Document":
        if not markup or not markup.strip():
            markup = "<html><body></body></html>"
        parser = lxml.html.HTMLParser(encoding="utf-8")
        root = lxml.html.document_fromstring(markup.encode("utf-8"), parser=parser)
        return cls(root, url)

    def find(self, selector: str) -> list:
        """返回整个文档中匹配选择器的元素"""
        if not selector:
            return []
        return select(self.root, selector)

    def count(self, selector: str) -> int:
        """选择器的实时匹配数，选择器无效时为 0"""
        try:
            return len(self.find(selector))
        except SelectorError:
            return 0

    @property
    def title(self) -> str:
        return "".join(el.text_content() for el in self.root.iter("title"))

    @property
    def base_url(self) -> str:
        """``<base href>`` 优先，否则为页面 URL"""
        for el in self.root.iter("base"):
            href = (el.get("href") or "").strip()
            if href:
                return href
        return self.url

    @property
    def body(self):
        return self.root.find("body")

    def outer_html(self) -> str:
        return lxml.html.tostring(self.root, encoding="unicode")
