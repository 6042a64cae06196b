"""URL 规范化工具

缓存文件名、配方 ID 和详情页域名判断都基于这里的规范化结果。
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import urlparse

_SCHEME_PREFIXES = ("file://", "http://", "https://")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# 常见的二级公共后缀，如 example.co.uk
_SECOND_LEVEL_SUFFIXES = frozenset({"ac", "co", "com", "edu", "gov", "net", "org"})


def trim_url_scheme(url: str) -> str:
    """去掉协议和 www. 前缀并转为小写"""
    url = url.strip()
    lowered = url.lower()
    for prefix in _SCHEME_PREFIXES:
        if lowered.startswith(prefix):
            url = url[len(prefix):]
            break
    if url.lower().startswith("www."):
        url = url[4:]
    return url.lower()


def make_url_slug(url: str) -> str:
    """把 URL 转成可用作文件名的 slug

    >>> make_url_slug("https://www.Example.com/events?page=2")
    'example-com-events-page-2'
    """
    text = unicodedata.normalize("NFKD", trim_url_scheme(url))
    text = text.encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM_RE.sub("-", text).strip("-")


def host_of(url: str) -> str:
    """返回 URL 的主机名（小写，不含 www.）"""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def domain_label(host: str) -> str:
    """返回主机名中可注册域名的主体部分

    >>> domain_label("en.wikipedia.org")
    'wikipedia'
    >>> domain_label("tickets.example.co.uk")
    'example'
    """
    labels = [label for label in host.lower().split(".") if label]
    if not labels:
        return ""
    if len(labels) == 1:
        return labels[0]
    if (
        len(labels) >= 3
        and len(labels[-1]) == 2
        and labels[-2] in _SECOND_LEVEL_SUFFIXES
    ):
        return labels[-3]
    return labels[-2]


def url_domain_label(url: str) -> str:
    return domain_label(host_of(url))
