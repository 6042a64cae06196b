"""pytest 全局配置和 fixtures

提供测试页面、内存中的假 fetcher 和页面缓存。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from autorecipe.common.exceptions import FetchError  # noqa: E402
from autorecipe.fetch.cache import FetchCache, MemoryCache  # noqa: E402


LIST_URL = "https://example.com/events"


def item_list_page(titles: list[str], hrefs: list[str] | None = None, extra: str = "") -> str:
    """``div.list`` 下若干 ``div.item`` 的列表页"""
    hrefs = hrefs or [f"/e/{i + 1}" for i in range(len(titles))]
    items = "\n".join(
        f'    <div class="item"><span class="title">{title}</span>'
        f'<a href="{href}">Details</a></div>'
        for title, href in zip(titles, hrefs)
    )
    return (
        "<html><head><title>Events</title></head><body>\n"
        '  <div class="list">\n'
        f"{items}\n"
        "  </div>\n"
        f"{extra}"
        "</body></html>"
    )


def detail_page(title: str, when: str, venue: str) -> str:
    return (
        f"<html><head><title>{title}</title></head><body>\n"
        '  <div class="header"><a href="/">Home</a></div>\n'
        '  <div class="event">\n'
        f'    <h1 class="name">{title}</h1>\n'
        f'    <p class="when">{when}</p>\n'
        f'    <p class="venue">{venue}</p>\n'
        "  </div>\n"
        "</body></html>"
    )


class FakeFetcher:
    """按 URL 返回预置页面，记录每次请求"""

    def __init__(self, pages: dict[str, str] | None = None):
        self.pages = dict(pages or {})
        self.calls: list[str] = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "HTTP 404")
        return self.pages[url]


# ============================================================================
# 页面 Fixtures
# ============================================================================

@pytest.fixture
def list_url():
    return LIST_URL


@pytest.fixture
def make_list_page():
    return item_list_page


@pytest.fixture
def make_detail_page():
    return detail_page


@pytest.fixture
def titles():
    return ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]


@pytest.fixture
def list_html(titles):
    """五条记录的列表页"""
    return item_list_page(titles)


@pytest.fixture
def list_html_with_next(titles):
    """带 "Next" 翻页链接的列表页"""
    return item_list_page(titles, extra='  <div class="pager"><a href="/events?page=2">Next</a></div>\n')


@pytest.fixture
def second_page_html():
    return item_list_page(
        ["Foxtrot", "Golf", "Hotel", "India", "Juliet"],
        [f"/e/{i}" for i in range(6, 11)],
    )


@pytest.fixture
def static_href_html(titles):
    """所有记录的链接都相同"""
    return item_list_page(titles, ["/same"] * len(titles))


# ============================================================================
# 缓存 Fixtures
# ============================================================================

@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def cache(fetcher):
    """内存缓存 + 假 fetcher"""
    return MemoryCache(FetchCache(fetcher))
