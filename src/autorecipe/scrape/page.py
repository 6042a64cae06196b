"""按配方抓取页面，支持翻页"""

from __future__ import annotations

from urllib.parse import urljoin

from ..common.exceptions import SelectorError
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer
from ..fetch.cache import Cache, get_document
from ..fetch.document import Document
from .extract import scrape_document
from .models import Paginator, Record, Scraper

logger = get_logger(__name__)


def next_page_url(paginator: Paginator, document: Document) -> str | None:
    """分页器在页面上指向的下一页链接"""
    try:
        nodes = document.find(paginator.location.selector)
    except SelectorError as e:
        logger.warning(f"[Scrape] 分页选择器无效: {e}")
        return None
    if not nodes:
        return None
    raw = (nodes[0].get(paginator.location.attr or "href") or "").strip()
    if not raw or raw.lower().startswith("javascript:") or raw.startswith("#"):
        return None
    return urljoin(document.base_url, raw)


def scrape_page(
    cache: Cache,
    scraper: Scraper,
    recognizer: DateTimeRecognizer | None = None,
    max_pages: int | None = None,
) -> list[Record]:
    """抓取 scraper.url，并沿第一个分页器翻页

    Args:
        max_pages: 最多抓取的页数，默认取分页器的 max_pages（为 0 时只抓一页）

    Raises:
        FetchError: 第一页获取失败
    """
    paginator = scraper.paginators[0] if scraper.paginators else None
    if max_pages is None:
        max_pages = paginator.max_pages if paginator else 1
    max_pages = max(max_pages, 1)

    records: list[Record] = []
    seen: set[str] = set()
    url: str | None = scraper.url
    while url and len(seen) < max_pages:
        seen.add(url)
        document = get_document(cache, url)
        page_records = scrape_document(scraper, document, recognizer)
        logger.info(f"[Scrape] {url}: {len(page_records)} 条记录")
        records.extend(page_records)

        if paginator is None:
            break
        url = next_page_url(paginator, document)
        if url in seen:
            break
    return records
