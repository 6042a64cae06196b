"""详情页关联

列表页记录中的 url 字段指向详情页。这里负责判断链接是否值得跟进，
以及用详情页配方抽取每条记录的详情页，把唯一的一条详情记录合并回原记录。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from posixpath import splitext
from urllib.parse import urljoin, urlparse

from ..common.config import DetailPageConfig
from ..common.constants import DETAIL_URL_SCHEMES, URL_FIELD_NAME
from ..common.exceptions import ExtractionError, FetchError
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer
from ..common.utils.slug import url_domain_label
from ..fetch.cache import Cache, get_document
from .extract import scrape_document
from .models import Record, Scraper

logger = get_logger(__name__)


def url_extension(url: str) -> str:
    """链接路径的扩展名（小写，含点）"""
    return splitext(urlparse(url).path)[1].lower()


@dataclass
class DetailURLFilter:
    """详情页链接过滤规则

    Args:
        settings: 屏蔽域名、已知域名和跳过的扩展名
        page_url: 列表页 URL，用于解析相对链接和判断同域
        only_known_domains: 只接受与列表页同域或已知域名的链接
    """

    settings: DetailPageConfig
    page_url: str
    only_known_domains: bool = False
    _page_domain: str = field(init=False, default="")

    def __post_init__(self) -> None:
        self._page_domain = url_domain_label(self.page_url)

    def has_skipped_extension(self, url: str) -> bool:
        return url_extension(url) in self.settings.skip_extensions

    def resolve(self, raw: str) -> str | None:
        """解析为绝对链接，不应跟进时返回 None"""
        raw = (raw or "").strip()
        if not raw or self.has_skipped_extension(raw):
            return None
        url = urljoin(self.page_url, raw)
        if urlparse(url).scheme.lower() not in DETAIL_URL_SCHEMES:
            return None
        domain = url_domain_label(url)
        if domain in self.settings.blocked_domains:
            return None
        if self.only_known_domains and domain != self._page_domain and domain not in self.settings.known_domains:
            return None
        return url


def detail_pages(
    cache: Cache,
    scraper: Scraper,
    sub_scraper: Scraper,
    records: list[Record],
    field_name: str,
    url_filter: DetailURLFilter,
    recognizer: DateTimeRecognizer | None = None,
) -> int:
    """用详情页配方扩展记录

    每条记录取出 ``field_name`` 指向的详情页，详情页恰好得到一条记录时，
    把它的字段（``Aurl`` 除外）以 ``<field_name>__<key>`` 写回原记录。
    获取失败或详情记录数不为 1 的记录原样跳过。

    Returns:
        成功关联的记录数
    """
    joined = 0
    for record in records:
        raw = record.get(field_name)
        if not isinstance(raw, str):
            continue
        url = url_filter.resolve(raw)
        if url is None:
            logger.debug(f"[Detail] 跳过详情链接: {raw!r}")
            continue

        try:
            document = get_document(cache, url)
            sub_records = scrape_document(sub_scraper, document, recognizer)
        except (FetchError, ExtractionError) as e:
            logger.warning(f"[Detail] {scraper.name}: 详情页抽取失败，跳过记录: {e}")
            continue

        if len(sub_records) != 1:
            logger.debug(f"[Detail] {url} 得到 {len(sub_records)} 条详情记录，跳过")
            continue

        for key, value in sub_records[0].items():
            if key == URL_FIELD_NAME:
                continue
            record[f"{field_name}__{key}"] = value
        joined += 1
    return joined
