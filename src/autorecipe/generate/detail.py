"""详情页配方生成

对每个列表页配方的每个详情页链接字段：抓取全部详情页，把它们的 body
拼接成一个合成页面，在合成页面上运行生成流水线得到详情页配方，再把
每个详情页配方接到列表页配方后面，逐条记录关联详情页。
"""

from __future__ import annotations

import copy

from lxml import etree

from ..common.exceptions import AutoRecipeError, FetchError, FieldNameCollisionError
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer
from ..fetch.cache import Cache, get_document
from ..fetch.document import Document
from ..scrape.detail import DetailURLFilter, detail_pages
from ..scrape.models import ConfigID, Recipe
from .options import GenerateOptions
from .selection import FieldSelector

logger = get_logger(__name__)

SYNTHETIC_ROOT = "htmls"
SYNTHETIC_PREFIX = f"body > {SYNTHETIC_ROOT}"


def merge_documents(documents: list[Document], url: str = "") -> Document:
    """把多个页面 body 的子节点拼接到 ``<html><body><htmls>`` 下"""
    html = etree.Element("html")
    body = etree.SubElement(html, "body")
    holder = etree.SubElement(body, SYNTHETIC_ROOT)
    for document in documents:
        page_body = document.body
        if page_body is None:
            continue
        for child in page_body:
            holder.append(copy.deepcopy(child))
    return Document.from_string(etree.tostring(html, encoding="unicode", method="html"), url)


def strip_synthetic_prefix(selector: str) -> str:
    """去掉合成页面引入的 ``body > htmls`` 前缀"""
    if selector.startswith(SYNTHETIC_PREFIX):
        selector = selector[len(SYNTHETIC_PREFIX):]
    if selector.startswith(" > "):
        selector = selector[len(" > "):]
    return selector.strip()


class DetailPageJoiner:
    """为列表页配方生成关联详情页的配方

    Args:
        cache: 页面缓存
        options: 列表页的生成参数
        selector: 字段选择方式
    """

    def __init__(
        self,
        cache: Cache,
        options: GenerateOptions,
        selector: FieldSelector | None = None,
        recognizer: DateTimeRecognizer | None = None,
    ):
        self.cache = cache
        self.options = options
        self.selector = selector
        self.recognizer = recognizer or DateTimeRecognizer()

    @property
    def min_records(self) -> int:
        # 设置了 min_records 时以它为准
        if self.options.min_records > 0:
            return self.options.min_records
        return self.options.detail.min_records

    def url_filter(self, page_url: str) -> DetailURLFilter:
        return DetailURLFilter(
            settings=self.options.detail,
            page_url=page_url,
            only_known_domains=self.options.only_known_domain_detail_pages,
        )

    def detail_urls(self, recipe: Recipe, field_name: str) -> list[str]:
        """配方预览记录中该字段指向的详情页链接（去重、排序）"""
        url_filter = self.url_filter(self.options.url)
        urls = set()
        for record in recipe.records:
            raw = record.get(field_name)
            if not isinstance(raw, str):
                continue
            url = url_filter.resolve(raw)
            if url is not None:
                urls.add(url)
        return sorted(urls)

    def configurations_for_all_detail_pages(self, page_recipes: dict[str, Recipe]) -> dict[str, Recipe]:
        """返回 ``{配方 ID: 合并后的配方}``

        Raises:
            FieldNameCollisionError: 详情页字段名哈希冲突
        """
        results: dict[str, Recipe] = {}
        seen_records: set[str] = set()
        for key in sorted(page_recipes):
            recipe = page_recipes[key]
            if not recipe.scrapers:
                continue
            seen_urls: list[list[str]] = []
            field_names = sorted(f.name for f in recipe.scrapers[0].detail_page_url_fields())
            for field_name in field_names:
                urls = self.detail_urls(recipe, field_name)
                if not urls:
                    logger.info(f"[Detail] {key}: 字段 {field_name} 没有可跟进的详情链接")
                    continue
                if urls in seen_urls:
                    logger.debug(f"[Detail] {key}: 字段 {field_name} 的链接与已处理字段相同，跳过")
                    continue
                seen_urls.append(urls)

                try:
                    joined = self.configurations_for_detail_field(recipe, field_name, urls)
                except FieldNameCollisionError:
                    raise
                except AutoRecipeError as e:
                    logger.warning(f"[Detail] {key}: 字段 {field_name} 处理失败，跳过: {e}")
                    continue

                for merged in joined:
                    records = merged.records_string()
                    if records in seen_records:
                        logger.info(f"[Detail] 详情记录与已有配方相同，剪枝: {merged.id}")
                        continue
                    seen_records.add(records)
                    results[str(merged.id)] = merged
        return results

    def fetch_documents(self, urls: list[str]) -> list[Document]:
        """获取详情页，失败的页面被跳过

        Raises:
            FetchError: 所有页面都获取失败
        """
        documents = []
        for url in urls:
            try:
                documents.append(get_document(self.cache, url))
            except FetchError as e:
                logger.warning(f"[Detail] 详情页获取失败: {e}")
        if not documents:
            raise FetchError(urls[0] if urls else "", "所有详情页都获取失败")
        return documents

    def configurations_for_detail_field(
        self,
        recipe: Recipe,
        field_name: str,
        urls: list[str],
    ) -> list[Recipe]:
        """为一个详情链接字段生成并关联详情页配方"""
        from .pipeline import configurations_for_document

        documents = self.fetch_documents(urls)
        synthetic = merge_documents(documents, self.options.url)
        logger.info(
            f"[Detail] {recipe.id}: 字段 {field_name} 在 {len(documents)} 个详情页上生成配方"
        )

        base_id = recipe.id
        sub_options = self.options.model_copy(
            update={
                "do_detail_pages": False,
                "require_string": "",
                "do_nexts": False,
                "config_id": ConfigID(slug=base_id.slug, id=base_id.id, field=field_name),
            }
        )
        sub_recipes = configurations_for_document(
            synthetic, sub_options, selector=self.selector, recognizer=self.recognizer
        )

        url_filter = self.url_filter(self.options.url)
        merged_recipes = []
        for sub_key in sorted(sub_recipes, key=lambda k: (len(k), k)):
            sub = sub_recipes[sub_key]
            sub_scraper = sub.scrapers[0].model_copy(deep=True)
            sub_scraper.selector = strip_synthetic_prefix(sub_scraper.selector)
            sub_scraper.url = ""
            sub_scraper.paginators = []

            merged = recipe.copy()
            merged.id = ConfigID(
                slug=base_id.slug,
                id=base_id.id,
                field=field_name,
                sub_id=sub.id.sub_id,
            )
            merged.scrapers.append(sub_scraper)
            joined = detail_pages(
                self.cache,
                merged.scrapers[0],
                sub_scraper,
                merged.records,
                field_name,
                url_filter,
                self.recognizer,
            )
            if joined < self.min_records:
                logger.info(f"[Detail] 仅关联 {joined} 条记录，少于 {self.min_records}，剪枝: {merged.id}")
                continue
            merged_recipes.append(merged)
        return merged_recipes
