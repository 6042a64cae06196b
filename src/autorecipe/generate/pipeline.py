"""配方生成流水线

对外入口：

- ``analyze_page``: 分析一个页面，得到已命名、已过滤、已选择的候选
- ``configurations_for_document`` / ``configurations_for_page``: 按出现次数阈值分层生成配方
- ``extend_recipes_with_next_pages``: 用下一页的记录扩展配方
- ``generate``: 列表页配方加详情页配方
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..common.exceptions import (
    FetchError,
    FieldNameCollisionError,
    GenerationError,
    NoFieldsSelectedError,
    ValidationError,
)
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer
from ..fetch.cache import Cache, get_document
from ..fetch.document import Document
from ..scrape.extract import scrape_document
from ..scrape.models import Recipe
from ..scrape.page import next_page_url
from .analyzer import analyze
from .detail import DetailPageJoiner
from .expander import ClusterExpander, merge_results
from .locations import (
    LocationManager,
    filter_below_min_count,
    filter_static_fields,
    set_field_names,
    squash,
)
from .options import GenerateOptions
from .selection import FieldSelector, SelectAll

logger = get_logger(__name__)


@dataclass
class PageAnalysis:
    """一个阈值层级上的候选"""

    locations: LocationManager
    next_pages: LocationManager = field(default_factory=LocationManager)
    pagination: LocationManager = field(default_factory=LocationManager)


def analyze_page(
    markup: str,
    options: GenerateOptions,
    min_occ: int,
    selector: FieldSelector | None = None,
) -> PageAnalysis | None:
    """分析页面并选择字段

    Returns:
        没有候选时返回 None

    Raises:
        NoFieldsSelectedError: 交互模式下没有选择任何字段
        FieldNameCollisionError: 两条不同路径的字段名哈希相同
    """
    config_id = options.effective_config_id()
    find_next = not config_id.field and not config_id.sub_id
    analyzer = analyze(markup, find_next=find_next)

    locations = squash(analyzer.locations, min_occ)
    pagination = squash(analyzer.pagination, options.pagination_min_occ)
    set_field_names(locations)
    set_field_names(pagination)

    locations = filter_below_min_count(locations, min_occ)
    pagination = filter_below_min_count(pagination, options.pagination_min_occ)
    if options.only_varying_fields:
        locations = filter_static_fields(locations)
        pagination = filter_static_fields(pagination)

    if not locations:
        logger.info(f"[Generate] 出现次数至少 {min_occ} 的字段候选为空")
        return None
    for line in locations.debug_lines():
        logger.debug(f"[Generate] 候选 {line}")

    selector = selector or SelectAll()
    if options.batch:
        selector = SelectAll()
    chosen = LocationManager(selector.select_fields(locations))
    if not chosen:
        raise NoFieldsSelectedError(min_occ)

    next_pages = LocationManager(analyzer.next_pages) if find_next else LocationManager()
    return PageAnalysis(locations=chosen, next_pages=next_pages, pagination=pagination)


def configurations_for_document(
    document: Document,
    options: GenerateOptions,
    cache: Cache | None = None,
    selector: FieldSelector | None = None,
    recognizer: DateTimeRecognizer | None = None,
) -> dict[str, Recipe]:
    """在一个已解析的页面上按阈值分层生成配方

    阈值从大到小依次执行，各层结果按预览记录去重合并。
    """
    base_id = options.effective_config_id()
    recognizer = recognizer or DateTimeRecognizer()
    markup = document.outer_html()

    results: dict[str, Recipe] = {}
    for min_occ in sorted(set(options.min_occs), reverse=True):
        tier_id = base_id.with_position(f"{min_occ:02d}a")
        try:
            analysis = analyze_page(markup, options, min_occ, selector)
            if analysis is None:
                continue
            expander = ClusterExpander(document, options, recognizer)
            tier = expander.expand(
                tier_id, analysis.locations, analysis.next_pages, analysis.pagination
            )
        except FieldNameCollisionError:
            raise
        except (FetchError, ValidationError, GenerationError) as e:
            logger.warning(f"[Generate] {tier_id}: 本层生成失败，跳过: {e}")
            continue
        logger.debug(f"[Generate] {tier_id}: 得到 {len(tier)} 个配方")
        merge_results(results, tier, options.do_pruning)

    if cache is not None and options.do_nexts:
        extend_recipes_with_next_pages(cache, options, results, recognizer)

    if not results and options.min_records > 0:
        logger.warning(f"[Generate] {base_id}: 所有配方的记录数都少于 {options.min_records}")
    return results


def configurations_for_page(
    cache: Cache,
    options: GenerateOptions,
    selector: FieldSelector | None = None,
) -> dict[str, Recipe]:
    """获取 ``options.url`` 并生成配方

    Raises:
        FetchError: 页面获取失败
    """
    document = get_document(cache, options.url)
    logger.info(f"[Generate] 分析页面: {options.url}")
    return configurations_for_document(document, options, cache, selector)


def extend_recipes_with_next_pages(
    cache: Cache,
    options: GenerateOptions,
    recipes: dict[str, Recipe],
    recognizer: DateTimeRecognizer | None = None,
) -> None:
    """抓取每个配方的下一页，把记录追加到预览中

    只保留确实产生了记录的分页器。
    """
    if not recipes:
        return
    document = get_document(cache, options.url)
    for key, recipe in recipes.items():
        scraper = recipe.scrapers[0]
        if not scraper.paginators:
            continue

        kept = []
        for paginator in scraper.paginators:
            url = next_page_url(paginator, document)
            if url is None or url == options.url:
                continue
            try:
                next_doc = get_document(cache, url)
            except FetchError as e:
                logger.warning(f"[Generate] {key}: 下一页获取失败: {e}")
                continue
            records = scrape_document(scraper, next_doc, recognizer)
            if records:
                recipe.records.extend(records)
                kept.append(paginator)
                logger.debug(f"[Generate] {key}: 下一页 {url} 增加 {len(records)} 条记录")
        scraper.paginators = kept


@dataclass
class GenerationResult:
    """一次生成运行的结果"""

    page_recipes: dict[str, Recipe] = field(default_factory=dict)
    detail_recipes: dict[str, Recipe] = field(default_factory=dict)

    def all(self) -> dict[str, Recipe]:
        return {**self.page_recipes, **self.detail_recipes}

    @property
    def total(self) -> int:
        return len(self.page_recipes) + len(self.detail_recipes)


def generate(
    options: GenerateOptions,
    cache: Cache,
    selector: FieldSelector | None = None,
) -> GenerationResult:
    """生成列表页配方；开启详情页模式时再生成关联详情页的配方"""
    page_recipes = configurations_for_page(cache, options, selector)
    result = GenerationResult(page_recipes=page_recipes)
    if options.do_detail_pages and page_recipes:
        joiner = DetailPageJoiner(cache, options, selector)
        result.detail_recipes = joiner.configurations_for_all_detail_pages(page_recipes)
    logger.info(
        f"[Generate] 完成: {len(result.page_recipes)} 个列表页配方, "
        f"{len(result.detail_recipes)} 个详情页配方"
    )
    return result
