"""簇展开

从根选择器和候选字段出发生成一个配方，在页面上预览，然后把候选字段按
比根选择器深一层的路径分簇，递归生成嵌套配方。

每次递归的根选择器都比上一层长一个节点，直到没有候选路径超出当前根。
结果以有序映射返回，由调用方合并，不共享可变累加器。
"""

from __future__ import annotations

from ..common.constants import DATE_TIME_FIELD_SUFFIX
from ..common.exceptions import ExtractionError
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer
from ..fetch.document import Document
from ..scrape.extract import scrape_document
from ..scrape.models import ConfigID, ElementLocation, Paginator, Recipe, Scraper
from .classify import ExampleCache, build_fields, is_detail_url_location
from .locations import LocationProps
from .options import GenerateOptions
from .path import Path
from .root import find_root

logger = get_logger(__name__)

_LETTERS = "abcdefghijklmnopqrstuvwxyz"


def merge_results(
    into: dict[str, Recipe],
    new: dict[str, Recipe],
    do_pruning: bool = True,
) -> dict[str, Recipe]:
    """按顺序合并结果；开启剪枝时丢弃预览记录与已有配方相同的配方"""
    seen = {r.records_string() for r in into.values()} if do_pruning else set()
    for key, recipe in new.items():
        if key in into:
            continue
        if do_pruning:
            records = recipe.records_string()
            if records in seen:
                logger.info(f"[ClusterExpander] 预览记录与已有配方相同，剪枝: {key}")
                continue
            seen.add(records)
        into[key] = recipe
    return into


def build_paginators(
    next_pages: list[LocationProps],
    pagination: list[LocationProps] | None = None,
) -> list[Paginator]:
    """由 "下一页" 链接生成分页器，页面上没有时改用普通分页链接"""
    sources = list(next_pages) or list(pagination or [])
    selectors = sorted({str(lp.path) for lp in sources})
    return [Paginator(location=ElementLocation(selector=s, attr="href")) for s in selectors]


def find_clusters(locations: list[LocationProps], root: Path) -> dict[str, list[LocationProps]]:
    """按比根选择器深一层的路径分簇"""
    new_len = len(root) + 1
    clusters: dict[str, list[LocationProps]] = {}
    for lp in locations:
        if new_len > len(lp.path):
            continue
        clusters.setdefault(str(lp.path[:new_len]), []).append(lp)
    return clusters


def _position_letter(i: int) -> str:
    # 超过 26 个簇时继续使用 aa、ab...
    letters = ""
    i += 1
    while i > 0:
        i, rem = divmod(i - 1, len(_LETTERS))
        letters = _LETTERS[rem] + letters
    return letters


class ClusterExpander:
    """在一个页面上递归展开候选配方

    Args:
        document: 用于回退根选择器和预览记录的页面
        options: 生成参数
        recognizer: 日期识别器
    """

    def __init__(
        self,
        document: Document,
        options: GenerateOptions,
        recognizer: DateTimeRecognizer | None = None,
    ):
        self.document = document
        self.options = options
        self.recognizer = recognizer or DateTimeRecognizer()
        self.examples = ExampleCache(self.recognizer)

    def expand(
        self,
        config_id: ConfigID,
        locations: list[LocationProps],
        next_pages: list[LocationProps] | None = None,
        pagination: list[LocationProps] | None = None,
        root: Path | None = None,
        depth: int = 0,
    ) -> dict[str, Recipe]:
        """展开一个节点及其子簇，返回 ``{配方 ID: 配方}``

        分页候选原样传给每一层子簇。
        """
        if depth >= self.options.max_recursion_depth:
            logger.warning(
                f"[ClusterExpander] 达到最大递归深度 {self.options.max_recursion_depth}，停止展开: {config_id}"
            )
            return {}
        if not locations:
            return {}

        if root is None:
            root = find_root(locations, self.document, self.options.pullback)
            # 记录内部的链接不是分页链接
            pagination = [lp for lp in pagination or [] if str(lp.path[: len(root)]) != str(root)]
        pagination = pagination or []
        next_pages = next_pages or []

        results: dict[str, Recipe] = {}
        recipe = self._build_recipe(config_id, locations, next_pages, pagination, root)
        if recipe is None:
            return results
        if self._include(recipe):
            results[str(config_id)] = recipe

        clusters = find_clusters(locations, root)
        for i, key in enumerate(sorted(clusters)):
            cluster = clusters[key]
            child_root = cluster[0].path[: len(root) + 1]
            child = self.expand(
                config_id.child(_position_letter(i)),
                cluster,
                next_pages,
                pagination,
                child_root,
                depth + 1,
            )
            merge_results(results, child, self.options.do_pruning)
        return results

    def _build_recipe(
        self,
        config_id: ConfigID,
        locations: list[LocationProps],
        next_pages: list[LocationProps],
        pagination: list[LocationProps],
        root: Path,
    ) -> Recipe | None:
        scraper = Scraper(
            name=str(config_id),
            url=self.options.url,
            selector=str(root),
            fields=build_fields(locations, root, self.examples, self.options.date_field_threshold),
            paginators=build_paginators(next_pages, pagination),
            render_js=self.options.render_js,
        )

        if self.options.do_detail_pages and not any(
            is_detail_url_location(lp, self.options.detail.skip_extensions) for lp in locations
        ):
            logger.info(f"[ClusterExpander] 没有详情页链接字段，排除: {config_id}")
            return None

        try:
            records = scrape_document(scraper, self.document, self.recognizer)
        except ExtractionError as e:
            logger.warning(f"[ClusterExpander] 预览失败，排除: {config_id}: {e}")
            records = []
        logger.debug(f"[ClusterExpander] {config_id}: 根选择器 {str(root)!r}, 预览 {len(records)} 条记录")
        return Recipe(id=config_id, scrapers=[scraper], records=records)

    def _include(self, recipe: Recipe) -> bool:
        opts = self.options
        records = recipe.records
        if not records:
            logger.info(f"[ClusterExpander] 没有预览记录，排除: {recipe.id}")
            return False
        if opts.require_string and opts.require_string not in recipe.records_string():
            logger.info(f"[ClusterExpander] 预览中没有要求的字符串，排除: {recipe.id}")
            return False
        if opts.require_dates:
            with_dates = sum(
                1 for rec in records if any(k.endswith(DATE_TIME_FIELD_SUFFIX) for k in rec)
            )
            if with_dates / len(records) < opts.require_dates_ratio:
                logger.info(f"[ClusterExpander] 带日期的记录不足，排除: {recipe.id}")
                return False
        if opts.min_records > 0 and len(records) < opts.min_records:
            logger.info(
                f"[ClusterExpander] 记录数 {len(records)} 少于 {opts.min_records}，排除: {recipe.id}"
            )
            return False
        return True
