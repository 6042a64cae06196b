"""配方生成的运行参数

所有开关都是 ``GenerateOptions`` 的显式字段，由调用方传入流水线入口，
不存在进程级全局开关。
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..common.config import Config, DetailPageConfig, PullbackConfig
from ..common.utils.slug import make_url_slug
from ..scrape.models import ConfigID


class GenerateOptions(BaseModel):
    """一次生成运行的参数"""

    url: str = ""
    # 批处理模式：不交互，选择全部候选字段
    batch: bool = True
    min_occs: list[int] = Field(default_factory=lambda: [5, 10, 20])
    only_varying_fields: bool = True
    min_records: int = 0
    # 预览输出中必须包含的字符串
    require_string: str = ""
    require_dates: bool = False
    require_dates_ratio: float = 0.5
    # 只保留带详情页链接的配方
    do_detail_pages: bool = False
    only_known_domain_detail_pages: bool = False
    # 用下一页的记录扩展配方
    do_nexts: bool = False
    do_pruning: bool = True
    render_js: bool = False
    max_recursion_depth: int = 10
    pagination_min_occ: int = 3
    date_field_threshold: float = 0.25
    pullback: PullbackConfig = Field(default_factory=PullbackConfig)
    detail: DetailPageConfig = Field(default_factory=DetailPageConfig)
    config_id: ConfigID | None = None

    def effective_config_id(self) -> ConfigID:
        return self.config_id or ConfigID(slug=make_url_slug(self.url))

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "GenerateOptions":
        """用全局配置的默认值构建，overrides 中的 None 值被忽略"""
        values = {
            "min_occs": list(config.generate.min_occs),
            "only_varying_fields": config.generate.only_varying_fields,
            "min_records": config.generate.min_records,
            "do_pruning": config.generate.do_pruning,
            "render_js": config.fetch.render_js,
            "max_recursion_depth": config.generate.max_recursion_depth,
            "pagination_min_occ": config.generate.pagination_min_occ,
            "date_field_threshold": config.generate.date_field_threshold,
            "require_dates_ratio": config.generate.require_dates_ratio,
            "pullback": config.pullback.model_copy(),
            "detail": config.detail.model_copy(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
