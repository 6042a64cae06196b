"""配置管理"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# 加载 .env 文件
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class FetchConfig(BaseModel):
    """页面获取配置"""

    user_agent: str = Field(
        default_factory=lambda: os.getenv(
            "USER_AGENT", "Mozilla/5.0 (compatible; autorecipe/0.1; +https://example.org/bot)"
        )
    )
    timeout_s: float = Field(default_factory=lambda: float(os.getenv("FETCH_TIMEOUT", "30")))
    # 是否使用浏览器渲染 JavaScript
    render_js: bool = Field(default_factory=lambda: _env_bool("RENDER_JS", "false"))
    headless: bool = Field(default_factory=lambda: _env_bool("HEADLESS", "true"))
    # 页面加载后的等待时间（毫秒），仅在渲染 JavaScript 时生效
    page_load_wait_ms: int = Field(
        default_factory=lambda: int(os.getenv("PAGE_LOAD_WAIT_MS", "2000"))
    )

    # ===== 爬取间隔配置 =====
    # 请求基础延迟（秒）
    request_delay_base: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_DELAY_BASE", "0.0"))
    )
    # 请求延迟随机波动范围（秒）
    request_delay_random: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_DELAY_RANDOM", "0.0"))
    )


class CacheConfig(BaseModel):
    """页面缓存配置"""

    input_dir: str = Field(default_factory=lambda: os.getenv("CACHE_INPUT_DIR", "cache"))
    output_dir: str = Field(default_factory=lambda: os.getenv("CACHE_OUTPUT_DIR", "cache"))
    # 离线模式：缓存未命中直接报错，不发起网络请求
    offline: bool = Field(default_factory=lambda: _env_bool("OFFLINE", "false"))


class GenerateConfig(BaseModel):
    """配方生成配置"""

    # 出现次数阈值，每个阈值独立生成一轮候选配方
    min_occs: list[int] = Field(
        default_factory=lambda: [int(x) for x in _env_list("MIN_OCCS", "5,10,20")]
    )
    # 只保留取值有变化的字段
    only_varying_fields: bool = Field(
        default_factory=lambda: _env_bool("ONLY_VARYING_FIELDS", "true")
    )
    min_records: int = Field(default_factory=lambda: int(os.getenv("MIN_RECORDS", "0")))
    # 剪枝：预览记录与已有配方相同则不输出
    do_pruning: bool = Field(default_factory=lambda: _env_bool("DO_PRUNING", "true"))
    max_recursion_depth: int = Field(
        default_factory=lambda: int(os.getenv("MAX_RECURSION_DEPTH", "10"))
    )
    pagination_min_occ: int = 3
    # 超过该比例的示例能解析为日期时，字段类型为日期
    date_field_threshold: float = 0.25
    # 要求日期时，至少该比例的记录带有解析后的日期
    require_dates_ratio: float = 0.5


class PullbackConfig(BaseModel):
    """根选择器回退配置

    这些阈值来自经验调优，允许按站点调整。
    """

    preferred_tag: str = Field(default_factory=lambda: os.getenv("PULLBACK_PREFERRED_TAG", "div"))
    # 实际匹配数与期望数之比必须小于该值
    max_ratio: int = Field(default_factory=lambda: int(os.getenv("PULLBACK_MAX_RATIO", "20")))
    # 回退不会把选择器缩短到该长度以下
    min_length: int = Field(default_factory=lambda: int(os.getenv("PULLBACK_MIN_LENGTH", "3")))


class DetailPageConfig(BaseModel):
    """详情页配置"""

    blocked_domains: list[str] = Field(
        default_factory=lambda: _env_list("DETAIL_BLOCKED_DOMAINS", "wikipedia,google")
    )
    known_domains: list[str] = Field(
        default_factory=lambda: _env_list("DETAIL_KNOWN_DOMAINS", "ticketweb,dice")
    )
    skip_extensions: list[str] = Field(
        default_factory=lambda: [
            ".gif", ".jfif", ".jpeg", ".jpg", ".mp4", ".pdf", ".png", ".webp", ".zip",
        ]
    )
    # 合并后至少成功关联的记录数
    min_records: int = 2


class OutputConfig(BaseModel):
    """输出配置"""

    output_dir: str = Field(default_factory=lambda: os.getenv("OUTPUT_DIR", "output"))


class Config(BaseModel):
    """全局配置"""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    generate: GenerateConfig = Field(default_factory=GenerateConfig)
    pullback: PullbackConfig = Field(default_factory=PullbackConfig)
    detail: DetailPageConfig = Field(default_factory=DetailPageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def load(cls) -> "Config":
        """加载配置"""
        return cls()

    def ensure_dirs(self) -> None:
        """确保输出目录存在"""
        Path(self.cache.output_dir).mkdir(parents=True, exist_ok=True)
        Path(self.output.output_dir).mkdir(parents=True, exist_ok=True)


# 全局配置实例
config = Config.load()
