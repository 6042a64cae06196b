"""常量定义

集中管理分析、抽取和输入验证使用的固定值。
"""

from __future__ import annotations

# ============================================================================
# 输入验证
# ============================================================================

MAX_URL_LENGTH = 2048
VALID_URL_SCHEMES = ("http", "https", "file")

# ============================================================================
# 页面分析
# ============================================================================

# 文本不计入候选位置的标签
SKIP_TEXT_TAGS = frozenset({"script", "style", "noscript"})

# 需要记录为属性候选的属性白名单
ATTRS_BY_TAG = {
    "a": ("href", "aria-label"),
    "img": ("src",),
}

# 计入子节点但不入栈的空元素
COUNTED_VOID_TAGS = frozenset({"br", "input"})
# 计入子节点且记录属性的空元素
ATTR_VOID_TAGS = frozenset({"img", "link"})
VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# "下一页" 链接识别文本
NEXT_PAGE_LABEL = "next"

# ============================================================================
# 记录字段
# ============================================================================

URL_FIELD_NAME = "Aurl"
TITLE_FIELD_NAME = "Atitle"
URL_FIELD_SUFFIX = "__Aurl"
DATE_TIME_FIELD_SUFFIX = "__Pdate_time_tz_ranges"

FIELD_TYPE_TEXT = "text"
FIELD_TYPE_URL = "url"
FIELD_TYPE_DATE = "date_time_tz_ranges"

# 详情页只接受这些协议
DETAIL_URL_SCHEMES = frozenset({"http", "https"})

# ============================================================================
# 文件相关
# ============================================================================

RECIPE_FILE_SUFFIX = ".yml"
RECORDS_FILE_SUFFIX = ".json"
CACHE_FILE_SUFFIX = ".html"
