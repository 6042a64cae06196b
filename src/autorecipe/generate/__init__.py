"""配方生成"""

from .detail import DetailPageJoiner
from .expander import ClusterExpander
from .options import GenerateOptions
from .pipeline import (
    GenerationResult,
    PageAnalysis,
    analyze_page,
    configurations_for_document,
    configurations_for_page,
    extend_recipes_with_next_pages,
    generate,
)
from .selection import FieldSelector, RichFieldSelector, SelectAll, select_all

__all__ = [
    "ClusterExpander",
    "DetailPageJoiner",
    "FieldSelector",
    "GenerateOptions",
    "GenerationResult",
    "PageAnalysis",
    "RichFieldSelector",
    "SelectAll",
    "analyze_page",
    "configurations_for_document",
    "configurations_for_page",
    "extend_recipes_with_next_pages",
    "generate",
    "select_all",
]
