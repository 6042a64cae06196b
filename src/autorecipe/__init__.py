"""AutoRecipe - 列表页抽取配方自动生成"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .generate.options import GenerateOptions as GenerateOptions
    from .scrape.models import Recipe as Recipe

__all__ = [
    "__version__",
    "GenerateOptions",
    "Recipe",
]


def __getattr__(name: str) -> Any:
    """延迟导出，导入包时不加载 lxml、requests 等依赖"""
    if name == "GenerateOptions":
        from .generate.options import GenerateOptions

        return GenerateOptions
    if name == "Recipe":
        from .scrape.models import Recipe

        return Recipe
    raise AttributeError(f"module 'autorecipe' has no attribute '{name}'")
