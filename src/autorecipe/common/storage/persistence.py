"""配方持久化

每个配方保存为 ``<id>.yml``（配方本身）和 ``<id>.json``（预览记录）。
"""

from __future__ import annotations

import json
from pathlib import Path

from ...scrape.models import Recipe
from ..constants import RECIPE_FILE_SUFFIX, RECORDS_FILE_SUFFIX
from ..logger import get_logger
from ..validators import safe_file_stem

logger = get_logger(__name__)


class RecipePersistence:
    """配方持久化管理器"""

    def __init__(self, output_dir: str | Path = "output"):
        """初始化

        Args:
            output_dir: 配方文件存放目录
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def paths_for(self, recipe: Recipe) -> tuple[Path, Path]:
        name = safe_file_stem(str(recipe.id))
        return (
            self.output_dir / f"{name}{RECIPE_FILE_SUFFIX}",
            self.output_dir / f"{name}{RECORDS_FILE_SUFFIX}",
        )

    def save(self, recipe: Recipe) -> Path:
        """保存配方和预览记录

        Returns:
            配方文件路径
        """
        recipe_path, records_path = self.paths_for(recipe)
        recipe_path.write_text(recipe.to_yaml(), encoding="utf-8")
        records_path.write_text(recipe.records_string(), encoding="utf-8")
        logger.debug(f"[持久化] 配方已保存到: {recipe_path}")
        return recipe_path

    def save_all(self, recipes: dict[str, Recipe]) -> list[Path]:
        paths = [self.save(recipe) for recipe in recipes.values()]
        if paths:
            logger.info(f"[持久化] 已保存 {len(paths)} 个配方到: {self.output_dir}")
        return paths

    def load(self, path: str | Path) -> Recipe:
        """加载配方文件，同名的记录文件存在时一并加载

        Raises:
            ConfigFileNotFoundError: 配方文件不存在
            ConfigValidationError: 配方格式无效
        """
        recipe = Recipe.load(path)
        records_path = Path(path).with_suffix(RECORDS_FILE_SUFFIX)
        if records_path.exists():
            recipe.records = json.loads(records_path.read_text(encoding="utf-8"))
        return recipe
