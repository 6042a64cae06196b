"""配方数据模型

``Scraper`` / ``Field`` / ``ElementLocation`` 是配方文件（YAML）的格式，
``ConfigID`` 和 ``Recipe`` 是生成过程中使用的运行时对象。
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field as PydanticField, ValidationError, field_validator

from ..common.constants import (
    FIELD_TYPE_TEXT,
    FIELD_TYPE_URL,
)
from ..common.exceptions import ConfigFileNotFoundError, ConfigValidationError
from ..common.utils.slug import host_of, make_url_slug

Record = dict[str, Any]


class RegexConfig(BaseModel):
    """正则提取配置，index 为 -1 时取最后一个匹配"""

    exp: str = ""
    index: int = 0


class TransformConfig(BaseModel):
    """字段值变换，目前只支持 regex-replace"""

    type: Literal["regex-replace"] = "regex-replace"
    regex: str = ""
    replace: str = ""


class ElementLocation(BaseModel):
    """字段在记录元素内的位置"""

    selector: str = ""
    attr: str = ""
    child_index: int = 0
    entire_subtree: bool = False
    all_nodes: bool = False
    separator: str = ""
    max_length: int = 0
    regex_extract: RegexConfig = PydanticField(default_factory=RegexConfig)


class Field(BaseModel):
    """记录中的一个字段"""

    name: str
    type: Literal["text", "url", "date_time_tz_ranges"] = FIELD_TYPE_TEXT
    value: str = ""
    location: list[ElementLocation] = PydanticField(default_factory=list)
    default: str = ""
    separator: str = ""
    can_be_empty: bool = False
    hide: bool = False
    transform: list[TransformConfig] = PydanticField(default_factory=list)

    @field_validator("location", mode="before")
    @classmethod
    def _single_location(cls, value):
        # 配方文件里 location 可以写成单个映射
        if isinstance(value, (dict, ElementLocation)):
            return [value]
        return value


class Paginator(BaseModel):
    location: ElementLocation = PydanticField(default_factory=ElementLocation)
    max_pages: int = 0


class Scraper(BaseModel):
    """一个抽取阶段：记录选择器加字段列表"""

    name: str
    url: str = ""
    selector: str = ""
    fields: list[Field] = PydanticField(default_factory=list)
    paginators: list[Paginator] = PydanticField(default_factory=list)
    render_js: bool = False

    def detail_page_url_fields(self) -> list[Field]:
        return [f for f in self.fields if f.type == FIELD_TYPE_URL]

    def host_slug(self) -> str:
        return make_url_slug(host_of(self.url)) if self.url else ""


@dataclass(frozen=True)
class ConfigID:
    """配方标识

    字符串形式 ``slug__id[_field][_sub_id]`` 用作映射键、输出文件名和
    测试锚点，对同一输入必须逐字节稳定。
    """

    slug: str
    id: str = ""
    field: str = ""
    sub_id: str = ""

    def __str__(self) -> str:
        text = self.slug
        if self.id:
            text += "__" + self.id
        if self.field:
            text += "_" + self.field
        if self.sub_id:
            text += "_" + self.sub_id
        return text

    def with_position(self, position: str) -> "ConfigID":
        """设置展开树位置；详情页配方写入 sub_id"""
        if self.field:
            return ConfigID(self.slug, self.id, self.field, position)
        return ConfigID(self.slug, position, self.field, self.sub_id)

    def position(self) -> str:
        return self.sub_id if self.field else self.id

    def child(self, letter: str) -> "ConfigID":
        return self.with_position(self.position() + letter)


def records_to_string(records: list[Record]) -> str:
    """记录集的规范化序列化形式，用于剪枝比较和输出"""
    return json.dumps(records, indent=2, sort_keys=True, ensure_ascii=False)


@dataclass
class Recipe:
    """一个候选配方及其预览记录"""

    id: ConfigID
    scrapers: list[Scraper] = field(default_factory=list)
    records: list[Record] = field(default_factory=list)

    def copy(self) -> "Recipe":
        return Recipe(
            id=self.id,
            scrapers=[s.model_copy(deep=True) for s in self.scrapers],
            records=copy.deepcopy(self.records),
        )

    def records_string(self) -> str:
        return records_to_string(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": {k: v for k, v in vars(self.id).items() if v},
            "scrapers": [
                s.model_dump(mode="json", exclude_defaults=True) for s in self.scrapers
            ],
        }

    def to_yaml(self) -> str:
        return yaml.dump(
            self.to_dict(), allow_unicode=True, default_flow_style=False, sort_keys=False
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        raw_id = data.get("id") or {}
        if isinstance(raw_id, str):
            config_id = ConfigID(slug=raw_id)
        elif isinstance(raw_id, dict):
            # 缺少 slug 时由 load 用文件名补上
            config_id = ConfigID(
                slug=str(raw_id.get("slug") or ""),
                id=str(raw_id.get("id") or ""),
                field=str(raw_id.get("field") or ""),
                sub_id=str(raw_id.get("sub_id") or ""),
            )
        else:
            raise ConfigValidationError(f"配方 id 必须是字符串或映射: {raw_id!r}")
        try:
            scrapers = [Scraper.model_validate(s) for s in data.get("scrapers") or []]
        except ValidationError as e:
            raise ConfigValidationError(f"配方格式无效: {e}") from e
        return cls(id=config_id, scrapers=scrapers)

    @classmethod
    def from_yaml(cls, text: str) -> "Recipe":
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"配方 YAML 解析失败: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("配方文件必须是映射")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | Path) -> "Recipe":
        p = Path(path)
        if not p.exists():
            raise ConfigFileNotFoundError(str(p))
        recipe = cls.from_yaml(p.read_text(encoding="utf-8"))
        if not recipe.id.slug:
            recipe = Recipe(id=ConfigID(slug=p.stem), scrapers=recipe.scrapers)
        return recipe
