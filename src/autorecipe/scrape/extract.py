"""配方执行

把 ``Scraper`` 应用到已解析的页面上，得到记录列表。
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from ..common.constants import (
    DATE_TIME_FIELD_SUFFIX,
    FIELD_TYPE_DATE,
    FIELD_TYPE_TEXT,
    FIELD_TYPE_URL,
    SKIP_TEXT_TAGS,
    TITLE_FIELD_NAME,
    URL_FIELD_NAME,
    URL_FIELD_SUFFIX,
)
from ..common.exceptions import ExtractionError, FieldExtractionError
from ..common.logger import get_logger
from ..common.utils.dates import DateTimeRecognizer, format_ranges, has_start_month_and_day
from ..fetch.document import Document, select
from .models import ElementLocation, Field, Record, RegexConfig, Scraper, TransformConfig

logger = get_logger(__name__)

_default_recognizer = DateTimeRecognizer()


def shorten_string(text: str, max_length: int) -> str:
    if max_length > 0 and len(text) > max_length:
        return text[:max_length] + "..."
    return text


def subtree_text(element) -> str:
    """元素及其后代的全部文本，跳过 script/style/noscript"""
    parts: list[str] = []

    def walk(el) -> None:
        if isinstance(el.tag, str):
            if el.tag in SKIP_TEXT_TAGS:
                return
            if el.text:
                parts.append(el.text)
        for child in el:
            walk(child)
            if child.tail:
                parts.append(child.tail)

    walk(element)
    return "".join(parts)


def _child_text(element, child_index: int) -> str | None:
    """第 child_index 个子节点为文本时返回其内容"""
    children: list[str | None] = []
    if element.text:
        children.append(element.text)
    for child in element:
        children.append(None)
        if child.tail:
            children.append(child.tail)
    if 0 <= child_index < len(children):
        return children[child_index]
    return None


def extract_regex(config: RegexConfig, text: str) -> str:
    if not config.exp:
        return text
    try:
        matches = [m.group(0) for m in re.finditer(config.exp, text)]
    except re.error as e:
        raise ExtractionError(f"正则表达式无效: {config.exp!r} ({e})") from e
    if not matches:
        raise ExtractionError(f"正则没有匹配: {config.exp!r}")
    if config.index == -1:
        return matches[-1]
    if config.index >= len(matches):
        raise ExtractionError(f"正则匹配下标越界: {config.exp!r} 只有 {len(matches)} 个匹配")
    return matches[config.index]


def apply_transform(transform: TransformConfig, text: str) -> str:
    if not transform.regex:
        return text
    return re.sub(transform.regex, transform.replace, text)


def get_text_string(location: ElementLocation, element) -> str:
    """按位置描述从记录元素中取出字符串"""
    nodes = select(element, location.selector)
    parts: list[str] = []
    if nodes:
        targets = nodes if location.all_nodes else nodes[:1]
        if location.attr:
            parts.append(nodes[0].get(location.attr) or "")
        elif location.entire_subtree:
            parts.extend(subtree_text(node) for node in targets)
        else:
            for node in targets:
                text = _child_text(node, location.child_index)
                if text is not None:
                    parts.append(text)

    parts = [extract_regex(location.regex_extract, p) for p in parts]
    parts = [shorten_string(p.strip(), location.max_length) for p in parts]
    return location.separator.join(parts)


def extract_field(
    field: Field,
    record: Record,
    element,
    base_url: str,
    recognizer: DateTimeRecognizer | None = None,
) -> None:
    """抽取单个字段写入 record

    Raises:
        FieldExtractionError: 字段为空且不允许为空，或配置无效
    """
    if field.value:
        record[field.name] = field.value
        return

    try:
        if field.type == FIELD_TYPE_TEXT:
            parts = [s for s in (get_text_string(loc, element) for loc in field.location) if s]
            text = field.separator.join(parts) or field.default
            if not text and not field.can_be_empty:
                raise FieldExtractionError(field.name)
            for transform in field.transform:
                text = apply_transform(transform, text)
            record[field.name] = text

        elif field.type == FIELD_TYPE_URL:
            if len(field.location) != 1:
                raise FieldExtractionError(
                    field.name, f"url 字段必须只有一个位置，实际 {len(field.location)} 个"
                )
            location = field.location[0]
            if not location.attr:
                location = location.model_copy(update={"attr": "href"})
            raw = get_text_string(location, element)
            record[field.name] = raw
            resolved = urljoin(base_url, raw) if base_url else raw
            resolved = resolved or field.default
            if not resolved and not field.can_be_empty:
                raise FieldExtractionError(field.name)
            record[field.name + URL_FIELD_SUFFIX] = resolved

        elif field.type == FIELD_TYPE_DATE:
            if len(field.location) != 1:
                raise FieldExtractionError(
                    field.name, f"日期字段必须只有一个位置，实际 {len(field.location)} 个"
                )
            text = get_text_string(field.location[0], element)
            record[field.name] = text
            ranges = (recognizer or _default_recognizer).parse(text)
            if has_start_month_and_day(ranges):
                record[field.name + DATE_TIME_FIELD_SUFFIX] = format_ranges(ranges)
    except FieldExtractionError:
        raise
    except ExtractionError as e:
        raise FieldExtractionError(field.name, str(e)) from e


def _remove_hidden_fields(scraper: Scraper, record: Record) -> Record:
    for field in scraper.fields:
        if field.hide:
            for key in (field.name, field.name + URL_FIELD_SUFFIX, field.name + DATE_TIME_FIELD_SUFFIX):
                record.pop(key, None)
    return record


def scrape_element(
    scraper: Scraper,
    element,
    base_url: str,
    recognizer: DateTimeRecognizer | None = None,
) -> Record:
    record: Record = {}
    # url 字段先抽取
    fields = sorted(scraper.fields, key=lambda f: f.type != FIELD_TYPE_URL)
    for field in fields:
        extract_field(field, record, element, base_url, recognizer)
    return _remove_hidden_fields(scraper, record)


def scrape_document(
    scraper: Scraper,
    document: Document,
    recognizer: DateTimeRecognizer | None = None,
) -> list[Record]:
    """对整个页面执行一个抽取阶段

    每个匹配记录选择器的元素产生一条记录；字段抽取失败的记录被跳过。

    Raises:
        SelectorError: 记录选择器无效
    """
    base_url = document.base_url or scraper.url
    items = document.find(scraper.selector) if scraper.selector else [document.root]
    title = document.title

    records: list[Record] = []
    skipped = 0
    for item in items:
        try:
            record = scrape_element(scraper, item, base_url, recognizer)
        except FieldExtractionError as e:
            skipped += 1
            logger.debug(f"[Scrape] 跳过记录: {e}")
            continue
        if not record:
            continue
        record[URL_FIELD_NAME] = base_url
        record[TITLE_FIELD_NAME] = title
        records.append(record)

    if skipped:
        logger.debug(f"[Scrape] {scraper.name}: 跳过 {skipped} 条记录，保留 {len(records)} 条")
    return records
