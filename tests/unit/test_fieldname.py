"""字段命名单元测试"""

import zlib

from autorecipe.scrape.fieldname import (
    compute_field_hash,
    generate_field_name,
    parse_field_name,
)


class TestComputeFieldHash:
    """路径哈希测试"""

    def test_crc32_hex(self):
        expected = f"{zlib.crc32(b'body > div.item > a'):08x}"
        assert compute_field_hash("body > div.item > a") == expected

    def test_surrounding_whitespace_ignored(self):
        assert compute_field_hash("  body > p ") == compute_field_hash("body > p")

    def test_fixed_width(self):
        assert len(compute_field_hash("")) == 8


class TestGenerateFieldName:
    """字段名生成测试"""

    def test_attribute_field(self):
        name = generate_field_name("body > a", "href", 0)
        assert name == f"F{compute_field_hash('body > a')}-href-0"

    def test_text_field(self):
        name = generate_field_name("body > p", "", 3)
        assert name.endswith("--3")

    def test_deterministic(self):
        assert generate_field_name("body > p", "", 0) == generate_field_name("body > p", "", 0)


class TestParseFieldName:
    """字段名解析测试"""

    def test_roundtrip(self):
        name = generate_field_name("body > div.item > a", "href", 2)
        parts = parse_field_name(name)
        assert parts.hash == compute_field_hash("body > div.item > a")
        assert parts.attribute == "href"
        assert parts.text_index == 2

    def test_hyphenated_attribute(self):
        parts = parse_field_name("F0123abcd-aria-label-0")
        assert parts.attribute == "aria-label"
        assert parts.text_index == 0

    def test_text_attribute_empty(self):
        parts = parse_field_name("F0123abcd--1")
        assert parts.attribute == ""
        assert parts.text_index == 1

    def test_not_generated(self):
        assert parse_field_name("title") is None
        assert parse_field_name("F123-href-0") is None
        assert parse_field_name("Fdeadbeef-src-0") is not None
