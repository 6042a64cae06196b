"""异常类单元测试"""

import pytest
from autorecipe.common.exceptions import (
    AutoRecipeError,
    ValidationError,
    URLValidationError,
    ConfigError,
    ConfigFileNotFoundError,
    FetchError,
    CacheMissError,
    ExtractionError,
    FieldExtractionError,
    SelectorError,
    GenerationError,
    FieldNameCollisionError,
    NoFieldsSelectedError,
)


class TestExceptionHierarchy:
    """异常类层次结构测试"""

    def test_base_exception(self):
        """测试基础异常"""
        with pytest.raises(AutoRecipeError):
            raise AutoRecipeError("基础错误")

    def test_validation_error_inheritance(self):
        """测试验证错误继承关系"""
        error = URLValidationError("bad", "缺少协议")
        assert isinstance(error, ValidationError)
        assert error.url == "bad"
        assert error.reason == "缺少协议"

    def test_config_error_inheritance(self):
        """测试配置错误继承关系"""
        error = ConfigFileNotFoundError("/tmp/x.yml")
        assert isinstance(error, ConfigError)
        assert error.path == "/tmp/x.yml"
        assert "配置文件未找到" in str(error)

    def test_fetch_error(self):
        """测试获取错误"""
        error = FetchError("https://a.com/", "HTTP 500")
        assert error.url == "https://a.com/"
        assert str(error) == "HTTP 500: https://a.com/"

    def test_cache_miss_is_fetch_error(self):
        """测试离线缓存未命中"""
        error = CacheMissError("https://a.com/")
        assert isinstance(error, FetchError)
        assert "离线模式" in str(error)

    def test_extraction_errors(self):
        """测试抽取错误"""
        field_error = FieldExtractionError("title")
        assert isinstance(field_error, ExtractionError)
        assert field_error.field_name == "title"
        selector_error = SelectorError("div[[")
        assert isinstance(selector_error, ExtractionError)
        assert "选择器无效" in str(selector_error)

    def test_generation_errors(self):
        """测试生成错误"""
        collision = FieldNameCollisionError("4ddb0c25", "plumless", "buckeroo")
        assert isinstance(collision, GenerationError)
        assert collision.field_hash == "4ddb0c25"
        assert "F4ddb0c25" in str(collision)
        empty = NoFieldsSelectedError(5)
        assert isinstance(empty, GenerationError)
        assert empty.min_occ == 5

    def test_catch_all_with_base(self):
        """测试基类可以捕获所有自定义异常"""
        for error in (
            URLValidationError("x"),
            CacheMissError("x"),
            FieldExtractionError("x"),
            NoFieldsSelectedError(2),
        ):
            with pytest.raises(AutoRecipeError):
                raise error
