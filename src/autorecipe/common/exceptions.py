"""自定义异常类

定义项目中使用的所有自定义异常，用于更精细的错误处理。
"""

from __future__ import annotations


class AutoRecipeError(Exception):
    """AutoRecipe 基础异常类

    所有自定义异常的基类。
    """
    pass


class ValidationError(AutoRecipeError):
    """验证失败错误"""
    pass


class URLValidationError(ValidationError):
    """URL 验证失败"""
    def __init__(self, url: str, reason: str = "格式无效"):
        super().__init__(f"URL 验证失败: {url}, 原因: {reason}")
        self.url = url
        self.reason = reason


class ConfigError(AutoRecipeError):
    """配置相关错误"""
    pass


class ConfigFileNotFoundError(ConfigError):
    """配置文件未找到"""
    def __init__(self, path: str):
        super().__init__(f"配置文件未找到: {path}")
        self.path = path


class ConfigValidationError(ConfigError):
    """配置验证失败"""
    pass


class FetchError(AutoRecipeError):
    """页面获取失败

    网络请求失败、返回非 2xx 状态码或缓存文件不可读时抛出。
    """
    def __init__(self, url: str, message: str = "页面获取失败"):
        super().__init__(f"{message}: {url}")
        self.url = url


class CacheMissError(FetchError):
    """离线模式下缓存未命中

    离线模式禁止任何网络请求，缓存中没有的页面直接报错。
    """
    def __init__(self, url: str):
        super().__init__(url, "离线模式下缓存未命中")


class ExtractionError(AutoRecipeError):
    """抽取相关错误的基类"""
    pass


class FieldExtractionError(ExtractionError):
    """单个字段抽取失败

    发生在单条记录级别，调用方应跳过该记录而不是中止整批抽取。
    """
    def __init__(self, field_name: str, message: str = "字段不能为空"):
        super().__init__(f"{message}: {field_name}")
        self.field_name = field_name


class SelectorError(ExtractionError):
    """选择器无法解析"""
    def __init__(self, selector: str, reason: str = "语法错误"):
        super().__init__(f"选择器无效: {selector!r}, 原因: {reason}")
        self.selector = selector
        self.reason = reason


class GenerationError(AutoRecipeError):
    """配方生成相关错误的基类"""
    pass


class FieldNameCollisionError(GenerationError):
    """字段名哈希冲突

    两条不同的规范化路径得到了相同的 CRC32 哈希。字段名会被混用，
    当前运行无法继续。
    """
    def __init__(self, field_hash: str, path: str, other_path: str):
        super().__init__(
            f"字段名哈希冲突 F{field_hash}: {path!r} 与 {other_path!r}"
        )
        self.field_hash = field_hash
        self.path = path
        self.other_path = other_path


class NoFieldsSelectedError(GenerationError):
    """没有选中任何字段"""

    def __init__(self, min_occ: int):
        self.min_occ = min_occ
        super().__init__(f"没有选择任何字段 (min_occ={min_occ})")
