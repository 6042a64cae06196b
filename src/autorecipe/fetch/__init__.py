"""页面获取与缓存"""

from .cache import FetchCache, FileCache, MemoryCache, build_cache, get_document
from .document import Document
from .fetcher import DynamicFetcher, FileFetcher, StaticFetcher, create_fetcher

__all__ = [
    "Document",
    "FetchCache",
    "FileCache",
    "MemoryCache",
    "build_cache",
    "get_document",
    "DynamicFetcher",
    "FileFetcher",
    "StaticFetcher",
    "create_fetcher",
]
