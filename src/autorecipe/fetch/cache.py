"""页面缓存

缓存按层串联：内存 → 输入目录 → 输出目录（可写）→ 网络。
磁盘路径为 ``<dir>/<host-slug>/<url-slug>.html``。离线模式下网络层
直接抛出 ``CacheMissError``，不会发起任何请求。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..common.constants import CACHE_FILE_SUFFIX
from ..common.exceptions import CacheMissError, FetchError
from ..common.logger import get_logger
from ..common.utils.slug import host_of, make_url_slug, trim_url_scheme
from .document import Document
from .fetcher import Fetcher, FileFetcher

logger = get_logger(__name__)


class Cache(Protocol):
    def get(self, url: str) -> str | None: ...

    def set(self, url: str, markup: str) -> None: ...


class FetchCache:
    """最底层：通过 fetcher 获取页面，本身不保存任何内容"""

    def __init__(self, fetcher: Fetcher | None = None):
        self.fetcher = fetcher
        self._files = FileFetcher()

    def get(self, url: str) -> str | None:
        if url.lower().startswith("file://"):
            return self._files.fetch(url)
        if self.fetcher is None:
            raise CacheMissError(url)
        return self.fetcher.fetch(url)

    def set(self, url: str, markup: str) -> None:
        pass


class FileCache:
    """磁盘缓存"""

    def __init__(self, directory: str | Path, fallback: Cache | None = None, writeable: bool = False):
        self.directory = Path(directory)
        self.fallback = fallback
        self.writeable = writeable

    def path_for(self, url: str) -> Path:
        host_slug = make_url_slug(host_of(url)) or "local"
        return self.directory / host_slug / (make_url_slug(url) + CACHE_FILE_SUFFIX)

    def get(self, url: str) -> str | None:
        path = self.path_for(url)
        if path.exists():
            try:
                return path.read_text(encoding="utf-8")
            except OSError as e:
                raise FetchError(url, f"缓存文件不可读 ({e})") from e

        if self.fallback is None:
            return None
        markup = self.fallback.get(url)
        if markup is not None and self.writeable:
            self.set(url, markup)
        return markup

    def set(self, url: str, markup: str) -> None:
        if not self.writeable:
            return
        path = self.path_for(url)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markup, encoding="utf-8")
        logger.debug(f"[Cache] 写入: {path}")


class MemoryCache:
    """进程内缓存，保证每个 URL 在一次运行中最多落盘一次"""

    def __init__(self, fallback: Cache | None = None):
        self.fallback = fallback
        self._pages: dict[str, str] = {}

    def get(self, url: str) -> str | None:
        key = trim_url_scheme(url)
        if key in self._pages:
            return self._pages[key]
        if self.fallback is None:
            return None
        markup = self.fallback.get(url)
        if markup is not None:
            self._pages[key] = markup
        return markup

    def set(self, url: str, markup: str) -> None:
        self._pages[trim_url_scheme(url)] = markup


def build_cache(
    input_dir: str | Path | None,
    output_dir: str | Path | None,
    offline: bool = False,
    fetcher: Fetcher | None = None,
) -> MemoryCache:
    """组装分层缓存"""
    chain: Cache = FetchCache(None if offline else fetcher)
    if output_dir:
        chain = FileCache(output_dir, chain, writeable=True)
    if input_dir and (not output_dir or Path(input_dir) != Path(output_dir)):
        chain = FileCache(input_dir, chain)
    return MemoryCache(chain)


def get_document(cache: Cache, url: str) -> Document:
    """获取并解析页面

    Raises:
        FetchError: 页面获取失败或缓存中不存在
    """
    markup = cache.get(url)
    if markup is None:
        raise FetchError(url, "缓存中没有该页面")
    return Document.from_string(markup, url)
