"""页面缓存单元测试"""

import pytest

from autorecipe.common.exceptions import CacheMissError, FetchError
from autorecipe.fetch.cache import FetchCache, FileCache, MemoryCache, build_cache, get_document
from autorecipe.fetch.document import Document


class _Fetcher:
    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        return self.pages[url]


class TestFetchCache:
    """网络层测试"""

    def test_offline_miss_raises(self):
        with pytest.raises(CacheMissError) as exc_info:
            FetchCache(None).get("https://example.com/")
        assert "离线模式下缓存未命中" in str(exc_info.value)
        assert isinstance(exc_info.value, FetchError)

    def test_file_url_read_offline(self, tmp_path):
        page = tmp_path / "p.html"
        page.write_text("<p>hi</p>", encoding="utf-8")
        assert FetchCache(None).get(page.as_uri()) == "<p>hi</p>"

    def test_delegates_to_fetcher(self):
        fetcher = _Fetcher({"https://a.com/": "<p>a</p>"})
        assert FetchCache(fetcher).get("https://a.com/") == "<p>a</p>"
        assert fetcher.calls == ["https://a.com/"]


class TestFileCache:
    """磁盘缓存测试"""

    def test_path_layout(self, tmp_path):
        cache = FileCache(tmp_path)
        path = cache.path_for("https://www.example.com/events?p=2")
        assert path == tmp_path / "example-com" / "example-com-events-p-2.html"

    def test_write_through(self, tmp_path):
        fetcher = _Fetcher({"https://a.com/x": "<p>x</p>"})
        cache = FileCache(tmp_path, FetchCache(fetcher), writeable=True)
        assert cache.get("https://a.com/x") == "<p>x</p>"
        assert cache.path_for("https://a.com/x").read_text(encoding="utf-8") == "<p>x</p>"

        # 第二次从磁盘读取
        assert cache.get("https://a.com/x") == "<p>x</p>"
        assert fetcher.calls == ["https://a.com/x"]

    def test_read_only_does_not_write(self, tmp_path):
        fetcher = _Fetcher({"https://a.com/x": "<p>x</p>"})
        cache = FileCache(tmp_path, FetchCache(fetcher))
        cache.get("https://a.com/x")
        assert not cache.path_for("https://a.com/x").exists()

    def test_no_fallback(self, tmp_path):
        assert FileCache(tmp_path).get("https://a.com/x") is None


class TestMemoryCache:
    """内存缓存测试"""

    def test_scheme_insensitive_key(self):
        fetcher = _Fetcher({"https://a.com/x": "<p>x</p>"})
        cache = MemoryCache(FetchCache(fetcher))
        cache.get("https://a.com/x")
        assert cache.get("http://www.a.com/x") == "<p>x</p>"
        assert fetcher.calls == ["https://a.com/x"]

    def test_set(self):
        cache = MemoryCache()
        cache.set("https://a.com/", "<p>a</p>")
        assert cache.get("https://a.com/") == "<p>a</p>"


class TestBuildCache:
    """缓存链测试"""

    def test_offline_reads_input_dir(self, tmp_path):
        seeded = FileCache(tmp_path / "in", writeable=True)
        seeded.set("https://a.com/x", "<p>cached</p>")
        cache = build_cache(tmp_path / "in", tmp_path / "out", offline=True)
        assert cache.get("https://a.com/x") == "<p>cached</p>"

    def test_offline_miss(self, tmp_path):
        cache = build_cache(tmp_path / "in", tmp_path / "out", offline=True)
        with pytest.raises(CacheMissError):
            cache.get("https://a.com/missing")

    def test_output_dir_written_once(self, tmp_path):
        fetcher = _Fetcher({"https://a.com/x": "<p>x</p>"})
        cache = build_cache(tmp_path / "in", tmp_path / "out", fetcher=fetcher)
        cache.get("https://a.com/x")
        cache.get("https://a.com/x")
        assert fetcher.calls == ["https://a.com/x"]
        assert FileCache(tmp_path / "out").path_for("https://a.com/x").exists()


class TestGetDocument:
    """页面解析测试"""

    def test_document(self):
        cache = MemoryCache()
        cache.set("https://a.com/", "<html><head><title>T</title></head><body></body></html>")
        doc = get_document(cache, "https://a.com/")
        assert isinstance(doc, Document)
        assert doc.title == "T"
        assert doc.url == "https://a.com/"

    def test_missing(self):
        with pytest.raises(FetchError):
            get_document(MemoryCache(), "https://a.com/")
