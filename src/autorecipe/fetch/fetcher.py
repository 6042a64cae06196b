"""页面获取

- ``StaticFetcher``: requests 直接下载
- ``DynamicFetcher``: Playwright 渲染 JavaScript 后取页面内容
- ``FileFetcher``: 读取 ``file://`` 链接
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from ..common.config import FetchConfig
from ..common.exceptions import FetchError
from ..common.logger import get_logger
from ..common.utils.delay import get_random_delay

logger = get_logger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> str: ...


class FileFetcher:
    """读取本地文件"""

    def fetch(self, url: str) -> str:
        path = Path(url2pathname(urlparse(url).path))
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FetchError(url, f"读取本地文件失败 ({e})") from e


class StaticFetcher:
    """使用 requests 下载页面"""

    def __init__(self, settings: FetchConfig | None = None, session: requests.Session | None = None):
        self.settings = settings or FetchConfig()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.settings.user_agent})
        self._files = FileFetcher()

    def fetch(self, url: str) -> str:
        if url.lower().startswith("file://"):
            return self._files.fetch(url)

        delay = get_random_delay(self.settings.request_delay_base, self.settings.request_delay_random)
        if delay > 0:
            time.sleep(delay)

        logger.info(f"[Fetch] 下载: {url}")
        try:
            resp = self.session.get(url, timeout=self.settings.timeout_s)
        except requests.RequestException as e:
            raise FetchError(url, f"请求失败 ({e})") from e

        if not resp.ok:
            raise FetchError(url, f"HTTP {resp.status_code}")

        if resp.encoding is None or resp.encoding.lower() == "iso-8859-1":
            resp.encoding = resp.apparent_encoding
        return resp.text


class DynamicFetcher:
    """使用 Playwright 渲染页面

    每次获取启动一个无头浏览器，在同步调用方中通过 ``asyncio.run`` 执行。
    """

    def __init__(self, settings: FetchConfig | None = None):
        self.settings = settings or FetchConfig()
        self._files = FileFetcher()

    def fetch(self, url: str) -> str:
        if url.lower().startswith("file://"):
            return self._files.fetch(url)

        delay = get_random_delay(self.settings.request_delay_base, self.settings.request_delay_random)
        if delay > 0:
            time.sleep(delay)

        logger.info(f"[Fetch] 渲染: {url}")
        try:
            return asyncio.run(self._fetch(url))
        except FetchError:
            raise
        except Exception as e:  # noqa: BLE001
            raise FetchError(url, f"浏览器渲染失败 ({e})") from e

    async def _fetch(self, url: str) -> str:
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.settings.headless)
            try:
                context = await browser.new_context(user_agent=self.settings.user_agent)
                page = await context.new_page()
                resp = await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=int(self.settings.timeout_s * 1000),
                )
                if resp is not None and not resp.ok:
                    raise FetchError(url, f"HTTP {resp.status}")
                if self.settings.page_load_wait_ms > 0:
                    await page.wait_for_timeout(self.settings.page_load_wait_ms)
                return await page.content()
            finally:
                await browser.close()


def create_fetcher(settings: FetchConfig, render_js: bool | None = None) -> Fetcher:
    use_js = settings.render_js if render_js is None else render_js
    return DynamicFetcher(settings) if use_js else StaticFetcher(settings)
