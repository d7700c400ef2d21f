"""
Turns a job's content into PDF bytes.

pdf content is only base64-decoded. html and url content go through a
headless Chromium driven by Playwright; every call launches its own browser
and closes it afterwards so no cookies or storage leak between jobs.
"""
import base64
import binascii
import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Optional

from playwright.async_api import Browser, Error as PlaywrightError, async_playwright

from print_agent.env import RENDER_TIMEOUT
from print_agent.errors import HeaderInjectionError, InvalidEncoding, RenderEngineError
from print_agent.models import JobFormat

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[], AsyncContextManager[Browser]]


@asynccontextmanager
async def launch_chromium() -> AsyncIterator[Browser]:
    async with async_playwright() as p:
        browser = await p.chromium.launch()
        try:
            yield browser
        finally:
            await browser.close()


def decode_pdf(content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncoding(f"content is not valid base64: {e}") from e


class Renderer:

    def __init__(self, browser_factory: BrowserFactory = launch_chromium, timeout: float = RENDER_TIMEOUT):
        self._browser_factory = browser_factory
        self._timeout_ms = timeout * 1000

    async def render(self, fmt: JobFormat, content: str, auth_token: Optional[str] = None) -> bytes:
        if fmt == JobFormat.pdf:
            return decode_pdf(content)
        if fmt == JobFormat.html:
            return await self._render_html(content)
        if fmt == JobFormat.url:
            return await self._render_url(content, auth_token)
        raise RenderEngineError(f"Unsupported format: {fmt}")

    async def _render_html(self, html: str) -> bytes:
        try:
            async with self._browser_factory() as browser:
                page = await browser.new_page()
                await page.set_content(html, wait_until="load", timeout=self._timeout_ms)
                return await page.pdf()
        except PlaywrightError as e:
            raise RenderEngineError(str(e)) from e

    async def _render_url(self, url: str, auth_token: Optional[str]) -> bytes:
        try:
            async with self._browser_factory() as browser:
                page = await browser.new_page()
                if auth_token:
                    try:
                        await page.set_extra_http_headers({"Authorization": f"Bearer {auth_token}"})
                    except PlaywrightError as e:
                        raise HeaderInjectionError(f"Failed to set headers: {e}") from e
                await page.goto(url, wait_until="load", timeout=self._timeout_ms)
                return await page.pdf(prefer_css_page_size=True)
        except PlaywrightError as e:
            raise RenderEngineError(str(e)) from e
