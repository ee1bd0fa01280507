"""Playwright-powered browser session implementation."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Browser, BrowserContext, Error, Page, Playwright

from ..errors import ElementNotFoundError
from .base import BrowserActionError, BrowserSession

LOGGER = logging.getLogger(__name__)

_CLEAR_STORAGES_JS = """
() => {
    try {
        window.localStorage.clear();
        window.sessionStorage.clear();
    } catch (e) {
        // opaque origins such as about:blank have no storage
    }
}
"""


class PlaywrightBrowserSession(BrowserSession):
    """Browser session backed by Playwright."""

    def __init__(
        self,
        identifier: str,
        playwright: Playwright,
        context: BrowserContext,
        browser: Optional[Browser] = None,
        *,
        releases_on_close: bool = False,
        maximized: bool = False,
        ignore_https_errors: bool = False,
    ) -> None:
        self.identifier = identifier
        self.releases_on_close = releases_on_close
        self.maximized = maximized
        self.ignore_https_errors = ignore_https_errors
        self._playwright: Optional[Playwright] = playwright
        self._browser = browser
        self._context: Optional[BrowserContext] = context
        pages = context.pages
        self._page: Optional[Page] = pages[0] if pages else context.new_page()

    @property
    def is_live(self) -> bool:
        return self._context is not None

    @property
    def page(self) -> Page:
        if not self._page or not self._context:
            raise BrowserActionError("Browser session is not started")
        if self._page.is_closed():
            pages = self._context.pages
            if not pages:
                raise BrowserActionError("Browser session has no open window")
            self._page = pages[-1]
        return self._page

    @property
    def context(self) -> BrowserContext:
        if not self._context:
            raise BrowserActionError("Browser session is not started")
        return self._context

    def close(self) -> None:
        LOGGER.debug("Closing browser context of %s session", self.identifier)
        context, self._context = self._context, None
        self._page = None
        try:
            if context:
                context.close()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        finally:
            if self.releases_on_close:
                self._stop_playwright()

    def quit(self) -> None:
        LOGGER.debug("Quitting %s session", self.identifier)
        try:
            if self._browser:
                self._browser.close()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        finally:
            self._browser = None
            self._stop_playwright()

    def screenshot(self) -> bytes:
        return self._call(lambda: self.page.screenshot(full_page=True))

    def clear_cookies(self) -> None:
        self._call(self.context.clear_cookies)

    def clear_storages(self) -> None:
        self._call(lambda: self.page.evaluate(_CLEAR_STORAGES_JS))

    def get_attribute(self, selector: str, name: str) -> Optional[str]:
        element = self._call(lambda: self.page.query_selector(selector))
        if element is None:
            raise ElementNotFoundError(selector)
        return self._call(lambda: element.get_attribute(name))

    def window_handles(self) -> list[Page]:
        return list(self.context.pages)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        return self._call(lambda: self.page.evaluate(script, arg))

    def _stop_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright:
            playwright.stop()

    @staticmethod
    def _call(func):
        try:
            return func()
        except Error as exc:  # pragma: no cover - Playwright exception path
            raise BrowserActionError(str(exc)) from exc
