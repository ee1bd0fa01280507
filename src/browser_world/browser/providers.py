"""Named browser providers.

Each provider is configured once from :class:`BrowserConfig` and then called
without arguments to launch a fresh :class:`PlaywrightBrowserSession`. All of
them trust every TLS certificate and maximize the window (or, where the engine
cannot maximize, use the configured full-screen viewport).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional

from playwright.sync_api import Browser, BrowserContext, Playwright, sync_playwright

from ..config import BrowserConfig
from .playwright_session import PlaywrightBrowserSession

LOGGER = logging.getLogger(__name__)

PlaywrightFactory = Callable[[], Any]


class DriverProvider(ABC):
    """Zero-argument factory for one kind of browser."""

    name: ClassVar[str]
    releases_on_close: ClassVar[bool] = False

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        *,
        playwright_factory: Optional[PlaywrightFactory] = None,
    ) -> None:
        self._config = config or BrowserConfig()
        self._playwright_factory = playwright_factory or sync_playwright

    def __call__(self) -> PlaywrightBrowserSession:
        LOGGER.info("Launching %s browser", self.name)
        playwright = self._playwright_factory().start()
        try:
            browser, context = self.launch(playwright)
        except Exception:
            playwright.stop()
            raise
        return PlaywrightBrowserSession(
            self.name,
            playwright,
            context,
            browser,
            releases_on_close=self.releases_on_close,
            maximized=True,
            ignore_https_errors=True,
        )

    @abstractmethod
    def launch(self, playwright: Playwright) -> tuple[Optional[Browser], BrowserContext]:
        """Start the browser and return it with the context steps will use."""

    @property
    def viewport(self) -> dict[str, int]:
        return {
            "width": self._config.viewport_width,
            "height": self._config.viewport_height,
        }


class ChromeProvider(DriverProvider):
    name = "chrome"

    def launch(self, playwright: Playwright) -> tuple[Optional[Browser], BrowserContext]:
        launch_kwargs: dict[str, Any] = {
            "headless": self._config.headless,
            "args": [
                "--start-maximized",
                "--disable-extensions",
                "--ignore-certificate-errors",
            ],
        }
        if self._config.executable_path:
            launch_kwargs["executable_path"] = str(self._config.executable_path)
        browser = playwright.chromium.launch(**launch_kwargs)
        # no_viewport lets the maximized window decide the page size
        context = browser.new_context(ignore_https_errors=True, no_viewport=True)
        return browser, context


class FirefoxProvider(DriverProvider):
    """Firefox in a persistent context.

    Closing a persistent context shuts the browser down with it, so teardown
    never issues a separate quit for this provider.
    """

    name = "firefox"
    releases_on_close = True

    def launch(self, playwright: Playwright) -> tuple[Optional[Browser], BrowserContext]:
        user_data_dir = ""
        if self._config.profile_path:
            self._config.profile_path.mkdir(parents=True, exist_ok=True)
            user_data_dir = str(self._config.profile_path)
        launch_kwargs: dict[str, Any] = {
            "headless": self._config.headless,
            "ignore_https_errors": True,
            "viewport": self.viewport,
        }
        if self._config.executable_path:
            launch_kwargs["executable_path"] = str(self._config.executable_path)
        context = playwright.firefox.launch_persistent_context(user_data_dir, **launch_kwargs)
        return None, context


class WebKitProvider(DriverProvider):
    name = "webkit"

    def launch(self, playwright: Playwright) -> tuple[Optional[Browser], BrowserContext]:
        browser = playwright.webkit.launch(headless=self._config.headless)
        context = browser.new_context(ignore_https_errors=True, viewport=self.viewport)
        return browser, context


class HeadlessProvider(DriverProvider):
    """Headless Chromium for CI machines without a display."""

    name = "headless"

    def launch(self, playwright: Playwright) -> tuple[Optional[Browser], BrowserContext]:
        browser = playwright.chromium.launch(
            headless=True,
            args=["--ignore-certificate-errors", "--disable-gpu", "--no-sandbox"],
        )
        context = browser.new_context(ignore_https_errors=True, viewport=self.viewport)
        return browser, context


BUILTIN_PROVIDERS: tuple[type[DriverProvider], ...] = (
    ChromeProvider,
    FirefoxProvider,
    WebKitProvider,
    HeadlessProvider,
)
