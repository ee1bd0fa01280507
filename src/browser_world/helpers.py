"""Higher-level interaction helpers exposed to step definitions as ``context.helpers``."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .browser.base import BrowserSession
from .waits import WaitEngine

LOGGER = logging.getLogger(__name__)

_CLICK_IN_DOM_JS = """
([query, content]) => {
    const elements = document.querySelectorAll(query);
    const txtProp = ('textContent' in document) ? 'textContent' : 'innerText';
    let clicked = 0;
    for (const element of elements) {
        if (!content || element[txtProp] === content) {
            element.click();
            clicked += 1;
        }
    }
    return clicked;
}
"""

_PSEUDO_CONTENT_JS = """
([query, pseudo]) => {
    const el = document.querySelector(query);
    const styles = el ? window.getComputedStyle(el, pseudo) : null;
    return styles ? styles.getPropertyValue('content') : '';
}
"""


class Helpers:
    """Thin wrappers over single browser calls, all against the current session."""

    def __init__(
        self,
        session_provider: Callable[[], BrowserSession],
        waits: WaitEngine,
    ) -> None:
        self._session_provider = session_provider
        self._waits = waits

    @property
    def session(self) -> BrowserSession:
        return self._session_provider()

    def load_page(self, url: str, wait_in_seconds: Optional[float] = None) -> Any:
        """Open ``url`` and wait until its ``body`` element is present."""

        timeout = int(wait_in_seconds * 1000) if wait_in_seconds else None
        LOGGER.info("Loading %s", url)
        self.session.page.goto(url)
        return self._waits.wait_for_element("body", timeout)

    def get_attribute_value(self, selector: str, attribute: str) -> Optional[str]:
        return self.session.get_attribute(selector, attribute)

    def get_elements_containing_text(self, selector: str, text: str) -> list[Any]:
        """Return elements under ``selector`` whose trimmed text equals ``text``.

        Matching uses the DOM text content, so hidden elements are included.
        """

        wanted = text.strip()
        return [
            element
            for element in self.session.page.query_selector_all(selector)
            if (element.text_content() or "").strip() == wanted
        ]

    def get_first_element_containing_text(self, selector: str, text: str) -> Optional[Any]:
        elements = self.get_elements_containing_text(selector, text)
        return elements[0] if elements else None

    def click_hidden_element(self, selector: str, text: Optional[str] = None) -> int:
        """Click matching elements from inside the page, bypassing visibility checks."""

        return self.session.evaluate(_CLICK_IN_DOM_JS, [selector, text])

    def wait_until_attribute_equals(
        self, selector: str, attribute: str, value: str, timeout: Optional[int] = None
    ) -> bool:
        return self._waits.wait_until_attribute_equals(selector, attribute, value, timeout)

    def wait_until_attribute_exists(
        self, selector: str, attribute: str, timeout: Optional[int] = None
    ) -> bool:
        return self._waits.wait_until_attribute_exists(selector, attribute, timeout)

    def wait_until_attribute_does_not_exist(
        self, selector: str, attribute: str, timeout: Optional[int] = None
    ) -> bool:
        return self._waits.wait_until_attribute_does_not_exist(selector, attribute, timeout)

    def wait_for_element(self, selector: str, timeout: Optional[int] = None) -> Any:
        return self._waits.wait_for_element(selector, timeout)

    def scroll_to_element(self, element: Any) -> Any:
        return element.evaluate("el => el.scrollIntoView(false)")

    def select_dropdown_value_by_visible_text(self, selector: str, option_name: str) -> Any:
        """Choose the ``<option>`` whose text matches ``option_name``, ignoring case."""

        select = self.wait_for_element(selector)
        options = select.query_selector_all("option")
        labels = [(option.inner_text() or "").strip().upper() for option in options]
        try:
            index = labels.index(option_name.strip().upper())
        except ValueError:
            raise ValueError(f"No option '{option_name}' in {selector}") from None
        return select.select_option(index=index)

    def wait_for_new_windows(self, timeout: Optional[int] = None) -> Optional[list[Any]]:
        return self._waits.wait_for_new_windows(timeout)

    def get_pseudo_element_before_value(self, selector: str) -> str:
        return self.session.evaluate(_PSEUDO_CONTENT_JS, [selector, ":before"])

    def get_pseudo_element_after_value(self, selector: str) -> str:
        return self.session.evaluate(_PSEUDO_CONTENT_JS, [selector, ":after"])

    def clear_cookies(self) -> None:
        self.session.clear_cookies()

    def clear_storages(self) -> None:
        self.session.clear_storages()

    def clear_cookies_and_storages(self) -> None:
        self.clear_cookies()
        self.clear_storages()
