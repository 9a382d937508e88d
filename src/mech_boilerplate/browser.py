"""The browser contract generated methods talk to, and a Playwright adapter.

Generated methods never touch HTTP or HTML themselves; they drive an object
implementing :class:`Browser`. Any object with these methods works (a
mechanize-style wrapper, a fake for unit tests...). :class:`PlaywrightBrowser`
is the stock implementation on top of Playwright's sync API.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from urllib.parse import urljoin, urlparse

from playwright.sync_api import (
    Browser as PlaywrightBrowserHandle,
    Locator,
    Page,
    Playwright,
    Response,
    sync_playwright,
)

from mech_boilerplate.config import BrowserSettings
from mech_boilerplate.errors import ArgumentError, ElementLookupError

logger = logging.getLogger(__name__)

LINK_CRITERIA = ("text", "text_regex", "url", "url_regex", "id", "name", "n")

_COLLECT_LINKS_JS = """
els => els.map(a => ({
    url: a.href,
    text: (a.innerText || '').trim(),
    id: a.id || null,
    name: a.getAttribute('name'),
}))
"""


@runtime_checkable
class Link(Protocol):
    url: str


@runtime_checkable
class Browser(Protocol):
    """Capabilities a generated method needs from its browser."""

    def get(self, url: str) -> Any: ...

    def success(self) -> bool: ...

    def current_location(self) -> Optional[str]: ...

    def form_name(self, name: Any) -> Any: ...

    def form_id(self, form_id: Any) -> Any: ...

    def form_number(self, number: Any) -> Any: ...

    def set_fields(self, fields: Dict[str, Any]) -> None: ...

    def submit_form(
        self, fields: Optional[Dict[str, Any]] = None, button: Optional[str] = None
    ) -> Any: ...

    def find_link(self, **criteria: Any) -> Optional[Link]: ...


@dataclass
class PageLink:
    """An anchor found on the current page."""

    url: str
    text: str = ""
    id: Optional[str] = None
    name: Optional[str] = None


def _css_string(value: Any) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _matches(value: Optional[str], expected: Any) -> bool:
    if value is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(value) is not None
    return re.search(str(expected), value) is not None


class PlaywrightBrowser:
    """Mechanize-style browser backed by a Playwright page.

    Pass an existing ``page`` to drive a browser you manage yourself;
    otherwise a browser is launched on first use and shut down by
    :meth:`close`.
    """

    def __init__(
        self,
        page: Optional[Page] = None,
        *,
        engine: str = "chromium",
        headless: bool = True,
        base_url: Optional[str] = None,
        timeout_ms: int = 30000,
    ):
        self._page = page
        self._engine = engine
        self._headless = headless
        self._base_url = base_url
        self._timeout_ms = timeout_ms
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[PlaywrightBrowserHandle] = None
        self._response: Optional[Response] = None
        self._form: Optional[Locator] = None

    @classmethod
    def from_settings(cls, settings: BrowserSettings) -> "PlaywrightBrowser":
        return cls(
            engine=settings.engine,
            headless=settings.headless,
            base_url=settings.base_url,
            timeout_ms=settings.timeout_ms,
        )

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "PlaywrightBrowser":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def start(self) -> None:
        """Launch a browser and open a page, unless one is already available."""
        if self._page is not None:
            return
        logger.info(f"Launching {self._engine} (headless={self._headless})")
        self._playwright = sync_playwright().start()
        launcher = getattr(self._playwright, self._engine)
        self._browser = launcher.launch(headless=self._headless)
        self._page = self._browser.new_page()
        self._page.set_default_timeout(self._timeout_ms)

    def close(self) -> None:
        """Shut down a browser launched by :meth:`start`."""
        if self._browser is not None:
            self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._response = None
        self._form = None

    @property
    def page(self) -> Page:
        if self._page is None:
            self.start()
        return self._page  # type: ignore[return-value]

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    def _absolute(self, url: str) -> str:
        current = self._page.url if self._page is not None else ""
        if not current.startswith(("http://", "https://", "file://")):
            current = self._base_url or ""
        return urljoin(current, url)

    def get(self, url: str) -> Optional[Response]:
        target = self._absolute(url)
        logger.debug(f"GET {target}")
        self._response = self.page.goto(target)
        self._form = None
        return self._response

    def success(self) -> bool:
        return self._response is not None and bool(self._response.ok)

    def current_location(self) -> Optional[str]:
        if self._page is None:
            return None
        parsed = urlparse(self._page.url)
        if parsed.scheme not in ("http", "https", "file"):
            return None
        location = parsed.path or "/"
        if parsed.query:
            location += f"?{parsed.query}"
        return location

    # ------------------------------------------------------------------ #
    # Forms
    # ------------------------------------------------------------------ #

    def _select_form(self, selector: str) -> Optional[Locator]:
        forms = self.page.locator(selector)
        if forms.count() == 0:
            return None
        self._form = forms.first
        return self._form

    def form_name(self, name: Any) -> Optional[Locator]:
        return self._select_form(f"form[name={_css_string(name)}]")

    def form_id(self, form_id: Any) -> Optional[Locator]:
        return self._select_form(f"form[id={_css_string(form_id)}]")

    def form_number(self, number: Any) -> Optional[Locator]:
        """Select the ``number``-th form on the page, counting from 1."""
        try:
            index = int(number)
        except (TypeError, ValueError) as exc:
            raise ArgumentError(f"Form number [{number}] is not an integer") from exc
        forms = self.page.locator("form")
        if index < 1 or index > forms.count():
            return None
        self._form = forms.nth(index - 1)
        return self._form

    def _current_form(self) -> Locator:
        if self._form is None:
            if self._select_form("form") is None:
                raise ElementLookupError("There is no form on the current page")
        return self._form  # type: ignore[return-value]

    def set_fields(self, fields: Dict[str, Any]) -> None:
        """Fill named controls of the selected form (the first form by default)."""
        form = self._current_form()
        for name, value in fields.items():
            controls = form.locator(f"[name={_css_string(name)}]")
            if controls.count() == 0:
                raise ElementLookupError(f"No field named [{name}] in the selected form")
            control = controls.first
            tag = control.evaluate("el => el.tagName.toLowerCase()")
            input_type = (control.get_attribute("type") or "").lower()
            if tag == "select":
                control.select_option(value if isinstance(value, list) else str(value))
            elif input_type == "checkbox":
                control.set_checked(bool(value))
            elif input_type == "radio":
                form.locator(
                    f"[name={_css_string(name)}][value={_css_string(value)}]"
                ).check()
            else:
                control.fill(str(value))

    def submit_form(
        self, fields: Optional[Dict[str, Any]] = None, button: Optional[str] = None
    ) -> Optional[Response]:
        if fields:
            self.set_fields(fields)
        form = self._current_form()

        if button:
            control = form.locator(f"[name={_css_string(button)}]")
            if control.count() == 0:
                raise ElementLookupError(f"No button named [{button}] in the selected form")
        else:
            control = form.locator("[type=submit]")

        with self.page.expect_navigation() as navigation:
            if control.count():
                control.first.click()
            else:
                form.evaluate("f => f.requestSubmit()")
        self._response = navigation.value
        self._form = None
        return self._response

    # ------------------------------------------------------------------ #
    # Links
    # ------------------------------------------------------------------ #

    def links(self) -> List[PageLink]:
        return [
            PageLink(**data)
            for data in self.page.eval_on_selector_all("a[href]", _COLLECT_LINKS_JS)
        ]

    def find_link(self, **criteria: Any) -> Optional[PageLink]:
        """Find the ``n``-th link (default first) matching every criterion.

        Supported criteria: ``text``, ``text_regex``, ``url``, ``url_regex``,
        ``id``, ``name`` and ``n``.
        """
        unknown = sorted(set(criteria) - set(LINK_CRITERIA))
        if unknown:
            raise ArgumentError(f"Unknown link criteria: {', '.join(unknown)}")

        n = int(criteria.get("n", 1))
        candidates = []
        for link in self.links():
            if "text" in criteria and link.text != criteria["text"]:
                continue
            if "text_regex" in criteria and not _matches(link.text, criteria["text_regex"]):
                continue
            if "url" in criteria and link.url != self._absolute(criteria["url"]):
                continue
            if "url_regex" in criteria and not _matches(link.url, criteria["url_regex"]):
                continue
            if "id" in criteria and link.id != criteria["id"]:
                continue
            if "name" in criteria and link.name != criteria["name"]:
                continue
            candidates.append(link)

        if n < 1 or n > len(candidates):
            return None
        return candidates[n - 1]
