from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .base import DriverError, DriverTimeout

# Visible text plus the current values of form fields, which innerText omits.
_SURFACE_TEXT_JS = """
(root) => {
  const parts = [root.innerText || root.textContent || ""];
  for (const field of root.querySelectorAll("input, textarea, select")) {
    if (field.type === "password" || field.type === "hidden") continue;
    const value = field.tagName === "SELECT"
      ? (field.selectedOptions[0] ? field.selectedOptions[0].textContent : "")
      : field.value;
    if (value) parts.push(value);
  }
  return parts.join("\\n");
}
"""

_INHERITED_ATTRIBUTE_JS = """
(el, name) => {
  for (let node = el; node; node = node.parentElement) {
    if (node.hasAttribute && node.hasAttribute(name)) return node.getAttribute(name);
  }
  return null;
}
"""

_SET_VALUE_JS = """
(el, value) => {
  const proto = Object.getPrototypeOf(el);
  const descriptor = Object.getOwnPropertyDescriptor(proto, "value");
  if (descriptor && descriptor.set) {
    descriptor.set.call(el, value);
  } else {
    el.value = value;
  }
  el.dispatchEvent(new Event("input", { bubbles: true }));
  el.dispatchEvent(new Event("change", { bubbles: true }));
}
"""


@contextmanager
def _translated(action: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise DriverTimeout(f"{action} timed out: {exc}") from exc
    except PlaywrightError as exc:
        raise DriverError(f"{action} failed: {exc}") from exc


class PlaywrightPageDriver:
    """Page driver backed by a Playwright ``Page``."""

    def __init__(self, page: Page, *, click_delay_ms: int = 30) -> None:
        self.page = page
        self.click_delay_ms = click_delay_ms

    async def goto(self, url: str, *, timeout_ms: int) -> None:
        with _translated(f"goto {url}"):
            await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    async def query(self, selector: str, *, within: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        with _translated(f"query {selector}"):
            return await (within or self.page).query_selector(selector)

    async def query_all(self, selector: str, *, within: Optional[ElementHandle] = None) -> Sequence[ElementHandle]:
        with _translated(f"query_all {selector}"):
            return await (within or self.page).query_selector_all(selector)

    async def wait_for(
        self,
        selector: str,
        *,
        timeout_ms: int,
        within: Optional[ElementHandle] = None,
    ) -> ElementHandle:
        with _translated(f"wait_for {selector}"):
            element = await (within or self.page).wait_for_selector(selector, state="visible", timeout=timeout_ms)
        if element is None:
            raise DriverTimeout(f"wait_for {selector} resolved without an element")
        return element

    async def text_of(self, element: ElementHandle) -> str:
        with _translated("text_of"):
            return await self.evaluate(_SURFACE_TEXT_JS, within=element) or ""

    async def body_text(self) -> str:
        with _translated("body_text"):
            return await self.evaluate(f"() => ({_SURFACE_TEXT_JS})(document.body)") or ""

    async def attribute_of(self, element: ElementHandle, name: str, *, inherit: bool = False) -> Optional[str]:
        with _translated(f"attribute_of {name}"):
            if inherit:
                return await self.evaluate(_INHERITED_ATTRIBUTE_JS, name, within=element)
            return await element.get_attribute(name)

    async def click(self, element: ElementHandle) -> None:
        with _translated("click"):
            await element.click(delay=self.click_delay_ms)

    async def fill(self, element: ElementHandle, value: str) -> None:
        with _translated("fill"):
            await element.click(click_count=3, delay=self.click_delay_ms)
            await element.fill(value)

    async def set_value(self, element: ElementHandle, value: str) -> None:
        with _translated("set_value"):
            await self.evaluate(_SET_VALUE_JS, value, within=element)

    async def press(self, key: str) -> None:
        with _translated(f"press {key}"):
            await self.page.keyboard.press(key)

    async def pause(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def wait_for_network_idle(self, *, timeout_ms: int) -> None:
        with _translated("wait_for_network_idle"):
            await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)

    async def evaluate(self, script: str, *args: Any, within: Optional[ElementHandle] = None) -> Any:
        """Run ``script`` in the page.

        With ``within`` the element is the script's first parameter. One extra
        argument is passed as is; several are passed as a list.
        """

        arg = args[0] if len(args) == 1 else (list(args) if args else None)
        with _translated("evaluate"):
            if within is not None:
                return await within.evaluate(script, arg)
            return await self.page.evaluate(script, arg)
