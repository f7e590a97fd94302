from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class DriverTimeout(TimeoutError):
    """Raised by a page driver when a bounded wait expires."""


class DriverError(RuntimeError):
    """Raised by a page driver when the browser rejects an interaction."""


class PageDriver(Protocol):
    """Capabilities the engine needs from one browser tab.

    Element handles are opaque; they are only ever passed back into the driver
    that produced them.
    """

    async def goto(self, url: str, *, timeout_ms: int) -> None: ...

    async def query(self, selector: str, *, within: Any = None) -> Optional[Any]: ...

    async def query_all(self, selector: str, *, within: Any = None) -> Sequence[Any]: ...

    async def wait_for(self, selector: str, *, timeout_ms: int, within: Any = None) -> Any: ...

    async def text_of(self, element: Any) -> str: ...

    async def body_text(self) -> str: ...

    async def attribute_of(self, element: Any, name: str, *, inherit: bool = False) -> Optional[str]: ...

    async def click(self, element: Any) -> None: ...

    async def fill(self, element: Any, value: str) -> None: ...

    async def set_value(self, element: Any, value: str) -> None: ...

    async def press(self, key: str) -> None: ...

    async def pause(self, ms: int) -> None: ...

    async def wait_for_network_idle(self, *, timeout_ms: int) -> None: ...

    async def evaluate(self, script: str, *args: Any, within: Any = None) -> Any: ...


async def settle(page: PageDriver, *, pause_ms: int, idle_timeout_ms: int) -> None:
    """Give the page a moment to react; a network that never idles is not fatal."""

    if pause_ms > 0:
        await page.pause(pause_ms)
    try:
        await page.wait_for_network_idle(timeout_ms=idle_timeout_ms)
    except DriverTimeout:
        logger.debug("Network did not go idle within %sms; continuing", idle_timeout_ms)


async def label_of(page: PageDriver, element: Any) -> str:
    """Visible text plus accessible labels of a control, normalized for matching."""

    parts = [await page.text_of(element)]
    for attribute in ("aria-label", "title", "value"):
        value = await page.attribute_of(element, attribute)
        if value:
            parts.append(value)
    return " ".join(" ".join(parts).split()).lower()
