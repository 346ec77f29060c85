"""Navigation and load-readiness detection.

Which signal counts as "fully loaded" is a policy choice, so strategies are
pluggable: each ``ReadinessStrategy`` maps to a waiter in
``READINESS_WAITERS`` and callers may pass their own waiter instead.
"""

import math
from abc import ABC, abstractmethod
from time import monotonic
from typing import Dict, Optional, Type

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from handbook_pdf.exceptions import NavigationTimeoutError, PageLoadError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import ReadinessStrategy, RenderOptions
from handbook_pdf.rendering.session import RenderSession

ASSETS_COMPLETE_SCRIPT = """
({ checkStylesheets }) => {
    if (document.readyState !== "complete") {
        return false;
    }
    if (document.fonts && document.fonts.status !== "loaded") {
        return false;
    }
    if (!Array.from(document.images).every((img) => img.complete)) {
        return false;
    }
    if (checkStylesheets) {
        const links = document.querySelectorAll('link[rel="stylesheet"]');
        return Array.from(links).every((link) => link.sheet !== null);
    }
    return true;
}
"""


class ReadinessWaiter(ABC):
    """Waits until a navigated page is stable enough to capture."""

    @abstractmethod
    async def wait(self, page: Page, options: RenderOptions, timeout_ms: int) -> None:
        """Return once ready; raise Playwright's TimeoutError otherwise."""


class NetworkIdleWaiter(ReadinessWaiter):
    """No in-flight network connections for Playwright's settling interval."""

    async def wait(self, page: Page, options: RenderOptions, timeout_ms: int) -> None:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)


class AssetCompleteWaiter(NetworkIdleWaiter):
    """Network idle, then poll until fonts, images and stylesheets report loaded."""

    async def wait(self, page: Page, options: RenderOptions, timeout_ms: int) -> None:
        await super().wait(page, options, timeout_ms)
        await page.wait_for_function(
            ASSETS_COMPLETE_SCRIPT,
            arg={"checkStylesheets": "stylesheet" not in options.blocked_resource_types},
            timeout=timeout_ms,
            polling=options.asset_poll_interval_ms,
        )


READINESS_WAITERS: Dict[ReadinessStrategy, Type[ReadinessWaiter]] = {
    ReadinessStrategy.NETWORK_IDLE: NetworkIdleWaiter,
    ReadinessStrategy.ASSET_COMPLETE: AssetCompleteWaiter,
}


def get_waiter(strategy: ReadinessStrategy) -> ReadinessWaiter:
    return READINESS_WAITERS[strategy]()


async def navigate(
    session: RenderSession,
    url: str,
    options: RenderOptions,
    logger: Optional[Logger] = None,
    waiter: Optional[ReadinessWaiter] = None,
) -> int:
    """
    Load ``url`` in the session's page and wait for readiness.

    ``navigation_timeout_ms`` bounds the whole step. Whatever ``goto`` leaves
    of it is split evenly across ``readiness_retries + 1`` readiness attempts.

    Returns:
        HTTP status of the main document response

    Raises:
        PageLoadError: If the response is missing or not successful
        NavigationTimeoutError: If navigation or readiness exceeds the ceiling
    """
    logger = logger or session_logger
    waiter = waiter or get_waiter(options.readiness_strategy)
    page = session.page

    logger.info("Navigating", url=url, strategy=options.readiness_strategy.value)
    started = monotonic()
    try:
        response = await page.goto(url, wait_until="load", timeout=options.navigation_timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationTimeoutError(
            f"Navigation to '{url}' timed out after {options.navigation_timeout_ms}ms",
            timeout_ms=options.navigation_timeout_ms,
            url=url,
        ) from e
    except PlaywrightError as e:
        raise PageLoadError(url, reason=e.message) from e

    if response is None:
        raise PageLoadError(url)
    if not response.ok:
        raise PageLoadError(url, status=response.status)

    attempts = options.readiness_retries + 1
    elapsed_ms = math.ceil((monotonic() - started) * 1000)
    remaining_ms = options.navigation_timeout_ms - elapsed_ms
    if remaining_ms < attempts:
        raise NavigationTimeoutError(
            f"Page '{url}' used its {options.navigation_timeout_ms}ms budget before readiness",
            timeout_ms=options.navigation_timeout_ms,
            url=url,
            attempts=0,
        )
    attempt_timeout_ms = remaining_ms // attempts
    for attempt in range(1, attempts + 1):
        try:
            await waiter.wait(page, options, attempt_timeout_ms)
        except PlaywrightTimeoutError as e:
            logger.warning(
                "Readiness wait timed out",
                url=url,
                attempt=attempt,
                attempts=attempts,
                timeout_ms=attempt_timeout_ms,
            )
            if attempt == attempts:
                raise NavigationTimeoutError(
                    f"Page '{url}' did not become ready within {options.navigation_timeout_ms}ms",
                    timeout_ms=options.navigation_timeout_ms,
                    url=url,
                    attempts=attempts,
                ) from e
            continue

        logger.info("Page ready", url=url, status=response.status, attempt=attempt)
        break

    return response.status
