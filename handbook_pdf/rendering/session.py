"""Browser session lifecycle.

A ``RenderSession`` owns one Playwright driver, one Chromium browser, one
context and one page. Sessions are never shared between requests, and every
session acquired through ``BrowserSessionManager`` must be released on every
exit path; ``open_session`` gives that discipline as an async context manager.
"""

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Route,
    async_playwright,
)

from handbook_pdf.exceptions import LaunchError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import RenderOptions


@dataclass
class RenderSession:
    """Handles to one isolated browser instance and its single page."""

    driver: Playwright
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None
    page: Optional[Page] = None
    released: bool = False


class BrowserSessionManager:
    """Launches and tears down isolated Chromium sessions."""

    def __init__(
        self,
        logger: Optional[Logger] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        """
        Args:
            logger: Logger instance
            playwright_factory: Returns an object whose ``start()`` coroutine
                yields a Playwright driver (``async_playwright`` by default)
        """
        self.logger: Logger = logger or session_logger
        self._playwright_factory = playwright_factory
        self._live: Dict[str, RenderSession] = {}

    @property
    def active_sessions(self) -> int:
        """Number of sessions acquired and not yet released."""
        return len(self._live)

    async def acquire(self, options: RenderOptions) -> RenderSession:
        """
        Launch a headless browser and open one page configured from ``options``.

        Raises:
            LaunchError: If the driver, browser, context or page cannot be created
        """
        try:
            driver = await self._playwright_factory().start()
        except Exception as e:
            self.logger.error("Failed to start Playwright driver", error=str(e))
            raise LaunchError(f"Failed to start Playwright driver: {e}")

        session = RenderSession(driver=driver)
        self._live[session.session_id] = session

        try:
            launch_kwargs: Dict[str, Any] = {
                "headless": options.headless,
                "args": list(options.launch_args),
            }
            if options.executable_path:
                launch_kwargs["executable_path"] = options.executable_path
            session.browser = await driver.chromium.launch(**launch_kwargs)

            context_kwargs: Dict[str, Any] = {
                "viewport": {
                    "width": options.page.width_px,
                    "height": options.page.height_px,
                },
            }
            if options.user_agent:
                context_kwargs["user_agent"] = options.user_agent
            session.context = await session.browser.new_context(**context_kwargs)

            page = await session.context.new_page()
            page.set_default_timeout(options.navigation_timeout_ms)
            page.set_default_navigation_timeout(options.navigation_timeout_ms)
            if options.emulate_media:
                await page.emulate_media(media=options.emulate_media)
            if options.blocked_resource_types:
                await page.route("**/*", _blocking_handler(options.blocked_resource_types))
            session.page = page
        except Exception as e:
            self.logger.error(
                "Failed to launch browser session",
                session_id=session.session_id,
                executable_path=options.executable_path,
                error=str(e),
            )
            await self.release(session)
            raise LaunchError(
                f"Failed to launch browser: {e}",
                details={"executable_path": options.executable_path},
            )

        self.logger.info(
            "Browser session acquired",
            session_id=session.session_id,
            viewport=f"{options.page.width_px}x{options.page.height_px}",
            blocked=",".join(sorted(options.blocked_resource_types)) or "none",
        )
        return session

    async def release(self, session: RenderSession) -> None:
        """Close the session's page, context and browser and stop its driver.

        Idempotent. Close failures are logged and never raised.
        """
        if session.released:
            return
        session.released = True

        steps = []
        if session.page is not None:
            steps.append(("page", session.page.close))
        if session.context is not None:
            steps.append(("context", session.context.close))
        if session.browser is not None:
            steps.append(("browser", session.browser.close))
        steps.append(("driver", session.driver.stop))

        for name, close in steps:
            try:
                await close()
            except Exception as e:
                self.logger.warning(
                    "Failed to close browser resource",
                    session_id=session.session_id,
                    resource=name,
                    error=str(e),
                )

        self._live.pop(session.session_id, None)
        self.logger.debug("Browser session released", session_id=session.session_id)

    @asynccontextmanager
    async def open_session(self, options: RenderOptions) -> AsyncIterator[RenderSession]:
        session = await self.acquire(options)
        try:
            yield session
        finally:
            await self.release(session)


def _blocking_handler(blocked: frozenset):
    async def handle(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    return handle
