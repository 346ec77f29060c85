"""Render the current page state to a single PDF page."""

import asyncio
from typing import Optional

from playwright.async_api import Error as PlaywrightError

from handbook_pdf.exceptions import CaptureError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import PageDimensions, RenderOptions
from handbook_pdf.rendering.sections import SectionSet
from handbook_pdf.rendering.session import RenderSession
from handbook_pdf.rendering.visibility import VisibilityState, isolate

ZERO_MARGIN = {"top": "0px", "right": "0px", "bottom": "0px", "left": "0px"}


async def capture_current(
    session: RenderSession,
    dimensions: PageDimensions,
    state: VisibilityState,
    timeout_ms: int,
    logger: Optional[Logger] = None,
) -> bytes:
    """
    Print the page as it currently renders into one fixed-size PDF page.

    ``state`` is the visibility produced by ``isolate`` for this capture.

    Raises:
        CaptureError: On a rendering fault, a timeout, or a non-PDF result
    """
    logger = logger or session_logger
    try:
        fragment = await asyncio.wait_for(
            session.page.pdf(
                width=dimensions.width,
                height=dimensions.height,
                print_background=True,
                margin=ZERO_MARGIN,
                prefer_css_page_size=False,
            ),
            timeout=timeout_ms / 1000,
        )
    except asyncio.TimeoutError as e:
        raise CaptureError(
            f"Capturing section {state.index} timed out after {timeout_ms}ms",
            state.index,
            details={"timeout_ms": timeout_ms},
        ) from e
    except PlaywrightError as e:
        raise CaptureError(f"Failed to capture section {state.index}: {e.message}", state.index) from e

    if not fragment or not fragment.startswith(b"%PDF"):
        raise CaptureError(f"Capture of section {state.index} did not produce a PDF", state.index)

    logger.debug("Section captured", index=state.index, total=state.total, size=len(fragment))
    return fragment


async def capture_section(
    session: RenderSession,
    section_set: SectionSet,
    index: int,
    options: RenderOptions,
    logger: Optional[Logger] = None,
) -> bytes:
    """Isolate section ``index``, let layout settle, then capture it."""
    state = await isolate(session, section_set, index, logger)
    if options.section_settle_delay_ms:
        await asyncio.sleep(options.section_settle_delay_ms / 1000)
    return await capture_current(session, options.page, state, options.capture_timeout_ms, logger)
