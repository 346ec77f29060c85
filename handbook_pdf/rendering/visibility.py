"""Show exactly one section at a time.

Sections are hidden by toggling a dedicated class backed by an injected
stylesheet. Inline styles on the sections are never touched.
"""

from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Error as PlaywrightError

from handbook_pdf.exceptions import CaptureError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.rendering.sections import SectionSet
from handbook_pdf.rendering.session import RenderSession

HIDDEN_CLASS = "handbook-pdf-hidden"
STYLE_ELEMENT_ID = "handbook-pdf-visibility"
HIDDEN_CSS = f".{HIDDEN_CLASS} {{ display: none !important; }}"

# Installs the stylesheet once per document, then toggles the class.
# Returns the number of sections left visible.
ISOLATE_SCRIPT = """
([sections, index, hiddenClass, styleId, css]) => {
    if (!document.getElementById(styleId)) {
        const style = document.createElement("style");
        style.id = styleId;
        style.textContent = css;
        (document.head || document.documentElement).appendChild(style);
    }
    sections.forEach((el, i) => el.classList.toggle(hiddenClass, i !== index));
    return sections.filter((el) => !el.classList.contains(hiddenClass)).length;
}
"""


@dataclass(frozen=True)
class VisibilityState:
    """Which section is currently render-visible."""

    index: int
    total: int


async def isolate(
    session: RenderSession,
    section_set: SectionSet,
    index: int,
    logger: Optional[Logger] = None,
) -> VisibilityState:
    """
    Make section ``index`` the only visible section.

    Raises:
        CaptureError: If the index is out of range or the page rejects the mutation
    """
    logger = logger or session_logger
    total = len(section_set)
    if not 0 <= index < total:
        raise CaptureError(f"Section index {index} out of range (0..{total - 1})", index)

    try:
        visible = await session.page.evaluate(
            ISOLATE_SCRIPT,
            [section_set.handles, index, HIDDEN_CLASS, STYLE_ELEMENT_ID, HIDDEN_CSS],
        )
    except PlaywrightError as e:
        raise CaptureError(f"Failed to isolate section {index}: {e.message}", index) from e

    if visible != 1:
        raise CaptureError(
            f"Expected exactly one visible section after isolating {index}, found {visible}",
            index,
        )

    logger.debug("Section isolated", index=index, total=total)
    return VisibilityState(index=index, total=total)
