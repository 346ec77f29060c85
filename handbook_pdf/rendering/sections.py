"""Section discovery within a loaded handbook page."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from playwright.async_api import ElementHandle

from handbook_pdf.exceptions import NoSectionsFoundError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.rendering.session import RenderSession


@dataclass
class SectionSet:
    """Section handles in DOM order. Index ``i`` becomes output page ``i``."""

    container_selector: str
    item_selector: str
    handles: List[ElementHandle] = field(default_factory=list)

    @property
    def selector(self) -> str:
        return f"{self.container_selector} {self.item_selector}"

    def __len__(self) -> int:
        return len(self.handles)

    def __getitem__(self, index: int) -> ElementHandle:
        return self.handles[index]

    def __iter__(self) -> Iterator[ElementHandle]:
        return iter(self.handles)


async def locate(
    session: RenderSession,
    container_selector: str,
    item_selector: str,
    logger: Optional[Logger] = None,
) -> SectionSet:
    """
    Find every ``item_selector`` element inside ``container_selector``.

    Raises:
        NoSectionsFoundError: If nothing matches
    """
    logger = logger or session_logger
    section_set = SectionSet(container_selector=container_selector, item_selector=item_selector)
    section_set.handles = await session.page.query_selector_all(section_set.selector)

    if not section_set.handles:
        logger.warning("No sections found", selector=section_set.selector)
        raise NoSectionsFoundError(container_selector, item_selector)

    logger.info("Sections located", selector=section_set.selector, count=len(section_set))
    return section_set
