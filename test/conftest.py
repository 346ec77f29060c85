"""Pytest configuration and fixtures

Provides shared fixtures for all tests: a temporary data directory per test,
fake Playwright drivers, and pipelines wired to both.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root and test directory to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from handbook_pdf.config import Config
from handbook_pdf.logger import ConsoleLogger
from handbook_pdf.models import RenderOptions
from handbook_pdf.rendering import BrowserSessionManager, HandbookPipeline
from handbook_pdf.storage import FileOutputStorage, reset_storage

from mock.browser import FakePage, FakePlaywright

HANDBOOK_URL = "https://handbooks.example.com/staff/?print=true"


@pytest.fixture(scope="function", autouse=True)
def test_data_dir(tmp_path):
    """
    Automatically provide a temporary data directory for each test

    This fixture:
    - Creates a unique temporary directory for each test
    - Configures handbook_pdf.config to use this directory
    - Resets the storage singleton before and after the test
    """
    test_dir = tmp_path / "handbook_pdf_test_data"
    (test_dir / "output").mkdir(parents=True, exist_ok=True)

    Config.set_test_mode(test_dir)
    reset_storage()

    yield test_dir

    Config.clear_test_mode()
    reset_storage()


@pytest.fixture
def console_logger():
    """Create a real ConsoleLogger instance."""
    return ConsoleLogger()


@pytest.fixture
def output_dir(test_data_dir):
    return test_data_dir / "output"


@pytest.fixture
def diagnostics_dir(output_dir):
    return output_dir / "diagnostics"


@pytest.fixture
def storage(output_dir, console_logger):
    return FileOutputStorage(str(output_dir), logger=console_logger)


@pytest.fixture
def fast_options():
    """Render options with no settle delay and short timeouts."""
    return RenderOptions(
        section_settle_delay_ms=0,
        navigation_timeout_ms=3000,
        capture_timeout_ms=3000,
        readiness_retries=2,
    )


@pytest.fixture
def make_pipeline(storage, diagnostics_dir, console_logger, fast_options):
    """
    Build a pipeline around a FakePlaywright.

    Usage:
        pipeline, playwright = make_pipeline(lambda: FakePage(sections=["A", "B"]))
    """

    def _make(page_factory=None, options=None, **playwright_kwargs):
        playwright = FakePlaywright(page_factory=page_factory, **playwright_kwargs)
        manager = BrowserSessionManager(console_logger, playwright_factory=playwright)
        pipeline = HandbookPipeline(
            options=options or fast_options,
            storage=storage,
            session_manager=manager,
            logger=console_logger,
            diagnostics_dir=str(diagnostics_dir),
        )
        return pipeline, playwright

    return _make


@pytest.fixture
def three_section_page():
    return lambda: FakePage(sections=["Welcome", "Policies", "Contacts"])


@pytest.fixture(scope="function")
def handbook_server():
    """
    Serve test/mock/data over HTTP on an ephemeral port.

    Returns:
        HandbookServer with get_url(path)
    """
    from mock.handbook_server import HandbookServer

    server = HandbookServer()
    server.start()

    yield server

    server.stop()


def browser_tests_enabled() -> bool:
    return os.environ.get("HANDBOOK_PDF_BROWSER_TESTS", "").lower() in ("1", "true", "yes")
