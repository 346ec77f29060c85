"""Tests for the per-request diagnostic recorder."""

import asyncio
import json

import pytest

from handbook_pdf.exceptions import NavigationTimeoutError
from handbook_pdf.rendering.diagnostics import MAX_EVENTS, DiagnosticRecorder

from mock.browser import FakeConsoleMessage, FakePage, FakeRequest, FakeResponse


@pytest.fixture
def recorder(diagnostics_dir, console_logger):
    return DiagnosticRecorder(str(diagnostics_dir), "req123", logger=console_logger)


def test_bundle_directory_is_scoped_to_request(recorder, diagnostics_dir):
    assert recorder.directory == diagnostics_dir / "req123"


def test_attach_buffers_console_and_network(recorder):
    page = FakePage(sections=["A"])
    recorder.attach(page)

    page.emit("console", FakeConsoleMessage("error", "Uncaught ReferenceError"))
    page.emit("pageerror", "boom")
    page.emit("request", FakeRequest("https://cdn.example.com/a.css", "stylesheet"))
    page.emit("response", FakeResponse(404, "https://cdn.example.com/a.css"))
    page.emit("requestfailed", FakeRequest("https://cdn.example.com/b.woff", "font", "net::ERR_ABORTED"))

    assert [entry["type"] for entry in recorder.console] == ["error", "pageerror"]
    assert [entry["event"] for entry in recorder.network] == ["request", "response", "requestfailed"]
    assert recorder.network[1]["status"] == 404
    assert recorder.network[2]["failure"] == "net::ERR_ABORTED"


def test_event_buffers_are_bounded(recorder):
    page = FakePage()
    recorder.attach(page)
    for i in range(MAX_EVENTS + 10):
        page.emit("console", FakeConsoleMessage("log", str(i)))
    assert len(recorder.console) == MAX_EVENTS


@pytest.mark.asyncio
async def test_checkpoint_only_notes_timeline_by_default(recorder):
    await recorder.checkpoint("loaded", FakePage(), url="https://x")

    assert recorder.timeline[0]["checkpoint"] == "loaded"
    assert recorder.timeline[0]["url"] == "https://x"
    assert not recorder.directory.exists()


@pytest.mark.asyncio
async def test_checkpoint_persists_snapshots_when_requested(diagnostics_dir, console_logger):
    recorder = DiagnosticRecorder(
        str(diagnostics_dir), "req456", logger=console_logger, persist_checkpoints=True
    )
    await recorder.checkpoint("section-0", FakePage(sections=["Intro"]), index=0)

    assert (recorder.directory / "section-0.png").exists()
    assert "Intro" in (recorder.directory / "section-0.html").read_text()


@pytest.mark.asyncio
async def test_record_failure_writes_bundle(recorder):
    page = FakePage(sections=["Intro"])
    recorder.attach(page)
    page.emit("console", FakeConsoleMessage("warning", "slow font"))
    error = NavigationTimeoutError("too slow", timeout_ms=1000)

    await recorder.record_failure(error, page)

    files = {path.name for path in recorder.directory.iterdir()}
    assert files == {
        "error.json",
        "failure.png",
        "failure.html",
        "console.log",
        "network.json",
        "timeline.json",
    }
    payload = json.loads((recorder.directory / "error.json").read_text())
    assert payload["error_code"] == "TIMEOUT"
    assert payload["request_id"] == "req123"
    assert "slow font" in (recorder.directory / "console.log").read_text()
    timeline = json.loads((recorder.directory / "timeline.json").read_text())
    assert timeline[-1]["checkpoint"] == "failure"


@pytest.mark.asyncio
async def test_screenshot_failure_is_swallowed(recorder):
    page = FakePage(screenshot_error=RuntimeError("Target closed"))

    await recorder.record_failure(NavigationTimeoutError("too slow"), page)

    assert not (recorder.directory / "failure.png").exists()
    assert (recorder.directory / "failure.html").exists()
    assert (recorder.directory / "error.json").exists()


@pytest.mark.asyncio
async def test_record_failure_without_page(recorder):
    await recorder.record_failure(NavigationTimeoutError("too slow"), None)

    assert (recorder.directory / "error.json").exists()
    assert not (recorder.directory / "failure.png").exists()


@pytest.mark.asyncio
async def test_unwritable_directory_is_tolerated(tmp_path, console_logger):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    recorder = DiagnosticRecorder(str(blocker), "req789", logger=console_logger)

    await recorder.record_failure(NavigationTimeoutError("too slow"), FakePage())

    assert recorder.written == []


@pytest.mark.asyncio
async def test_disabled_recorder_writes_nothing(diagnostics_dir, console_logger):
    recorder = DiagnosticRecorder(str(diagnostics_dir), "off", logger=console_logger, enabled=False)
    page = FakePage()
    recorder.attach(page)
    await recorder.checkpoint("loaded", page)
    await recorder.record_failure(NavigationTimeoutError("too slow"), page)

    assert page.listeners == {}
    assert recorder.timeline == []
    assert not recorder.directory.exists()


@pytest.mark.asyncio
async def test_discard_removes_bundle(recorder):
    await recorder.record_failure(NavigationTimeoutError("too slow"), FakePage())
    assert recorder.directory.exists()

    recorder.discard()

    assert not recorder.directory.exists()
    assert recorder.written == []


@pytest.mark.asyncio
async def test_hung_page_snapshots_are_bounded(diagnostics_dir, console_logger):
    """A renderer that never answers only costs the snapshot timeout"""
    recorder = DiagnosticRecorder(
        str(diagnostics_dir), "hung", logger=console_logger, snapshot_timeout_ms=50
    )
    page = FakePage(hang_snapshots=True)

    await asyncio.wait_for(recorder.record_failure(NavigationTimeoutError("too slow"), page), 5)

    assert page.screenshot_calls[0]["timeout"] == 50
    assert (recorder.directory / "error.json").exists()
    assert not (recorder.directory / "failure.png").exists()
    assert not (recorder.directory / "failure.html").exists()
