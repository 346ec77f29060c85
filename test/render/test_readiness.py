"""Tests for navigation and readiness strategies."""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from handbook_pdf.exceptions import NavigationTimeoutError, PageLoadError
from handbook_pdf.models import ReadinessStrategy, RenderOptions
from handbook_pdf.rendering.readiness import (
    ASSETS_COMPLETE_SCRIPT,
    AssetCompleteWaiter,
    NetworkIdleWaiter,
    ReadinessWaiter,
    get_waiter,
    navigate,
)
from handbook_pdf.rendering.session import RenderSession

from mock.browser import FakePage

URL = "https://handbooks.example.com/?print=true"


def make_session(page: FakePage) -> RenderSession:
    return RenderSession(driver=None, page=page)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr("handbook_pdf.rendering.readiness.monotonic", fake)
    return fake


def slow_goto(page: FakePage, clock: FakeClock, took_ms: int) -> None:
    """Make page.goto consume ``took_ms`` of the clock before answering."""
    original = page.goto

    async def goto(url, wait_until=None, timeout=None):
        clock.advance_ms(took_ms)
        return await original(url, wait_until=wait_until, timeout=timeout)

    page.goto = goto


class TestStrategyRegistry:
    def test_network_idle_strategy(self):
        assert isinstance(get_waiter(ReadinessStrategy.NETWORK_IDLE), NetworkIdleWaiter)
        assert not isinstance(get_waiter(ReadinessStrategy.NETWORK_IDLE), AssetCompleteWaiter)

    def test_asset_complete_strategy(self):
        assert isinstance(get_waiter(ReadinessStrategy.ASSET_COMPLETE), AssetCompleteWaiter)


class TestNavigate:
    @pytest.mark.asyncio
    async def test_successful_navigation_returns_status(self, console_logger):
        page = FakePage(sections=["A"])
        status = await navigate(make_session(page), URL, RenderOptions(), console_logger)

        assert status == 200
        assert page.goto_calls[0]["url"] == URL
        assert page.goto_calls[0]["timeout"] == 90_000

    @pytest.mark.asyncio
    async def test_network_idle_does_not_poll_assets(self, console_logger):
        page = FakePage()
        options = RenderOptions(readiness_strategy=ReadinessStrategy.NETWORK_IDLE)
        await navigate(make_session(page), URL, options, console_logger)

        assert [call["state"] for call in page.load_state_calls] == ["networkidle"]
        assert page.function_calls == []

    @pytest.mark.asyncio
    async def test_asset_complete_polls_after_network_idle(self, console_logger):
        page = FakePage()
        options = RenderOptions(asset_poll_interval_ms=100)
        await navigate(make_session(page), URL, options, console_logger)

        assert len(page.load_state_calls) == 1
        call = page.function_calls[0]
        assert call["expression"] == ASSETS_COMPLETE_SCRIPT
        assert call["arg"] == {"checkStylesheets": True}
        assert call["polling"] == 100

    @pytest.mark.asyncio
    async def test_blocked_stylesheets_are_not_awaited(self, console_logger):
        page = FakePage()
        options = RenderOptions(blocked_resource_types={"stylesheet"})
        await navigate(make_session(page), URL, options, console_logger)

        assert page.function_calls[0]["arg"] == {"checkStylesheets": False}

    @pytest.mark.asyncio
    async def test_custom_waiter_overrides_strategy(self, console_logger):
        class FixedDelayWaiter(ReadinessWaiter):
            def __init__(self):
                self.calls = 0

            async def wait(self, page, options, timeout_ms):
                self.calls += 1

        waiter = FixedDelayWaiter()
        page = FakePage()
        await navigate(make_session(page), URL, RenderOptions(), console_logger, waiter=waiter)

        assert waiter.calls == 1
        assert page.load_state_calls == []


class TestNavigateFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_error_status_raises_page_load_error(self, status, console_logger):
        page = FakePage(status=status)
        with pytest.raises(PageLoadError) as exc_info:
            await navigate(make_session(page), URL, RenderOptions(), console_logger)

        assert exc_info.value.status == status
        assert exc_info.value.details["url"] == URL

    @pytest.mark.asyncio
    async def test_missing_response_raises_page_load_error(self, console_logger):
        page = FakePage(status=None)
        with pytest.raises(PageLoadError) as exc_info:
            await navigate(make_session(page), URL, RenderOptions(), console_logger)
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_network_error_raises_page_load_error(self, console_logger):
        page = FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
        with pytest.raises(PageLoadError) as exc_info:
            await navigate(make_session(page), URL, RenderOptions(), console_logger)
        assert "ERR_NAME_NOT_RESOLVED" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_goto_timeout_raises_navigation_timeout(self, console_logger):
        page = FakePage(goto_error=PlaywrightTimeoutError("Timeout 1000ms exceeded."))
        options = RenderOptions(navigation_timeout_ms=1000)
        with pytest.raises(NavigationTimeoutError) as exc_info:
            await navigate(make_session(page), URL, options, console_logger)

        assert exc_info.value.code == "TIMEOUT"
        assert exc_info.value.timeout_ms == 1000


class TestReadinessRetries:
    @pytest.mark.asyncio
    async def test_retries_until_ready(self, console_logger):
        page = FakePage(network_idle_failures=2)
        options = RenderOptions(
            readiness_strategy=ReadinessStrategy.NETWORK_IDLE, readiness_retries=2
        )
        status = await navigate(make_session(page), URL, options, console_logger)

        assert status == 200
        assert len(page.load_state_calls) == 3

    @pytest.mark.asyncio
    async def test_asset_poll_timeout_is_retried(self, console_logger):
        page = FakePage(asset_failures=1)
        options = RenderOptions(readiness_retries=1)
        await navigate(make_session(page), URL, options, console_logger)

        assert len(page.function_calls) == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_timeout(self, console_logger):
        page = FakePage(network_idle_failures=10)
        options = RenderOptions(
            readiness_strategy=ReadinessStrategy.NETWORK_IDLE,
            readiness_retries=2,
            navigation_timeout_ms=3000,
        )
        with pytest.raises(NavigationTimeoutError) as exc_info:
            await navigate(make_session(page), URL, options, console_logger)

        assert len(page.load_state_calls) == 3
        assert exc_info.value.details["attempts"] == 3

    @pytest.mark.asyncio
    async def test_ceiling_is_shared_across_attempts(self, console_logger, clock):
        page = FakePage(network_idle_failures=10)
        options = RenderOptions(
            readiness_strategy=ReadinessStrategy.NETWORK_IDLE,
            readiness_retries=3,
            navigation_timeout_ms=10_000,
        )
        with pytest.raises(NavigationTimeoutError):
            await navigate(make_session(page), URL, options, console_logger)

        assert [call["timeout"] for call in page.load_state_calls] == [2500] * 4


class TestNavigationDeadline:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("goto_ms, retries", [(0, 1), (4000, 1), (7000, 2), (9990, 0)])
    async def test_goto_and_readiness_fit_within_ceiling(
        self, console_logger, clock, goto_ms, retries
    ):
        """Time spent loading plus every readiness wait never exceeds the ceiling"""
        page = FakePage(network_idle_failures=100)
        slow_goto(page, clock, goto_ms)
        options = RenderOptions(
            readiness_strategy=ReadinessStrategy.NETWORK_IDLE,
            readiness_retries=retries,
            navigation_timeout_ms=10_000,
        )

        with pytest.raises(NavigationTimeoutError):
            await navigate(make_session(page), URL, options, console_logger)

        readiness_ms = sum(call["timeout"] for call in page.load_state_calls)
        assert len(page.load_state_calls) == retries + 1
        assert goto_ms + readiness_ms <= options.navigation_timeout_ms

    @pytest.mark.asyncio
    async def test_readiness_gets_what_goto_left(self, console_logger, clock):
        page = FakePage()
        slow_goto(page, clock, 6000)
        options = RenderOptions(
            readiness_strategy=ReadinessStrategy.NETWORK_IDLE,
            readiness_retries=1,
            navigation_timeout_ms=10_000,
        )

        await navigate(make_session(page), URL, options, console_logger)

        assert page.load_state_calls[0]["timeout"] == 2000

    @pytest.mark.asyncio
    async def test_budget_spent_by_goto_times_out_without_waiting(self, console_logger, clock):
        page = FakePage()
        slow_goto(page, clock, 10_000)
        options = RenderOptions(navigation_timeout_ms=10_000)

        with pytest.raises(NavigationTimeoutError) as exc_info:
            await navigate(make_session(page), URL, options, console_logger)

        assert page.load_state_calls == []
        assert exc_info.value.details["attempts"] == 0
