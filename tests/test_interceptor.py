import logging

import pytest

from nodriver import cdp
from nodriver.core.connection import ProtocolException

from nodriverfetch import FetchInterceptor, ResponseForRequest

from conftest import FakeTab, make_event

pytestmark = [pytest.mark.interceptor, pytest.mark.asyncio]


class MockApi(FetchInterceptor):
    async def on_request(self, request):
        if request.resource_type == cdp.network.ResourceType.IMAGE:
            await request.abort("BlockedByClient")
        elif request.url.endswith("/api"):
            await request.respond(ResponseForRequest(content_type="application/json", body="{}"))


async def test_start_enables_fetch_with_patterns(tab):
    patterns = [cdp.fetch.RequestPattern(url_pattern="*/api*")]
    interceptor = FetchInterceptor(tab, patterns)
    await interceptor.start()
    await interceptor.start()
    assert tab.sent == [{
        "method": "Fetch.enable",
        "params": {"patterns": [{"urlPattern": "*/api*"}]},
    }]
    assert tab.handlers[cdp.fetch.RequestPaused] == [interceptor.handle]


async def test_unhandled_requests_are_continued(tab):
    interceptor = FetchInterceptor(tab)
    await interceptor.start()
    tab.emit(make_event())
    await interceptor.wait_for_tasks()
    assert tab.methods == ["Fetch.enable", "Fetch.continueRequest"]
    assert interceptor.pending == {}


async def test_hook_resolution_is_not_continued_again(tab):
    interceptor = MockApi(tab)
    await interceptor.start()
    tab.emit(make_event(request_id="i-1", url="https://example.com/logo.png", resource_type="Image"))
    tab.emit(make_event(request_id="i-2", url="https://example.com/api", resource_type="XHR"))
    tab.emit(make_event(request_id="i-3", url="https://example.com/"))
    await interceptor.wait_for_tasks()
    assert tab.methods == [
        "Fetch.enable",
        "Fetch.failRequest",
        "Fetch.fulfillRequest",
        "Fetch.continueRequest",
    ]
    assert tab.sent[1]["params"]["errorReason"] == "BlockedByClient"
    assert {"name": "content-type", "value": "application/json"} in tab.sent[2]["params"]["responseHeaders"]


async def test_auto_continue_off_leaves_request_paused(tab):
    interceptor = FetchInterceptor(tab, auto_continue=False)
    await interceptor.start()
    request = interceptor.handle(make_event())
    await interceptor.wait_for_tasks()
    assert request.handled is False
    assert tab.methods == ["Fetch.enable"]


async def test_failures_are_logged_not_raised(caplog):
    tab = FakeTab(failures=[None, ProtocolException({"message": "Invalid InterceptionId.", "code": -32602})])
    interceptor = FetchInterceptor(tab)
    await interceptor.start()
    with caplog.at_level(logging.ERROR, logger="nodriverfetch.FetchInterceptor"):
        request = interceptor.handle(make_event())
        await interceptor.wait_for_tasks()
    assert request.handled is False
    assert "failed to resolve paused request for https://example.com/" in caplog.text
    assert interceptor.pending == {}


async def test_context_manager_stops_cleanly(tab):
    async with FetchInterceptor(tab) as interceptor:
        assert interceptor.handle in tab.handlers[cdp.fetch.RequestPaused]
    assert tab.methods == ["Fetch.enable", "Fetch.disable"]
    assert not tab.handlers[cdp.fetch.RequestPaused]
