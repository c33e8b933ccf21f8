"""tab-level owner of `PausedRequest` objects.

`FetchInterceptor` enables the Fetch domain on a tab, wraps every
`Fetch.requestPaused` event in a `PausedRequest` and hands it to `on_request()`.

lifecycle:
1. `start()`: `Fetch.enable(patterns)` + register the event handler
2. per event: `handle(ev)` -> task running `on_request(request)`
3. if the hook left the request unhandled and `auto_continue` is set, it is continued untouched
4. `stop()`: detach, drain tasks, `Fetch.disable()`

override `on_request()` to decide what to do:

```python
class BlockImages(FetchInterceptor):
    async def on_request(self, request):
        if request.resource_type == cdp.network.ResourceType.IMAGE:
            await request.abort("BlockedByClient")
```
"""

from __future__ import annotations

import asyncio
import logging

import nodriver
from nodriver import cdp

from .paused_request import PausedRequest

logger = logging.getLogger("nodriverfetch.FetchInterceptor")


class FetchInterceptor:
    """dispatches paused requests for a single tab.

    concurrency: each event runs in its own Task; `wait_for_tasks()` drains them.
    requests stay in `pending` until their task finishes.
    """

    tab: nodriver.Tab
    patterns: list[cdp.fetch.RequestPattern] | None
    auto_continue: bool
    tasks: set[asyncio.Task]
    pending: dict[str, PausedRequest]

    def __init__(self,
        tab: nodriver.Tab,
        patterns: list[cdp.fetch.RequestPattern] | None = None,
        *,
        auto_continue: bool = True,
    ):
        """
        :param tab: the `Tab` to intercept on.
        :param patterns: only pause requests matching these; all requests when `None`.
        :param auto_continue: continue requests `on_request()` didn't resolve.
        """
        self.tab = tab
        self.patterns = patterns
        self.auto_continue = auto_continue
        self.tasks = set()
        self.pending = {}
        self._started = False


    async def on_request(self, request: PausedRequest):
        """hook for every paused request. resolve it here (or don't, see `auto_continue`).

        :param request: the wrapped event; call exactly one of its resolution methods.
        """
        pass


    async def _handle(self, request: PausedRequest):
        try:
            await self.on_request(request)
            if not request.handled and self.auto_continue:
                await request.continue_request()
        except Exception:
            logger.exception("failed to resolve paused request for %s", request.url)
        finally:
            self.pending.pop(request.request_id, None)


    def handle(self, ev: cdp.fetch.RequestPaused):
        """public entry: wrap `ev` and schedule `_handle` as a task.

        :param ev: interception event from the tab.
        """
        logger.debug("intercepted %s %s", ev.request.method, ev.request.url)
        request = PausedRequest(self.tab, ev)
        self.pending[ev.request_id] = request
        task = asyncio.create_task(self._handle(request))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return request


    def __call__(self, ev: cdp.fetch.RequestPaused):
        return self.handle(ev)


    async def wait_for_tasks(self):
        """await all outstanding interception tasks."""
        if self.tasks:
            logger.info("waiting for %d pending tasks to finish", len(self.tasks))
        await asyncio.gather(*self.tasks, return_exceptions=True)


    async def start(self):
        """enable the fetch domain and start receiving paused requests."""
        if self._started:
            return
        await self.tab.send(cdp.fetch.enable(patterns=self.patterns))
        self.tab.add_handler(cdp.fetch.RequestPaused, self.handle)
        self._started = True


    async def stop(self, remove_handler = True, wait_for_tasks = True, disable = True):
        """
        stop intercepting.

        :param remove_handler: whether to remove the `RequestPaused` handler
        :param wait_for_tasks: whether to wait for outstanding tasks to complete
        :param disable: whether to send `Fetch.disable` (releases anything still paused)
        """
        if remove_handler:
            self.tab.remove_handler(cdp.fetch.RequestPaused, self.handle)
        if wait_for_tasks:
            await self.wait_for_tasks()
        if disable:
            await self.tab.send(cdp.fetch.disable())
        self.pending.clear()
        self._started = False


    async def __aenter__(self):
        await self.start()
        return self


    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()


__all__ = [
    "FetchInterceptor",
]
