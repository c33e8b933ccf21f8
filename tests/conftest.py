import asyncio
from collections import defaultdict

import pytest

from nodriver import cdp


class FakeTab:
    """stands in for `nodriver.Tab`: drives cdp command generators like `Tab.send` does.

    every outbound `{"method", "params"}` message lands in `sent`. queue exceptions
    in `failures` to make the next sends fail (a `None` entry means succeed).
    """

    def __init__(self, failures=None, hang=False):
        self.sent = []
        self.failures = list(failures or [])
        self.hang = hang
        self.handlers = defaultdict(list)

    async def send(self, cdp_obj):
        message = cdp_obj.send(None)
        self.sent.append(message)
        if self.hang:
            await asyncio.Future()
        await asyncio.sleep(0)
        failure = self.failures.pop(0) if self.failures else None
        if failure is not None:
            raise failure
        try:
            cdp_obj.send({})
        except StopIteration as e:
            return e.value

    def add_handler(self, event_type, callback):
        if callback not in self.handlers[event_type]:
            self.handlers[event_type].append(callback)

    def remove_handler(self, event_type, callback):
        callbacks = self.handlers.get(event_type) or []
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def emit(self, ev):
        for callback in list(self.handlers[type(ev)]):
            callback(ev)

    @property
    def methods(self):
        return [m["method"] for m in self.sent]


def make_event(
    request_id="interception-job-1.0",
    url="https://example.com/",
    method="GET",
    resource_type="Document",
    network_id="1000.1",
    **extra,
) -> cdp.fetch.RequestPaused:
    data = {
        "requestId": request_id,
        "request": {
            "url": url,
            "method": method,
            "headers": {"Accept": "*/*"},
            "initialPriority": "VeryHigh",
            "referrerPolicy": "strict-origin-when-cross-origin",
        },
        "frameId": "F0A1B2C3",
        "resourceType": resource_type,
    }
    if network_id is not None:
        data["networkId"] = network_id
    data.update(extra)
    return cdp.fetch.RequestPaused.from_json(data)


@pytest.fixture
def tab():
    return FakeTab()


@pytest.fixture
def event():
    return make_event()
