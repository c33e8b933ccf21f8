"""one-shot resolution of a single `Fetch.requestPaused` event.

chrome holds the request until the client answers exactly once with one of:
- `Fetch.continueRequest` -> `PausedRequest.continue_request()`
- `Fetch.failRequest` -> `PausedRequest.abort()`
- `Fetch.fulfillRequest` -> `PausedRequest.respond()`

state:
- pending: `handled` is False
- in flight: `handled` flipped to True synchronously, command awaiting chrome's ack
- resolved: ack arrived, `handled` stays True for good

a second resolution attempt (even one issued before the first was awaited) raises
`RequestAlreadyHandledError` without sending anything. when the send itself fails,
`handled` goes back to False and the normalized `ProtocolError` is raised, so the
caller may try again.

note: chrome might have partially applied a command before the failure came back.
in that case local and remote state can disagree; nothing here tries to reconcile it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

import nodriver
from nodriver import cdp

from .errors import RequestAlreadyHandledError, normalize_error
from .status_texts import status_text
from .wire import (
    ParsedBody,
    get_response,
    headers_array,
    normalize_response_headers,
    string_to_base64,
)

logger = logging.getLogger("nodriverfetch.PausedRequest")

Session = Union[nodriver.Tab, nodriver.Connection]


@dataclass
class ContinueRequestOverrides:
    """overrides for `continue_request()`. `None` keeps chrome's original value.

    - url: new url (not observable by the page)
    - method: new http method
    - post_data: new request body as text (sent base64-encoded)
    - headers: replacement headers; str or list-of-str values
    """
    url: str | None = None
    method: str | None = None
    post_data: str | None = None
    headers: Mapping[str, Any] | None = None


@dataclass
class ResponseForRequest:
    """synthetic response for `respond()`.

    - status: http status code, 200 when falsy
    - headers: response headers; names are lowercased, values stringified
    - content_type: written over any `content-type` header
    - body: text (utf-8) or raw bytes
    """
    status: int | None = None
    headers: Mapping[str, Any] | None = None
    content_type: str | None = None
    body: str | bytes | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResponseForRequest":
        return cls(
            status=data.get("status"),
            headers=data.get("headers"),
            content_type=data.get("content_type", data.get("contentType")),
            body=data.get("body"),
        )


class PausedRequest:
    """wraps a `cdp.fetch.RequestPaused` event and the session it came from.

    every field of the event is read-only. the only thing that changes is `handled`.

    ```python
    async def on_paused(ev: cdp.fetch.RequestPaused):
        request = PausedRequest(tab, ev)
        if request.resource_type == cdp.network.ResourceType.IMAGE:
            await request.abort("BlockedByClient")
        else:
            await request.continue_request()
    ```
    """

    def __init__(self, session: Session, event: cdp.fetch.RequestPaused):
        """
        :param session: `Tab` or `Connection` that delivered `event`.
        :param event: the paused request notification.
        """
        self._session = session
        self._event = event
        self._handled = False


    @property
    def event(self) -> cdp.fetch.RequestPaused:
        """the raw `Fetch.requestPaused` event."""
        return self._event

    @property
    def request_id(self) -> cdp.fetch.RequestId:
        return self._event.request_id

    @property
    def network_id(self) -> cdp.network.RequestId | None:
        """`Network` domain id; `None` when no network request exists yet."""
        return self._event.network_id

    @property
    def request(self) -> cdp.network.Request:
        return self._event.request

    @property
    def url(self) -> str:
        return self._event.request.url

    @property
    def frame_id(self) -> cdp.page.FrameId | None:
        return self._event.frame_id

    @property
    def resource_type(self) -> cdp.network.ResourceType:
        return self._event.resource_type

    @property
    def is_response_stage(self) -> bool:
        """True when chrome paused after the response headers arrived."""
        return (
            self._event.response_status_code is not None
            or self._event.response_error_reason is not None
        )

    @property
    def handled(self) -> bool:
        return self._handled


    def _ensure_pending(self):
        if self._handled:
            raise RequestAlreadyHandledError()


    def _claim(self):
        # callers run _ensure_pending() first with no await before this flip,
        # so a second caller always sees handled
        self._handled = True


    async def _send(self, command):
        try:
            return await self._session.send(command)
        except asyncio.CancelledError:
            self._handled = False
            raise
        except Exception as e:
            self._handled = False
            raise normalize_error(e) from e


    async def continue_request(self, overrides: ContinueRequestOverrides | None = None):
        """let the request through, optionally rewritten.

        :param overrides: fields to replace; omitted ones keep their original value.
        :raises RequestAlreadyHandledError: already resolved or in flight.
        :raises ProtocolError: chrome rejected the command (request is pending again).
        """
        self._ensure_pending()
        overrides = overrides or ContinueRequestOverrides()
        post_data = string_to_base64(overrides.post_data) if overrides.post_data else None
        headers = headers_array(overrides.headers) if overrides.headers is not None else None
        self._claim()
        await self._send(
            cdp.fetch.continue_request(
                self._event.request_id,
                url=overrides.url,
                method=overrides.method,
                post_data=post_data,
                headers=headers,
            )
        )
        logger.debug("continued request for %s", self.url)


    async def abort(self, error_reason: cdp.network.ErrorReason | str | None = None):
        """fail the request with a network error.

        :param error_reason: `ErrorReason` or its string value; defaults to `"Failed"`.
        :raises ValueError: unknown reason string (request stays pending).
        :raises RequestAlreadyHandledError: already resolved or in flight.
        :raises ProtocolError: chrome rejected the command (request is pending again).
        """
        self._ensure_pending()
        if not error_reason:
            reason = cdp.network.ErrorReason.FAILED
        elif isinstance(error_reason, cdp.network.ErrorReason):
            reason = error_reason
        else:
            reason = cdp.network.ErrorReason(error_reason)
        self._claim()
        await self._send(cdp.fetch.fail_request(self._event.request_id, reason))
        logger.debug("aborted request for %s (%s)", self.url, reason.value)


    async def respond(self, response: ResponseForRequest | Mapping[str, Any]):
        """answer the request with a synthetic response; chrome never hits the network.

        header precedence: caller headers, then `content_type` overwrites
        `content-type`, then `content-length` is filled in from the body only
        if nobody set it.

        :param response: `ResponseForRequest` or a dict with the same keys.
        :raises RequestAlreadyHandledError: already resolved or in flight.
        :raises TypeError: body is neither text nor bytes (request stays pending).
        :raises ValueError: status isn't an integer (request stays pending).
        :raises ProtocolError: chrome rejected the command (request is pending again).
        """
        self._ensure_pending()
        if not isinstance(response, ResponseForRequest):
            response = ResponseForRequest.from_dict(response)

        parsed_body: ParsedBody | None = None
        if response.body:
            parsed_body = get_response(response.body)

        response_headers = normalize_response_headers(response.headers)
        if response.content_type:
            response_headers["content-type"] = response.content_type
        if parsed_body and parsed_body.content_length and "content-length" not in response_headers:
            response_headers["content-length"] = str(parsed_body.content_length)

        header_entries = headers_array(response_headers)
        status = int(response.status or 200)
        self._claim()
        await self._send(
            cdp.fetch.fulfill_request(
                self._event.request_id,
                status,
                response_headers=header_entries,
                body=parsed_body.base64 if parsed_body else None,
                response_phrase=status_text(status),
            )
        )
        logger.debug("fulfilled request for %s with %d", self.url, status)


    def __repr__(self):
        return (
            f"<PausedRequest {self.request_id} {self.request.method} "
            f"{self.url!r} handled={self._handled}>"
        )


__all__ = [
    "Session",
    "ContinueRequestOverrides",
    "ResponseForRequest",
    "PausedRequest",
]
