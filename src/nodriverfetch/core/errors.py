"""error taxonomy for resolving paused requests.

two kinds surface to callers:
- `RequestAlreadyHandledError`: caller bug, the request was already resolved (or is in flight). never retry.
- `ProtocolError` (+ subclasses): the command went out but chrome/the socket failed it.
  the request is back to pending so the same or another resolution can be tried again.

`normalize_error()` folds whatever `tab.send()` raised into the `ProtocolError` family.
"""

from __future__ import annotations

import asyncio

from nodriver.core.connection import ProtocolException
from websockets.exceptions import ConnectionClosed


# chrome (and firefox over bidi) phrasing for rejected header names/values
_INVALID_HEADER_MARKERS = (
    "Invalid header",
    "Unsafe header",
    'Expected "header"',
    "invalid argument",
)

_TARGET_CLOSED_MARKERS = (
    "Target closed",
    "Session closed",
    "No target with given id",
    "Session with given id not found",
)


class FetchError(Exception):
    """base class for everything raised by `nodriverfetch`."""


class RequestAlreadyHandledError(FetchError, RuntimeError):
    """a resolution was attempted on a request that isn't pending anymore."""

    retryable = False

    def __init__(self, message: str = "Request has already been handled"):
        super().__init__(message)


class ProtocolError(FetchError):
    """chrome rejected the command or the transport failed while sending it.

    :param message: human readable message (usually chrome's).
    :param code: cdp error code when chrome supplied one.
    :param original: the exception that was normalized into this one.
    """

    retryable = True

    def __init__(
        self,
        message: str,
        code: int | None = None,
        original: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.original = original


class InvalidHeaderError(ProtocolError):
    """chrome refused one of the header names or values."""


class TargetClosedError(ProtocolError):
    """the tab/session went away before the command was acknowledged."""


def _message_of(exc: BaseException) -> str:
    if isinstance(exc, ProtocolException):
        return str(exc.message or "")
    return str(exc) or exc.__class__.__name__


def normalize_error(exc: BaseException) -> ProtocolError:
    """map a failed send onto the `ProtocolError` family.

    callers should `raise normalize_error(e) from e` so the original stays chained.

    :param exc: whatever the session raised.
    :return: the normalized error (unchanged when it's already a `ProtocolError`).
    :rtype: ProtocolError
    """
    if isinstance(exc, ProtocolError):
        return exc
    message = _message_of(exc)
    code = getattr(exc, "code", None) if isinstance(exc, ProtocolException) else None
    if isinstance(exc, (ConnectionClosed, ConnectionError)):
        return TargetClosedError(message, code, exc)
    if isinstance(exc, asyncio.TimeoutError):
        return ProtocolError("timed out waiting for a reply", code, exc)
    if any(marker in message for marker in _INVALID_HEADER_MARKERS):
        return InvalidHeaderError(message, code, exc)
    if any(marker in message for marker in _TARGET_CLOSED_MARKERS):
        return TargetClosedError(message, code, exc)
    return ProtocolError(message, code, exc)


__all__ = [
    "FetchError",
    "RequestAlreadyHandledError",
    "ProtocolError",
    "InvalidHeaderError",
    "TargetClosedError",
    "normalize_error",
]
