from .core.paused_request import (
    PausedRequest,
    ContinueRequestOverrides,
    ResponseForRequest,
    Session,
)
from .core.interceptor import FetchInterceptor
from .core.errors import (
    FetchError,
    RequestAlreadyHandledError,
    ProtocolError,
    InvalidHeaderError,
    TargetClosedError,
    normalize_error,
)
from .core.status_texts import STATUS_TEXTS, status_text
from .core.wire import (
    ParsedBody,
    headers_array,
    normalize_response_headers,
    string_to_base64,
    bytes_to_base64,
    get_response,
)
import nodriver
from nodriver import cdp

__all__ = [
    "nodriver",
    "cdp",
    "PausedRequest",
    "ContinueRequestOverrides",
    "ResponseForRequest",
    "Session",
    "FetchInterceptor",
    "FetchError",
    "RequestAlreadyHandledError",
    "ProtocolError",
    "InvalidHeaderError",
    "TargetClosedError",
    "normalize_error",
    "STATUS_TEXTS",
    "status_text",
    "ParsedBody",
    "headers_array",
    "normalize_response_headers",
    "string_to_base64",
    "bytes_to_base64",
    "get_response",
]
