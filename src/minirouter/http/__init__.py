"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The request → route → response pipeline, independent of sockets:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /greet?name=john HTTP/1.1\\n..."                             │
    │   → HTTPRequest(method=GET, path="/greet?name=john",                │
    │                 queries={"name": "john"})                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   GET /greet/{name}  +  /greet/john  →  params={"name": "john"}    │
    │   first registered match wins                                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │   HTTPResponse().set_html("test").to_wire()                         │
    │   → "HTTP/1.1 200 OK\\ncontent-type: text/html\\n                    │
    │      content-length: 4\\n\\ntest"                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus.NOT_FOUND → 404, wire_name="NotFound"                  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    HttpMethod,
    RequestParser,
    RequestParseError,
    parse_request,
)
from .response import (
    HTTPResponse,
    HeaderName,
    Success,
    Failure,
    response_from_text,
    response_from_outcome,
    to_response,
    ok,
    created,
    bad_request,
    not_found,
    internal_error,
    not_implemented,
)
from .router import (
    Router,
    Route,
    RouteMatch,
    RouteTemplate,
    RouteDefinitionError,
    matches,
    bind_params,
)
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HttpMethod",
    "RequestParser",
    "RequestParseError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "HeaderName",
    "Success",
    "Failure",
    "response_from_text",
    "response_from_outcome",
    "to_response",
    "ok",
    "created",
    "bad_request",
    "not_found",
    "internal_error",
    "not_implemented",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "RouteTemplate",
    "RouteDefinitionError",
    "matches",
    "bind_params",

    # Status codes
    "HTTPStatus",
]
