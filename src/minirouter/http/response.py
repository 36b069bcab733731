"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

A mutable response value that handlers fill in, and the serializer that
renders it onto the wire.

=============================================================================
WIRE FORMAT
=============================================================================

One fixed template, "\\n" line endings (never "\\r\\n"):

    HTTP/1.1 200 OK\\n                  ← status line (code + wire name)
    content-type: text/html\\n          ← headers, insertion order
    content-length: 4\\n                ← always present, always last
    \\n                                 ← blank separator line
    test                               ← body

content-length is the UTF-8 byte length of the body. A response with no
headers goes straight from the status line to the content-length line.

=============================================================================
SETTERS
=============================================================================

    set_status_code(code)   overwrite status
    set_header(name, value) insert or overwrite one header
    set_body(value)         overwrite body only
    set_json(value)         overwrite body + content-type: application/json
    set_html(value)         overwrite body + content-type: text/html

All setters return the response, so they chain:

    HTTPResponse().set_html("<h1>Gone</h1>").set_status_code(HTTPStatus.NOT_FOUND)

=============================================================================
CONVERSIONS
=============================================================================

Handlers may return any of these; the dispatcher normalizes them with
``to_response``:

    HTTPResponse        → as is
    str                 → set_html(str)                   (response_from_text)
    Success / Failure   → whichever value is populated    (response_from_outcome)
    RequestParseError   → 400 BadRequest naming the error (HTML-escaped)

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from html import escape
from typing import Any, Dict, Generic, Optional, TypeVar, Union
import json

from .request import RequestParseError
from .status_codes import HTTPStatus


class HeaderName(str, Enum):
    """
    Response header names, as written on the wire.

    Being a ``str`` subclass, members can be used anywhere a header name
    string is expected. ``set_header`` also accepts plain strings for
    headers not listed here.
    """

    CONTENT_TYPE = "content-type"
    LOCATION = "location"
    CACHE_CONTROL = "cache-control"

    def __str__(self) -> str:
        return self.value


def _check_header(name: str, value: str) -> None:
    """Reject header text that would break out of its line on the wire."""
    if not name or any(c in name for c in "\r\n:"):
        raise ValueError(f"Invalid header name: {name!r}")
    if "\r" in value or "\n" in value:
        raise ValueError(f"Line break in value of header {name!r}")


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    A default response is 200 OK with an empty body and no headers.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        dispatcher creates      handler mutates        to_wire()
        HTTPResponse()   ─────► set_html(...)   ─────► "HTTP/1.1 200 OK\\n..."
                                set_status_code(...)

    One response per request; it is discarded after serialization.
    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        The first line of the serialized response.

        Example: "HTTP/1.1 404 NotFound"
        """
        return f"{self.version} {int(self.status)} {self.status.wire_name}"

    @property
    def content_type(self) -> Optional[str]:
        """The content-type header, if set."""
        return self.headers.get(HeaderName.CONTENT_TYPE.value)

    def set_status_code(self, status: HTTPStatus) -> "HTTPResponse":
        """Set the status code, replacing the previous one."""
        self.status = HTTPStatus(status)
        return self

    def set_header(self, name: Union[HeaderName, str], value: Any) -> "HTTPResponse":
        """
        Set a response header.

        Header names are stored lower-cased. Setting a name that is already
        present replaces its value but keeps its position in the output.

        Args:
            name: HeaderName member or header name string
            value: Header value (converted with str())

        Returns:
            Self for method chaining

        Raises:
            ValueError: If the name or value contains a line break.
        """
        key = name.value if isinstance(name, HeaderName) else str(name).lower()
        value = str(value)
        _check_header(key, value)
        self.headers[key] = value
        return self

    def set_body(self, body: Any) -> "HTTPResponse":
        """Set the body and only the body. Headers are left untouched."""
        self.body = str(body)
        return self

    def set_json(self, data: Any) -> "HTTPResponse":
        """
        Set a JSON body and ``content-type: application/json``.

        Strings are taken as already-serialized JSON and used verbatim;
        any other value is serialized with ``json.dumps``.
        """
        self.set_header(HeaderName.CONTENT_TYPE, "application/json")
        if isinstance(data, str):
            self.body = data
        else:
            self.body = json.dumps(data, ensure_ascii=False)
        return self

    def set_html(self, html: Any) -> "HTTPResponse":
        """Set an HTML body and ``content-type: text/html``."""
        self.set_header(HeaderName.CONTENT_TYPE, "text/html")
        self.body = str(html)
        return self

    def to_wire(self) -> str:
        """
        Serialize the response to its wire string.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\n
            content-type: text/html\\n
            content-length: 4\\n      ← computed, UTF-8 bytes of body
            \\n
            test

        =====================================================================

        With no headers, content-length follows the status line directly;
        no empty header line is written between them.

        Pure: the response is not modified, and calling this twice yields
        identical output.

        Raises:
            ValueError: If a header assigned directly to ``headers`` contains
                a line break.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            _check_header(name, value)
            lines.append(f"{name}: {value}")
        lines.append(f"content-length: {len(self.body.encode('utf-8'))}")

        return "\n".join(lines) + "\n\n" + self.body

    def to_bytes(self) -> bytes:
        """Serialize the response to UTF-8 bytes ready for ``sendall``."""
        return self.to_wire().encode("utf-8")


# =============================================================================
# OUTCOMES
# =============================================================================
#
# Fallible handlers can return Success(value) or Failure(error) instead of
# picking a response themselves. Either side is converted with to_response,
# so both branches can carry a str, an HTTPResponse, a RequestParseError or
# another outcome.
#
#     def get_user(request):
#         name = request.get_param("name")
#         if name in USERS:
#             return Success(f"<p>{name}</p>")
#         return Failure(not_found(f"no user {name}"))
#
# =============================================================================

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful handler outcome."""
    value: T


@dataclass(frozen=True)
class Failure(Generic[T]):
    """Failed handler outcome."""
    error: T


Outcome = Union[Success, Failure]
ResponseLike = Union[HTTPResponse, str, Success, Failure, RequestParseError]


def response_from_text(text: str) -> HTTPResponse:
    """Convert a plain string to a 200 OK HTML response."""
    return HTTPResponse().set_html(text)


def response_from_outcome(outcome: Outcome) -> HTTPResponse:
    """Convert whichever side of an outcome is populated."""
    if isinstance(outcome, Success):
        return to_response(outcome.value)
    if isinstance(outcome, Failure):
        return to_response(outcome.error)
    raise TypeError(f"Expected Success or Failure, got {type(outcome).__name__}")


def to_response(value: ResponseLike) -> HTTPResponse:
    """
    Normalize a handler's return value to an HTTPResponse.

    Raises:
        TypeError: If the value has no response conversion.
    """
    if isinstance(value, HTTPResponse):
        return value
    if isinstance(value, str):
        return response_from_text(value)
    if isinstance(value, (Success, Failure)):
        return response_from_outcome(value)
    if isinstance(value, RequestParseError):
        return bad_request(escape(str(value), quote=False))
    raise TypeError(f"Cannot convert {type(value).__name__} to a response")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for common responses. Strings become HTML bodies; dicts and
# lists become JSON bodies.
#
#     return ok({"msg": "hello"})
#     return not_found("no such user")
#
# =============================================================================

def _with_body(status: HTTPStatus, body: Any) -> HTTPResponse:
    response = HTTPResponse(status=status)
    if isinstance(body, (dict, list)):
        return response.set_json(body)
    if body:
        return response.set_html(body)
    return response


def ok(body: Any = "") -> HTTPResponse:
    """Create a 200 OK response."""
    return _with_body(HTTPStatus.OK, body)


def created(body: Any = "", location: Optional[str] = None) -> HTTPResponse:
    """
    Create a 201 Created response.

    Args:
        body: Response body (usually the created resource)
        location: URL of the created resource, sent as ``location``
    """
    response = _with_body(HTTPStatus.CREATED, body)
    if location:
        response.set_header(HeaderName.LOCATION, location)
    return response


def bad_request(message: str = "BadRequest") -> HTTPResponse:
    """Create a 400 BadRequest response with an HTML message."""
    return _with_body(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "NotFound") -> HTTPResponse:
    """Create a 404 NotFound response with an HTML message."""
    return _with_body(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str = "InternalServerError") -> HTTPResponse:
    """
    Create a 500 InternalServerError response.

    Keep the message generic; it is sent to the client as is.
    """
    return _with_body(HTTPStatus.INTERNAL_SERVER_ERROR, message)


def not_implemented(message: str = "NotImplemented") -> HTTPResponse:
    """Create a 501 NotImplemented response."""
    return _with_body(HTTPStatus.NOT_IMPLEMENTED, message)
