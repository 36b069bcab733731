"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a connection into a structured HTTPRequest.

Only the request line is interpreted. Headers and body stay untouched in
``raw_content`` for handlers that want to look at them.

=============================================================================
WHAT GETS PARSED
=============================================================================

    GET /greet?name=john&verbose HTTP/1.1\n
    ─┬─ ───────────┬────────────
     │             │
   Method        Path token (kept verbatim, query string included)
                   │
         ┌─────────┴──────────────┐
         │                        │
     Route path            Query fragments
       /greet           name=john   verbose
                           │           │
                    {"name": "john", "verbose": None}

=============================================================================
QUERY STRING RULES
=============================================================================

1. Everything after the first "?" is split on "?" and "&".
2. Each fragment is split on its FIRST "=":
       "a=b=c"  → key "a", value "b=c"
       "flag"   → key "flag", value None   (present, no value)
       "=x"     → skipped (no key)
3. The FIRST occurrence of a key wins; later duplicates are ignored:
       "?x=1&x=2" → {"x": "1"}
4. No percent-decoding is performed.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union
import logging
import re


logger = logging.getLogger(__name__)


class RequestParseError(Exception):
    """
    Raised when the request line is malformed.

    Two cases:
        - fewer than two whitespace-separated tokens (no method or no path)
        - a method token outside of HttpMethod

    The dispatcher always recovers from this error by answering with a
    400 BadRequest response that names it (see ``response.to_response``).
    """

    def __init__(self, message: str = "malformed request line"):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"RequestParseError: {self.message}"


class HttpMethod(Enum):
    """
    Request methods the router can dispatch on.

    Wire tokens are compared case-insensitively:

        >>> HttpMethod.parse("get")
        <HttpMethod.GET: 'GET'>
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, token: str) -> "HttpMethod":
        """
        Parse a method token from the wire.

        Raises:
            RequestParseError: If the token is not a known method.
        """
        try:
            return cls(token.upper())
        except ValueError:
            raise RequestParseError(f"unknown method {token!r}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request. Immutable once built.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        raw_content:  Full request text as received (headers, body and all)

        path:         Path token exactly as sent, query string included
                      "/greet?name=john"

        method:       HttpMethod

        queries:      Query parameters, key → value or None
                      "?a&b=1" → {"a": None, "b": "1"}

        params:       Path template bindings, filled in by the router
                      "/greet/{name}" + "/greet/john" → {"name": "john"}
                      Empty until the request has been matched.

    ``queries`` and ``params`` are never merged, even if a name appears in
    both.
    =========================================================================
    """

    method: HttpMethod
    path: str
    raw_content: str = ""
    queries: Mapping[str, Optional[str]] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only views over private copies
        object.__setattr__(self, "queries", MappingProxyType(dict(self.queries)))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def route_path(self) -> str:
        """Path with the query string stripped, used for route matching."""
        return self.path.split("?", 1)[0]

    def has_query(self, name: str) -> bool:
        """Check whether a query key was sent, with or without a value."""
        return name in self.queries

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the value of a query parameter.

        Returns ``default`` both when the key is missing and when it was
        sent without a value (use ``has_query`` to tell them apart).

        Example:
            # URL: /greet?name=john&loud
            request.get_query("name")   # "john"
            request.get_query("loud")   # None
            request.has_query("loud")   # True
        """
        value = self.queries.get(name)
        return default if value is None else value

    def get_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a path parameter bound by the router."""
        return self.params.get(name, default)

    def with_params(self, params: Mapping[str, str]) -> "HTTPRequest":
        """Return a copy of this request with ``params`` bound."""
        return replace(self, params=params)


class RequestParser:
    """
    Parses raw request content into HTTPRequest objects.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        raw bytes
            │
            ▼
        1. Decode as UTF-8 (invalid sequences replaced)
            │
            ▼
        2. Split on whitespace runs → METHOD, PATH
            │  fewer than 2 tokens → RequestParseError
            ▼
        3. HttpMethod.parse(METHOD)
            │  unknown → RequestParseError
            ▼
        4. Parse query fragments out of PATH
            │
            ▼
        HTTPRequest(method, path, raw_content, queries)

    Nothing past the path token is validated: the HTTP version, headers and
    body are ignored. Line endings may be "\\n" or "\\r\\n".
    ==========================================================================
    """

    QUERY_SEPARATOR = re.compile(r"[?&]")

    def parse(self, data: Union[bytes, str]) -> HTTPRequest:
        """
        Parse raw request content.

        Args:
            data: Raw request as read from the connection.

        Returns:
            Parsed HTTPRequest with empty ``params``.

        Raises:
            RequestParseError: If the method or path token is missing, or
                the method is unknown.
        """
        if isinstance(data, bytes):
            content = data.decode("utf-8", errors="replace")
        else:
            content = data

        # str.split() with no separator splits on runs of any whitespace
        tokens = content.split(maxsplit=2)
        if len(tokens) < 2:
            raise RequestParseError("missing method or path token")

        method = HttpMethod.parse(tokens[0])
        path = tokens[1]

        return HTTPRequest(
            method=method,
            path=path,
            raw_content=content,
            queries=self._parse_queries(path),
        )

    def _parse_queries(self, path: str) -> Dict[str, Optional[str]]:
        """
        Build the query mapping from a path token.

            "/p?a&b=1&a=2" → {"a": None, "b": "1"}
        """
        _, has_query, query_string = path.partition("?")
        queries: Dict[str, Optional[str]] = {}
        if not has_query:
            return queries

        for fragment in self.QUERY_SEPARATOR.split(query_string):
            key, has_value, value = fragment.partition("=")
            if not key:
                continue
            if key in queries:
                logger.debug(f"Ignoring duplicate query key {key!r} in {path!r}")
                continue
            queries[key] = value if has_value else None

        return queries


def parse_request(data: Union[bytes, str]) -> HTTPRequest:
    """
    Convenience function to parse a request in one call.

    Equivalent to ``RequestParser().parse(data)``.
    """
    return RequestParser().parse(data)
