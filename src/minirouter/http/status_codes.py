"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes a minirouter response can carry.

=============================================================================
STATUS LINE FORMAT
=============================================================================

Every serialized response starts with a status line:

    HTTP/1.1 404 NotFound
    ──┬───── ─┬─ ───┬────
      │       │     │
    Version  Code  Wire name

The wire name is the status's CamelCase identifier ("BadRequest",
"InternalServerError"), not the RFC reason phrase ("Bad Request").

    ┌────────┬─────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK         201 Created        202 Accepted          │
    ├────────┼─────────────────────────────────────────────────────────┤
    │  4xx   │ 400 BadRequest 401 Unauthorized   403 Forbidden         │
    │        │ 404 NotFound                                            │
    ├────────┼─────────────────────────────────────────────────────────┤
    │  5xx   │ 500 InternalServerError           501 NotImplemented    │
    └────────┴─────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes understood by the router.

    Extends IntEnum, so members compare equal to their numeric code:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.wire_name
        'NotFound'
    """

    # 2xx SUCCESS
    OK = 200                      # Default for every new response
    CREATED = 201                 # Resource created
    ACCEPTED = 202                # Accepted for later processing

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400             # Request line could not be parsed
    UNAUTHORIZED = 401            # Authentication required
    FORBIDDEN = 403               # Authenticated but not permitted
    NOT_FOUND = 404               # No registered route matched

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500   # Handler raised
    NOT_IMPLEMENTED = 501         # Feature not provided by the handler

    @property
    def wire_name(self) -> str:
        """
        Name written after the numeric code on the status line.

            HTTPStatus.BAD_REQUEST.wire_name  ->  "BadRequest"
        """
        return _WIRE_NAMES[self]

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx status code."""
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        """Check if this is a 4xx status code."""
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        """Check if this is a 5xx status code."""
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """
        Check if this is an error status code (4xx or 5xx).
        Used to pick the log level of access lines.
        """
        return self >= 400


# =============================================================================
# WIRE NAMES
# =============================================================================
#
# HTTP/1.1 201 Created
#              ───┬───
#                 └── from this dict
#
# =============================================================================

_WIRE_NAMES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.BAD_REQUEST: "BadRequest",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "NotFound",
    HTTPStatus.INTERNAL_SERVER_ERROR: "InternalServerError",
    HTTPStatus.NOT_IMPLEMENTED: "NotImplemented",
}
