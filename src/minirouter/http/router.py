"""
=============================================================================
URL ROUTER
=============================================================================

Matches parsed requests against registered (method, template, handler)
routes and dispatches to the first one that fits.

=============================================================================
ROUTE TEMPLATES
=============================================================================

A template is a "/"-delimited path. Segments wrapped in braces capture one
path segment; every other segment must match literally (case-sensitive).

    Template:  /greet/{name}
    Matches:   /greet/john          → {"name": "john"}
               /greet/john/         → {"name": "john"}   (trailing slash)
               /greet/john?loud     → {"name": "john"}   (query ignored)
    Doesn't:   /greet               (too few segments)
               /greet/john/extra    (too many segments)

No regex, wildcards or optional segments.

=============================================================================
MATCHING ALGORITHM
=============================================================================

    1. Fast path: request path (query string included) == template string
    2. Split both on "/", dropping empty segments:
           "/greet//john/"  → ["greet", "john"]
    3. Walk in lock-step:

           template:  greet    {name}
                        │        │
                      equal?   capture
                        │        │
           request:   greet     john

       - both run out together   → match
       - one runs out first      → no match
       - "{...}" segment         → consumes one request segment
       - literal mismatch        → no match (stop immediately)

    4. Binding is a separate pass, run only for the route that won.

=============================================================================
SELECTION
=============================================================================

Routes are tried in REGISTRATION ORDER and the first one whose method and
template both match wins. There is no "most specific" scoring, so register
"/users/me" before "/users/{id}" if both exist.

=============================================================================
"""

from dataclasses import dataclass
from html import escape
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union
import logging

from .request import HTTPRequest, HttpMethod
from .response import HTTPResponse, ResponseLike, not_found, to_response


logger = logging.getLogger(__name__)

# Handler: a function that takes a request and returns anything to_response
# understands (HTTPResponse, str, Success/Failure, RequestParseError)
Handler = Callable[[HTTPRequest], ResponseLike]


class RouteDefinitionError(ValueError):
    """
    Raised when a route cannot be registered.

    Either the template is invalid (no leading "/", empty or duplicate
    placeholder names) or the route table was frozen when serving started.
    """


def split_path(path: str) -> List[str]:
    """
    Split a path into its non-empty segments.

        "/test/path/"  → ["test", "path"]
        "//a///b"      → ["a", "b"]
        "/"            → []
    """
    return [segment for segment in path.split("/") if segment]


def _placeholder_name(segment: str) -> Optional[str]:
    """Return the name of a "{name}" segment, or None for a literal."""
    if len(segment) >= 2 and segment.startswith("{") and segment.endswith("}"):
        return segment[1:-1]
    return None


class RouteTemplate:
    """
    A pre-split, validated route template.

    Matching against a plain string template works too (see ``matches``);
    RouteTemplate does the splitting once at registration time and rejects
    templates whose bindings would be ambiguous.

    Example:
        >>> template = RouteTemplate("/users/{user_id}/posts/{post_id}")
        >>> template.param_names
        ['user_id', 'post_id']
    """

    def __init__(self, pattern: str):
        if not pattern.startswith("/"):
            raise RouteDefinitionError(f"Route template must start with '/': {pattern!r}")

        self.pattern = pattern
        self.segments = split_path(pattern)
        self.param_names: List[str] = []

        for segment in self.segments:
            name = _placeholder_name(segment)
            if name is None:
                continue
            if not name:
                raise RouteDefinitionError(f"Empty placeholder in route template {pattern!r}")
            if name in self.param_names:
                raise RouteDefinitionError(
                    f"Duplicate placeholder {{{name}}} in route template {pattern!r}"
                )
            self.param_names.append(name)

    def __repr__(self) -> str:
        return f"RouteTemplate({self.pattern!r})"

    def __str__(self) -> str:
        return self.pattern

    def __eq__(self, other) -> bool:
        if isinstance(other, RouteTemplate):
            return self.pattern == other.pattern
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.pattern)

    @property
    def is_static(self) -> bool:
        """True if the template has no placeholders."""
        return not self.param_names


TemplateLike = Union[RouteTemplate, str]


def _template_parts(template: TemplateLike) -> Tuple[str, List[str]]:
    if isinstance(template, RouteTemplate):
        return template.pattern, template.segments
    return template, split_path(template)


def matches(request: HTTPRequest, template: TemplateLike) -> bool:
    """
    Check whether a request's path matches a route template.

    The request method is not considered here; the Router checks it.

    Args:
        request: Parsed request
        template: RouteTemplate or template string

    Returns:
        True if every segment lines up
    """
    pattern, template_segments = _template_parts(template)

    # Fast path: byte-identical, query string and all
    if request.path == pattern:
        return True

    request_segments = split_path(request.route_path)
    if len(request_segments) != len(template_segments):
        return False

    for template_segment, request_segment in zip(template_segments, request_segments):
        if _placeholder_name(template_segment) is not None:
            continue
        if template_segment != request_segment:
            return False

    return True


def bind_params(request: HTTPRequest, template: TemplateLike) -> Dict[str, str]:
    """
    Extract placeholder values from a request that matched ``template``.

    Only meaningful after ``matches`` returned True.

        bind_params(<GET /greet/john>, "/greet/{name}")  → {"name": "john"}
    """
    _, template_segments = _template_parts(template)
    request_segments = split_path(request.route_path)

    params: Dict[str, str] = {}
    for template_segment, request_segment in zip(template_segments, request_segments):
        name = _placeholder_name(template_segment)
        if name is not None:
            params[name] = request_segment
    return params


@dataclass
class Route:
    """
    A registered route: method + template + handler.

        Route(
            method=HttpMethod.GET,
            template=RouteTemplate("/greet/{name}"),
            handler=greet,
        )
    """

    method: HttpMethod
    template: RouteTemplate
    handler: Handler

    @property
    def path(self) -> str:
        """The template string this route was registered with."""
        return self.template.pattern

    def matches(self, request: HTTPRequest) -> bool:
        """Check method and template against a request."""
        return self.method == request.method and matches(request, self.template)


@dataclass
class RouteMatch:
    """
    Result of a successful route lookup.

    ``request`` is the request with ``params`` already bound.
    """

    route: Route
    request: HTTPRequest

    @property
    def params(self) -> Mapping[str, str]:
        return self.request.params


def _coerce_method(method: Union[HttpMethod, str]) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    try:
        return HttpMethod(str(method).upper())
    except ValueError:
        raise RouteDefinitionError(f"Unsupported method: {method!r}") from None


class Router:
    """
    Ordered route table with first-match dispatch.

    ==========================================================================
    DECORATOR-BASED API
    ==========================================================================

        router = Router()

        @router.get("/")
        def index(request):
            return "<h1>Hi</h1>"

        @router.get("/greet/{name}")
        def greet(request):
            return f"Hello {request.get_param('name')}!"

    Plain registration works the same way:

        router.add_route(HttpMethod.POST, "/items", create_item)

    ==========================================================================
    FREEZING
    ==========================================================================

    The table is append-only and is frozen before the server starts
    accepting connections. Registering after ``freeze()`` raises
    RouteDefinitionError.
    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the route table read-only."""
        self._frozen = True

    def __len__(self) -> int:
        return len(self._routes)

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: Union[HttpMethod, str],
        path: TemplateLike,
        handler: Handler,
    ) -> Route:
        """
        Register a route.

        Args:
            method: HttpMethod or method name ("GET", "post", ...)
            path: Route template (e.g., /greet/{name})
            handler: Function taking an HTTPRequest

        Returns:
            The registered Route

        Raises:
            RouteDefinitionError: Invalid template or method, or the table
                is frozen.
        """
        if self._frozen:
            raise RouteDefinitionError(
                f"Cannot register {method} {path}: route table is frozen"
            )

        template = path if isinstance(path, RouteTemplate) else RouteTemplate(path)
        route = Route(method=_coerce_method(method), template=template, handler=handler)
        self._routes.append(route)

        logger.debug(f"Registered route {route.method} {route.path}")
        return route

    def route(self, path: str, method: Union[HttpMethod, str] = HttpMethod.GET) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Usage:
            @router.route("/items", method="POST")
            def create_item(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, path, handler)
            return handler  # Unchanged, so decorators can stack
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, HttpMethod.GET)

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, HttpMethod.POST)

    def put(self, path: str) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(path, HttpMethod.PUT)

    def patch(self, path: str) -> Callable[[Handler], Handler]:
        """Register a PATCH route."""
        return self.route(path, HttpMethod.PATCH)

    def delete(self, path: str) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self.route(path, HttpMethod.DELETE)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, request: HTTPRequest) -> Optional[RouteMatch]:
        """
        Find the first registered route for a request.

        Linear scan in registration order; the first route whose method
        equals the request's and whose template matches wins.

        Returns:
            RouteMatch with params bound, or None
        """
        for route in self._routes:
            if route.matches(request):
                bound = request.with_params(bind_params(request, route.template))
                return RouteMatch(route=route, request=bound)
        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        1. Find the first matching route
        2. Bind path parameters onto the request
        3. Call the handler and normalize its return value

        Exceptions raised by the handler propagate to the caller.

        Returns:
            Handler response, or 404 NotFound if nothing matched
        """
        match = self.match(request)
        if match is None:
            message = f"NotFound: {request.method} {request.route_path}"
            return not_found(escape(message, quote=False))

        return to_response(match.route.handler(match.request))

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)
