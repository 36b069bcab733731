"""
Unit tests for URL router.
"""

import pytest

from minirouter.http.router import (
    Router,
    RouteDefinitionError,
    RouteTemplate,
    bind_params,
    matches,
    split_path,
)
from minirouter.http.request import HTTPRequest, HttpMethod
from minirouter.http.response import HTTPResponse, Success
from minirouter.http.status_codes import HTTPStatus


def make_request(method: HttpMethod, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    """Dummy handler for testing."""
    return HTTPResponse().set_html(request.path)


class TestMatches:
    """Tests for template matching."""

    @pytest.mark.parametrize("path", [
        "/greet/john",
        "/greet/john/",
        "/greet//john",
        "/greet/john?loud",
    ])
    def test_placeholder_matches(self, path):
        """Test paths that fit /greet/{name}."""
        assert matches(make_request(HttpMethod.GET, path), "/greet/{name}")

    @pytest.mark.parametrize("path", [
        "/greet",
        "/greet/",
        "/greet/john/extra",
        "/hello/john",
        "/Greet/john",
    ])
    def test_placeholder_rejects(self, path):
        """Test paths that don't fit /greet/{name}."""
        assert not matches(make_request(HttpMethod.GET, path), "/greet/{name}")

    def test_literal_with_query(self):
        """Test that a query string does not prevent a literal match."""
        assert matches(make_request(HttpMethod.GET, "/greet?name=x"), "/greet")

    def test_exact_string_fast_path(self):
        """Test that an identical path matches, query and all."""
        request = make_request(HttpMethod.GET, "/search?q=1")
        assert matches(request, "/search?q=1")

    def test_root(self):
        """Test the root template."""
        assert matches(make_request(HttpMethod.GET, "/"), "/")
        assert matches(make_request(HttpMethod.GET, "/?x=1"), "/")
        assert not matches(make_request(HttpMethod.GET, "/a"), "/")

    def test_accepts_route_template(self):
        """Test that compiled templates match the same as strings."""
        template = RouteTemplate("/users/{id}/posts")
        assert matches(make_request(HttpMethod.GET, "/users/7/posts"), template)
        assert not matches(make_request(HttpMethod.GET, "/users/7"), template)


class TestBindParams:
    """Tests for parameter binding."""

    def test_bind_single(self):
        """Test binding one placeholder."""
        request = make_request(HttpMethod.GET, "/greet/john/")
        assert bind_params(request, "/greet/{name}") == {"name": "john"}

    def test_bind_multiple(self):
        """Test binding several placeholders."""
        request = make_request(HttpMethod.GET, "/users/1/posts/42")
        params = bind_params(request, "/users/{user_id}/posts/{post_id}")
        assert params == {"user_id": "1", "post_id": "42"}

    def test_bind_ignores_query(self):
        """Test that the query string is not bound into a segment."""
        request = make_request(HttpMethod.GET, "/greet/john?loud")
        assert bind_params(request, "/greet/{name}") == {"name": "john"}

    def test_literal_template_binds_nothing(self):
        """Test that a template with no placeholders binds nothing."""
        request = make_request(HttpMethod.GET, "/greet")
        assert bind_params(request, "/greet") == {}


class TestRouteTemplate:
    """Tests for RouteTemplate class."""

    def test_param_names(self):
        """Test placeholder extraction."""
        template = RouteTemplate("/users/{user_id}/posts/{post_id}")
        assert template.param_names == ["user_id", "post_id"]
        assert not template.is_static

    def test_static(self):
        """Test a template without placeholders."""
        assert RouteTemplate("/health").is_static

    def test_requires_leading_slash(self):
        """Test that relative templates are rejected."""
        with pytest.raises(RouteDefinitionError):
            RouteTemplate("greet/{name}")

    def test_duplicate_placeholder(self):
        """Test that a repeated placeholder name is rejected."""
        with pytest.raises(RouteDefinitionError):
            RouteTemplate("/a/{id}/b/{id}")

    def test_empty_placeholder(self):
        """Test that '{}' is rejected."""
        with pytest.raises(RouteDefinitionError):
            RouteTemplate("/a/{}")

    def test_split_path(self):
        """Test segment splitting."""
        assert split_path("/test/path/") == ["test", "path"]
        assert split_path("//a///b") == ["a", "b"]
        assert split_path("/") == []


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        """Test adding routes."""
        router = Router()
        route = router.add_route(HttpMethod.GET, "/users", dummy_handler)

        assert len(router) == 1
        assert route.path == "/users"
        assert route.method == HttpMethod.GET

    def test_add_route_with_method_name(self):
        """Test that method names are accepted."""
        router = Router()
        route = router.add_route("post", "/users", dummy_handler)
        assert route.method == HttpMethod.POST

    def test_unsupported_method(self):
        """Test that unknown method names are rejected."""
        router = Router()
        with pytest.raises(RouteDefinitionError):
            router.add_route("UPDATE", "/users", dummy_handler)

    def test_match_with_method(self):
        """Test method-based routing."""
        router = Router()
        router.add_route(HttpMethod.GET, "/users", dummy_handler)
        router.add_route(HttpMethod.POST, "/users", dummy_handler)

        get_match = router.match(make_request(HttpMethod.GET, "/users"))
        post_match = router.match(make_request(HttpMethod.POST, "/users"))

        assert get_match.route.method == HttpMethod.GET
        assert post_match.route.method == HttpMethod.POST

    def test_method_mismatch(self):
        """Test that a matching path with another method does not match."""
        router = Router()
        router.add_route(HttpMethod.GET, "/users", dummy_handler)

        assert router.match(make_request(HttpMethod.DELETE, "/users")) is None

    def test_first_registered_wins(self):
        """Test registration order when several routes match."""
        router = Router()
        router.add_route(HttpMethod.GET, "/users/{id}", lambda r: "by id")
        router.add_route(HttpMethod.GET, "/users/me", lambda r: "me")

        response = router.dispatch(make_request(HttpMethod.GET, "/users/me"))
        assert response.body == "by id"

    def test_match_binds_params(self):
        """Test that the matched request carries its params."""
        router = Router()
        router.add_route(HttpMethod.GET, "/greet/{name}", dummy_handler)

        match = router.match(make_request(HttpMethod.GET, "/greet/john"))
        assert match.params == {"name": "john"}
        assert match.request.get_param("name") == "john"

    def test_decorators(self):
        """Test decorator registration."""
        router = Router()

        @router.get("/a")
        def a(request):
            return "a"

        @router.post("/b")
        def b(request):
            return "b"

        @router.route("/c", method="PATCH")
        def c(request):
            return "c"

        methods = [route.method for route in router.routes()]
        assert methods == [HttpMethod.GET, HttpMethod.POST, HttpMethod.PATCH]
        # Decorators return the original function
        assert a(None) == "a"

    def test_frozen_rejects_registration(self):
        """Test that a frozen table is read-only."""
        router = Router()
        router.add_route(HttpMethod.GET, "/", dummy_handler)
        router.freeze()

        assert router.frozen
        with pytest.raises(RouteDefinitionError):
            router.add_route(HttpMethod.GET, "/late", dummy_handler)
        assert len(router) == 1


class TestDispatch:
    """Tests for Router.dispatch."""

    def test_dispatch_not_found(self):
        """Test the response when nothing matches."""
        router = Router()
        response = router.dispatch(make_request(HttpMethod.GET, "/missing?x=1"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == "NotFound: GET /missing"

    def test_dispatch_not_found_escapes_path(self):
        """Test that the echoed path cannot inject markup."""
        router = Router()
        response = router.dispatch(make_request(HttpMethod.GET, "/<script>alert(1)</script>"))

        assert "<script>" not in response.body
        assert response.body == "NotFound: GET /&lt;script&gt;alert(1)&lt;/script&gt;"

    def test_dispatch_empty_table(self):
        """Test that an empty router answers everything with 404."""
        response = Router().dispatch(make_request(HttpMethod.POST, "/"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_dispatch_string_result(self):
        """Test that string results become HTML responses."""
        router = Router()
        router.add_route(HttpMethod.GET, "/greet/{name}", lambda r: f"Hello {r.get_param('name')}")

        response = router.dispatch(make_request(HttpMethod.GET, "/greet/john"))
        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/html"
        assert response.body == "Hello john"

    def test_dispatch_outcome_result(self):
        """Test that outcome results are converted."""
        router = Router()
        router.add_route(HttpMethod.GET, "/", lambda r: Success("fine"))

        response = router.dispatch(make_request(HttpMethod.GET, "/"))
        assert response.body == "fine"

    def test_handler_exception_propagates(self):
        """Test that the router leaves handler errors to its caller."""
        router = Router()

        def broken(request):
            raise KeyError("x")

        router.add_route(HttpMethod.GET, "/", broken)
        with pytest.raises(KeyError):
            router.dispatch(make_request(HttpMethod.GET, "/"))

    def test_unconvertible_result(self):
        """Test that a handler returning an unsupported type fails loudly."""
        router = Router()
        router.add_route(HttpMethod.GET, "/", lambda r: 42)

        with pytest.raises(TypeError):
            router.dispatch(make_request(HttpMethod.GET, "/"))
