"""Tests for menuwright.extraction — marker fragments and handler metadata."""

from collections.abc import Iterable

import pytest

from menuwright.errors import HandlerResolutionError, SecureParamError
from menuwright.extraction import (
    AttributeMetadataProvider,
    MetadataExtractor,
    extract_fragments,
)
from menuwright.markers import Menu, Secure, SecureParam, menu, secure, secure_param
from menuwright.routing import Route, RouteTable


class User:
    pass


@menu(label="Users", type="section", translate_domain="admin")
@secure("ROLE_ADMIN")
class UserController:
    @menu(label="Edit user")
    @secure_param("user", expression="hasRole('ADMIN')")
    def edit(self, id: int, user: User) -> str:
        return "edit"

    def index(self) -> str:
        return "index"

    @secure_param("ghost", expression="hasRole('ADMIN')")
    def broken(self, id: int) -> str:
        return "broken"


class PlainController:
    @secure("ROLE_USER")
    def show(self) -> str:
        return "show"


@menu(label="Home")
def home() -> str:
    return "home"


def _routes() -> RouteTable:
    table = RouteTable()
    table.add(Route("/users/{id}", UserController.edit, name="user_edit"))
    table.add(Route("/users", UserController.index, name="user_index"))
    table.add(Route("/users/broken", UserController.broken, name="user_broken"))
    table.add(Route("/plain", PlainController().show, name="plain"))
    table.add(Route("/", home, name="home"))
    table.add(Route("/users/edit-again/{id}", UserController.edit, name="user_edit_alias"))
    table.add(Route("/redirect", None, name="redirect"))
    table.add(Route("/gone", "nonexistent_module_xyz:handler", name="gone"))
    table.compile()
    return table


class TestExtractFragments:
    def test_menu_fields(self) -> None:
        fragment = extract_fragments([Menu(label="Users", show_as_text=True)], {})
        assert fragment == {"label": "Users", "showAsText": True}

    def test_first_marker_wins(self) -> None:
        fragment = extract_fragments([Menu(label="First"), Menu(label="Second", type="x")], {})
        assert fragment == {"label": "First", "type": "x"}

    def test_secure_roles(self) -> None:
        fragment = extract_fragments([Secure(roles=("ROLE_ADMIN",))], {})
        assert fragment == {"roles": ["ROLE_ADMIN"]}

    def test_secure_param_binds_argument_type(self) -> None:
        markers = [SecureParam(name="user", expression="hasRole('ADMIN')")]
        fragment = extract_fragments(markers, {"id": int, "user": User})
        assert fragment == {
            "secureParams": {"user": {"expression": "hasRole('ADMIN')", "class": "User"}},
        }

    def test_secure_param_untyped_argument(self) -> None:
        fragment = extract_fragments([SecureParam(name="user")], {"user": None})
        assert fragment == {"secureParams": {"user": {"class": None}}}

    def test_several_secure_params(self) -> None:
        markers = [
            SecureParam(name="user", expression="a"),
            SecureParam(name="id", permissions=("VIEW",)),
        ]
        fragment = extract_fragments(markers, {"id": int, "user": User})
        assert fragment["secureParams"] == {
            "user": {"expression": "a", "class": "User"},
            "id": {"permissions": ["VIEW"], "class": "int"},
        }

    def test_missing_argument_is_fatal(self) -> None:
        markers = [SecureParam(name="ghost", expression="hasRole('ADMIN')")]
        with pytest.raises(SecureParamError) as exc_info:
            extract_fragments(markers, {"id": int}, handler="shop:UserController.edit")
        assert exc_info.value.param == "ghost"
        assert exc_info.value.handler == "shop:UserController.edit"

    def test_unknown_markers_ignored(self) -> None:
        fragment = extract_fragments(["deprecated", object(), Menu(label="x")], {})
        assert fragment == {"label": "x"}

    def test_no_markers(self) -> None:
        assert extract_fragments([], {}) == {}


class TestMetadataExtractor:
    def test_method_then_class(self) -> None:
        extractor = MetadataExtractor(_routes())
        fragment = extractor.fragment_for("user_edit")

        assert fragment == {
            "label": "Edit user",
            "secureParams": {"user": {"expression": "hasRole('ADMIN')", "class": "User"}},
            "type": "section",
            "translateDomain": "admin",
            "roles": ["ROLE_ADMIN"],
        }

    def test_class_only(self) -> None:
        fragment = MetadataExtractor(_routes()).fragment_for("user_index")
        assert fragment == {
            "label": "Users",
            "type": "section",
            "translateDomain": "admin",
            "roles": ["ROLE_ADMIN"],
        }

    def test_class_without_markers(self) -> None:
        fragment = MetadataExtractor(_routes()).fragment_for("plain")
        assert fragment == {"roles": ["ROLE_USER"]}

    def test_module_function(self) -> None:
        assert MetadataExtractor(_routes()).fragment_for("home") == {"label": "Home"}

    def test_unknown_route(self) -> None:
        extractor = MetadataExtractor(_routes())
        assert extractor.resolve_handler("nope") is None
        assert extractor.fragment_for("nope") is None

    def test_route_without_handler(self) -> None:
        extractor = MetadataExtractor(_routes())
        assert extractor.resolve_handler("redirect") is None
        assert extractor.fragment_for("redirect") is None

    def test_unresolvable_import_string(self) -> None:
        with pytest.raises(HandlerResolutionError):
            MetadataExtractor(_routes()).fragment_for("gone")

    def test_secure_param_error_names_handler(self) -> None:
        with pytest.raises(SecureParamError) as exc_info:
            MetadataExtractor(_routes()).fragment_for("user_broken")
        assert exc_info.value.param == "ghost"
        assert exc_info.value.handler.endswith(":UserController.broken")

    def test_returned_fragments_are_independent(self) -> None:
        extractor = MetadataExtractor(_routes())
        first = extractor.fragment_for("user_edit")
        assert first is not None
        first["roles"].append("ROLE_HACKED")
        first["secureParams"]["user"]["expression"] = "changed"

        second = extractor.fragment_for("user_edit")
        assert second is not None
        assert second["roles"] == ["ROLE_ADMIN"]
        assert second["secureParams"]["user"]["expression"] == "hasRole('ADMIN')"


class _CountingProvider(AttributeMetadataProvider):
    def __init__(self) -> None:
        self.calls = 0

    def method_markers(self, handler: object) -> Iterable[object]:
        self.calls += 1
        return super().method_markers(handler)  # type: ignore[arg-type]


class TestMetadataCache:
    def test_same_handler_extracted_once(self) -> None:
        provider = _CountingProvider()
        extractor = MetadataExtractor(_routes(), provider=provider)

        extractor.fragment_for("user_edit")
        extractor.fragment_for("user_edit_alias")
        extractor.fragment_for("user_edit")

        assert provider.calls == 1

    def test_cache_disabled(self) -> None:
        provider = _CountingProvider()
        extractor = MetadataExtractor(_routes(), provider=provider, cache=False)

        extractor.fragment_for("user_edit")
        extractor.fragment_for("user_edit_alias")

        assert provider.calls == 2

    def test_clear_cache(self) -> None:
        provider = _CountingProvider()
        extractor = MetadataExtractor(_routes(), provider=provider)

        extractor.fragment_for("user_edit")
        extractor.clear_cache()
        extractor.fragment_for("user_edit")

        assert provider.calls == 2


def _make_view(role: str):
    @menu(label=role)
    @secure(role)
    def view() -> str:
        return role

    return view


class TestFactoryHandlers:
    def _routes(self) -> RouteTable:
        table = RouteTable()
        table.add(Route("/a", _make_view("ROLE_A"), name="a"))
        table.add(Route("/b", _make_view("ROLE_B"), name="b"))
        table.compile()
        return table

    def test_same_qualname_extracted_separately(self) -> None:
        extractor = MetadataExtractor(self._routes())

        first = extractor.fragment_for("a")
        second = extractor.fragment_for("b")

        assert first == {"label": "ROLE_A", "roles": ["ROLE_A"]}
        assert second == {"label": "ROLE_B", "roles": ["ROLE_B"]}

    def test_cached_per_handler(self) -> None:
        provider = _CountingProvider()
        extractor = MetadataExtractor(self._routes(), provider=provider)

        extractor.fragment_for("a")
        extractor.fragment_for("b")
        extractor.fragment_for("a")
        extractor.fragment_for("b")

        assert provider.calls == 2
