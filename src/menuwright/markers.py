"""Menu markers — structural metadata attached to handlers and controllers.

A marker is one of three frozen dataclasses:

- ``Menu``        — display options (label, type, attributes, ...)
- ``Secure``      — roles required to see the entry
- ``SecureParam`` — a security expression bound to one handler argument

Anything else found in a marker list is ignored by extraction.

Markers are attached with decorators, on functions or classes::

    from menuwright.markers import menu, secure, secure_param

    @menu(label="Users", translate_domain="admin")
    @secure("ROLE_ADMIN")
    class UserController:
        @menu(label="Edit user")
        @secure_param("user", expression="hasRole('ADMIN')")
        def edit(self, id: int, user: User) -> str: ...

Decorators are recorded in the order they are written (top to bottom),
so the topmost marker of a kind wins when fields collide.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any, TypeAlias, TypeVar

from menuwright.options import is_empty

_MARKERS_ATTR = "__menu_markers__"


def option_key(field_name: str) -> str:
    """Convert a snake_case field name to its option key (camelCase)."""
    head, *rest = field_name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _collect(marker: Any, *, skip: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Return the non-empty fields of *marker* keyed by option name."""
    result: dict[str, Any] = {}
    for f in fields(marker):
        if f.name in skip:
            continue
        value = getattr(marker, f.name)
        if is_empty(value):
            continue
        if isinstance(value, tuple):
            value = list(value)
        elif isinstance(value, Mapping):
            value = dict(value)
        result[option_key(f.name)] = value
    return result


@dataclass(frozen=True, slots=True)
class Menu:
    """Display options for the menu entry backed by a handler or controller."""

    label: str | None = None
    name: str | None = None
    uri: str | None = None
    route: str | None = None
    type: str | None = None
    translate_domain: str | None = None
    translate_parameters: Mapping[str, Any] | None = None
    attributes: Mapping[str, Any] | None = None
    link_attributes: Mapping[str, Any] | None = None
    children_attributes: Mapping[str, Any] | None = None
    label_attributes: Mapping[str, Any] | None = None
    display: bool | None = None
    display_children: bool | None = None
    route_absolute: bool | None = None
    show_non_authorized: bool | None = None
    show_as_text: bool | None = None

    def fields(self) -> dict[str, Any]:
        return _collect(self)


@dataclass(frozen=True, slots=True)
class Secure:
    """Roles a user needs for the entry to be accessible."""

    roles: tuple[str, ...] = ()

    def fields(self) -> dict[str, Any]:
        return _collect(self)


@dataclass(frozen=True, slots=True)
class SecureParam:
    """Security requirement on the handler argument called *name*.

    Extraction records the argument's declared type next to these fields.
    """

    name: str
    expression: str | None = None
    permissions: tuple[str, ...] = ()

    def fields(self) -> dict[str, Any]:
        return _collect(self, skip=frozenset({"name"}))


Marker: TypeAlias = Menu | Secure | SecureParam

_T = TypeVar("_T")


def attach_marker(obj: _T, marker: object) -> _T:
    """Attach *marker* to *obj*, ahead of markers added by inner decorators."""
    existing = vars(obj).get(_MARKERS_ATTR, ())
    setattr(obj, _MARKERS_ATTR, (marker, *existing))
    return obj


def markers_of(obj: Any) -> tuple[object, ...]:
    """Return the markers declared directly on *obj*.

    Classes report only their own markers, never a base class's.
    Bound methods report the markers of their underlying function.
    """
    target = getattr(obj, "__func__", obj)
    try:
        namespace = vars(target)
    except TypeError:
        return ()
    return tuple(namespace.get(_MARKERS_ATTR, ()))


def menu(**options: Any) -> Callable[[Any], Any]:
    """Attach a ``Menu`` marker.

    Usage::

        @menu(label="Dashboard", show_as_text=True)
        def dashboard(): ...
    """
    marker = Menu(**options)

    def decorator(obj: Any) -> Any:
        return attach_marker(obj, marker)

    return decorator


def secure(*roles: str) -> Callable[[Any], Any]:
    """Attach a ``Secure`` marker listing the required roles."""
    marker = Secure(roles=tuple(roles))

    def decorator(obj: Any) -> Any:
        return attach_marker(obj, marker)

    return decorator


def secure_param(
    name: str,
    *,
    expression: str | None = None,
    permissions: tuple[str, ...] | list[str] = (),
) -> Callable[[Any], Any]:
    """Attach a ``SecureParam`` marker bound to the argument *name*."""
    marker = SecureParam(name=name, expression=expression, permissions=tuple(permissions))

    def decorator(obj: Any) -> Any:
        return attach_marker(obj, marker)

    return decorator
