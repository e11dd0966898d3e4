"""Named route table.

Menu entries refer to routes by name, so the table is keyed by name
rather than by path. Routes without a name can be registered but are
never reachable from a menu.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from menuwright._internal.types import Handler
from menuwright.errors import ConfigurationError
from menuwright.routing.route import Route

logger = logging.getLogger("menuwright.routing")


class RouteTable:
    """Route table with lookup by route name.

    Usage::

        routes = RouteTable()

        @routes.route("/users", name="user_list")
        def user_list(): ...

        routes.add(Route("/users/{id}", "shop.users:UserController.edit", name="user_edit"))
        routes.compile()
        routes.lookup("user_list")
    """

    __slots__ = ("_by_name", "_compiled", "_routes")

    def __init__(self, routes: list[Route] | None = None) -> None:
        self._routes: list[Route] = []
        self._by_name: dict[str, Route] = {}
        self._compiled = False
        for route in routes or ():
            self.add(route)

    def add(self, route: Route) -> None:
        """Add a route to the table. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if route.name:
            existing = self._by_name.get(route.name)
            if existing is not None:
                logger.warning(
                    "Route name %r registered twice (%s and %s)",
                    route.name,
                    existing.path,
                    route.path,
                )
                msg = (
                    f"Duplicate route name {route.name!r}: "
                    f"already registered for {existing.path!r}"
                )
                raise ConfigurationError(msg)
            self._by_name[route.name] = route

        self._routes.append(route)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Route name used by menu entries. Defaults to the
                function name.
            defaults: Extra route defaults carried along for callers.
        """

        def decorator(func: Handler) -> Handler:
            self.add(
                Route(
                    path=path,
                    handler=func,
                    methods=frozenset(methods or ["GET"]),
                    name=name or func.__name__,
                    defaults=dict(defaults or {}),
                )
            )
            return func

        return decorator

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    def lookup(self, name: str) -> Route | None:
        """Return the route registered under *name*, or ``None``."""
        return self._by_name.get(name)

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes in registration order."""
        return list(self._routes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
