"""Menuwright — resolve effective menu tree options.

Merges per-node menu configuration with reusable named entries, markers
declared on the controllers backing each route, and defaults.

Basic usage::

    from menuwright import OptionMerger, RouteTable
    from menuwright.markers import menu, secure

    routes = RouteTable()

    @routes.route("/users", name="users")
    @menu(label="Users")
    @secure("ROLE_ADMIN")
    def users(): ...

    routes.compile()
    resolved = OptionMerger(routes).normalize({
        "items": {},
        "tree": {"main": {"children": {"users": {}}}},
    })
    resolved["tree"]["main"]["children"]["users"]["roles"]  # ["ROLE_ADMIN"]
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "CyclicTreeError",
    "MalformedTreeError",
    "MenuError",
    "OptionMerger",
    "ResolverConfig",
    "Route",
    "RouteTable",
    "SecureParamError",
    "default_options",
    "normalize",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import menuwright`` fast while providing a clean top-level API.
    """
    if name in ("OptionMerger", "normalize"):
        from menuwright import merger as _merger

        return getattr(_merger, name)

    if name == "ResolverConfig":
        from menuwright.config import ResolverConfig

        return ResolverConfig

    if name in ("Route", "RouteTable"):
        from menuwright import routing as _routing

        return getattr(_routing, name)

    if name == "default_options":
        from menuwright.options import default_options

        return default_options

    if name in (
        "ConfigurationError",
        "CyclicTreeError",
        "MalformedTreeError",
        "MenuError",
        "SecureParamError",
    ):
        from menuwright import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
