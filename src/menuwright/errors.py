"""Menuwright exception hierarchy.

Shared across the route table, extraction and merger so every module
raises and catches the same types.
"""

from collections.abc import Sequence


def format_path(path: Sequence[str]) -> str:
    """Render a node path for messages: ``main > admin > users``."""
    return " > ".join(path) if path else "<root>"


class MenuError(Exception):
    """Base for all menuwright-specific errors."""


class ConfigurationError(MenuError):
    """Raised when menu or route configuration is inconsistent.

    Typically surfaces while registering routes or during ``normalize()``.
    """


class SecureParamError(ConfigurationError):
    """A ``@secure_param`` marker names an argument the handler does not have.

    The binding cannot be satisfied, so resolution of the node aborts.
    """

    def __init__(
        self,
        param: str,
        handler: str,
        node: Sequence[str] = (),
    ) -> None:
        self.param = param
        self.handler = handler
        self.node = tuple(node)
        msg = (
            f"Secure parameter {param!r} is not an argument of handler {handler}"
            f" (menu node: {format_path(self.node)})"
        )
        super().__init__(msg)


class HandlerResolutionError(ConfigurationError):
    """A route handler given as an import string could not be resolved."""

    def __init__(self, ref: str, reason: str) -> None:
        self.ref = ref
        super().__init__(f"Cannot resolve handler {ref!r}: {reason}")


class MalformedTreeError(MenuError):
    """The menu document or one of its nodes has the wrong shape."""

    def __init__(self, detail: str, path: Sequence[str] = ()) -> None:
        self.detail = detail
        self.path = tuple(path)
        super().__init__(f"{detail} (menu node: {format_path(self.path)})")


class CyclicTreeError(MalformedTreeError):
    """A node is its own ancestor, or the tree is deeper than allowed."""
