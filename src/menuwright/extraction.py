"""Metadata extraction — turn handler markers into option fragments.

For a route name, the extractor finds the backing handler, reads the
markers declared on the handler itself and on its declaring class, and
folds them into one partial option set:

1. Method markers, in declaration order (first value for a key wins)
2. Class markers, filling only keys the method markers left unset

``SecureParam`` markers are bound to the handler's arguments: the
recorded entry carries the declared type of the named argument under
``"class"``. A marker naming an argument the handler does not accept is
a configuration error.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from menuwright._internal.types import Handler, OptionSet
from menuwright.errors import SecureParamError
from menuwright.introspection import (
    HandlerIntrospector,
    SignatureIntrospector,
    handler_identity,
    resolve_handler,
    type_name,
)
from menuwright.markers import Menu, Secure, SecureParam, markers_of
from menuwright.options import add_missing
from menuwright.routing.route import Route

logger = logging.getLogger("menuwright.extraction")


class RouteLookup(Protocol):
    """Anything that can find a route by name (``RouteTable`` does)."""

    def lookup(self, name: str) -> Route | None: ...


class MetadataProvider(Protocol):
    """Source of markers for handlers and controller classes."""

    def method_markers(self, handler: Handler) -> Iterable[object]: ...

    def class_markers(self, cls: type) -> Iterable[object]: ...


class AttributeMetadataProvider:
    """Read markers attached by the ``@menu``/``@secure``/``@secure_param`` decorators."""

    def method_markers(self, handler: Handler) -> Iterable[object]:
        return markers_of(handler)

    def class_markers(self, cls: type) -> Iterable[object]:
        return markers_of(cls)


def extract_fragments(
    markers: Iterable[object],
    argument_types: Mapping[str, Any],
    *,
    handler: str = "<unknown>",
) -> OptionSet:
    """Fold *markers* into a single option fragment.

    Args:
        markers: Markers in declaration order. Unknown objects are skipped.
        argument_types: Handler argument name -> declared type, used to
            bind ``SecureParam`` markers.
        handler: Handler identity, for error messages.

    Raises:
        SecureParamError: A ``SecureParam`` names an argument missing
            from *argument_types*.
    """
    fragment: OptionSet = {}
    for marker in markers:
        match marker:
            case SecureParam():
                if marker.name not in argument_types:
                    raise SecureParamError(marker.name, handler)
                secure_params = fragment.setdefault("secureParams", {})
                if marker.name not in secure_params:
                    entry = marker.fields()
                    entry["class"] = type_name(argument_types[marker.name])
                    secure_params[marker.name] = entry
            case Secure() | Menu():
                add_missing(fragment, marker.fields())
            case _:
                continue
    return fragment


class MetadataExtractor:
    """Resolve route names to handlers and extract their marker fragments.

    Fragments are cached per handler object when *cache* is true, since
    one handler often backs several menu entries. Handlers built by one
    factory share a qualified name, so the name is never the cache key.
    Call ``clear_cache()`` between resolution passes.
    """

    __slots__ = ("_cache", "_introspector", "_provider", "_routes", "cache_enabled")

    def __init__(
        self,
        routes: RouteLookup,
        *,
        provider: MetadataProvider | None = None,
        introspector: HandlerIntrospector | None = None,
        cache: bool = True,
    ) -> None:
        self._routes = routes
        self._provider: MetadataProvider = provider or AttributeMetadataProvider()
        self._introspector: HandlerIntrospector = introspector or SignatureIntrospector()
        # id(handler) -> (handler, fragment); the handler reference keeps the id live
        self._cache: dict[int, tuple[Handler, OptionSet]] = {}
        self.cache_enabled = cache

    def resolve_handler(self, route_name: str) -> Handler | None:
        """Return the handler behind *route_name*, or ``None``.

        A missing route or a route without a handler is an expected
        outcome for menu entries that are not backed by a controller.
        """
        route = self._routes.lookup(route_name)
        if route is None:
            logger.debug("No route named %r", route_name)
            return None
        if route.handler is None:
            logger.debug("Route %r has no handler", route_name)
            return None
        return resolve_handler(route.handler)

    def fragment_for(self, route_name: str) -> OptionSet | None:
        """Return the combined method and class fragment for *route_name*.

        Returns ``None`` when the route has no handler. The returned dict
        is a fresh copy the caller may mutate.
        """
        handler = self.resolve_handler(route_name)
        if handler is None:
            return None

        if self.cache_enabled:
            cached = self._cache.get(id(handler))
            if cached is not None and cached[0] is handler:
                return _copy_fragment(cached[1])

        fragment = self._extract(handler, handler_identity(handler))
        if self.cache_enabled:
            self._cache[id(handler)] = (handler, fragment)
        return _copy_fragment(fragment)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _extract(self, handler: Handler, identity: str) -> OptionSet:
        arguments = self._introspector.parameters_of(handler)
        fragment = extract_fragments(
            self._provider.method_markers(handler),
            arguments,
            handler=identity,
        )

        cls = self._introspector.declaring_class_of(handler)
        if cls is not None:
            class_fragment = extract_fragments(
                self._provider.class_markers(cls),
                arguments,
                handler=identity,
            )
            add_missing(fragment, class_fragment)

        logger.debug("Extracted %d option(s) from %s", len(fragment), identity)
        return fragment


def _copy_fragment(fragment: OptionSet) -> OptionSet:
    """Copy one level deep so merged nodes never share mutable values."""
    copied: OptionSet = {}
    for key, value in fragment.items():
        if key == "secureParams":
            copied[key] = {name: dict(entry) for name, entry in value.items()}
        elif isinstance(value, dict):
            copied[key] = dict(value)
        elif isinstance(value, list):
            copied[key] = list(value)
        else:
            copied[key] = value
    return copied
