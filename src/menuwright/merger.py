"""Option merger — resolve the effective options of every menu node.

A menu document has two sections::

    {
        "items": {"users": {"label": "People"}},       # reusable named entries
        "tree":  {"main": {"children": {"users": {}}}},  # the menu trees
    }

Each node is merged from, highest precedence first:

1. The node's own non-empty options
2. The named entry (``items``) with the same name as the node
3. Markers on the route handler (``@menu``, ``@secure``, ``@secure_param``)
4. Markers on the handler's declaring class
5. ``default_options()``

Handler markers are only consulted when the node has no ``uri``; the
route name is the node's ``route`` option, or the node name itself.

Nodes are resolved depth-first, parents before children. After a node
is resolved its options (without ``children``) replace its named entry,
so later references to the same name see the resolved form.
"""

import copy
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from menuwright._internal.types import NamedEntries, OptionSet
from menuwright.config import ResolverConfig
from menuwright.errors import CyclicTreeError, MalformedTreeError, SecureParamError
from menuwright.extraction import MetadataExtractor, MetadataProvider, RouteLookup
from menuwright.introspection import HandlerIntrospector
from menuwright.options import add_missing, default_options, is_empty, strip_empty

logger = logging.getLogger("menuwright.merger")


class OptionMerger:
    """Merge menu options from named entries, handler markers and defaults.

    Usage::

        merger = OptionMerger(routes)
        menu = merger.normalize({"items": {...}, "tree": {...}})
        menu["tree"]["main"]["children"]["users"]["label"]
    """

    __slots__ = ("_extractor", "config")

    def __init__(
        self,
        routes: RouteLookup,
        *,
        provider: MetadataProvider | None = None,
        introspector: HandlerIntrospector | None = None,
        config: ResolverConfig | None = None,
    ) -> None:
        self.config: ResolverConfig = config or ResolverConfig()
        self._extractor = MetadataExtractor(
            routes,
            provider=provider,
            introspector=introspector,
            cache=self.config.cache_metadata,
        )

    def merge(self, options: OptionSet, named_entries: NamedEntries, name: str) -> None:
        """Resolve *options* and its children in place.

        *named_entries* is updated with the resolved form of every named
        node visited.

        Raises:
            SecureParamError: A handler marker binds a missing argument.
            MalformedTreeError: A node or its ``children`` is not a mapping.
            CyclicTreeError: A node is its own ancestor or the tree is too deep.
        """
        path = (name,) if name else ()
        self._merge(options, named_entries, name, path, set())

    def normalize(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Resolve every tree in *document* and return the resolved document.

        Named entries whose name matches a tree root are cleared to
        ``None`` once that tree is resolved. The pass is all-or-nothing:
        any error propagates and, with ``copy_input`` enabled, the
        caller's document is left untouched.
        """
        if not isinstance(document, Mapping):
            raise MalformedTreeError(
                f"menu document must be a mapping, got {type(document).__name__}"
            )

        menu: Any = copy.deepcopy(document) if self.config.copy_input else document
        items = _section(menu, "items")
        tree = _section(menu, "tree")

        for item_name, item in items.items():
            if item is None:
                continue
            if not isinstance(item, MutableMapping):
                raise MalformedTreeError(
                    f"item must be a mapping, got {type(item).__name__}", (item_name,)
                )
            strip_empty(item)

        self._extractor.clear_cache()
        logger.debug("Resolving %d menu tree(s)", len(tree))

        for name, root in tree.items():
            if root is None:
                root = tree[name] = {}
            self._merge(root, items, name, (name,), set())
            items[name] = None
            logger.debug("Menu tree %r resolved", name)

        return menu

    def _merge(
        self,
        options: Any,
        named_entries: NamedEntries,
        name: str,
        path: tuple[str, ...],
        ancestors: set[int],
    ) -> None:
        if not isinstance(options, MutableMapping):
            raise MalformedTreeError(
                f"menu node must be a mapping, got {type(options).__name__}", path
            )
        if id(options) in ancestors:
            raise CyclicTreeError("menu node contains itself", path)
        if len(path) > self.config.max_depth:
            raise CyclicTreeError(
                f"menu tree is deeper than {self.config.max_depth} levels", path
            )

        strip_empty(options)

        if name:
            entry = named_entries.get(name)
            if entry is not None:
                if not isinstance(entry, Mapping):
                    raise MalformedTreeError(
                        f"item must be a mapping, got {type(entry).__name__}", path
                    )
                inherited = {k: v for k, v in entry.items() if not is_empty(v)}
                add_missing(options, copy.deepcopy(inherited))

            if "uri" not in options:
                self._merge_handler_metadata(options, name, path)

        add_missing(options, default_options())

        if name:
            named_entries[name] = copy.deepcopy(
                {k: v for k, v in options.items() if k != "children"}
            )

        children = options.get("children")
        if children is None:
            children = options["children"] = {}
        if not isinstance(children, MutableMapping):
            raise MalformedTreeError(
                f"'children' must be a mapping, got {type(children).__name__}", path
            )

        ancestors.add(id(options))
        for child_name, child in children.items():
            if child is None:
                child = children[child_name] = {}
            self._merge(child, named_entries, child_name, (*path, str(child_name)), ancestors)
        ancestors.discard(id(options))

    def _merge_handler_metadata(
        self,
        options: OptionSet,
        name: str,
        path: tuple[str, ...],
    ) -> None:
        route_name = options.get("route") or name
        try:
            fragment = self._extractor.fragment_for(route_name)
        except SecureParamError as exc:
            raise SecureParamError(exc.param, exc.handler, path) from exc

        if fragment is None:
            return

        add_missing(options, {"route": route_name})
        add_missing(options, fragment)


def _section(menu: Any, key: str) -> MutableMapping[str, Any]:
    section = menu.get(key)
    if section is None:
        section = menu[key] = {}
    if not isinstance(section, MutableMapping):
        raise MalformedTreeError(
            f"{key!r} section must be a mapping, got {type(section).__name__}"
        )
    return section


def normalize(
    document: Mapping[str, Any],
    routes: RouteLookup,
    *,
    provider: MetadataProvider | None = None,
    config: ResolverConfig | None = None,
) -> dict[str, Any]:
    """Resolve *document* against *routes* with a one-off ``OptionMerger``."""
    return OptionMerger(routes, provider=provider, config=config).normalize(document)
