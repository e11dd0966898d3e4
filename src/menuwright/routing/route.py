"""Route frozen dataclass."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from menuwright._internal.types import Handler


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``handler`` is the callable backing the route, an import string
    such as ``"shop.controllers:ProductController.show"``, or ``None``
    for routes without a controller (redirects, static pages).
    """

    path: str
    handler: Handler | str | None
    methods: frozenset[str] = frozenset({"GET"})
    name: str | None = None
    defaults: Mapping[str, Any] = field(default_factory=dict)
