"""Shared type aliases used across menuwright modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler — controller function or method with variable signature
Handler: TypeAlias = Callable[..., Any]

# Options of one menu node, keyed by option name ("label", "linkAttributes", ...)
OptionSet: TypeAlias = dict[str, Any]

# Reusable named entries ("items" section), consulted and updated during a pass
NamedEntries: TypeAlias = dict[str, OptionSet | None]
