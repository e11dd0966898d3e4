"""Option defaults and empty-value normalization.

Every resolved menu node carries the full key set returned by
``default_options()``. Merging is "add if absent": a key already present
in the target wins over the source, so sources are applied from highest
to lowest precedence.
"""

from collections.abc import Mapping, Set
from typing import Any

from menuwright._internal.types import OptionSet

OPTION_KEYS: tuple[str, ...] = (
    "uri",
    "label",
    "name",
    "attributes",
    "linkAttributes",
    "childrenAttributes",
    "labelAttributes",
    "display",
    "displayChildren",
    "secureParams",
    "roles",
    "route",
    "routeAbsolute",
    "showNonAuthorized",
    "showAsText",
    "translateDomain",
    "translateParameters",
    "type",
)


def default_options() -> OptionSet:
    """Return a fresh baseline option set.

    Mutable values are new objects on every call, so callers may mutate
    the result freely.
    """
    return {
        "uri": None,
        "label": None,
        "name": None,
        "attributes": {},
        "linkAttributes": {},
        "childrenAttributes": {},
        "labelAttributes": {},
        "display": True,
        "displayChildren": True,
        "secureParams": {},
        "roles": [],
        "route": None,
        "routeAbsolute": False,
        "showNonAuthorized": False,
        "showAsText": False,
        "translateDomain": None,
        "translateParameters": {},
        "type": None,
    }


def is_empty(value: Any) -> bool:
    """Return True for values that mean "not configured".

    ``None``, empty strings and empty collections are unset. ``False``
    and ``0`` are real values: ``display: false`` must survive a merge.
    """
    if value is None:
        return True
    if isinstance(value, str | bytes | Mapping | Set | list | tuple):
        return len(value) == 0
    return False


def strip_empty(options: OptionSet) -> OptionSet:
    """Remove unset keys from *options* in place and return it."""
    for key in [k for k, v in options.items() if is_empty(v)]:
        del options[key]
    return options


def add_missing(target: OptionSet, source: Mapping[str, Any]) -> OptionSet:
    """Copy keys from *source* that *target* lacks. Existing keys win."""
    for key, value in source.items():
        if key not in target:
            target[key] = value
    return target
