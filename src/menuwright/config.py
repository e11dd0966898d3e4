"""Resolver configuration.

Settings for one ``OptionMerger``: how deep a menu tree may nest, whether
handler metadata is cached within a pass, and whether ``normalize()``
works on a copy of the document.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Option resolver configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ResolverConfig(max_depth=8, cache_metadata=False)
    """

    # Deepest menu nesting accepted before the tree is treated as cyclic
    max_depth: int = 64

    # Reuse extracted handler metadata for routes seen earlier in the same pass
    cache_metadata: bool = True

    # Resolve a deep copy so a failed pass leaves the caller's document untouched
    copy_input: bool = True
