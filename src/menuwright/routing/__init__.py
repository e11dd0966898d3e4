"""Routing — named route table consulted while resolving menu entries.

Routes are registered during setup and frozen with ``compile()`` before
menus are resolved against them.
"""

from menuwright.routing.route import Route
from menuwright.routing.table import RouteTable

__all__ = ["Route", "RouteTable"]
