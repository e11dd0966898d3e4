"""Handler introspection — argument types and declaring class of a route handler.

Route handlers may be plain functions, functions defined in a controller
class body, bound methods, callable instances, or import strings::

    "shop.controllers:ProductController.show"

Import strings are resolved once per lookup with ``resolve_handler()``.
The declaring class of ``ProductController.show`` is the class whose body
defines ``show``, which may be a base class of ``ProductController``.
"""

from __future__ import annotations

import importlib
import inspect
import sys
import types
import typing
from typing import Any, Protocol

from menuwright._internal.types import Handler
from menuwright.errors import HandlerResolutionError


class HandlerIntrospector(Protocol):
    """What the extractor needs to know about a handler."""

    def parameters_of(self, handler: Handler) -> dict[str, Any]: ...

    def declaring_class_of(self, handler: Handler) -> type | None: ...


def resolve_handler(ref: Handler | str) -> Handler:
    """Resolve a handler reference to a callable.

    Callables pass through unchanged. Strings use ``"module:Qual.Name"``
    format.

    Raises:
        HandlerResolutionError: If the module cannot be imported, an
            attribute is missing, or the result is not callable.
    """
    if not isinstance(ref, str):
        return ref

    module_path, _, qualname = ref.partition(":")
    if not module_path or not qualname:
        raise HandlerResolutionError(ref, "expected 'module:Qual.Name'")

    try:
        obj: Any = importlib.import_module(module_path)
    except ImportError as exc:
        raise HandlerResolutionError(ref, str(exc)) from exc

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise HandlerResolutionError(ref, f"no attribute {part!r}") from exc

    if not callable(obj):
        raise HandlerResolutionError(ref, f"{type(obj).__name__} is not callable")
    return obj


def handler_identity(handler: Handler | str) -> str:
    """Return a ``module:Qual.Name`` string identifying *handler*."""
    if isinstance(handler, str):
        return handler
    func = getattr(handler, "__func__", handler)
    qualname = getattr(func, "__qualname__", None) or type(handler).__qualname__
    module = getattr(func, "__module__", None) or type(handler).__module__
    return f"{module}:{qualname}"


def parameters_of(handler: Handler) -> dict[str, Any]:
    """Map each argument name of *handler* to its declared type.

    Unannotated arguments map to ``None``. A leading ``self``/``cls`` of
    a function taken from a class body is skipped. Annotations that cannot
    be evaluated (names only imported under ``TYPE_CHECKING``) are kept as
    strings.
    """
    try:
        sig = inspect.signature(handler, eval_str=True)
    except NameError:
        sig = inspect.signature(handler)

    result: dict[str, Any] = {}
    for index, (name, param) in enumerate(sig.parameters.items()):
        if index == 0 and name in ("self", "cls"):
            continue
        if param.annotation is inspect.Parameter.empty:
            result[name] = None
        else:
            result[name] = param.annotation
    return result


def declaring_class_of(handler: Handler) -> type | None:
    """Return the class whose body defines *handler*, or ``None``."""
    if inspect.ismethod(handler):
        owner = handler.__self__
        owner_cls = owner if inspect.isclass(owner) else type(owner)
        method_name = handler.__func__.__name__
        for cls in owner_cls.__mro__:
            if method_name in vars(cls):
                return cls
        return owner_cls

    if isinstance(handler, types.FunctionType):
        return _class_from_qualname(handler)

    if callable(handler) and not inspect.isclass(handler):
        # Callable instance: the controller is the instance's class
        return type(handler)

    return None


def _class_from_qualname(func: types.FunctionType) -> type | None:
    parts = func.__qualname__.split(".")
    if len(parts) < 2 or "<locals>" in parts:
        return None

    obj: Any = sys.modules.get(func.__module__)
    for part in parts[:-1]:
        obj = getattr(obj, part, None)
        if obj is None:
            return None
    return obj if inspect.isclass(obj) else None


def type_name(annotation: Any) -> str | None:
    """Render a declared argument type the way menus record it.

    ``User`` -> ``"User"``; ``User | None`` -> ``"User"``; string
    annotations are returned as written.
    """
    if annotation is None:
        return None
    if isinstance(annotation, str):
        return annotation
    if inspect.isclass(annotation) and not typing.get_args(annotation):
        return annotation.__qualname__

    args = [a for a in typing.get_args(annotation) if a is not type(None)]
    if len(args) == 1:
        return type_name(args[0])
    return str(annotation)


class SignatureIntrospector:
    """Default ``HandlerIntrospector`` backed by ``inspect``."""

    def parameters_of(self, handler: Handler) -> dict[str, Any]:
        return parameters_of(handler)

    def declaring_class_of(self, handler: Handler) -> type | None:
        return declaring_class_of(handler)
