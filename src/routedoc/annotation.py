"""Attaching declarations to handlers and resolving import strings.

Handlers are plain Python callables. A declaration is attached with the
:func:`api_doc` decorator::

    from routedoc.annotation import api_doc

    @api_doc(resource=True, description="List users", output="myapp.models.User")
    def list_users(request):
        ...

Route records may reference their handler either directly or by an import
string (``package.module:function`` or ``package.module:Class.method``);
:func:`resolve_handler` turns such strings back into callables. Type
references use dotted paths (``package.module.Class``) and are resolved by
:func:`resolve_type`.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Optional, TypeVar

from routedoc.models import ApiDoc

logger = logging.getLogger(__name__)

DECLARATION_ATTRIBUTE = "__api_doc__"

F = TypeVar("F", bound=Callable[..., Any])


def api_doc(**kwargs: Any) -> Callable[[F], F]:
    """Attach an :class:`~routedoc.models.ApiDoc` declaration to a handler.

    The keyword arguments are validated immediately with
    :meth:`ApiDoc.from_dict`, so a malformed declaration fails at import
    time rather than during extraction.

    Raises:
        InvalidDeclarationError: If the declaration is malformed.
    """
    declaration = ApiDoc.from_dict(kwargs)

    def decorator(func: F) -> F:
        setattr(func, DECLARATION_ATTRIBUTE, declaration)
        return func

    return decorator


def get_declaration(handler: Any) -> Optional[ApiDoc]:
    """Return the declaration attached to *handler*, if any."""
    declaration = getattr(handler, DECLARATION_ATTRIBUTE, None)
    if isinstance(declaration, ApiDoc):
        return declaration
    return None


def resolve_handler(handler: Any) -> Optional[Callable[..., Any]]:
    """Resolve a route handler reference to a callable.

    Args:
        handler: A callable (returned as-is), ``None``, or an import string
            of the form ``package.module:qualname``.

    Returns:
        The callable, or ``None`` when the reference cannot be resolved.
        Unresolvable handlers are not an error; the route is simply not
        documented.
    """
    if handler is None:
        return None
    if not isinstance(handler, str):
        return handler if callable(handler) else None

    module_name, sep, qualname = handler.partition(":")
    if not sep or not qualname:
        logger.debug("Handler '%s' is not of the form module:qualname", handler)
        return None

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        logger.debug("Cannot import handler module '%s': %s", module_name, exc)
        return None

    for part in qualname.split("."):
        target = getattr(target, part, None)
        if target is None:
            logger.debug("Handler '%s' has no attribute '%s'", handler, part)
            return None

    return target if callable(target) else None


def resolve_type(identifier: Any) -> Optional[type]:
    """Resolve a dotted type identifier to a class.

    Backslash separated identifiers (``Vendor\\Model``) are accepted as
    well. Nested classes are supported (``pkg.mod.Outer.Inner``).

    Returns:
        The class, or ``None`` if *identifier* does not name an importable
        class.
    """
    if isinstance(identifier, type):
        return identifier
    if not isinstance(identifier, str) or not identifier:
        return None

    parts = identifier.replace("\\", ".").split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        for attr in parts[split:]:
            target = getattr(target, attr, None)
            if target is None:
                break
        if isinstance(target, type):
            return target
        return None
    return None
