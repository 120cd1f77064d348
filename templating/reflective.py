"""
Reflective property rendering.

Finds string properties on an arbitrary object and renders the ones that
hold template markers, writing the result back in place. Three accessor
shapes are recognised:

- ``get_title()`` / ``set_title(value)`` method pairs
- ``getTitle()`` / ``setTitle(value)`` method pairs
- ``property`` descriptors that define a setter

Callers that know the shape of their objects can pass explicit
``(getter, setter)`` pairs instead of relying on discovery.
"""

import inspect
import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from jinja2 import Environment

from observability.logging import render_logger, source_context
from .template import HOST_FAILURES, OPEN_MARKER, render_string, source_name_of

logger = logging.getLogger(__name__)

GETTER_PREFIX = "get"
SETTER_PREFIX = "set"

_STR_ANNOTATION = re.compile(r"\bstr\b")


@dataclass(frozen=True)
class PropertyAccessor:
    """A named getter/setter pair bound to one object."""
    name: str
    getter: Callable[[], Any]
    setter: Callable[[str], Any]


AccessorSpec = Union[PropertyAccessor, Tuple[Callable[[], Any], Callable[[str], Any]]]


def _accepts(func: Callable, *args) -> bool:
    try:
        inspect.signature(func).bind(*args)
        return True
    except (TypeError, ValueError):
        return False


def _may_return_string(func: Callable) -> bool:
    try:
        annotation = inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return True
    if annotation is inspect.Signature.empty or annotation is str:
        return True
    if isinstance(annotation, str):
        # postponed annotations, e.g. "str | None" or "Optional[str]"
        return _STR_ANNOTATION.search(annotation) is not None
    return str in getattr(annotation, "__args__", ())


def _setter_name(getter_name: str) -> Optional[str]:
    suffix = getter_name[len(GETTER_PREFIX):]
    if not suffix or suffix == "_":
        return None
    if suffix.startswith("_") or suffix[0].isupper():
        return SETTER_PREFIX + suffix
    # "getaway" is not a getter
    return None


def _property_name(getter_name: str) -> str:
    suffix = getter_name[len(GETTER_PREFIX):].lstrip("_")
    return suffix[0].lower() + suffix[1:]


def discover_accessors(obj: Any) -> List[PropertyAccessor]:
    """
    List the string getter/setter pairs exposed by ``obj``.

    Getters without a matching one-argument setter are left out.
    """
    accessors = []
    seen = set()

    for name in dir(obj):
        if name.startswith("__"):
            continue
        static = inspect.getattr_static(obj, name, None)

        if isinstance(static, property):
            if static.fget is None or static.fset is None or name.startswith("_"):
                continue
            if name in seen:
                continue
            if not _may_return_string(static.fget):
                continue
            accessors.append(PropertyAccessor(
                name=name,
                getter=partial(getattr, obj, name),
                setter=partial(setattr, obj, name),
            ))
            seen.add(name)
            continue

        if not name.startswith(GETTER_PREFIX):
            continue
        setter_name = _setter_name(name)
        if setter_name is None:
            continue

        getter = getattr(obj, name, None)
        setter = getattr(obj, setter_name, None)
        if not callable(getter) or not callable(setter):
            continue
        if not _accepts(getter) or not _accepts(setter, ""):
            continue
        if not _may_return_string(getter):
            continue

        prop = _property_name(name)
        if prop in seen:
            continue
        seen.add(prop)
        accessors.append(PropertyAccessor(name=prop, getter=getter, setter=setter))

    return accessors


def _normalize(accessors: Iterable[AccessorSpec]) -> List[PropertyAccessor]:
    normalized = []
    for spec in accessors:
        if isinstance(spec, PropertyAccessor):
            normalized.append(spec)
        else:
            getter, setter = spec
            name = getattr(getter, "__name__", repr(getter))
            normalized.append(PropertyAccessor(name=name, getter=getter, setter=setter))
    return normalized


def render_properties(environment: Environment, obj: Any, context: Mapping,
                      accessors: Optional[Iterable[AccessorSpec]] = None) -> Any:
    """
    Render templated string properties of ``obj`` in place.

    Rendering is best effort: a property whose getter, template or setter
    fails is logged and left unchanged, and the remaining properties are
    still processed.

    Args:
        environment: Jinja2 environment holding the registered helpers
        obj: Object to update
        context: Variables available to the templates
        accessors: Explicit getter/setter pairs; discovered when omitted

    Returns:
        ``obj`` itself
    """
    if accessors is None:
        pairs = discover_accessors(obj)
    else:
        pairs = _normalize(accessors)

    with source_context(source_name_of(environment)):
        for accessor in pairs:
            try:
                value = accessor.getter()
                if isinstance(value, str) and OPEN_MARKER in value:
                    accessor.setter(render_string(environment, value, context))
            except HOST_FAILURES:
                raise
            except Exception as e:
                render_logger.property_render_skipped(type(obj).__name__, accessor.name, e)

    return obj
