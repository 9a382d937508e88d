"""Attach generated methods to client classes.

Every client class keeps its own registry of the macros defined on it.
Subclasses see their parents' macros (through normal attribute lookup) and can
redefine them without touching the parent class.
"""

import logging
from typing import Any, Callable, Dict

from mech_boilerplate.errors import ConfigError
from mech_boilerplate.runtime import BUILDERS
from mech_boilerplate.specs import SPEC_TYPES, MethodSpec

logger = logging.getLogger(__name__)

_REGISTRY_ATTR = "_macro_registry"


def registered_methods(client_cls: type) -> Dict[str, MethodSpec]:
    """All macro specs visible on ``client_cls``, parents first."""
    merged: Dict[str, MethodSpec] = {}
    for klass in reversed(client_cls.__mro__):
        merged.update(klass.__dict__.get(_REGISTRY_ATTR, {}))
    return merged


def register_method(client_cls: type, spec: MethodSpec) -> Callable[..., Any]:
    """Build the method described by ``spec`` and attach it to ``client_cls``.

    Registering a name that already holds a macro replaces it; registering a
    name that holds any other attribute is refused.
    """
    name = spec.method_name
    if name.startswith(_REGISTRY_ATTR):
        raise ConfigError(f"Method name [{name}] is reserved for the macro registry")
    existing = getattr(client_cls, name, None)
    if existing is not None and not hasattr(existing, "__macro_spec__"):
        raise ConfigError(
            f"Method name [{name}] would replace {client_cls.__name__}.{name}"
        )

    function = BUILDERS[spec.kind](spec)
    function.__qualname__ = f"{client_cls.__qualname__}.{name}"
    function.__module__ = client_cls.__module__

    registry = client_cls.__dict__.get(_REGISTRY_ATTR)
    if registry is None:
        registry = {}
        setattr(client_cls, _REGISTRY_ATTR, registry)
    registry[name] = spec
    setattr(client_cls, name, function)

    logger.debug(f"Registered {spec.kind} method {client_cls.__name__}.{name}")
    return function


def create_method(client_cls: type, kind: str, **options: Any) -> Callable[..., Any]:
    """Validate ``options`` as a ``kind`` spec and register the resulting method."""
    spec_type = SPEC_TYPES.get(kind)
    if spec_type is None:
        raise ConfigError(
            f"Unknown method kind [{kind}]. Available: {sorted(SPEC_TYPES)}"
        )
    return register_method(client_cls, spec_type.from_options(**options))
