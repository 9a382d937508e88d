"""Declare generated methods in YAML.

A macro file is a mapping with a ``methods`` list (a bare list also works).
Every entry names its ``kind`` and carries the same options the matching
``create_<kind>_method`` accepts::

    methods:
      - kind: fetch
        method_name: delorean__configuration
        page_description: configuration page for the Delorean
        page_url: /delorean/configuration

      - kind: form
        method_name: delorean__configuration__flux_capacitor
        form_name: form-flux-capacitor
        form_description: recalibration form
        assert_location: {regex: "^/delorean/configuration"}
        transform_fields: myproject.macros:flux_fields

Callables are referenced as ``module:attribute``. ``transform_fields`` and
``handler`` take the reference directly; the form resolvers and
``form_button`` take ``{callable: "module:attribute"}`` so plain strings keep
meaning a literal form name or button.
"""

import importlib
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

import yaml

from mech_boilerplate.errors import ConfigError
from mech_boilerplate.factory import create_method
from mech_boilerplate.specs import SPEC_TYPES, MethodSpec

CALLABLE_FIELDS = ("transform_fields", "handler")
RESOLVABLE_FIELDS = ("form_name", "form_id", "form_number", "form_button")


def import_callable(reference: str) -> Callable[..., Any]:
    """Import ``package.module:attribute`` (attribute may be dotted)."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigError(
            f"Callable reference [{reference}] must look like 'module:attribute'"
        )
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Could not import module [{module_name}]: {exc}") from exc
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigError(f"[{reference}] has no attribute [{part}]") from exc
    if not callable(target):
        raise ConfigError(f"[{reference}] is not callable")
    return target


def _single_key(value: Dict[str, Any], key: str, field: str) -> Any:
    if set(value) != {key}:
        raise ConfigError(f"[{field}] mapping must have exactly one key, '{key}'")
    return value[key]


def _convert_entry(entry: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    options = dict(entry)
    kind = options.pop("kind", None)
    if kind not in SPEC_TYPES:
        raise ConfigError(
            f"Unknown method kind [{kind}]. Available: {sorted(SPEC_TYPES)}"
        )

    location = options.get("assert_location")
    if isinstance(location, dict):
        expression = _single_key(location, "regex", "assert_location")
        try:
            options["assert_location"] = re.compile(expression)
        except re.error as exc:
            raise ConfigError(f"Invalid assert_location regex [{expression}]: {exc}") from exc

    for field in CALLABLE_FIELDS:
        if isinstance(options.get(field), str):
            options[field] = import_callable(options[field])

    for field in RESOLVABLE_FIELDS:
        value = options.get(field)
        if isinstance(value, dict):
            options[field] = import_callable(_single_key(value, "callable", field))

    return kind, options


def load_macros(client_cls: type, data: Union[Dict[str, Any], List[Any]]) -> List[MethodSpec]:
    """Register every method declared in already-parsed macro data."""
    methods = data.get("methods") if isinstance(data, dict) else data
    if not isinstance(methods, list):
        raise ConfigError("Macro data must contain a 'methods' list")

    specs: List[MethodSpec] = []
    for number, entry in enumerate(methods, start=1):
        if not isinstance(entry, dict):
            raise ConfigError(f"Method #{number} must be a mapping")
        try:
            kind, options = _convert_entry(entry)
            function = create_method(client_cls, kind, **options)
        except ConfigError as exc:
            name = entry.get("method_name", "?")
            raise ConfigError(f"Method #{number} [{name}]: {exc}") from exc
        specs.append(function.__macro_spec__)
    return specs


def load_macro_file(client_cls: type, path: Union[str, Path]) -> List[MethodSpec]:
    """Register every method declared in the YAML file at ``path``."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read macro file [{path}]: {exc}") from exc
    try:
        return load_macros(client_cls, data)
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
