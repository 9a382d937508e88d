"""Declarative macro specifications.

Each ``*MethodSpec`` model describes one generated method. The models are
frozen and forbid unknown keys, so a typo in a registration call fails at
import time rather than halfway through a test run.
"""

import keyword
import re
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)

from mech_boilerplate.errors import ConfigError

# A location assertion is either an exact path+query or a compiled pattern
Location = Union[str, re.Pattern]

# Literal selector/button value, or a callable receiving (client, *args, **kwargs)
Resolvable = Union[str, int, Callable[..., Any]]

FORM_RESOLVERS: Tuple[str, ...] = ("form_name", "form_id", "form_number")


def _describe_validation_error(exc: ValidationError) -> str:
    """Turn a pydantic error into a single human-readable sentence."""
    errors = exc.errors()
    for error_type, template in (
        ("missing", "You must provide a [{}]"),
        ("extra_forbidden", "Unknown option [{}]"),
    ):
        for err in errors:
            if err["type"] == error_type:
                return template.format(err["loc"][0])

    err = errors[0]
    if err["type"] == "value_error" and err.get("ctx", {}).get("error"):
        return str(err["ctx"]["error"])
    if err["loc"]:
        return f"Invalid value for [{err['loc'][0]}]: {err['msg']}"
    return err["msg"]


class MethodSpec(BaseModel):
    """Fields shared by every kind of generated method."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, arbitrary_types_allowed=True
    )

    kind: ClassVar[str] = "base"

    method_name: str
    assert_location: Optional[Location] = None

    @field_validator("method_name")
    @classmethod
    def _check_method_name(cls, value: str) -> str:
        if not value.isidentifier() or keyword.iskeyword(value):
            raise ValueError(f"Method name [{value}] is not a valid identifier")
        return value

    @classmethod
    def from_options(cls, **options: Any) -> "MethodSpec":
        """Validate keyword options, raising ConfigError on any problem.

        Known fields explicitly set to ``None`` are treated as not provided.
        """
        data = {
            key: value
            for key, value in options.items()
            if not (key in cls.model_fields and value is None)
        }
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigError(_describe_validation_error(exc)) from exc

    @property
    def description(self) -> str:
        return self.method_name

    def summary(self) -> str:
        return f"Generated {self.kind} method."


class FetchMethodSpec(MethodSpec):
    """Retrieve a page, optionally completing its URL with a trailing atom."""

    kind: ClassVar[str] = "fetch"

    page_description: str
    page_url: str
    required_param: Optional[str] = None

    @property
    def description(self) -> str:
        return self.page_description

    def summary(self) -> str:
        text = f"Retrieve the {self.page_description} ({self.page_url})."
        if self.required_param:
            text += f"\n\nRequires one argument: {self.required_param}."
        return text


class FormMethodSpec(MethodSpec):
    """Locate a form on the current page, fill it in and submit it."""

    kind: ClassVar[str] = "form"

    form_description: str
    assert_location: Location
    form_name: Optional[Resolvable] = None
    form_id: Optional[Resolvable] = None
    form_number: Optional[Resolvable] = None
    form_button: Optional[Resolvable] = None
    transform_fields: Optional[Callable[..., Any]] = None

    @property
    def description(self) -> str:
        return self.form_description

    @property
    def resolver(self) -> Optional[Tuple[str, Resolvable]]:
        """The winning (resolver, value) pair, by fixed priority."""
        for name in FORM_RESOLVERS:
            value = getattr(self, name)
            if value is not None:
                return name, value
        return None

    def summary(self) -> str:
        return f"Find and submit the {self.form_description} form."


class LinkMethodSpec(MethodSpec):
    """Find a link on the current page and follow it."""

    kind: ClassVar[str] = "link"

    link_description: str
    find_link: Optional[Dict[str, Any]] = None
    transform_fields: Optional[Callable[..., Any]] = None

    @model_validator(mode="after")
    def _one_selector(self) -> "LinkMethodSpec":
        if self.find_link is None and self.transform_fields is None:
            raise ValueError("Either find_link or transform_fields must be set")
        if self.find_link is not None and self.transform_fields is not None:
            raise ValueError("Only one of find_link or transform_fields may be set")
        return self

    @property
    def description(self) -> str:
        return self.link_description

    def summary(self) -> str:
        return f"Follow the {self.link_description} link."


class CustomMethodSpec(MethodSpec):
    """Hand off to an arbitrary handler."""

    kind: ClassVar[str] = "custom"

    handler: Callable[..., Any]

    @property
    def description(self) -> str:
        doc = (getattr(self.handler, "__doc__", None) or "").strip()
        return doc.splitlines()[0] if doc else self.method_name

    def summary(self) -> str:
        return f"Run the custom handler {getattr(self.handler, '__name__', 'handler')}."


SPEC_TYPES: Dict[str, type] = {
    spec.kind: spec
    for spec in (FetchMethodSpec, FormMethodSpec, LinkMethodSpec, CustomMethodSpec)
}
