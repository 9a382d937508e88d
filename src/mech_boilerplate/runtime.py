"""Bodies of generated methods.

Each ``build_*_method`` turns a spec into a plain function that becomes a
method of the client class. All of them follow the same skeleton: show the
call, check the location, perform one browser action, trace what happened,
report the status and return the client so calls can be chained.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Tuple

from mech_boilerplate.errors import ArgumentError, ElementLookupError
from mech_boilerplate.specs import (
    CustomMethodSpec,
    FetchMethodSpec,
    FormMethodSpec,
    LinkMethodSpec,
    MethodSpec,
)


def resolve_value(value: Any, client: Any, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
    """Return ``value``, calling it with the client and user arguments if callable."""
    if callable(value):
        return value(client, *args, **kwargs)
    return value


def _transform(
    transform: Callable[..., Any],
    client: Any,
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
    method_name: str,
) -> Dict[str, Any]:
    result = transform(client, *args, **kwargs)
    if not isinstance(result, Mapping):
        raise ArgumentError(
            f"transform_fields for [{method_name}] returned "
            f"{type(result).__name__}, expected a mapping"
        )
    return dict(result)


def _check_location(client: Any, spec: MethodSpec) -> None:
    if spec.assert_location is not None:
        client.assert_location(spec.assert_location)


def _finish(function: Callable[..., Any], spec: MethodSpec) -> Callable[..., Any]:
    function.__name__ = spec.method_name
    function.__qualname__ = spec.method_name
    function.__doc__ = spec.summary()
    function.__macro_spec__ = spec
    return function


def build_fetch_method(spec: FetchMethodSpec) -> Callable[..., Any]:
    def fetch(self, atom: Any = None):
        if atom is None:
            self.show_method_name(spec.method_name)
        else:
            self.show_method_name(spec.method_name, atom)

        if spec.required_param and atom is None:
            raise ArgumentError(f"You must provide a {spec.required_param}")

        _check_location(self, spec)

        target_url = spec.page_url
        if atom is not None:
            target_url += str(atom)

        self.indent_note(f"Retrieving the {spec.page_description}: [{target_url}]", 1)
        self.browser.get(target_url)

        location = self.browser.current_location() or ""
        self.indent_note(f"Retrieved the {spec.page_description} : [{location}]", 1)
        self.note_status()
        return self

    return _finish(fetch, spec)


def build_form_method(spec: FormMethodSpec) -> Callable[..., Any]:
    def submit(self, *args: Any, **kwargs: Any):
        self.show_method_name(spec.method_name, *args, **kwargs)
        _check_location(self, spec)

        fields: Dict[str, Any] = {}
        if spec.transform_fields is not None:
            fields = _transform(spec.transform_fields, self, args, kwargs, spec.method_name)

        self.indent_note(f"Searching for the {spec.form_description} form", 1)

        resolver = spec.resolver
        if resolver is None:
            raise ArgumentError("You must define one of form_name, form_id or form_number.")
        resolver_name, resolver_value = resolver
        selector = resolve_value(resolver_value, self, args, kwargs)
        form = getattr(self.browser, resolver_name)(selector)
        if not form:
            raise ElementLookupError(f"Couldn't find a form with {resolver_name} [{selector}]")

        self.browser.set_fields(fields)

        button = resolve_value(spec.form_button, self, args, kwargs)

        self.indent_note(f"Submitting {spec.form_description} form", 1)
        if button:
            self.browser.submit_form(fields=fields, button=button)
        else:
            self.browser.submit_form(fields=fields)

        self.note_status()
        return self

    return _finish(submit, spec)


def build_link_method(spec: LinkMethodSpec) -> Callable[..., Any]:
    def follow(self, *args: Any, **kwargs: Any):
        self.show_method_name(spec.method_name, *args, **kwargs)
        _check_location(self, spec)

        self.indent_note(f"Searching for the {spec.link_description} link")
        if spec.find_link is not None:
            criteria = dict(spec.find_link)
        else:
            criteria = _transform(spec.transform_fields, self, args, kwargs, spec.method_name)

        link = self.browser.find_link(**criteria)
        if link is None:
            raise ElementLookupError(
                f"Couldn't find a link matching your description: {criteria!r}"
            )
        url = link.url

        self.indent_note(f"Following {spec.link_description} link: {url}")
        self.browser.get(url)
        self.note_status()
        return self

    return _finish(follow, spec)


def build_custom_method(spec: CustomMethodSpec) -> Callable[..., Any]:
    def custom(self, *args: Any, **kwargs: Any):
        self.show_method_name(spec.method_name, *args, **kwargs)
        _check_location(self, spec)

        spec.handler(self, *args, **kwargs)

        self.note_status()
        return self

    return _finish(custom, spec)


BUILDERS: Dict[str, Callable[[Any], Callable[..., Any]]] = {
    "fetch": build_fetch_method,
    "form": build_form_method,
    "link": build_link_method,
    "custom": build_custom_method,
}
