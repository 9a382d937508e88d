"""The client class generated methods are attached to.

Subclass :class:`BoilerplateClient` to hold your methods::

    class DeloreanClient(BoilerplateClient):
        pass

    DeloreanClient.create_fetch_method(
        method_name="delorean__configuration",
        page_description="configuration page for the Delorean",
        page_url="/delorean/configuration",
    )

    DeloreanClient.create_form_method(
        method_name="delorean__configuration__flux_capacitor",
        form_name="form-flux-capacitor",
        form_description="recalibration form",
        assert_location=re.compile(r"^/delorean/configuration"),
        transform_fields=lambda client, units, value: {
            "value": value,
            "units": units,
            "understand_risks": "confirmed",
        },
    )

and then, in a test::

    client = DeloreanClient()
    client.delorean__configuration().delorean__configuration__flux_capacitor(
        "jigawatts", 10_000
    )

The public hooks (``show_method_name``, ``indent_note``, ``note_status``,
``assert_location`` and ``assert_location_failed``) are what generated methods
call; override them in a subclass to change diagnostics or page checks for an
application, e.g. to look for error banners when a location check fails.
"""

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from mech_boilerplate.browser import Browser, PlaywrightBrowser
from mech_boilerplate.config import BoilerplateSettings, get_settings
from mech_boilerplate.diagnostics import (
    TraceSink,
    format_method_call,
    format_status,
    make_trace_sink,
)
from mech_boilerplate.errors import LocationMismatchError, PreconditionError
from mech_boilerplate.factory import create_method, registered_methods
from mech_boilerplate.macros import load_macro_file
from mech_boilerplate.specs import Location, MethodSpec

logger = logging.getLogger(__name__)


class LocationMismatchHandler(Protocol):
    """Strategy invoked when a location assertion does not match.

    Raise to abort the generated method; return to let it carry on.
    """

    def __call__(self, client: "BoilerplateClient", assertion: Location, location: str) -> Any: ...


class BoilerplateClient:
    """Holds the browser and the hooks every generated method relies on."""

    def __init__(
        self,
        browser: Optional[Browser] = None,
        *,
        trace_sink: Optional[TraceSink] = None,
        location_mismatch_handler: Optional[LocationMismatchHandler] = None,
        settings: Optional[BoilerplateSettings] = None,
    ):
        self._settings = settings
        self._browser = browser
        self._owns_browser = False
        self.trace_sink = (
            trace_sink if trace_sink is not None else make_trace_sink(self.settings.trace)
        )
        self.location_mismatch_handler = location_mismatch_handler

    @property
    def settings(self) -> BoilerplateSettings:
        return self._settings or get_settings()

    @property
    def browser(self) -> Browser:
        """The browser delegate; a Playwright browser is created on first use."""
        if self._browser is None:
            logger.info("No browser supplied, creating the default Playwright browser")
            self._browser = PlaywrightBrowser.from_settings(self.settings.browser)
            self._owns_browser = True
        return self._browser

    @browser.setter
    def browser(self, browser: Browser) -> None:
        self.close()
        self._browser = browser
        self._owns_browser = False

    def close(self) -> None:
        """Shut down the browser if this client created it."""
        if self._owns_browser and self._browser is not None:
            self._browser.close()
            self._browser = None
        self._owns_browser = False

    def __enter__(self) -> "BoilerplateClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Method creation
    # ------------------------------------------------------------------ #

    @classmethod
    def create_fetch_method(cls, **options: Any) -> Callable[..., Any]:
        """Create a method that retrieves a URL.

        Required: ``method_name``, ``page_description``, ``page_url``.
        Optional: ``assert_location``, and ``required_param``, the label of a
        trailing atom the caller must supply and which is appended verbatim to
        ``page_url``.
        """
        return create_method(cls, "fetch", **options)

    @classmethod
    def create_form_method(cls, **options: Any) -> Callable[..., Any]:
        """Create a method that finds a form on the current page and submits it.

        Required: ``method_name``, ``form_description``, ``assert_location``.
        Optional: ``form_name``, ``form_id``, ``form_number`` (tried in that
        order, the first one set wins; one of them must be set by call time),
        ``form_button`` and ``transform_fields``. Resolvers and the button
        may be callables; they, like ``transform_fields``, receive the client
        followed by the method's arguments.
        """
        return create_method(cls, "form", **options)

    @classmethod
    def create_link_method(cls, **options: Any) -> Callable[..., Any]:
        """Create a method that finds a link on the current page and follows it.

        Required: ``method_name``, ``link_description``. Exactly one of
        ``find_link`` (criteria for the browser's ``find_link``) and
        ``transform_fields`` (a callable producing those criteria) must be set.
        Optional: ``assert_location``.
        """
        return create_method(cls, "link", **options)

    @classmethod
    def create_custom_method(cls, **options: Any) -> Callable[..., Any]:
        """Create a method that hands off to ``handler(client, *args, **kwargs)``.

        You almost certainly do not need this; see whether a form or link
        method will do first.
        """
        return create_method(cls, "custom", **options)

    @classmethod
    def macros(cls) -> Dict[str, MethodSpec]:
        return registered_methods(cls)

    @classmethod
    def load_macros(cls, path: Union[str, Path]) -> List[MethodSpec]:
        """Register every method declared in a YAML macro file."""
        return load_macro_file(cls, path)

    @classmethod
    def from_settings(
        cls, settings: Optional[BoilerplateSettings] = None, **kwargs: Any
    ) -> "BoilerplateClient":
        """Build a client, registering the configured macro files first.

        Macro files are registered on a dedicated subclass so ``cls`` itself is
        left untouched.
        """
        settings = settings or get_settings()
        client_cls = cls
        if settings.macro_files:
            client_cls = type(cls.__name__, (cls,), {"__module__": cls.__module__})
            for path in settings.macro_files:
                load_macro_file(client_cls, path)
        return client_cls(settings=settings, **kwargs)

    # ------------------------------------------------------------------ #
    # Hooks used by generated methods
    # ------------------------------------------------------------------ #

    def show_method_name(self, method_name: str, /, *args: Any, **kwargs: Any) -> None:
        """Announce a generated method call and its arguments."""
        self.indent_note(format_method_call(method_name, args, kwargs))

    def indent_note(self, message: str, indent: int = 0) -> None:
        """Send a diagnostic line to the trace sink."""
        self.trace_sink.emit(message, indent)

    def note_status(self) -> bool:
        """Report whether the last request succeeded.

        This base class only knows what the browser says; subclasses are a
        good place to look for application error messages and fail early.
        """
        success = bool(self.browser.success())
        self.indent_note(format_status(success), 1)
        return success

    def assert_location(self, assertion: Location) -> Any:
        """Check the current path+query against a string or compiled pattern.

        Patterns match with ``search``; strings must be equal. Mismatches go to
        :meth:`assert_location_failed`.
        """
        location = self.browser.current_location()
        if not location:
            raise PreconditionError(
                "Can't find a URL, which means your location assertion fails by default"
            )
        if assertion is None or assertion == "":
            raise PreconditionError("No acceptable location provided")

        if isinstance(assertion, re.Pattern):
            matched = assertion.search(location) is not None
        else:
            matched = location == assertion

        if matched:
            self.indent_note(f"URL [{location}] matched assertion", 1)
            return True
        return self.assert_location_failed(assertion, location)

    def assert_location_failed(self, assertion: Location, location: str) -> Any:
        """Handle a failed location assertion; the default raises."""
        if self.location_mismatch_handler is not None:
            return self.location_mismatch_handler(self, assertion, location)
        raise LocationMismatchError(assertion, location)
