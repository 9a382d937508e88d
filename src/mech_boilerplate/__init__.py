"""mech-boilerplate: compose browser-test macros from declarative specifications.

Describe an HTTP action once (a page to fetch, a form to submit, a link to
follow) and get a chainable method that traces what it does, checks it is on
the right page and reports whether the request succeeded.
"""

from .errors import (
    BoilerplateError,
    ConfigError,
    ArgumentError,
    ElementLookupError,
    PreconditionError,
    LocationMismatchError,
)
from .specs import (
    MethodSpec,
    FetchMethodSpec,
    FormMethodSpec,
    LinkMethodSpec,
    CustomMethodSpec,
)
from .diagnostics import (
    TraceSink,
    LoggingTraceSink,
    ConsoleTraceSink,
    RecordingTraceSink,
    NullTraceSink,
)
from .browser import Browser, Link, PageLink, PlaywrightBrowser
from .client import BoilerplateClient, LocationMismatchHandler
from .config import (
    BoilerplateSettings,
    BrowserSettings,
    TraceSettings,
    load_config,
    get_settings,
    set_settings,
)
from .macros import load_macros, load_macro_file

__all__ = [
    # Client
    "BoilerplateClient",
    "LocationMismatchHandler",
    # Specs
    "MethodSpec",
    "FetchMethodSpec",
    "FormMethodSpec",
    "LinkMethodSpec",
    "CustomMethodSpec",
    # Browser contract
    "Browser",
    "Link",
    "PageLink",
    "PlaywrightBrowser",
    # Diagnostics
    "TraceSink",
    "LoggingTraceSink",
    "ConsoleTraceSink",
    "RecordingTraceSink",
    "NullTraceSink",
    # Configuration
    "BoilerplateSettings",
    "BrowserSettings",
    "TraceSettings",
    "load_config",
    "get_settings",
    "set_settings",
    # Macro files
    "load_macros",
    "load_macro_file",
    # Errors
    "BoilerplateError",
    "ConfigError",
    "ArgumentError",
    "ElementLookupError",
    "PreconditionError",
    "LocationMismatchError",
]
