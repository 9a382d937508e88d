"""Trace line formatting and the sinks that receive trace lines.

Generated methods describe what they are doing as they go:

    ->delorean__configuration()
        Retrieving the configuration page for the Delorean: [/delorean/configuration]
        Retrieved the configuration page for the Delorean : [/delorean/configuration]
        is_success() returned true

Every line is handed to a sink as ``(text, indent)``. Sinks prefix each line
of ``text`` with ``indent + 1`` indent units before writing it out.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from rich.console import Console
from rich.text import Text

from mech_boilerplate.config import TraceSettings

DEFAULT_INDENT_UNIT = "\t"


def dump_arguments(args: Sequence[Any], kwargs: Optional[Dict[str, Any]] = None) -> str:
    """Render call arguments the way they would be typed at a call site."""
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in (kwargs or {}).items())
    return ", ".join(parts)


def format_method_call(
    method_name: str,
    args: Sequence[Any] = (),
    kwargs: Optional[Dict[str, Any]] = None,
) -> str:
    """Format the ``->name( args )`` line that opens every generated call."""
    kwargs = kwargs or {}
    output = f"->{method_name}("
    if any(arg is not None for arg in args) or any(
        value is not None for value in kwargs.values()
    ):
        output += f" {dump_arguments(args, kwargs)} "
    return output + ")"


def format_status(success: bool) -> str:
    return f"is_success() returned {'true' if success else 'false'}"


def indent_text(text: str, indent: int = 0, unit: str = DEFAULT_INDENT_UNIT) -> str:
    """Prefix every line of ``text`` with ``indent + 1`` units."""
    prefix = unit * (max(indent, 0) + 1)
    lines = text.splitlines(keepends=True) or [""]
    return "".join(prefix + line for line in lines)


@runtime_checkable
class TraceSink(Protocol):
    """Anything that accepts trace lines."""

    def emit(self, text: str, indent: int = 0) -> None: ...


class LoggingTraceSink:
    """Write trace lines to a standard logger (captured by pytest)."""

    def __init__(
        self,
        logger_name: str = "mech_boilerplate.trace",
        indent_unit: str = DEFAULT_INDENT_UNIT,
        level: int = logging.INFO,
    ):
        self.logger = logging.getLogger(logger_name)
        self.indent_unit = indent_unit
        self.level = level

    def emit(self, text: str, indent: int = 0) -> None:
        self.logger.log(self.level, indent_text(text, indent, self.indent_unit))


class ConsoleTraceSink:
    """Print trace lines straight to the terminal with rich."""

    def __init__(
        self,
        console: Optional[Console] = None,
        indent_unit: str = DEFAULT_INDENT_UNIT,
        style: str = "dim",
    ):
        self.console = console or Console(stderr=True)
        self.indent_unit = indent_unit
        self.style = style

    def emit(self, text: str, indent: int = 0) -> None:
        self.console.print(
            Text(indent_text(text, indent, self.indent_unit), style=self.style)
        )


class RecordingTraceSink:
    """Keep trace lines in memory for later inspection."""

    def __init__(self, indent_unit: str = DEFAULT_INDENT_UNIT):
        self.indent_unit = indent_unit
        self.lines: List[Tuple[str, int]] = []

    def emit(self, text: str, indent: int = 0) -> None:
        self.lines.append((text, indent))

    @property
    def texts(self) -> List[str]:
        return [text for text, _ in self.lines]

    def render(self) -> str:
        return "\n".join(
            indent_text(text, indent, self.indent_unit) for text, indent in self.lines
        )

    def clear(self) -> None:
        self.lines.clear()


class NullTraceSink:
    def emit(self, text: str, indent: int = 0) -> None:
        pass


def make_trace_sink(settings: Optional[TraceSettings] = None) -> TraceSink:
    """Build the sink selected by the trace settings."""
    settings = settings or TraceSettings()
    if not settings.enabled or settings.sink == "none":
        return NullTraceSink()
    if settings.sink == "console":
        return ConsoleTraceSink(indent_unit=settings.indent_unit)
    return LoggingTraceSink(
        logger_name=settings.logger_name, indent_unit=settings.indent_unit
    )
