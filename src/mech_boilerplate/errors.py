"""Exception types raised by macro registration and execution."""


class BoilerplateError(Exception):
    """Base class for all mech-boilerplate errors."""


class ConfigError(BoilerplateError, ValueError):
    """A macro specification, macro file or settings file is invalid."""


class ArgumentError(BoilerplateError, TypeError):
    """A generated method was called with unusable arguments."""


class ElementLookupError(BoilerplateError, LookupError):
    """The browser could not find the requested form or link."""


class PreconditionError(BoilerplateError, RuntimeError):
    """A location assertion could not be evaluated at all."""


class LocationMismatchError(BoilerplateError, AssertionError):
    """The current page location did not match the expected location."""

    def __init__(self, assertion, location: str):
        self.assertion = assertion
        self.location = location
        pattern = getattr(assertion, "pattern", assertion)
        super().__init__(
            f"Current URL [{location}] did not match assertion [{pattern}]"
        )
