"""Command line tools for mech-boilerplate."""

from mech_boilerplate.cli.main import app

__all__ = ["app"]
