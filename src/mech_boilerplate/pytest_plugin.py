"""Pytest plugin for mech-boilerplate.

Provides a ``boilerplate_client`` fixture so tests can drive generated methods
without building a client by hand. Trace lines go through the configured sink;
with the default logging sink pytest shows them next to any failure.
"""

from typing import Generator

import pytest

from mech_boilerplate.client import BoilerplateClient
from mech_boilerplate.config import BoilerplateSettings, get_settings


@pytest.fixture
def boilerplate_settings() -> BoilerplateSettings:
    """Current mech-boilerplate settings."""
    return get_settings()


@pytest.fixture
def boilerplate_client(
    request, boilerplate_settings: BoilerplateSettings
) -> Generator[BoilerplateClient, None, None]:
    """Pytest fixture that provides a client for generated methods.

    Usage:
        @pytest.mark.boilerplate_client(DeloreanClient)
        def test_recalibration(boilerplate_client):
            boilerplate_client.delorean__configuration()

    Marker keyword arguments are passed to the client constructor.
    """
    marker = request.node.get_closest_marker("boilerplate_client")
    client_cls = marker.args[0] if marker and marker.args else BoilerplateClient
    kwargs = dict(marker.kwargs) if marker else {}

    client = client_cls.from_settings(boilerplate_settings, **kwargs)
    yield client
    client.close()


def pytest_configure(config):
    """Register the plugin's markers."""
    config.addinivalue_line(
        "markers",
        "boilerplate_client(cls, **kwargs): client class (and constructor options) "
        "for the boilerplate_client fixture",
    )
