"""Shared fixtures: a recording fake browser and fresh client classes."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest

from mech_boilerplate.client import BoilerplateClient
from mech_boilerplate.config import BoilerplateSettings, reset_settings, set_settings
from mech_boilerplate.diagnostics import RecordingTraceSink

pytest_plugins = ["pytester"]


@dataclass
class FakeLink:
    url: str


class FakeBrowser:
    """Browser double that records every call made to it."""

    def __init__(
        self,
        location: Optional[str] = "/",
        success: bool = True,
        forms: Optional[Dict[Tuple[str, Any], Any]] = None,
        links: Optional[List[Tuple[Dict[str, Any], str]]] = None,
        pages: Optional[Dict[str, str]] = None,
    ):
        self.location = location
        self.success_value = success
        self.forms = forms or {}
        self.links = links or []
        # url requested -> location afterwards
        self.pages = pages or {}
        self.calls: List[Tuple[Any, ...]] = []

    def get(self, url):
        self.calls.append(("get", url))
        self.location = self.pages.get(url, self.location)

    def success(self):
        self.calls.append(("success",))
        return self.success_value

    def current_location(self):
        self.calls.append(("current_location",))
        return self.location

    def _form(self, kind, value):
        self.calls.append((kind, value))
        return self.forms.get((kind, value))

    def form_name(self, name):
        return self._form("form_name", name)

    def form_id(self, form_id):
        return self._form("form_id", form_id)

    def form_number(self, number):
        return self._form("form_number", number)

    def set_fields(self, fields):
        self.calls.append(("set_fields", dict(fields)))

    def submit_form(self, fields=None, button=None):
        self.calls.append(("submit_form", dict(fields or {}), button))

    def find_link(self, **criteria):
        self.calls.append(("find_link", criteria))
        for expected, url in self.links:
            if expected == criteria:
                return FakeLink(url)
        return None

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def isolated_settings():
    """Keep tests independent of any config file near the working directory."""
    set_settings(BoilerplateSettings())
    yield
    reset_settings()


@pytest.fixture
def client_cls():
    """A fresh client subclass per test, so registrations never leak."""

    class TestClient(BoilerplateClient):
        pass

    return TestClient


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def trace() -> RecordingTraceSink:
    return RecordingTraceSink()


@pytest.fixture
def make_client(client_cls, browser, trace):
    def _make(**kwargs):
        return client_cls(browser=browser, trace_sink=trace, **kwargs)

    return _make
