"""Behaviour of generated methods against a recording browser."""

import re

import pytest

from mech_boilerplate.errors import (
    ArgumentError,
    ElementLookupError,
    LocationMismatchError,
)


# ---------------------------------------------------------------- fetch


def test_fetch_scenario_traces_and_calls(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(
        method_name="new_fetch", page_description="some page", page_url="http://foo/bar"
    )
    browser.location = "/foo/bar"
    client = make_client()

    assert client.new_fetch() is client

    assert trace.lines == [
        ("->new_fetch()", 0),
        ("Retrieving the some page: [http://foo/bar]", 1),
        ("Retrieved the some page : [/foo/bar]", 1),
        ("is_success() returned true", 1),
    ]
    assert browser.calls == [
        ("get", "http://foo/bar"),
        ("current_location",),
        ("success",),
    ]


def test_fetch_appends_atom_verbatim(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(
        method_name="car",
        page_description="car page",
        page_url="/delorean/configuration?car_id=",
        required_param="Car ID",
    )
    client = make_client()

    client.car(1234)

    assert browser.calls[0] == ("get", "/delorean/configuration?car_id=1234")
    assert trace.texts[0] == "->car( 1234 )"
    assert trace.texts[1] == "Retrieving the car page: [/delorean/configuration?car_id=1234]"


def test_fetch_missing_required_param(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(
        method_name="car",
        page_description="car page",
        page_url="/car/",
        required_param="Car ID",
    )
    client = make_client()

    with pytest.raises(ArgumentError, match="You must provide a Car ID"):
        client.car()
    assert browser.calls == []
    assert trace.texts == ["->car()"]


def test_fetch_reports_failure_status(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(method_name="home", page_description="home", page_url="/")
    browser.success_value = False
    make_client().home()
    assert trace.texts[-1] == "is_success() returned false"


def test_fetch_asserts_location_before_navigating(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(
        method_name="refresh",
        page_description="dashboard",
        page_url="/dashboard",
        assert_location="/dashboard",
    )
    browser.location = "/login"
    client = make_client()

    with pytest.raises(LocationMismatchError):
        client.refresh()
    assert "get" not in browser.names()
    assert "success" not in browser.names()


def test_methods_chain(client_cls, browser, trace, make_client):
    client_cls.create_fetch_method(
        method_name="delorean__configuration",
        page_description="configuration page for the Delorean",
        page_url="/delorean/configuration",
    )
    client_cls.create_link_method(
        method_name="delorean__stats",
        link_description="Current Stats",
        find_link={"text": "View Current Stats"},
        assert_location="/delorean/configuration",
    )
    browser.pages = {
        "/delorean/configuration": "/delorean/configuration",
        "/delorean/stats": "/delorean/stats",
    }
    browser.links = [({"text": "View Current Stats"}, "/delorean/stats")]
    client = make_client()

    result = client.delorean__configuration().delorean__stats()

    assert result is client
    assert browser.location == "/delorean/stats"


# ---------------------------------------------------------------- form


def _flux_fields(client, units, value):
    return {"value": value, "units": units, "understand_risks": "confirmed"}


def test_form_submits_transformed_fields(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="flux_capacitor",
        form_name="form-flux-capacitor",
        form_description="recalibration",
        assert_location=re.compile(r"^/delorean/configuration"),
        transform_fields=_flux_fields,
    )
    browser.location = "/delorean/configuration?car=1"
    browser.forms = {("form_name", "form-flux-capacitor"): object()}
    client = make_client()

    assert client.flux_capacitor("jigawatts", 10_000) is client

    fields = {"value": 10_000, "units": "jigawatts", "understand_risks": "confirmed"}
    assert browser.calls == [
        ("current_location",),
        ("form_name", "form-flux-capacitor"),
        ("set_fields", fields),
        ("submit_form", fields, None),
        ("success",),
    ]
    assert trace.lines == [
        ("->flux_capacitor( 'jigawatts', 10000 )", 0),
        ("URL [/delorean/configuration?car=1] matched assertion", 1),
        ("Searching for the recalibration form", 1),
        ("Submitting recalibration form", 1),
        ("is_success() returned true", 1),
    ]


def test_form_resolver_priority(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login",
        form_description="login",
        assert_location="/",
        form_number=3,
        form_id="login-id",
        form_name="login-name",
    )
    browser.forms = {
        ("form_name", "login-name"): object(),
        ("form_id", "login-id"): object(),
        ("form_number", 3): object(),
    }
    make_client().login()

    lookups = [call for call in browser.calls if call[0].startswith("form_")]
    assert lookups == [("form_name", "login-name")]


def test_form_id_used_when_name_missing(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login",
        form_description="login",
        assert_location="/",
        form_number=3,
        form_id="login-id",
    )
    browser.forms = {("form_id", "login-id"): object()}
    make_client().login()
    assert ("form_id", "login-id") in browser.calls
    assert ("form_number", 3) not in browser.calls


def test_form_callable_resolver_and_button(client_cls, browser, trace, make_client):
    seen = []

    def pick_form(client, shipment_id, express=False):
        seen.append((client, shipment_id, express))
        return f"shipment-{shipment_id}"

    def pick_button(client, shipment_id, express=False):
        return "express" if express else "standard"

    client_cls.create_form_method(
        method_name="ship",
        form_description="shipping",
        assert_location="/",
        form_name=pick_form,
        form_button=pick_button,
    )
    browser.forms = {("form_name", "shipment-42"): object()}
    client = make_client()

    client.ship(42, express=True)

    assert seen == [(client, 42, True)]
    assert ("submit_form", {}, "express") in browser.calls
    assert trace.texts[0] == "->ship( 42, express=True )"


def test_form_literal_button_is_passed_to_submit(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="ship",
        form_description="shipping",
        assert_location="/",
        form_id="shipment",
        form_button="submit-shipment",
        transform_fields=lambda client, carrier: {"carrier": carrier},
    )
    browser.forms = {("form_id", "shipment"): object()}

    make_client().ship("owl")

    assert browser.calls[-2:] == [
        ("submit_form", {"carrier": "owl"}, "submit-shipment"),
        ("success",),
    ]


def test_form_without_resolver_fails_before_form_lookup(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login", form_description="login", assert_location="/"
    )
    with pytest.raises(ArgumentError, match="form_name, form_id or form_number"):
        make_client().login()
    assert browser.names() == ["current_location"]


def test_form_not_found(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login", form_description="login", assert_location="/", form_id="nope"
    )
    with pytest.raises(ElementLookupError, match=r"Couldn't find a form with form_id \[nope\]"):
        make_client().login()
    assert "set_fields" not in browser.names()
    assert "success" not in browser.names()


def test_form_transform_must_return_mapping(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login",
        form_description="login",
        assert_location="/",
        form_name="login",
        transform_fields=lambda client: ["not", "a", "dict"],
    )
    with pytest.raises(ArgumentError, match="expected a mapping"):
        make_client().login()
    assert "submit_form" not in browser.names()


def test_form_location_mismatch_aborts(client_cls, browser, trace, make_client):
    client_cls.create_form_method(
        method_name="login", form_description="login", assert_location="/login", form_name="x"
    )
    browser.location = "/home"
    with pytest.raises(LocationMismatchError, match=r"Current URL \[/home\] did not match assertion \[/login\]"):
        make_client().login()
    assert browser.names() == ["current_location"]


# ---------------------------------------------------------------- link


def test_link_follows_found_url(client_cls, browser, trace, make_client):
    client_cls.create_link_method(
        method_name="stats",
        link_description="Current Stats",
        find_link={"text": "View Current Stats"},
    )
    browser.links = [({"text": "View Current Stats"}, "/delorean/stats")]
    make_client().stats()

    assert browser.calls == [
        ("find_link", {"text": "View Current Stats"}),
        ("get", "/delorean/stats"),
        ("success",),
    ]
    assert trace.lines == [
        ("->stats()", 0),
        ("Searching for the Current Stats link", 0),
        ("Following Current Stats link: /delorean/stats", 0),
        ("is_success() returned true", 1),
    ]


def test_link_criteria_from_transform(client_cls, browser, trace, make_client):
    client_cls.create_link_method(
        method_name="shipment",
        link_description="shipment",
        transform_fields=lambda client, shipment_id: {"url_regex": f"shipment/{shipment_id}$"},
    )
    browser.links = [({"url_regex": "shipment/7$"}, "/orders/shipment/7")]
    make_client().shipment(7)
    assert ("get", "/orders/shipment/7") in browser.calls


def test_link_not_found_dumps_criteria(client_cls, browser, trace, make_client):
    client_cls.create_link_method(
        method_name="stats", link_description="stats", find_link={"text": "Missing"}
    )
    with pytest.raises(ElementLookupError, match=r"your description: \{'text': 'Missing'\}"):
        make_client().stats()
    assert "get" not in browser.names()


# ---------------------------------------------------------------- custom


def test_custom_handler_receives_arguments_and_result_is_ignored(
    client_cls, browser, trace, make_client
):
    received = []

    def jingle(client, note_text, **kwargs):
        received.append((client, note_text, kwargs))
        return {"note_text": note_text}

    client_cls.create_custom_method(method_name="jingle", handler=jingle)
    client = make_client()

    assert client.jingle("hello", loud=True) is client
    assert received == [(client, "hello", {"loud": True})]
    assert browser.calls == [("success",)]
    assert trace.texts == ["->jingle( 'hello', loud=True )", "is_success() returned true"]


def test_custom_handler_errors_propagate(client_cls, browser, trace, make_client):
    def broken(client):
        raise RuntimeError("boom")

    client_cls.create_custom_method(method_name="broken", handler=broken)
    with pytest.raises(RuntimeError, match="boom"):
        make_client().broken()
    assert "success" not in browser.names()
