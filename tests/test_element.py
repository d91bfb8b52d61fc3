"""Tests for element references: wire encoding and session ownership."""

import json

import pytest

from conftest import SESSION_ID, ok
from remotewd import WEB_ELEMENT_IDENTIFIER, By, ForeignElementError, WebElement
from remotewd.element import encode_body

S = f"/session/{SESSION_ID}"


@pytest.fixture
def element(server, w3c_wd) -> WebElement:
    server.on("POST", S + "/element", ok({WEB_ELEMENT_IDENTIFIER: "e1"}))
    elem = w3c_wd.find_element(By.CSS_SELECTOR, "a")
    server.reset()
    return elem


class TestEncoding:
    def test_both_keys_are_written(self, element) -> None:
        assert element.to_json() == {"ELEMENT": "e1", WEB_ELEMENT_IDENTIFIER: "e1"}

    def test_nested_elements_are_encoded(self, element) -> None:
        body = json.loads(encode_body({"args": [1, {"el": element}]}, SESSION_ID))
        assert body["args"][1]["el"][WEB_ELEMENT_IDENTIFIER] == "e1"

    def test_other_session_is_refused(self, element) -> None:
        with pytest.raises(ForeignElementError):
            encode_body({"id": element}, "another-session")

    def test_foreign_element_error_is_a_value_error(self) -> None:
        assert issubclass(ForeignElementError, ValueError)


class TestIdentity:
    def test_same_reference_is_equal(self, element, w3c_wd) -> None:
        twin = WebElement(w3c_wd, "e1")
        assert twin == element
        assert len({twin, element}) == 1

    def test_different_reference_is_not_equal(self, element, w3c_wd) -> None:
        assert WebElement(w3c_wd, "e2") != element


class TestSessionOwnership:
    def test_use_after_switch_session_fails(self, server, element, w3c_wd) -> None:
        w3c_wd.switch_session("other")
        with pytest.raises(ForeignElementError):
            element.click()
        assert server.requests == []

    def test_script_argument_after_switch_session_fails(self, server, element, w3c_wd) -> None:
        w3c_wd.switch_session("other")
        with pytest.raises(ForeignElementError):
            w3c_wd.execute_script("return arguments[0]", [element])
        assert server.requests == []

    def test_use_after_quit_fails(self, server, element, w3c_wd) -> None:
        server.on("DELETE", S, ok(None))
        w3c_wd.quit()
        server.reset()
        with pytest.raises(ForeignElementError):
            element.text()
        assert server.requests == []

    def test_interaction_paths(self, server, element) -> None:
        for suffix in ("/click", "/clear", "/submit"):
            server.on("POST", S + "/element/e1" + suffix, ok(None))
        element.click()
        element.clear()
        element.submit()
        assert [path for _, path, _ in server.calls()] == [
            S + "/element/e1/click", S + "/element/e1/clear", S + "/element/e1/submit",
        ]


class TestRoundTrip:
    def test_encoded_element_decodes_to_same_id(self, any_wd) -> None:
        elem = WebElement(any_wd, "node-42")
        raw = json.dumps({"value": elem.to_json()}).encode()
        decoded = any_wd.decode_element(raw)
        assert decoded.id == "node-42"
        assert decoded == elem

    def test_encoded_list_decodes_to_same_ids(self, any_wd) -> None:
        elems = [WebElement(any_wd, "a"), WebElement(any_wd, "b")]
        raw = json.dumps({"value": [e.to_json() for e in elems]}).encode()
        assert any_wd.decode_elements(raw) == elems
