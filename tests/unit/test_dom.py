"""Unit tests for the in-memory document model."""

from __future__ import annotations

import pytest

from provision_trigger.page.dom import (
    ClickEvent,
    Document,
    Element,
    Navigation,
    Selector,
    SelectorError,
)


def _page() -> Document:
    trigger = Element(
        "button",
        {
            "id": "go",
            "data-type": "os-provision",
            "data-url": "ubuntu-small",
            "data-cloud-name": "openstack",
        },
    )
    field = Element("input", {"name": "template", "value": "initial"})
    form = Element("form", {"id": "f"}, [field])
    body = Element("body", {}, [Element("div", {"id": "notification-bar"}), form, trigger])
    return Document(Element("#document", {}, [Element("html", {}, [body])]))


class TestSelector:
    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("[data-type='os-provision']", Selector(attr="data-type", value="os-provision")),
            ('[data-type="os-provision"]', Selector(attr="data-type", value="os-provision")),
            ("[data-url]", Selector(attr="data-url")),
            ("#go", Selector(element_id="go")),
            ("INPUT", Selector(tag="input")),
            ("input[name='template']", Selector(tag="input", attr="name", value="template")),
        ],
    )
    def test_parse(self, selector: str, expected: Selector):
        assert Selector.parse(selector) == expected

    @pytest.mark.parametrize("selector", ["", "div > span", "a, b", ".cls"])
    def test_unsupported_raises(self, selector: str):
        with pytest.raises(SelectorError):
            Selector.parse(selector)


class TestElement:
    def test_dataset_camel_cases_keys(self):
        trigger = _page().get_element_by_id("go")
        assert trigger.dataset == {
            "type": "os-provision",
            "url": "ubuntu-small",
            "cloudName": "openstack",
        }

    def test_value_defaults_to_attribute_then_tracks_assignment(self):
        field = _page().query_selector("[name='template']")
        assert field.value == "initial"
        field.value = "centos"
        assert field.value == "centos"
        assert field.attrs["value"] == "initial"

    def test_textarea_value_is_text(self):
        area = Element("textarea", {"name": "notes"}, text="hello")
        assert area.value == "hello"

    def test_query_selector_excludes_self(self):
        form = _page().get_element_by_id("f")
        assert form.query_selector("form") is None
        assert form.query_selector("[name='template']") is not None

    def test_append_sets_parent(self):
        form = Element("form")
        child = form.append(Element("input"))
        assert child.parent is form
        assert form.children == [child]

    def test_click_calls_listeners_in_order(self):
        el = Element("button")
        seen: list[str] = []
        el.add_event_listener("click", lambda e: seen.append("first"))
        el.add_event_listener("click", lambda e: seen.append("second"))
        event = el.click()
        assert seen == ["first", "second"]
        assert isinstance(event, ClickEvent)
        assert event.target is el

    def test_click_without_listeners_is_noop(self):
        assert Element("button").click().default_prevented is False

    def test_elements_compare_by_identity(self):
        assert Element("div") != Element("div")


class TestDocument:
    def test_get_element_by_id(self):
        doc = _page()
        assert doc.get_element_by_id("notification-bar").tag == "div"
        assert doc.get_element_by_id("missing") is None

    def test_query_selector_all_document_order(self):
        doc = _page()
        tags = [el.tag for el in doc.query_selector_all("[id]")]
        assert tags == ["div", "form", "button"]

    def test_body_and_missing_head(self):
        doc = _page()
        assert doc.body is not None
        assert doc.head is None

    def test_navigate_marks_document(self):
        doc = _page()
        assert doc.navigated is False
        doc.navigate(Navigation(url="http://x/next", status_code=200))
        assert doc.navigated is True
        assert doc.navigation.url == "http://x/next"
