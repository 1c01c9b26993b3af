"""Tests for the playground sandbox: constructors, capture, helpers, refusals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from swiftdsl.core.elements import Element
from swiftdsl.core.errors import LimitExceededError, SecurityError
from swiftdsl.core.playground.interpreter import execute
from swiftdsl.core.playground.parser import parse_source
from swiftdsl.core.playground.sandbox import Sandbox
from swiftdsl.core.whitelist import ELEMENT_METHODS, FORBIDDEN_OPERATIONS


@dataclass
class FakeContext:
    trusted: Any = True

    def t(self, key: str, default: str | None = None) -> str | None:
        return {"greeting": "Hello"}.get(key, default)

    def render(self, elements: list[Element]) -> str:
        return ""


def build(source: str, **kwargs: Any) -> Sandbox:
    sandbox = Sandbox(**kwargs)
    execute(sandbox, parse_source(source))
    return sandbox


def only(source: str, **kwargs: Any) -> Element:
    [element] = build(source, **kwargs).root_elements
    return element


# ============================================================================
# Refusals
# ============================================================================


class TestForbiddenOperations:
    @pytest.mark.parametrize("name", sorted(FORBIDDEN_OPERATIONS))
    def test_direct_call_raises(self, name: str) -> None:
        with pytest.raises(SecurityError, match="is not allowed in the playground"):
            getattr(Sandbox(), name)("x")

    @pytest.mark.parametrize("name", sorted(FORBIDDEN_OPERATIONS))
    def test_not_resolvable(self, name: str) -> None:
        with pytest.raises(SecurityError):
            Sandbox().resolve_dsl_method(name)

    def test_dsl_methods_are_element_constructors(self) -> None:
        assert Sandbox.DSL_METHODS == ELEMENT_METHODS
        assert not Sandbox.DSL_METHODS & FORBIDDEN_OPERATIONS

    def test_internal_methods_not_resolvable(self) -> None:
        sandbox = Sandbox()
        for name in ("create_element", "root_elements", "_capture", "resolve_dsl_method"):
            with pytest.raises(SecurityError):
                sandbox.resolve_dsl_method(name)

    def test_every_constructor_resolves(self) -> None:
        sandbox = Sandbox()
        for name in ELEMENT_METHODS:
            assert callable(sandbox.resolve_dsl_method(name))


class TestHelperDelegation:
    def test_trusted_context_provides_helper(self) -> None:
        element = only('text(t("greeting"))', render_context=FakeContext())
        assert element.content == "Hello"

    def test_no_context_rejects_helper(self) -> None:
        with pytest.raises(SecurityError, match="Helper 't' is not available"):
            build('text(t("greeting"))')

    def test_untrusted_context_rejects_helper(self) -> None:
        with pytest.raises(SecurityError):
            build('text(t("greeting"))', render_context=FakeContext(trusted=False))

    def test_trusted_must_be_exactly_true(self) -> None:
        with pytest.raises(SecurityError):
            build('text(t("greeting"))', render_context=FakeContext(trusted="yes"))

    def test_missing_helper_rejected(self) -> None:
        with pytest.raises(SecurityError, match="not provided by the render context"):
            build('text(pluralize(2, "item"))', render_context=FakeContext())


# ============================================================================
# Tree building
# ============================================================================


class TestCapture:
    def test_block_children_nest(self) -> None:
        sandbox = build('vstack do\n  text("a")\n  text("b")\nend')
        [stack] = sandbox.root_elements
        assert [c.content for c in stack.children] == ["a", "b"]

    def test_siblings_at_top_level(self) -> None:
        sandbox = build('text("a")\ntext("b")')
        assert [e.content for e in sandbox.root_elements] == ["a", "b"]

    def test_deep_nesting(self) -> None:
        element = only('vstack do\n  card do\n    hstack do\n      text("x")\n    end\n  end\nend')
        assert element.children[0].children[0].children[0].content == "x"

    def test_string_block_result_becomes_content(self) -> None:
        element = only('button do\n  "Click me"\nend')
        assert element.content == "Click me"
        assert element.children == []

    def test_string_block_result_ignored_with_children(self) -> None:
        element = only('card do\n  text("a")\n  "trailing"\nend')
        assert element.content is None
        assert len(element.children) == 1

    def test_argument_element_is_adopted(self) -> None:
        sandbox = build('card(text("inner"))')
        [card] = sandbox.root_elements
        assert card.tag == "div"
        assert [c.content for c in card.children] == ["inner"]
        assert card.attributes == {}
        assert "shadow" in card.classes

    @pytest.mark.parametrize(
        "source", ["vstack", "hstack", "zstack", "grid", "scroll_view", "list", "form", "card", "div"]
    )
    def test_every_container_adopts_arguments(self, source: str) -> None:
        sandbox = build(f'{source}(text("a"), text("b"))')
        [parent] = sandbox.root_elements
        assert [c.content for c in parent.children] == ["a", "b"]

    def test_adopted_arguments_precede_block_children(self) -> None:
        element = only('card(text("arg")) do\n  text("block")\nend')
        assert [c.content for c in element.children] == ["arg", "block"]

    def test_adoption_mixed_with_other_arguments(self) -> None:
        element = only('grid(text("a"), 3, responsive: false)')
        assert "grid-cols-3" in element.classes
        assert [c.content for c in element.children] == ["a"]

    def test_nested_adoption(self) -> None:
        element = only('vstack(card(text("x")))')
        [card] = element.children
        assert [c.content for c in card.children] == ["x"]

    def test_adoption_inside_block_stays_in_block_frame(self) -> None:
        element = only('vstack do\n  card(text("x"))\n  text("y")\nend')
        assert [c.tag for c in element.children] == ["div", "span"]
        assert element.children[0].children[0].content == "x"

    def test_wrapper_without_element_leaves_argument_in_place(self) -> None:
        sandbox = build('swift_ui(text("a"))')
        assert [e.content for e in sandbox.root_elements] == ["a"]

    def test_swift_ui_is_transparent(self) -> None:
        sandbox = build('swift_ui do\n  text("a")\n  text("b")\nend')
        assert [e.tag for e in sandbox.root_elements] == ["span", "span"]

    def test_modifiers_apply_to_element(self) -> None:
        element = only('text("Hi").bg("blue-500").padding(4)')
        assert element.classes == ["bg-blue-500", "p-4"]


class TestComponentDepth:
    def test_limit_exceeded(self) -> None:
        source = "vstack do\n  vstack do\n    vstack do\n    end\n  end\nend"
        with pytest.raises(LimitExceededError, match="nested too deeply"):
            build(source, max_component_depth=2)

    def test_within_limit(self) -> None:
        source = "vstack do\n  vstack do\n  end\nend"
        assert len(build(source, max_component_depth=2).root_elements) == 1

    def test_frames_restored_after_error(self) -> None:
        sandbox = Sandbox()
        with pytest.raises(ValueError):
            execute(sandbox, parse_source('vstack do\n  grid(99)\nend'))
        sandbox.create_element("span", "after")
        assert [e.content for e in sandbox.root_elements] == [None, "after"]


# ============================================================================
# Constructors
# ============================================================================


class TestLayout:
    def test_vstack_defaults(self) -> None:
        element = only("vstack do\nend")
        assert element.tag == "div"
        assert element.classes == ["flex", "flex-col", "items-center", "justify-start", "space-y-8"]

    def test_vstack_alignment_and_spacing(self) -> None:
        element = only("vstack(alignment: :leading, spacing: 4) do\nend")
        assert element.classes == ["flex", "flex-col", "items-start", "justify-start", "space-y-4"]

    def test_unknown_alignment_falls_back_to_center(self) -> None:
        element = only('hstack(alignment: "sideways") do\nend')
        assert "items-center" in element.classes

    def test_hstack_distributing_justify_fills(self) -> None:
        element = only("hstack(justify: :between) do\nend")
        assert element.classes == ["flex", "flex-row", "items-center", "justify-between", "w-full"]

    def test_zero_spacing_adds_no_space_class(self) -> None:
        element = only("vstack(spacing: 0) do\nend")
        assert not any(c.startswith("space-") for c in element.classes)

    def test_zstack(self) -> None:
        assert only("zstack do\nend").classes == ["relative"]

    def test_grid_responsive(self) -> None:
        element = only("grid(columns: 3) do\nend")
        assert element.classes == ["grid", "grid-cols-1", "sm:grid-cols-2", "lg:grid-cols-3", "gap-8"]

    def test_grid_fixed_columns(self) -> None:
        element = only("grid(columns: 3, spacing: 2, responsive: false) do\nend")
        assert element.classes == ["grid", "grid-cols-3", "gap-2"]

    @pytest.mark.parametrize("columns", ["0", "13", '"3"', "true"])
    def test_grid_rejects_bad_columns(self, columns: str) -> None:
        with pytest.raises(ValueError, match="grid columns"):
            build(f"grid(columns: {columns})")

    def test_spacer(self) -> None:
        element = only("spacer(10)")
        assert element.classes == ["flex-1"]
        assert element.attributes["style"] == "min-height: 10px"

    def test_divider(self) -> None:
        element = only("divider")
        assert element.tag == "hr"
        assert element.is_void

    def test_scroll_view(self) -> None:
        assert only("scroll_view do\nend").classes == ["overflow-auto"]


class TestContent:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [('text("Hi")', "Hi"), ("text(42)", "42"), ("text(2.0)", "2"), ("text(true)", "true")],
    )
    def test_text_content(self, source: str, expected: str) -> None:
        element = only(source)
        assert element.tag == "span"
        assert element.content == expected

    def test_text_without_content(self) -> None:
        assert only("text").content is None

    def test_button(self) -> None:
        element = only('button("Go")')
        assert (element.tag, element.content) == ("button", "Go")

    def test_link(self) -> None:
        element = only('link("Docs", "/docs")')
        assert element.tag == "a"
        assert element.attributes["href"] == "/docs"

    def test_link_default_destination(self) -> None:
        assert only('link("Top")').attributes["href"] == "#"

    def test_link_rejects_javascript_url(self) -> None:
        with pytest.raises(ValueError, match="Unsafe URL"):
            build('link("x", "javascript:alert(1)")')

    def test_image(self) -> None:
        element = only('image("/img/a.png", "A picture")')
        assert element.tag == "img"
        assert element.attributes["src"] == "/img/a.png"
        assert element.attributes["alt"] == "A picture"
        assert element.attributes["loading"] == "lazy"

    @pytest.mark.parametrize("src", ["/img/a..b.png", "../shared/logo.png"])
    def test_image_src_not_rewritten(self, src: str) -> None:
        assert only(f'image("{src}")').attributes["src"] == src

    def test_image_rejects_javascript_src(self) -> None:
        with pytest.raises(ValueError, match="Unsafe URL"):
            build('image("javascript:alert(1)")')

    def test_image_requires_src(self) -> None:
        with pytest.raises(ValueError, match="requires a src"):
            build("image")

    def test_icon(self) -> None:
        element = only('icon("star", 24)')
        assert element.attributes["data-icon"] == "star"
        assert element.attributes["style"] == "width: 24px; height: 24px"

    def test_card_elevation(self) -> None:
        assert only("card do\nend").classes == ["rounded-lg", "bg-white", "shadow"]
        assert only("card(elevation: 3) do\nend").classes == ["rounded-lg", "bg-white", "shadow-lg"]
        assert only("card(elevation: 0) do\nend").classes == ["rounded-lg", "bg-white"]

    def test_list(self) -> None:
        element = only('list do\n  list_item("a")\n  list_item("b")\nend')
        assert element.tag == "ul"
        assert [(c.tag, c.content) for c in element.children] == [("li", "a"), ("li", "b")]

    @pytest.mark.parametrize("name", ["div", "section", "article", "header", "footer", "nav", "main", "h1", "h6"])
    def test_plain_containers(self, name: str) -> None:
        element = only(f'{name}("x")')
        assert (element.tag, element.content) == (name, "x")

    def test_paragraph_is_p(self) -> None:
        assert only('paragraph("x")').tag == "p"


class TestForms:
    def test_form_children(self) -> None:
        element = only('form do\n  textfield("Name")\n  button("Save")\nend')
        assert element.tag == "form"
        assert [c.tag for c in element.children] == ["input", "button"]

    def test_textfield(self) -> None:
        element = only('textfield("Your name", "Ada")')
        assert element.tag == "input"
        assert element.attributes == {"type": "text", "placeholder": "Your name", "value": "Ada"}

    def test_select_with_options(self) -> None:
        element = only('select("size", "m") do\n  option("s", "Small")\n  option("m", "Medium", selected: true)\nend')
        assert element.attributes == {"name": "size", "value": "m"}
        small, medium = element.children
        assert (small.content, small.attributes) == ("Small", {"value": "s"})
        assert medium.attributes == {"value": "m", "selected": True}

    def test_option_label_defaults_to_value(self) -> None:
        assert only('option("x")').content == "x"

    def test_label_for(self) -> None:
        element = only('label("Email", "email")')
        assert element.attributes["for"] == "email"


class TestAttributes:
    def test_keyword_attributes(self) -> None:
        element = only('text("x", aria_label: "Note", data_role: "note")')
        assert element.attributes == {"aria-label": "Note", "data-role": "note"}

    def test_false_and_nil_attributes_skipped(self) -> None:
        element = only('input(required: false, name: nil, type: "email")')
        assert element.attributes == {"type": "email"}

    def test_event_handler_attribute_rejected(self) -> None:
        with pytest.raises(ValueError, match="Attribute not allowed"):
            build('text("x", onclick: "alert(1)")')

    @pytest.mark.parametrize(
        "source",
        [
            'form(ACTION: "javascript:alert(1)")',
            'button("Go", FORMACTION: "javascript:alert(2)")',
            'text("x", Href: "javascript:alert(3)")',
        ],
    )
    def test_mixed_case_url_keyword_validated(self, source: str) -> None:
        with pytest.raises(ValueError, match="Unsafe URL"):
            build(source)

    def test_keyword_attribute_names_lowercased(self) -> None:
        element = only('form(ACTION: "/submit")')
        assert element.attributes == {"action": "/submit"}

    def test_unsafe_data_value_dropped(self) -> None:
        element = only('text("x", data_payload: "javascript:alert(1)")')
        assert "data-payload" not in element.attributes
