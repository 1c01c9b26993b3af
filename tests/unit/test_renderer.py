"""Tests for the Jinja2 element renderer and the host render context."""

from __future__ import annotations

import pytest
from markupsafe import Markup

from swiftdsl.core.elements import Element
from swiftdsl_ui.runtime.renderer import (
    MAX_CURRENCY_PRECISION,
    RenderContext,
    create_jinja_env,
    render_elements,
    render_fragment,
)


def render(*elements: Element) -> str:
    return str(render_elements(elements))


class TestRenderElements:
    def test_empty(self) -> None:
        assert render() == ""

    def test_text_element(self) -> None:
        assert render(Element(tag="span", content="Hello World")) == "<span>Hello World</span>"

    def test_returns_markup(self) -> None:
        assert isinstance(render_elements([Element(tag="p")]), Markup)

    def test_nested_children(self) -> None:
        child = Element(tag="li", content="one")
        parent = Element(tag="ul", classes=["list-disc"], children=[child])
        assert render(parent) == '<ul class="list-disc"><li>one</li></ul>'

    def test_content_before_children(self) -> None:
        parent = Element(tag="button", content="Go", children=[Element(tag="span", content="!")])
        assert render(parent) == "<button>Go<span>!</span></button>"

    def test_siblings(self) -> None:
        assert render(Element(tag="hr"), Element(tag="p", content="x")) == "<hr><p>x</p>"

    def test_void_tags_have_no_closing_tag(self) -> None:
        img = Element(tag="img", attributes={"src": "/a.png", "alt": "A"})
        assert render(img) == '<img src="/a.png" alt="A">'

    def test_text_is_escaped(self) -> None:
        html = render(Element(tag="span", content='<script>alert("x")</script>'))
        assert html == "<span>&lt;script&gt;alert(&#34;x&#34;)&lt;/script&gt;</span>"

    def test_attribute_values_escaped(self) -> None:
        html = render(Element(tag="div", attributes={"title": '"><script>'}))
        assert html == '<div title="&#34;&gt;&lt;script&gt;"></div>'

    def test_boolean_attributes(self) -> None:
        option = Element(tag="option", content="M", attributes={"value": "m", "selected": True, "hidden": False})
        assert render(option) == '<option value="m" selected>M</option>'

    def test_unsafe_url_dropped_at_render(self) -> None:
        # Bypasses set_attribute, so only the renderer stands in the way
        link = Element(tag="a", content="x", attributes={"href": "javascript:alert(1)"})
        assert render(link) == "<a>x</a>"

    @pytest.mark.parametrize("name", ["HREF", "Action", "FORMACTION"])
    def test_mixed_case_unsafe_url_dropped_at_render(self, name: str) -> None:
        el = Element(tag="a", content="x", attributes={name: "javascript:alert(1)"})
        assert render(el) == "<a>x</a>"

    def test_event_handler_attributes_dropped(self) -> None:
        el = Element(tag="div", attributes={"onclick": "alert(1)", "bad name": "x"})
        assert render(el) == "<div></div>"

    def test_custom_environment(self) -> None:
        env = create_jinja_env()
        assert str(render_elements([Element(tag="b", content="x")], env)) == "<b>x</b>"


class TestRenderFragment:
    def test_page_template(self) -> None:
        html = render_fragment(
            "playground/page.html",
            title="Playground",
            initial_source='text("<b>")',
            preview_url="/playground/preview",
            methods_url="/playground/methods",
            method_count=3,
            max_source_length=100,
        )
        assert "<title>Playground</title>" in html
        assert "/playground/preview" in html
        assert 'text(&#34;&lt;b&gt;&#34;)' in html


class TestHelpers:
    @pytest.fixture
    def ctx(self) -> RenderContext:
        return RenderContext(
            trusted=True,
            translations={"en": {"cart.items": "%{count} items", "hi": "Hi"}},
            asset_host="https://cdn.example.com",
        )

    def test_translation(self, ctx: RenderContext) -> None:
        assert ctx.t("hi") == "Hi"
        assert ctx.t("cart.items", count=3) == "3 items"

    def test_translation_fallbacks(self, ctx: RenderContext) -> None:
        assert ctx.t("missing.key", "Fallback") == "Fallback"
        assert ctx.t("settings.page_title") == "Page title"

    def test_translate_alias(self, ctx: RenderContext) -> None:
        assert ctx.translate("hi") == "Hi"

    def test_asset_path(self, ctx: RenderContext) -> None:
        assert ctx.asset_path("/app.css") == "https://cdn.example.com/assets/app.css"
        assert ctx.image_path("logo.png") == "https://cdn.example.com/assets/images/logo.png"

    @pytest.mark.parametrize("path", ["../secrets", "javascript:alert(1)"])
    def test_asset_path_rejects_unsafe(self, ctx: RenderContext, path: str) -> None:
        with pytest.raises(ValueError, match="Invalid asset path"):
            ctx.asset_path(path)

    @pytest.mark.parametrize(
        ("args", "expected"),
        [((1234.5,), "$1,234.50"), ((-3,), "-$3.00"), ((10, "€", 0), "€10"), (("n/a",), "n/a")],
    )
    def test_number_to_currency(self, ctx: RenderContext, args: tuple, expected: str) -> None:
        assert ctx.number_to_currency(*args) == expected

    def test_number_to_currency_precision(self, ctx: RenderContext) -> None:
        assert ctx.number_to_currency(1.23456, precision=4) == "$1.2346"
        assert ctx.number_to_currency(1, precision=MAX_CURRENCY_PRECISION) == "$1.0000000000"

    @pytest.mark.parametrize("precision", [-1, 11, 50_000_000, 2.5, "2", True])
    def test_number_to_currency_rejects_bad_precision(self, ctx: RenderContext, precision: object) -> None:
        with pytest.raises(ValueError, match="precision must be an integer from 0 to 10"):
            ctx.number_to_currency(1, precision=precision)

    @pytest.mark.parametrize(
        ("count", "plural", "expected"), [(1, None, "1 item"), (2, None, "2 items"), (0, "itemz", "0 itemz")]
    )
    def test_pluralize(self, ctx: RenderContext, count: int, plural: str | None, expected: str) -> None:
        assert ctx.pluralize(count, "item", plural) == expected

    def test_default_is_untrusted(self) -> None:
        assert RenderContext().trusted is False
