from __future__ import annotations

from bs4 import BeautifulSoup
from django.test import SimpleTestCase

from apps.rendering.components import editbar
from apps.rendering.components.base import RenderedComponent
from apps.rendering.components.headers import advance_header, initial_context, print_header
from apps.rendering.compose.hydration import hydrate
from apps.rendering.tests.support import box, make_registry, page_record


class HeaderTests(SimpleTestCase):
    def test_levels_are_clamped(self) -> None:
        self.assertEqual(print_header({"header_level": 2}, "Title"), "<h2>Title</h2>")
        self.assertEqual(print_header({"header_level": 9}, "Deep"), "<h6>Deep</h6>")
        self.assertEqual(print_header({"header_level": 0}, "Top"), "<h1>Top</h1>")
        self.assertEqual(print_header({}, "Default"), "<h1>Default</h1>")

    def test_blank_content(self) -> None:
        self.assertEqual(print_header({"header_level": 2}, "   "), "")
        self.assertEqual(print_header({"header_level": 2}, None), "")

    def test_attributes(self) -> None:
        html = print_header({"header_level": 3}, "T", {"class": "title", "id": "x"})
        self.assertEqual(html, '<h3 class="title" id="x">T</h3>')

    def test_advance_only_with_content(self) -> None:
        ctx = initial_context({"Accept": "text/html"}, {"q": "1"})
        self.assertEqual(advance_header(ctx, "Something")["header_level"], 2)
        self.assertEqual(advance_header(ctx, "")["header_level"], 1)
        # le contexte reçu n'est pas modifié
        self.assertEqual(ctx["header_level"], 1)
        self.assertEqual(ctx["request_headers"], {"Accept": "text/html"})


class EditBarTests(SimpleTestCase):
    def test_nothing_outside_edit_mode(self) -> None:
        self.assertEqual(editbar.edit_bar("/main/0", label="Text"), "")
        self.assertEqual(editbar.new_bar("/main", label="Add"), "")

    def test_edit_bar_buttons(self) -> None:
        soup = BeautifulSoup(editbar.edit_bar("/main/0", label="Text", edit_mode=True), "html.parser")
        bar = soup.select_one(".dg-edit-bar")
        self.assertEqual(bar["data-path"], "/main/0")
        self.assertEqual([b.text for b in bar.find_all("button")], ["Edit", "Move", "Trash"])

    def test_edit_bar_options(self) -> None:
        html = editbar.edit_bar("/main/0", label="<b>", edit_mode=True, hide_edit=True, disable_delete=True, disable_drop=True)
        soup = BeautifulSoup(html, "html.parser")
        self.assertEqual([b.text for b in soup.find_all("button")], ["Move"])
        self.assertEqual(soup.select_one(".dg-edit-bar")["data-drop"], "false")
        self.assertIn("&lt;b&gt;", html)

    def test_inherited_bar_has_no_controls(self) -> None:
        html = editbar.edit_bar("/footer/0", label="Links", edit_mode=True, inherited_from="root-page")
        soup = BeautifulSoup(html, "html.parser")
        self.assertEqual(soup.find_all("button"), [])
        self.assertEqual(soup.select_one(".dg-edit-bar")["data-inherited-from"], "root-page")

    def test_disabled_new_bar(self) -> None:
        soup = BeautifulSoup(editbar.new_bar("/main", label="Full", edit_mode=True, disabled=True), "html.parser")
        bar = soup.select_one(".dg-new-bar")
        self.assertIn("disabled", bar["class"])
        self.assertEqual(bar["aria-disabled"], "true")


class RenderAreaTests(SimpleTestCase):
    def _component(self, edit_mode=True, count=2):
        page = hydrate(page_record(box("a", inner=[box(f"c{i}") for i in range(count)])), make_registry(), edit_mode=edit_mode)
        component = page.areas["main"][0]
        component.rendered_areas = {
            "inner": [RenderedComponent(c, f"<p>{c.data['label']}</p>") for c in component.areas["inner"]]
        }
        return component

    def test_render_area_with_bars(self) -> None:
        soup = BeautifulSoup(self._component().render_area("inner"), "html.parser")
        self.assertEqual([b["data-path"] for b in soup.select(".dg-edit-bar")], ["/main/0/inner/0", "/main/0/inner/1"])
        new = soup.select_one(".dg-new-bar")
        self.assertEqual(new["data-path"], "/main/0/inner")
        self.assertEqual(new.text, "Add box Content")

    def test_max_reached(self) -> None:
        soup = BeautifulSoup(self._component().render_area("inner", max=2), "html.parser")
        new = soup.select_one(".dg-new-bar")
        self.assertEqual(new.text, "Maximum Reached")
        self.assertIn("disabled", new["class"])
        self.assertEqual({b["data-drop"] for b in soup.select(".dg-edit-bar")}, {"false"})

    def test_min_disables_delete(self) -> None:
        soup = BeautifulSoup(self._component(count=1).render_area("inner", min=1), "html.parser")
        self.assertEqual([b.text for b in soup.find_all("button")], ["Edit", "Move"])

    def test_plain_output_outside_edit_mode(self) -> None:
        self.assertEqual(self._component(edit_mode=False).render_area("inner"), "<p>c0</p><p>c1</p>")
