from __future__ import annotations

from django.test import SimpleTestCase

from apps.rendering.components.base import Component
from apps.rendering.compose.hydration import hydrate, walk
from apps.rendering.errors import HydrationError, TemplateMissing
from apps.rendering.tests.support import ProbeBox, ProbePage, box, make_registry, page_record


class HydrationTests(SimpleTestCase):
    def setUp(self) -> None:
        self.registry = make_registry()

    def test_paths_and_back_references(self) -> None:
        record = page_record(box("a", inner=[box("a1"), box("a2")]), box("b"))
        page = hydrate(record, self.registry)

        self.assertIsInstance(page, ProbePage)
        self.assertEqual(page.path, "")
        self.assertIsNone(page.parent)
        self.assertEqual(
            [n.path for n in walk(page)],
            ["", "/main/0", "/main/0/inner/0", "/main/0/inner/1", "/main/1"],
        )
        grandchild = page.areas["main"][0].areas["inner"][1]
        self.assertIs(grandchild.page, page)
        self.assertIs(grandchild.parent, page.areas["main"][0])

    def test_data_excludes_areas(self) -> None:
        page = hydrate(page_record(box("a", inner=[box("a1")])), self.registry)
        child = page.areas["main"][0]
        self.assertNotIn("areas", child.data)
        self.assertNotIn("areas", page.data)
        self.assertEqual(child.data["label"], "a")

    def test_missing_child_template_is_omitted_and_reported(self) -> None:
        record = page_record(box("first"), {"templateKey": "widget-v9"}, box("third"))
        with self.assertLogs("rendering.components.base", level="WARNING") as logs:
            page = hydrate(record, self.registry)

        main = page.areas["main"]
        self.assertEqual([c.data["label"] for c in main], ["first", "third"])
        # l'index reste celui des données stockées
        self.assertEqual([c.path for c in main], ["/main/0", "/main/2"])
        self.assertEqual(len(page.render_errors), 1)
        issue = page.render_errors[0]
        self.assertEqual(issue.path, "/main/1")
        self.assertIsInstance(issue.error, TemplateMissing)
        self.assertEqual(issue.error.template_key, "widget-v9")
        self.assertIn("/main/1", logs.output[0])
        self.assertFalse(page.had_error)

    def test_missing_nested_template_reported_at_page(self) -> None:
        record = page_record(box("a", inner=[{"templateKey": "nope"}]))
        with self.assertLogs("rendering.components.base", level="WARNING"):
            page = hydrate(record, self.registry)
        self.assertEqual(page.areas["main"][0].areas["inner"], [])
        self.assertEqual(page.render_errors[0].path, "/main/0/inner/0")

    def test_missing_root_template_is_fatal(self) -> None:
        record = page_record(box("a"))
        record["data"]["templateKey"] = "unknown-page"
        with self.assertRaises(TemplateMissing) as ctx:
            hydrate(record, self.registry)
        self.assertEqual(ctx.exception.template_key, "unknown-page")

    def test_page_template_not_usable_as_child(self) -> None:
        record = page_record({"templateKey": "probe-page"})
        with self.assertLogs("rendering.components.base", level="WARNING"):
            page = hydrate(record, self.registry)
        self.assertEqual(page.areas["main"], [])

    def test_component_without_page_root_raises(self) -> None:
        with self.assertRaises(HydrationError):
            ProbeBox({"templateKey": "box"}, "/orphan", None)

    def test_edit_mode_propagates_to_children(self) -> None:
        page = hydrate(page_record(box("a", inner=[box("b")])), self.registry, edit_mode=True)
        self.assertTrue(all(isinstance(n, Component) and n.edit_mode for n in walk(page)))
