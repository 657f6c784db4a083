from __future__ import annotations

from bs4 import BeautifulSoup
from django.test import SimpleTestCase

from apps.rendering.components.registry import get_registry
from apps.rendering.compose.hydration import hydrate
from apps.rendering.compose.pipeline import render_hydrated, render_page
from apps.rendering.schema.engine import migrate_page


def record(*main, footer=None, ancestors=None, **data):
    areas = {"main": list(main)}
    if footer is not None:
        areas["footer"] = footer
    return {
        "id": "p1",
        "path": "/p1",
        "ancestors": ancestors or [],
        "data": {"templateKey": "standard", "savedAtVersion": "2024-01-01T00:00:00Z", "title": "Home", "areas": areas, **data},
    }


def text(content, title=None):
    data = {"templateKey": "text", "content": content}
    if title:
        data["title"] = title
    return data


def article(title, **fields):
    return {"templateKey": "article", "title": title, "link": f"https://example.test/{title}", "summary": "s", **fields}


class FakeApi:
    def __init__(self) -> None:
        self.calls = []

    async def get_article(self, article_id):
        self.calls.append(article_id)
        return {"title": f"Remote {article_id}", "link": "https://example.test/remote", "summary": "", "published": ""}


class StandardPageTests(SimpleTestCase):
    async def test_headings_follow_the_tree(self) -> None:
        html = await render_page(record(text("Hello world", title="Welcome")), registry=get_registry())
        soup = BeautifulSoup(html, "html.parser")
        self.assertEqual(soup.find("h1").text, "Home")
        self.assertEqual(soup.select_one("section.text h2").text, "Welcome")
        self.assertEqual(soup.select_one("section.text p").text, "Hello world")
        self.assertEqual(soup.title.text, "Home")

    async def test_head_content_and_logo(self) -> None:
        html = await render_page(
            record({"templateKey": "columns", "areas": {"left": [text("L")], "right": [text("R")]}}),
            registry=get_registry(),
        )
        soup = BeautifulSoup(html, "html.parser")
        hrefs = [link["href"] for link in soup.select("head link[rel=stylesheet]")]
        self.assertEqual(hrefs, ["/.resources/1704067200000/site.css", "/.resources/1704067200000/columns.css"])
        self.assertEqual(soup.select_one("header img")["src"], "/.resources/1704067200000/logo.svg")
        self.assertEqual([c.text.strip() for c in soup.select(".column")], ["L", "R"])

    async def test_content_language_header(self) -> None:
        page = hydrate(record(text("x"), lang="fr"), get_registry())
        await render_hydrated(page, get_registry())
        self.assertEqual(page.response_headers, {"Content-Language": "fr"})

    async def test_footer_inherited_from_nearest_ancestor(self) -> None:
        ancestors = [
            {"id": "root", "data": {"areas": {"footer": [text("Root footer")]}}},
            {"id": "section", "data": {"areas": {"footer": [text("Section footer")]}}},
        ]
        page = hydrate(record(text("body"), ancestors=ancestors), get_registry(), edit_mode=True)
        html = await render_hydrated(page, get_registry())
        soup = BeautifulSoup(html, "html.parser")
        footer = soup.find("footer")
        self.assertIn("Section footer", footer.text)
        self.assertNotIn("Root footer", footer.text)
        self.assertEqual(footer.select_one(".dg-edit-bar")["data-inherited-from"], "section")
        self.assertEqual(page.areas["footer"][0].inherited_from, "section")

    async def test_own_footer_wins(self) -> None:
        ancestors = [{"id": "root", "data": {"areas": {"footer": [text("Root footer")]}}}]
        html = await render_page(record(text("body"), footer=[text("Mine")], ancestors=ancestors), registry=get_registry())
        self.assertIn("Mine", html)
        self.assertNotIn("Root footer", html)


class ColumnsTests(SimpleTestCase):
    async def test_column_maximum_in_edit_mode(self) -> None:
        columns = {"templateKey": "columns", "areas": {"left": [text(str(i)) for i in range(3)], "right": []}}
        html = await render_page(record(columns), registry=get_registry(), edit_mode=True)
        soup = BeautifulSoup(html, "html.parser")
        left, right = soup.select(".column")
        self.assertEqual(left.select_one(".dg-new-bar").text, "Maximum Reached")
        self.assertEqual(right.select_one(".dg-new-bar").text, "Add to right column")


class ArticleTests(SimpleTestCase):
    def _news(self, *articles):
        return record({"templateKey": "article-list", "title": "News", "areas": {"articles": list(articles)}})

    async def test_html_list(self) -> None:
        html = await render_page(self._news(article("one"), article("two")), registry=get_registry())
        soup = BeautifulSoup(html, "html.parser")
        self.assertEqual([a.text for a in soup.select("section.articles li a")], ["one", "two"])
        self.assertEqual(soup.select_one("section.articles h2").text, "News")
        self.assertIn("/.resources/1704067200000/feed.js", [s["src"] for s in soup.select("script")])

    async def test_rss_variation(self) -> None:
        rss = await render_page(self._news(article("one", published="2024-02-01"), article("two")), registry=get_registry(), extension="rss")
        soup = BeautifulSoup(rss, "html.parser")
        self.assertTrue(rss.startswith('<?xml version="1.0" encoding="UTF-8"?><rss version="2.0">'))
        self.assertEqual(soup.find("channel").find("title").text, "News")
        self.assertEqual([i.find("title").text for i in soup.find_all("item")], ["one", "two"])
        self.assertEqual(soup.find("item").find("pubdate").text, "2024-02-01")
        self.assertNotIn("<html", rss)

    async def test_unknown_variation_is_empty(self) -> None:
        out = await render_page(self._news(article("one")), registry=get_registry(), extension="ics")
        self.assertEqual(out, "")

    async def test_fetch_uses_api_collaborator(self) -> None:
        api = FakeApi()
        html = await render_page(self._news({"templateKey": "article", "articleId": "42"}), registry=get_registry(), api=api)
        self.assertEqual(api.calls, ["42"])
        self.assertIn("Remote 42", html)


class SitekitMigrationTests(SimpleTestCase):
    async def test_text_body_renamed(self) -> None:
        data = {
            "templateKey": "standard",
            "savedAtVersion": "2023-01-01T00:00:00Z",
            "areas": {"main": [{"templateKey": "text", "body": "old"}]},
        }
        out = await migrate_page(data, "2024-01-01T00:00:00Z", get_registry().migrations)
        self.assertEqual(out["areas"]["main"][0], {"templateKey": "text", "content": "old"})

    async def test_article_legacy_fields(self) -> None:
        data = {
            "templateKey": "standard",
            "savedAtVersion": "2023-01-01T00:00:00Z",
            "areas": {"main": [{"templateKey": "article", "date": "2023-05-01", "legacyHtml": "<p/>"}]},
        }
        out = await migrate_page(data, "2024-01-01T00:00:00Z", get_registry().migrations)
        self.assertEqual(out["areas"]["main"][0], {"templateKey": "article", "published": "2023-05-01"})
