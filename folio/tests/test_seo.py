import unittest
import xml.etree.ElementTree as ET

import feedparser

from folio.seo import (
    BLOCKED_AI_AGENTS,
    blog_entries,
    portfolio_entries,
    priority_for_path,
    render_robots,
    render_rss,
    render_sitemap,
    render_sitemap_index,
    static_pages,
)
from shared.content import BlogPost, PortfolioItem

SITEMAP_NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


class PriorityTests(unittest.TestCase):
    def test_exact_and_prefix_priorities(self):
        self.assertEqual(priority_for_path("/"), (1.0, "weekly"))
        self.assertEqual(priority_for_path("/privacy"), (0.3, "yearly"))
        self.assertEqual(priority_for_path("/portfolio/site"), (0.8, "monthly"))
        self.assertEqual(priority_for_path("/blog/post"), (0.7, "weekly"))
        self.assertEqual(priority_for_path("/elsewhere"), (0.7, "monthly"))


class SitemapTests(unittest.TestCase):
    def test_render_sitemap(self):
        posts = [
            BlogPost(slug="hello", published_at="2024-01-02T03:04:05+00:00"),
            BlogPost(slug=""),
        ]
        items = [PortfolioItem(slug="site", created_at="2023-06-01T00:00:00")]
        entries = static_pages() + blog_entries(posts) + portfolio_entries(items)
        xml = render_sitemap(entries, "https://folio.test/")

        root = ET.fromstring(xml.encode("utf-8"))
        urls = {
            url.find("sm:loc", SITEMAP_NS).text: url for url in root.findall("sm:url", SITEMAP_NS)
        }
        self.assertIn("https://folio.test/", urls)
        self.assertEqual(
            urls["https://folio.test/blog/hello"].find("sm:lastmod", SITEMAP_NS).text,
            "2024-01-02T03:04:05+00:00",
        )
        self.assertEqual(
            urls["https://folio.test/portfolio/site"].find("sm:priority", SITEMAP_NS).text, "0.8"
        )
        self.assertEqual(len(urls), len(static_pages()) + 2)

    def test_render_sitemap_index(self):
        xml = render_sitemap_index(["sitemap-pages.xml", "/sitemap-blog.xml"], "https://folio.test")
        root = ET.fromstring(xml.encode("utf-8"))
        locs = [loc.text for loc in root.iter("{http://www.sitemaps.org/schemas/sitemap/0.9}loc")]
        self.assertEqual(
            locs,
            ["https://folio.test/sitemap-pages.xml", "https://folio.test/sitemap-blog.xml"],
        )


class RssTests(unittest.TestCase):
    def render(self, posts):
        return render_rss(
            posts,
            "https://folio.test",
            title="Folio Blog",
            description="Writing about software",
            contact_email="me@folio.test",
            site_name="Folio",
        )

    def test_feed_items(self):
        posts = [
            BlogPost(
                title="Tips & tricks ]]> for Python",
                slug="tips",
                excerpt="Useful things.",
                category="Engineering",
                published_at="2024-03-01T12:00:00+00:00",
            )
        ]
        feed = feedparser.parse(self.render(posts))
        self.assertEqual(feed.feed.title, "Folio Blog")
        [entry] = feed.entries
        self.assertEqual(entry.title, "Tips & tricks ]]> for Python")
        self.assertEqual(entry.link, "https://folio.test/blog/tips")
        self.assertEqual(entry.published_parsed[:3], (2024, 3, 1))

    def test_empty_feed_has_welcome_item(self):
        feed = feedparser.parse(self.render([]))
        [entry] = feed.entries
        self.assertEqual(entry.title, "Welcome to Folio Blog")
        self.assertEqual(entry.link, "https://folio.test/blog")


class RobotsTests(unittest.TestCase):
    def test_robots(self):
        text = render_robots("https://folio.test/")
        self.assertTrue(text.startswith("User-agent: *\nAllow: /\nDisallow: /admin/"))
        for agent in BLOCKED_AI_AGENTS:
            self.assertIn(f"User-agent: {agent}\nDisallow: /", text)
        self.assertIn("Sitemap: https://folio.test/sitemap.xml", text)


if __name__ == "__main__":
    unittest.main()
