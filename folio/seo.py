"""
Sitemap, RSS and robots.txt rendering.

Shared by the on-demand routes (/sitemap.xml, /feed.xml, /robots.txt) and the
static generation scripts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from shared.content import BlogPost, PortfolioItem

STATIC_PATHS = ("/", "/about", "/portfolio", "/blog", "/skills", "/contact", "/privacy", "/terms", "/cookies")

ROBOTS_DISALLOW = (
    "/admin/",
    "/admin-debug/",
    "/api/",
    "/_next/",
    "/private/",
    "/firebase-test/",
    "/*.json$",
    "/cookies",
    "/terms",
)
BLOCKED_AI_AGENTS = (
    "GPTBot",
    "ChatGPT-User",
    "CCBot",
    "anthropic-ai",
    "Claude-Web",
    "Google-Extended",
    "PerplexityBot",
    "YouBot",
)

# Exact paths first, then prefixes for detail pages.
_EXACT_PRIORITIES = {
    "/": (1.0, "weekly"),
    "/portfolio": (0.9, "weekly"),
    "/blog": (0.9, "weekly"),
    "/about": (0.5, "monthly"),
    "/contact": (0.5, "monthly"),
    "/skills": (0.6, "monthly"),
    "/privacy": (0.3, "yearly"),
    "/terms": (0.3, "yearly"),
    "/cookies": (0.3, "yearly"),
}
_PREFIX_PRIORITIES = (
    ("/portfolio/", (0.8, "monthly")),
    ("/blog/", (0.7, "weekly")),
)
_DEFAULT_PRIORITY = (0.7, "monthly")


def _cdata(value) -> Markup:
    text = "" if value is None else str(value)
    return Markup("<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>")


_env = Environment(
    loader=PackageLoader("folio", "templates"),
    autoescape=select_autoescape(["xml", "html"]),
)
_env.filters["cdata"] = _cdata


@dataclass
class SitemapEntry:
    loc: str
    lastmod: str
    changefreq: str
    priority: float


def priority_for_path(path: str) -> tuple[float, str]:
    """Returns (priority, changefreq) for a site path."""
    if path in _EXACT_PRIORITIES:
        return _EXACT_PRIORITIES[path]
    for prefix, value in _PREFIX_PRIORITIES:
        if path.startswith(prefix):
            return value
    return _DEFAULT_PRIORITY


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _entry(path: str, lastmod: Optional[str] = None) -> SitemapEntry:
    priority, changefreq = priority_for_path(path)
    moment = _parse_timestamp(lastmod) or _now()
    return SitemapEntry(
        loc=path,
        lastmod=moment.isoformat(timespec="seconds"),
        changefreq=changefreq,
        priority=priority,
    )


def static_pages() -> list[SitemapEntry]:
    return [_entry(path) for path in STATIC_PATHS]


def blog_entries(posts: Iterable[BlogPost]) -> list[SitemapEntry]:
    return [
        _entry(f"/blog/{post.slug}", post.updated_at or post.published_at)
        for post in posts
        if post.slug
    ]


def portfolio_entries(items: Iterable[PortfolioItem]) -> list[SitemapEntry]:
    return [
        _entry(f"/portfolio/{item.slug}", item.updated_at or item.created_at)
        for item in items
        if item.slug
    ]


def render_sitemap(entries: Iterable[SitemapEntry], site_url: str) -> str:
    return _env.get_template("seo/sitemap.xml").render(
        entries=list(entries), site_url=site_url.rstrip("/")
    )


def render_sitemap_index(paths: Iterable[str], site_url: str) -> str:
    return _env.get_template("seo/sitemap_index.xml").render(
        paths=list(paths),
        site_url=site_url.rstrip("/"),
        lastmod=_now().isoformat(timespec="seconds"),
    )


def _rfc822(value: Optional[str]) -> str:
    return format_datetime(_parse_timestamp(value) or _now(), usegmt=True)


def render_rss(
    posts: Iterable[BlogPost],
    site_url: str,
    *,
    title: str,
    description: str,
    contact_email: str,
    site_name: str = "AnandVerse",
) -> str:
    site_url = site_url.rstrip("/")
    items = [
        {
            "title": post.title,
            "description": post.excerpt or post.title,
            "link": f"{site_url}/blog/{post.slug}",
            "pub_date": _rfc822(post.published_at),
            "category": post.category or "Technology",
        }
        for post in posts
    ]
    if not items:
        items.append(
            {
                "title": f"Welcome to {site_name} Blog",
                "description": "Stay tuned for exciting content about web development, technology, and more!",
                "link": f"{site_url}/blog",
                "pub_date": _rfc822(None),
                "category": "Announcement",
            }
        )
    return _env.get_template("seo/rss.xml").render(
        title=title,
        description=description,
        site_url=site_url,
        site_name=site_name,
        contact_email=contact_email,
        build_date=_rfc822(None),
        items=items,
    )


def render_robots(site_url: str) -> str:
    return _env.get_template("seo/robots.txt").render(
        disallow=ROBOTS_DISALLOW,
        blocked_agents=BLOCKED_AI_AGENTS,
        site_url=site_url.rstrip("/"),
    ) + "\n"
