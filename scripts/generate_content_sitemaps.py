"""
Write static content sitemaps into the public directory.

Produces sitemap-pages.xml, sitemap-blog.xml and sitemap-portfolio.xml from
the live store, plus a sitemap-index.xml pointing at the three.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.actions.blog import list_published_blog_posts
from folio.actions.portfolio import list_portfolio_items
from folio.config import get_settings
from folio.dependencies import get_store
from folio.logging_utils import configure_script_logging
from folio.seo import (
    blog_entries,
    portfolio_entries,
    render_sitemap,
    render_sitemap_index,
    static_pages,
)
from folio.store import DocumentStore

logger = logging.getLogger(__name__)

INDEX_FILE = "sitemap-index.xml"


def generate_sitemaps(store: DocumentStore, public_dir: Path, site_url: str) -> list[Path]:
    public_dir.mkdir(parents=True, exist_ok=True)
    sitemaps = {
        "sitemap-pages.xml": static_pages(),
        "sitemap-blog.xml": blog_entries(list_published_blog_posts(store)),
        "sitemap-portfolio.xml": portfolio_entries(list_portfolio_items(store)),
    }
    written = []
    for name, entries in sitemaps.items():
        path = public_dir / name
        path.write_text(render_sitemap(entries, site_url), encoding="utf-8")
        logger.info("Generated %s (%d urls)", name, len(entries))
        written.append(path)

    index_path = public_dir / INDEX_FILE
    index_path.write_text(render_sitemap_index(sitemaps, site_url), encoding="utf-8")
    logger.info("Generated %s", INDEX_FILE)
    written.append(index_path)
    return written


def main(argv=None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate content-specific sitemaps")
    parser.add_argument(
        "--public-dir",
        default=settings.public_dir,
        help="Directory the sitemap files are written to",
    )
    parser.add_argument("--site-url", default=settings.site_url, help="Absolute site URL")
    args = parser.parse_args(argv)

    configure_script_logging()
    try:
        generate_sitemaps(get_store(), Path(args.public_dir), args.site_url)
    except Exception:
        logger.exception("Error generating content sitemaps")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
