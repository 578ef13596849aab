"""
Write the blog RSS feed (feed.xml) into the public directory.
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
from folio.config import Settings, get_settings
from folio.dependencies import get_store
from folio.logging_utils import configure_script_logging
from folio.seo import render_rss
from folio.store import DocumentStore

logger = logging.getLogger(__name__)


def generate_feed(store: DocumentStore, output: Path, settings: Settings) -> Path:
    posts = list_published_blog_posts(store)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        render_rss(
            posts,
            settings.site_url,
            title=f"{settings.site_name} Blog",
            description=settings.site_description,
            contact_email=settings.contact_email,
            site_name=settings.site_name,
        ),
        encoding="utf-8",
    )
    logger.info("Generated %s with %d posts", output, len(posts))
    return output


def main(argv=None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate the blog RSS feed")
    parser.add_argument(
        "--output",
        default=str(Path(settings.public_dir) / "feed.xml"),
        help="Path of the feed file",
    )
    args = parser.parse_args(argv)

    configure_script_logging()
    try:
        generate_feed(get_store(), Path(args.output), settings)
    except Exception:
        logger.exception("Error generating RSS feed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
