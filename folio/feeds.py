"""Feed generation for Folio.

This module generates sitemap.xml and an RSS feed from the published
documents. Feed generation is separate from publishing so new formats can be
added by registering another generator.

Classes:
    FeedGenerator: Abstract base class for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates an RSS 2.0 feed.
    FeedRegistry: Registry for managing feed generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .html_utils import escape_html, join_root_url

if TYPE_CHECKING:
    from .publisher import PublishedDocument

RFC822_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"


class FeedGenerator(ABC):
    """Abstract base class for feed generators.

    Subclasses implement specific feed formats (sitemap, RSS, Atom, etc.).
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(
        self,
        documents: list[PublishedDocument],
        config: dict[str, Any],
    ) -> str | None:
        """Generate feed content from published documents.

        Args:
            documents: Documents in publication order (newest first).
            config: Site configuration containing the base URL.

        Returns:
            Feed content as a string, or None if the feed cannot be generated
            (e.g., no site URL configured).
        """
        ...


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml for search engine indexing.

    Requires 'url' in the site configuration to generate absolute URLs.
    """

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(
        self,
        documents: list[PublishedDocument],
        config: dict[str, Any],
    ) -> str | None:
        base_url = _base_url(config)
        if not base_url:
            return None

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            f"  <url><loc>{escape_html(join_root_url(base_url, '/'))}</loc></url>",
        ]
        for document in documents:
            full_url = escape_html(join_root_url(base_url, document.permalink))
            lastmod = document.date.strftime("%Y-%m-%d")
            lines.append(f"  <url><loc>{full_url}</loc><lastmod>{lastmod}</lastmod></url>")
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed, newest document first.

    Requires 'url' in the site configuration. The channel's build date is the
    date of the newest document so repeated builds produce identical output.
    """

    @property
    def filename(self) -> str:
        return "feed.xml"

    def generate(
        self,
        documents: list[PublishedDocument],
        config: dict[str, Any],
    ) -> str | None:
        base_url = _base_url(config)
        if not base_url:
            return None
        title = escape_html(str(config.get("title") or "Folio"))

        items = []
        for document in documents:
            link = escape_html(join_root_url(base_url, document.permalink))
            description = escape_html(document.description or document.title)
            items.append(
                f"<item><title>{escape_html(document.title)}</title><link>{link}</link>"
                f"<guid>{link}</guid>"
                f"<description>{description}</description>"
                f"<pubDate>{document.date.strftime(RFC822_FORMAT)}</pubDate></item>"
            )

        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{title}</title>",
            f"<link>{escape_html(base_url)}</link>",
            f"<description>{title}</description>",
        ]
        if documents:
            rss.append(f"<lastBuildDate>{documents[0].date.strftime(RFC822_FORMAT)}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss) + "\n"


def _base_url(config: dict[str, Any]) -> str:
    url = str(config.get("url") or "").rstrip("/")
    if not url:
        return ""
    baseurl = str(config.get("baseurl") or "").strip("/")
    return f"{url}/{baseurl}" if baseurl else url


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self,
        documents: Iterable[PublishedDocument],
        config: dict[str, Any],
    ) -> dict[str, str]:
        """Generate all registered feeds.

        Args:
            documents: Documents in publication order.
            config: Site configuration.

        Returns:
            Mapping of filename to content for every feed that was generated.
        """
        documents_list = list(documents)
        generated: dict[str, str] = {}
        for generator in self._generators:
            content = generator.generate(documents_list, config)
            if content is not None:
                generated[generator.filename] = content
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the sitemap and RSS generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    return registry
