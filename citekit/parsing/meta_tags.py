"""Attribute lookups over an HTML document: meta tags, title, canonical link, JSON-LD.

The extractor only talks to ``MetaTags``; nothing else in the package touches
the parsed markup.
"""

import json
import logging

from bs4 import BeautifulSoup

from citekit.formatting.text import clean_text

logger = logging.getLogger(__name__)

_KEY_ATTRS = ("name", "property", "itemprop")


class MetaTags:
    """Index of one document's ``<meta>`` tags keyed by name/property/itemprop."""

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup
        self._meta: dict[str, list[str]] = {}
        for tag in soup.find_all("meta"):
            content = clean_text(tag.get("content"))
            if not content:
                continue
            for attr in _KEY_ATTRS:
                key = tag.get(attr)
                if isinstance(key, str) and key.strip():
                    self._meta.setdefault(key.strip().lower(), []).append(content)

    @classmethod
    def from_html(cls, html: str) -> "MetaTags":
        return cls(BeautifulSoup(html, "html.parser"))

    # ── Meta Tags ────────────────────────────────────────────

    def first(self, names: tuple[str, ...] | list[str]) -> str | None:
        """Content of the first tag matching the earliest name in priority order."""
        for name in names:
            values = self._meta.get(name.lower())
            if values:
                return values[0]
        return None

    def values(self, name: str) -> list[str]:
        """Contents of every tag with this name, in document order."""
        return list(self._meta.get(name.lower(), []))

    # ── Document Elements ────────────────────────────────────

    def title(self) -> str | None:
        tag = self._soup.find("title")
        return clean_text(tag.get_text()) if tag else None

    def canonical_url(self) -> str | None:
        for link in self._soup.find_all("link", href=True):
            rel = link.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if any(r.lower() == "canonical" for r in rel):
                return clean_text(link["href"])
        return None

    def json_ld(self) -> list:
        """Parsed JSON-LD blocks; blocks that are not valid JSON are skipped."""
        blocks = []
        for script in self._soup.find_all("script"):
            script_type = (script.get("type") or "").strip().lower()
            if script_type != "application/ld+json":
                continue
            raw = script.string or script.get_text()
            try:
                blocks.append(json.loads(raw.strip()))
            except json.JSONDecodeError as exc:
                logger.debug("Skipping malformed JSON-LD block: %s", exc)
        return blocks
