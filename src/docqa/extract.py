from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import trafilatura
from bs4 import BeautifulSoup


@dataclass(frozen=True)
class ExtractedText:
    title: Optional[str]
    text: Optional[str]


def _soup_title(html: str) -> Optional[str]:
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception:
        return None
    if soup.title and soup.title.string:
        return soup.title.string.strip() or None
    return None


def _soup_text(html: str) -> Optional[str]:
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception:
        return None
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text("\n", strip=True)
    return text or None


def extract_text(html: str) -> ExtractedText:
    """
    Extracts title + main text from HTML.

    Primary extraction:
      - trafilatura.extract (main text)
      - trafilatura.extract_metadata (title, if available)

    Fallbacks:
      - <title> via BeautifulSoup
      - visible text via BeautifulSoup, for short pages trafilatura rejects

    Returns text=None when nothing usable was found.
    """
    title: Optional[str] = None
    try:
        meta = trafilatura.extract_metadata(html)
        if meta and getattr(meta, "title", None):
            title = meta.title
    except Exception:
        pass

    text: Optional[str] = None
    try:
        extracted = trafilatura.extract(
            html,
            include_comments=False,
            include_tables=True,
            favor_precision=True,
            output_format="txt",
        )
        if extracted:
            text = extracted.strip() or None
    except Exception:
        text = None

    if not title:
        title = _soup_title(html)

    if not text:
        text = _soup_text(html)

    return ExtractedText(title=title, text=text)
