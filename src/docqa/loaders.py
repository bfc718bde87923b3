from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from docqa.extract import extract_text
from docqa.http_client import HttpFetcher
from docqa.models import Document

log = logging.getLogger("docqa.loaders")

TEXT_SUFFIXES = {".txt", ".md", ".markdown"}
HTML_SUFFIXES = {".html", ".htm"}
SUPPORTED_SUFFIXES = TEXT_SUFFIXES | HTML_SUFFIXES


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_sources_file(path: Path) -> List[str]:
    """
    Read sources (paths or URLs) from a text file:
    - one source per line
    - ignores empty lines
    - ignores comments that start with '#'
    - deduplicates while preserving order
    """
    if not path.exists():
        raise FileNotFoundError(f"Sources file not found: {path}")

    seen = set()
    sources: List[str] = []

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line not in seen:
            seen.add(line)
            sources.append(line)

    return sources


def _document_from_html(source: str, html: str) -> Optional[Document]:
    extracted = extract_text(html)
    if not extracted.text:
        log.warning("No text extracted from %s", source)
        return None
    return Document(source=source, text=extracted.text, title=extracted.title)


def load_file(path: Path) -> Optional[Document]:
    """
    Load one supported file. Returns None for files with no usable text.
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file type {suffix!r}: {path}")

    raw = path.read_text(encoding="utf-8", errors="replace")

    if suffix in HTML_SUFFIXES:
        return _document_from_html(str(path), raw)

    if not raw.strip():
        log.warning("Skipping empty file %s", path)
        return None
    return Document(source=str(path), text=raw.strip(), title=path.stem)


def load_url(url: str, fetcher: HttpFetcher) -> Optional[Document]:
    result = fetcher.fetch(url)
    if result.is_html:
        return _document_from_html(result.final_url, result.body)

    if not result.body.strip():
        log.warning("Empty response body from %s", url)
        return None
    return Document(source=result.final_url, text=result.body.strip())


def _iter_directory(directory: Path) -> Iterator[Path]:
    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        if path.suffix.lower() not in SUPPORTED_SUFFIXES:
            log.debug("Skipping unsupported file %s", path)
            continue
        yield path


def iter_documents(sources: Iterable[str], fetcher: Optional[HttpFetcher] = None) -> Iterator[Document]:
    """
    Yield Documents for files, directories (recursive) and http(s) URLs.

    Sources that yield no text are skipped; missing paths raise FileNotFoundError.
    """
    own_fetcher = fetcher is None
    fetcher = fetcher or HttpFetcher()

    try:
        for source in sources:
            if is_url(source):
                log.info("Loading URL %s", source)
                doc = load_url(source, fetcher)
                if doc is not None:
                    yield doc
                continue

            path = Path(source)
            if path.is_dir():
                for file_path in _iter_directory(path):
                    log.info("Loading %s", file_path)
                    doc = load_file(file_path)
                    if doc is not None:
                        yield doc
            elif path.is_file():
                log.info("Loading %s", path)
                doc = load_file(path)
                if doc is not None:
                    yield doc
            else:
                raise FileNotFoundError(f"Source not found: {source}")
    finally:
        if own_fetcher:
            fetcher.close()


def load_documents(sources: Iterable[str], fetcher: Optional[HttpFetcher] = None) -> List[Document]:
    return list(iter_documents(sources, fetcher=fetcher))
