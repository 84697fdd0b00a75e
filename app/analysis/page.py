"""Parsed-page facts shared by the checks.

Parsing happens once per request; every check reads from the same
``PageContext`` and never mutates it.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from app.analysis.patterns import JSONLD_SCRIPT_TYPE

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


@dataclass
class JsonLdScan:
    """Outcome of scanning a document's JSON-LD blocks."""

    has_schema: bool = False  # at least one block parsed
    schema_types: list[str] = field(default_factory=list)
    invalid_blocks: int = 0


def _collect_types(node: object, out: list[str]) -> None:
    """Append every ``@type`` found in a JSON-LD node, following ``@graph``."""
    if isinstance(node, list):
        for item in node:
            _collect_types(item, out)
        return
    if not isinstance(node, dict):
        return

    type_name = node.get("@type")
    if isinstance(type_name, str) and type_name:
        out.append(type_name)
    elif isinstance(type_name, list):
        out.extend(t for t in type_name if isinstance(t, str) and t)

    graph = node.get("@graph")
    if isinstance(graph, list):
        _collect_types(graph, out)


def scan_jsonld(soup: BeautifulSoup) -> JsonLdScan:
    """Find all JSON-LD blocks and extract their ``@type`` values.

    Malformed blocks are skipped one at a time; the rest still count.
    """
    scan = JsonLdScan()
    for script in soup.find_all("script", attrs={"type": JSONLD_SCRIPT_TYPE}):
        content = script.string or script.get_text()
        if not content or not content.strip():
            continue
        try:
            data = json.loads(content)
        except (json.JSONDecodeError, TypeError):
            scan.invalid_blocks += 1
            continue
        scan.has_schema = True
        _collect_types(data, scan.schema_types)
    return scan


@dataclass
class PageContext:
    """Everything a check needs to know about one page."""

    url: str
    soup: BeautifulSoup
    title: str
    document_text: str  # whole document, including <head>
    body_text: str
    jsonld: JsonLdScan

    @property
    def hostname(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    @property
    def schema_types(self) -> list[str]:
        return self.jsonld.schema_types

    @classmethod
    def from_html(cls, html: str, url: str) -> PageContext:
        soup = BeautifulSoup(html, "lxml")

        jsonld = scan_jsonld(soup)
        if jsonld.invalid_blocks:
            logger.debug("Skipped %d malformed JSON-LD block(s) on %s", jsonld.invalid_blocks, url)

        # Script/style bodies are not visible text; JSON-LD has been read already
        for tag in soup(["script", "style", "noscript", "template"]):
            tag.decompose()

        title_tag = soup.find("title")
        title = clean_text(title_tag.get_text()) if title_tag else ""

        body = soup.find("body")
        body_text = clean_text(body.get_text(" ")) if body else ""
        document_text = clean_text(soup.get_text(" "))

        return cls(
            url=url,
            soup=soup,
            title=title,
            document_text=document_text,
            body_text=body_text,
            jsonld=jsonld,
        )
