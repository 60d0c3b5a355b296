"""Small BeautifulSoup helpers shared by the parse strategies."""

import json
import logging
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def text_of(node: Optional[Tag], selector: Optional[str] = None) -> str:
    """Stripped text of ``node`` (or of its first ``selector`` match), "" when missing."""
    if node is None:
        return ""
    if selector:
        node = node.select_one(selector)
        if node is None:
            return ""
    return node.get_text(" ", strip=True)


def attr_of(node: Optional[Tag], selector: str, attr: str) -> Optional[str]:
    if node is None:
        return None
    found = node.select_one(selector)
    if found is None:
        return None
    value = found.get(attr)
    return value.strip() if isinstance(value, str) and value.strip() else None


def absolute_url(href: Optional[str], base: str) -> Optional[str]:
    if not href:
        return None
    return urljoin(base, href)


def image_list(node: Optional[Tag], selector: str = "img", base: Optional[str] = None) -> list[str]:
    src = attr_of(node, selector, "src")
    if not src:
        return []
    if base:
        src = urljoin(base, src)
    return [src]


def cookie_header(raw: Optional[str]) -> Optional[str]:
    """
    Build a Cookie header from a JSON array of ``{"name", "value"}`` objects.

    Returns None when nothing usable is configured.
    """
    if not raw:
        return None
    try:
        cookies = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Ignoring malformed cookie configuration: {e}")
        return None
    if not isinstance(cookies, list):
        return None

    pairs = [
        f"{c['name']}={c['value']}"
        for c in cookies
        if isinstance(c, dict) and c.get("name") and c.get("value") is not None
    ]
    return "; ".join(pairs) or None
