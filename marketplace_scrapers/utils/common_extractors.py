import logging
import re
from typing import Any, Iterable, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_PLAIN_PRICE_PATTERN = re.compile(r'[\d,]+(\.\d+)?')
_CURRENCY_PRICE_PATTERN = re.compile(r'\$([\d,]+(\.\d+)?)')


def _to_float(raw: str) -> Optional[float]:
    cleaned = raw.replace(',', '')
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def extract_price(value: Any) -> Optional[float]:
    """
    Parse a price from a structured offer value: "$99", "1,234.50", 99.

    The currency symbol is optional and the first numeric run wins.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    for match in _PLAIN_PRICE_PATTERN.finditer(str(value)):
        price = _to_float(match.group(0))
        if price is not None:
            return price
    return None


def parse_price(text: Optional[str]) -> Optional[float]:
    """Parse a price from visible text; requires a leading "$"."""
    if not text:
        return None

    for match in _CURRENCY_PRICE_PATTERN.finditer(str(text)):
        price = _to_float(match.group(1))
        if price is not None:
            return price
    return None


def absolute_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Join relative paths against the marketplace origin."""
    if not href:
        return None
    href = href.strip()
    if href.startswith('http://') or href.startswith('https://'):
        return href
    return urljoin(base_url.rstrip('/') + '/', href.lstrip('/'))


def first_of(value: Any) -> Any:
    """First element when ``value`` is a list, otherwise the value itself."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


class CommonExtractors:
    def __init__(self, base_url: str = ""):
        self.base_url = base_url
        self.logger = logging.getLogger(f"{__name__}.CommonExtractors")

    def safe_extract_text(self, element: Optional[Union[Tag, BeautifulSoup]],
                          default: str = "", strip: bool = True) -> str:
        if element is None:
            return default
        text = element.get_text(" " if strip else "", strip=strip)
        return text if text else default

    def select_text(self, element: Tag, selectors: Iterable[str], default: str = "") -> str:
        """
        Text of the first selector, in priority order, that matches with content.

        All matches of that selector are joined, the way a combined CSS
        selector reads a card's nested text.
        """
        for selector in selectors:
            matches = element.select(selector)
            text = " ".join(
                self.safe_extract_text(match) for match in matches
            ).strip()
            if text:
                return text
        return default

    def safe_extract_attribute(self, element: Optional[Tag], attribute: str,
                               default: Optional[str] = None) -> Optional[str]:
        if element is None:
            return default
        value = element.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        return value or default

    def first_anchor(self, element: Tag) -> Optional[Tag]:
        if element.name == 'a':
            return element
        return element.find('a')

    def image_src(self, element: Tag) -> Optional[str]:
        img = element.find('img')
        return self.safe_extract_attribute(img, 'src')

    def resolve_url(self, href: Optional[str]) -> Optional[str]:
        return absolute_url(href, self.base_url)


def parse_document(html: Optional[str]) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")
