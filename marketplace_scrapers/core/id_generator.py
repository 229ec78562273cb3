"""
Identity helpers for scraped marketplace entities.

Marketplace URLs carry their identity as a numeric path segment right after a
fixed marker, e.g. ``/production/4855476`` or ``/listing/991``. Every
extractor resolves identities through ``extract_marker_id`` so the pattern
lives in one place.
"""

import itertools
import re
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

PRODUCTION_MARKER = "production"
LISTING_MARKER = "listing"
PERFORMER_MARKER = "performer"

_MARKER_PATTERNS: Dict[str, re.Pattern] = {}


def _pattern_for(marker: str) -> re.Pattern:
    pattern = _MARKER_PATTERNS.get(marker)
    if pattern is None:
        pattern = re.compile(rf'{re.escape(marker)}/(\d+)')
        _MARKER_PATTERNS[marker] = pattern
    return pattern


def extract_marker_id(url: Optional[str], marker: str) -> Optional[str]:
    """Return the digits following ``<marker>/`` in ``url``, or None."""
    if not url or not isinstance(url, str):
        return None
    match = _pattern_for(marker).search(url)
    return match.group(1) if match else None


def extract_production_id(url: Optional[str]) -> Optional[str]:
    return extract_marker_id(url, PRODUCTION_MARKER)


def extract_listing_id(url: Optional[str]) -> Optional[str]:
    return extract_marker_id(url, LISTING_MARKER)


def extract_performer_id(url: Optional[str]) -> Optional[str]:
    return extract_marker_id(url, PERFORMER_MARKER)


def is_valid_production_id(value: Optional[str]) -> bool:
    """Production ids accepted by the public operations are all digits."""
    return bool(value) and str(value).isdigit()


class ListingIdGenerator(ABC):
    """Supplies ids for listings whose source carries no listing URL."""

    @abstractmethod
    def next_id(self) -> str:
        pass


class SequenceListingIdGenerator(ListingIdGenerator):
    """
    Deterministic ids scoped to one generator instance.

    A fresh instance per extraction pass yields ``gen-1``, ``gen-2`` ... so
    repeated runs over the same document produce the same ids.
    """

    def __init__(self, prefix: str = "gen"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


class UuidListingIdGenerator(ListingIdGenerator):
    def next_id(self) -> str:
        return uuid.uuid4().hex


def create_listing_id_generator(strategy: str = "sequence") -> ListingIdGenerator:
    if strategy == "uuid":
        return UuidListingIdGenerator()
    return SequenceListingIdGenerator()
