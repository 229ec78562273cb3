"""
VividSeats page extractors.

Two strategies read the same parsed document: JSON-LD structured data
(preferred) and a DOM scan of visible cards. Both are pure functions of the
document so collectors can run them in priority order.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from ...core.data_schemas import EventRecord, PerformerRef, ProductionRecord, TicketListing
from ...core.id_generator import (
    ListingIdGenerator, PRODUCTION_MARKER,
    extract_listing_id, extract_performer_id, extract_production_id
)
from ...exceptions import StructuredDataException
from ...utils.common_extractors import CommonExtractors, extract_price, first_of, parse_price

logger = logging.getLogger(__name__)

Strategy = Callable[[BeautifulSoup], List[Any]]

DEFAULT_ZONE = "General"


def run_strategies(document: BeautifulSoup, strategies: Sequence[Strategy], threshold: int) -> List[Any]:
    """
    Run extraction strategies in priority order.

    The first strategy always runs; each later one runs only while fewer than
    ``threshold`` records have been collected, and its records are appended.
    """
    records: List[Any] = []
    for index, strategy in enumerate(strategies):
        if index > 0 and len(records) >= threshold:
            break
        records.extend(strategy(document))
    return records


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get('name') or value.get('url')
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _is_event(obj: Any) -> bool:
    return isinstance(obj, dict) and "Event" in _as_list(obj.get('@type'))


class JsonLdExtractor:
    SCRIPT_SELECTOR = 'script[type="application/ld+json"]'

    def __init__(self, page_url: str = ""):
        self.page_url = page_url

    def blocks(self, document: BeautifulSoup) -> List[Any]:
        """Decoded payload of every JSON-LD script; malformed ones are skipped."""
        payloads = []
        for script in document.select(self.SCRIPT_SELECTOR):
            try:
                payloads.append(self._decode(script))
            except StructuredDataException as e:
                logger.debug(f"Skipping JSON-LD block: {e.message} ({e.details})")
        return payloads

    def first_block(self, document: BeautifulSoup) -> Optional[Any]:
        """Decoded payload of the first JSON-LD script, or None when there is none."""
        script = document.select_one(self.SCRIPT_SELECTOR)
        if script is None:
            return None
        return self._decode(script)

    def _decode(self, script: Tag) -> Any:
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            raise StructuredDataException(self.page_url, details="empty script")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StructuredDataException(self.page_url, details=str(e))

    @staticmethod
    def _objects(payload: Any) -> List[Any]:
        if isinstance(payload, dict) and isinstance(payload.get('@graph'), list):
            return payload['@graph']
        return _as_list(payload)

    # Events

    def events(self, document: BeautifulSoup) -> List[EventRecord]:
        """First Event object of each block, records without identity included."""
        records = []
        for payload in self.blocks(document):
            event = next((obj for obj in self._objects(payload) if _is_event(obj)), None)
            if event is None:
                continue
            record = self._event_record(event)
            if record is not None:
                records.append(record)
        logger.debug(f"JSON-LD events: {len(records)} records")
        return records

    def search_events(self, document: BeautifulSoup) -> List[EventRecord]:
        """Only the first object of each block, and only records with an identity."""
        records = []
        for payload in self.blocks(document):
            obj = first_of(self._objects(payload))
            if not _is_event(obj):
                continue
            record = self._event_record(obj)
            if record is not None and record.production_id:
                records.append(record)
        logger.debug(f"JSON-LD search events: {len(records)} records")
        return records

    def _event_record(self, event: Dict[str, Any]) -> Optional[EventRecord]:
        name = _text_or_none(event.get('name'))
        start_date = _text_or_none(event.get('startDate'))
        if not name or not start_date:
            return None

        offers = first_of(event.get('offers'))
        offers = offers if isinstance(offers, dict) else {}
        location = first_of(event.get('location'))
        location = location if isinstance(location, dict) else {}
        address = location.get('address')
        address = address if isinstance(address, dict) else {}

        url = _text_or_none(event.get('url')) or _text_or_none(offers.get('url'))

        return EventRecord(
            production_id=extract_production_id(url),
            name=name,
            locale_date=start_date,
            venue_name=_text_or_none(location.get('name')),
            city=_text_or_none(address.get('addressLocality')),
            state=_text_or_none(address.get('addressRegion')),
            image_url=_text_or_none(first_of(event.get('image'))),
            lowest_price=extract_price(offers.get('lowPrice')),
            url=url,
        )

    # Productions

    def production(self, document: BeautifulSoup, production_id: str) -> Optional[ProductionRecord]:
        """
        Normalize the page's first JSON-LD block into a ProductionRecord.

        Returns None when the page has no block or the block is not an Event;
        raises StructuredDataException when the block is not valid JSON.
        """
        event = first_of(self.first_block(document))
        if not _is_event(event):
            return None

        location = first_of(event.get('location'))
        location = location if isinstance(location, dict) else {}
        address = location.get('address')
        address = address if isinstance(address, dict) else {}

        performers = []
        for performer in _as_list(event.get('performer')):
            if not isinstance(performer, dict):
                continue
            performers.append(PerformerRef(
                id=extract_performer_id(_text_or_none(performer.get('url'))) or '',
                name=_text_or_none(performer.get('name')),
                image_url=_text_or_none(first_of(performer.get('image'))),
            ))

        return ProductionRecord(
            id=str(production_id),
            name=_text_or_none(event.get('name')),
            date=_text_or_none(event.get('startDate')),
            venue=_text_or_none(location.get('name')),
            city=_text_or_none(address.get('addressLocality')),
            state=_text_or_none(address.get('addressRegion')),
            image_url=_text_or_none(first_of(event.get('image'))),
            performers=tuple(performers),
        )

    # Listings

    def listings(self, document: BeautifulSoup, quantity: int,
                 id_generator: ListingIdGenerator) -> List[TicketListing]:
        """One listing per offer carrying both a price and an availability."""
        listings = []
        for payload in self.blocks(document):
            for obj in self._objects(payload):
                if not isinstance(obj, dict) or not obj.get('offers'):
                    continue
                for offer in _as_list(obj['offers']):
                    if not isinstance(offer, dict):
                        continue
                    if not offer.get('price') or not offer.get('availability'):
                        continue
                    area = _text_or_none(offer.get('areaServed'))
                    listings.append(TicketListing(
                        id=extract_listing_id(_text_or_none(offer.get('url'))) or id_generator.next_id(),
                        zone=area or DEFAULT_ZONE,
                        section=area,
                        row=None,
                        quantity=quantity,
                        price=extract_price(offer.get('price')),
                        score=None,
                        attributes=(),
                    ))
        logger.debug(f"JSON-LD listings: {len(listings)} offers")
        return listings


class DomCardExtractor:
    EVENT_CARD_SELECTORS = (
        '.event-card',
        '[data-testid="event-card"]',
        f'a[href*="/{PRODUCTION_MARKER}/"]',
    )
    EVENT_TITLE_SELECTORS = ('h3', '.event-title', '[data-testid="event-title"]')
    SEARCH_RESULT_SELECTORS = (f'a[href*="/{PRODUCTION_MARKER}/"]',)
    SEARCH_TITLE_SELECTORS = ('h3', '.title', '[data-testid="title"]')
    VENUE_SELECTORS = ('.venue', '[data-testid="venue"]')
    PRICE_SELECTORS = ('.price', '[data-testid="price"]')

    LISTING_CARD_SELECTORS = ('.listing-card', '[data-testid="listing"]')
    SECTION_SELECTORS = ('.section', '[data-testid="section"]')
    ZONE_SELECTORS = ('.zone', '[data-testid="zone"]')
    ROW_SELECTORS = ('.row',)
    BADGE_SELECTORS = ('.badge', '[data-testid="badge"]')

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.common = CommonExtractors(base_url)

    def _candidates(self, document: BeautifulSoup, selectors: Sequence[str],
                    identity: Optional[Callable[[Tag], Optional[str]]] = None) -> List[Tag]:
        """
        Elements matched by each selector in priority order.

        An element nested in an earlier candidate is skipped when it resolves
        to the same identity as that candidate, or always when no ``identity``
        is given.
        """
        candidates: List[Tag] = []
        seen: Dict[int, Optional[str]] = {}
        for selector in selectors:
            for element in document.select(selector):
                if id(element) in seen:
                    continue
                key = identity(element) if identity else None
                enclosing = [seen[id(parent)] for parent in element.parents if id(parent) in seen]
                if enclosing and (identity is None or key in enclosing):
                    continue
                seen[id(element)] = key
                candidates.append(element)
        return candidates

    def _production_identity(self, element: Tag) -> Optional[str]:
        return extract_production_id(self._production_url(element))

    def _production_url(self, element: Tag) -> Optional[str]:
        anchor = self.common.first_anchor(element)
        href = self.common.safe_extract_attribute(anchor, 'href')
        if not href or f'/{PRODUCTION_MARKER}/' not in href:
            return None
        return self.common.resolve_url(href)

    def events(self, document: BeautifulSoup) -> List[EventRecord]:
        records = []
        for element in self._candidates(document, self.EVENT_CARD_SELECTORS, self._production_identity):
            url = self._production_url(element)
            production_id = extract_production_id(url)
            if not production_id:
                continue

            records.append(EventRecord(
                production_id=production_id,
                name=self.common.select_text(element, self.EVENT_TITLE_SELECTORS) or 'Event',
                locale_date=None,
                venue_name=self.common.select_text(element, self.VENUE_SELECTORS) or None,
                city=None,
                state=None,
                image_url=self.common.image_src(element),
                lowest_price=parse_price(self.common.select_text(element, self.PRICE_SELECTORS)),
                url=url,
            ))
        logger.debug(f"DOM events: {len(records)} cards")
        return records

    def search_results(self, document: BeautifulSoup) -> List[EventRecord]:
        records = []
        for anchor in self._candidates(document, self.SEARCH_RESULT_SELECTORS):
            url = self._production_url(anchor)
            production_id = extract_production_id(url)
            if not production_id:
                continue

            title = (self.common.select_text(anchor, self.SEARCH_TITLE_SELECTORS)
                     or self.common.safe_extract_text(anchor))
            records.append(EventRecord(
                production_id=production_id,
                name=title.split('|')[0].strip() or 'Event',
                locale_date=None,
                venue_name=self.common.select_text(anchor, self.VENUE_SELECTORS) or None,
                city=None,
                state=None,
                image_url=self.common.image_src(anchor),
                lowest_price=parse_price(self.common.select_text(anchor, self.PRICE_SELECTORS)),
                url=url,
            ))
        logger.debug(f"DOM search results: {len(records)} anchors")
        return records

    def listings(self, document: BeautifulSoup, quantity: int,
                 id_generator: ListingIdGenerator) -> List[TicketListing]:
        listings = []
        for card in self._candidates(document, self.LISTING_CARD_SELECTORS):
            section = self.common.select_text(card, self.SECTION_SELECTORS) or None
            zone = self.common.select_text(card, self.ZONE_SELECTORS) or section or DEFAULT_ZONE
            anchor = self.common.first_anchor(card)
            listing_id = extract_listing_id(self.common.safe_extract_attribute(anchor, 'href'))
            badges = tuple(
                self.common.safe_extract_text(badge)
                for selector in self.BADGE_SELECTORS
                for badge in card.select(selector)
                if self.common.safe_extract_text(badge)
            )

            listings.append(TicketListing(
                id=listing_id or id_generator.next_id(),
                zone=zone,
                section=section,
                row=self.common.select_text(card, self.ROW_SELECTORS) or None,
                quantity=quantity,
                price=parse_price(self.common.select_text(card, self.PRICE_SELECTORS)),
                score=None,
                attributes=badges,
            ))
        logger.debug(f"DOM listings: {len(listings)} cards")
        return listings
