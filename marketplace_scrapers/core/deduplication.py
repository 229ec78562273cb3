from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

from .data_schemas import EventRecord, TicketListing

T = TypeVar('T')


def dedupe(records: Iterable[T], key: Callable[[T], Optional[Hashable]]) -> List[T]:
    """
    Keep the first record seen for each identity, preserving input order.

    Records whose identity resolves to None are dropped. Running the result
    through again returns it unchanged.
    """
    seen = set()
    unique: List[T] = []
    for record in records:
        identity = key(record)
        if identity is None or identity in seen:
            continue
        seen.add(identity)
        unique.append(record)
    return unique


def event_identity(record: EventRecord) -> Optional[str]:
    return record.production_id or None


def listing_identity(listing: TicketListing):
    return listing.dedupe_key


def dedupe_events(records: Iterable[EventRecord]) -> List[EventRecord]:
    return dedupe(records, event_identity)


def dedupe_listings(listings: Iterable[TicketListing]) -> List[TicketListing]:
    return dedupe(listings, listing_identity)
