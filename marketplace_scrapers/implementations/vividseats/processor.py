"""
VividSeats processor: deduplication, truncation and zone aggregation
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from dateutil import parser

from ...core.data_schemas import EventRecord, TicketListing, TicketsResult, ZoneSummary
from ...core.deduplication import dedupe_events, dedupe_listings
from ...exceptions import AggregationError

logger = logging.getLogger(__name__)


def _event_datetime(record: EventRecord) -> Optional[datetime]:
    if not record.locale_date:
        return None
    try:
        parsed = parser.isoparse(record.locale_date)
    except (ValueError, TypeError, OverflowError):
        try:
            parsed = parser.parse(record.locale_date)
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_events_by_date(records: Sequence[EventRecord]) -> List[EventRecord]:
    """Ascending by start date; undated or unparseable records go last in input order."""
    dated = []
    undated = []
    for record in records:
        when = _event_datetime(record)
        if when is None:
            undated.append(record)
        else:
            dated.append((when, record))
    dated.sort(key=lambda pair: pair[0])
    return [record for _, record in dated] + undated


class VividSeatsProcessor:
    def finalize_events(self, records: Sequence[EventRecord], limit: int) -> List[EventRecord]:
        """Dedupe by production id and keep the first ``limit`` records."""
        unique = dedupe_events(records)
        if len(unique) != len(records):
            logger.debug(f"Deduplicated events: {len(records)} -> {len(unique)}")
        return unique[:max(limit, 0)]

    def build_tickets_result(self, listings: Sequence[TicketListing]) -> TicketsResult:
        unique = dedupe_listings(listings)
        priced = [listing for listing in unique if listing.price is not None]
        if len(priced) != len(unique):
            logger.warning(f"Dropped {len(unique) - len(priced)} listings without a parseable price")

        zones = self.aggregate_zones(priced)
        logger.info(f"Aggregated {len(priced)} listings into {len(zones)} zones")
        return TicketsResult(listings=tuple(priced), zones=tuple(zones))

    def aggregate_zones(self, listings: Sequence[TicketListing]) -> List[ZoneSummary]:
        """Per-zone rollups in order of each zone's first listing."""
        groups: Dict[str, List[TicketListing]] = {}
        for listing in listings:
            groups.setdefault(listing.zone, []).append(listing)

        return [self._summarize_zone(zone, zone_listings) for zone, zone_listings in groups.items()]

    def _summarize_zone(self, zone: str, listings: Sequence[TicketListing]) -> ZoneSummary:
        if not listings:
            raise AggregationError(zone, details="zone has no listings")

        prices = [listing.price for listing in listings if listing.price is not None]
        if not prices:
            raise AggregationError(zone, details="zone has no priced listings")

        return ZoneSummary(
            zone=zone,
            lowest_price=min(prices),
            total_tickets=sum(listing.quantity for listing in listings),
            total_listings=len(listings),
        )
