from .data_schemas import (
    EventRecord,
    PerformerRef,
    ProductionRecord,
    TicketListing,
    ZoneSummary,
    TicketsResult
)

from .deduplication import (
    dedupe,
    dedupe_events,
    dedupe_listings
)

from .id_generator import (
    extract_marker_id,
    extract_production_id,
    extract_listing_id,
    extract_performer_id,
    ListingIdGenerator,
    SequenceListingIdGenerator,
    UuidListingIdGenerator,
    create_listing_id_generator
)

from .request_client import (
    HttpRequestClient,
    RequestConfig,
    RequestResult
)

from .resolution import (
    ResolutionChain,
    ResolutionStrategy,
    ResolutionOutcome
)

__all__ = [
    'EventRecord',
    'PerformerRef',
    'ProductionRecord',
    'TicketListing',
    'ZoneSummary',
    'TicketsResult',
    'dedupe',
    'dedupe_events',
    'dedupe_listings',
    'extract_marker_id',
    'extract_production_id',
    'extract_listing_id',
    'extract_performer_id',
    'ListingIdGenerator',
    'SequenceListingIdGenerator',
    'UuidListingIdGenerator',
    'create_listing_id_generator',
    'HttpRequestClient',
    'RequestConfig',
    'RequestResult',
    'ResolutionChain',
    'ResolutionStrategy',
    'ResolutionOutcome'
]
