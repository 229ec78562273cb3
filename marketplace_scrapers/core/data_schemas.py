from typing import Dict, Optional, Any, Tuple
from dataclasses import dataclass, field


@dataclass(frozen=True)
class EventRecord:
    production_id: Optional[str]
    name: str
    locale_date: Optional[str] = None
    venue_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    image_url: Optional[str] = None
    lowest_price: Optional[float] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.production_id,
            "productionId": self.production_id,
            "name": self.name,
            "localeDate": self.locale_date,
            "venueName": self.venue_name,
            "city": self.city,
            "state": self.state,
            "imageUrl": self.image_url,
            "lowestPrice": self.lowest_price,
            "url": self.url,
        }


@dataclass(frozen=True)
class PerformerRef:
    id: str
    name: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "imageUrl": self.image_url}


@dataclass(frozen=True)
class ProductionRecord:
    id: str
    name: Optional[str] = None
    date: Optional[str] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    image_url: Optional[str] = None
    performers: Tuple[PerformerRef, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "venue": self.venue,
            "city": self.city,
            "state": self.state,
            "imageUrl": self.image_url,
            "performers": [performer.to_dict() for performer in self.performers],
        }


@dataclass(frozen=True)
class TicketListing:
    id: str
    zone: str
    section: Optional[str]
    quantity: int
    price: Optional[float]
    row: Optional[str] = None
    score: Optional[float] = None
    attributes: Tuple[str, ...] = ()

    @property
    def dedupe_key(self) -> Tuple[str, Optional[str], Optional[float]]:
        # Heuristic: two distinct listings with the same zone, section and price collide
        return (self.zone, self.section, self.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "zone": self.zone,
            "section": self.section,
            "row": self.row,
            "quantity": self.quantity,
            "price": self.price,
            "score": self.score,
            "attributes": list(self.attributes),
        }


@dataclass(frozen=True)
class ZoneSummary:
    zone: str
    lowest_price: float
    total_tickets: int
    total_listings: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone,
            "lowestPrice": self.lowest_price,
            "totalTickets": self.total_tickets,
            "totalListings": self.total_listings,
        }


@dataclass(frozen=True)
class TicketsResult:
    listings: Tuple[TicketListing, ...] = field(default_factory=tuple)
    zones: Tuple[ZoneSummary, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> 'TicketsResult':
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.listings and not self.zones

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listings": [listing.to_dict() for listing in self.listings],
            "zones": [zone.to_dict() for zone in self.zones],
        }
