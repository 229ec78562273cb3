"""
Marketplace scrapers: collect events, search results, productions and
ticket listings from VividSeats.
"""
from .implementations.vividseats import (
    VividSeatsScraper,
    collect_events,
    collect_search,
    resolve_production,
    resolve_tickets
)

__version__ = "1.0.0"

__all__ = [
    'VividSeatsScraper',
    'collect_events',
    'collect_search',
    'resolve_production',
    'resolve_tickets'
]
