"""
VividSeats scraper implementation
"""
from .scraper import (
    VividSeatsScraper,
    collect_events,
    collect_search,
    resolve_production,
    resolve_tickets
)
from .extractor import JsonLdExtractor, DomCardExtractor, run_strategies
from .processor import VividSeatsProcessor, sort_events_by_date

__all__ = [
    'VividSeatsScraper',
    'JsonLdExtractor',
    'DomCardExtractor',
    'VividSeatsProcessor',
    'run_strategies',
    'sort_events_by_date',
    'collect_events',
    'collect_search',
    'resolve_production',
    'resolve_tickets'
]
