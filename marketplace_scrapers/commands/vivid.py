#!/usr/bin/env python3
"""
Query the VividSeats pipeline from the command line and print JSON.

    vivid-scraper events --limit 5
    vivid-scraper search "hamilton"
    vivid-scraper production 4855476
    vivid-scraper tickets 4855476 --quantity 2
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from ..config.settings import DEFAULT_EVENT_LIMIT, ScraperSettings, configure_logging
from ..core.data_schemas import ProductionRecord
from ..core.id_generator import is_valid_production_id
from ..implementations.vividseats import VividSeatsScraper, sort_events_by_date


def _production_id(value: str) -> str:
    if not is_valid_production_id(value):
        raise argparse.ArgumentTypeError("Invalid production ID")
    return value


def _query(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("Query parameter 'q' is required")
    return value.strip()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError("Value must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vivid-scraper',
        description='Scrape events, productions and tickets from VividSeats'
    )
    parser.add_argument('--log-level', default=None, help='Override SCRAPER_LOG_LEVEL')
    subparsers = parser.add_subparsers(dest='command', required=True)

    events = subparsers.add_parser('events', help='Home feed events')
    events.add_argument('--limit', type=_positive_int, default=DEFAULT_EVENT_LIMIT)
    events.add_argument('--sort', choices=['date', 'none'], default='date',
                        help='Sort by start date, undated events last')

    search = subparsers.add_parser('search', help='Search events by query')
    search.add_argument('query', type=_query)
    search.add_argument('--limit', type=_positive_int, default=DEFAULT_EVENT_LIMIT)

    production = subparsers.add_parser('production', help='Resolve a single production')
    production.add_argument('production_id', type=_production_id)

    tickets = subparsers.add_parser('tickets', help='Ticket listings and zone summaries')
    tickets.add_argument('production_id', type=_production_id)
    tickets.add_argument('--quantity', type=_positive_int, default=1)

    return parser


async def handle(options: argparse.Namespace, scraper: VividSeatsScraper):
    """Run the selected command; returns (payload, exit_code)."""
    if options.command == 'events':
        events = await scraper.collect_events(options.limit)
        if options.sort == 'date':
            events = sort_events_by_date(events)
        return {"events": [event.to_dict() for event in events]}, 0

    if options.command == 'search':
        events = await scraper.collect_search(options.query, options.limit)
        return {"events": [event.to_dict() for event in events]}, 0

    if options.command == 'production':
        production = await scraper.resolve_production(options.production_id)
        if not production:
            return {"message": "Production not found"}, 1
        if isinstance(production, ProductionRecord):
            return production.to_dict(), 0
        return production, 0

    tickets = await scraper.resolve_tickets(options.production_id, options.quantity)
    return tickets.to_dict(), 0


def main(argv: Optional[List[str]] = None, scraper: Optional[VividSeatsScraper] = None) -> int:
    parser = build_parser()
    options = parser.parse_args(argv)

    configure_logging()
    if options.log_level:
        logging.getLogger('marketplace_scrapers').setLevel(options.log_level.upper())

    scraper = scraper or VividSeatsScraper(ScraperSettings.from_env())
    payload, exit_code = asyncio.run(handle(options, scraper))
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")
    return exit_code


if __name__ == '__main__':
    sys.exit(main())
