"""
Tests for VividSeats scraper implementation
"""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from .extractor import DomCardExtractor, JsonLdExtractor, run_strategies
from .processor import VividSeatsProcessor, sort_events_by_date
from .scraper import VividSeatsScraper
from ...config.settings import ScraperSettings
from ...core.data_schemas import EventRecord, ProductionRecord, TicketListing, TicketsResult
from ...core.id_generator import SequenceListingIdGenerator
from ...exceptions import AggregationError, NetworkException, StructuredDataException, TimeoutException
from ...utils.common_extractors import parse_document

BASE = "https://www.vividseats.com"


class StubClient:
    """Serves canned bodies by URL; unknown URLs fail like a 404."""

    def __init__(self, pages=None, json_payloads=None, errors=None):
        self.pages = pages or {}
        self.json_payloads = json_payloads or {}
        self.errors = errors or {}
        self.calls = []

    async def get_text(self, url, params=None, accept=None):
        self.calls.append((url, params))
        if url in self.errors:
            raise self.errors[url]
        if url not in self.pages:
            raise NetworkException(f"GET {url} returned status 404", status_code=404)
        return self.pages[url]

    async def get_json(self, url, params=None):
        self.calls.append((url, params))
        if url in self.errors:
            raise self.errors[url]
        if url not in self.json_payloads:
            raise NetworkException(f"GET {url} returned status 404", status_code=404)
        return self.json_payloads[url]


def ld_script(payload):
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    return f'<script type="application/ld+json">{raw}</script>'


def page(*parts):
    return "<html><head></head><body>" + "".join(parts) + "</body></html>"


def event_block(production_id, name=None, start="2025-07-31T19:30:00", **extra):
    block = {
        "@context": "https://schema.org",
        "@type": "Event",
        "name": name or f"Event {production_id}",
        "startDate": start,
        "url": f"{BASE}/some-show-tickets/production/{production_id}",
        "location": {
            "@type": "Place",
            "name": "Bass Performance Hall",
            "address": {"addressLocality": "Fort Worth", "addressRegion": "TX"},
        },
        "image": [f"https://img.vividseats.com/{production_id}.jpg", "https://img.vividseats.com/other.jpg"],
        "offers": {"@type": "AggregateOffer", "lowPrice": "$1,234.50"},
    }
    block.update(extra)
    return block


def event_card(production_id, title="Card Show", venue="The Venue", price="$45"):
    return (
        f'<div class="event-card">'
        f'<a href="/card-show-tickets/production/{production_id}"><img src="/img/{production_id}.png"></a>'
        f'<h3>{title}</h3><span class="venue">{venue}</span><span class="price">{price}</span>'
        f'</div>'
    )


def make_scraper(client, **settings):
    return VividSeatsScraper(
        settings=ScraperSettings(base_url=BASE, **settings),
        client=client,
        id_generator_factory=SequenceListingIdGenerator,
    )


class TestJsonLdExtractor:

    @pytest.fixture
    def extractor(self):
        return JsonLdExtractor(BASE)

    def test_event_fields(self, extractor):
        document = parse_document(page(ld_script(event_block("4855476", name="Shucked"))))
        [record] = extractor.events(document)

        assert record == EventRecord(
            production_id="4855476",
            name="Shucked",
            locale_date="2025-07-31T19:30:00",
            venue_name="Bass Performance Hall",
            city="Fort Worth",
            state="TX",
            image_url="https://img.vividseats.com/4855476.jpg",
            lowest_price=1234.50,
            url=f"{BASE}/some-show-tickets/production/4855476",
        )

    def test_url_falls_back_to_offer_url(self, extractor):
        block = event_block("1")
        del block["url"]
        block["offers"] = {"url": f"{BASE}/x/production/77", "lowPrice": 20}
        [record] = extractor.events(parse_document(page(ld_script(block))))
        assert record.production_id == "77"
        assert record.lowest_price == 20.0

    def test_block_without_name_or_start_date_is_skipped(self, extractor):
        no_name = event_block("1")
        del no_name["name"]
        no_date = event_block("2")
        del no_date["startDate"]
        document = parse_document(page(ld_script(no_name), ld_script(no_date), ld_script(event_block("3"))))
        assert [r.production_id for r in extractor.events(document)] == ["3"]

    def test_malformed_block_does_not_stop_the_others(self, extractor):
        document = parse_document(page(
            ld_script(event_block("1")),
            ld_script('{"@type": "Event", "name": '),
            ld_script(event_block("2")),
            ld_script(event_block("3")),
        ))
        assert [r.production_id for r in extractor.events(document)] == ["1", "2", "3"]

    def test_non_event_types_are_ignored(self, extractor):
        document = parse_document(page(
            ld_script({"@type": "Organization", "name": "Vivid Seats"}),
            ld_script(event_block("5")),
        ))
        assert [r.production_id for r in extractor.events(document)] == ["5"]

    def test_array_and_graph_blocks_yield_first_event(self, extractor):
        document = parse_document(page(
            ld_script([{"@type": "BreadcrumbList"}, event_block("10"), event_block("11")]),
            ld_script({"@graph": [event_block("12"), event_block("13")]}),
        ))
        assert [r.production_id for r in extractor.events(document)] == ["10", "12"]

    def test_array_block_counts_once_toward_threshold(self, extractor):
        document = parse_document(page(
            ld_script([event_block("1"), event_block("2"), event_block("3")]),
            event_card("4"),
        ))
        records = run_strategies(document, [extractor.events, DomCardExtractor(BASE).events], threshold=3)
        assert [r.production_id for r in records] == ["1", "4"]

    def test_search_events_use_first_object_only(self, extractor):
        document = parse_document(page(
            ld_script([event_block("20"), event_block("21")]),
            ld_script([{"@type": "BreadcrumbList"}, event_block("22")]),
        ))
        assert [r.production_id for r in extractor.search_events(document)] == ["20"]

    def test_search_events_require_identity(self, extractor):
        block = event_block("1", url="https://www.vividseats.com/no-id-here")
        assert extractor.search_events(parse_document(page(ld_script(block)))) == []

    def test_production_normalization(self, extractor):
        block = event_block("4855476", name="Shucked", performer=[
            {"name": "Shucked", "url": f"{BASE}/shucked-tickets--theater/performer/1234", "image": "p.jpg"},
            {"name": "Guest"},
        ])
        record = extractor.production(parse_document(page(ld_script(block))), "4855476")

        assert isinstance(record, ProductionRecord)
        assert record.id == "4855476"
        assert record.venue == "Bass Performance Hall"
        assert record.date == "2025-07-31T19:30:00"
        assert [(p.id, p.name, p.image_url) for p in record.performers] == [
            ("1234", "Shucked", "p.jpg"), ("", "Guest", None)
        ]

    def test_production_requires_event_first_block(self, extractor):
        document = parse_document(page(ld_script({"@type": "Organization"}), ld_script(event_block("1"))))
        assert extractor.production(document, "1") is None
        assert extractor.production(parse_document(page()), "1") is None

    def test_production_with_invalid_json_raises(self, extractor):
        with pytest.raises(StructuredDataException):
            extractor.production(parse_document(page(ld_script("{nope"))), "1")

    def test_listings_from_offers(self, extractor):
        block = {"@type": "Event", "offers": [
            {"price": "100", "availability": "InStock", "areaServed": "Orchestra",
             "url": f"{BASE}/listing/555"},
            {"price": "80", "availability": "InStock"},
            {"price": "60"},
            {"availability": "InStock"},
        ]}
        listings = extractor.listings(parse_document(page(ld_script(block))), 2, SequenceListingIdGenerator())

        assert listings == [
            TicketListing(id="555", zone="Orchestra", section="Orchestra", quantity=2, price=100.0),
            TicketListing(id="gen-1", zone="General", section=None, quantity=2, price=80.0),
        ]


class TestDomCardExtractor:

    @pytest.fixture
    def extractor(self):
        return DomCardExtractor(BASE)

    def test_event_cards(self, extractor):
        document = parse_document(page(event_card("901", title="Hamilton", price="$1,299.99")))
        [record] = extractor.events(document)

        assert record.production_id == "901"
        assert record.name == "Hamilton"
        assert record.venue_name == "The Venue"
        assert record.lowest_price == 1299.99
        assert record.url == f"{BASE}/card-show-tickets/production/901"
        assert record.image_url == "/img/901.png"
        assert record.locale_date is None

    def test_nested_anchor_is_not_a_second_candidate(self, extractor):
        document = parse_document(page(event_card("901"), event_card("902")))
        assert [r.production_id for r in extractor.events(document)] == ["901", "902"]

    def test_card_with_two_productions_yields_both(self, extractor):
        document = parse_document(page(
            '<div class="event-card">'
            '<a href="/show-tickets/production/1"><h3>Evening</h3></a>'
            '<a href="/show-tickets/production/2"><h3>Matinee</h3></a>'
            '</div>'
        ))
        records = extractor.events(document)
        assert [r.production_id for r in records] == ["1", "2"]
        assert records[1].name == "Matinee"

    def test_bare_anchors_and_testid_cards(self, extractor):
        document = parse_document(page(
            '<div data-testid="event-card"><a href="https://www.vividseats.com/x/production/3">x</a>'
            '<span data-testid="event-title">Test Id Show</span></div>',
            '<a href="/y/production/4"><h3>Anchor Show</h3></a>',
            '<a href="/performers/5">not a production</a>',
            '<div class="event-card"><a href="/z/production/abc">no id</a></div>',
        ))
        records = extractor.events(document)
        assert [(r.production_id, r.name) for r in records] == [("3", "Test Id Show"), ("4", "Anchor Show")]

    def test_untitled_card_defaults_to_event(self, extractor):
        document = parse_document(page('<div class="event-card"><a href="/production/8">-</a></div>'))
        [record] = extractor.events(document)
        assert record.name == "Event"
        assert record.lowest_price is None

    def test_search_results_title_before_pipe(self, extractor):
        document = parse_document(page(
            '<a href="/taylor-swift-tickets/production/11">Taylor Swift | Eras Tour | Aug 1</a>',
            '<a href="/production/12"><span class="title">Hamilton</span><span class="price">$99</span></a>',
        ))
        records = extractor.search_results(document)
        assert [(r.production_id, r.name, r.lowest_price) for r in records] == [
            ("11", "Taylor Swift", None), ("12", "Hamilton", 99.0)
        ]

    def test_listing_cards(self, extractor):
        document = parse_document(page(
            '<div class="listing-card"><a href="/listing/42">view</a>'
            '<span class="zone">Mezzanine</span><span class="section">M1</span>'
            '<span class="row">C</span><span class="price">$120</span>'
            '<span class="badge">Great Deal</span></div>',
            '<div data-testid="listing"><span data-testid="section">101</span>'
            '<span data-testid="price">$80</span></div>',
            '<div class="listing-card"><span class="price">$20</span></div>',
        ))
        listings = extractor.listings(document, 3, SequenceListingIdGenerator())

        assert listings == [
            TicketListing(id="42", zone="Mezzanine", section="M1", row="C", quantity=3, price=120.0,
                          attributes=("Great Deal",)),
            TicketListing(id="gen-1", zone="General", section=None, quantity=3, price=20.0),
            TicketListing(id="gen-2", zone="101", section="101", quantity=3, price=80.0),
        ]


class TestRunStrategies:

    def test_fallback_runs_below_threshold(self):
        result = run_strategies(None, [lambda _: [1, 2], lambda _: [3]], threshold=3)
        assert result == [1, 2, 3]

    def test_fallback_skipped_at_threshold(self):
        result = run_strategies(None, [lambda _: [1, 2, 3], lambda _: [4]], threshold=3)
        assert result == [1, 2, 3]

    def test_zero_gate(self):
        assert run_strategies(None, [lambda _: [], lambda _: ["dom"]], threshold=1) == ["dom"]
        assert run_strategies(None, [lambda _: ["ld"], lambda _: ["dom"]], threshold=1) == ["ld"]


class TestVividSeatsProcessor:

    @pytest.fixture
    def processor(self):
        return VividSeatsProcessor()

    def test_finalize_events_dedupes_and_truncates(self, processor):
        records = [EventRecord("1", "a"), EventRecord(None, "b"), EventRecord("1", "c"), EventRecord("2", "d")]
        assert [r.name for r in processor.finalize_events(records, 5)] == ["a", "d"]
        assert [r.name for r in processor.finalize_events(records, 1)] == ["a"]
        assert processor.finalize_events(records, 0) == []

    def test_aggregate_zones(self, processor):
        listings = [
            TicketListing("1", "Floor", "A", quantity=2, price=300.0),
            TicketListing("2", "Balcony", "B", quantity=4, price=50.0),
            TicketListing("3", "Floor", "C", quantity=1, price=250.0),
        ]
        zones = processor.aggregate_zones(listings)
        assert [(z.zone, z.lowest_price, z.total_tickets, z.total_listings) for z in zones] == [
            ("Floor", 250.0, 3, 2), ("Balcony", 50.0, 4, 1)
        ]

    def test_empty_zone_is_an_error(self, processor):
        with pytest.raises(AggregationError):
            processor._summarize_zone("Floor", [])

    def test_unpriced_zone_is_an_error(self, processor):
        with pytest.raises(AggregationError):
            processor._summarize_zone("Floor", [TicketListing("1", "Floor", None, quantity=1, price=None)])

    def test_build_tickets_result_drops_unpriced_listings(self, processor):
        listings = [
            TicketListing("1", "A", "A", quantity=1, price=None),
            TicketListing("2", "A", "A", quantity=1, price=10.0),
        ]
        result = processor.build_tickets_result(listings)
        assert [l.id for l in result.listings] == ["2"]
        assert result.zones[0].lowest_price == 10.0

    def test_sort_events_by_date(self):
        records = [
            EventRecord("1", "late", locale_date="2025-09-01T20:00:00"),
            EventRecord("2", "undated"),
            EventRecord("3", "early", locale_date="2025-08-01T19:00:00-05:00"),
            EventRecord("4", "garbage", locale_date="not a date"),
        ]
        assert [r.name for r in sort_events_by_date(records)] == ["early", "late", "undated", "garbage"]


class TestCollectEvents:

    @pytest.mark.asyncio
    async def test_limit_keeps_first_seen_order(self):
        html = page(*[ld_script(event_block(str(100 + i))) for i in range(8)])
        scraper = make_scraper(StubClient(pages={BASE: html}))

        events = await scraper.collect_events(5)
        assert [e.production_id for e in events] == ["100", "101", "102", "103", "104"]

    @pytest.mark.asyncio
    async def test_dom_fallback_below_threshold(self):
        html = page(
            ld_script(event_block("1")),
            ld_script(event_block("2")),
            event_card("2"),
            event_card("3"),
        )
        scraper = make_scraper(StubClient(pages={BASE: html}))

        events = await scraper.collect_events(12)
        assert [(e.production_id, e.name) for e in events] == [
            ("1", "Event 1"), ("2", "Event 2"), ("3", "Card Show")
        ]

    @pytest.mark.asyncio
    async def test_no_dom_fallback_at_threshold(self):
        html = page(*[ld_script(event_block(str(i))) for i in range(3)], event_card("99"))
        scraper = make_scraper(StubClient(pages={BASE: html}))

        events = await scraper.collect_events(12)
        assert "99" not in [e.production_id for e in events]

    @pytest.mark.asyncio
    async def test_every_record_has_unique_identity(self):
        no_id = event_block("1", url="https://www.vividseats.com/no-id")
        html = page(ld_script(no_id), ld_script(event_block("5")), ld_script(event_block("5")))
        scraper = make_scraper(StubClient(pages={BASE: html}))

        events = await scraper.collect_events(12)
        ids = [e.production_id for e in events]
        assert ids == ["5"]

    @pytest.mark.asyncio
    async def test_default_limit_from_settings(self):
        html = page(*[ld_script(event_block(str(i))) for i in range(6)])
        scraper = make_scraper(StubClient(pages={BASE: html}), default_limit=4)
        assert len(await scraper.collect_events()) == 4

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_empty(self):
        client = StubClient(errors={BASE: TimeoutException("GET timed out")})
        assert await make_scraper(client).collect_events(5) == []

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_empty(self):
        client = StubClient(errors={BASE: RuntimeError("boom")})
        assert await make_scraper(client).collect_events(5) == []

    def test_scraper_logs_under_package_logger(self):
        scraper = make_scraper(StubClient())
        assert scraper.logger.name == "marketplace_scrapers.implementations.vividseats.scraper.VividSeatsScraper"
        assert scraper.production_chain.logger is scraper.logger


class TestCollectSearch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_blank_query_makes_no_request(self, query):
        client = StubClient()
        assert await make_scraper(client).collect_search(query, 12) == []
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_structured_results(self):
        html = page(ld_script(event_block("31", name="Hamilton")), ld_script(event_block("31")))
        client = StubClient(pages={f"{BASE}/search": html})

        events = await make_scraper(client).collect_search("  hamilton ", 12)
        assert [(e.production_id, e.name) for e in events] == [("31", "Hamilton")]
        assert client.calls == [(f"{BASE}/search", {"searchTerm": "hamilton"})]

    @pytest.mark.asyncio
    async def test_dom_fallback_when_no_structured_results(self):
        html = page(
            ld_script({"@type": "WebSite"}),
            '<a href="/hamilton-tickets/production/41">Hamilton | Richard Rodgers</a>',
            '<a href="/hamilton-tickets/production/41">Hamilton again</a>',
            '<a href="/hamilton-tickets/production/42"><h3>Hamilton Matinee</h3></a>',
        )
        client = StubClient(pages={f"{BASE}/search": html})

        events = await make_scraper(client).collect_search("hamilton", 1)
        assert [(e.production_id, e.name) for e in events] == [("41", "Hamilton")]

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self):
        assert await make_scraper(StubClient()).collect_search("hamilton", 12) == []


class TestResolveProduction:

    @pytest.mark.asyncio
    async def test_api_payload_is_returned_verbatim(self):
        payload = {"id": 4855476, "name": "Shucked", "performers": [{"id": 1}]}
        client = StubClient(json_payloads={f"{BASE}/api/production/4855476": payload})

        result = await make_scraper(client).resolve_production("4855476")
        assert result is payload
        assert [url for url, _ in client.calls] == [f"{BASE}/api/production/4855476"]

    @pytest.mark.asyncio
    async def test_html_fallback_when_api_fails(self):
        html = page(ld_script(event_block("7", name="Wicked", performer={
            "name": "Wicked", "url": f"{BASE}/wicked-tickets/performer/99"
        })))
        client = StubClient(pages={f"{BASE}/production/7": html})

        result = await make_scraper(client).resolve_production(7)
        assert isinstance(result, ProductionRecord)
        assert result.name == "Wicked"
        assert result.performers[0].id == "99"
        assert [url for url, _ in client.calls] == [f"{BASE}/api/production/7", f"{BASE}/production/7"]

    @pytest.mark.asyncio
    async def test_none_when_both_phases_miss(self):
        client = StubClient(pages={f"{BASE}/production/7": page("<p>no data</p>")})
        assert await make_scraper(client).resolve_production("7") is None

    @pytest.mark.asyncio
    async def test_none_when_html_block_is_not_event(self):
        client = StubClient(pages={f"{BASE}/production/7": page(ld_script({"@type": "Organization"}))})
        assert await make_scraper(client).resolve_production("7") is None

    @pytest.mark.asyncio
    async def test_empty_api_payload_falls_back(self):
        client = StubClient(
            json_payloads={f"{BASE}/api/production/7": {}},
            pages={f"{BASE}/production/7": page(ld_script(event_block("7")))},
        )
        assert isinstance(await make_scraper(client).resolve_production("7"), ProductionRecord)

    @pytest.mark.asyncio
    async def test_both_phases_attempted_on_every_call(self):
        client = StubClient()
        scraper = make_scraper(client)
        assert await scraper.resolve_production("7") is None
        assert await scraper.resolve_production("7") is None
        assert len(client.calls) == 4

    @pytest.mark.asyncio
    async def test_invalid_id_makes_no_request(self):
        client = StubClient()
        assert await make_scraper(client).resolve_production("12ab") is None
        assert client.calls == []


class TestResolveTickets:

    TICKETS_URL = f"{BASE}/production/55/tickets"

    @pytest.mark.asyncio
    async def test_dedupes_and_aggregates_offers(self):
        block = {"@type": "Event", "name": "Show", "offers": [
            {"price": 100, "availability": "https://schema.org/InStock", "areaServed": "A"},
            {"price": 100, "availability": "https://schema.org/InStock", "areaServed": "A"},
            {"price": 50, "availability": "https://schema.org/InStock", "areaServed": "B"},
        ]}
        client = StubClient(pages={self.TICKETS_URL: page(ld_script(block))})

        result = await make_scraper(client).resolve_tickets("55", 2)

        assert len(result.listings) == 2
        assert [(z.zone, z.lowest_price, z.total_listings, z.total_tickets) for z in result.zones] == [
            ("A", 100.0, 1, 2), ("B", 50.0, 1, 2)
        ]
        assert client.calls == [(self.TICKETS_URL, {"quantity": 2})]

    @pytest.mark.asyncio
    async def test_dom_fallback_when_no_offers(self):
        html = page(
            '<div class="listing-card"><span class="section">101</span><span class="price">$75</span></div>',
            '<div class="listing-card"><span class="section">101</span><span class="price">$60</span></div>',
            '<div class="listing-card"><span class="section">101</span><span class="price">$60</span></div>',
        )
        client = StubClient(pages={self.TICKETS_URL: html})

        result = await make_scraper(client).resolve_tickets("55")
        assert [(l.id, l.price) for l in result.listings] == [("gen-1", 75.0), ("gen-2", 60.0)]
        assert [(z.zone, z.lowest_price, z.total_tickets, z.total_listings) for z in result.zones] == [
            ("101", 60.0, 2, 2)
        ]

    @pytest.mark.asyncio
    async def test_listing_ids_restart_per_call(self):
        html = page('<div class="listing-card"><span class="price">$10</span></div>')
        scraper = make_scraper(StubClient(pages={self.TICKETS_URL: html}))
        first = await scraper.resolve_tickets("55")
        second = await scraper.resolve_tickets("55")
        assert first.listings[0].id == second.listings[0].id == "gen-1"

    @pytest.mark.asyncio
    async def test_failure_returns_empty_result(self):
        result = await make_scraper(StubClient()).resolve_tickets("55", 1)
        assert result == TicketsResult.empty()

    @pytest.mark.asyncio
    async def test_invalid_arguments_make_no_request(self):
        client = StubClient()
        scraper = make_scraper(client)
        assert (await scraper.resolve_tickets("abc")).is_empty
        assert (await scraper.resolve_tickets("55", 0)).is_empty
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_page_without_listings(self):
        client = StubClient(pages={self.TICKETS_URL: page("<p>Sold out</p>")})
        assert (await make_scraper(client).resolve_tickets("55")).is_empty


class _PendingResponse:
    """Stands in for ``session.get(...)``; fails like aiohttp once its session is closed."""

    def __init__(self, session, status=200, body="", delay=0.0, raw=None):
        self.session = session
        self.status = status
        self.body = body
        self.delay = delay
        self.raw = raw

    async def __aenter__(self):
        await asyncio.sleep(self.delay)
        if self.session.closed:
            raise aiohttp.ClientConnectionError("Connector is closed.")
        response = MagicMock()
        response.status = self.status
        response.headers = {"Content-Type": "text/html; charset=utf-8"}
        if self.raw is not None:
            response.text = AsyncMock(side_effect=lambda: self.raw.decode("utf-8"))
        else:
            response.text = AsyncMock(return_value=self.body)
        return response

    async def __aexit__(self, exc_type, exc, tb):
        return False


def routed_get(routes):
    """Replacement for ``aiohttp.ClientSession.get`` serving ``routes`` by URL."""
    def get(session, url, params=None, headers=None):
        route = routes.get(url, {"status": 404})
        return _PendingResponse(session, **route)
    return get


class TestOverAiohttpClient:

    @pytest.fixture
    def scraper(self):
        return VividSeatsScraper(
            settings=ScraperSettings(base_url=BASE),
            id_generator_factory=SequenceListingIdGenerator,
        )

    @pytest.mark.asyncio
    async def test_overlapping_operations_on_one_scraper(self, scraper):
        tickets = {"@type": "Event", "offers": [
            {"price": 40, "availability": "InStock", "areaServed": "Floor"},
        ]}
        routes = {
            BASE: {"body": page(*[ld_script(event_block(str(i))) for i in range(3)])},
            f"{BASE}/production/1/tickets": {"body": page(ld_script(tickets)), "delay": 0.05},
        }
        with patch.object(aiohttp.ClientSession, 'get', new=routed_get(routes)):
            events, result = await asyncio.gather(
                scraper.collect_events(5),
                scraper.resolve_tickets("1", 1),
            )

        assert [e.production_id for e in events] == ["0", "1", "2"]
        assert [(l.zone, l.price) for l in result.listings] == [("Floor", 40.0)]
        assert scraper.client.session is None

    @pytest.mark.asyncio
    async def test_undecodable_api_body_falls_back_to_html(self, scraper):
        routes = {
            f"{BASE}/api/production/7": {"raw": b'{"name": "\xff\xfe"}'},
            f"{BASE}/production/7": {"body": page(ld_script(event_block("7", name="Wicked")))},
        }
        with patch.object(aiohttp.ClientSession, 'get', new=routed_get(routes)):
            result = await scraper.resolve_production("7")

        assert isinstance(result, ProductionRecord)
        assert result.name == "Wicked"
