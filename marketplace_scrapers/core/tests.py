"""
Tests for core identity, deduplication, resolution and HTTP helpers
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from .data_schemas import EventRecord, TicketListing, TicketsResult
from .deduplication import dedupe, dedupe_events, dedupe_listings
from .id_generator import (
    SequenceListingIdGenerator, UuidListingIdGenerator, create_listing_id_generator,
    extract_listing_id, extract_marker_id, extract_performer_id, extract_production_id,
    is_valid_production_id
)
from .request_client import HttpRequestClient, RequestConfig
from .resolution import ResolutionChain, ResolutionStrategy
from ..exceptions import NetworkException, ParseException, TimeoutException


def _event(production_id, name="Show"):
    return EventRecord(production_id=production_id, name=name)


def _listing(zone, section, price, listing_id="x"):
    return TicketListing(id=listing_id, zone=zone, section=section, quantity=1, price=price)


class TestIdentityExtraction:

    def test_extract_production_id(self):
        url = "https://www.vividseats.com/shucked-tickets-fort-worth-bass-performance-hall-7-31-2025--theater-musical/production/4855476"
        assert extract_production_id(url) == "4855476"

    def test_extract_listing_and_performer_ids(self):
        assert extract_listing_id("https://www.vividseats.com/listing/991?q=2") == "991"
        assert extract_performer_id("/hamilton-tickets--theater/performer/123") == "123"

    def test_missing_marker_or_digits_yields_none(self):
        assert extract_production_id("https://www.vividseats.com/invalid-url") is None
        assert extract_production_id("https://www.vividseats.com/production/abc") is None
        assert extract_production_id(None) is None

    def test_marker_is_matched_literally(self):
        assert extract_marker_id("/a.b/12", "a.b") == "12"
        assert extract_marker_id("/axb/12", "a.b") is None

    def test_is_valid_production_id(self):
        assert is_valid_production_id("4855476")
        assert not is_valid_production_id("48a")
        assert not is_valid_production_id("")
        assert not is_valid_production_id(None)


class TestListingIdGenerators:

    def test_sequence_is_deterministic_per_instance(self):
        first = SequenceListingIdGenerator()
        assert [first.next_id(), first.next_id()] == ["gen-1", "gen-2"]
        assert SequenceListingIdGenerator().next_id() == "gen-1"

    def test_uuid_ids_are_unique(self):
        generator = UuidListingIdGenerator()
        assert generator.next_id() != generator.next_id()

    def test_factory(self):
        assert isinstance(create_listing_id_generator("uuid"), UuidListingIdGenerator)
        assert isinstance(create_listing_id_generator("sequence"), SequenceListingIdGenerator)


class TestDeduplication:

    def test_first_seen_wins_in_order(self):
        records = [_event("1", "a"), _event("2", "b"), _event("1", "c"), _event("3", "d")]
        assert [r.name for r in dedupe_events(records)] == ["a", "b", "d"]

    def test_records_without_identity_are_dropped(self):
        records = [_event(None), _event("7"), _event("")]
        result = dedupe_events(records)
        assert [r.production_id for r in result] == ["7"]

    def test_idempotent(self):
        records = [_event("1"), _event("1"), _event(None), _event("2")]
        once = dedupe_events(records)
        assert dedupe_events(once) == once

    def test_listing_key_is_zone_section_price(self):
        listings = [
            _listing("A", "101", 100.0, "1"),
            _listing("A", "101", 100.0, "2"),
            _listing("A", "102", 100.0, "3"),
            _listing("B", "101", 100.0, "4"),
        ]
        assert [l.id for l in dedupe_listings(listings)] == ["1", "3", "4"]

    def test_generic_key(self):
        assert dedupe([1, 2, 3, 4], key=lambda n: n % 2) == [1, 2]


class TestTicketsResult:

    def test_empty_sentinel(self):
        result = TicketsResult.empty()
        assert result.is_empty
        assert result.to_dict() == {"listings": [], "zones": []}


class TestResolutionChain:

    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self):
        second = AsyncMock(return_value={"id": 2})
        chain = ResolutionChain([
            ResolutionStrategy("first", AsyncMock(return_value={"id": 1})),
            ResolutionStrategy("second", second),
        ])
        outcome = await chain.resolve("1")
        assert outcome.value == {"id": 1}
        assert outcome.strategy == "first"
        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_falls_through_to_next(self):
        chain = ResolutionChain([
            ResolutionStrategy("api", AsyncMock(side_effect=NetworkException("boom"))),
            ResolutionStrategy("empty", AsyncMock(return_value=None)),
            ResolutionStrategy("html", AsyncMock(return_value="ok")),
        ])
        outcome = await chain.resolve("1")
        assert outcome.resolved
        assert outcome.value == "ok"
        assert outcome.failures == ["api: boom", "empty: empty result"]

    @pytest.mark.asyncio
    async def test_unresolved(self):
        chain = ResolutionChain([
            ResolutionStrategy("api", AsyncMock(side_effect=ParseException("bad"))),
        ])
        outcome = await chain.resolve("1")
        assert not outcome.resolved
        assert outcome.value is None

    def test_requires_strategies(self):
        with pytest.raises(ValueError):
            ResolutionChain([])


class TestRequestConfig:

    def test_headers(self):
        config = RequestConfig(timeout=15, user_agent="UA", extra_headers={"Accept-Language": "en-US"})
        assert config.headers("application/json") == {
            "User-Agent": "UA", "Accept-Language": "en-US", "Accept": "application/json"
        }

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            RequestConfig(timeout=0)


class TestHttpRequestClient:

    @staticmethod
    def _response(status=200, body=""):
        response = MagicMock()
        response.status = status
        response.text = AsyncMock(return_value=body)
        response.headers = {"Content-Type": "text/html"}
        return response

    @pytest.mark.asyncio
    async def test_get_text_success(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = self._response(body="<html></html>")
            client = HttpRequestClient(RequestConfig(timeout=15, user_agent="UA"))
            body = await client.get_text("https://www.vividseats.com", params={"a": 1})

        assert body == "<html></html>"
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"a": 1}
        assert kwargs["headers"]["User-Agent"] == "UA"
        assert client.session is None

    @pytest.mark.asyncio
    async def test_non_2xx_is_network_failure(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = self._response(status=404)
            client = HttpRequestClient()
            with pytest.raises(NetworkException) as exc_info:
                await client.get_text("https://www.vividseats.com/production/1")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_timeout_is_timeout_exception(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.side_effect = asyncio.TimeoutError()
            client = HttpRequestClient()
            with pytest.raises(TimeoutException):
                await client.get_text("https://www.vividseats.com")

    @pytest.mark.asyncio
    async def test_get_json(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = self._response(body='{"id": 5}')
            client = HttpRequestClient()
            payload = await client.get_json("https://www.vividseats.com/api/production/5")

        assert payload == {"id": 5}
        _, kwargs = mock_get.call_args
        assert kwargs["headers"]["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_get_json_invalid_payload(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = self._response(body="<html>")
            client = HttpRequestClient()
            with pytest.raises(ParseException):
                await client.get_json("https://www.vividseats.com/api/production/5")

    @pytest.mark.asyncio
    async def test_undecodable_body_is_parse_failure(self):
        response = self._response()
        response.text = AsyncMock(side_effect=UnicodeDecodeError('utf-8', b'\xff\xfe', 0, 1, 'invalid start byte'))
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = response
            client = HttpRequestClient()
            with pytest.raises(ParseException):
                await client.get_json("https://www.vividseats.com/api/production/7")

    @pytest.mark.asyncio
    async def test_overlapping_calls_use_separate_sessions(self):
        sessions = []

        class _Pending:
            def __init__(self, session, delay):
                self.session = session
                self.delay = delay

            async def __aenter__(self):
                await asyncio.sleep(self.delay)
                if self.session.closed:
                    raise aiohttp.ClientConnectionError("Connector is closed.")
                return TestHttpRequestClient._response(body="ok")

            async def __aexit__(self, exc_type, exc, tb):
                return False

        def fake_get(session, url, params=None, headers=None):
            sessions.append(session)
            return _Pending(session, 0.05 if url.endswith("slow") else 0)

        client = HttpRequestClient()
        with patch.object(aiohttp.ClientSession, 'get', new=fake_get):
            bodies = await asyncio.gather(
                client.get_text("https://www.vividseats.com/fast"),
                client.get_text("https://www.vividseats.com/slow"),
            )

        assert bodies == ["ok", "ok"]
        assert sessions[0] is not sessions[1]
        assert client.session is None

    @pytest.mark.asyncio
    async def test_explicit_context_shares_one_session(self):
        with patch('aiohttp.ClientSession.get') as mock_get:
            mock_get.return_value.__aenter__.return_value = self._response(body="ok")
            async with HttpRequestClient() as client:
                shared = client.session
                await client.get_text("https://www.vividseats.com/a")
                assert client.session is shared
            assert client.session is None
            assert shared.closed

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        with pytest.raises(NetworkException):
            await HttpRequestClient().get_text("not-a-url")
