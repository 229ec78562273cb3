"""
Tests for the vivid-scraper command
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from .vivid import build_parser, main
from ..core.data_schemas import EventRecord, ProductionRecord, TicketListing, TicketsResult, ZoneSummary


@pytest.fixture
def scraper():
    mock = MagicMock()
    mock.collect_events = AsyncMock(return_value=[
        EventRecord("2", "Later", locale_date="2025-09-01T20:00:00"),
        EventRecord("1", "Sooner", locale_date="2025-08-01T20:00:00"),
    ])
    mock.collect_search = AsyncMock(return_value=[EventRecord("9", "Hamilton")])
    mock.resolve_production = AsyncMock(return_value=None)
    mock.resolve_tickets = AsyncMock(return_value=TicketsResult(
        listings=(TicketListing("gen-1", "Floor", "A", quantity=2, price=99.0),),
        zones=(ZoneSummary("Floor", 99.0, 2, 1),),
    ))
    return mock


def _run(argv, scraper, capsys):
    exit_code = main(argv, scraper=scraper)
    return exit_code, json.loads(capsys.readouterr().out)


class TestParser:

    def test_defaults(self):
        options = build_parser().parse_args(['tickets', '4855476'])
        assert options.quantity == 1
        assert options.production_id == '4855476'

    @pytest.mark.parametrize("argv", [
        ['production', 'abc'],
        ['tickets', '12x'],
        ['tickets', '1', '--quantity', '0'],
        ['events', '--limit', 'many'],
        ['search', '   '],
    ])
    def test_invalid_arguments_exit_with_usage_error(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)
        assert exc_info.value.code == 2


class TestMain:

    def test_events_sorted_by_date(self, scraper, capsys):
        exit_code, payload = _run(['events', '--limit', '5'], scraper, capsys)

        assert exit_code == 0
        assert [event['name'] for event in payload['events']] == ['Sooner', 'Later']
        scraper.collect_events.assert_awaited_once_with(5)

    def test_events_unsorted(self, scraper, capsys):
        _, payload = _run(['events', '--sort', 'none'], scraper, capsys)
        assert [event['productionId'] for event in payload['events']] == ['2', '1']

    def test_search_strips_query(self, scraper, capsys):
        _, payload = _run(['search', ' hamilton '], scraper, capsys)
        scraper.collect_search.assert_awaited_once_with('hamilton', 12)
        assert payload['events'][0]['id'] == '9'

    def test_production_not_found(self, scraper, capsys):
        exit_code, payload = _run(['production', '4855476'], scraper, capsys)
        assert exit_code == 1
        assert payload == {"message": "Production not found"}

    def test_production_record(self, scraper, capsys):
        scraper.resolve_production.return_value = ProductionRecord(id="7", name="Wicked")
        exit_code, payload = _run(['production', '7'], scraper, capsys)
        assert exit_code == 0
        assert payload['name'] == 'Wicked'
        assert payload['performers'] == []

    def test_production_api_payload_passes_through(self, scraper, capsys):
        scraper.resolve_production.return_value = {"id": 7, "custom": True}
        _, payload = _run(['production', '7'], scraper, capsys)
        assert payload == {"id": 7, "custom": True}

    def test_tickets(self, scraper, capsys):
        exit_code, payload = _run(['tickets', '55', '--quantity', '2'], scraper, capsys)

        assert exit_code == 0
        scraper.resolve_tickets.assert_awaited_once_with('55', 2)
        assert payload['zones'] == [
            {"zone": "Floor", "lowestPrice": 99.0, "totalTickets": 2, "totalListings": 1}
        ]
        assert payload['listings'][0]['id'] == 'gen-1'
