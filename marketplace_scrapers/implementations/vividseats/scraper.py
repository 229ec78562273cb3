from typing import Any, Callable, Dict, List, Optional, Union

from .extractor import DomCardExtractor, JsonLdExtractor, run_strategies
from .processor import VividSeatsProcessor
from ...base import BaseScraper
from ...config.settings import ScraperSettings
from ...core.data_schemas import EventRecord, ProductionRecord, TicketsResult
from ...core.id_generator import ListingIdGenerator, create_listing_id_generator, is_valid_production_id
from ...core.request_client import HttpRequestClient
from ...core.resolution import ResolutionChain, ResolutionStrategy

ProductionPayload = Union[Dict[str, Any], ProductionRecord]


class VividSeatsScraper(BaseScraper):
    """
    Collectors and resolvers for the VividSeats marketplace.

    Every public coroutine returns plain data or an empty sentinel ([], None,
    ``TicketsResult.empty()``); fetch, parse and extraction failures are
    logged and absorbed here.
    """

    def __init__(self, settings: Optional[ScraperSettings] = None,
                 client: Optional[HttpRequestClient] = None,
                 id_generator_factory: Optional[Callable[[], ListingIdGenerator]] = None):
        super().__init__(settings, client)
        self.dom_extractor = DomCardExtractor(self.settings.base_url)
        self.processor = VividSeatsProcessor()
        self.id_generator_factory = id_generator_factory or (
            lambda: create_listing_id_generator(self.settings.listing_id_strategy)
        )
        self.production_chain = ResolutionChain([
            ResolutionStrategy("json_api", self._production_from_api),
            ResolutionStrategy("html_json_ld", self._production_from_html),
        ], logger=self.logger)

    @property
    def name(self) -> str:
        return "vividseats_scraper_v1"

    # Home feed

    async def collect_events(self, limit: Optional[int] = None) -> List[EventRecord]:
        limit = self.settings.default_limit if limit is None else limit
        return await self._guarded("collect_events", self._collect_events(limit), default=[])

    async def _collect_events(self, limit: int) -> List[EventRecord]:
        url = self.url_for()
        document = await self.fetch_document(url)
        json_ld = JsonLdExtractor(url)

        records = run_strategies(
            document,
            [json_ld.events, self.dom_extractor.events],
            threshold=self.settings.event_fallback_threshold
        )
        events = self.processor.finalize_events(records, limit)
        self.logger.info(f"Collected {len(events)} events from {url}")
        return events

    # Search

    async def collect_search(self, query: Optional[str], limit: Optional[int] = None) -> List[EventRecord]:
        if not query or not str(query).strip():
            return []
        limit = self.settings.default_limit if limit is None else limit
        return await self._guarded("collect_search", self._collect_search(str(query).strip(), limit), default=[])

    async def _collect_search(self, query: str, limit: int) -> List[EventRecord]:
        url = self.url_for("search")
        document = await self.fetch_document(url, params={"searchTerm": query})
        json_ld = JsonLdExtractor(url)

        records = run_strategies(
            document,
            [json_ld.search_events, self.dom_extractor.search_results],
            threshold=1
        )
        events = self.processor.finalize_events(records, limit)
        self.logger.info(f"Search '{query}' matched {len(events)} events")
        return events

    # Production

    async def resolve_production(self, production_id: Any) -> Optional[ProductionPayload]:
        production_id = str(production_id).strip() if production_id is not None else ""
        if not is_valid_production_id(production_id):
            self.logger.warning(f"Invalid production ID: {production_id!r}")
            return None
        return await self._guarded("resolve_production", self._resolve_production(production_id), default=None)

    async def _resolve_production(self, production_id: str) -> Optional[ProductionPayload]:
        outcome = await self.production_chain.resolve(production_id)
        if not outcome.resolved:
            self.logger.info(f"Production {production_id} not found: {'; '.join(outcome.failures or [])}")
            return None
        return outcome.value

    async def _production_from_api(self, production_id: str) -> Optional[Dict[str, Any]]:
        # Upstream payload is returned as-is, without normalization
        return await self.client.get_json(self.url_for(f"api/production/{production_id}"))

    async def _production_from_html(self, production_id: str) -> Optional[ProductionRecord]:
        url = self.url_for(f"production/{production_id}")
        document = await self.fetch_document(url)
        return JsonLdExtractor(url).production(document, production_id)

    # Tickets

    async def resolve_tickets(self, production_id: Any, quantity: int = 1) -> TicketsResult:
        production_id = str(production_id).strip() if production_id is not None else ""
        if not is_valid_production_id(production_id):
            self.logger.warning(f"Invalid production ID: {production_id!r}")
            return TicketsResult.empty()
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            self.logger.warning(f"Invalid ticket quantity: {quantity!r}")
            return TicketsResult.empty()
        return await self._guarded(
            "resolve_tickets", self._resolve_tickets(production_id, quantity), default=TicketsResult.empty()
        )

    async def _resolve_tickets(self, production_id: str, quantity: int) -> TicketsResult:
        url = self.url_for(f"production/{production_id}/tickets")
        document = await self.fetch_document(url, params={"quantity": quantity})
        json_ld = JsonLdExtractor(url)
        id_generator = self.id_generator_factory()

        listings = run_strategies(
            document,
            [
                lambda doc: json_ld.listings(doc, quantity, id_generator),
                lambda doc: self.dom_extractor.listings(doc, quantity, id_generator),
            ],
            threshold=1
        )
        return self.processor.build_tickets_result(listings)


async def collect_events(limit: Optional[int] = None) -> List[EventRecord]:
    return await VividSeatsScraper().collect_events(limit)


async def collect_search(query: Optional[str], limit: Optional[int] = None) -> List[EventRecord]:
    return await VividSeatsScraper().collect_search(query, limit)


async def resolve_production(production_id: Any) -> Optional[ProductionPayload]:
    return await VividSeatsScraper().resolve_production(production_id)


async def resolve_tickets(production_id: Any, quantity: int = 1) -> TicketsResult:
    return await VividSeatsScraper().resolve_tickets(production_id, quantity)
