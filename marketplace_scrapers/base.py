import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Optional, TypeVar

from bs4 import BeautifulSoup

from .config.settings import ScraperSettings
from .core.request_client import HttpRequestClient, RequestConfig
from .utils.common_extractors import parse_document
from .exceptions.scraping_exceptions import (
    ScrapingException, NetworkException, ParseException, TimeoutException
)

T = TypeVar('T')


class BaseScraper(ABC):
    """
    Base class for marketplace scrapers.

    Public operations never raise: they run through ``_guarded`` which logs
    the failure and hands back the operation's empty sentinel.
    """

    def __init__(self, settings: Optional[ScraperSettings] = None,
                 client: Optional[HttpRequestClient] = None):
        self.settings = settings or ScraperSettings()
        self.client = client or HttpRequestClient(RequestConfig(
            timeout=self.settings.timeout_seconds,
            user_agent=self.settings.user_agent
        ))
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of the scraper"""
        pass

    def url_for(self, path: str = "") -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}" if path else self.settings.base_url

    async def fetch_document(self, url: str, params: Optional[dict] = None) -> BeautifulSoup:
        html = await self.client.get_text(url, params=params)
        return parse_document(html)

    async def _guarded(self, operation: str, work: Awaitable[T], default: Any) -> T:
        try:
            return await work
        except ScrapingException as e:
            self.logger.error(f"{operation} failed ({self._error_category(e)}): "
                              f"{e.message if e.message else 'No error message'}")
            return default
        except Exception as e:
            error_msg = str(e).strip() if str(e).strip() else "Unknown error occurred"
            self.logger.exception(f"Unexpected error in {operation}: {error_msg}")
            return default

    @staticmethod
    def _error_category(error: ScrapingException) -> str:
        if isinstance(error, TimeoutException):
            return "timeout"
        if isinstance(error, NetworkException):
            return "network"
        if isinstance(error, ParseException):
            return "parsing"
        return "unknown"
