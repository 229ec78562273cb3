from .scraping_exceptions import (
    ScrapingException,
    NetworkException,
    TimeoutException,
    ParseException,
    StructuredDataException,
    AggregationError,
    ConfigurationException
)

__all__ = [
    'ScrapingException',
    'NetworkException',
    'TimeoutException',
    'ParseException',
    'StructuredDataException',
    'AggregationError',
    'ConfigurationException'
]
