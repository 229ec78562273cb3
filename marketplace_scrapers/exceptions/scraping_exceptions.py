from typing import Optional


class ScrapingException(Exception):
    def __init__(self, message: str, details: Optional[str] = None, fatal: bool = False):
        super().__init__(message)
        self.message = message
        self.details = details
        self.fatal = fatal


class NetworkException(ScrapingException):
    def __init__(self, message: str, details: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, details, fatal=False)
        self.status_code = status_code


class TimeoutException(NetworkException):
    def __init__(self, message: str = "Operation timed out",
                 details: Optional[str] = None):
        super().__init__(message, details)


class ParseException(ScrapingException):
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, details, fatal=True)


class StructuredDataException(ParseException):
    def __init__(self, page_url: str, details: Optional[str] = None):
        message = f"Malformed structured data block on page '{page_url}'"
        super().__init__(message, details)
        self.page_url = page_url


class AggregationError(ParseException):
    def __init__(self, zone: str, details: Optional[str] = None):
        message = f"Cannot aggregate zone '{zone}'"
        super().__init__(message, details)
        self.zone = zone


class ConfigurationException(ScrapingException):
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, details, fatal=True)
