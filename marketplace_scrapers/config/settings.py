import logging.config
import os
from dataclasses import dataclass

from ..exceptions import ConfigurationException


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return cast(default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationException(f"Invalid scraper environment: {name}={raw!r}",
                                     details=f"Expected {cast.__name__}")


def env_float(name: str, default: float) -> float:
    return _env_number(name, default, float)


def env_int(name: str, default: int) -> int:
    return _env_number(name, default, int)


VIVID_BASE_URL = os.environ.get('VIVID_BASE_URL', 'https://www.vividseats.com').rstrip('/')

REQUEST_TIMEOUT_SECONDS = env_float('SCRAPER_TIMEOUT_SECONDS', 15)

USER_AGENT = os.environ.get(
    'SCRAPER_USER_AGENT',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36'
)

# Home feed falls back to DOM scanning below this many structured records
EVENT_FALLBACK_THRESHOLD = env_int('EVENT_FALLBACK_THRESHOLD', 3)

DEFAULT_EVENT_LIMIT = env_int('DEFAULT_EVENT_LIMIT', 12)

# "sequence" or "uuid"
LISTING_ID_STRATEGY = os.environ.get('LISTING_ID_STRATEGY', 'sequence').lower()

LOG_LEVEL = os.environ.get('SCRAPER_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(levelname)s %(asctime)s %(module)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'marketplace_scrapers': {
            'handlers': ['console'],
            'level': 'DEBUG' if LOG_LEVEL == 'DEBUG' else LOG_LEVEL,
            'propagate': False,
        },
    },
}


def configure_logging(config: dict = None) -> None:
    """Apply the logging dictConfig. Called by entry points, never on import."""
    logging.config.dictConfig(config or LOGGING)


@dataclass(frozen=True)
class ScraperSettings:
    """Runtime settings handed to a scraper instance."""
    base_url: str = VIVID_BASE_URL
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    user_agent: str = USER_AGENT
    event_fallback_threshold: int = EVENT_FALLBACK_THRESHOLD
    default_limit: int = DEFAULT_EVENT_LIMIT
    listing_id_strategy: str = LISTING_ID_STRATEGY

    def __post_init__(self):
        if not self.base_url.startswith(('http://', 'https://')):
            raise ConfigurationException(f"Invalid base URL: {self.base_url}")
        if self.timeout_seconds <= 0:
            raise ConfigurationException("Timeout must be positive")
        if self.event_fallback_threshold < 0:
            raise ConfigurationException("Fallback threshold cannot be negative")
        if self.listing_id_strategy not in ('sequence', 'uuid'):
            raise ConfigurationException(
                f"Unknown listing id strategy: {self.listing_id_strategy}",
                details="Expected 'sequence' or 'uuid'"
            )

    @classmethod
    def from_env(cls) -> 'ScraperSettings':
        """Re-read the environment, useful when variables change after import."""
        return cls(
            base_url=os.environ.get('VIVID_BASE_URL', 'https://www.vividseats.com').rstrip('/'),
            timeout_seconds=env_float('SCRAPER_TIMEOUT_SECONDS', 15),
            user_agent=os.environ.get('SCRAPER_USER_AGENT', USER_AGENT),
            event_fallback_threshold=env_int('EVENT_FALLBACK_THRESHOLD', 3),
            default_limit=env_int('DEFAULT_EVENT_LIMIT', 12),
            listing_id_strategy=os.environ.get('LISTING_ID_STRATEGY', 'sequence').lower(),
        )
