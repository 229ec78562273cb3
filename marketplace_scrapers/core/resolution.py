"""
Ordered resolution strategies with first-success short-circuit.

Each strategy either returns a result, returns an empty value (a miss that
lets the next strategy run), or raises a ScrapingException. Failures of
earlier strategies are expected and only logged.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..exceptions.scraping_exceptions import ScrapingException


@dataclass(frozen=True)
class ResolutionStrategy:
    name: str
    resolve: Callable[..., Awaitable[Any]]


@dataclass
class ResolutionOutcome:
    value: Any = None
    strategy: Optional[str] = None
    failures: Optional[List[str]] = None

    @property
    def resolved(self) -> bool:
        return self.strategy is not None


class ResolutionChain:
    """Runs strategies in declared order until one yields a truthy value."""

    def __init__(self, strategies: Sequence[ResolutionStrategy],
                 logger: Optional[logging.Logger] = None):
        if not strategies:
            raise ValueError("At least one resolution strategy is required")
        self.strategies = list(strategies)
        self.logger = logger or logging.getLogger(f"{__name__}.ResolutionChain")

    async def resolve(self, *args, **kwargs) -> ResolutionOutcome:
        failures: List[str] = []
        for strategy in self.strategies:
            try:
                value = await strategy.resolve(*args, **kwargs)
            except ScrapingException as e:
                self.logger.warning(f"Resolution strategy '{strategy.name}' failed: {e.message}")
                failures.append(f"{strategy.name}: {e.message}")
                continue

            if value:
                self.logger.debug(f"Resolved via '{strategy.name}'")
                return ResolutionOutcome(value=value, strategy=strategy.name, failures=failures)

            self.logger.debug(f"Resolution strategy '{strategy.name}' returned nothing")
            failures.append(f"{strategy.name}: empty result")

        return ResolutionOutcome(value=None, strategy=None, failures=failures)
