"""Cache invalidation on order and customer mutations."""

from __future__ import annotations

from modules.stats import cache as stats_cache
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent


class StatsInvalidationHandler(IEventHandler[DomainEvent]):
    def handle(self, event: DomainEvent) -> None:
        stats_cache.invalidate(event.customer_id)


stats_invalidation_handler = StatsInvalidationHandler()
