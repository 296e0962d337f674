from django.apps import AppConfig


class StatsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.stats"
    label = "stats"

    def ready(self) -> None:
        from modules.customers.events import (
            CustomerCreated,
            CustomerDeleted,
            CustomerUpdated,
        )
        from modules.orders.events import OrderCreated, OrderDeleted, OrderUpdated
        from modules.stats.handlers import stats_invalidation_handler
        from shared.infrastructure.bus import event_bus

        for event_class in (
            OrderCreated,
            OrderUpdated,
            OrderDeleted,
            CustomerCreated,
            CustomerUpdated,
            CustomerDeleted,
        ):
            event_bus.subscribe(event_class, stats_invalidation_handler)
