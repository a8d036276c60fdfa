"""In-memory event bus implementation."""

import logging
from collections import defaultdict
from collections.abc import Callable

from vakit_period.domain.events import DomainEvent
from vakit_period.services.ports import EventBusPort

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class InMemoryEventBus(EventBusPort):
    """
    Basit in-memory event bus.

    Bir handler'ın hatası diğer handler'ları etkilemez.
    """

    def __init__(self) -> None:
        """Initialize event bus."""
        self._handlers: dict[type[DomainEvent], list[Handler]] = defaultdict(list)

    def publish(self, event: DomainEvent) -> None:
        """Event yayınla (alt sınıf abonelerine de iletilir)."""
        handlers = [
            handler
            for event_type, registered in list(self._handlers.items())
            if isinstance(event, event_type)
            for handler in registered
        ]

        logger.debug(f"Event yayınlandı: {type(event).__name__} ({len(handlers)} handler)")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler hatası ({type(event).__name__}): {e}")

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Event tipine abone ol."""
        self._handlers[event_type].append(handler)
        logger.debug(f"Event aboneliği: {event_type.__name__}")

    def unsubscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Event aboneliğini iptal et."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)
            logger.debug(f"Event aboneliği iptal: {event_type.__name__}")

    def clear_all(self) -> None:
        """Tüm abonelikleri temizle."""
        self._handlers.clear()
