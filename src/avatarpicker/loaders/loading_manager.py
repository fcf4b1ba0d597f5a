"""Counts outstanding fetches and reports progress on the event bus."""

import logging
from typing import Any, Awaitable, Optional

from avatarpicker.core.events import EventBus, EventType

logger = logging.getLogger(__name__)


class LoadingManager:
    """Tracks every fetch issued through it, like a renderer loading manager.

    items_total grows as loads are started and items_loaded as they settle
    (successfully or not), so progress is always items_loaded/items_total.
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self.items_loaded = 0
        self.items_total = 0
        self.failed_urls: list[str] = []

    @property
    def progress(self) -> float:
        if self.items_total == 0:
            return 1.0
        return self.items_loaded / self.items_total

    def _publish(self, event_type: EventType, **data: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, **data)

    async def track(self, url: str, load: Awaitable) -> Any:
        """Await *load*, counting it and reporting completion or failure."""
        if self.items_loaded == self.items_total:
            self._publish(
                EventType.LOADING_STARTED, url=url,
                items_loaded=self.items_loaded, items_total=self.items_total + 1,
            )
        self.items_total += 1
        try:
            result = await load
        except Exception as e:
            self.failed_urls.append(url)
            logger.error("There was an error loading %s: %s", url, e)
            self._publish(EventType.LOAD_FAILED, url=url, error=e)
            raise
        finally:
            self.items_loaded += 1
        logger.debug("Loaded %s (%d of %d)", url, self.items_loaded, self.items_total)
        self._publish(
            EventType.LOADING_PROGRESS, url=url,
            items_loaded=self.items_loaded, items_total=self.items_total,
        )
        return result
